"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests and responses across all endpoints.
"""

from agent_runtime.models.agents import (
    AgentListResponse,
    AgentSnapshotResponse,
    ContentDeltaEvent,
    DialogueDoneEvent,
    DialogueMessage,
    DialogueRequest,
    ErrorEvent,
    ToolInfo,
    ToolSetResponse,
    ToolsCountResponse,
)
from agent_runtime.models.health import HealthResponse

__all__ = [
    "AgentListResponse",
    "AgentSnapshotResponse",
    "ContentDeltaEvent",
    "DialogueDoneEvent",
    "DialogueMessage",
    "DialogueRequest",
    "ErrorEvent",
    "HealthResponse",
    "ToolInfo",
    "ToolSetResponse",
    "ToolsCountResponse",
]
