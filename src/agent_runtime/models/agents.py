"""Pydantic models for the agent runtime API.

This module defines the response schemas for bundle snapshots and tools,
and the request and event schemas for streaming agent dialogues.
"""

from pydantic import BaseModel, ConfigDict, Field


class AgentSnapshotResponse(BaseModel):
    """Runtime snapshot of one agent bundle."""

    directory: str = Field(description="Resolved bundle directory")
    name: str | None = Field(default=None, description="Descriptor name, if any")
    support_dialogue: bool | None = Field(
        default=None, description="Descriptor dialogue flag, if any"
    )
    tools_count: int = Field(default=0, description="Number of tools exposed")
    state: str = Field(description="Load state of the bundle")
    degraded: bool = Field(
        default=False,
        description="Dialogue support declared but no dialogue handler loaded",
    )
    failures: dict[str, str] = Field(
        default_factory=dict, description="Failure reason per component"
    )
    dialogue_variants: list[str] = Field(
        default_factory=list, description="Loaded dialogue variants in selection order"
    )


class AgentListResponse(BaseModel):
    """Response body for GET /api/v1/agents."""

    agents: list[AgentSnapshotResponse] = Field(description="Bundle snapshots")


class ToolsCountResponse(BaseModel):
    """Response body for GET /api/v1/agents/tools-count."""

    count: int = Field(description="Number of tools exposed by the bundle")


class ToolInfo(BaseModel):
    """A tool from the aggregated tool set."""

    name: str = Field(description="Tool name")
    description: str = Field(description="Tool description")
    owner: str = Field(description="Directory of the bundle exposing the tool")
    parameters: dict = Field(description="JSON schema of the tool arguments")


class ToolSetResponse(BaseModel):
    """Response body for GET /api/v1/agents/tools."""

    tools: list[ToolInfo] = Field(description="Aggregated tools in stable order")
    count: int = Field(description="Number of tools")


class DialogueMessage(BaseModel):
    """A chat message handed to an agent dialogue."""

    role: str = Field(description="Message role (user, assistant, system)")
    content: str = Field(description="Message content")


class DialogueRequest(BaseModel):
    """Request body for POST /api/v1/agents/{identifier}/dialogue."""

    messages: list[DialogueMessage] = Field(
        min_length=1, description="Conversation so far, oldest first"
    )
    variant: str | None = Field(
        default=None,
        description="Dialogue variant; defaults to the first in lexical order",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "messages": [{"role": "user", "content": "Write a plugin"}],
                    "variant": None,
                }
            ]
        }
    )


class ContentDeltaEvent(BaseModel):
    """SSE event carrying one fragment of dialogue content."""

    content: str
    role: str = "assistant"


class DialogueDoneEvent(BaseModel):
    """SSE event sent after the last fragment."""

    directory: str
    variant: str
    fragments: int


class ErrorEvent(BaseModel):
    """SSE event sent when the dialogue stream fails."""

    code: str
    message: str
    details: dict = Field(default_factory=dict)
