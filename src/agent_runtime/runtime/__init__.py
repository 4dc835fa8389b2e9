"""Agent bundle discovery, loading and orchestration.

This package scans a directory of agent bundles, loads their descriptors,
tools and dialogue handlers, caches the results and exposes the aggregated
tool set and dialogue attachment to the host conversation system.
"""

from agent_runtime.runtime.aggregator import ToolAggregator
from agent_runtime.runtime.cache import BundleCache
from agent_runtime.runtime.dialogue import (
    AIModelService,
    Bound,
    ChatMessage,
    DialogueHandler,
    DialogueSession,
    DialogueVariants,
    Unbound,
)
from agent_runtime.runtime.errors import (
    AgentRuntimeError,
    AlreadyBoundError,
    DialogueUnsupportedError,
    DuplicateToolNameError,
    InvalidBundleError,
    LoadFailure,
    NotFoundError,
    NotInitializedError,
    ToolInputError,
    ToolNotFoundError,
)
from agent_runtime.runtime.loaders import DescriptorLoader, DialogueLoader, ToolLoader
from agent_runtime.runtime.resolver import BundleRegistry, BundleResolver
from agent_runtime.runtime.service import AgentRuntime
from agent_runtime.runtime.tools import ToolDefinition, ToolSet, tool
from agent_runtime.runtime.types import (
    AgentDescriptor,
    BundleComponent,
    BundleManifest,
    ComponentKind,
    LoadedBundle,
    LoadState,
    RuntimeSnapshot,
)

__all__ = [
    # Orchestration
    "AgentRuntime",
    "ToolAggregator",
    "BundleCache",
    "BundleRegistry",
    "BundleResolver",
    # Loaders
    "DescriptorLoader",
    "ToolLoader",
    "DialogueLoader",
    # Bundle authoring
    "DialogueHandler",
    "ToolDefinition",
    "tool",
    # Dialogue protocol
    "AIModelService",
    "Bound",
    "ChatMessage",
    "DialogueSession",
    "DialogueVariants",
    "Unbound",
    # Data types
    "AgentDescriptor",
    "BundleComponent",
    "BundleManifest",
    "ComponentKind",
    "LoadedBundle",
    "LoadState",
    "RuntimeSnapshot",
    "ToolSet",
    # Errors
    "AgentRuntimeError",
    "AlreadyBoundError",
    "DialogueUnsupportedError",
    "DuplicateToolNameError",
    "InvalidBundleError",
    "LoadFailure",
    "NotFoundError",
    "NotInitializedError",
    "ToolInputError",
    "ToolNotFoundError",
]
