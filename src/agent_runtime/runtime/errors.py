"""Exception hierarchy for the agent runtime.

Every error raised by the runtime derives from AgentRuntimeError. Where a
builtin exception already describes the failure (a missing directory, a
malformed value) the runtime error also subclasses that builtin, so callers
that only know about FileNotFoundError or ValueError keep working.
"""

from pathlib import Path


class AgentRuntimeError(Exception):
    """Base class for all agent runtime errors."""


class NotFoundError(AgentRuntimeError, FileNotFoundError):
    """Raised when an agent identifier does not resolve to a bundle directory."""

    def __init__(self, identifier: str, message: str | None = None):
        self.identifier = identifier
        super().__init__(message or f"Cannot resolve agent bundle: '{identifier}'")


class InvalidBundleError(AgentRuntimeError, ValueError):
    """Raised when a component file exists but does not have the expected shape."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid bundle component {path}: {reason}")


class LoadFailure(AgentRuntimeError):
    """Raised when importing or instantiating a component file throws.

    Attributes:
        component: The component kind that failed ("descriptor", "tool", "dialogue")
        path: The file that was being loaded
        cause: The original exception
    """

    def __init__(self, component: str, path: Path, cause: BaseException):
        self.component = component
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to load {component} from {path}: {cause}")


class DuplicateToolNameError(AgentRuntimeError):
    """Raised when two bundles expose a tool with the same name."""

    def __init__(self, tool_name: str, first_owner: str, second_owner: str):
        self.tool_name = tool_name
        self.owners = (first_owner, second_owner)
        super().__init__(
            f"Tool name '{tool_name}' is exposed by both {first_owner} and {second_owner}"
        )


class NotInitializedError(AgentRuntimeError):
    """Raised when a dialogue handler is used before an AI service was bound."""


class AlreadyBoundError(AgentRuntimeError):
    """Raised when a dialogue handler is bound to an AI service a second time."""


class DialogueUnsupportedError(AgentRuntimeError):
    """Raised when a dialogue is requested from a bundle that cannot provide one."""

    def __init__(self, directory: str, reason: str):
        self.directory = directory
        self.reason = reason
        super().__init__(f"Agent at {directory} does not support dialogue: {reason}")


class ToolNotFoundError(AgentRuntimeError, KeyError):
    """Raised when invoking a tool name that is not part of a tool set."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(tool_name)

    def __str__(self) -> str:
        return f"Tool '{self.tool_name}' not found"


class ToolInputError(AgentRuntimeError, ValueError):
    """Raised when tool arguments do not satisfy the tool's input schema."""

    def __init__(self, tool_name: str, reason: str):
        self.tool_name = tool_name
        super().__init__(f"Invalid arguments for tool '{tool_name}': {reason}")
