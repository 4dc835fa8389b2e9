"""Data types for the agent runtime.

This module defines the bundle file layout conventions, the load state
machine, the descriptor schema and the records the runtime keeps for
each loaded bundle.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

from agent_runtime.runtime.dialogue import DialogueVariants
from agent_runtime.runtime.tools import ToolDefinition

# Bundle layout: <bundle>/agent_desc.py, <bundle>/agent_handle.py,
# <bundle>/dialogues/dialogues*.py
DESCRIPTOR_FILENAME = "agent_desc.py"
HANDLER_FILENAME = "agent_handle.py"
DIALOGUES_DIRNAME = "dialogues"
DIALOGUE_FILE_PATTERN = "dialogues*.py"


class ComponentKind(str, Enum):
    """The three kinds of component a bundle can contain."""

    DESCRIPTOR = "descriptor"
    TOOL = "tool"
    DIALOGUE = "dialogue"


class LoadState(str, Enum):
    """Lifecycle state of a bundle inside the runtime."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    DIALOGUE_READY = "dialogue_ready"
    PARTIALLY_FAILED = "partially_failed"
    FAILED = "failed"


@dataclass(frozen=True)
class BundleComponent:
    """A component file found inside a bundle directory.

    Attributes:
        kind: Which loader handles the file
        path: Absolute path of the file
        variant: Dialogue variant name (file stem) for dialogue components
    """

    kind: ComponentKind
    path: Path
    variant: str | None = None


@dataclass(frozen=True)
class BundleManifest:
    """The components discovered for one bundle during a directory scan."""

    name: str
    directory: Path
    components: tuple[BundleComponent, ...] = ()

    @property
    def kinds(self) -> set[ComponentKind]:
        return {component.kind for component in self.components}


class AgentDescriptor(BaseModel):
    """Validated contents of a bundle's agent_desc.py default export."""

    name: StrictStr = Field(..., min_length=1, description="Unique agent name")
    description: StrictStr = Field(default="", description="Free text description")
    support_dialogue: StrictBool = Field(
        default=False,
        alias="supportDialogue",
        description="Whether the agent ships a dialogue handler",
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


@dataclass(frozen=True)
class RuntimeSnapshot:
    """Read-only view of one loaded bundle.

    Snapshots are never modified. Every load or state transition produces
    a new snapshot.
    """

    directory: str
    name: str | None = None
    support_dialogue: bool | None = None
    tools_count: int = 0
    state: LoadState = LoadState.UNLOADED
    degraded: bool = False
    failures: dict[str, str] = field(default_factory=dict)
    dialogue_variants: tuple[str, ...] = ()


@dataclass(frozen=True)
class LoadedBundle:
    """Everything the runtime loaded for one bundle directory.

    Attributes:
        directory: Resolved bundle directory
        state: Current load state
        descriptor: Parsed descriptor, None if the bundle has no descriptor
        tools: Tool definitions produced by the bundle's handler
        dialogues: Loaded dialogue handlers, None if the bundle has none
        failures: Failure reason per component label
        degraded: The descriptor declares dialogue support but no handler loaded
    """

    directory: Path
    state: LoadState
    descriptor: AgentDescriptor | None = None
    tools: tuple[ToolDefinition, ...] = ()
    dialogues: DialogueVariants | None = None
    failures: dict[str, str] = field(default_factory=dict)
    degraded: bool = False

    @property
    def name(self) -> str | None:
        return self.descriptor.name if self.descriptor else None

    def snapshot(self) -> RuntimeSnapshot:
        return RuntimeSnapshot(
            directory=str(self.directory),
            name=self.name,
            support_dialogue=(
                self.descriptor.support_dialogue if self.descriptor else None
            ),
            tools_count=len(self.tools),
            state=self.state,
            degraded=self.degraded,
            failures=dict(self.failures),
            dialogue_variants=self.dialogues.names() if self.dialogues else (),
        )
