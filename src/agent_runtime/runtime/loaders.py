"""Component loaders for agent bundles.

Each loader imports one kind of component file from a bundle directory
and returns the component, or None/empty when the file does not exist.

Component files are plain Python modules. The component is the module's
``default`` attribute, falling back to a conventional name per kind. A
class is instantiated without arguments, anything else is used as is.

Every import executes the file under a new module name. Python's module
cache is never consulted, so dropping an entry from the BundleCache is
enough to make the next load pick up changes on disk.
"""

import importlib.util
import inspect
import itertools
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

from pydantic import ValidationError

from agent_runtime.runtime.dialogue import DialogueVariants
from agent_runtime.runtime.errors import (
    AgentRuntimeError,
    InvalidBundleError,
    LoadFailure,
)
from agent_runtime.runtime.resolver import find_components
from agent_runtime.runtime.tools import ToolDefinition
from agent_runtime.runtime.types import (
    DESCRIPTOR_FILENAME,
    HANDLER_FILENAME,
    AgentDescriptor,
    ComponentKind,
)

logger = logging.getLogger(__name__)

EXPORT_NAMES: dict[ComponentKind, tuple[str, ...]] = {
    ComponentKind.DESCRIPTOR: ("default", "AgentDesc", "Agent"),
    ComponentKind.TOOL: ("default", "AgentHandle"),
    ComponentKind.DIALOGUE: ("default", "DialoguesClass", "Dialogues"),
}

_module_counter = itertools.count(1)


def import_component(path: Path, kind: ComponentKind) -> ModuleType:
    """Execute a component file as a new module.

    Args:
        path: The component file
        kind: Component kind, used for naming and error reporting

    Returns:
        ModuleType: The freshly executed module

    Raises:
        LoadFailure: If the file cannot be imported
    """
    module_name = f"_agent_bundle_{kind.value}_{next(_module_counter)}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise LoadFailure(kind.value, path, ImportError(f"Cannot import {path}"))

    module = importlib.util.module_from_spec(spec)
    # Registered so dataclasses and pydantic can find the defining module
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise LoadFailure(kind.value, path, e) from e

    logger.debug(f"Imported {kind.value} component {path} as {module_name}")
    return module


def default_export(module: ModuleType, kind: ComponentKind, path: Path) -> Any:
    """Get the exported component object of a module.

    Raises:
        InvalidBundleError: If the module exports none of the expected names
    """
    for name in EXPORT_NAMES[kind]:
        if hasattr(module, name):
            return getattr(module, name)
    expected = ", ".join(EXPORT_NAMES[kind])
    raise InvalidBundleError(path, f"no export named one of: {expected}")


def instantiate(export: Any, kind: ComponentKind, path: Path) -> Any:
    """Instantiate class exports; return other exports unchanged.

    Raises:
        LoadFailure: If the constructor raises
    """
    if not inspect.isclass(export):
        return export
    try:
        return export()
    except Exception as e:
        raise LoadFailure(kind.value, path, e) from e


def load_component(path: Path, kind: ComponentKind) -> Any:
    module = import_component(path, kind)
    return instantiate(default_export(module, kind, path), kind, path)


class DescriptorLoader:
    """Loads and validates agent_desc.py."""

    kind = ComponentKind.DESCRIPTOR

    async def load(self, directory: Path) -> AgentDescriptor | None:
        """Load the bundle descriptor.

        Returns:
            AgentDescriptor | None: The descriptor, None if the file is missing

        Raises:
            InvalidBundleError: If the descriptor is malformed
            LoadFailure: If importing the file fails
        """
        path = directory / DESCRIPTOR_FILENAME
        if not path.is_file():
            return None

        obj = load_component(path, self.kind)
        if isinstance(obj, AgentDescriptor):
            return obj

        if isinstance(obj, dict):
            data = dict(obj)
        else:
            data = {
                key: getattr(obj, key)
                for key in ("name", "description", "support_dialogue", "supportDialogue")
                if hasattr(obj, key)
            }
        if "support_dialogue" in data:
            data.pop("supportDialogue", None)

        try:
            descriptor = AgentDescriptor.model_validate(data)
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            )
            raise InvalidBundleError(path, errors) from e

        logger.debug(f"Loaded descriptor '{descriptor.name}' from {path}")
        return descriptor


class ToolLoader:
    """Loads agent_handle.py and collects the tools it produces."""

    kind = ComponentKind.TOOL

    async def load(self, directory: Path) -> list[ToolDefinition]:
        """Load the bundle's tools.

        The handler must provide get_tools() returning an iterable of tools,
        or handle_tool() returning a single tool (or None). Either method may
        be a coroutine function.

        Returns:
            list[ToolDefinition]: Tools in production order, empty if the file is missing

        Raises:
            InvalidBundleError: If the handler or its tools have the wrong shape
            LoadFailure: If importing, instantiating or producing tools fails
        """
        path = directory / HANDLER_FILENAME
        if not path.is_file():
            return []

        handler = load_component(path, self.kind)

        try:
            if callable(getattr(handler, "get_tools", None)):
                produced = handler.get_tools()
                if inspect.isawaitable(produced):
                    produced = await produced
                tools = list(produced or [])
            elif callable(getattr(handler, "handle_tool", None)):
                single = handler.handle_tool()
                if inspect.isawaitable(single):
                    single = await single
                tools = [] if single is None else [single]
            else:
                raise InvalidBundleError(
                    path, "handler has neither get_tools() nor handle_tool()"
                )
        except AgentRuntimeError:
            raise
        except Exception as e:
            raise LoadFailure(self.kind.value, path, e) from e

        seen: set[str] = set()
        for definition in tools:
            if not isinstance(definition, ToolDefinition):
                raise InvalidBundleError(
                    path, f"expected ToolDefinition, got {type(definition).__name__}"
                )
            if definition.name in seen:
                raise InvalidBundleError(
                    path, f"tool name '{definition.name}' produced twice"
                )
            seen.add(definition.name)

        logger.debug(f"Loaded {len(tools)} tools from {path}")
        return tools


class DialogueLoader:
    """Loads the dialogue handlers under dialogues/."""

    kind = ComponentKind.DIALOGUE

    async def load(self, directory: Path) -> DialogueVariants | None:
        """Load every dialogue handler file in lexical filename order.

        A file that fails to load is recorded in the result's failures and
        skipped, as long as at least one other file loads.

        Returns:
            DialogueVariants | None: Loaded handlers, None if there are no dialogue files

        Raises:
            InvalidBundleError: If every file exports a malformed handler
            LoadFailure: If every file fails to import
        """
        paths = [
            component.path
            for component in find_components(directory)
            if component.kind is self.kind
        ]
        if not paths:
            return None

        handlers: dict[str, Any] = {}
        failures: dict[str, str] = {}
        first_error: AgentRuntimeError | None = None

        for path in paths:
            try:
                handler = load_component(path, self.kind)
                if not (
                    callable(getattr(handler, "bind", None))
                    and callable(getattr(handler, "handle", None))
                ):
                    raise InvalidBundleError(
                        path, "dialogue handler needs bind() and handle() methods"
                    )
            except (InvalidBundleError, LoadFailure) as e:
                logger.warning(f"Skipping dialogue variant {path.stem}: {e}")
                failures[path.stem] = str(e)
                first_error = first_error or e
                continue
            handlers[path.stem] = handler

        if not handlers and first_error is not None:
            raise first_error

        logger.debug(f"Loaded {len(handlers)} dialogue variants from {directory}")
        return DialogueVariants(handlers, failures)
