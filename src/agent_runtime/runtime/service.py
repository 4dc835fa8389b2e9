"""AgentRuntime: loads agent bundles and exposes their tools and dialogues.

The runtime is the entry point used by the host conversation system:

- ``load`` runs the three component loaders for one bundle and caches the
  result. At most one load runs per bundle directory at any time.
- ``collect_tools`` builds the aggregated tool set for the primary model.
- ``attach`` hands a live conversation over to a bundle's dialogue handler.
"""

import asyncio
import dataclasses
import logging
import weakref
from pathlib import Path
from typing import Any, AsyncIterator, Iterable

from agent_runtime.runtime.aggregator import ToolAggregator
from agent_runtime.runtime.cache import BundleCache
from agent_runtime.runtime.dialogue import (
    AIModelService,
    ChatMessage,
    DialogueSession,
    DialogueVariants,
)
from agent_runtime.runtime.errors import (
    DialogueUnsupportedError,
    InvalidBundleError,
    LoadFailure,
    NotFoundError,
)
from agent_runtime.runtime.loaders import DescriptorLoader, DialogueLoader, ToolLoader
from agent_runtime.runtime.resolver import BundleRegistry, BundleResolver, find_components
from agent_runtime.runtime.tools import ToolDefinition, ToolSet
from agent_runtime.runtime.types import (
    DESCRIPTOR_FILENAME,
    AgentDescriptor,
    ComponentKind,
    LoadedBundle,
    LoadState,
    RuntimeSnapshot,
)

logger = logging.getLogger(__name__)


class AgentRuntime:
    """Discovery, loading and orchestration of agent bundles.

    Attributes:
        agents_dir: Root directory scanned for bundles
        registry: Result of the last directory scan
        resolver: Maps identifiers to bundle directories
        cache: Loaded bundles keyed by resolved directory
    """

    def __init__(
        self,
        agents_dir: Path,
        resolver: BundleResolver | None = None,
        descriptor_loader: DescriptorLoader | None = None,
        tool_loader: ToolLoader | None = None,
        dialogue_loader: DialogueLoader | None = None,
    ):
        self.agents_dir = agents_dir
        self.registry = BundleRegistry()
        self.resolver = resolver or BundleResolver(agents_dir, registry=self.registry)
        self.descriptor_loader = descriptor_loader or DescriptorLoader()
        self.tool_loader = tool_loader or ToolLoader()
        self.dialogue_loader = dialogue_loader or DialogueLoader()
        self.cache: BundleCache[LoadedBundle] = BundleCache()
        self._in_flight: dict[str, asyncio.Task[LoadedBundle]] = {}
        # Service each dialogue handler was bound to by attach()
        self._bound_services: weakref.WeakKeyDictionary[Any, AIModelService] = (
            weakref.WeakKeyDictionary()
        )

    # --- Discovery ---

    def discover(self) -> list[str]:
        """Scan the agents directory and return the bundle names found."""
        manifests = self.registry.scan(self.agents_dir)
        return [manifest.name for manifest in manifests]

    def resolve_local(self, identifier: str) -> Path:
        """Resolve an identifier to a bundle inside the agents directory.

        Meant for identifiers received from clients: bundles elsewhere on
        the host are reported as not found and never imported.

        Raises:
            NotFoundError: If no bundle inside agents_dir matches
        """
        return self.resolver.resolve(identifier, within=self.agents_dir)

    def _name_holder(self, name: str, directory: Path) -> Path | None:
        """Directory of another cached bundle that already uses this agent name."""
        for bundle in self.cache.values():
            if (
                bundle.directory != directory
                and bundle.descriptor is not None
                and bundle.descriptor.name == name
                and ComponentKind.DESCRIPTOR.value not in bundle.failures
            ):
                return bundle.directory
        return None

    # --- Loading ---

    async def load(self, identifier: str) -> LoadedBundle:
        """Load a bundle, or return the cached result.

        Concurrent calls for the same directory share one load. A caller
        that is cancelled does not cancel the load itself.

        Args:
            identifier: Bundle name or path

        Returns:
            LoadedBundle: The loaded bundle, possibly partially failed

        Raises:
            NotFoundError: If the identifier does not resolve to a bundle
        """
        directory = self.resolver.resolve(identifier)
        key = str(directory)

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.create_task(self._load_bundle(directory))
            self._in_flight[key] = task
            task.add_done_callback(lambda _task: self._in_flight.pop(key, None))
        else:
            logger.debug(f"Waiting for in-flight load of {directory}")

        return await asyncio.shield(task)

    async def _load_bundle(self, directory: Path) -> LoadedBundle:
        logger.info(f"Loading agent bundle {directory}")
        present = {component.kind for component in find_components(directory)}

        descriptor_result, tools_result, dialogues_result = await asyncio.gather(
            self.descriptor_loader.load(directory),
            self.tool_loader.load(directory),
            self.dialogue_loader.load(directory),
            return_exceptions=True,
        )

        failures: dict[str, str] = {}
        results: dict[ComponentKind, Any] = {}
        for kind, result in (
            (ComponentKind.DESCRIPTOR, descriptor_result),
            (ComponentKind.TOOL, tools_result),
            (ComponentKind.DIALOGUE, dialogues_result),
        ):
            if isinstance(result, (LoadFailure, InvalidBundleError)):
                logger.warning(f"{kind.value} of {directory} failed to load: {result}")
                failures[kind.value] = str(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                results[kind] = result

        descriptor: AgentDescriptor | None = results.get(ComponentKind.DESCRIPTOR)
        tools: list[ToolDefinition] = results.get(ComponentKind.TOOL) or []
        dialogues: DialogueVariants | None = results.get(ComponentKind.DIALOGUE)

        if dialogues is not None:
            for variant, reason in dialogues.failures.items():
                failures[f"{ComponentKind.DIALOGUE.value}:{variant}"] = reason

        # Agent names are unique per runtime; the first cached bundle keeps it
        if descriptor is not None:
            holder = self._name_holder(descriptor.name, directory)
            if holder is not None:
                error = InvalidBundleError(
                    directory / DESCRIPTOR_FILENAME,
                    f"agent name '{descriptor.name}' is already used by {holder}",
                )
                logger.warning(f"descriptor of {directory} rejected: {error}")
                failures[ComponentKind.DESCRIPTOR.value] = str(error)

        failed_kinds = {kind for kind in present if kind.value in failures}
        if failed_kinds and failed_kinds == present:
            state = LoadState.FAILED
        elif failures:
            state = LoadState.PARTIALLY_FAILED
        else:
            state = LoadState.LOADED

        degraded = bool(
            descriptor is not None and descriptor.support_dialogue and not dialogues
        )
        if degraded:
            logger.warning(
                f"Agent '{descriptor.name}' declares dialogue support "
                f"but no dialogue handler could be loaded from {directory}"
            )

        bundle = LoadedBundle(
            directory=directory,
            state=state,
            descriptor=descriptor,
            tools=tuple(tools),
            dialogues=dialogues or None,
            failures=failures,
            degraded=degraded,
        )
        self.cache.set(directory, bundle)
        logger.info(
            f"Loaded agent bundle {directory}: state={state.value}, "
            f"tools={len(bundle.tools)}, "
            f"dialogues={len(dialogues) if dialogues else 0}"
        )
        return bundle

    async def load_all(self, identifiers: Iterable[str] | None = None) -> list[LoadedBundle]:
        """Load several bundles concurrently.

        Bundles that cannot be resolved or raise unexpectedly are logged
        and left out of the result.

        Args:
            identifiers: Bundles to load; defaults to a fresh scan of agents_dir
        """
        names = list(identifiers) if identifiers is not None else self.discover()
        results = await asyncio.gather(
            *(self.load(name) for name in names), return_exceptions=True
        )

        bundles: list[LoadedBundle] = []
        for name, result in zip(names, results):
            if isinstance(result, NotFoundError):
                logger.warning(f"Agent '{name}' not found: {result}")
            elif isinstance(result, Exception):
                logger.error(f"Failed to load agent '{name}': {result}")
            elif isinstance(result, BaseException):
                raise result
            else:
                bundles.append(result)
        return bundles

    # --- Cache management ---

    def invalidate(self, identifier: str) -> bool:
        """Drop a bundle from the cache so the next load re-imports it.

        Raises:
            NotFoundError: If the identifier does not resolve to a bundle
        """
        directory = self.resolver.resolve(identifier)
        removed = self.cache.invalidate(directory)
        if removed:
            logger.info(f"Invalidated agent bundle {directory}")
        return removed

    def clear(self) -> None:
        self.cache.clear()
        logger.info("Cleared agent runtime cache")

    # --- Queries ---

    def status(self, identifier: str) -> LoadState:
        """Report the load state of a bundle without loading it.

        Raises:
            NotFoundError: If the identifier does not resolve to a bundle
        """
        key = str(self.resolver.resolve(identifier))
        cached = self.cache.get(key)
        if cached is not None:
            return cached.state
        if key in self._in_flight:
            return LoadState.LOADING
        return LoadState.UNLOADED

    async def snapshot(self, identifier: str) -> RuntimeSnapshot:
        bundle = await self.load(identifier)
        return bundle.snapshot()

    def snapshots(self) -> list[RuntimeSnapshot]:
        """Snapshots of every cached bundle."""
        return [bundle.snapshot() for bundle in self.cache.values()]

    async def get_tools(self, identifier: str) -> list[ToolDefinition]:
        bundle = await self.load(identifier)
        return list(bundle.tools)

    async def collect_tools(self, identifiers: Iterable[str] | None = None) -> ToolSet:
        """Aggregate the tools of several bundles.

        Args:
            identifiers: Bundles to include; defaults to a fresh scan of agents_dir

        Raises:
            DuplicateToolNameError: If two bundles expose the same tool name
        """
        names = list(identifiers) if identifiers is not None else self.discover()
        return await ToolAggregator(self.load).collect(names)

    # --- Dialogue attachment ---

    async def attach(
        self,
        identifier: str,
        service: AIModelService,
        variant: str | None = None,
    ) -> DialogueSession:
        """Attach a bundle's dialogue handler to an AI model service.

        The descriptor is advisory: a bundle without one may still attach.
        A handler this runtime already bound to the same service is reused
        as is; the bound service is tracked here, not read off the handler.

        Args:
            identifier: Bundle name or path
            service: AI model service the handler streams from
            variant: Dialogue variant name; defaults to the first in lexical order

        Returns:
            DialogueSession: Session ready to handle messages

        Raises:
            NotFoundError: If the bundle or the requested variant does not exist
            DialogueUnsupportedError: If the bundle cannot provide a dialogue
            AlreadyBoundError: If the handler is bound to a different service
        """
        bundle = await self.load(identifier)
        directory = str(bundle.directory)

        if bundle.descriptor is not None and not bundle.descriptor.support_dialogue:
            raise DialogueUnsupportedError(
                directory, "descriptor does not declare dialogue support"
            )
        if bundle.dialogues is None:
            reason = bundle.failures.get(
                ComponentKind.DIALOGUE.value, "no dialogue handler found"
            )
            raise DialogueUnsupportedError(directory, reason)

        try:
            variant_name, handler = bundle.dialogues.select(variant)
        except KeyError:
            raise NotFoundError(
                f"{identifier}:{variant}",
                f"Dialogue variant '{variant}' not found in {directory}",
            )

        if self._bound_services.get(handler) is not service:
            handler.bind(service)
            self._bound_services[handler] = service

        if bundle.state is LoadState.LOADED and self.cache.get(directory) is bundle:
            self.cache.set(
                directory, dataclasses.replace(bundle, state=LoadState.DIALOGUE_READY)
            )

        logger.info(f"Attached dialogue '{variant_name}' of {directory}")
        return DialogueSession(directory=directory, variant=variant_name, handler=handler)

    async def start_dialogue(
        self,
        identifier: str,
        messages: list[ChatMessage | dict[str, Any]],
        service: AIModelService,
        variant: str | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Attach and stream a bundle's dialogue response in one call."""
        session = await self.attach(identifier, service, variant=variant)
        async for fragment in session.stream(messages):
            yield fragment
