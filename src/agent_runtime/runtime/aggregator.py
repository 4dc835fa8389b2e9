"""Aggregation of bundle tools into a single tool set."""

import logging
from typing import Awaitable, Callable, Iterable

from agent_runtime.runtime.errors import NotFoundError
from agent_runtime.runtime.tools import ToolSet
from agent_runtime.runtime.types import LoadedBundle, LoadState

logger = logging.getLogger(__name__)

BundleLoadFn = Callable[[str], Awaitable[LoadedBundle]]


class ToolAggregator:
    """Builds one ToolSet from the tools of several bundles.

    Bundles that cannot be resolved or failed to load completely are left
    out. A tool name used by two bundles aborts the whole collection,
    because which tool wins would otherwise depend on load order.
    """

    def __init__(self, load: BundleLoadFn):
        """Initialize the aggregator.

        Args:
            load: Coroutine function returning the (cached) bundle for an identifier
        """
        self._load = load

    async def collect(self, identifiers: Iterable[str]) -> ToolSet:
        """Collect the tools of the given bundles.

        Args:
            identifiers: Bundle names or paths, in the order tools should appear

        Returns:
            ToolSet: Union of all bundle tools

        Raises:
            DuplicateToolNameError: If two bundles expose the same tool name
        """
        tool_set = ToolSet()
        seen_directories: set[str] = set()

        for identifier in identifiers:
            try:
                bundle = await self._load(identifier)
            except NotFoundError as e:
                logger.warning(f"Skipping agent '{identifier}': {e}")
                continue

            directory = str(bundle.directory)
            if directory in seen_directories:
                continue
            seen_directories.add(directory)

            if bundle.state is LoadState.FAILED:
                logger.warning(
                    f"Skipping tools of failed agent {directory}: {bundle.failures}"
                )
                continue

            for definition in bundle.tools:
                tool_set.add(definition, owner=directory)

        logger.info(
            f"Collected {len(tool_set)} tools from {len(seen_directories)} agents"
        )
        return tool_set
