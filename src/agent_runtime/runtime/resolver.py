"""Bundle discovery and identifier resolution.

BundleRegistry scans the agents directory once and records the tagged
components of every bundle it finds. BundleResolver turns a logical agent
name or a path into a concrete bundle directory.
"""

import logging
import os
from pathlib import Path

from agent_runtime.runtime.errors import NotFoundError
from agent_runtime.runtime.types import (
    DESCRIPTOR_FILENAME,
    DIALOGUE_FILE_PATTERN,
    DIALOGUES_DIRNAME,
    HANDLER_FILENAME,
    BundleComponent,
    BundleManifest,
    ComponentKind,
)

logger = logging.getLogger(__name__)


def find_components(directory: Path) -> list[BundleComponent]:
    """List the component files present in a bundle directory.

    Dialogue components are returned in lexical filename order.

    Args:
        directory: The candidate bundle directory

    Returns:
        list[BundleComponent]: Components found, empty if none
    """
    components: list[BundleComponent] = []

    descriptor = directory / DESCRIPTOR_FILENAME
    if descriptor.is_file():
        components.append(BundleComponent(ComponentKind.DESCRIPTOR, descriptor))

    handler = directory / HANDLER_FILENAME
    if handler.is_file():
        components.append(BundleComponent(ComponentKind.TOOL, handler))

    dialogues_dir = directory / DIALOGUES_DIRNAME
    if dialogues_dir.is_dir():
        for path in sorted(dialogues_dir.glob(DIALOGUE_FILE_PATTERN)):
            if path.is_file():
                components.append(
                    BundleComponent(ComponentKind.DIALOGUE, path, variant=path.stem)
                )

    return components


def is_bundle_directory(directory: Path) -> bool:
    return directory.is_dir() and bool(find_components(directory))


class BundleRegistry:
    """Name to manifest mapping built by scanning the agents directory."""

    def __init__(self) -> None:
        self._manifests: dict[str, BundleManifest] = {}

    def scan(self, root: Path) -> list[BundleManifest]:
        """Scan the direct subdirectories of root for bundles.

        The previous scan result is replaced. A missing root yields an
        empty registry.

        Args:
            root: The agents directory

        Returns:
            list[BundleManifest]: Manifests sorted by bundle name
        """
        manifests: dict[str, BundleManifest] = {}

        if root.is_dir():
            for directory in sorted(root.iterdir()):
                if not directory.is_dir() or directory.name.startswith((".", "_")):
                    continue
                components = find_components(directory)
                if not components:
                    continue
                manifests[directory.name] = BundleManifest(
                    name=directory.name,
                    directory=directory.resolve(),
                    components=tuple(components),
                )
        else:
            logger.warning(f"Agents directory does not exist: {root}")

        self._manifests = manifests
        logger.info(f"Discovered {len(manifests)} agent bundles in {root}")
        return list(manifests.values())

    def get(self, name: str) -> BundleManifest | None:
        return self._manifests.get(name)

    def names(self) -> list[str]:
        return list(self._manifests)

    def manifests(self) -> list[BundleManifest]:
        return list(self._manifests.values())

    def __len__(self) -> int:
        return len(self._manifests)


class BundleResolver:
    """Resolves agent identifiers to bundle directories.

    An identifier can be a bundle name known to the registry, an absolute
    path, a path relative to the working directory, or a path relative to
    the agents directory.
    """

    def __init__(
        self,
        agents_dir: Path,
        registry: BundleRegistry | None = None,
        base_dir: Path | None = None,
    ):
        """Initialize the resolver.

        Args:
            agents_dir: Root directory holding agent bundles
            registry: Optional scan registry consulted first for bare names
            base_dir: Directory relative paths are resolved against
                      (defaults to the current working directory)
        """
        self.agents_dir = agents_dir
        self.registry = registry
        self.base_dir = base_dir

    def candidates(self, identifier: str) -> list[Path]:
        normalized = identifier.replace("\\", "/").strip()
        candidates: list[Path] = []

        if self.registry is not None:
            manifest = self.registry.get(normalized)
            if manifest is not None:
                candidates.append(manifest.directory)

        path = Path(normalized)
        if path.is_absolute():
            candidates.append(path)
            return candidates

        base = self.base_dir or Path(os.getcwd())
        candidates.append(base / path)
        candidates.append(self.agents_dir / path)
        candidates.append(self.agents_dir / path.name)
        return candidates

    def resolve(self, identifier: str, within: Path | None = None) -> Path:
        """Resolve an identifier to an existing bundle directory.

        Args:
            identifier: Bundle name or path
            within: If given, only bundles inside this directory are accepted

        Returns:
            Path: The resolved absolute bundle directory

        Raises:
            NotFoundError: If the identifier is empty or no candidate is a bundle
        """
        if not identifier or not identifier.strip():
            raise NotFoundError(identifier, "Agent identifier cannot be empty")

        root = Path(within).resolve() if within is not None else None
        for candidate in self.candidates(identifier):
            if not is_bundle_directory(candidate):
                continue
            resolved = candidate.resolve()
            if root is not None and not resolved.is_relative_to(root):
                logger.warning(f"Ignoring agent bundle {resolved} outside {root}")
                continue
            logger.debug(f"Resolved agent '{identifier}' to {resolved}")
            return resolved

        raise NotFoundError(identifier)
