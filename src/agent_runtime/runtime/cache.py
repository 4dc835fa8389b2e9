"""In-memory cache of loaded agent bundles.

Entries are keyed by the resolved bundle directory. There is no expiry:
an entry lives until it is invalidated or the cache is cleared.
"""

import logging
from pathlib import Path
from typing import Generic, Iterator, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BundleCache(Generic[T]):
    """Unbounded key/value store for loaded bundle artifacts.

    Keys may be given as Path or str; they are normalized to the string
    form of the path so both spellings address the same entry.
    """

    def __init__(self) -> None:
        self._entries: dict[str, T] = {}

    @staticmethod
    def _key(directory: Path | str) -> str:
        return str(directory)

    def get(self, directory: Path | str) -> T | None:
        return self._entries.get(self._key(directory))

    def set(self, directory: Path | str, value: T) -> None:
        self._entries[self._key(directory)] = value
        logger.debug(f"Cached bundle artifact for {directory}")

    def has(self, directory: Path | str) -> bool:
        return self._key(directory) in self._entries

    def invalidate(self, directory: Path | str) -> bool:
        """Drop one entry.

        Returns:
            bool: True if an entry was removed, False if none existed
        """
        removed = self._entries.pop(self._key(directory), None) is not None
        if removed:
            logger.debug(f"Invalidated cache entry for {directory}")
        return removed

    def clear(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        logger.debug(f"Cleared {count} cache entries")

    def values(self) -> list[T]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __contains__(self, directory: object) -> bool:
        return isinstance(directory, (str, Path)) and self.has(directory)
