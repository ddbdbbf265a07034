"""Restore engine: moving cached items back out of the cache.

Matches index entries against user patterns, resolves a free destination
for each, and moves the cached object back. An entry is only removed from
the index after its object has been restored.
"""

import dataclasses
import logging
import os
from collections.abc import Iterable

from vanish.core.config import VanishConfig
from vanish.core.errors import IncompleteRemovalError, IndexStoreError, InvalidArgumentError
from vanish.core.index import IndexStore
from vanish.core.oplog import OperationLog
from vanish.filesystem.primitives import restore_object
from vanish.models.entry import CacheEntry, RestoreCandidate

logger = logging.getLogger(__name__)


def resolve_conflict(
    path: str,
    is_directory: bool = False,
    reserved: Iterable[str] = (),
) -> str:
    """Find a free destination for ``path``.

    If ``path`` is free it is returned unchanged. Otherwise an increasing
    integer is inserted before the extension (``a.txt`` -> ``a1.txt`` ->
    ``a2.txt``); directories and extensionless names get the number
    appended directly (``dir`` -> ``dir1``).

    Args:
        path: Preferred destination.
        is_directory: Whether the object being restored is a directory.
        reserved: Paths already claimed by other restores in this batch.

    Returns:
        The first free path.
    """
    taken = set(reserved)

    def is_free(candidate: str) -> bool:
        return candidate not in taken and not os.path.lexists(candidate)

    if is_free(path):
        return path

    parent, name = os.path.split(path)
    if is_directory:
        stem, ext = name, ""
    else:
        stem, ext = os.path.splitext(name)

    counter = 1
    while True:
        candidate = os.path.join(parent, f"{stem}{counter}{ext}")
        if is_free(candidate):
            return candidate
        counter += 1


class RestoreEngine:
    """Restores cached items to their original (or a renamed) location.

    Attributes:
        config: Resolved configuration.
        store: Index store of the cache directory.
        oplog: Operation log.
    """

    def __init__(
        self,
        config: VanishConfig,
        store: IndexStore | None = None,
        oplog: OperationLog | None = None,
    ) -> None:
        self._config = config
        self._store = store or IndexStore(config.cache_dir)
        self._oplog = oplog or OperationLog(config.logging.directory, config.logging.enabled)

    def find_matches(self, patterns: Iterable[str]) -> list[RestoreCandidate]:
        """Find index entries whose original path contains any pattern.

        Matching is case-insensitive. An entry selected by several
        patterns is returned once. Destinations are resolved now and never
        collide with each other within the returned list.

        Args:
            patterns: Substrings to look for in original paths.

        Returns:
            Restore candidates in pattern order, then index order.

        Raises:
            InvalidArgumentError: If no non-blank pattern is given.
            IndexStoreError: If the index cannot be loaded.
        """
        needles = [p for p in patterns if p.strip()]
        if not needles:
            raise InvalidArgumentError("At least one restore pattern is required")

        index = self._store.load()
        seen: set[str] = set()
        reserved: set[str] = set()
        candidates: list[RestoreCandidate] = []

        for pattern in needles:
            for entry in index.matching(pattern):
                if entry.id in seen:
                    continue
                seen.add(entry.id)
                destination = resolve_conflict(
                    entry.original_path,
                    is_directory=entry.is_directory and not entry.is_symlink,
                    reserved=reserved,
                )
                reserved.add(destination)
                candidates.append(RestoreCandidate(entry=entry, destination=destination))

        logger.debug("Patterns %s matched %d cached item(s)", needles, len(candidates))
        return candidates

    def process(self, candidate: RestoreCandidate) -> CacheEntry:
        """Restore one candidate and drop it from the index.

        If the restore fails the entry stays in the index and remains
        restorable.

        Args:
            candidate: Entry and resolved destination.

        Returns:
            The entry with ``original_path`` set to the actual destination.

        Raises:
            AlreadyExistsError: If the destination became occupied.
            NotFoundError: If the cached object is missing.
            IndexStoreError: If the object was restored but the index could
                not be updated.
            IncompleteRemovalError: If the object was restored and dropped
                from the index but the cached copy could only be partly
                removed; ``entry`` holds the restored entry.
            VanishError: Any other per-item failure.
        """
        entry = candidate.entry
        leftover: IncompleteRemovalError | None = None
        try:
            restore_object(entry.cache_path, candidate.destination)
        except IncompleteRemovalError as e:
            # The destination holds the complete copy; the entry is no longer needed.
            leftover = e

        try:
            self._store.remove_by_id(entry.id)
        except IndexStoreError:
            logger.error("Restored %s but could not remove it from the index", entry.id)
            self._oplog.record_simple("ERROR", f"Failed to remove from index: {entry.id}")
            raise

        restored = dataclasses.replace(entry, original_path=candidate.destination)
        self._oplog.record("RESTORE", restored)
        if leftover is not None:
            reason = leftover.__cause__ or leftover
            logger.warning(
                "Restored %s but parts of %s remain", candidate.destination, entry.cache_path
            )
            self._oplog.record_simple(
                "ERROR", f"Incomplete removal of {entry.cache_path}: {reason}"
            )
            msg = f"Restored to {candidate.destination}, but {entry.cache_path} remains: {reason}"
            raise IncompleteRemovalError(
                msg, destination=candidate.destination, entry=restored
            ) from leftover
        if candidate.renamed:
            logger.info("Restored %s to %s (renamed)", entry.original_path, candidate.destination)
        else:
            logger.info("Restored %s", candidate.destination)
        return restored
