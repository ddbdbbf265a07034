"""Move engine: soft deletion into the cache.

Relocates existing paths into the cache directory, records a CacheEntry
for each in the index, and writes the operation log.

Moving and indexing are two separate steps. If the move succeeds but the
index cannot be updated, the object sits in the cache untracked; this is
logged as an error and surfaced to the caller as an IndexStoreError.
"""

import logging
import os
import time
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path

from vanish.core.config import VanishConfig
from vanish.core.errors import (
    CacheDirectoryError,
    IncompleteRemovalError,
    IndexStoreError,
    InvalidArgumentError,
    NotFoundError,
)
from vanish.core.index import IndexStore
from vanish.core.oplog import OperationLog
from vanish.filesystem.primitives import move_object, probe, read_link
from vanish.models.entry import CacheEntry, PendingItem

logger = logging.getLogger(__name__)

CACHE_NAME_TIME_FORMAT = "%Y-%m-%d-%H-%M-%S"


class _UniqueIds:
    """Strictly increasing nanosecond-based identifiers."""

    def __init__(self) -> None:
        self._last = 0

    def next(self) -> str:
        value = max(time.time_ns(), self._last + 1)
        self._last = value
        return str(value)


_ids = _UniqueIds()


def next_entry_id() -> str:
    """Return a new process-unique entry ID.

    IDs are decimal nanosecond timestamps, bumped by one when two calls
    land on the same clock tick.
    """
    return _ids.next()


def cache_filename(entry_id: str, moment: datetime, original_path: str) -> str:
    """Build the cache object name ``{id}-{YYYY-MM-DD-HH-MM-SS}-{basename}``."""
    basename = os.path.basename(original_path.rstrip(os.sep)) or "root"
    return f"{entry_id}-{moment.strftime(CACHE_NAME_TIME_FORMAT)}-{basename}"


def probe_candidates(paths: Iterable[str]) -> list[PendingItem]:
    """Probe every candidate path, keeping input order.

    Args:
        paths: Paths as given by the user.

    Returns:
        One PendingItem per path; missing paths have ``exists=False``.
    """
    return [probe(path) for path in paths]


class MoveEngine:
    """Moves filesystem objects into the cache.

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
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the MoveEngine.

        Args:
            config: Resolved configuration.
            store: Index store override. Defaults to the configured cache.
            oplog: Operation log override. Defaults to the configured log.
            clock: Source of the current local time.
        """
        self._config = config
        self._store = store or IndexStore(config.cache_dir)
        self._oplog = oplog or OperationLog(config.logging.directory, config.logging.enabled)
        self._clock = clock or (lambda: datetime.now().astimezone())

    @property
    def cache_dir(self) -> Path:
        return self._config.cache_dir

    def ensure_cache_dir(self) -> Path:
        """Create the cache directory if it doesn't exist.

        Raises:
            CacheDirectoryError: If the directory cannot be created.
        """
        try:
            self.cache_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            raise CacheDirectoryError(f"Cannot create cache directory {self.cache_dir}: {e}") from e
        return self.cache_dir

    def process(self, item: PendingItem | str) -> CacheEntry:
        """Move a single path into the cache and index it.

        Args:
            item: Probed candidate or a plain path.

        Returns:
            The CacheEntry appended to the index.

        Raises:
            NotFoundError: If the path does not exist.
            InvalidArgumentError: If the path overlaps the cache directory.
            CacheDirectoryError: If the cache directory cannot be created.
            IndexStoreError: If the index cannot be updated (the object is
                then cached but untracked).
            IncompleteRemovalError: If the object was cached and indexed but
                its source could only be partly removed; ``entry`` holds the
                new CacheEntry.
            VanishError: Any per-item failure from the move itself.
        """
        path = item if isinstance(item, str) else item.path
        abs_path = os.path.abspath(path)

        # Re-probe: the candidate may have changed since checking.
        current = probe(abs_path)
        if not current.exists:
            raise NotFoundError(f"{path}: {current.error or 'does not exist'}")
        self._reject_cache_overlap(abs_path, current.is_symlink)

        cache_dir = self.ensure_cache_dir()
        now = self._clock()
        entry_id = next_entry_id()
        cache_path = str(cache_dir / cache_filename(entry_id, now, abs_path))

        link_target = read_link(abs_path) if current.is_symlink else None
        leftover: IncompleteRemovalError | None = None
        try:
            move_object(abs_path, cache_path)
        except IncompleteRemovalError as e:
            # The cache holds the only complete copy, so it must be indexed.
            leftover = e

        entry = CacheEntry(
            id=entry_id,
            original_path=abs_path,
            delete_time=now,
            cache_path=cache_path,
            is_directory=current.is_directory,
            is_symlink=current.is_symlink,
            link_target=link_target,
            contained_file_count=current.child_count,
            size_bytes=current.size_bytes,
        )

        try:
            self._store.append(entry)
        except IndexStoreError:
            logger.error("Moved %s to %s but could not index it", abs_path, cache_path)
            self._oplog.record_simple("ERROR", f"Failed to index {abs_path} -> {cache_path}")
            raise

        self._oplog.record("DELETE", entry)
        if leftover is not None:
            logger.warning("Cached %s as %s but parts of the source remain", abs_path, cache_path)
            reason = leftover.__cause__ or leftover
            self._oplog.record_simple("ERROR", f"Incomplete removal of {abs_path}: {reason}")
            msg = f"Cached as {cache_path}, but {abs_path} could not be fully removed: {reason}"
            raise IncompleteRemovalError(msg, destination=cache_path, entry=entry) from leftover

        logger.info("Moved %s to cache as %s", abs_path, cache_path)
        return entry

    def _reject_cache_overlap(self, abs_path: str, is_symlink: bool) -> None:
        target = Path(abs_path)
        # A link is moved as a link, so only the directory holding it is resolved.
        target = target.parent.resolve() / target.name if is_symlink else target.resolve()
        cache_dir = self.cache_dir.resolve()
        if target == cache_dir or target in cache_dir.parents or cache_dir in target.parents:
            msg = f"Refusing to delete {abs_path}: it overlaps the cache directory {cache_dir}"
            raise InvalidArgumentError(msg)
