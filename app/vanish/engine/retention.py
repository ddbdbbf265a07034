"""Retention engine: purging expired items and clearing the cache.

Purge removes the cached payload of every entry older than a retention
window. An entry whose payload cannot be removed stays in the index so
that tracking is never lost for an object that still exists.

Clear is a destructive reset: the whole cache directory is deleted,
recreated empty, and the index reset.
"""

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

from vanish.core.config import VanishConfig
from vanish.core.errors import (
    CacheDirectoryError,
    InvalidArgumentError,
    ItemFailure,
    PartialFailureError,
    VanishError,
)
from vanish.core.index import IndexStore
from vanish.core.oplog import OperationLog
from vanish.filesystem.primitives import remove_object
from vanish.models.entry import CacheEntry, Index

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PurgeResult:
    """Outcome of a purge.

    Attributes:
        purged: Entries whose payload was removed (or already gone).
        failures: Expired entries that could not be removed and were kept.
        retained: Number of entries left in the index.
    """

    purged: list[CacheEntry] = field(default_factory=lambda: [])
    failures: list[ItemFailure] = field(default_factory=lambda: [])
    retained: int = 0

    @property
    def purged_count(self) -> int:
        return len(self.purged)

    @property
    def error(self) -> PartialFailureError | None:
        """Aggregate error if any removal failed, otherwise None."""
        if not self.failures:
            return None
        details = "; ".join(f.error for f in self.failures)
        return PartialFailureError(f"Purge completed with errors: {details}", list(self.failures))


def validate_days(days: object) -> int:
    """Validate a purge window.

    Accepts integers and integer strings.

    Raises:
        InvalidArgumentError: If the value is not a positive integer.
    """
    if isinstance(days, bool):
        raise InvalidArgumentError(f"Invalid days value: {days}")
    if isinstance(days, str):
        try:
            days = int(days.strip())
        except ValueError:
            raise InvalidArgumentError(f"Invalid days value: {days}") from None
    if not isinstance(days, int):
        raise InvalidArgumentError(f"Invalid days value: {days}")
    if days <= 0:
        raise InvalidArgumentError(f"Days must be positive, got: {days}")
    return days


class RetentionEngine:
    """Applies the retention policy to the cache.

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
        self._config = config
        self._store = store or IndexStore(config.cache_dir)
        self._oplog = oplog or OperationLog(config.logging.directory, config.logging.enabled)
        self._clock = clock or (lambda: datetime.now().astimezone())

    def cutoff(self, days: int) -> datetime:
        """Return the moment before which entries count as expired."""
        return self._clock() - timedelta(days=days)

    def purge(self, days: int | str, operation: str = "PURGE") -> PurgeResult:
        """Remove entries deleted more than ``days`` days ago.

        Per-item removal failures keep the entry in the index and are
        reported in the result; they never stop the remaining removals.

        Args:
            days: Retention window in days (must be positive).
            operation: Name written to the operation log (PURGE or CLEANUP).

        Returns:
            PurgeResult with purged entries and failures.

        Raises:
            InvalidArgumentError: If ``days`` is not positive.
            IndexStoreError: If the index cannot be loaded or saved.
        """
        days = validate_days(days)
        cutoff = self.cutoff(days)
        index = self._store.load()

        result = PurgeResult()
        remaining: list[CacheEntry] = []

        for entry in index.items:
            if not entry.is_expired(cutoff):
                remaining.append(entry)
                continue

            try:
                removed = remove_object(entry.cache_path)
            except VanishError as e:
                logger.warning("Keeping %s in index: %s", entry.cache_path, e)
                result.failures.append(ItemFailure(path=entry.cache_path, error=str(e)))
                remaining.append(entry)
                continue

            if not removed:
                logger.debug("Cached payload %s was already gone", entry.cache_path)
            result.purged.append(entry)
            self._oplog.record(operation, entry)

        result.retained = len(remaining)
        if result.purged:
            self._store.save(Index(items=remaining))

        logger.info(
            "%s: removed %d item(s) older than %d day(s), %d failure(s)",
            operation,
            result.purged_count,
            days,
            len(result.failures),
        )
        return result

    def cleanup(self) -> PurgeResult:
        """Purge items older than the configured retention window."""
        return self.purge(self._config.retention_days, operation="CLEANUP")

    def clear(self) -> None:
        """Delete the whole cache directory and start over empty.

        Raises:
            InvalidArgumentError: If the cache directory is the home or a
                filesystem root directory.
            CacheDirectoryError: If the directory cannot be removed or
                recreated.
            IndexStoreError: If the empty index cannot be written.
        """
        cache_dir = self._config.cache_dir
        self._reject_unsafe_clear(cache_dir)

        try:
            if cache_dir.is_symlink() or cache_dir.is_file():
                cache_dir.unlink()
            elif cache_dir.exists():
                shutil.rmtree(cache_dir)
        except OSError as e:
            raise CacheDirectoryError(f"Failed to remove cache directory {cache_dir}: {e}") from e

        try:
            cache_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            raise CacheDirectoryError(f"Failed to recreate cache directory {cache_dir}: {e}") from e

        self._store.reset()
        self._oplog.record_simple("CLEAR_ALL", "Cache cleared")
        logger.info("Cleared cache directory %s", cache_dir)

    @staticmethod
    def _reject_unsafe_clear(cache_dir: Path) -> None:
        resolved = cache_dir.resolve()
        if resolved == Path.home().resolve() or resolved.parent == resolved:
            raise InvalidArgumentError(f"Refusing to clear {cache_dir}")
