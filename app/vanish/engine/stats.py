"""Read-only statistics over the cache index."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from vanish.models.entry import CacheEntry, Index


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Aggregate figures for the items currently in the cache.

    Attributes:
        total_items: Number of index entries.
        file_count: Regular files.
        directory_count: Directories.
        symlink_count: Symbolic links.
        total_size: Sum of entry sizes in bytes.
        expired_count: Entries older than the retention window.
        largest: Entry with the largest size, if any.
        oldest: Entry deleted first, if any.
        newest: Entry deleted last, if any.
    """

    total_items: int
    file_count: int
    directory_count: int
    symlink_count: int
    total_size: int
    expired_count: int
    largest: CacheEntry | None
    oldest: CacheEntry | None
    newest: CacheEntry | None

    @property
    def average_size(self) -> int:
        """Mean entry size in bytes (0 for an empty cache)."""
        if not self.total_items:
            return 0
        return self.total_size // self.total_items


def compute_stats(index: Index, retention_days: int, now: datetime | None = None) -> CacheStats:
    """Compute statistics for an index.

    Args:
        index: Loaded index.
        retention_days: Window used to count expired entries.
        now: Reference time. Defaults to the current local time.

    Returns:
        CacheStats for the index.
    """
    items = index.items
    now = now or datetime.now().astimezone()
    cutoff = now - timedelta(days=retention_days)

    symlinks = sum(1 for e in items if e.is_symlink)
    directories = sum(1 for e in items if e.is_directory and not e.is_symlink)

    return CacheStats(
        total_items=len(items),
        file_count=len(items) - symlinks - directories,
        directory_count=directories,
        symlink_count=symlinks,
        total_size=sum(e.size_bytes for e in items),
        expired_count=sum(1 for e in items if e.is_expired(cutoff)),
        largest=max(items, key=lambda e: e.size_bytes, default=None),
        oldest=min(items, key=lambda e: e.delete_time, default=None),
        newest=max(items, key=lambda e: e.delete_time, default=None),
    )


def newest_first(index: Index) -> list[CacheEntry]:
    """Return index entries sorted by deletion time, newest first."""
    return sorted(index.items, key=lambda e: e.delete_time, reverse=True)
