"""Cache entry models.

This module defines the records stored in the cache index and the
transient items that flow through the operation pipeline.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

# Fractional seconds longer than microseconds (e.g. nanosecond timestamps)
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")


def format_timestamp(moment: datetime) -> str:
    """Serialize a datetime for the index document.

    Naive datetimes are interpreted as local time so that the written
    value always carries a UTC offset.

    Args:
        moment: Datetime to serialize.

    Returns:
        ISO 8601 string with UTC offset.
    """
    return moment.astimezone().isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an index timestamp into a timezone-aware datetime.

    Accepts ``Z`` suffixes, explicit offsets, naive values (treated as
    local time) and fractional seconds with more than six digits.

    Args:
        value: ISO 8601 timestamp string.

    Returns:
        Timezone-aware datetime.

    Raises:
        ValueError: If the value is not a valid ISO 8601 timestamp.
    """
    if not value:
        msg = "Timestamp cannot be empty"
        raise ValueError(msg)
    text = _LONG_FRACTION.sub(r"\1", value.strip())
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment


class ItemType(str, Enum):
    """Kind of filesystem object held in the cache.

    Attributes:
        FILE: Regular file (or any non-directory, non-link object).
        DIRECTORY: Directory tree.
        SYMLINK: Symbolic link, stored as a link and never followed.
    """

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"

    @property
    def log_label(self) -> str:
        """Label used in operation log lines."""
        return {"file": "FILE", "directory": "DIR", "symlink": "SYMLINK"}[self.value]


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Record of one soft-deleted file, directory or symlink.

    Attributes:
        id: Unique identifier (decimal nanosecond timestamp).
        original_path: Absolute path the object was removed from.
        delete_time: When the object was moved into the cache.
        cache_path: Absolute path of the object inside the cache directory.
        is_directory: Whether the object is a directory.
        is_symlink: Whether the object is a symbolic link.
        link_target: Link target (symlinks only).
        contained_file_count: Number of entries below the directory
            (directories only).
        size_bytes: Size in bytes (recursive for directories).
    """

    id: str
    original_path: str
    delete_time: datetime
    cache_path: str
    is_directory: bool = False
    is_symlink: bool = False
    link_target: str | None = None
    contained_file_count: int = 0
    size_bytes: int = 0

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.id:
            msg = "Cache entry ID cannot be empty"
            raise ValueError(msg)
        if not self.original_path:
            msg = "Original path cannot be empty"
            raise ValueError(msg)
        if not self.cache_path:
            msg = "Cache path cannot be empty"
            raise ValueError(msg)

    @property
    def item_type(self) -> ItemType:
        """Kind of object this entry describes."""
        if self.is_symlink:
            return ItemType.SYMLINK
        if self.is_directory:
            return ItemType.DIRECTORY
        return ItemType.FILE

    def expires_at(self, retention_days: int) -> datetime:
        """Return the moment this entry becomes eligible for purge."""
        return self.delete_time + timedelta(days=retention_days)

    def is_expired(self, cutoff: datetime) -> bool:
        """Check whether the entry was deleted strictly before ``cutoff``."""
        return self.delete_time < cutoff

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage.

        Returns:
            Dictionary representation of the cache entry.
        """
        result: dict[str, Any] = {
            "id": self.id,
            "original_path": self.original_path,
            "delete_time": format_timestamp(self.delete_time),
            "cache_path": self.cache_path,
            "is_directory": self.is_directory,
            "is_symlink": self.is_symlink,
        }
        if self.is_symlink and self.link_target is not None:
            result["link_target"] = self.link_target
        if self.is_directory:
            result["contained_file_count"] = self.contained_file_count
        result["size_bytes"] = self.size_bytes
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CacheEntry:
        """Deserialize from dictionary.

        Legacy key names (``delete_date``, ``file_count``, ``size``) are
        accepted as fallbacks.

        Args:
            data: Dictionary containing entry data.

        Returns:
            CacheEntry instance.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        raw_time = data["delete_time"] if "delete_time" in data else data["delete_date"]
        return cls(
            id=str(data["id"]),
            original_path=data["original_path"],
            delete_time=parse_timestamp(raw_time),
            cache_path=data["cache_path"],
            is_directory=bool(data.get("is_directory", False)),
            is_symlink=bool(data.get("is_symlink", False)),
            link_target=data.get("link_target") or None,
            contained_file_count=int(data.get("contained_file_count", data.get("file_count", 0))),
            size_bytes=int(data.get("size_bytes", data.get("size", 0))),
        )


@dataclass(slots=True)
class Index:
    """Ordered registry of cache entries.

    Insertion order is deletion order. The index is always loaded and
    saved as a whole.

    Attributes:
        items: Cache entries in insertion order.
    """

    items: list[CacheEntry] = field(default_factory=lambda: [])

    def __len__(self) -> int:
        return len(self.items)

    def without(self, entry_id: str) -> Index:
        """Return a copy of the index with the given entry removed."""
        return Index(items=[e for e in self.items if e.id != entry_id])

    def matching(self, pattern: str) -> list[CacheEntry]:
        """Return entries whose original path contains ``pattern``.

        Matching is a case-insensitive substring test.
        """
        needle = pattern.lower()
        return [e for e in self.items if needle in e.original_path.lower()]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the index document structure."""
        return {"items": [entry.to_dict() for entry in self.items]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Index:
        """Deserialize from the index document structure.

        A ``null`` items list is treated as empty.

        Raises:
            KeyError: If an entry is missing required fields.
            ValueError: If the document or an entry is malformed.
        """
        if not isinstance(data, dict):
            msg = "Index document must be a JSON object"
            raise ValueError(msg)
        raw_items = data.get("items") or []
        if not isinstance(raw_items, list):
            msg = "Index 'items' must be a list"
            raise ValueError(msg)
        return cls(items=[CacheEntry.from_dict(item) for item in raw_items])


@dataclass(frozen=True, slots=True)
class PendingItem:
    """A candidate path probed before being moved into the cache.

    Attributes:
        path: Path as given by the caller.
        exists: Whether the path exists (without following symlinks).
        is_directory: Whether the path is a real directory.
        is_symlink: Whether the path is a symbolic link.
        size_bytes: Size in bytes (recursive for directories).
        child_count: Number of entries below a directory.
        error: Reason the path cannot be used, if it does not exist.
    """

    path: str
    exists: bool
    is_directory: bool = False
    is_symlink: bool = False
    size_bytes: int = 0
    child_count: int = 0
    error: str | None = None


@dataclass(frozen=True, slots=True)
class RestoreCandidate:
    """A cache entry paired with the destination it will be restored to.

    The destination differs from ``entry.original_path`` when the
    original location was occupied at resolution time.

    Attributes:
        entry: Cache entry as stored in the index.
        destination: Resolved restore destination.
    """

    entry: CacheEntry
    destination: str

    @property
    def renamed(self) -> bool:
        """Whether the destination differs from the original path."""
        return self.destination != self.entry.original_path
