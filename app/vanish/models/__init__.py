"""Data models for vanish.

This module exports the core data structures used throughout the application.
"""

from vanish.models.entry import (
    CacheEntry,
    Index,
    ItemType,
    PendingItem,
    RestoreCandidate,
    format_timestamp,
    parse_timestamp,
)

__all__ = [
    "CacheEntry",
    "Index",
    "ItemType",
    "PendingItem",
    "RestoreCandidate",
    "format_timestamp",
    "parse_timestamp",
]
