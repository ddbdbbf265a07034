"""Index store for cached items.

This module provides the IndexStore class, the sole owner of the index
document. Every mutation is a whole-file load, modify, save cycle.
"""

import json
import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile

from vanish.core.errors import IndexCorruptError, IndexStoreError
from vanish.core.paths import get_index_path
from vanish.models.entry import CacheEntry, Index

logger = logging.getLogger(__name__)


class IndexStore:
    """Manages the JSON index document of a cache directory.

    Storage location: <cache_dir>/index.json

    The document is a single pretty-printed JSON object of the form
    ``{"items": [...]}``. There are no partial updates: callers always
    operate on a fully loaded snapshot, so the last save wins.

    Attributes:
        cache_dir: Directory containing the index document.
    """

    def __init__(self, cache_dir: Path) -> None:
        """Initialize IndexStore.

        Args:
            cache_dir: Cache directory holding the index document.
        """
        self._cache_dir = cache_dir

    @property
    def cache_dir(self) -> Path:
        """Directory containing the index document."""
        return self._cache_dir

    @property
    def index_path(self) -> Path:
        """Path to the index.json file."""
        return get_index_path(self._cache_dir)

    def load(self) -> Index:
        """Read the index document.

        A missing document is not an error: it yields an empty index.

        Returns:
            The loaded Index.

        Raises:
            IndexCorruptError: If the document cannot be parsed.
            IndexStoreError: If the document cannot be read.
        """
        try:
            text = self.index_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Index()
        except OSError as e:
            raise IndexStoreError(f"Failed to read index {self.index_path}: {e}") from e

        try:
            return Index.from_dict(json.loads(text))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise IndexCorruptError(f"Index {self.index_path} is corrupt: {e}") from e

    def save(self, index: Index) -> None:
        """Serialize the full index and overwrite the document.

        The file is written atomically via a temporary file in the cache
        directory. An empty index is written as ``{"items": []}``.

        Args:
            index: Index to persist.

        Raises:
            IndexStoreError: If the document cannot be written.
        """
        tmp_path: Path | None = None
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._cache_dir,
                prefix=".index-",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = Path(f.name)
                json.dump(index.to_dict(), f, indent=2)
                f.write("\n")
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, self.index_path)
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise IndexStoreError(f"Failed to write index {self.index_path}: {e}") from e

        logger.debug("Saved index with %d item(s) to %s", len(index), self.index_path)

    def append(self, entry: CacheEntry) -> None:
        """Append an entry and persist the index.

        Args:
            entry: Entry to add.

        Raises:
            IndexStoreError: If loading or saving fails.
        """
        index = self.load()
        index.items.append(entry)
        self.save(index)

    def remove_by_id(self, entry_id: str) -> bool:
        """Remove the entry with ``entry_id`` and persist the index.

        Args:
            entry_id: ID of the entry to remove.

        Returns:
            True if an entry was removed, False if no entry had that ID.

        Raises:
            IndexStoreError: If loading or saving fails.
        """
        index = self.load()
        remaining = index.without(entry_id)
        if len(remaining) == len(index):
            logger.debug("No index entry with id %s", entry_id)
            return False
        self.save(remaining)
        return True

    def reset(self) -> None:
        """Replace the index with an empty one."""
        self.save(Index())
