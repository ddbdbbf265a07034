"""Unit tests for the index store."""

import json
import os
import stat
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest
from vanish.core.errors import IndexCorruptError, IndexStoreError
from vanish.core.index import IndexStore
from vanish.models.entry import CacheEntry, Index


def _entry(entry_id: str, cache_dir: Path) -> CacheEntry:
    return CacheEntry(
        id=entry_id,
        original_path=f"/home/me/file{entry_id}.txt",
        delete_time=datetime.now().astimezone(),
        cache_path=str(cache_dir / f"{entry_id}-file.txt"),
        size_bytes=10,
    )


class TestLoad:
    """Tests for IndexStore.load."""

    def test_missing_document_is_empty(self, store: IndexStore) -> None:
        """A missing index document yields an empty index."""
        assert len(store.load()) == 0

    def test_corrupt_document(self, store: IndexStore, cache_dir: Path) -> None:
        """Unparseable JSON raises IndexCorruptError."""
        cache_dir.mkdir()
        store.index_path.write_text("{not json")

        with pytest.raises(IndexCorruptError):
            store.load()

    def test_malformed_entry(self, store: IndexStore, cache_dir: Path) -> None:
        """Entries missing required fields raise IndexCorruptError."""
        cache_dir.mkdir()
        store.index_path.write_text(json.dumps({"items": [{"id": "1"}]}))

        with pytest.raises(IndexCorruptError):
            store.load()

    def test_corrupt_is_store_error(self) -> None:
        """IndexCorruptError is an IndexStoreError."""
        assert issubclass(IndexCorruptError, IndexStoreError)

    def test_unreadable_document(self, store: IndexStore, cache_dir: Path) -> None:
        """Read failures other than a missing file raise IndexStoreError."""
        cache_dir.mkdir()
        store.index_path.mkdir()

        with pytest.raises(IndexStoreError):
            store.load()


class TestSave:
    """Tests for IndexStore.save."""

    def test_round_trip(self, store: IndexStore, cache_dir: Path) -> None:
        """Saved entries load back equal and in order."""
        index = Index(items=[_entry("1", cache_dir), _entry("2", cache_dir)])

        store.save(index)

        assert store.load().items == index.items

    def test_empty_index_document(self, store: IndexStore) -> None:
        """An empty index is written as an empty items list."""
        store.save(Index())

        assert json.loads(store.index_path.read_text()) == {"items": []}

    def test_pretty_printed_with_mode(self, store: IndexStore, cache_dir: Path) -> None:
        """The document is indented JSON readable by everyone."""
        store.save(Index(items=[_entry("1", cache_dir)]))

        text = store.index_path.read_text()
        assert text.startswith('{\n  "items"')
        assert text.endswith("\n")
        assert stat.S_IMODE(os.stat(store.index_path).st_mode) == 0o644

    def test_replace_failure_keeps_old_document(self, store: IndexStore, cache_dir: Path) -> None:
        """A failed write leaves the previous document and no temp file."""
        store.save(Index(items=[_entry("1", cache_dir)]))

        with (
            patch("vanish.core.index.os.replace", side_effect=OSError("disk full")),
            pytest.raises(IndexStoreError, match="Failed to write index"),
        ):
            store.save(Index())

        assert len(store.load()) == 1
        assert sorted(p.name for p in cache_dir.iterdir()) == ["index.json"]


class TestMutations:
    """Tests for append, remove_by_id and reset."""

    def test_append_keeps_order(self, store: IndexStore, cache_dir: Path) -> None:
        """Appended entries keep insertion order."""
        store.append(_entry("1", cache_dir))
        store.append(_entry("2", cache_dir))

        assert [e.id for e in store.load().items] == ["1", "2"]

    def test_remove_by_id(self, store: IndexStore, cache_dir: Path) -> None:
        """remove_by_id drops exactly the matching entry."""
        store.append(_entry("1", cache_dir))
        store.append(_entry("2", cache_dir))

        assert store.remove_by_id("1") is True
        assert [e.id for e in store.load().items] == ["2"]

    def test_remove_unknown_id(self, store: IndexStore, cache_dir: Path) -> None:
        """Removing an unknown ID reports False and changes nothing."""
        store.append(_entry("1", cache_dir))

        assert store.remove_by_id("404") is False
        assert len(store.load()) == 1

    def test_reset(self, store: IndexStore, cache_dir: Path) -> None:
        """reset empties the index."""
        store.append(_entry("1", cache_dir))

        store.reset()

        assert len(store.load()) == 0
