"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import errno
import os
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import patch

import pytest
from vanish.core.config import VanishConfig
from vanish.core.index import IndexStore
from vanish.core.oplog import OperationLog
from vanish.engine.mover import MoveEngine
from vanish.engine.restorer import RestoreEngine
from vanish.engine.retention import RetentionEngine
from vanish.models.entry import CacheEntry


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME and the XDG directories into a temporary directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
    monkeypatch.delenv("VANISH_CONFIG", raising=False)
    return home


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Cache directory used by the engines under test."""
    return tmp_path / "cache"


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Directory holding the files that tests delete and restore."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def config(cache_dir: Path) -> VanishConfig:
    """Configuration rooted at the temporary cache directory."""
    return VanishConfig.for_cache_dir(cache_dir, days=10, logging_enabled=True)


@pytest.fixture
def store(cache_dir: Path) -> IndexStore:
    return IndexStore(cache_dir)


@pytest.fixture
def oplog(config: VanishConfig) -> OperationLog:
    return OperationLog(config.logging.directory, config.logging.enabled)


@pytest.fixture
def mover(config: VanishConfig, store: IndexStore, oplog: OperationLog) -> MoveEngine:
    return MoveEngine(config, store, oplog)


@pytest.fixture
def restorer(config: VanishConfig, store: IndexStore, oplog: OperationLog) -> RestoreEngine:
    return RestoreEngine(config, store, oplog)


@pytest.fixture
def retention(config: VanishConfig, store: IndexStore, oplog: OperationLog) -> RetentionEngine:
    return RetentionEngine(config, store, oplog)


@pytest.fixture
def make_entry(cache_dir: Path):
    """Factory for cache entries with a payload file in the cache directory."""
    counter = iter(range(1, 10_000))

    def _make(
        name: str = "file.txt",
        age_days: float = 0,
        content: str = "data",
        original_dir: Path | None = None,
        with_payload: bool = True,
    ) -> CacheEntry:
        number = next(counter)
        cache_dir.mkdir(parents=True, exist_ok=True)
        cache_path = cache_dir / f"{number}-{name}"
        if with_payload:
            cache_path.write_text(content)
        original = (original_dir or Path("/nonexistent/original")) / name
        return CacheEntry(
            id=str(number),
            original_path=str(original),
            delete_time=datetime.now().astimezone() - timedelta(days=age_days),
            cache_path=str(cache_path),
            size_bytes=len(content),
        )

    return _make


@pytest.fixture
def half_removed_source() -> Callable[[], AbstractContextManager[None]]:
    """Make directory moves copy, then fail after deleting ``a.txt`` from the source."""

    def _rmtree(path: str, *args: object, **kwargs: object) -> None:
        os.remove(os.path.join(path, "a.txt"))
        raise PermissionError(errno.EACCES, "Permission denied", str(path))

    @contextmanager
    def _patched() -> Iterator[None]:
        with (
            patch(
                "vanish.filesystem.primitives.os.rename",
                side_effect=OSError(errno.EXDEV, "Invalid cross-device link"),
            ),
            patch("vanish.filesystem.primitives.shutil.rmtree", side_effect=_rmtree),
        ):
            yield

    return _patched
