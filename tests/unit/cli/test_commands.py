"""Unit tests for the cache commands.

Tests for vx delete, restore, purge, clear, list, info and stats.
"""

import json
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner
from vanish.cli.main import app
from vanish.core.index import IndexStore
from vanish.models.entry import CacheEntry, Index

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path: Path, cache_dir: Path) -> Path:
    """Config file pointing the cache and log into the temp directory."""
    path = tmp_path / "vanish.toml"
    path.write_text(
        f'[cache]\ndirectory = "{cache_dir}"\ndays = 10\n'
        f'[logging]\ndirectory = "{cache_dir / "logs"}"\n'
    )
    return path


def _invoke(config_file: Path, *args: str, input: str | None = None):
    return runner.invoke(app, ["-c", str(config_file), *args], input=input)


def _seed(cache_dir: Path, name: str, age_days: int, original_dir: Path) -> CacheEntry:
    cache_dir.mkdir(parents=True, exist_ok=True)
    payload = cache_dir / f"{name}-payload"
    payload.write_text(name)
    entry = CacheEntry(
        id=f"{age_days}{len(name)}",
        original_path=str(original_dir / name),
        delete_time=datetime.now().astimezone() - timedelta(days=age_days),
        cache_path=str(payload),
        size_bytes=len(name),
    )
    store = IndexStore(cache_dir)
    index = store.load()
    index.items.append(entry)
    store.save(index)
    return entry


class TestDelete:
    """Tests for vx delete."""

    def test_delete_with_yes(self, config_file: Path, cache_dir: Path, workspace: Path) -> None:
        """--yes moves items without prompting."""
        target = workspace / "a.txt"
        target.write_text("x")

        result = _invoke(config_file, "delete", "-y", str(target))

        assert result.exit_code == 0
        assert "Moved 1 item(s) to cache" in result.output
        assert not target.exists()
        assert len(IndexStore(cache_dir).load()) == 1

    def test_delete_confirmed(self, config_file: Path, workspace: Path) -> None:
        """Answering yes at the prompt moves the items."""
        target = workspace / "a.txt"
        target.write_text("x")

        result = _invoke(config_file, "delete", str(target), input="y\n")

        assert result.exit_code == 0
        assert "Move 1 item(s) to cache?" in result.output
        assert not target.exists()

    def test_delete_declined(self, config_file: Path, cache_dir: Path, workspace: Path) -> None:
        """Answering no leaves everything in place."""
        target = workspace / "a.txt"
        target.write_text("x")

        result = _invoke(config_file, "delete", str(target), input="n\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert target.exists()
        assert len(IndexStore(cache_dir).load()) == 0

    def test_delete_nothing_valid(self, config_file: Path, workspace: Path) -> None:
        """Only missing paths is a fatal error."""
        result = _invoke(config_file, "delete", "-y", str(workspace / "missing"))

        assert result.exit_code == 1
        assert "No valid files or directories found" in result.output

    def test_delete_partial(self, config_file: Path, workspace: Path) -> None:
        """A missing path among valid ones exits 1 after moving the rest."""
        target = workspace / "a.txt"
        target.write_text("x")

        result = _invoke(config_file, "delete", "-y", str(target), str(workspace / "missing"))

        assert result.exit_code == 1
        assert "1 skipped" in result.output
        assert not target.exists()

    def test_delete_requires_paths(self, config_file: Path) -> None:
        """At least one path is required."""
        result = _invoke(config_file, "delete")

        assert result.exit_code != 0


class TestRestore:
    """Tests for vx restore."""

    def test_restore(self, config_file: Path, workspace: Path) -> None:
        """A deleted file can be restored by pattern."""
        target = workspace / "report.txt"
        target.write_text("content")
        _invoke(config_file, "delete", "-y", str(target))

        result = _invoke(config_file, "restore", "-y", "report")

        assert result.exit_code == 0
        assert "Restored 1 item(s)" in result.output
        assert target.read_text() == "content"

    def test_restore_confirmed(self, config_file: Path, workspace: Path) -> None:
        """Restore asks for confirmation by default."""
        target = workspace / "report.txt"
        target.write_text("content")
        _invoke(config_file, "delete", "-y", str(target))

        result = _invoke(config_file, "restore", "report", input="y\n")

        assert "Restore 1 item(s)?" in result.output
        assert target.exists()

    def test_restore_no_match(self, config_file: Path) -> None:
        """No match exits with 1."""
        result = _invoke(config_file, "restore", "-y", "nothing")

        assert result.exit_code == 1
        assert "No matching items found" in result.output


class TestPurgeAndClear:
    """Tests for vx purge and vx clear."""

    def test_purge(self, config_file: Path, cache_dir: Path, workspace: Path) -> None:
        """purge removes items older than the given window."""
        _seed(cache_dir, "old", 20, workspace)
        _seed(cache_dir, "new", 1, workspace)

        result = _invoke(config_file, "purge", "7")

        assert result.exit_code == 0
        assert "Purged 1 item(s)" in result.output
        assert [e.original_path for e in IndexStore(cache_dir).load().items] == [
            str(workspace / "new")
        ]

    def test_purge_zero_days(self, config_file: Path) -> None:
        """A zero day window is rejected."""
        result = _invoke(config_file, "purge", "0")

        assert result.exit_code == 1
        assert "Days must be positive" in result.output

    def test_purge_not_a_number(self, config_file: Path) -> None:
        """A non-numeric window is a usage error."""
        result = _invoke(config_file, "purge", "soon")

        assert result.exit_code == 2

    def test_clear_with_yes(self, config_file: Path, cache_dir: Path, workspace: Path) -> None:
        """clear --yes empties the cache."""
        _seed(cache_dir, "a", 1, workspace)

        result = _invoke(config_file, "clear", "-y")

        assert result.exit_code == 0
        assert "Cache cleared" in result.output
        assert len(IndexStore(cache_dir).load()) == 0

    def test_clear_declined(self, config_file: Path, cache_dir: Path, workspace: Path) -> None:
        """Declining the prompt keeps the cache."""
        _seed(cache_dir, "a", 1, workspace)

        result = _invoke(config_file, "clear", input="n\n")

        assert result.exit_code == 0
        assert len(IndexStore(cache_dir).load()) == 1


class TestBrowse:
    """Tests for vx list, info and stats."""

    def test_list_empty(self, config_file: Path) -> None:
        """An empty cache says so."""
        result = _invoke(config_file, "list")

        assert result.exit_code == 0
        assert "Cache is empty." in result.output

    def test_list_json(self, config_file: Path, cache_dir: Path, workspace: Path) -> None:
        """--json prints entries newest first with expiry deadlines."""
        _seed(cache_dir, "older", 5, workspace)
        _seed(cache_dir, "newer", 1, workspace)

        result = _invoke(config_file, "list", "--json")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [Path(item["original_path"]).name for item in data] == ["newer", "older"]
        assert all("expires_at" in item for item in data)

    def test_list_table(self, config_file: Path, cache_dir: Path, workspace: Path) -> None:
        """The table view shows the cached items."""
        _seed(cache_dir, "x", 1, workspace)

        result = _invoke(config_file, "list")

        assert result.exit_code == 0
        assert "Cached Items" in result.output

    def test_info(self, config_file: Path, cache_dir: Path, workspace: Path) -> None:
        """info shows details for matching items."""
        _seed(cache_dir, "thing", 1, workspace)

        result = _invoke(config_file, "info", "THING")

        assert result.exit_code == 0
        assert "present" in result.output

    def test_info_no_match(self, config_file: Path) -> None:
        """info exits with 1 when nothing matches."""
        result = _invoke(config_file, "info", "nothing")

        assert result.exit_code == 1

    def test_stats(self, config_file: Path, cache_dir: Path, workspace: Path) -> None:
        """stats shows aggregate figures."""
        _seed(cache_dir, "a", 20, workspace)
        _seed(cache_dir, "bb", 1, workspace)

        result = _invoke(config_file, "stats")

        assert result.exit_code == 0
        assert "Cache Statistics" in result.output
        assert "Expired" in result.output

    def test_corrupt_index(self, config_file: Path, cache_dir: Path) -> None:
        """A corrupt index is reported and exits with 1."""
        cache_dir.mkdir()
        (cache_dir / "index.json").write_text("{")

        result = _invoke(config_file, "list")

        assert result.exit_code == 1
        assert "corrupt" in result.output
