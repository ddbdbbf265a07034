"""Unit tests for shared display helpers."""

from datetime import datetime, timedelta

import pytest
from rich.console import Console
from rich.theme import Theme
from vanish.cli.display import create_entries_table, entries_to_json, print_summary
from vanish.core.errors import ItemFailure
from vanish.engine.pipeline import Operation, PipelineState, PipelineSummary
from vanish.models.entry import CacheEntry
from vanish.utils.formatting import STYLES


def _entry(age_days: int) -> CacheEntry:
    return CacheEntry(
        id="1",
        original_path="/home/me/a.txt",
        delete_time=datetime.now().astimezone() - timedelta(days=age_days),
        cache_path="/cache/1-a.txt",
        size_bytes=2048,
    )


def _render(renderable: object) -> str:
    console = Console(theme=Theme(STYLES), width=200, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


class TestEntriesTable:
    """Tests for create_entries_table and entries_to_json."""

    def test_rows(self) -> None:
        """Each entry becomes one row with size and type."""
        text = _render(create_entries_table([_entry(1)], retention_days=10))

        assert "/home/me/a.txt" in text
        assert "2.0 KB" in text
        assert "file" in text

    def test_json_adds_expiry(self) -> None:
        """JSON output carries the entry fields plus expires_at."""
        entry = _entry(1)

        [data] = entries_to_json([entry], retention_days=3)

        assert data["id"] == "1"
        assert data["expires_at"] == entry.expires_at(3).isoformat()


class TestPrintSummary:
    """Tests for print_summary."""

    def test_done_with_skips(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Skipped items are listed next to the success count."""
        summary = PipelineSummary(
            operation=Operation.DELETE,
            state=PipelineState.DONE,
            processed_count=2,
            skipped=(ItemFailure(path="/x", error="does not exist"),),
            first_paths=("/a", "/b"),
            more_count=0,
        )

        print_summary(summary)

        out = capsys.readouterr()
        assert "Moved 2 item(s) to cache" in out.out
        assert "1 skipped" in out.out
        assert "does not exist" in out.out

    def test_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Errors are printed to stderr."""
        summary = PipelineSummary(
            operation=Operation.RESTORE,
            state=PipelineState.ERROR,
            processed_count=0,
            skipped=(),
            first_paths=(),
            more_count=0,
            error_message="No matching items found in cache for restoration",
        )

        print_summary(summary)

        assert "No matching items found" in capsys.readouterr().err

    def test_quiet_suppresses_success(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Quiet mode prints nothing for a clean run."""
        summary = PipelineSummary(
            operation=Operation.PURGE,
            state=PipelineState.DONE,
            processed_count=3,
            skipped=(),
            first_paths=(),
            more_count=0,
        )

        print_summary(summary, quiet=True)

        assert capsys.readouterr().out == ""
