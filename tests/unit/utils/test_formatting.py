"""Unit tests for console formatting helpers."""

import pytest
from vanish.utils.formatting import format_size, print_error, print_warning


class TestFormatSize:
    """Tests for format_size."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (None, "0 B"),
            (0, "0 B"),
            (512, "512 B"),
            (1536, "1.5 KB"),
            (5 * 1024 * 1024, "5.0 MB"),
            (3 * 1024**4, "3.0 TB"),
        ],
    )
    def test_format(self, size: int | None, expected: str) -> None:
        """Sizes use binary units with one decimal."""
        assert format_size(size) == expected


class TestMessages:
    """Tests for the print helpers."""

    def test_errors_and_warnings_go_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Errors and warnings are written to stderr with a prefix."""
        print_error("boom")
        print_warning("careful")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Error: boom" in captured.err
        assert "Warning: careful" in captured.err
