"""Unit tests for the main CLI application and global options."""

from pathlib import Path

from typer.testing import CliRunner
from vanish import __version__
from vanish.cli.main import app
from vanish.core.paths import get_config_path

runner = CliRunner()


class TestGlobalOptions:
    """Tests for the main callback."""

    def test_version(self) -> None:
        """--version prints the version and exits."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"vanish version {__version__}" in result.output

    def test_help_lists_commands(self) -> None:
        """--help lists every command."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("delete", "restore", "purge", "clear", "list", "info", "stats"):
            assert command in result.output

    def test_writes_default_config_on_first_run(self) -> None:
        """Without --config a default config file is created."""
        result = runner.invoke(app, ["path"])

        assert result.exit_code == 0
        assert get_config_path().exists()

    def test_explicit_config_must_exist(self, tmp_path: Path) -> None:
        """A missing --config file is an error."""
        result = runner.invoke(app, ["-c", str(tmp_path / "missing.toml"), "path"])

        assert result.exit_code == 1
        assert "Config not found" in result.output

    def test_invalid_config(self, tmp_path: Path) -> None:
        """An invalid config file is reported and exits with 1."""
        path = tmp_path / "bad.toml"
        path.write_text("[cache]\ndays = 0\n")

        result = runner.invoke(app, ["-c", str(path), "path"])

        assert result.exit_code == 1
        assert "Invalid config content" in result.output

    def test_verbose_accepted(self, tmp_path: Path) -> None:
        """--verbose enables debug logging without changing results."""
        result = runner.invoke(app, ["-v", "path"])

        assert result.exit_code == 0


class TestPathCommands:
    """Tests for path and config-path."""

    def test_path_prints_cache_dir(self, tmp_path: Path) -> None:
        """path prints the configured cache directory."""
        config = tmp_path / "vanish.toml"
        config.write_text(f'[cache]\ndirectory = "{tmp_path / "c"}"\n')

        result = runner.invoke(app, ["-c", str(config), "path"])

        assert result.output.strip() == str(tmp_path / "c")

    def test_config_path_default(self) -> None:
        """config-path prints the default location."""
        result = runner.invoke(app, ["config-path"])

        assert result.output.strip() == str(get_config_path())

    def test_config_path_explicit(self, tmp_path: Path) -> None:
        """config-path prints the --config file when given."""
        config = tmp_path / "vanish.toml"
        config.write_text("")

        result = runner.invoke(app, ["-c", str(config), "config-path"])

        assert result.output.strip() == str(config)
