"""XDG-compliant path management for vanish.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and cache storage.

XDG defaults:
- Config: ~/.config/vanish/
- Cache: ~/.cache/vanish/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "vanish"

# Environment variable pointing at an alternative config file
CONFIG_ENV_VAR = "VANISH_CONFIG"

INDEX_FILENAME = "index.json"
LOG_FILENAME = "vanish.log"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/vanish/ (or XDG_CONFIG_HOME/vanish/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_cache_dir() -> Path:
    """Get the default cache directory path.

    This is where soft-deleted objects and the index live unless the
    configuration points somewhere else.

    Returns:
        Path to ~/.cache/vanish/ (or XDG_CACHE_HOME/vanish/).
    """
    return _get_xdg_dir("XDG_CACHE_HOME", ".cache")


def get_log_dir() -> Path:
    """Get the default operation log directory.

    Returns:
        Path to the ``logs`` directory inside the default cache directory.
    """
    return get_cache_dir() / "logs"


def get_config_path() -> Path:
    """Get the config file path.

    ``VANISH_CONFIG`` takes precedence over the XDG location.

    Returns:
        Path to ~/.config/vanish/vanish.toml (or the override).
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return expand_path(override)
    return get_config_dir() / "vanish.toml"


def get_index_path(cache_dir: Path) -> Path:
    """Get the index document path inside a cache directory."""
    return cache_dir / INDEX_FILENAME


def expand_path(path: str | Path) -> Path:
    """Expand a configured path to an absolute path.

    ``~`` prefixes are expanded, relative paths are joined onto the home
    directory and absolute paths are returned unchanged.

    Args:
        path: Path as written in configuration.

    Returns:
        Absolute path.
    """
    expanded = Path(path).expanduser()
    if not expanded.is_absolute():
        return Path.home() / expanded
    return expanded


def ensure_dir(path: Path, name: str, mode: int = 0o755) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.
        mode: Permission bits for newly created directories.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(mode=mode, parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path

