"""Configuration model and I/O.

The configuration is an explicit value that is loaded once by the CLI
and passed to every engine. It is stored as TOML:

    [cache]
    directory = ".cache/vanish"
    days = 10
    no_confirm = false

    [logging]
    enabled = true
    directory = ".cache/vanish/logs"

Relative paths are resolved against the home directory.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from vanish.core.errors import ConfigError, ConfigNotFoundError, ConfigParseError
from vanish.core.paths import (
    ensure_dir,
    expand_path,
    get_cache_dir,
    get_config_path,
    get_index_path,
    get_log_dir,
)

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 10


class CacheSettings(BaseModel):
    """Settings for the cache directory and retention policy.

    Attributes:
        directory: Directory holding cached objects and the index.
        days: Retention window in days for automatic cleanup.
        no_confirm: Skip confirmation prompts.
    """

    model_config = ConfigDict(extra="forbid")

    directory: Annotated[
        Path,
        Field(default_factory=get_cache_dir, description="Cache directory"),
    ]
    days: Annotated[
        int,
        Field(ge=1, description="Retention window in days"),
    ] = DEFAULT_RETENTION_DAYS
    no_confirm: Annotated[
        bool,
        Field(description="Skip confirmation prompts"),
    ] = False

    @field_validator("directory", mode="after")
    @classmethod
    def _expand_directory(cls, v: Path) -> Path:
        return expand_path(v)


class LoggingSettings(BaseModel):
    """Settings for the append-only operation log.

    Attributes:
        enabled: Whether operations are written to the log file.
        directory: Directory containing ``vanish.log``.
    """

    model_config = ConfigDict(extra="forbid")

    enabled: Annotated[
        bool,
        Field(description="Write operation log"),
    ] = True
    directory: Annotated[
        Path,
        Field(default_factory=get_log_dir, description="Operation log directory"),
    ]

    @field_validator("directory", mode="after")
    @classmethod
    def _expand_directory(cls, v: Path) -> Path:
        return expand_path(v)


class VanishConfig(BaseModel):
    """Resolved vanish configuration.

    Unknown top-level tables are ignored so that presentation settings
    (themes, colors) may live in the same file.
    """

    model_config = ConfigDict(extra="ignore")

    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def cache_dir(self) -> Path:
        """Absolute cache directory."""
        return self.cache.directory

    @property
    def index_path(self) -> Path:
        """Absolute path of the index document."""
        return get_index_path(self.cache.directory)

    @property
    def retention_days(self) -> int:
        """Retention window in days."""
        return self.cache.days

    @classmethod
    def for_cache_dir(
        cls,
        cache_dir: Path,
        days: int = DEFAULT_RETENTION_DAYS,
        logging_enabled: bool = False,
    ) -> "VanishConfig":
        """Build a configuration rooted at ``cache_dir``.

        The operation log lives in ``cache_dir/logs``.
        """
        return cls(
            cache=CacheSettings(directory=cache_dir, days=days),
            logging=LoggingSettings(enabled=logging_enabled, directory=cache_dir / "logs"),
        )


def load_config(path: Path | None = None, required: bool = False) -> VanishConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.
        required: Raise instead of returning defaults when the file is missing.

    Returns:
        Validated VanishConfig object.

    Raises:
        ConfigNotFoundError: If ``required`` and the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        if required:
            raise ConfigNotFoundError(f"Config not found: {config_path}")
        logger.debug("No config at %s, using defaults", config_path)
        return VanishConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return VanishConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def save_config(config: VanishConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The VanishConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    try:
        ensure_dir(config_path.parent, "config")
    except RuntimeError as e:
        raise ConfigError(str(e)) from e

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(_config_to_dict(config), f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def ensure_default_config(path: Path | None = None) -> Path | None:
    """Write a default config file if none exists yet.

    Args:
        path: Config file location. If None, uses the default config path.

    Returns:
        Path of the newly written file, or None if one already existed.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    if config_path.exists():
        return None
    written = save_config(VanishConfig(), config_path)
    logger.info("Created default config at %s", written)
    return written


def _config_to_dict(config: VanishConfig) -> dict[str, object]:
    """Convert VanishConfig to a dictionary for TOML serialization.

    Paths below the home directory are written relative to it.
    """
    return {
        "cache": {
            "directory": _home_relative(config.cache.directory),
            "days": config.cache.days,
            "no_confirm": config.cache.no_confirm,
        },
        "logging": {
            "enabled": config.logging.enabled,
            "directory": _home_relative(config.logging.directory),
        },
    }


def _home_relative(path: Path) -> str:
    try:
        return str(path.relative_to(Path.home()))
    except ValueError:
        return str(path)
