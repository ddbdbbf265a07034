"""Exception hierarchy for vanish.

All errors raised by the cache engine derive from :class:`VanishError`
so that callers can handle engine failures separately from programming
errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vanish.models.entry import CacheEntry


class VanishError(Exception):
    """Base exception for all cache engine errors."""


class NotFoundError(VanishError):
    """Raised when a source path or cached payload does not exist."""


class PermissionDeniedError(VanishError):
    """Raised when the operating system refuses access to a path."""


class AlreadyExistsError(VanishError):
    """Raised when a restore destination is occupied at restore time."""


class SymlinkError(VanishError):
    """Raised when a symbolic link cannot be read or recreated."""


class TransferError(VanishError):
    """Raised when moving or copying an object fails for another reason."""


class IncompleteRemovalError(TransferError):
    """Raised when an object was copied but its source was only partly removed.

    The copy at ``destination`` is complete and is the only full version
    of the data; it must not be discarded.

    Attributes:
        destination: Path of the complete copy.
        entry: Index entry tracking the copy, once it has been recorded.
    """

    def __init__(self, message: str, destination: str, entry: CacheEntry | None = None) -> None:
        super().__init__(message)
        self.destination = destination
        self.entry = entry


class InvalidArgumentError(VanishError):
    """Raised for invalid caller input, such as a non-positive purge window."""


class CacheDirectoryError(VanishError):
    """Raised when the cache directory cannot be created or removed."""


class IndexStoreError(VanishError):
    """Raised when the index document cannot be read or written."""


class IndexCorruptError(IndexStoreError):
    """Raised when the index document cannot be parsed."""


class ConfigError(VanishError):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested config file does not exist."""


class ConfigParseError(ConfigError):
    """Raised when the config file is not valid TOML."""


@dataclass(frozen=True, slots=True)
class ItemFailure:
    """A single item that could not be processed within a batch.

    Attributes:
        path: Path the failure relates to.
        error: Human-readable reason.
    """

    path: str
    error: str


class PartialFailureError(VanishError):
    """Raised when some items of a batch failed while others succeeded.

    Attributes:
        failures: Per-item failures in processing order.
    """

    def __init__(self, message: str, failures: list[ItemFailure]) -> None:
        super().__init__(message)
        self.failures = failures
