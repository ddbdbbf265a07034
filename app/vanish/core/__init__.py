"""Core infrastructure for vanish.

Configuration, paths, the index store, the operation log and the
exception hierarchy shared by every engine.
"""

from vanish.core.config import VanishConfig, load_config, save_config
from vanish.core.errors import (
    AlreadyExistsError,
    CacheDirectoryError,
    ConfigError,
    IncompleteRemovalError,
    IndexCorruptError,
    IndexStoreError,
    InvalidArgumentError,
    ItemFailure,
    NotFoundError,
    PartialFailureError,
    PermissionDeniedError,
    SymlinkError,
    TransferError,
    VanishError,
)
from vanish.core.index import IndexStore
from vanish.core.oplog import OperationLog

__all__ = [
    "AlreadyExistsError",
    "CacheDirectoryError",
    "ConfigError",
    "IncompleteRemovalError",
    "IndexCorruptError",
    "IndexStore",
    "IndexStoreError",
    "InvalidArgumentError",
    "ItemFailure",
    "NotFoundError",
    "OperationLog",
    "PartialFailureError",
    "PermissionDeniedError",
    "SymlinkError",
    "TransferError",
    "VanishConfig",
    "VanishError",
    "load_config",
    "save_config",
]
