"""Filesystem primitives for moving objects in and out of the cache.

This module provides symlink-aware probing, moving, restoring, copying
and removal of files, directories and symbolic links.
"""

from vanish.filesystem.primitives import (
    copy_file,
    copy_symlink,
    copy_tree,
    directory_stats,
    move_object,
    probe,
    read_link,
    remove_object,
    restore_object,
)

__all__ = [
    "copy_file",
    "copy_symlink",
    "copy_tree",
    "directory_stats",
    "move_object",
    "probe",
    "read_link",
    "remove_object",
    "restore_object",
]
