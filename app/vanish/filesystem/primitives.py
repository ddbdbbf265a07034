"""Symlink-aware filesystem primitives.

Provides probing, moving, restoring, copying and removal of files,
directories and symbolic links. Symbolic links are never followed: they
are recreated as links wherever they appear.

Standard library ``OSError``s are translated into the vanish exception
hierarchy at this boundary.
"""

import errno
import logging
import os
import shutil
import stat
from pathlib import Path

from vanish.core.errors import (
    AlreadyExistsError,
    IncompleteRemovalError,
    NotFoundError,
    PermissionDeniedError,
    SymlinkError,
    TransferError,
    VanishError,
)
from vanish.models.entry import PendingItem

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 1024 * 1024


def _translate(e: OSError, message: str) -> VanishError:
    """Map an OSError to the matching vanish exception."""
    if isinstance(e, FileNotFoundError):
        return NotFoundError(f"{message}: {e}")
    if isinstance(e, PermissionError):
        return PermissionDeniedError(f"{message}: {e}")
    if isinstance(e, FileExistsError):
        return AlreadyExistsError(f"{message}: {e}")
    return TransferError(f"{message}: {e}")


def _lstat(path: str) -> os.stat_result:
    try:
        return os.lstat(path)
    except OSError as e:
        raise _translate(e, f"Cannot access {path}") from e


def read_link(path: str) -> str:
    """Return the target of a symbolic link.

    Raises:
        SymlinkError: If the link cannot be read.
    """
    try:
        return os.readlink(path)
    except OSError as e:
        raise SymlinkError(f"Failed to read symlink {path}: {e}") from e


def directory_stats(path: str) -> tuple[int, int]:
    """Compute the recursive size and entry count of a directory.

    Symlinks are counted but not traversed. Unreadable children are
    skipped, so both values are advisory.

    Args:
        path: Directory to measure.

    Returns:
        Tuple of (size in bytes of all non-directory entries, number of
        entries below ``path``).
    """
    size = 0
    count = 0
    for root, dirs, files in os.walk(path, followlinks=False):
        for name in dirs + files:
            count += 1
            try:
                st = os.lstat(os.path.join(root, name))
            except OSError:
                continue
            if not stat.S_ISDIR(st.st_mode):
                size += st.st_size
    return size, count


def probe(path: str) -> PendingItem:
    """Probe a path without following symlinks.

    Directories additionally report their recursive size and entry count.

    Args:
        path: Path to inspect.

    Returns:
        PendingItem describing the path. ``exists`` is False (with an
        ``error`` message) if the path cannot be stat'ed.
    """
    try:
        st = os.lstat(path)
    except FileNotFoundError:
        return PendingItem(path=path, exists=False, error="does not exist")
    except OSError as e:
        return PendingItem(path=path, exists=False, error=e.strerror or str(e))

    if stat.S_ISLNK(st.st_mode):
        return PendingItem(path=path, exists=True, is_symlink=True, size_bytes=st.st_size)

    if stat.S_ISDIR(st.st_mode):
        size, count = directory_stats(path)
        return PendingItem(
            path=path,
            exists=True,
            is_directory=True,
            size_bytes=size,
            child_count=count,
        )

    return PendingItem(path=path, exists=True, size_bytes=st.st_size)


def copy_file(src: str, dst: str) -> None:
    """Copy a regular file byte for byte and propagate its mode.

    The destination is created exclusively: an existing ``dst`` is never
    overwritten.

    Raises:
        AlreadyExistsError: If ``dst`` already exists.
        NotFoundError: If ``src`` does not exist.
        PermissionDeniedError: If access is denied.
        TransferError: On any other I/O failure.
    """
    try:
        with open(src, "rb") as fsrc, open(dst, "xb") as fdst:
            shutil.copyfileobj(fsrc, fdst, COPY_CHUNK_SIZE)
        shutil.copymode(src, dst)
    except OSError as e:
        raise _translate(e, f"Failed to copy {src} to {dst}") from e


def copy_symlink(src: str, dst: str) -> str:
    """Recreate the symlink ``src`` at ``dst``.

    Returns:
        The link target.

    Raises:
        SymlinkError: If the link cannot be read or recreated.
        AlreadyExistsError: If ``dst`` already exists.
    """
    target = read_link(src)

    try:
        os.symlink(target, dst)
    except FileExistsError as e:
        raise AlreadyExistsError(f"Destination already exists: {dst}") from e
    except OSError as e:
        raise SymlinkError(f"Failed to create symlink {dst}: {e}") from e
    return target


def copy_tree(src: str, dst: str) -> None:
    """Recursively copy a directory tree.

    Symlinks are copied as symlinks, regular files via :func:`copy_file`,
    and directory modes are preserved. Modes are applied after a
    directory's contents are written so read-only directories copy too.

    Raises:
        VanishError: Any subclass, depending on the failing step.
    """
    try:
        os.mkdir(dst)
        with os.scandir(src) as it:
            children = list(it)
    except OSError as e:
        raise _translate(e, f"Failed to copy directory {src} to {dst}") from e

    for child in children:
        target = os.path.join(dst, child.name)
        if child.is_symlink():
            copy_symlink(child.path, target)
        elif child.is_dir(follow_symlinks=False):
            copy_tree(child.path, target)
        else:
            copy_file(child.path, target)

    try:
        shutil.copymode(src, dst)
    except OSError as e:
        raise _translate(e, f"Failed to copy mode of {src}") from e


def _move_symlink(src: str, dst: str) -> None:
    copy_symlink(src, dst)
    try:
        os.remove(src)
    except OSError as e:
        raise SymlinkError(f"Failed to remove original symlink {src}: {e}") from e


def _move_file(src: str, dst: str) -> None:
    copy_file(src, dst)
    try:
        os.remove(src)
    except OSError as e:
        raise _translate(e, f"Copied {src} but failed to remove it") from e


def _move_directory(src: str, dst: str) -> None:
    try:
        os.rename(src, dst)
        return
    except OSError as e:
        if e.errno == errno.EXDEV:
            logger.debug("Cross-filesystem move of %s, copying instead", src)
        else:
            logger.debug("Rename of %s failed (%s), copying instead", src, e)

    if os.path.lexists(dst):
        raise AlreadyExistsError(f"Destination already exists: {dst}")

    try:
        copy_tree(src, dst)
    except VanishError:
        _discard_partial(dst)
        raise

    try:
        shutil.rmtree(src)
    except OSError as e:
        # dst is now the only complete copy; keep it.
        msg = f"Copied {src} to {dst} but failed to remove the source: {e}"
        raise IncompleteRemovalError(msg, destination=dst) from e


def _discard_partial(path: str) -> None:
    """Remove a partially written copy after a failed transfer."""
    if not os.path.lexists(path):
        return
    try:
        remove_object(path)
    except VanishError as e:
        logger.warning("Could not remove partial copy %s: %s", path, e)


def move_object(src: str, dst: str) -> None:
    """Move a file, directory or symlink to ``dst``.

    Dispatches by type:
    - Symlinks are recreated at ``dst`` and the original link removed.
    - Regular files are copied with their mode, then removed.
    - Directories are renamed atomically when possible; if the rename
      fails (e.g. across filesystems) the tree is copied and the source
      removed.

    Args:
        src: Existing path to move.
        dst: Destination path, which must not exist.

    Raises:
        NotFoundError: If ``src`` vanished.
        PermissionDeniedError: If access is denied.
        SymlinkError: If a symlink cannot be read or recreated.
        AlreadyExistsError: If ``dst`` is occupied.
        IncompleteRemovalError: If a directory was copied to ``dst`` but
            the source could only be partly removed.
        TransferError: On any other failure.
    """
    mode = _lstat(src).st_mode

    if stat.S_ISDIR(mode):
        _move_directory(src, dst)
    else:
        try:
            if stat.S_ISLNK(mode):
                _move_symlink(src, dst)
            else:
                _move_file(src, dst)
        except AlreadyExistsError:
            raise
        except VanishError:
            # Source is still in place; drop whatever reached dst.
            _discard_partial(dst)
            raise

    logger.debug("Moved %s -> %s", src, dst)


def restore_object(src: str, dst: str) -> None:
    """Move a cached object back out of the cache.

    Uses the same per-type dispatch as :func:`move_object`. Missing
    parent directories of ``dst`` are created. The destination is checked
    again right before writing, but without any lock.

    Args:
        src: Cached object path.
        dst: Restore destination.

    Raises:
        AlreadyExistsError: If ``dst`` is occupied at restore time.
        NotFoundError: If the cached object is missing.
        VanishError: Any other failure from :func:`move_object`.
    """
    if not os.path.lexists(src):
        raise NotFoundError(f"Cached object not found: {src}")

    parent = Path(dst).parent
    try:
        parent.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as e:
        raise _translate(e, f"Failed to create directory {parent}") from e

    if os.path.lexists(dst):
        raise AlreadyExistsError(f"Destination already exists: {dst}")

    move_object(src, dst)


def remove_object(path: str) -> bool:
    """Permanently remove a file, symlink or directory tree.

    Args:
        path: Path to remove. Symlinks are removed, never followed.

    Returns:
        True if something was removed, False if the path did not exist.

    Raises:
        PermissionDeniedError: If access is denied.
        TransferError: On any other failure.
    """
    try:
        mode = os.lstat(path).st_mode
        if stat.S_ISDIR(mode):
            shutil.rmtree(path)
        else:
            os.remove(path)
    except FileNotFoundError:
        return False
    except OSError as e:
        raise _translate(e, f"Failed to remove {path}") from e
    return True
