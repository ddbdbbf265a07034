"""Append-only operation log.

Writes one human-readable line per cache event to
``<logging.directory>/vanish.log``:

    2026-01-02 15:04:05 [FILE] DELETE: /home/me/a.txt -> /home/me/.cache/vanish/...
    2026-01-02 15:04:09 [CLEAR_ALL] Cache cleared

Failures to write are reported through :mod:`logging` and never abort
the operation being logged.
"""

import logging
from datetime import datetime
from pathlib import Path

from vanish.core.paths import LOG_FILENAME
from vanish.models.entry import CacheEntry

logger = logging.getLogger(__name__)

LOG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class OperationLog:
    """Append-only text log of cache operations.

    Attributes:
        enabled: Whether lines are written at all.
        log_dir: Directory containing the log file.
    """

    def __init__(self, log_dir: Path, enabled: bool = True) -> None:
        self._log_dir = log_dir
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def log_path(self) -> Path:
        """Path to the log file."""
        return self._log_dir / LOG_FILENAME

    def record(self, operation: str, entry: CacheEntry) -> bool:
        """Log an event that concerns a single cache entry.

        Args:
            operation: Event name (DELETE, RESTORE, PURGE, CLEANUP).
            entry: Entry the event applies to.

        Returns:
            True if the line was written.
        """
        label = entry.item_type.log_label
        return self._write(f"[{label}] {operation}: {entry.original_path} -> {entry.cache_path}")

    def record_simple(self, operation: str, message: str) -> bool:
        """Log an event that is not tied to one entry.

        Args:
            operation: Event name (e.g. CLEAR_ALL, ERROR).
            message: Free-form description.

        Returns:
            True if the line was written.
        """
        return self._write(f"[{operation}] {message}")

    def _write(self, body: str) -> bool:
        if not self._enabled:
            return False

        line = f"{datetime.now().strftime(LOG_TIME_FORMAT)} {body}\n"
        try:
            self._log_dir.mkdir(parents=True, exist_ok=True)
            with self.log_path.open(mode="a", encoding="utf-8") as f:
                f.write(line)
                f.flush()
        except OSError as e:
            logger.warning("Failed to write operation log %s: %s", self.log_path, e)
            return False
        return True
