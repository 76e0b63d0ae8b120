"""Append-only log writer with size-based rotation, retention, and compression."""

import logging
import os
import stat
import threading
from datetime import datetime, timezone

from logrotor.errors import WriteError
from logrotor.rotator import (
    COMPRESS_SUFFIX,
    backup_name,
    compress_backups,
    enforce_retention,
)

logger = logging.getLogger(__name__)


class RotatingFileWriter:
    """Thread-safe writer for one active file.

    Before a write that would push the file past *max_size_bytes*, the file is
    renamed to a timestamped backup and a fresh one is started. Backups are
    then pruned by count and age and, if enabled, gzip-compressed. A write
    larger than the threshold still lands whole in a fresh file.
    """

    def __init__(self, filename: str, max_size_bytes: int, max_backups: int = 0,
                 max_age_days: int = 0, compress: bool = False, time_func=None):
        self._filename = filename
        self._max_size = max_size_bytes
        self._max_backups = max_backups
        self._max_age_days = max_age_days
        self._compress = compress
        self._time_func = time_func or (lambda: datetime.now(timezone.utc))
        self._lock = threading.Lock()
        self._file = None
        self._size = 0
        self._last_backup = None  # (when, tick, name) of the latest backup

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def size(self) -> int:
        with self._lock:
            return self._size

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _open_new(self, mode: int | None = None):
        log_dir = os.path.dirname(self._filename)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        self._file = open(self._filename, "wb")
        self._size = 0
        if mode is not None:
            os.chmod(self._filename, mode)

    def _open_existing_or_new(self, write_len: int):
        try:
            st = os.stat(self._filename)
        except FileNotFoundError:
            self._open_new()
            return
        if st.st_size > 0 and st.st_size + write_len > self._max_size:
            self._rotate()
            return
        self._file = open(self._filename, "ab")
        self._size = st.st_size

    def _close(self):
        f, self._file = self._file, None
        if f is not None and not f.closed:
            f.close()

    def _next_backup_name(self) -> str:
        now = self._time_func()
        tick = 0
        path = backup_name(self._filename, now)
        # Backup names share prefix and extension, so they compare in stamp order.
        # A clock that stepped back continues from the last stamp instead.
        if self._last_backup is not None and os.path.basename(path) <= self._last_backup[2]:
            now, tick = self._last_backup[0], self._last_backup[1] + 1
            path = backup_name(self._filename, now, tick)
        while os.path.exists(path) or os.path.exists(path + COMPRESS_SUFFIX):
            tick += 1
            path = backup_name(self._filename, now, tick)
        self._last_backup = (now, tick, os.path.basename(path))
        return path

    def _rotate(self) -> str:
        """Rename-and-create rotation. Returns the backup path, or "" if there was no file."""
        self._close()
        rotated_path = ""
        mode = None
        if os.path.exists(self._filename):
            mode = stat.S_IMODE(os.stat(self._filename).st_mode)
            rotated_path = self._next_backup_name()
            os.rename(self._filename, rotated_path)
            logger.info("Rotated: %s -> %s", self._filename, rotated_path)
        self._open_new(mode)
        if rotated_path:
            self._housekeep()
        return rotated_path

    def _housekeep(self):
        """Prune, then compress. Never fails the write that triggered it."""
        try:
            deleted = enforce_retention(
                self._filename, self._max_backups, self._max_age_days, self._time_func()
            )
            if deleted:
                logger.info("Purged %d backup(s): %s", len(deleted), ", ".join(deleted))
            if self._compress:
                for gz_path in compress_backups(self._filename):
                    logger.info("Compressed: %s", gz_path)
        except OSError as e:
            logger.warning("Housekeeping for %s failed: %s", self._filename, e)

    def write(self, data: bytes | str) -> int:
        """Append *data*, rotating first if it would overflow. Returns bytes written."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        with self._lock:
            try:
                if self._file is None:
                    self._open_existing_or_new(len(data))
                elif self._size > 0 and self._size + len(data) > self._max_size:
                    self._rotate()
                self._file.write(data)
                self._file.flush()
            except OSError as e:
                self._close_quietly()
                raise WriteError(f"cannot write to {self._filename}: {e}") from e
            self._size += len(data)
            return len(data)

    def rotate(self) -> str:
        """Force a rotation. Returns the backup path, or "" if there was no file."""
        with self._lock:
            try:
                return self._rotate()
            except OSError as e:
                self._close_quietly()
                raise WriteError(f"cannot rotate {self._filename}: {e}") from e

    def _close_quietly(self):
        # A failed handle is dropped so the next write reopens the file.
        try:
            self._close()
        except OSError as e:
            logger.warning("Error closing %s: %s", self._filename, e)

    def close(self):
        """Flush and close the active file. A later write reopens it."""
        with self._lock:
            try:
                self._close()
            except OSError as e:
                raise WriteError(f"cannot close {self._filename}: {e}") from e
