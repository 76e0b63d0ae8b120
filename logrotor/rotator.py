"""Post-rotation operations: backup naming, retention enforcement, and compression."""

import gzip
import logging
import os
import re
import shutil
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from logrotor.errors import RetentionError

logger = logging.getLogger(__name__)

COMPRESS_SUFFIX = ".gz"
_STAMP_RE = re.compile(r"^(\d{14})\.(\d{9})$")
_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class BackupFile:
    name: str
    stamp: str  # fixed width, sorts lexicographically in time order
    timestamp: datetime
    compressed: bool


def format_rotation_timestamp(when: datetime, extra_ns: int = 0) -> str:
    """Render *when* (plus *extra_ns* nanoseconds) as ``YYYYMMDDHHMMSS.nnnnnnnnn`` in UTC."""
    utc = when.astimezone(timezone.utc)
    carry, nanos = divmod(utc.microsecond * 1000 + extra_ns, 1_000_000_000)
    base = utc.replace(microsecond=0) + timedelta(seconds=carry)
    return base.strftime("%Y%m%d%H%M%S") + f".{nanos:09d}"


def _split_name(filename: str) -> tuple[str, str]:
    stem, ext = os.path.splitext(os.path.basename(filename))
    return stem + "-", ext


def backup_name(filename: str, when: datetime, extra_ns: int = 0) -> str:
    """Backup path for *filename* rotated at *when*.

    ``logs/log_20240101.txt`` -> ``logs/log_20240101-20240101153045.123456000.txt``
    """
    prefix, ext = _split_name(filename)
    stamp = format_rotation_timestamp(when, extra_ns)
    return os.path.join(os.path.dirname(filename), f"{prefix}{stamp}{ext}")


def _parse_stamp(stamp: str) -> datetime | None:
    match = _STAMP_RE.match(stamp)
    if not match:
        return None
    try:
        base = datetime.strptime(match.group(1), "%Y%m%d%H%M%S")
    except ValueError:
        return None
    micros = int(match.group(2)) // 1000
    return base.replace(microsecond=micros, tzinfo=timezone.utc)


def _extract_stamp(name: str, filename: str) -> tuple[str, bool] | None:
    prefix, ext = _split_name(filename)
    if not name.startswith(prefix):
        return None
    compressed = name.endswith(COMPRESS_SUFFIX)
    core = name[: -len(COMPRESS_SUFFIX)] if compressed else name
    if ext:
        if not core.endswith(ext):
            return None
        core = core[: -len(ext)]
    return core[len(prefix):], compressed


def parse_rotation_timestamp(name: str, filename: str) -> datetime | None:
    """Extract the UTC rotation timestamp from a backup name. Returns None on failure."""
    extracted = _extract_stamp(name, filename)
    if extracted is None:
        return None
    return _parse_stamp(extracted[0])


def list_backups(filename: str) -> list[BackupFile]:
    """List backups of *filename* in its directory, newest first."""
    log_dir = os.path.dirname(filename) or "."
    active = os.path.basename(filename)
    backups = []
    try:
        names = os.listdir(log_dir)
    except FileNotFoundError:
        return []
    for name in names:
        if name == active:
            continue
        extracted = _extract_stamp(name, filename)
        if extracted is None:
            continue
        stamp, compressed = extracted
        ts = _parse_stamp(stamp)
        if ts is None:
            continue
        backups.append(BackupFile(name=name, stamp=stamp, timestamp=ts, compressed=compressed))
    backups.sort(key=lambda b: (b.stamp, b.compressed), reverse=True)
    return backups


def _remove(path: str):
    try:
        os.remove(path)
    except OSError as e:
        raise RetentionError(f"cannot remove {path}: {e}") from e


def enforce_retention(filename: str, max_backups: int, max_age_days: int,
                      now: datetime | None = None) -> list[str]:
    """Delete backups beyond *max_backups* or older than *max_age_days*.

    A limit of 0 disables that check. A backup survives only if it passes both.
    A plain file and its ``.gz`` twin count as one backup. Returns deleted names.
    """
    if max_backups <= 0 and max_age_days <= 0:
        return []

    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=max_age_days)
    log_dir = os.path.dirname(filename)
    deleted = []
    kept = []

    for backup in list_backups(filename):
        too_old = max_age_days > 0 and backup.timestamp < cutoff
        if not too_old and backup.stamp in kept:
            continue
        over_count = max_backups > 0 and len(kept) >= max_backups
        if not too_old and not over_count:
            kept.append(backup.stamp)
            continue
        try:
            _remove(os.path.join(log_dir, backup.name))
        except RetentionError as e:
            logger.warning("Retention: %s", e)
            continue
        deleted.append(backup.name)

    return deleted


def compress_file(filepath: str) -> str:
    """Gzip-compress a file in place, streaming. Returns the .gz path.

    The original is removed only once every byte has been written and the
    gzip stream is closed. On failure the partial .gz is removed and the
    original is left untouched.
    """
    gz_path = filepath + COMPRESS_SUFFIX
    try:
        expected = os.path.getsize(filepath)
        copied = 0
        with open(filepath, "rb") as f_in, gzip.open(gz_path, "wb") as f_out:
            for chunk in iter(lambda: f_in.read(_CHUNK_SIZE), b""):
                f_out.write(chunk)
                copied += len(chunk)
        if copied != expected:
            raise RetentionError(
                f"short compression of {filepath}: {copied} of {expected} bytes"
            )
        shutil.copymode(filepath, gz_path)
    except (OSError, RetentionError) as e:
        if os.path.exists(gz_path):
            _remove(gz_path)
        if isinstance(e, RetentionError):
            raise
        raise RetentionError(f"cannot compress {filepath}: {e}") from e

    _remove(filepath)
    return gz_path


def compress_backups(filename: str) -> list[str]:
    """Compress every uncompressed backup of *filename*. Returns the new .gz paths.

    Failures are logged and the plain backup stays in place.
    """
    log_dir = os.path.dirname(filename)
    compressed = []
    for backup in list_backups(filename):
        if backup.compressed:
            continue
        try:
            compressed.append(compress_file(os.path.join(log_dir, backup.name)))
        except RetentionError as e:
            logger.warning("Compression: %s", e)
    return compressed
