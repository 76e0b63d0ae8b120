"""Timestamped line logger on top of RotatingFileWriter."""

import logging
import os
from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from logrotor.config import RotationConfig, load_config
from logrotor.errors import SetupError, WriteError
from logrotor.writer import RotatingFileWriter

logger = logging.getLogger(__name__)

LINE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_timezone(name: str) -> tzinfo:
    """Return the tzinfo for an IANA zone name.

    ``""`` and ``"UTC"`` are UTC and ``"Local"`` is the host zone. Unknown
    names fall back to UTC with a warning only, so a typo in the config
    silently yields UTC timestamps.
    """
    if name in ("", "UTC"):
        return timezone.utc
    if name == "Local":
        return datetime.now().astimezone().tzinfo
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        logger.warning("Unknown timezone %r, falling back to UTC: %s", name, e)
        return timezone.utc


def log_file_name(now: datetime, tz: tzinfo) -> str:
    return now.astimezone(tz).strftime("log_%Y%m%d.txt")


class Logger:
    """Writes ``[YYYY-MM-DD HH:MM:SS] -- message`` lines to a rotating file.

    The active file name is fixed at construction from the date in the
    configured timezone and does not follow later date changes.
    """

    def __init__(self, config: RotationConfig, time_func=None):
        self._config = config
        self._time_func = time_func or (lambda: datetime.now(timezone.utc))
        self._tz = resolve_timezone(config.timezone)

        try:
            os.makedirs(config.log_dir, mode=0o777, exist_ok=True)
        except OSError as e:
            raise SetupError(f"cannot create log directory {config.log_dir}: {e}") from e

        path = os.path.join(config.log_dir, log_file_name(self._time_func(), self._tz))
        self._writer = RotatingFileWriter(
            path,
            max_size_bytes=config.max_size_bytes,
            max_backups=config.max_backups,
            max_age_days=config.max_age_days,
            compress=config.compress,
            time_func=self._time_func,
        )

    @property
    def config(self) -> RotationConfig:
        return self._config

    @property
    def filename(self) -> str:
        return self._writer.filename

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def format_line(self, fmt: str, *args) -> str:
        now = self._time_func().astimezone(self._tz)
        if args:
            try:
                message = fmt % args
            except (TypeError, ValueError, KeyError) as e:
                logger.error("Bad log format %r: %s", fmt, e)
                message = f"{fmt} {args!r}"
        else:
            message = fmt
        return f"[{now.strftime(LINE_TIME_FORMAT)}] -- {message}\n"

    def logf(self, fmt: str, *args):
        """Log a %-formatted message. Write failures are reported, never raised.

        Without *args* the template is written as is, so ``logf("100%%")``
        logs ``100%%``. Characters UTF-8 cannot encode, such as the lone
        surrogates left by undecodable input, are written backslash-escaped.
        """
        line = self.format_line(fmt, *args)
        try:
            self._writer.write(line.encode("utf-8", errors="backslashreplace"))
        except WriteError as e:
            logger.error("Error writing log: %s", e)

    def write(self, data: bytes | str) -> int:
        return self._writer.write(data)

    def rotate(self) -> str:
        return self._writer.rotate()

    def close(self):
        self._writer.close()


def setup_logger(config: RotationConfig, time_func=None) -> Logger:
    """Create the log directory and return a Logger for *config*."""
    return Logger(config, time_func=time_func)


def initialize_from_config(path: str) -> Logger:
    """Load the config file at *path* and return a ready Logger."""
    return setup_logger(load_config(path))
