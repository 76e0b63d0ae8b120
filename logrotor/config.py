"""Configuration module: frozen dataclass loaded from a JSON (or YAML) file."""

import json
import logging
from dataclasses import dataclass

import yaml

from logrotor.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE_MB = 100
MEGABYTE = 1024 * 1024

# JSON key -> dataclass field
_KEYS = {
    "logDir": "log_dir",
    "maxsize": "max_size_mb",
    "maxbackups": "max_backups",
    "maxage": "max_age_days",
    "compress": "compress",
    "timezone": "timezone",
}


def _require_int(d: dict, key: str, default: int) -> int:
    value = d.get(key, default)
    # bool is an int subclass; true/false is never a valid size or count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    if value < 0:
        raise ConfigError(f"{key} must not be negative, got {value}")
    return value


def _require_str(d: dict, key: str, default: str) -> str:
    value = d.get(key, default)
    if not isinstance(value, str):
        raise ConfigError(f"{key} must be a string, got {value!r}")
    return value


@dataclass(frozen=True)
class RotationConfig:
    log_dir: str = "./logs"
    max_size_mb: int = DEFAULT_MAX_SIZE_MB
    max_backups: int = 0  # 0 = keep all
    max_age_days: int = 0  # 0 = keep forever
    compress: bool = False
    timezone: str = ""  # empty = UTC

    @property
    def max_size_bytes(self) -> int:
        """Rotation threshold in bytes. A size of 0 falls back to the 100 MB default."""
        return (self.max_size_mb or DEFAULT_MAX_SIZE_MB) * MEGABYTE

    @classmethod
    def from_dict(cls, d: dict) -> "RotationConfig":
        if not isinstance(d, dict):
            raise ConfigError(f"config must be an object, got {type(d).__name__}")

        compress = d.get("compress", cls.compress)
        if not isinstance(compress, bool):
            raise ConfigError(f"compress must be a boolean, got {compress!r}")

        log_dir = _require_str(d, "logDir", cls.log_dir)
        if not log_dir:
            raise ConfigError("logDir must not be empty")

        return cls(
            log_dir=log_dir,
            max_size_mb=_require_int(d, "maxsize", cls.max_size_mb),
            max_backups=_require_int(d, "maxbackups", cls.max_backups),
            max_age_days=_require_int(d, "maxage", cls.max_age_days),
            compress=compress,
            timezone=_require_str(d, "timezone", cls.timezone),
        )

    def to_dict(self) -> dict:
        return {key: getattr(self, attr) for key, attr in _KEYS.items()}


def load_config(path: str) -> RotationConfig:
    """Read and decode the config file at *path*.

    ``.yml``/``.yaml`` files are parsed as YAML, everything else as JSON.
    Open, decode, and validation failures are raised as :class:`ConfigError`.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.endswith((".yml", ".yaml")):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot decode config file {path}: {e}") from e

    config = RotationConfig.from_dict(data)
    logger.info("Loaded config from %s", path)
    return config
