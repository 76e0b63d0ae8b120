"""Rotating, timezone-aware file logging."""

from logrotor.config import RotationConfig, load_config
from logrotor.errors import ConfigError, LogrotorError, RetentionError, SetupError, WriteError
from logrotor.logger import Logger, initialize_from_config, setup_logger
from logrotor.writer import RotatingFileWriter

__all__ = [
    "ConfigError",
    "Logger",
    "LogrotorError",
    "RetentionError",
    "RotatingFileWriter",
    "RotationConfig",
    "SetupError",
    "WriteError",
    "initialize_from_config",
    "load_config",
    "setup_logger",
]
