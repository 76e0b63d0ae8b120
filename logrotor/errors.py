"""Exception types raised by logrotor."""


class LogrotorError(Exception):
    """Base class for all logrotor errors."""


class ConfigError(LogrotorError):
    """Raised when the config file is missing, unreadable, malformed, or invalid."""


class SetupError(LogrotorError):
    """Raised when the log directory cannot be created."""


class WriteError(LogrotorError):
    """Raised when opening, rotating, or writing the active log file fails."""


class RetentionError(LogrotorError):
    """Raised when pruning or compressing a backup fails."""
