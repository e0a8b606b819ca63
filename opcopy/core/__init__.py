from .errors import ConfigError, ErrorKind, OpcopyError, StorageError
from .logging import get_logger, setup_logging


__all__ = [
    "setup_logging",
    "get_logger",
    "OpcopyError",
    "ConfigError",
    "ErrorKind",
    "StorageError",
]
