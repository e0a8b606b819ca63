"""Error taxonomy for opcopy.

Every failure raised by the copy and listing engine is a ``StorageError``
carrying an ``ErrorKind``. Callers inspect the kind, never the backend that
raised it.
"""

from enum import Enum
from typing import Any


class OpcopyError(Exception):
    """Base exception for all opcopy errors."""


class ConfigError(OpcopyError):
    """Configuration could not be loaded or validated."""


class ErrorKind(str, Enum):
    """Kinds shared by every storage backend."""

    NOT_FOUND = "NotFound"
    UNSUPPORTED = "Unsupported"
    NOT_A_DIRECTORY = "NotADirectory"
    IS_A_DIRECTORY = "IsADirectory"
    PERMISSION_DENIED = "PermissionDenied"
    ALREADY_EXISTS = "AlreadyExists"
    CONFIG_INVALID = "ConfigInvalid"
    UNEXPECTED = "Unexpected"

    @property
    def status_code(self) -> int:
        """HTTP-style status code for hosts that report errors that way."""
        return _STATUS_CODES.get(self, 500)


_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.UNSUPPORTED: 501,
    ErrorKind.CONFIG_INVALID: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.IS_A_DIRECTORY: 422,
    ErrorKind.NOT_A_DIRECTORY: 422,
    ErrorKind.ALREADY_EXISTS: 409,
}


class StorageError(OpcopyError):
    """A storage operation failed.

    Attributes:
        kind: Error kind from the shared taxonomy
        message: Human readable description
        context: Ordered key/value pairs naming the operation and paths involved
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.context: dict[str, str] = {
            key: str(value) for key, value in (context or {}).items()
        }
        super().__init__(self._render())

    def with_context(self, key: str, value: Any) -> "StorageError":
        """Attach a context value, keeping any value already present."""
        self.context.setdefault(key, str(value))
        self.args = (self._render(),)
        return self

    def _render(self) -> str:
        if not self.context:
            return f"{self.kind.value} => {self.message}"
        pairs = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.kind.value} ({pairs}) => {self.message}"


def _kind_for_os_error(error: OSError) -> ErrorKind:
    if isinstance(error, FileNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(error, PermissionError):
        return ErrorKind.PERMISSION_DENIED
    if isinstance(error, FileExistsError):
        return ErrorKind.ALREADY_EXISTS
    if isinstance(error, IsADirectoryError):
        return ErrorKind.IS_A_DIRECTORY
    if isinstance(error, NotADirectoryError):
        return ErrorKind.NOT_A_DIRECTORY
    return ErrorKind.UNEXPECTED


def storage_error_from_os_error(
    error: OSError, operation: str, path: str, **context: Any
) -> StorageError:
    """Create a StorageError from a low-level OS error.

    Args:
        error: The OS error raised by the backend
        operation: Name of the operation that failed
        path: Path the operation was acting on
        **context: Extra context values

    Returns:
        StorageError with the matching kind; chain it with ``raise ... from``
    """
    message = error.strerror or str(error) or type(error).__name__
    return StorageError(
        _kind_for_os_error(error),
        message,
        {"operation": operation, "path": path, **context},
    )


__all__ = [
    "ConfigError",
    "ErrorKind",
    "OpcopyError",
    "StorageError",
    "storage_error_from_os_error",
]
