"""Protocol definitions for opcopy backends and interfaces.

This package provides standard Protocol classes that define the interfaces
the copy and listing engine depends on. These protocols use Python's
typing.Protocol system with the @runtime_checkable decorator to enable both
static type checking and runtime isinstance() checks.
"""

from .storage_operator_protocol import ByteSinkProtocol, StorageOperatorProtocol


__all__ = [
    "ByteSinkProtocol",
    "StorageOperatorProtocol",
]
