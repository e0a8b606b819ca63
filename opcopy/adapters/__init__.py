"""Storage operator implementations for concrete backends."""

from opcopy.protocols import ByteSinkProtocol, StorageOperatorProtocol

from .filesystem_operator import FilesystemOperator, create_filesystem_operator
from .memory_operator import MemoryOperator, create_memory_operator


__all__ = [
    "ByteSinkProtocol",
    "StorageOperatorProtocol",
    "FilesystemOperator",
    "create_filesystem_operator",
    "MemoryOperator",
    "create_memory_operator",
]
