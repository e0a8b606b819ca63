"""Build storage operators from URIs and named profiles.

A URI has the form ``<scheme>://<location>``. The default factory knows the
``memory`` and ``fs``/``file`` schemes; profiles map a name to a scheme plus
backend options so that ``<profile>://<location>`` can be resolved too.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from opcopy.adapters.filesystem_operator import (
    DEFAULT_CHUNK_SIZE as FILESYSTEM_CHUNK_SIZE,
)
from opcopy.adapters.filesystem_operator import FilesystemOperator
from opcopy.adapters.memory_operator import MemoryOperator
from opcopy.core.errors import ErrorKind, StorageError
from opcopy.protocols import StorageOperatorProtocol


logger = logging.getLogger(__name__)

OperatorBuilder = Callable[[str, Mapping[str, str]], StorageOperatorProtocol]


@runtime_checkable
class OperatorFactory(Protocol):
    """Anything that turns a URI into a storage operator."""

    def from_uri(self, uri: str) -> StorageOperatorProtocol:
        """Build the operator a URI designates.

        Raises:
            StorageError: Unsupported if the scheme is unknown to this factory,
                ConfigInvalid if the URI or its options are malformed
        """
        ...


def split_uri(uri: str) -> tuple[str, str]:
    """Split ``<scheme>://<location>`` into its scheme and location.

    Raises:
        StorageError: ConfigInvalid if the URI has no scheme
    """
    scheme, separator, location = uri.partition("://")
    if not separator or not scheme:
        raise StorageError(
            ErrorKind.CONFIG_INVALID,
            "Failed to parse uri",
            {"uri": uri},
        )
    return scheme.lower(), location


class DefaultOperatorFactory:
    """Factory backed by a registry of scheme builders.

    ``memory://<name>`` returns one shared operator per name for the lifetime
    of the factory, so data written through one URI can be read back through
    another. ``fs://<root>`` and ``file://<root>`` open the local filesystem.
    """

    def __init__(self, chunk_size: int = FILESYSTEM_CHUNK_SIZE) -> None:
        self.chunk_size = chunk_size
        self._memory_operators: dict[str, MemoryOperator] = {}
        self._builders: dict[str, OperatorBuilder] = {
            "memory": self._build_memory,
            "fs": self._build_filesystem,
            "file": self._build_filesystem,
        }

    @property
    def schemes(self) -> list[str]:
        """Registered schemes, sorted."""
        return sorted(self._builders)

    def register(self, scheme: str, builder: OperatorBuilder) -> None:
        """Register (or replace) the builder used for ``scheme``."""
        self._builders[scheme.lower()] = builder

    def from_uri(self, uri: str) -> StorageOperatorProtocol:
        scheme, location = split_uri(uri)
        return self.build(scheme, location, {})

    def build(
        self, scheme: str, location: str, options: Mapping[str, str]
    ) -> StorageOperatorProtocol:
        """Build an operator for ``scheme`` with explicit backend options."""
        builder = self._builders.get(scheme.lower())
        if builder is None:
            raise StorageError(
                ErrorKind.UNSUPPORTED,
                "Unsupported scheme",
                {"scheme": scheme},
            )
        logger.debug("Building %s operator for '%s'", scheme, location)
        return builder(location, options)

    def _build_memory(
        self, location: str, options: Mapping[str, str]
    ) -> MemoryOperator:
        name = location.strip("/") or options.get("name") or "memory"
        operator = self._memory_operators.get(name)
        if operator is None:
            operator = MemoryOperator(name=f"memory:{name}")
            self._memory_operators[name] = operator
        return operator

    def _build_filesystem(
        self, location: str, options: Mapping[str, str]
    ) -> FilesystemOperator:
        root = options.get("root") or location
        if options.get("root") and location:
            root = str(Path(options["root"]) / location)
        if not root:
            raise StorageError(
                ErrorKind.CONFIG_INVALID,
                "Missing 'root' for filesystem operator",
                {"scheme": "fs"},
            )

        chunk_size = self.chunk_size
        if "chunk_size" in options:
            try:
                chunk_size = int(options["chunk_size"])
            except ValueError as e:
                raise StorageError(
                    ErrorKind.CONFIG_INVALID,
                    "Invalid 'chunk_size' for filesystem operator",
                    {"chunk_size": options["chunk_size"]},
                ) from e
            if chunk_size <= 0:
                raise StorageError(
                    ErrorKind.CONFIG_INVALID,
                    "Invalid 'chunk_size' for filesystem operator",
                    {"chunk_size": chunk_size},
                )

        return FilesystemOperator(root, name=options.get("name"), chunk_size=chunk_size)


class ProfileOperatorFactory:
    """Resolve ``<profile>://<location>`` through named profiles.

    Each profile is a mapping whose ``type`` key names the backend scheme;
    the remaining keys are passed to the backend as options.
    """

    def __init__(
        self,
        profiles: Mapping[str, Mapping[str, str]],
        base: DefaultOperatorFactory | None = None,
    ) -> None:
        self.profiles = {name: dict(profile) for name, profile in profiles.items()}
        self.base = base or DefaultOperatorFactory()

    def from_uri(self, uri: str) -> StorageOperatorProtocol:
        profile_name, location = split_uri(uri)

        profile = self.profiles.get(profile_name)
        if profile is None:
            raise StorageError(
                ErrorKind.CONFIG_INVALID,
                "Profile not found",
                {"profile_name": profile_name},
            )

        scheme = profile.get("type")
        if not scheme:
            raise StorageError(
                ErrorKind.CONFIG_INVALID,
                "Missing 'type' in profile",
                {"profile_name": profile_name},
            )

        options = {key: value for key, value in profile.items() if key != "type"}
        options.setdefault("name", profile_name)
        logger.debug("Resolved profile %s to scheme %s", profile_name, scheme)
        return self.base.build(scheme, location, options)


class LambdaOperatorFactory:
    """Post-process every operator another factory builds."""

    def __init__(
        self,
        inner: OperatorFactory,
        fn: Callable[[StorageOperatorProtocol], StorageOperatorProtocol],
    ) -> None:
        self.inner = inner
        self.fn = fn

    def from_uri(self, uri: str) -> StorageOperatorProtocol:
        return self.fn(self.inner.from_uri(uri))


class ChainedOperatorFactory:
    """Try several factories in order.

    A factory declining with ``Unsupported`` passes the URI to the next one;
    any other outcome, success or failure, ends the search.
    """

    def __init__(self, factories: Sequence[OperatorFactory]) -> None:
        self.factories = list(factories)

    def from_uri(self, uri: str) -> StorageOperatorProtocol:
        for factory in self.factories:
            try:
                return factory.from_uri(uri)
            except StorageError as e:
                if e.kind is not ErrorKind.UNSUPPORTED:
                    raise
                logger.debug("%s declined %s", type(factory).__name__, uri)

        raise StorageError(
            ErrorKind.UNSUPPORTED,
            "No factory supports uri",
            {"uri": uri},
        )


def create_operator_factory(
    profiles: Mapping[str, Mapping[str, str]] | None = None,
    chunk_size: int = FILESYSTEM_CHUNK_SIZE,
) -> ChainedOperatorFactory:
    """Create the standard factory chain.

    Built-in schemes are tried first; a scheme they do not know is looked up
    as a profile name, so a missing profile reports ConfigInvalid.
    """
    base = DefaultOperatorFactory(chunk_size=chunk_size)
    return ChainedOperatorFactory(
        [base, ProfileOperatorFactory(profiles or {}, base=base)]
    )
