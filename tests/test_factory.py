"""Tests for operator factories."""

from pathlib import Path

import pytest

from opcopy.adapters import FilesystemOperator, MemoryOperator
from opcopy.core.errors import ErrorKind, StorageError
from opcopy.factory import (
    ChainedOperatorFactory,
    DefaultOperatorFactory,
    LambdaOperatorFactory,
    OperatorFactory,
    ProfileOperatorFactory,
    create_operator_factory,
    split_uri,
)


class TestSplitUri:
    """Test URI splitting."""

    def test_split(self):
        """Test scheme and location extraction."""
        assert split_uri("fs:///tmp/data") == ("fs", "/tmp/data")
        assert split_uri("Memory://bucket") == ("memory", "bucket")
        assert split_uri("archive://") == ("archive", "")

    @pytest.mark.parametrize("uri", ["/tmp/data", "://nothing", "fs:/tmp"])
    def test_invalid(self, uri):
        """Test that URIs without scheme are ConfigInvalid."""
        with pytest.raises(StorageError) as exc_info:
            split_uri(uri)

        assert exc_info.value.kind is ErrorKind.CONFIG_INVALID


class TestDefaultOperatorFactory:
    """Test the scheme registry factory."""

    def test_memory_shared_per_name(self):
        """Test that one memory operator exists per name."""
        factory = DefaultOperatorFactory()

        first = factory.from_uri("memory://bucket")
        second = factory.from_uri("memory://bucket")
        other = factory.from_uri("memory://other")

        assert isinstance(first, MemoryOperator)
        assert first is second
        assert other is not first

    def test_filesystem(self, tmp_path):
        """Test fs and file schemes."""
        factory = DefaultOperatorFactory(chunk_size=4096)

        for scheme in ("fs", "file"):
            operator = factory.from_uri(f"{scheme}://{tmp_path}")
            assert isinstance(operator, FilesystemOperator)
            assert operator.root == tmp_path.resolve()
            assert operator.chunk_size == 4096

    def test_filesystem_requires_root(self):
        """Test that a filesystem operator needs a root."""
        with pytest.raises(StorageError) as exc_info:
            DefaultOperatorFactory().from_uri("fs://")

        assert exc_info.value.kind is ErrorKind.CONFIG_INVALID

    def test_unknown_scheme(self):
        """Test that unknown schemes are Unsupported."""
        with pytest.raises(StorageError) as exc_info:
            DefaultOperatorFactory().from_uri("s3://bucket")

        assert exc_info.value.kind is ErrorKind.UNSUPPORTED
        assert exc_info.value.context["scheme"] == "s3"

    def test_register(self):
        """Test registering a custom scheme."""
        factory = DefaultOperatorFactory()
        operator = MemoryOperator(name="custom")
        factory.register("custom", lambda location, options: operator)

        assert factory.from_uri("custom://anything") is operator
        assert "custom" in factory.schemes

    def test_satisfies_protocol(self):
        """Test that factories satisfy the factory protocol."""
        assert isinstance(DefaultOperatorFactory(), OperatorFactory)
        assert isinstance(ProfileOperatorFactory({}), OperatorFactory)


class TestProfileOperatorFactory:
    """Test profile resolution."""

    def test_filesystem_profile(self, tmp_path):
        """Test that the profile type and options build the operator."""
        factory = ProfileOperatorFactory(
            {"archive": {"type": "fs", "root": str(tmp_path), "chunk_size": "16"}}
        )

        operator = factory.from_uri("archive://")

        assert isinstance(operator, FilesystemOperator)
        assert operator.root == tmp_path.resolve()
        assert operator.chunk_size == 16
        assert operator.name == "archive"

    def test_location_below_profile_root(self, tmp_path):
        """Test that a URI location is joined below the profile root."""
        (tmp_path / "sub").mkdir()
        factory = ProfileOperatorFactory({"archive": {"type": "fs", "root": str(tmp_path)}})

        operator = factory.from_uri("archive://sub")

        assert operator.root == (tmp_path / "sub").resolve()

    def test_memory_profile(self):
        """Test a memory backed profile."""
        factory = ProfileOperatorFactory({"scratch": {"type": "memory"}})

        operator = factory.from_uri("scratch://")

        assert isinstance(operator, MemoryOperator)
        assert factory.from_uri("scratch://") is operator

    def test_missing_profile(self):
        """Test that an unknown profile is ConfigInvalid."""
        with pytest.raises(StorageError) as exc_info:
            ProfileOperatorFactory({}).from_uri("archive://")

        assert exc_info.value.kind is ErrorKind.CONFIG_INVALID
        assert exc_info.value.context["profile_name"] == "archive"

    def test_missing_type(self):
        """Test that a profile without type is ConfigInvalid."""
        factory = ProfileOperatorFactory({"archive": {"root": "/srv"}})

        with pytest.raises(StorageError) as exc_info:
            factory.from_uri("archive://")

        assert exc_info.value.kind is ErrorKind.CONFIG_INVALID
        assert "Missing 'type'" in exc_info.value.message

    def test_invalid_chunk_size(self, tmp_path):
        """Test that a malformed option is ConfigInvalid."""
        factory = ProfileOperatorFactory(
            {"archive": {"type": "fs", "root": str(tmp_path), "chunk_size": "big"}}
        )

        with pytest.raises(StorageError) as exc_info:
            factory.from_uri("archive://")

        assert exc_info.value.kind is ErrorKind.CONFIG_INVALID


class TestComposedFactories:
    """Test lambda and chained factories."""

    def test_lambda_post_processes(self):
        """Test that the function sees every built operator."""
        seen = []

        def _track(operator):
            seen.append(operator.name)
            return operator

        factory = LambdaOperatorFactory(DefaultOperatorFactory(), _track)
        operator = factory.from_uri("memory://bucket")

        assert seen == [operator.name]

    def test_chain_falls_through_unsupported(self):
        """Test that an Unsupported provider passes to the next one."""
        fallback = MemoryOperator(name="fallback")
        second = DefaultOperatorFactory()
        second.register("s3", lambda location, options: fallback)

        chain = ChainedOperatorFactory([DefaultOperatorFactory(), second])

        assert chain.from_uri("s3://bucket") is fallback

    def test_chain_stops_on_other_errors(self):
        """Test that a non-Unsupported failure short-circuits."""
        called = []
        second = DefaultOperatorFactory()
        second.register(
            "fs", lambda location, options: called.append(location) or None
        )

        chain = ChainedOperatorFactory([DefaultOperatorFactory(), second])

        with pytest.raises(StorageError) as exc_info:
            chain.from_uri("fs://")

        assert exc_info.value.kind is ErrorKind.CONFIG_INVALID
        assert called == []

    def test_chain_all_decline(self):
        """Test that the chain raises Unsupported when nobody accepts."""
        chain = ChainedOperatorFactory([DefaultOperatorFactory()])

        with pytest.raises(StorageError) as exc_info:
            chain.from_uri("s3://bucket")

        assert exc_info.value.kind is ErrorKind.UNSUPPORTED
        assert "No factory supports uri" in exc_info.value.message

    def test_standard_chain(self, tmp_path: Path):
        """Test built-in schemes first, then profiles."""
        factory = create_operator_factory(
            {"archive": {"type": "fs", "root": str(tmp_path)}}
        )

        assert isinstance(factory.from_uri("memory://x"), MemoryOperator)
        assert isinstance(factory.from_uri("archive://"), FilesystemOperator)

        with pytest.raises(StorageError) as exc_info:
            factory.from_uri("unknown://")
        assert exc_info.value.kind is ErrorKind.CONFIG_INVALID
