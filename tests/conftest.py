"""Core test fixtures for the opcopy project."""

import os
from collections.abc import Generator
from pathlib import Path
from unittest.mock import Mock

import pytest
from typer.testing import CliRunner

from opcopy.adapters import MemoryOperator, create_memory_operator
from opcopy.config.user_config import UserConfig
from opcopy.protocols import ByteSinkProtocol, StorageOperatorProtocol


# ---- Base Fixtures ----


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def source() -> MemoryOperator:
    """Empty in-memory operator to copy from."""
    return create_memory_operator(name="source")


@pytest.fixture
def destination() -> MemoryOperator:
    """Empty in-memory operator to copy to."""
    return create_memory_operator(name="destination")


@pytest.fixture
def source_tree(source: MemoryOperator) -> MemoryOperator:
    """Source operator holding a small nested tree."""
    source.put("src/main.rs", "fn main() {}", content_type="text/x-rust")
    source.put("src/lib.rs", "pub mod utils;", content_type="text/x-rust")
    source.put("src/utils/helper.rs", "pub fn help() {}", content_type="text/x-rust")
    source.put("src/readme.txt", "read me", content_type="text/plain")
    return source


@pytest.fixture
def mock_operator() -> Mock:
    """Create a mock storage operator for testing."""
    operator = Mock(spec=StorageOperatorProtocol)
    operator.name = "mock"
    return operator


@pytest.fixture
def mock_sink() -> Mock:
    """Create a mock byte sink for testing."""
    return Mock(spec=ByteSinkProtocol)


# ---- Test Isolation Fixtures ----


@pytest.fixture
def isolated_config_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Path, None, None]:
    """Isolate configuration loading from the user's environment.

    Runs the test from an empty working directory with ``XDG_CONFIG_HOME``
    pointing inside ``tmp_path`` and every ``OPCOPY_*`` variable removed.

    Yields:
        The XDG config home directory
    """
    for name in list(os.environ):
        if name.upper().startswith("OPCOPY_"):
            monkeypatch.delenv(name)

    work_dir = tmp_path / "work"
    work_dir.mkdir()
    xdg_home = tmp_path / "xdg"
    xdg_home.mkdir()

    monkeypatch.chdir(work_dir)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg_home))
    yield xdg_home


@pytest.fixture
def isolated_config(isolated_config_env: Path) -> UserConfig:
    """UserConfig loaded with no config file and no environment overrides."""
    return UserConfig()
