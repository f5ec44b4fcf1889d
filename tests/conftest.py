"""Pytest configuration and shared fixtures for scanlens tests."""

import pytest

import scanlens.io.logging_setup
from scanlens.geometry.model import Size
from scanlens.io.storage import MemoryStorage
from tests.harness.builders import BrokenStorage


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    """Keep config files and logs inside tmp_path; clear SCANLENS_* overrides."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("SCANLENS_LOG_DIR", str(tmp_path / "logs"))
    for name in (
        "SCANLENS_LOG_LEVEL",
        "SCANLENS_LOG_FILE",
        "SCANLENS_METRICS",
        "SCANLENS_STORAGE_PATH",
        "SCANLENS_PERSIST_GEOMETRY",
        "SCANLENS_CONTEXT_CACHE",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    scanlens.io.logging_setup.reset()


# ---------------------------------------------------------------------------
# Geometry fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def viewport():
    return Size(1280, 800)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def broken_storage():
    return BrokenStorage()
