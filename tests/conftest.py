# tests/conftest.py

"""Shared pytest fixtures for all tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path) -> Generator[None, None, None]:
    """Point the data file and log directory at a per-test temp dir."""
    data_dir = tmp_path / "data"
    with (
        patch.object(Settings, "DATA_DIR", data_dir),
        patch.object(Settings, "DATA_PATH", data_dir / "buying-list-data.json"),
        patch.object(Settings, "LOGS_DIR", tmp_path / "logs"),
    ):
        yield


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep globally so nothing in a test waits."""
    with patch("time.sleep"):
        yield
