# tests/conftest.py

"""Shared pytest fixtures for all storefeed tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from storefeed.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_paths(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> Generator[None, None, None]:
    """Point data and log directories at a per-test temp dir."""
    monkeypatch.setattr(Settings, "DATA_DIR", tmp_path / "data")
    monkeypatch.setattr(
        Settings, "PURCHASES_PATH", tmp_path / "data" / "purchases.json"
    )
    monkeypatch.setattr(Settings, "LOGS_DIR", tmp_path / "logs")
    yield
