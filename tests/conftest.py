# tests/conftest.py

"""Shared pytest fixtures for all tracker tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path: Path) -> Generator[None, None, None]:
    """Point every on-disk location at a per-test temp directory."""
    with patch.multiple(
        Settings,
        DATA_DIR=tmp_path / "data",
        WATCHLIST_PATH=tmp_path / "data" / "watchlist.json",
        HISTORY_PATH=tmp_path / "data" / "price-history.json",
        CHARTS_DIR=tmp_path / "output",
        ERRORS_DIR=tmp_path / "errors",
        LOGS_DIR=tmp_path / "logs",
        IS_CI=False,
    ):
        yield
