# tests/conftest.py

"""Shared pytest fixtures for the subtrend test suite."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path) -> Generator[None, None, None]:
    """Point log, chart and data directories at a per-test temp dir."""
    data_dir = tmp_path / "data"
    with patch.multiple(
        "subtrend.config.settings.Settings",
        LOGS_DIR=tmp_path / "logs",
        DATA_DIR=data_dir,
        PRICES_DIR=data_dir / "prices",
        HISTORY_DIR=data_dir / "history",
        CHARTS_DIR=data_dir / "charts",
    ):
        yield
