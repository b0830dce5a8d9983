"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest
from sqlalchemy.engine import make_url

from core.config import DestinationSettings, StoreSettings


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def sqlite_store(tmp_path: Path) -> Callable[[str], StoreSettings]:
    """Build settings for a SQLite file store under the test directory."""

    def _build(name: str, reload_url: str | None = None) -> StoreSettings:
        url = make_url(f"sqlite:///{tmp_path / f'{name}.db'}")
        return StoreSettings(name=name, url=url, reload_url=reload_url)

    return _build


@pytest.fixture
def sqlite_destination(
    sqlite_store: Callable[[str], StoreSettings],
) -> Callable[[str, float], DestinationSettings]:
    """Build destination settings backed by a SQLite file store."""

    def _build(name: str, ratio: float) -> DestinationSettings:
        return DestinationSettings(store=sqlite_store(name), ratio=ratio)

    return _build
