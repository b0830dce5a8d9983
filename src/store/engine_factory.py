"""SQLAlchemy engine lifecycle helpers for store gateways."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.config import StoreSettings
from core.errors import LevelupStoreError


def open_engine(settings: StoreSettings) -> Engine:
    """Create a pooled engine for one store.

    Connections are opened lazily on first use.

    Raises:
        LevelupStoreError: If the URL names an unavailable driver.
    """
    try:
        return create_engine(settings.url, pool_pre_ping=True)
    except (SQLAlchemyError, ImportError) as error:
        raise LevelupStoreError(
            f"Failed to create engine for store '{settings.name}': {error}. "
            "Check the store url and installed database driver."
        ) from error


def release_engine(engine: Engine, store_name: str) -> None:
    """Dispose all pooled connections of an engine.

    Raises:
        LevelupStoreError: If the pool cannot be disposed.
    """
    try:
        engine.dispose()
    except SQLAlchemyError as error:
        raise LevelupStoreError(
            f"Failed to release store '{store_name}': {error}."
        ) from error
