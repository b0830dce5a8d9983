"""Common account store gateway.

This module owns one store's engine and the operations that tracking and
destination stores share: schema creation, idempotent insert, release.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.config import StoreSettings
from core.errors import LevelupStoreError
from core.logging_config import get_logger
from core.types import Account
from store.account_table import METADATA, account_rows, build_insert_ignore
from store.engine_factory import open_engine, release_engine

_LOGGER = get_logger(__name__)


class AccountStoreGateway:
    """Gateway around one relational store holding an ``account`` table."""

    def __init__(self, settings: StoreSettings, engine: Engine | None = None) -> None:
        self._settings = settings
        self._engine = engine if engine is not None else open_engine(settings)

    @property
    def name(self) -> str:
        """Store display name."""
        return self._settings.name

    @property
    def settings(self) -> StoreSettings:
        """Connection settings this gateway was opened with."""
        return self._settings

    @property
    def engine(self) -> Engine:
        """Underlying SQLAlchemy engine."""
        return self._engine

    def create_schema(self) -> None:
        """Create the ``account`` table when it does not exist."""
        try:
            METADATA.create_all(self._engine)
        except SQLAlchemyError as error:
            raise LevelupStoreError(
                f"Failed to create account schema in store '{self.name}': {error}."
            ) from error

    def insert_accounts(self, accounts: Sequence[Account]) -> int:
        """Insert accounts, leaving rows with an existing username untouched.

        Args:
            accounts: Rows to insert.

        Returns:
            Number of submitted rows; zero when nothing was submitted.

        Raises:
            LevelupStoreError: If the insert fails.
        """
        if not accounts:
            return 0
        statement = build_insert_ignore(self._engine.dialect.name)
        try:
            with self._engine.begin() as connection:
                connection.execute(statement, account_rows(accounts))
        except SQLAlchemyError as error:
            raise LevelupStoreError(
                f"Failed to insert {len(accounts)} accounts into store '{self.name}': {error}."
            ) from error
        return len(accounts)

    def release(self) -> None:
        """Release pooled connections; safe to call more than once."""
        release_engine(self._engine, self.name)
        _LOGGER.debug("store_released", store=self.name)
