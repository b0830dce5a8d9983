"""Destination store gateway."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.config import DestinationSettings
from core.constants import MATURED_LEVEL_FLOOR
from core.errors import LevelupStoreError
from store.account_gateway import AccountStoreGateway
from store.account_table import ACCOUNT_TABLE


class DestinationStore(AccountStoreGateway):
    """Gateway for one destination receiving a share of matured accounts."""

    def __init__(self, destination: DestinationSettings, engine: Engine | None = None) -> None:
        super().__init__(destination.store, engine)
        self._ratio = destination.ratio

    @property
    def ratio(self) -> float:
        """Configured fraction of the remaining pool."""
        return self._ratio

    def count_matured(self) -> int:
        """Count rows above level 29, whatever their origin or banned flag.

        Raises:
            LevelupStoreError: If the query fails.
        """
        statement = select(func.count(ACCOUNT_TABLE.c.username)).where(
            ACCOUNT_TABLE.c.level > MATURED_LEVEL_FLOOR
        )
        try:
            with self.engine.connect() as connection:
                total = connection.execute(statement).scalar()
        except SQLAlchemyError as error:
            raise LevelupStoreError(
                f"Failed to count matured accounts in destination '{self.name}': {error}."
            ) from error
        return int(total or 0)
