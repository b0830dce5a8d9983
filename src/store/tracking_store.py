"""Tracking ("leveler") store gateway.

This module owns every read and write against the authoritative store in
which new accounts start at level zero and matured accounts get consumed.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import false, func, select, true, update
from sqlalchemy.exc import SQLAlchemyError

from core.constants import MARK_CONSUMED_CHUNK_SIZE, MATURED_LEVEL_FLOOR
from core.errors import LevelupStoreError
from core.types import Account
from store.account_gateway import AccountStoreGateway
from store.account_table import ACCOUNT_TABLE, account_from_row


class TrackingStore(AccountStoreGateway):
    """Gateway for the single authoritative tracking store."""

    def count_accounts(self) -> int | None:
        """Count all tracked accounts.

        Returns:
            Row count, or ``None`` when the store returned no value.

        Raises:
            LevelupStoreError: If the query fails.
        """
        statement = select(func.count(ACCOUNT_TABLE.c.username))
        try:
            with self.engine.connect() as connection:
                total = connection.execute(statement).scalar()
        except SQLAlchemyError as error:
            raise LevelupStoreError(
                f"Failed to count accounts in tracking store '{self.name}': {error}."
            ) from error
        return int(total) if total is not None else None

    def select_matured(self) -> list[Account]:
        """Select unconsumed accounts whose level is above 29.

        Rows come back in the order the store returns them.

        Raises:
            LevelupStoreError: If the query fails.
        """
        statement = select(ACCOUNT_TABLE).where(
            ACCOUNT_TABLE.c.banned == false(),
            ACCOUNT_TABLE.c.level > MATURED_LEVEL_FLOOR,
        )
        try:
            with self.engine.connect() as connection:
                rows = connection.execute(statement).mappings().all()
        except SQLAlchemyError as error:
            raise LevelupStoreError(
                f"Failed to select matured accounts in tracking store '{self.name}': {error}."
            ) from error
        return [account_from_row(row) for row in rows]

    def mark_consumed(self, usernames: Sequence[str]) -> int:
        """Set ``banned`` for exactly the given usernames.

        Args:
            usernames: Accounts to consume; nothing is executed when empty.

        Returns:
            Number of usernames submitted.

        Raises:
            LevelupStoreError: If the update fails; no chunk is committed then.
        """
        if not usernames:
            return 0
        try:
            with self.engine.begin() as connection:
                for chunk in _chunks(usernames, MARK_CONSUMED_CHUNK_SIZE):
                    connection.execute(
                        update(ACCOUNT_TABLE)
                        .where(ACCOUNT_TABLE.c.username.in_(chunk))
                        .values(banned=true())
                    )
        except SQLAlchemyError as error:
            raise LevelupStoreError(
                f"Failed to mark {len(usernames)} accounts consumed in tracking store "
                f"'{self.name}': {error}."
            ) from error
        return len(usernames)


def _chunks(values: Sequence[str], size: int) -> list[Sequence[str]]:
    return [values[index : index + size] for index in range(0, len(values), size)]
