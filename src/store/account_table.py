"""Account table definition and insert-or-ignore statements.

This module is shared by the tracking and destination gateways so both
speak the same schema and the same conflict semantics.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Iterable, Mapping

from sqlalchemy import Boolean, Column, Integer, MetaData, String, Table, insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.sql.dml import Insert

from core.constants import ACCOUNT_TABLE_NAME
from core.errors import LevelupStoreError
from core.types import Account

METADATA = MetaData()

ACCOUNT_TABLE = Table(
    ACCOUNT_TABLE_NAME,
    METADATA,
    Column("username", String(255), primary_key=True),
    Column("password", String(255), nullable=False),
    Column("email", String(255), nullable=True),
    Column("level", Integer, nullable=False, default=0),
    Column("banned", Boolean, nullable=False, default=False),
)


def build_insert_ignore(dialect_name: str) -> Insert:
    """Build an insert that leaves rows with a conflicting username untouched.

    Args:
        dialect_name: SQLAlchemy dialect name of the target engine.

    Returns:
        Insert statement ready for ``executemany`` parameters.

    Raises:
        LevelupStoreError: If the dialect has no supported ignore clause.
    """
    if dialect_name in {"mysql", "mariadb"}:
        return insert(ACCOUNT_TABLE).prefix_with("IGNORE")
    if dialect_name == "sqlite":
        return sqlite.insert(ACCOUNT_TABLE).on_conflict_do_nothing(index_elements=["username"])
    if dialect_name == "postgresql":
        return postgresql.insert(ACCOUNT_TABLE).on_conflict_do_nothing(
            index_elements=["username"]
        )
    raise LevelupStoreError(
        f"Unsupported store dialect '{dialect_name}': insert-or-ignore is available "
        "for mysql, mariadb, postgresql and sqlite."
    )


def account_rows(accounts: Iterable[Account]) -> list[dict[str, Any]]:
    """Convert accounts into insert parameter rows."""
    return [asdict(account) for account in accounts]


def account_from_row(row: Mapping[str, Any]) -> Account:
    """Build an account from a selected row mapping."""
    email = row.get("email")
    return Account(
        username=str(row["username"]),
        password=str(row["password"]),
        email=str(email) if email is not None else None,
        level=int(row["level"]),
        banned=bool(row["banned"]),
    )
