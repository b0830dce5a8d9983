"""Username deduplication transform.

This module collapses repeated usernames in an export scan and removes
accounts the ledger has already recorded.
"""

from __future__ import annotations

from typing import AbstractSet, Iterable

from core.types import ExportedAccount


def remove_duplicate_usernames(accounts: Iterable[ExportedAccount]) -> list[ExportedAccount]:
    """Keep the first occurrence of every username.

    Args:
        accounts: Scanned accounts in file order.

    Returns:
        Ordered accounts with repeated usernames removed.
    """
    unique_accounts: list[ExportedAccount] = []
    seen_usernames: set[str] = set()
    for account in accounts:
        username = _normalize_username(account.username)
        if username in seen_usernames:
            continue
        seen_usernames.add(username)
        unique_accounts.append(account)
    return unique_accounts


def select_unseen_accounts(
    accounts: Iterable[ExportedAccount],
    seen_usernames: AbstractSet[str],
) -> list[ExportedAccount]:
    """Return accounts whose username is absent from the ledger.

    Args:
        accounts: Scanned accounts, already free of in-scan duplicates.
        seen_usernames: Usernames loaded from the ledger.

    Returns:
        Accounts to treat as new, in scan order.
    """
    return [
        account
        for account in accounts
        if _normalize_username(account.username) not in seen_usernames
    ]


def _normalize_username(username: str) -> str:
    return username.strip()
