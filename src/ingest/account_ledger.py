"""Deduplication ledger persistence.

This module stores every account observed in the export folder so the
same username is never reported as new twice, across process restarts.
The ledger is an append-only CSV file of ``username,password,email`` rows.
"""

from __future__ import annotations

import csv
import os
from pathlib import Path
from typing import Iterable

from core.constants import LEDGER_FILE_NAME
from core.errors import LevelupLedgerError
from core.types import ExportedAccount


class AccountLedger:
    """Filesystem-backed ledger of observed account usernames."""

    def __init__(self, data_root: Path) -> None:
        self._ledger_path = data_root / LEDGER_FILE_NAME

    @property
    def path(self) -> Path:
        """Ledger file location."""
        return self._ledger_path

    def load_usernames(self) -> set[str]:
        """Load the set of usernames already recorded.

        Returns:
            Recorded usernames; empty when the ledger does not exist yet.

        Raises:
            LevelupLedgerError: If the ledger exists but cannot be read.
        """
        if not self._ledger_path.exists():
            return set()
        try:
            text = self._ledger_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            raise LevelupLedgerError(
                f"Failed to read account ledger at {self._ledger_path}: {error}. "
                "Refusing to continue without dedup state."
            ) from error
        return {_first_field(line) for line in text.splitlines()}

    def append(self, accounts: Iterable[ExportedAccount]) -> int:
        """Append accounts to the ledger and flush them to disk.

        Args:
            accounts: Newly observed accounts.

        Returns:
            Number of appended rows.

        Raises:
            LevelupLedgerError: If the rows cannot be durably written.
        """
        rows = [[account.username, account.password, account.email] for account in accounts]
        if not rows:
            return 0
        try:
            self._ledger_path.parent.mkdir(parents=True, exist_ok=True)
            needs_newline = _missing_trailing_newline(self._ledger_path)
            with self._ledger_path.open("a", encoding="utf-8", newline="") as handle:
                if needs_newline:
                    handle.write("\n")
                writer = csv.writer(handle, lineterminator="\n")
                writer.writerows(rows)
                handle.flush()
                os.fsync(handle.fileno())
        except OSError as error:
            raise LevelupLedgerError(
                f"Failed to append to account ledger at {self._ledger_path}: {error}. "
                "Dedup state may be incomplete; fix the file before the next run."
            ) from error
        return len(rows)


def _first_field(line: str) -> str:
    """Return the stripped username of one ledger line.

    Lines are parsed one at a time so an unbalanced quote in a legacy row
    cannot swallow the rows after it. Blank lines yield ``""``.
    """
    row = next(csv.reader([line]), [])
    return row[0].strip() if row else ""


def _missing_trailing_newline(ledger_path: Path) -> bool:
    """Return whether an existing ledger ends without a newline."""
    if not ledger_path.exists() or ledger_path.stat().st_size == 0:
        return False
    with ledger_path.open("rb") as handle:
        handle.seek(-1, os.SEEK_END)
        return handle.read(1) != b"\n"
