"""Persisted account counter for counter-mode ingestion."""

from __future__ import annotations

from pathlib import Path

from core.constants import LAST_COUNT_FILE_NAME
from core.errors import LevelupLedgerError


class CounterStore:
    """Single-integer file remembering the last observed tracking total."""

    def __init__(self, data_root: Path) -> None:
        self._counter_path = data_root / LAST_COUNT_FILE_NAME

    @property
    def path(self) -> Path:
        """Counter file location."""
        return self._counter_path

    def read(self) -> int:
        """Read the last persisted total, initializing the file to ``0`` when absent.

        Raises:
            LevelupLedgerError: If the file is unreadable or not an integer.
        """
        if not self._counter_path.exists():
            self.write(0)
            return 0
        try:
            raw_value = self._counter_path.read_text(encoding="utf-8").strip()
        except OSError as error:
            raise LevelupLedgerError(
                f"Failed to read last count at {self._counter_path}: {error}."
            ) from error
        try:
            return int(raw_value)
        except ValueError as error:
            raise LevelupLedgerError(
                f"Invalid last count at {self._counter_path}: expected integer, "
                f"got '{raw_value}'. Write the current account total into the file."
            ) from error

    def write(self, value: int) -> None:
        """Replace the persisted total.

        Raises:
            LevelupLedgerError: If the file cannot be written.
        """
        try:
            self._counter_path.parent.mkdir(parents=True, exist_ok=True)
            self._counter_path.write_text(str(value), encoding="utf-8")
        except OSError as error:
            raise LevelupLedgerError(
                f"Failed to write last count at {self._counter_path}: {error}."
            ) from error
