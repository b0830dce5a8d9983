"""Unit tests for the last-count file."""

from __future__ import annotations

import pytest

from core.errors import LevelupLedgerError
from ingest.counter_store import CounterStore


def test_read_initializes_missing_counter_to_zero(tmp_path) -> None:
    """A missing counter should be created with zero."""
    counter = CounterStore(tmp_path)

    value = counter.read()

    assert value == 0 and counter.path.read_text(encoding="utf-8") == "0"


def test_write_then_read_returns_value(tmp_path) -> None:
    """The persisted total should be read back unchanged."""
    counter = CounterStore(tmp_path)
    counter.write(120)

    assert CounterStore(tmp_path).read() == 120


def test_read_rejects_non_integer_counter(tmp_path) -> None:
    """Corrupt counter files should abort the run."""
    counter = CounterStore(tmp_path)
    counter.path.write_text("many", encoding="utf-8")

    with pytest.raises(LevelupLedgerError):
        counter.read()
