"""Run statistics history persistence.

This module appends one JSON line per run to ``stats.jsonl`` under the
data root. A legacy ``stats.json`` array, when present, is read as the
oldest part of the history.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Mapping

from core.constants import LEGACY_STATS_FILE_NAME, STATS_FILE_NAME
from core.errors import LevelupLedgerError
from core.types import RunStatistics


class StatsHistory:
    """Append-only history of run statistics, oldest first."""

    def __init__(self, data_root: Path) -> None:
        self._stats_path = data_root / STATS_FILE_NAME
        self._legacy_path = data_root / LEGACY_STATS_FILE_NAME

    @property
    def path(self) -> Path:
        """History file location."""
        return self._stats_path

    def append(self, statistics: RunStatistics) -> None:
        """Append one run record and flush it to disk.

        Raises:
            LevelupLedgerError: If the record cannot be written.
        """
        line = json.dumps(statistics.to_payload(), sort_keys=True)
        try:
            self._stats_path.parent.mkdir(parents=True, exist_ok=True)
            with self._stats_path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")
                handle.flush()
                os.fsync(handle.fileno())
        except OSError as error:
            raise LevelupLedgerError(
                f"Failed to append run statistics to {self._stats_path}: {error}."
            ) from error

    def load(self) -> list[RunStatistics]:
        """Load every recorded run, oldest first; empty when nothing was recorded.

        Raises:
            LevelupLedgerError: If a history file is unreadable or malformed.
        """
        records = [
            statistics_from_payload(payload, self._legacy_path)
            for payload in _read_legacy_rows(self._legacy_path)
        ]
        if not self._stats_path.exists():
            return records
        try:
            lines = self._stats_path.read_text(encoding="utf-8").splitlines()
        except OSError as error:
            raise LevelupLedgerError(
                f"Failed to read run statistics at {self._stats_path}: {error}."
            ) from error
        for line_number, line in enumerate(lines, 1):
            if not line.strip():
                continue
            payload = _parse_line(self._stats_path, line, line_number)
            records.append(statistics_from_payload(payload, self._stats_path))
        return records


def statistics_from_payload(payload: Mapping[str, object], source_path: Path) -> RunStatistics:
    """Build a statistics record from a persisted row.

    Legacy rows carry per-destination counts as ``new<Name>`` keys; they are
    folded into the ``routed`` mapping.
    """
    try:
        raw_routed = dict(payload.get("routed") or {})
        routed = {str(name): int(count) for name, count in raw_routed.items()}
        for key, value in payload.items():
            if key.startswith("new") and key not in {"newAccounts", "newThirties"}:
                routed.setdefault(key.removeprefix("new"), int(value))
        return RunStatistics(
            new_accounts=int(payload["newAccounts"]),
            new_matured=int(payload["newThirties"]),
            timestamp=int(payload["timestamp"]),
            routed=routed,
        )
    except (KeyError, TypeError, ValueError) as error:
        raise LevelupLedgerError(
            f"Invalid run statistics row in {source_path}: {error}."
        ) from error


def _read_legacy_rows(legacy_path: Path) -> list[Mapping[str, object]]:
    if not legacy_path.exists():
        return []
    try:
        payload = json.loads(legacy_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        raise LevelupLedgerError(
            f"Failed to read legacy run statistics at {legacy_path}: {error}."
        ) from error
    if not isinstance(payload, list) or not all(isinstance(row, dict) for row in payload):
        raise LevelupLedgerError(
            f"Invalid legacy run statistics at {legacy_path}: expected a list of objects."
        )
    return payload


def _parse_line(stats_path: Path, line: str, line_number: int) -> Mapping[str, object]:
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as error:
        raise LevelupLedgerError(
            f"Failed to parse run statistics at {stats_path}:{line_number}: {error.msg}."
        ) from error
    if not isinstance(payload, dict):
        raise LevelupLedgerError(
            f"Invalid run statistics at {stats_path}:{line_number}: expected object."
        )
    return payload
