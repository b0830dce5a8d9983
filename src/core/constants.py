"""Core constants used across Levelup modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".levelup")
DEFAULT_CONFIG_PATH = Path("config") / "levelup.yaml"
LEDGER_FILE_NAME = "accounts.csv"
LAST_COUNT_FILE_NAME = "last_count.txt"
STATS_FILE_NAME = "stats.jsonl"
LEGACY_STATS_FILE_NAME = "stats.json"
ACCOUNT_TABLE_NAME = "account"
MATURED_LEVEL_FLOOR = 29
EXPORT_COMMENT_MARKER = "#"
EXPORT_SUCCESS_MARKER = "OK;"
EXPORT_FIELD_DELIMITER = ";"
DEFAULT_HTTP_TIMEOUT_SECONDS = 5.0
RELOAD_WINDOW_HOUR = 4
RELOAD_WINDOW_MINUTES = 10
MARK_CONSUMED_CHUNK_SIZE = 500
WEBHOOK_EMBED_COLOR = 5814783
RUN_SUCCESS_MARKER = "OK!"
