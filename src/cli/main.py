"""Levelup CLI entry points.
This module exposes the scheduled run command plus schema and history helpers.
It maps argparse commands onto pipeline and store calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from datetime import datetime
import os
from pathlib import Path
from typing import Any, Sequence

from core.config import LevelupConfig
from core.constants import DEFAULT_DATA_ROOT, RUN_SUCCESS_MARKER
from core.errors import LevelupConfigError, LevelupError
from core.logging_config import get_logger
from core.types import RunReport
from pipeline.promotion_run import run_promotion
from store.account_gateway import AccountStoreGateway
from store.destination_store import DestinationStore
from store.stats_history import StatsHistory
from store.tracking_store import TrackingStore

_LOGGER = get_logger(__name__)

EXIT_OK = 0
EXIT_ABORTED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="levelup", description="Levelup account promotion job")
    parser.add_argument("--config", help="YAML config path, overrides LEVELUP_CONFIG")
    parser.add_argument("--data-root", help="Override LEVELUP_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_run_command(subparsers)
    _add_stats_command(subparsers)
    _add_init_schema_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Levelup CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code: 0 on success, 1 when the run aborted, 2 for bad config.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "stats":
        return _run_stats_command(_resolve_data_root(args.data_root), args)
    try:
        config = _load_config(args.config, args.data_root)
    except LevelupConfigError as error:
        print(f"config_error={error}")
        return EXIT_CONFIG_ERROR
    if args.command == "run":
        return _run_promotion_command(config)
    if args.command == "init-schema":
        return _run_init_schema_command(config)
    parser.error(f"Unsupported command: {args.command}")
    return EXIT_CONFIG_ERROR


def _load_config(config_path: str | None, data_root: str | None) -> LevelupConfig:
    """Load config with optional data-root override.

    Args:
        config_path: Optional YAML path.
        data_root: Optional override path.

    Returns:
        Validated config.
    """
    config = LevelupConfig.load(config_path)
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return config


def _resolve_data_root(data_root: str | None) -> Path:
    raw_value = data_root or os.getenv("LEVELUP_DATA_ROOT", str(DEFAULT_DATA_ROOT))
    return Path(raw_value).expanduser().resolve()


def _run_promotion_command(config: LevelupConfig) -> int:
    """Handle run command.

    Args:
        config: Runtime configuration.

    Returns:
        Exit code.
    """
    try:
        report = run_promotion(config)
    except LevelupError as error:
        _LOGGER.error("run_aborted", error_type=type(error).__name__, error=str(error))
        print(f"run_aborted={error}")
        return EXIT_ABORTED
    _print_report(report)
    print(RUN_SUCCESS_MARKER)
    return EXIT_OK


def _run_stats_command(data_root: Path, args: argparse.Namespace) -> int:
    """Handle stats command.

    Args:
        data_root: Directory holding the stats history.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    try:
        history = StatsHistory(data_root).load()
    except LevelupError as error:
        print(f"stats_error={error}")
        return EXIT_ABORTED
    rows = history[-args.limit :] if args.limit is not None else history
    for statistics in rows:
        started_at = datetime.fromtimestamp(statistics.timestamp / 1000)
        routed = ",".join(f"{name}={count}" for name, count in statistics.routed.items())
        print(
            f"{started_at.isoformat(timespec='seconds')}\t"
            f"{statistics.new_accounts}\t"
            f"{statistics.new_matured}\t"
            f"{routed or '-'}"
        )
    return EXIT_OK


def _run_init_schema_command(config: LevelupConfig) -> int:
    """Handle init-schema command.

    Args:
        config: Runtime configuration.

    Returns:
        Exit code.
    """
    stores: list[AccountStoreGateway] = []
    try:
        stores.append(TrackingStore(config.leveler))
        stores.extend(DestinationStore(destination) for destination in config.destinations)
        for store in stores:
            store.create_schema()
            print(f"schema_ready={store.name}")
    except LevelupError as error:
        print(f"schema_error={error}")
        return EXIT_ABORTED
    finally:
        for store in stores:
            try:
                store.release()
            except LevelupError as error:
                _LOGGER.error("store_release_failed", store=store.name, error=str(error))
    return EXIT_OK


def _print_report(report: RunReport) -> None:
    statistics = report.statistics
    print(f"new_accounts={statistics.new_accounts}")
    print(f"new_matured={statistics.new_matured}")
    for name, count in statistics.routed.items():
        print(f"routed[{name}]={count}")
    for name, total in report.matured_totals.items():
        print(f"matured_total[{name}]={total}")
    if report.webhook is not None:
        print(f"webhook_status={report.webhook.status_code or report.webhook.error}")
    for failure in report.failures:
        print(f"failed[{failure.name}]={failure.operation}")


def _add_run_command(subparsers: Any) -> None:
    """Register run subcommand."""
    subparsers.add_parser("run", help="Ingest, promote, and distribute accounts once")


def _add_stats_command(subparsers: Any) -> None:
    """Register stats subcommand."""
    parser = subparsers.add_parser("stats", help="Print the run statistics history")
    parser.add_argument(
        "--limit",
        type=_positive_int,
        help="Only print the most recent N runs",
    )


def _positive_int(raw_value: str) -> int:
    try:
        value = int(raw_value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{raw_value}'") from error
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return value


def _add_init_schema_command(subparsers: Any) -> None:
    """Register init-schema subcommand."""
    subparsers.add_parser(
        "init-schema",
        help="Create the account table in the tracking and destination stores",
    )
