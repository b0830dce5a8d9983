"""Unit tests for CLI command handling."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from cli.main import EXIT_ABORTED, EXIT_CONFIG_ERROR, EXIT_OK, main
from core.types import Account, RunStatistics
from store.destination_store import DestinationStore
from store.stats_history import StatsHistory
from store.tracking_store import TrackingStore


@pytest.fixture(autouse=True)
def _clear_levelup_env(monkeypatch) -> None:
    for name in ("LEVELUP_CONFIG", "LEVELUP_DATA_ROOT", "LEVELUP_HTTP_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


def _write_config(tmp_path: Path, destinations: list[dict[str, object]]) -> Path:
    payload = {
        "leveler_db": {"url": f"sqlite:///{tmp_path / 'leveler.db'}", "name": "leveler"},
        "destination_dbs": destinations,
    }
    config_path = tmp_path / "levelup.yaml"
    config_path.write_text(yaml.safe_dump(payload), encoding="utf-8")
    return config_path


def _destination_row(tmp_path: Path, name: str, ratio: float) -> dict[str, object]:
    return {"url": f"sqlite:///{tmp_path / f'{name}.db'}", "name": name, "ratio": ratio}


def test_cli_init_schema_prints_each_store(tmp_path, capsys) -> None:
    """init-schema should create the table in every configured store."""
    config_path = _write_config(tmp_path, [_destination_row(tmp_path, "farm", 1.0)])

    exit_code = main(["--config", str(config_path), "init-schema"])
    output = capsys.readouterr().out.splitlines()

    assert exit_code == EXIT_OK
    assert output == ["schema_ready=leveler", "schema_ready=farm"]


def test_cli_run_routes_matured_accounts(
    tmp_path, sqlite_store, sqlite_destination, capsys
) -> None:
    """run should print report lines followed by the success marker."""
    config_path = _write_config(tmp_path, [_destination_row(tmp_path, "farm", 1.0)])
    assert main(["--config", str(config_path), "init-schema"]) == EXIT_OK
    tracking = TrackingStore(sqlite_store("leveler"))
    tracking.insert_accounts([Account(username="ripe", password="pw", level=31)])
    tracking.release()
    capsys.readouterr()

    exit_code = main(["--config", str(config_path), "--data-root", str(tmp_path / "data"), "run"])
    output = capsys.readouterr().out.splitlines()

    assert exit_code == EXIT_OK
    assert output[-1] == "OK!"
    assert "new_matured=1" in output and "routed[farm]=1" in output
    destination = DestinationStore(sqlite_destination("farm", 1.0))
    assert destination.count_matured() == 1
    destination.release()


def test_cli_run_with_invalid_config_exits_with_config_error(tmp_path, capsys) -> None:
    """Config validation errors should map to the config error exit code."""
    config_path = _write_config(tmp_path, [_destination_row(tmp_path, "farm", 1.5)])

    exit_code = main(["--config", str(config_path), "run"])

    assert exit_code == EXIT_CONFIG_ERROR
    assert capsys.readouterr().out.startswith("config_error=")


def test_cli_run_with_missing_config_exits_with_config_error(tmp_path, capsys) -> None:
    """A missing config file is a config error."""
    exit_code = main(["--config", str(tmp_path / "absent.yaml"), "run"])

    assert exit_code == EXIT_CONFIG_ERROR
    assert "config_error=" in capsys.readouterr().out


def test_cli_run_aborts_when_tracking_store_fails(tmp_path, capsys) -> None:
    """A tracking store without the account table aborts the run."""
    config_path = _write_config(tmp_path, [_destination_row(tmp_path, "farm", 1.0)])

    exit_code = main(["--config", str(config_path), "--data-root", str(tmp_path / "data"), "run"])
    output = capsys.readouterr().out

    assert exit_code == EXIT_ABORTED
    assert "run_aborted=" in output and "OK!" not in output


def test_cli_stats_prints_history_rows(tmp_path, capsys) -> None:
    """stats should print one tab-separated line per run, honoring --limit."""
    history = StatsHistory(tmp_path)
    history.append(RunStatistics(new_accounts=3, new_matured=0, timestamp=1_700_000_000_000))
    history.append(
        RunStatistics(
            new_accounts=1,
            new_matured=4,
            timestamp=1_700_000_600_000,
            routed={"farm": 4},
        )
    )

    exit_code = main(["--data-root", str(tmp_path), "stats", "--limit", "1"])
    output = capsys.readouterr().out.splitlines()

    assert exit_code == EXIT_OK
    assert len(output) == 1
    assert output[0].split("\t")[1:] == ["1", "4", "farm=4"]


@pytest.mark.parametrize("limit", ["0", "-1", "many"])
def test_cli_stats_rejects_non_positive_limit(tmp_path, limit: str) -> None:
    """--limit must be a positive integer."""
    with pytest.raises(SystemExit) as excinfo:
        main(["--data-root", str(tmp_path), "stats", "--limit", limit])

    assert excinfo.value.code == 2
