"""Unit tests for core config parsing."""

from __future__ import annotations

import pytest

from core.config import LevelupConfig
from core.errors import LevelupConfigError
from tests.fixture_paths import fixture_path


def _minimal_payload() -> dict[str, object]:
    return {
        "leveler_db": {"url": "sqlite:///leveler.db", "name": "leveler"},
        "destination_dbs": [{"url": "sqlite:///farm.db", "name": "farm", "ratio": 0.5}],
    }


def test_load_reads_yaml_file() -> None:
    """Config should parse stores, ratios, and optional fields from YAML."""
    config = LevelupConfig.load(str(fixture_path("config/levelup.yaml")))

    assert config.leveler.name == "leveler"
    assert config.leveler.url.drivername == "mysql+pymysql"
    assert [destination.name for destination in config.destinations] == ["farm_a", "farm_b"]
    assert [destination.ratio for destination in config.destinations] == [0.25, 1.0]
    assert config.http_timeout_seconds == 3.0
    assert config.file_mode


def test_reload_urls_keep_tracking_store_first() -> None:
    """Reload URLs should list the tracking store, then destinations in order."""
    config = LevelupConfig.load(str(fixture_path("config/levelup.yaml")))

    assert config.reload_urls == (
        "http://leveler.internal/reload",
        "http://farm-a.internal/reload",
    )


def test_from_mapping_without_export_folder_uses_counter_mode() -> None:
    """Missing export folder should select counter mode."""
    config = LevelupConfig.from_mapping(_minimal_payload())

    assert not config.file_mode
    assert config.webhook_url is None


def test_from_mapping_reads_data_root_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve the data root from environment."""
    monkeypatch.setenv("LEVELUP_DATA_ROOT", "./.tmp-levelup")

    config = LevelupConfig.from_mapping(_minimal_payload())

    assert config.data_root.name == ".tmp-levelup"


def test_ratio_outside_unit_interval_is_rejected() -> None:
    """Ratios must be fractions between 0 and 1."""
    payload = _minimal_payload()
    payload["destination_dbs"] = [{"url": "sqlite:///farm.db", "name": "farm", "ratio": 1.5}]

    with pytest.raises(LevelupConfigError):
        LevelupConfig.from_mapping(payload)


def test_missing_ratio_is_rejected() -> None:
    """Every destination needs a ratio."""
    payload = _minimal_payload()
    payload["destination_dbs"] = [{"url": "sqlite:///farm.db", "name": "farm"}]

    with pytest.raises(LevelupConfigError):
        LevelupConfig.from_mapping(payload)


def test_duplicate_destination_names_are_rejected() -> None:
    """Destination names key the stats mapping and must be unique."""
    payload = _minimal_payload()
    payload["destination_dbs"] = [
        {"url": "sqlite:///a.db", "name": "farm", "ratio": 0.5},
        {"url": "sqlite:///b.db", "name": "farm", "ratio": 0.5},
    ]

    with pytest.raises(LevelupConfigError):
        LevelupConfig.from_mapping(payload)


def test_unknown_root_key_is_rejected() -> None:
    """Typos in root keys should fail loudly."""
    payload = _minimal_payload()
    payload["webhook"] = "https://example.com"

    with pytest.raises(LevelupConfigError):
        LevelupConfig.from_mapping(payload)


def test_missing_leveler_db_is_rejected() -> None:
    """The tracking store section is required."""
    with pytest.raises(LevelupConfigError):
        LevelupConfig.from_mapping({"destination_dbs": []})


def test_invalid_timeout_env_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for a non-numeric timeout override."""
    monkeypatch.setenv("LEVELUP_HTTP_TIMEOUT", "soon")

    with pytest.raises(LevelupConfigError):
        LevelupConfig.from_mapping(_minimal_payload())


def test_missing_config_file_is_rejected(tmp_path) -> None:
    """Loading a nonexistent file should raise a config error."""
    with pytest.raises(LevelupConfigError):
        LevelupConfig.load(str(tmp_path / "missing.yaml"))
