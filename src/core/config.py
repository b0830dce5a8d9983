"""Runtime configuration model for Levelup.

This module owns all environment variable parsing and YAML config
validation. Other modules consume a typed config object instead of raw
env reads or untyped mappings.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping, cast

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError
import yaml

from core.config_fields import (
    expect_mapping,
    expect_sequence,
    optional_float,
    optional_int,
    optional_string,
    reject_unknown_keys,
)
from core.constants import DEFAULT_CONFIG_PATH, DEFAULT_DATA_ROOT, DEFAULT_HTTP_TIMEOUT_SECONDS
from core.errors import LevelupConfigError

DEFAULT_SQL_DRIVER = "mysql+pymysql"
_STORE_KEYS = {
    "url",
    "driver",
    "host",
    "port",
    "user",
    "password",
    "database",
    "name",
    "reload_url",
}
_ROOT_KEYS = {
    "leveler_db",
    "destination_dbs",
    "export_folder",
    "webhook_url",
    "http_timeout_seconds",
}


@dataclass(frozen=True)
class StoreSettings:
    """Connection settings for one relational store.

    Attributes:
        name: Display name, the database name unless set explicitly.
        url: SQLAlchemy connection URL.
        reload_url: Optional URL fired once a day to refresh the store's consumer.
    """

    name: str
    url: URL
    reload_url: str | None = None


@dataclass(frozen=True)
class DestinationSettings:
    """Destination store settings with its distribution ratio.

    Attributes:
        store: Connection settings.
        ratio: Fraction in [0, 1] of the remaining matured pool.
    """

    store: StoreSettings
    ratio: float

    @property
    def name(self) -> str:
        """Destination name."""
        return self.store.name


@dataclass(frozen=True)
class LevelupConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local directory holding ledger, counter, and stats files.
        leveler: Tracking store settings.
        destinations: Ordered destination stores.
        export_folder: Optional export directory or s3:// prefix; enables file mode.
        webhook_url: Optional webhook receiving the run summary.
        http_timeout_seconds: Timeout applied to webhook and reload calls.
        s3_region: Optional default AWS region for s3:// export folders.
        s3_profile: Optional AWS profile for boto3 session initialization.
    """

    data_root: Path
    leveler: StoreSettings
    destinations: tuple[DestinationSettings, ...]
    export_folder: str | None = None
    webhook_url: str | None = None
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    s3_region: str | None = None
    s3_profile: str | None = None

    @property
    def file_mode(self) -> bool:
        """Whether accounts are ingested from the export folder."""
        return self.export_folder is not None

    @property
    def reload_urls(self) -> tuple[str, ...]:
        """Reload URLs, tracking store first, then destinations in order."""
        urls = [self.leveler.reload_url] if self.leveler.reload_url else []
        urls.extend(
            destination.store.reload_url
            for destination in self.destinations
            if destination.store.reload_url
        )
        return tuple(urls)

    @classmethod
    def load(cls, config_path: str | None = None) -> "LevelupConfig":
        """Build config from a YAML file and process environment variables.

        Args:
            config_path: Optional YAML path, else ``LEVELUP_CONFIG`` or the default path.

        Returns:
            A validated config object.

        Raises:
            LevelupConfigError: If the file or environment values are invalid.
        """
        resolved_path = config_path or os.getenv("LEVELUP_CONFIG", str(DEFAULT_CONFIG_PATH))
        payload = _load_yaml_payload(resolved_path)
        return cls.from_mapping(payload)

    @classmethod
    def from_mapping(cls, payload: object) -> "LevelupConfig":
        """Build config from an already parsed mapping plus environment values.

        Args:
            payload: Parsed configuration root.

        Returns:
            A validated config object.

        Raises:
            LevelupConfigError: If values are invalid.
        """
        root = expect_mapping(payload, "config root")
        reject_unknown_keys(root, _ROOT_KEYS, "Config root")
        if root.get("leveler_db") is None:
            raise LevelupConfigError(
                "Config missing required section 'leveler_db'. Add the tracking store connection."
            )
        leveler = _parse_store(expect_mapping(root["leveler_db"], "leveler_db"), "leveler_db")
        destinations = _parse_destinations(root.get("destination_dbs"))
        timeout = _parse_timeout(root)
        data_root_value = os.getenv("LEVELUP_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            leveler=leveler,
            destinations=destinations,
            export_folder=_parse_export_folder(root),
            webhook_url=optional_string(root, "webhook_url", "config root"),
            http_timeout_seconds=timeout,
            s3_region=os.getenv("LEVELUP_S3_REGION"),
            s3_profile=os.getenv("LEVELUP_S3_PROFILE"),
        )


def _load_yaml_payload(config_path: str) -> object:
    config_file = Path(config_path).expanduser().resolve()
    if not config_file.exists():
        raise LevelupConfigError(
            f"Config file does not exist at {config_file}. "
            "Pass --config or set LEVELUP_CONFIG to a YAML file."
        )
    try:
        payload = cast(object, yaml.safe_load(config_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise LevelupConfigError(
            f"Failed to read config at {config_file}: {error}. Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise LevelupConfigError(
            f"Failed to parse YAML config at {config_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise LevelupConfigError(f"Config at {config_file} is empty. Define 'leveler_db'.")
    return payload


def _parse_destinations(raw_value: object) -> tuple[DestinationSettings, ...]:
    if raw_value is None:
        return ()
    rows = expect_sequence(raw_value, "destination_dbs")
    destinations: list[DestinationSettings] = []
    for index, row in enumerate(rows):
        context = f"destination_dbs #{index + 1}"
        mapping = expect_mapping(row, context)
        ratio = _parse_ratio(mapping, context)
        store_mapping = {key: value for key, value in mapping.items() if key != "ratio"}
        store = _parse_store(store_mapping, context)
        destinations.append(DestinationSettings(store=store, ratio=ratio))
    _validate_unique_names(destinations)
    return tuple(destinations)


def _parse_store(mapping: Mapping[str, object], context: str) -> StoreSettings:
    reject_unknown_keys(mapping, _STORE_KEYS, context)
    url = _parse_store_url(mapping, context)
    name = optional_string(mapping, "name", context) or url.database
    if not name:
        raise LevelupConfigError(
            f"Store in {context} has no name. Set 'database' or 'name' for the store."
        )
    return StoreSettings(
        name=name,
        url=url,
        reload_url=optional_string(mapping, "reload_url", context),
    )


def _parse_store_url(mapping: Mapping[str, object], context: str) -> URL:
    raw_url = optional_string(mapping, "url", context)
    if raw_url is not None:
        try:
            return make_url(raw_url)
        except ArgumentError as error:
            raise LevelupConfigError(
                f"Invalid store url in {context}: {error}. Use a SQLAlchemy URL."
            ) from error
    host = optional_string(mapping, "host", context)
    database = optional_string(mapping, "database", context)
    if host is None or database is None:
        raise LevelupConfigError(
            f"Store in {context} needs either 'url' or both 'host' and 'database'."
        )
    return URL.create(
        optional_string(mapping, "driver", context) or DEFAULT_SQL_DRIVER,
        username=optional_string(mapping, "user", context),
        password=_raw_password(mapping, context),
        host=host,
        port=optional_int(mapping, "port", context),
        database=database,
    )


def _raw_password(mapping: Mapping[str, object], context: str) -> str | None:
    value = mapping.get("password")
    if value is None:
        return None
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return str(value)
    raise LevelupConfigError(f"Field 'password' in {context} must be a string when provided.")


def _parse_ratio(mapping: Mapping[str, object], context: str) -> float:
    ratio = optional_float(mapping, "ratio", context)
    if ratio is None:
        raise LevelupConfigError(f"Missing required field 'ratio' in {context}.")
    if not 0.0 <= ratio <= 1.0:
        raise LevelupConfigError(
            f"Invalid ratio {ratio} in {context}: expected a value between 0 and 1."
        )
    return ratio


def _parse_export_folder(root: Mapping[str, object]) -> str | None:
    folder = optional_string(root, "export_folder", "config root")
    if folder is None or folder.startswith("s3://"):
        return folder
    return str(Path(folder).expanduser().resolve())


def _parse_timeout(root: Mapping[str, object]) -> float:
    env_value = os.getenv("LEVELUP_HTTP_TIMEOUT")
    if env_value is not None:
        try:
            timeout = float(env_value)
        except ValueError as error:
            raise LevelupConfigError(
                "Invalid LEVELUP_HTTP_TIMEOUT value: "
                f"expected number of seconds, got '{env_value}'."
            ) from error
    else:
        configured = optional_float(root, "http_timeout_seconds", "config root")
        timeout = DEFAULT_HTTP_TIMEOUT_SECONDS if configured is None else configured
    if timeout <= 0:
        raise LevelupConfigError(f"HTTP timeout must be positive, got {timeout}.")
    return timeout


def _validate_unique_names(destinations: list[DestinationSettings]) -> None:
    seen: set[str] = set()
    for destination in destinations:
        if destination.name in seen:
            raise LevelupConfigError(
                f"Duplicate destination name '{destination.name}'. "
                "Give each destination a distinct 'database' or 'name'."
            )
        seen.add(destination.name)
