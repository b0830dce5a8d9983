"""Account export readers for file-mode ingestion.

This module loads account creator export files from a local directory or
an S3 prefix and keeps the lines that finished with the success marker.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

from core.config import LevelupConfig
from core.constants import (
    EXPORT_COMMENT_MARKER,
    EXPORT_FIELD_DELIMITER,
    EXPORT_SUCCESS_MARKER,
)
from core.errors import LevelupDependencyError, LevelupIngestError
from core.logging_config import get_logger
from core.s3_uri import S3Location, is_s3_uri, parse_s3_uri
from core.types import ExportedAccount

_LOGGER = get_logger(__name__)


def read_exported_accounts(export_folder: str, config: LevelupConfig) -> list[ExportedAccount]:
    """Load eligible accounts from every export file in a folder.

    Args:
        export_folder: Local directory or ``s3://`` prefix.
        config: Runtime configuration for S3 session defaults.

    Returns:
        Accounts in file order, files sorted by name.

    Raises:
        LevelupIngestError: If the folder cannot be read.
    """
    if is_s3_uri(export_folder):
        accounts = _read_s3_accounts(export_folder, config)
    else:
        accounts = _read_local_accounts(Path(export_folder))
    _LOGGER.info("export_scanned", export_folder=export_folder, eligible_count=len(accounts))
    return accounts


def parse_export_line(line: str) -> ExportedAccount | None:
    """Parse one export line, returning ``None`` for ineligible lines.

    A line is eligible when it is not a comment and ends with ``OK;``.
    Fields are ``username;password;email;...``.
    """
    if line.startswith(EXPORT_COMMENT_MARKER) or not line.endswith(EXPORT_SUCCESS_MARKER):
        return None
    fields = line.split(EXPORT_FIELD_DELIMITER)
    username = fields[0]
    password = fields[1] if len(fields) > 1 else ""
    email = fields[2] if len(fields) > 2 else ""
    return ExportedAccount(username=username, password=password, email=email)


def parse_export_text(text: str) -> list[ExportedAccount]:
    """Parse a whole export file body."""
    accounts: list[ExportedAccount] = []
    for line in text.splitlines():
        account = parse_export_line(line)
        if account is not None:
            accounts.append(account)
    return accounts


def _read_local_accounts(folder: Path) -> list[ExportedAccount]:
    if not folder.is_dir():
        raise LevelupIngestError(
            f"Failed to read export folder at {folder}: directory does not exist. "
            "Fix export_folder or remove it to use counter mode."
        )
    accounts: list[ExportedAccount] = []
    for file_path in sorted(folder.iterdir()):
        if not file_path.is_file():
            continue
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            raise LevelupIngestError(
                f"Failed to read export file {file_path}: {error}."
            ) from error
        accounts.extend(parse_export_text(text))
    return accounts


def _read_s3_accounts(export_folder: str, config: LevelupConfig) -> list[ExportedAccount]:
    location = parse_s3_uri(export_folder)
    s3_client = _create_s3_client(config)
    try:
        object_keys = _list_s3_keys(s3_client, location)
        return _download_s3_accounts(s3_client, location.bucket, object_keys)
    except LevelupIngestError:
        raise
    except Exception as error:
        raise LevelupIngestError(
            f"Failed to read export objects under {export_folder}: {error}."
        ) from error


def _create_s3_client(config: LevelupConfig) -> Any:
    try:
        import boto3
    except ImportError as error:
        raise LevelupDependencyError(
            "S3 export folders require boto3, but it is not installed. "
            "Install boto3 or point export_folder at a local directory."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.s3_profile:
        session_kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        session_kwargs["region_name"] = config.s3_region
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")


def _list_s3_keys(s3_client: Any, location: S3Location) -> list[str]:
    paginator = s3_client.get_paginator("list_objects_v2")
    pages = paginator.paginate(Bucket=location.bucket, Prefix=location.prefix)
    keys: list[str] = []
    for page in pages:
        for obj in page.get("Contents", []):
            key = obj["Key"]
            if not key.endswith("/"):
                keys.append(key)
    return sorted(keys)


def _download_s3_accounts(
    s3_client: Any,
    bucket: str,
    object_keys: Iterable[str],
) -> list[ExportedAccount]:
    accounts: list[ExportedAccount] = []
    for key in object_keys:
        body = s3_client.get_object(Bucket=bucket, Key=key)["Body"].read().decode("utf-8")
        accounts.extend(parse_export_text(body))
    return accounts
