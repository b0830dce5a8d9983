"""Unit tests for export folder reading."""

from __future__ import annotations

import pytest

from core.config import LevelupConfig
from core.errors import LevelupIngestError
from ingest import export_reader
from ingest.export_reader import parse_export_line, read_exported_accounts
from tests.fixture_paths import fixture_path


def _config() -> LevelupConfig:
    return LevelupConfig.from_mapping({"leveler_db": {"url": "sqlite://", "name": "leveler"}})


def test_parse_export_line_reads_success_rows() -> None:
    """Lines ending with the success marker should yield three fields."""
    account = parse_export_line("alpha;pw;alpha@example.com;OK;")

    assert account is not None
    assert (account.username, account.password, account.email) == (
        "alpha",
        "pw",
        "alpha@example.com",
    )


@pytest.mark.parametrize(
    "line",
    [
        "#alpha;pw;alpha@example.com;OK;",
        "alpha;pw;alpha@example.com;FAILED;",
        "alpha;pw;alpha@example.com;OK",
        "",
    ],
)
def test_parse_export_line_skips_ineligible_rows(line: str) -> None:
    """Comments and unfinished lines should be ignored."""
    assert parse_export_line(line) is None


def test_read_exported_accounts_aggregates_files_in_name_order() -> None:
    """Every file in the folder should contribute its eligible lines."""
    accounts = read_exported_accounts(str(fixture_path("exports")), _config())

    assert [account.username for account in accounts] == ["alpha", "charlie", "echo", "alpha"]


def test_read_exported_accounts_requires_existing_folder(tmp_path) -> None:
    """Missing export folder should abort ingestion."""
    with pytest.raises(LevelupIngestError):
        read_exported_accounts(str(tmp_path / "missing"), _config())


class _FakeBody:
    def __init__(self, text: str) -> None:
        self._text = text

    def read(self) -> bytes:
        return self._text.encode("utf-8")


class _FakePaginator:
    def __init__(self, keys: list[str]) -> None:
        self._keys = keys

    def paginate(self, Bucket: str, Prefix: str) -> list[dict[str, object]]:
        return [{"Contents": [{"Key": key} for key in self._keys if key.startswith(Prefix)]}]


class _FakeS3Client:
    def __init__(self, objects: dict[str, str]) -> None:
        self._objects = objects

    def get_paginator(self, name: str) -> _FakePaginator:
        assert name == "list_objects_v2"
        return _FakePaginator(list(self._objects))

    def get_object(self, Bucket: str, Key: str) -> dict[str, object]:
        return {"Body": _FakeBody(self._objects[Key])}


def test_read_exported_accounts_reads_s3_objects_in_key_order(monkeypatch) -> None:
    """S3 export prefixes should be listed, sorted, and parsed like local files."""
    client = _FakeS3Client(
        {
            "exports/b.txt": "bravo;pw;b@example.com;OK;\r\n",
            "exports/": "",
            "exports/a.txt": "#skip;pw;x;OK;\nalpha;pw;a@example.com;OK;\n",
        }
    )
    monkeypatch.setattr(export_reader, "_create_s3_client", lambda config: client)

    accounts = read_exported_accounts("s3://bucket/exports/", _config())

    assert [account.username for account in accounts] == ["alpha", "bravo"]


def test_read_exported_accounts_rejects_bucket_only_uri() -> None:
    """S3 export folders need both bucket and prefix."""
    with pytest.raises(LevelupIngestError):
        read_exported_accounts("s3://bucket", _config())
