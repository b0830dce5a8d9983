"""S3 URI parsing helpers.

This module validates ``s3://bucket/prefix`` export folder locations.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.errors import LevelupIngestError


@dataclass(frozen=True)
class S3Location:
    """Parsed S3 location model."""

    bucket: str
    prefix: str


def is_s3_uri(uri: str) -> bool:
    """Return whether a location string targets S3."""
    return uri.startswith("s3://")


def parse_s3_uri(uri: str) -> S3Location:
    """Parse and validate an S3 URI.

    Args:
        uri: URI in format ``s3://bucket/prefix``.

    Returns:
        Parsed bucket and prefix pair.

    Raises:
        LevelupIngestError: If bucket or prefix is missing.
    """
    stripped_uri = uri.removeprefix("s3://")
    if "/" not in stripped_uri:
        _raise_uri_error(uri)
    bucket, prefix = stripped_uri.split("/", 1)
    if not bucket or not prefix:
        _raise_uri_error(uri)
    return S3Location(bucket=bucket, prefix=prefix)


def _raise_uri_error(uri: str) -> None:
    raise LevelupIngestError(
        f"Invalid S3 URI '{uri}': expected s3://bucket/prefix. "
        "Provide both bucket and prefix for export_folder."
    )
