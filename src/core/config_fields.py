"""Type-safe field parsing helpers for configuration files.

This module centralizes primitive parsing so the config loader can stay
concise and produce consistent validation errors for every section.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from core.errors import LevelupConfigError


def expect_mapping(value: object, context: str) -> Mapping[str, object]:
    """Validate that a parsed YAML value is a string-keyed mapping."""
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise LevelupConfigError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise LevelupConfigError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def expect_sequence(value: object, context: str) -> Sequence[object]:
    """Validate that a parsed YAML value is a list."""
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise LevelupConfigError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def optional_string(args: Mapping[str, object], field_name: str, context: str) -> str | None:
    """Read an optional non-empty string field."""
    value = args.get(field_name)
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    raise LevelupConfigError(f"Field '{field_name}' in {context} must be a string when provided.")


def optional_int(args: Mapping[str, object], field_name: str, context: str) -> int | None:
    """Read an optional integer field."""
    value = args.get(field_name)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise LevelupConfigError(f"Field '{field_name}' in {context} must be an integer.")
    return value


def optional_float(args: Mapping[str, object], field_name: str, context: str) -> float | None:
    """Read an optional numeric field."""
    value = args.get(field_name)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LevelupConfigError(f"Field '{field_name}' in {context} must be numeric.")
    return float(value)


def reject_unknown_keys(
    mapping: Mapping[str, object],
    allowed_keys: set[str],
    context: str,
) -> None:
    """Raise when a mapping carries keys outside the allowed set."""
    unknown_keys = sorted(set(mapping) - allowed_keys)
    if unknown_keys:
        raise LevelupConfigError(f"{context} contains unknown fields: {', '.join(unknown_keys)}.")
