"""Levelup exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class LevelupError(Exception):
    """Base exception for all Levelup failures."""


class LevelupConfigError(LevelupError):
    """Raised for invalid runtime or store configuration."""


class LevelupIngestError(LevelupError):
    """Raised for export folder scanning and parsing failures."""


class LevelupLedgerError(LevelupError):
    """Raised when ledger, counter, or stats files cannot be read or written."""


class LevelupStoreError(LevelupError):
    """Raised for tracking and destination store failures."""


class LevelupDistributionError(LevelupError):
    """Raised for invalid ratio distribution input."""


class LevelupNotifyError(LevelupError):
    """Raised for invalid webhook or reload trigger requests."""


class LevelupDependencyError(LevelupError):
    """Raised when an optional runtime dependency is missing."""
