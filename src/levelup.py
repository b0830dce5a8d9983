"""Public SDK surface for Levelup.

This module provides a stable import path for scheduled jobs and scripts.
It re-exports the run entry point, config, and typed models.
"""

from __future__ import annotations

from core.config import DestinationSettings, LevelupConfig, StoreSettings
from core.types import (
    Account,
    DestinationAssignment,
    DestinationShare,
    HttpOutcome,
    RunReport,
    RunStatistics,
)
from pipeline.promotion_run import PromotionRunner, run_promotion
from store.stats_history import StatsHistory
from transforms.ratio_distribution import plan_distribution

__all__ = [
    "Account",
    "DestinationAssignment",
    "DestinationSettings",
    "DestinationShare",
    "HttpOutcome",
    "LevelupConfig",
    "PromotionRunner",
    "RunReport",
    "RunStatistics",
    "StatsHistory",
    "StoreSettings",
    "plan_distribution",
    "run_promotion",
]
