"""Promotion run orchestration.

This module coordinates one scheduled run: new account ingestion, matured
account selection and consumption, ratio distribution to destinations,
statistics persistence, the summary webhook, and the daily reload triggers.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Sequence

from core.config import LevelupConfig
from core.errors import LevelupStoreError
from core.logging_config import get_logger
from core.types import (
    Account,
    DestinationAssignment,
    DestinationShare,
    HttpOutcome,
    RunReport,
    RunStatistics,
    StoreFailure,
)
from ingest.source_reader import read_new_accounts
from notify.reload_triggers import fire_reload_triggers
from notify.webhook import build_webhook_payload, send_webhook
from store.account_gateway import AccountStoreGateway
from store.destination_store import DestinationStore
from store.stats_history import StatsHistory
from store.tracking_store import TrackingStore
from transforms.ratio_distribution import plan_distribution

_LOGGER = get_logger(__name__)


class PromotionRunner:
    """Runner for one promotion and distribution pass.

    Stores are opened once per runner and released at the end of ``run``,
    whatever happened to the individual destination operations.
    """

    def __init__(
        self,
        config: LevelupConfig,
        tracking: TrackingStore,
        destinations: Sequence[DestinationStore],
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._config = config
        self._tracking = tracking
        self._destinations = tuple(destinations)
        self._history = StatsHistory(config.data_root)
        self._clock = clock

    @classmethod
    def from_config(cls, config: LevelupConfig) -> "PromotionRunner":
        """Open every configured store and build a runner."""
        tracking = TrackingStore(config.leveler)
        destinations: list[DestinationStore] = []
        try:
            for destination in config.destinations:
                destinations.append(DestinationStore(destination))
        except LevelupStoreError:
            for store in [tracking, *destinations]:
                _release_quietly(store)
            raise
        return cls(config, tracking, destinations)

    def run(self) -> RunReport:
        """Execute the run and return its report.

        Raises:
            LevelupIngestError: If the export folder cannot be read.
            LevelupLedgerError: If ledger, counter, or stats files fail.
            LevelupStoreError: If a tracking store operation fails.
        """
        started_at = self._clock()
        failures: list[StoreFailure] = []
        try:
            source = read_new_accounts(self._config, self._tracking)
            matured = self._tracking.select_matured()
            _LOGGER.info("matured_selected", matured_count=len(matured))
            routed = self._distribute(matured, failures)
            statistics = RunStatistics(
                new_accounts=source.new_account_count,
                new_matured=len(matured),
                timestamp=int(started_at.timestamp() * 1000),
                routed=routed,
            )
            self._history.append(statistics)
            matured_totals = self._count_destinations(failures)
            webhook = self._notify_webhook(statistics, matured_totals)
        finally:
            failures.extend(self._release_all())
        reloads = fire_reload_triggers(
            self._config.reload_urls,
            self._config.http_timeout_seconds,
            self._clock(),
        )
        report = RunReport(
            statistics=statistics,
            matured_totals=matured_totals,
            webhook=webhook,
            reloads=reloads,
            failures=tuple(failures),
        )
        _log_run_completion(report)
        return report

    def _distribute(self, matured: list[Account], failures: list[StoreFailure]) -> dict[str, int]:
        if not matured:
            return {}
        self._tracking.mark_consumed([account.username for account in matured])
        if not self._destinations:
            _LOGGER.warning("no_destinations", matured_count=len(matured))
            return {}
        shares = [
            DestinationShare(name=store.name, ratio=store.ratio) for store in self._destinations
        ]
        plan = plan_distribution(shares, matured)
        stores = {store.name: store for store in self._destinations}
        with ThreadPoolExecutor(max_workers=len(plan)) as executor:
            futures = [
                (
                    assignment,
                    executor.submit(_insert_assignment, stores[assignment.name], assignment),
                )
                for assignment in plan
            ]
            routed: dict[str, int] = {}
            for assignment, future in futures:
                try:
                    future.result()
                except LevelupStoreError as error:
                    _LOGGER.error("destination_failed", store=assignment.name, error=str(error))
                    failures.append(StoreFailure(assignment.name, "insert", str(error)))
                    continue
                routed[assignment.name] = assignment.count
        return routed

    def _count_destinations(self, failures: list[StoreFailure]) -> dict[str, int]:
        if not self._destinations:
            return {}
        with ThreadPoolExecutor(max_workers=len(self._destinations)) as executor:
            futures = [
                (store.name, executor.submit(store.count_matured)) for store in self._destinations
            ]
            totals: dict[str, int] = {}
            for name, future in futures:
                try:
                    totals[name] = future.result()
                except LevelupStoreError as error:
                    _LOGGER.error("destination_count_failed", store=name, error=str(error))
                    failures.append(StoreFailure(name, "count", str(error)))
        return totals

    def _notify_webhook(
        self,
        statistics: RunStatistics,
        matured_totals: dict[str, int],
    ) -> HttpOutcome | None:
        if not self._config.webhook_url:
            return None
        payload = build_webhook_payload(
            statistics,
            [store.name for store in self._destinations],
            matured_totals,
        )
        return send_webhook(self._config.webhook_url, payload, self._config.http_timeout_seconds)

    def _release_all(self) -> list[StoreFailure]:
        failures: list[StoreFailure] = []
        for store in [*self._destinations, self._tracking]:
            try:
                store.release()
            except LevelupStoreError as error:
                _LOGGER.error("store_release_failed", store=store.name, error=str(error))
                failures.append(StoreFailure(store.name, "release", str(error)))
        return failures


def run_promotion(config: LevelupConfig) -> RunReport:
    """Run one promotion pass against the configured stores.

    Args:
        config: Runtime configuration.

    Returns:
        Run report.

    Raises:
        LevelupError: If the run aborts on a ledger, ingest, or tracking failure.
    """
    runner = PromotionRunner.from_config(config)
    return runner.run()


def _insert_assignment(store: DestinationStore, assignment: DestinationAssignment) -> int:
    inserted = store.insert_accounts(assignment.accounts)
    _LOGGER.info("destination_inserted", store=store.name, inserted_count=inserted)
    return inserted


def _release_quietly(store: AccountStoreGateway) -> None:
    try:
        store.release()
    except LevelupStoreError as error:
        _LOGGER.error("store_release_failed", store=store.name, error=str(error))


def _log_run_completion(report: RunReport) -> None:
    _LOGGER.info(
        "run_completed",
        new_accounts=report.statistics.new_accounts,
        new_matured=report.statistics.new_matured,
        routed=dict(report.statistics.routed),
        matured_totals=dict(report.matured_totals),
        webhook_status=report.webhook.status_code if report.webhook else None,
        reload_count=len(report.reloads),
        failure_count=len(report.failures),
    )
