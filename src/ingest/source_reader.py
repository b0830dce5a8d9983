"""New account source reader.

File mode scans the export folder, drops usernames already in the ledger,
records the scan, and inserts the new accounts at level zero. Counter mode
only measures how much the tracking store grew since the previous run.
"""

from __future__ import annotations

from core.config import LevelupConfig
from core.errors import LevelupStoreError
from core.logging_config import get_logger
from core.types import SourceReadResult
from ingest.account_ledger import AccountLedger
from ingest.counter_store import CounterStore
from ingest.export_reader import read_exported_accounts
from store.tracking_store import TrackingStore
from transforms.ledger_deduplication import remove_duplicate_usernames, select_unseen_accounts

_LOGGER = get_logger(__name__)


def read_new_accounts(config: LevelupConfig, tracking: TrackingStore) -> SourceReadResult:
    """Ingest or measure new accounts according to the configured mode.

    Args:
        config: Runtime configuration.
        tracking: Tracking store gateway.

    Returns:
        Source result whose count becomes ``newAccounts``.

    Raises:
        LevelupIngestError: If the export folder cannot be read.
        LevelupLedgerError: If the ledger or counter file cannot be used.
        LevelupStoreError: If the file-mode insert fails.
    """
    if config.export_folder is not None:
        return ingest_exported_accounts(
            config, tracking, AccountLedger(config.data_root), config.export_folder
        )
    return measure_counter_growth(tracking, CounterStore(config.data_root))


def ingest_exported_accounts(
    config: LevelupConfig,
    tracking: TrackingStore,
    ledger: AccountLedger,
    export_folder: str,
) -> SourceReadResult:
    """Insert export accounts the ledger has not seen yet.

    The ledger is updated before the insert, so an account is never
    reported as new twice even when the insert fails.
    """
    scanned = remove_duplicate_usernames(read_exported_accounts(export_folder, config))
    seen_usernames = ledger.load_usernames()
    unseen = select_unseen_accounts(scanned, seen_usernames)
    ledger.append(unseen)
    new_accounts = tuple(account.to_new_account() for account in unseen)
    tracking.insert_accounts(new_accounts)
    _LOGGER.info(
        "accounts_created",
        mode="file",
        scanned_count=len(scanned),
        new_count=len(new_accounts),
    )
    return SourceReadResult(
        mode="file",
        new_account_count=len(new_accounts),
        accounts_to_insert=new_accounts,
    )


def measure_counter_growth(tracking: TrackingStore, counter: CounterStore) -> SourceReadResult:
    """Report tracking store growth since the previous run.

    The difference is not clamped; it goes negative when rows were removed
    externally. When the total is unavailable the previous count is kept
    and the growth is zero.
    """
    last_count = counter.read()
    try:
        total = tracking.count_accounts()
    except LevelupStoreError as error:
        _LOGGER.warning("account_count_unavailable", error=str(error))
        total = None
    if total is None:
        counter.write(last_count)
        diff = 0
    else:
        counter.write(total)
        diff = total - last_count
    _LOGGER.info("accounts_created", mode="counter", new_count=diff, last_count=last_count)
    return SourceReadResult(mode="counter", new_account_count=diff)
