"""Shared typed models.

This module defines immutable data models used by ingest, store,
distribution, and notify layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True)
class Account:
    """One row of the ``account`` table.

    Attributes:
        username: Unique account key.
        password: Account password as exported.
        email: Optional email. Rows inserted by ingestion leave it unset; the
            export email is kept in the ledger only.
        level: Level counter maintained by the external leveler.
        banned: Whether the account was already promoted and consumed.
    """

    username: str
    password: str
    email: str | None = None
    level: int = 0
    banned: bool = False


@dataclass(frozen=True)
class ExportedAccount:
    """Eligible export line parsed into its three fields.

    Attributes:
        username: Account username.
        password: Account password.
        email: Account email, empty when the export omitted it.
    """

    username: str
    password: str
    email: str

    def to_new_account(self) -> Account:
        """Build the level-zero row inserted into the tracking store."""
        return Account(username=self.username, password=self.password, level=0)


@dataclass(frozen=True)
class SourceReadResult:
    """Output of the account source reader.

    Attributes:
        mode: ``file`` or ``counter``.
        new_account_count: Value reported as ``newAccounts``.
        accounts_to_insert: Level-zero rows to insert (file mode only).
    """

    mode: str
    new_account_count: int
    accounts_to_insert: tuple[Account, ...] = ()


@dataclass(frozen=True)
class DestinationShare:
    """Ordered destination entry used by the ratio distributor.

    Attributes:
        name: Destination store name.
        ratio: Fraction of the remaining pool routed to this destination.
    """

    name: str
    ratio: float


@dataclass(frozen=True)
class DestinationAssignment:
    """Slice of the matured sequence assigned to one destination.

    Attributes:
        name: Destination store name.
        position: Zero-based ordinal of the destination in configuration.
        start: Inclusive slice start into the matured sequence.
        stop: Exclusive slice stop into the matured sequence.
        accounts: Assigned accounts, ``matured[start:stop]``.
    """

    name: str
    position: int
    start: int
    stop: int
    accounts: tuple[Account, ...]

    @property
    def count(self) -> int:
        """Number of accounts in this assignment."""
        return self.stop - self.start


@dataclass(frozen=True)
class RunStatistics:
    """One persisted run summary.

    Attributes:
        new_accounts: Accounts created at level zero (may be negative in counter mode).
        new_matured: Accounts promoted during this run.
        routed: Destination name to number of accounts stored there this run.
        timestamp: Run start time in epoch milliseconds.
    """

    new_accounts: int
    new_matured: int
    timestamp: int
    routed: Mapping[str, int] = field(default_factory=dict)

    def to_payload(self) -> dict[str, object]:
        """Serialize into the persisted history row format."""
        return {
            "newAccounts": self.new_accounts,
            "newThirties": self.new_matured,
            "routed": dict(self.routed),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class HttpOutcome:
    """Result of one best-effort HTTP call.

    Attributes:
        url: Requested URL.
        status_code: Response status code, ``None`` when no response arrived.
        error: Failure description for network errors and timeouts.
    """

    url: str
    status_code: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Return whether the call produced a 2xx response."""
        return self.status_code is not None and 200 <= self.status_code < 300


@dataclass(frozen=True)
class StoreFailure:
    """Isolated failure of one store operation.

    Attributes:
        name: Store name.
        operation: ``insert``, ``count`` or ``release``.
        message: Error message.
    """

    name: str
    operation: str
    message: str


@dataclass(frozen=True)
class RunReport:
    """Summary of one completed pipeline run.

    Attributes:
        statistics: Persisted statistics record.
        matured_totals: Destination name to cumulative matured count.
        webhook: Webhook outcome, ``None`` when no webhook is configured.
        reloads: Reload trigger outcomes, empty outside the reload window.
        failures: Isolated destination and release failures.
    """

    statistics: RunStatistics
    matured_totals: Mapping[str, int]
    webhook: HttpOutcome | None = None
    reloads: tuple[HttpOutcome, ...] = ()
    failures: tuple[StoreFailure, ...] = ()
