"""Run summary webhook.

The payload follows the Discord webhook layout: two embeds, the first
with this run's counts and the second with cumulative matured totals.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping, Sequence

from core.constants import WEBHOOK_EMBED_COLOR
from core.logging_config import get_logger
from core.types import HttpOutcome, RunStatistics
from notify.http_outcome import send_request

_LOGGER = get_logger(__name__)


def build_webhook_payload(
    statistics: RunStatistics,
    destination_names: Sequence[str],
    matured_totals: Mapping[str, int],
    sent_at: datetime | None = None,
) -> dict[str, object]:
    """Build the webhook JSON body.

    Args:
        statistics: This run's statistics.
        destination_names: Configured destinations in order.
        matured_totals: Cumulative matured counts; failed destinations are absent.
        sent_at: Embed timestamp, current UTC time by default.

    Returns:
        JSON-serializable payload.
    """
    timestamp = (sent_at or datetime.now(timezone.utc)).isoformat()
    run_fields = [
        _field("Number of Level 0s Created", statistics.new_accounts),
        _field("Number of Level 30s Created", statistics.new_matured),
    ]
    run_fields.extend(
        _field(f"Number of Level 30s Added to {name}", statistics.routed.get(name, 0))
        for name in destination_names
    )
    total_fields = [
        _field(f"Number of Level 30s in {name}", matured_totals[name])
        for name in destination_names
        if name in matured_totals
    ]
    return {
        "content": None,
        "embeds": [
            _embed("Leveling Stats", run_fields, timestamp),
            _embed("Fresh Accounts", total_fields, timestamp),
        ],
        "attachments": [],
    }


def send_webhook(url: str, payload: Mapping[str, object], timeout_seconds: float) -> HttpOutcome:
    """POST the summary payload; failures are logged and returned, never raised."""
    outcome = send_request("POST", url, timeout_seconds, json_payload=dict(payload))
    _LOGGER.info("webhook_sent", status_code=outcome.status_code, error=outcome.error)
    return outcome


def _field(name: str, value: int) -> dict[str, str]:
    return {"name": name, "value": f"{value:,}"}


def _embed(title: str, fields: list[dict[str, str]], timestamp: str) -> dict[str, object]:
    return {
        "title": title,
        "color": WEBHOOK_EMBED_COLOR,
        "fields": fields,
        "timestamp": timestamp,
    }
