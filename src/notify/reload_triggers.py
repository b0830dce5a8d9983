"""Daily reload triggers for downstream consumers."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Sequence

from core.constants import RELOAD_WINDOW_HOUR, RELOAD_WINDOW_MINUTES
from core.logging_config import get_logger
from core.types import HttpOutcome
from notify.http_outcome import send_request

_LOGGER = get_logger(__name__)


def in_reload_window(moment: datetime) -> bool:
    """Return whether local time falls in the first ten minutes after 04:00."""
    return moment.hour == RELOAD_WINDOW_HOUR and moment.minute < RELOAD_WINDOW_MINUTES


def fire_reload_triggers(
    urls: Sequence[str],
    timeout_seconds: float,
    moment: datetime | None = None,
) -> tuple[HttpOutcome, ...]:
    """Call every reload URL once when inside the daily window.

    Args:
        urls: Reload URLs.
        timeout_seconds: Per-call timeout.
        moment: Local time to test, now by default.

    Returns:
        One outcome per URL, or nothing outside the window.
    """
    current = moment or datetime.now()
    if not urls or not in_reload_window(current):
        return ()
    with ThreadPoolExecutor(max_workers=len(urls)) as executor:
        outcomes = tuple(
            executor.map(lambda url: send_request("GET", url, timeout_seconds), urls)
        )
    for outcome in outcomes:
        _LOGGER.info(
            "reload_triggered",
            url=outcome.url,
            status_code=outcome.status_code,
            error=outcome.error,
        )
    return outcomes
