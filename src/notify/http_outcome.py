"""Best-effort HTTP calls with bounded timeouts.

Network errors, timeouts, and non-2xx responses are reported through an
``HttpOutcome`` value so callers decide how to log them.
"""

from __future__ import annotations

from typing import Any

import requests

from core.errors import LevelupNotifyError
from core.logging_config import get_logger
from core.types import HttpOutcome

_LOGGER = get_logger(__name__)


def send_request(
    method: str,
    url: str,
    timeout_seconds: float,
    json_payload: Any | None = None,
) -> HttpOutcome:
    """Send one HTTP request and capture its outcome.

    Args:
        method: ``GET`` or ``POST``.
        url: Target URL.
        timeout_seconds: Connect and read timeout.
        json_payload: Optional JSON body.

    Returns:
        Outcome with the status code, or the error when no response arrived.

    Raises:
        LevelupNotifyError: If the request itself is malformed.
    """
    if timeout_seconds <= 0:
        raise LevelupNotifyError(f"Timeout must be positive, got {timeout_seconds}.")
    try:
        response = requests.request(method, url, json=json_payload, timeout=timeout_seconds)
    except requests.Timeout:
        _LOGGER.warning("http_timeout", url=url, method=method, timeout_seconds=timeout_seconds)
        return HttpOutcome(url=url, error=f"timed out after {timeout_seconds}s")
    except requests.RequestException as error:
        _LOGGER.warning("http_failed", url=url, method=method, error=str(error))
        return HttpOutcome(url=url, error=str(error))
    outcome = HttpOutcome(url=url, status_code=response.status_code)
    if not outcome.ok:
        _LOGGER.warning("http_rejected", url=url, method=method, status_code=response.status_code)
    return outcome
