"""Sunshine provider protocol and shared HTTP plumbing."""

from __future__ import annotations

import time
from typing import Any, Dict, Protocol

import requests

from balconysolar.core.debug import DebugCollector
from balconysolar.core.models import Location, SunshineEstimate

MAX_ATTEMPTS = 3
BACKOFF_SECONDS = 0.5
REQUEST_TIMEOUT_SECONDS = 30


class SunshineProvider(Protocol):
    """Interface for annual sunshine lookups."""

    def get_annual_sunshine(self, location: Location) -> SunshineEstimate:
        """Return annual peak-sun hours (kWh/m^2 of horizontal irradiation) for ``location``.

        Implementations raise ``requests.RequestException`` on transport
        failures and ``ValueError``/``KeyError`` on unusable payloads.
        """
        ...


def fetch_json(
    session: requests.Session,
    url: str,
    params: Dict[str, str],
    debug: DebugCollector,
) -> Any:
    """GET ``url`` and decode JSON, retrying with linear backoff."""
    debug.emit("weather.request", {"url": url, "params": params})
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            resp = session.get(url, params=params, timeout=REQUEST_TIMEOUT_SECONDS)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as exc:
            if attempt == MAX_ATTEMPTS:
                raise
            debug.emit("weather.retry", {"attempt": attempt, "error": str(exc)})
            time.sleep(BACKOFF_SECONDS * attempt)


__all__ = ["SunshineProvider", "fetch_json"]
