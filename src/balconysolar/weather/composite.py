"""Composite sunshine provider: primary lookup with an offline fallback."""

from __future__ import annotations

import requests

from balconysolar.core.debug import DebugCollector, NullDebugCollector
from balconysolar.core.models import Location, SunshineEstimate
from .base import SunshineProvider


class FallbackSunshineProvider(SunshineProvider):
    """Use the primary provider; on failure or a non-positive result use the fallback.

    Only transport, payload and cache I/O errors are absorbed. Anything else
    (bugs in a provider, for example) propagates.
    """

    def __init__(self, primary: SunshineProvider, fallback: SunshineProvider, debug: DebugCollector | None = None):
        self.primary = primary
        self.fallback = fallback
        self.debug = debug or NullDebugCollector()

    def _fall_back(self, location: Location, reason: str, error: str | None = None) -> SunshineEstimate:
        estimate = self.fallback.get_annual_sunshine(location)
        self.debug.emit(
            "sunshine.fallback",
            {
                "level": "notice",
                "reason": reason,
                "primary": type(self.primary).__name__,
                "error": error,
                "source": estimate.source,
                "annual_sunshine_hours": estimate.annual_sunshine_hours,
            },
        )
        return estimate

    def get_annual_sunshine(self, location: Location) -> SunshineEstimate:
        try:
            estimate = self.primary.get_annual_sunshine(location)
        except (requests.RequestException, OSError, ValueError, KeyError) as exc:
            return self._fall_back(location, "primary_failed", str(exc))
        if estimate.annual_sunshine_hours <= 0:
            return self._fall_back(location, "non_positive_estimate")
        return estimate


__all__ = ["FallbackSunshineProvider"]
