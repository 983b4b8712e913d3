"""Open-Meteo sunshine provider (historical archive)."""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Optional

import pandas as pd
import requests

from balconysolar.core.debug import DebugCollector, NullDebugCollector
from balconysolar.core.models import Location, SunshineEstimate
from .base import SunshineProvider, fetch_json

# 1 kWh = 3.6 MJ
MJ_PER_KWH = 3.6
DAYS_PER_YEAR = 365


class OpenMeteoSunshineProvider(SunshineProvider):
    """Annual horizontal irradiation from one year of Open-Meteo daily sums."""

    def __init__(
        self,
        base_url: str = "https://archive-api.open-meteo.com/v1/archive",
        debug: DebugCollector | None = None,
        session: requests.Session | None = None,
        year: Optional[int] = None,
    ):
        self.base_url = base_url
        self.debug = debug or NullDebugCollector()
        self.session = session or requests.Session()
        # Default to the last complete calendar year.
        self.year = year if year is not None else dt.date.today().year - 1

    def _build_params(self, location: Location) -> Dict[str, str]:
        return {
            "latitude": str(location.latitude),
            "longitude": str(location.longitude),
            "start_date": f"{self.year}-01-01",
            "end_date": f"{self.year}-12-31",
            "daily": "shortwave_radiation_sum",
            "timezone": "auto",
        }

    @staticmethod
    def _parse_annual(payload: Dict[str, Any]) -> tuple[float, int]:
        daily = payload.get("daily")
        if daily is None:
            raise ValueError("Open-Meteo response missing daily block")
        units = payload.get("daily_units", {}).get("shortwave_radiation_sum", "MJ/m²")
        if units and "MJ" not in units:
            raise ValueError(f"unexpected shortwave_radiation_sum units: {units}")

        sums = pd.Series(daily["shortwave_radiation_sum"], dtype=float).dropna()
        if sums.empty:
            raise ValueError("Open-Meteo response has no shortwave_radiation_sum values")
        # Mean-based so sparse gaps don't bias the year low.
        annual = float(sums.mean()) * DAYS_PER_YEAR / MJ_PER_KWH
        return annual, int(sums.size)

    def get_annual_sunshine(self, location: Location) -> SunshineEstimate:
        data = fetch_json(self.session, self.base_url, self._build_params(location), self.debug)
        if isinstance(data, list):  # multi-coordinate responses come back as a list
            if not data:
                raise ValueError("Open-Meteo returned an empty response")
            data = data[0]

        annual, days = self._parse_annual(data)
        self.debug.emit(
            "weather.response_meta",
            {
                "provider": "open-meteo",
                "timezone": data.get("timezone"),
                "year": self.year,
                "valid_days": days,
                "annual_sunshine_hours": annual,
            },
        )
        return SunshineEstimate(annual_sunshine_hours=annual, source="open-meteo")


__all__ = ["OpenMeteoSunshineProvider"]
