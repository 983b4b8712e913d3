"""PVGIS sunshine provider (monthly radiation JSON service)."""

from __future__ import annotations

import json
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from balconysolar.core.debug import DebugCollector, NullDebugCollector
from balconysolar.core.models import Location, SunshineEstimate
from .base import SunshineProvider, fetch_json

MONTHS_PER_YEAR = 12


class PVGISSunshineProvider(SunshineProvider):
    """Annual horizontal irradiation from the PVGIS ``MRcalc`` endpoint.

    Notes
    -----
    * ``H(h)_m`` is the monthly global horizontal irradiation in kWh/m^2, so a
      year's sum is directly the annual peak-sun hours.
    * PVGIS returns a multi-year archive (SARAH/ERA5); only complete years are
      averaged.
    """

    def __init__(
        self,
        base_url: str = "https://re.jrc.ec.europa.eu/api/v5_3/MRcalc",
        debug: DebugCollector | None = None,
        session: requests.Session | None = None,
        cache_dir: str | Path | None = None,
        start_year: Optional[int] = None,
        end_year: Optional[int] = None,
    ):
        self.base_url = base_url
        self.debug = debug or NullDebugCollector()
        self.session = session or requests.Session()
        self.cache_dir = Path(cache_dir) if cache_dir else None
        self.start_year = start_year
        self.end_year = end_year

    def _build_params(self, location: Location) -> Dict[str, str]:
        params = {
            "lat": str(location.latitude),
            "lon": str(location.longitude),
            "horirrad": "1",
            "outputformat": "json",
            "browser": "0",
        }
        if self.start_year is not None:
            params["startyear"] = str(self.start_year)
        if self.end_year is not None:
            params["endyear"] = str(self.end_year)
        return params

    @staticmethod
    def _parse_annual(payload: Dict[str, Any]) -> tuple[float, int]:
        monthly = payload.get("outputs", {}).get("monthly")
        if not monthly:
            raise ValueError("PVGIS response missing monthly block")

        per_year: Dict[int, list] = defaultdict(list)
        for row in monthly:
            value = row["H(h)_m"]
            if value is None:
                continue
            per_year[int(row["year"])].append(float(value))

        totals = [sum(values) for values in per_year.values() if len(values) == MONTHS_PER_YEAR]
        if not totals:
            raise ValueError("PVGIS response has no complete year of monthly irradiation")
        return sum(totals) / len(totals), len(totals)

    def _cache_path(self, location: Location) -> Optional[Path]:
        if not self.cache_dir:
            return None
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        return self.cache_dir / f"pvgis_mrcalc_{location.latitude}_{location.longitude}.json"

    def get_annual_sunshine(self, location: Location) -> SunshineEstimate:
        cache_path = self._cache_path(location)
        cache_hit = bool(cache_path and cache_path.exists())
        if cache_hit:
            data = json.loads(cache_path.read_text())
        else:
            data = fetch_json(self.session, self.base_url, self._build_params(location), self.debug)
            if cache_path:
                cache_path.write_text(json.dumps(data))

        annual, years = self._parse_annual(data)
        self.debug.emit(
            "weather.response_meta",
            {
                "provider": "pvgis",
                "source": data.get("inputs", {}).get("meteo_data", {}).get("radiation_db"),
                "years": years,
                "annual_sunshine_hours": annual,
                "cache": cache_hit,
            },
        )
        return SunshineEstimate(annual_sunshine_hours=annual, source="pvgis")


__all__ = ["PVGISSunshineProvider"]
