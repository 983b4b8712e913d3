"""Offline sunshine provider backed by the static climate-zone table."""

from __future__ import annotations

from balconysolar.core.models import Location, SunshineEstimate
from balconysolar.solar.irradiance import climate_zone_annual_irradiance
from .base import SunshineProvider


class ClimateZoneSunshineProvider(SunshineProvider):
    """Never fails; used offline and as the last-resort fallback."""

    def get_annual_sunshine(self, location: Location) -> SunshineEstimate:
        return SunshineEstimate(
            annual_sunshine_hours=climate_zone_annual_irradiance(location.latitude),
            source="climate-zone",
        )


__all__ = ["ClimateZoneSunshineProvider"]
