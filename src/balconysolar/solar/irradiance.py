"""Daily irradiance profile builder and climate corrections.

The profile is a shape-only curve (24 hourly fractions of full sun). Callers
that need absolute energy anchor it to a daily peak-sun-hour total with
:func:`scale_curve`.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from balconysolar.core.debug import DebugCollector, NullDebugCollector
from balconysolar.core.regulation import location_info
from balconysolar.solar.clear_sky import clear_sky_factors
from balconysolar.solar.position import daily_sun_path

SUMMER_SOLSTICE_DAY = 172
_MIN_REFERENCE_TOTAL = 0.1


@dataclass(frozen=True)
class ClimateZone:
    name: str
    min_abs_latitude: float
    base_weather_factor: float
    annual_irradiance_kwh_m2: float


# Ordered from the pole toward the equator; first match wins.
CLIMATE_ZONES = (
    ClimateZone("polar", 60.0, 0.35, 800.0),
    ClimateZone("temperate", 45.0, 0.65, 1100.0),
    ClimateZone("subtropical", 23.5, 0.75, 1400.0),
    ClimateZone("tropical", 0.0, 0.60, 1600.0),
)


def climate_zone(latitude_deg: float) -> ClimateZone:
    abs_lat = abs(latitude_deg)
    for zone in CLIMATE_ZONES:
        if abs_lat >= zone.min_abs_latitude:
            return zone
    return CLIMATE_ZONES[-1]


def climate_zone_annual_irradiance(latitude_deg: float) -> float:
    """Static annual horizontal irradiation (kWh/m^2, i.e. peak-sun hours per year)."""
    return climate_zone(latitude_deg).annual_irradiance_kwh_m2


def _seasonal_multiplier(month: int) -> float:
    if month <= 2 or month == 12:
        return 0.8
    if 3 <= month <= 5:
        return 0.95
    if 6 <= month <= 8:
        return 1.1
    return 0.9


def weather_factor(day_of_year: int, latitude_deg: float) -> float:
    """Cloudiness correction (0.2..1.0) from climate zone and season.

    Southern-hemisphere days are shifted half a year so "summer" means the
    local summer.
    """
    info = location_info(latitude_deg)
    adjusted = day_of_year
    if not info.is_northern:
        adjusted = (day_of_year + info.seasonal_shift_days) % 365
    month = math.floor((adjusted - 1) / 30.4) + 1
    factor = climate_zone(latitude_deg).base_weather_factor * _seasonal_multiplier(month)
    return max(0.2, min(1.0, factor))


def build_daily_curve(day_of_year: int, latitude_deg: float, debug: DebugCollector | None = None) -> pd.Series:
    """Hourly irradiance fractions (index 0..23) for one day at a latitude.

    Each daylight hour is the clear-sky factor times the weather factor times
    a smooth intra-day term ``0.9 + 0.2 sin(h pi / 12)``. The last term is a
    realism tweak rather than physics. Values are clamped to [0, 1].
    """

    debug = debug or NullDebugCollector()
    path = daily_sun_path(day_of_year, latitude_deg, debug=debug)
    clear = clear_sky_factors(path["elevation"])
    factor = weather_factor(day_of_year, latitude_deg)
    hours = path.index.to_numpy(dtype=float)
    variation = pd.Series(0.9 + 0.2 * np.sin(hours * np.pi / 12.0), index=path.index)

    curve = (clear * factor * variation).where(path["elevation"] > 0, 0.0).clip(lower=0.0, upper=1.0)
    curve.name = "irradiance"

    debug.emit(
        "irradiance.curve",
        {"weather_factor": factor, "curve_sum": float(curve.sum()), "curve_max": float(curve.max())},
        day=day_of_year,
    )
    return curve


def scale_curve(curve: pd.Series, peak_sun_hours: float) -> pd.Series:
    """Rescale a raw curve so its hourly values sum to ``peak_sun_hours``."""
    total = float(curve.sum())
    scaling = peak_sun_hours / total if total > 0 else 0.0
    scaled = (curve * scaling).clip(lower=0.0)
    scaled.name = curve.name
    return scaled


def daily_clear_sky_total(day_of_year: int, latitude_deg: float) -> float:
    path = daily_sun_path(day_of_year, latitude_deg)
    return float(clear_sky_factors(path["elevation"]).sum())


def seasonal_irradiance_ratio(day_of_year: int, latitude_deg: float) -> float:
    """Daily clear-sky total relative to the June solstice, weather-corrected.

    Clamped to [0.1, 1.5]; used to derive a day's peak-sun hours from the
    annual average.
    """
    reference = max(daily_clear_sky_total(SUMMER_SOLSTICE_DAY, latitude_deg), _MIN_REFERENCE_TOTAL)
    geometric = daily_clear_sky_total(day_of_year, latitude_deg) / reference
    return max(0.1, min(1.5, geometric * weather_factor(day_of_year, latitude_deg)))


__all__ = [
    "ClimateZone",
    "CLIMATE_ZONES",
    "SUMMER_SOLSTICE_DAY",
    "climate_zone",
    "climate_zone_annual_irradiance",
    "weather_factor",
    "build_daily_curve",
    "scale_curve",
    "daily_clear_sky_total",
    "seasonal_irradiance_ratio",
]
