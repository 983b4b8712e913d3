"""Regional power-output rules and hemisphere-dependent panel orientation.

European locations get the German plug-in ("balcony") solar limits: 800 W of
inverter output to the grid and 2000 W of connected panel capacity.
Everywhere else is treated as unconstrained.
"""
from __future__ import annotations

import math
from typing import Optional

from balconysolar.core.debug import DebugCollector, NullDebugCollector
from balconysolar.core.models import LocationInfo, Location, RegionalRegulation

EUROPE_LATITUDE = (35.0, 71.0)
EUROPE_LONGITUDE = (-10.0, 40.0)

GERMAN_MAX_INVERTER_OUTPUT_W = 800.0
GERMAN_MAX_PANEL_CAPACITY_W = 2000.0

SOUTHERN_SEASONAL_SHIFT_DAYS = 182.5


def is_in_europe(latitude: float, longitude: float) -> bool:
    return (
        EUROPE_LATITUDE[0] <= latitude <= EUROPE_LATITUDE[1]
        and EUROPE_LONGITUDE[0] <= longitude <= EUROPE_LONGITUDE[1]
    )


def _german_rules(region_name: str, description: str) -> RegionalRegulation:
    return RegionalRegulation(
        max_inverter_output_w=GERMAN_MAX_INVERTER_OUTPUT_W,
        max_panel_capacity_w=GERMAN_MAX_PANEL_CAPACITY_W,
        applies_cap=True,
        region_name=region_name,
        description=description,
    )


def resolve_regulation(location: Optional[Location], debug: DebugCollector | None = None) -> RegionalRegulation:
    """Regulation applying at ``location``.

    A missing or non-finite location falls back to the German rules and emits
    a ``regulation.fallback`` warning event instead of failing.
    """

    debug = debug or NullDebugCollector()
    lat = getattr(location, "latitude", None)
    lon = getattr(location, "longitude", None)
    usable = (
        isinstance(lat, (int, float))
        and isinstance(lon, (int, float))
        and math.isfinite(lat)
        and math.isfinite(lon)
    )
    if not usable:
        debug.emit(
            "regulation.fallback",
            {"level": "warning", "reason": "unparsable_location", "location": repr(location)},
        )
        return _german_rules(
            "Europe (German Regulations - Default)",
            "German balcony solar regulations (800W inverter, 2000W panels) - applied as default",
        )

    if is_in_europe(lat, lon):
        regulation = _german_rules(
            "Europe (German Regulations)",
            "German balcony solar regulations (800W inverter, 2000W panels)",
        )
    else:
        regulation = RegionalRegulation(
            max_inverter_output_w=None,
            max_panel_capacity_w=None,
            applies_cap=False,
            region_name="Outside Europe",
            description="No specific regulatory limits applied",
        )

    debug.emit(
        "regulation.resolved",
        {"latitude": lat, "longitude": lon, "region": regulation.region_name, "applies_cap": regulation.applies_cap},
    )
    return regulation


def location_info(latitude: float) -> LocationInfo:
    """Hemisphere and rule-of-thumb optimal orientation for a latitude.

    Panels should face the equator: south (180 deg) in the north, north (0 deg)
    in the south. Optimal tilt is the absolute latitude limited to 10..60 deg.
    """
    northern = latitude >= 0
    return LocationInfo(
        hemisphere="Northern" if northern else "Southern",
        is_northern=northern,
        optimal_azimuth_deg=180.0 if northern else 0.0,
        optimal_tilt_deg=min(max(abs(latitude), 10.0), 60.0),
        seasonal_shift_days=0.0 if northern else SOUTHERN_SEASONAL_SHIFT_DAYS,
    )


__all__ = [
    "is_in_europe",
    "resolve_regulation",
    "location_info",
    "GERMAN_MAX_INVERTER_OUTPUT_W",
    "GERMAN_MAX_PANEL_CAPACITY_W",
]
