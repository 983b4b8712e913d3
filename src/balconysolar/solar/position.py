"""Analytical sun position for an hour of a given day at a given latitude.

Local solar time is assumed: hour 12 is solar noon, so longitude and time
zones never enter the geometry.
"""
from __future__ import annotations

import numpy as np
import pandas as pd
import pvlib

from balconysolar.core.debug import DebugCollector, NullDebugCollector
from balconysolar.core.models import SunPosition, ValidationError

HOURS_PER_DAY = 24


def _validate(day_of_year: int, latitude_deg: float) -> None:
    if not (1 <= day_of_year <= 366):
        raise ValidationError("day_of_year must be between 1 and 366")
    if not (-90.0 <= latitude_deg <= 90.0):
        raise ValidationError("latitude must be between -90 and 90 degrees")


def declination_deg(day_of_year) -> np.ndarray | float:
    """Cooper (1969) solar declination in degrees."""
    return np.degrees(pvlib.solarposition.declination_cooper69(day_of_year))


def _sun_angles(hours: np.ndarray, day_of_year: int, latitude_deg: float) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    decl = np.radians(declination_deg(day_of_year))
    lat = np.radians(latitude_deg)
    hour_angle = 15.0 * (hours - 12.0)
    ha = np.radians(hour_angle)

    sin_elev = np.sin(lat) * np.sin(decl) + np.cos(lat) * np.cos(decl) * np.cos(ha)
    elevation = np.degrees(np.arcsin(np.clip(sin_elev, -1.0, 1.0)))

    # Azimuth is derived from the unclamped elevation; only the acos argument is clamped.
    cos_elev = np.cos(np.radians(elevation))
    numerator = np.sin(decl) * np.cos(lat) - np.cos(decl) * np.sin(lat) * np.cos(ha)
    with np.errstate(divide="ignore", invalid="ignore"):
        cos_az = numerator / cos_elev
    # Sun at the zenith: azimuth is undefined, any value works because cos(elevation) is 0.
    cos_az = np.where(np.isfinite(cos_az), cos_az, 1.0)
    azimuth = np.degrees(np.arccos(np.clip(cos_az, -1.0, 1.0)))
    azimuth = np.where(hour_angle > 0, 360.0 - azimuth, azimuth) % 360.0

    return np.maximum(elevation, 0.0), azimuth, hour_angle


def sun_position(hour: float, day_of_year: int, latitude_deg: float) -> SunPosition:
    """Sun elevation/azimuth for ``hour`` (0-23, solar time) on ``day_of_year``.

    Elevation is clamped to 0 when the sun is below the horizon; callers treat
    that as no production. Azimuth is measured clockwise from north and
    mirrored in the afternoon so it increases through the day.
    """
    if not (0 <= hour < HOURS_PER_DAY):
        raise ValidationError("hour must be in [0, 24)")
    _validate(day_of_year, latitude_deg)
    elevation, azimuth, hour_angle = _sun_angles(np.asarray([float(hour)]), day_of_year, float(latitude_deg))
    return SunPosition(
        elevation_deg=float(elevation[0]),
        azimuth_deg=float(azimuth[0]),
        hour_angle_deg=float(hour_angle[0]),
    )


def daily_sun_path(day_of_year: int, latitude_deg: float, debug: DebugCollector | None = None) -> pd.DataFrame:
    """Sun position for every hour of a day.

    Returns
    -------
    pandas.DataFrame
        Indexed by hour 0..23 with columns ``elevation``, ``azimuth`` and
        ``hour_angle`` (degrees).
    """
    _validate(day_of_year, latitude_deg)
    debug = debug or NullDebugCollector()

    hours = np.arange(HOURS_PER_DAY, dtype=float)
    elevation, azimuth, hour_angle = _sun_angles(hours, day_of_year, float(latitude_deg))
    df = pd.DataFrame(
        {"elevation": elevation, "azimuth": azimuth, "hour_angle": hour_angle},
        index=pd.RangeIndex(HOURS_PER_DAY, name="hour"),
    )

    debug.emit(
        "solar_position.summary",
        {
            "latitude": float(latitude_deg),
            "declination_deg": float(declination_deg(day_of_year)),
            "elevation_max": float(df["elevation"].max()),
            "daylight_hours": int((df["elevation"] > 0).sum()),
        },
        day=day_of_year,
    )
    return df


__all__ = ["sun_position", "daily_sun_path", "declination_deg"]
