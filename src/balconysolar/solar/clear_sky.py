"""Clear-sky attenuation model (Kasten-Young air mass via pvlib)."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pvlib

from balconysolar.core.debug import DebugCollector, NullDebugCollector

# W/m^2 treated as full sun when normalizing.
PEAK_IRRADIANCE_WM2 = 1000.0
_DNI_SCALE_WM2 = 900.0
_DIFFUSE_SCALE_WM2 = 100.0


def _horizontal_factor(elevation_deg: np.ndarray) -> np.ndarray:
    sin_e = np.sin(np.radians(elevation_deg))
    air_mass = pvlib.atmosphere.get_relative_airmass(90.0 - elevation_deg, model="kastenyoung1989")
    dni = _DNI_SCALE_WM2 * np.exp(-0.357 * np.power(air_mass, 0.678))
    diffuse = _DIFFUSE_SCALE_WM2 * sin_e
    return np.clip((dni * sin_e + diffuse) / PEAK_IRRADIANCE_WM2, 0.0, 1.0)


def clear_sky_factor(elevation_deg: float) -> float:
    """Normalized clear-sky horizontal irradiance (0..1) for a sun elevation.

    Returns 0 when the sun is on or below the horizon.
    """
    if elevation_deg <= 0:
        return 0.0
    return float(_horizontal_factor(np.asarray(float(elevation_deg))))


def clear_sky_factors(elevation_deg: pd.Series, debug: DebugCollector | None = None) -> pd.Series:
    """Vectorized :func:`clear_sky_factor` over a Series of elevations."""

    debug = debug or NullDebugCollector()
    elevation = elevation_deg.astype(float)
    out = pd.Series(0.0, index=elevation.index, name="clear_sky")
    up = elevation > 0
    if up.any():
        out[up] = _horizontal_factor(elevation[up].to_numpy())

    debug.emit(
        "clearsky.summary",
        {"factor_max": float(out.max()) if not out.empty else 0.0, "factor_sum": float(out.sum())},
    )
    return out


__all__ = ["clear_sky_factor", "clear_sky_factors", "PEAK_IRRADIANCE_WM2"]
