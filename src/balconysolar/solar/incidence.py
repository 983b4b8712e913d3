"""Incidence geometry between the sun and a tilted panel."""
from __future__ import annotations

import numpy as np
import pandas as pd
import pvlib

from balconysolar.core.debug import DebugCollector, NullDebugCollector


def orientation_factor(
    sun_elevation_deg: float,
    sun_azimuth_deg: float,
    panel_tilt_deg: float,
    panel_azimuth_deg: float,
) -> float:
    """Cosine of the angle of incidence, floored at 0.

    This is the dot product of the unit sun vector
    ``(cosE sinAz, cosE cosAz, sinE)`` and the panel normal
    ``(sinT sinPAz, sinT cosPAz, cosT)``, which is what
    :func:`pvlib.irradiance.aoi_projection` evaluates with zenith = 90 - E.
    1 means the sun hits the panel head-on, 0 means it is edge-on or behind.
    """
    if sun_elevation_deg <= 0:
        return 0.0
    projection = pvlib.irradiance.aoi_projection(
        panel_tilt_deg,
        panel_azimuth_deg,
        90.0 - sun_elevation_deg,
        sun_azimuth_deg,
    )
    return max(0.0, float(projection))


def orientation_factors(
    sun_path: pd.DataFrame,
    panel_tilt_deg: float,
    panel_azimuth_deg: float,
    debug: DebugCollector | None = None,
) -> pd.Series:
    """Vectorized :func:`orientation_factor` over a sun-path frame.

    ``sun_path`` needs ``elevation`` and ``azimuth`` columns in degrees.
    """

    debug = debug or NullDebugCollector()
    elevation = sun_path["elevation"].astype(float)
    projection = pvlib.irradiance.aoi_projection(
        panel_tilt_deg,
        panel_azimuth_deg,
        90.0 - elevation,
        sun_path["azimuth"].astype(float),
    )
    factors = pd.Series(np.asarray(projection, dtype=float), index=sun_path.index, name="orientation_factor")
    factors = factors.where(elevation > 0, 0.0).clip(lower=0.0)

    debug.emit(
        "incidence.summary",
        {
            "panel_tilt_deg": float(panel_tilt_deg),
            "panel_azimuth_deg": float(panel_azimuth_deg),
            "factor_max": float(factors.max()) if not factors.empty else 0.0,
        },
    )
    return factors


__all__ = ["orientation_factor", "orientation_factors"]
