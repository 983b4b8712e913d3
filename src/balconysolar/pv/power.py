"""Array efficiency, inverter clipping and regulatory compliance.

Provides small helpers that keep naming consistent across the project and
emit summary debug events for auditability.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from balconysolar.core.debug import DebugCollector, NullDebugCollector
from balconysolar.core.models import RegionalRegulation

MIN_EFFICIENCY = 0.3


def angular_difference(a_deg: float, b_deg: float) -> float:
    """Smallest angle between two compass bearings, in [0, 180]."""
    diff = abs(a_deg - b_deg) % 360.0
    return min(diff, 360.0 - diff)


def azimuth_efficiency(panel_azimuth_deg: float, optimal_azimuth_deg: float) -> float:
    diff = math.radians(angular_difference(panel_azimuth_deg, optimal_azimuth_deg))
    return 0.7 + 0.3 * math.cos(diff)


def tilt_efficiency(panel_tilt_deg: float, optimal_tilt_deg: float) -> float:
    """Piecewise-linear tilt term peaking at 1.0 on the optimal tilt.

    Rises from 0.85 (flat) to 1.0 at the optimum, drops 0.15 over the next
    30 degrees, then another 0.10 per 30 degrees beyond that.
    """
    if panel_tilt_deg <= optimal_tilt_deg:
        if optimal_tilt_deg <= 0:
            return 1.0
        return 0.85 + (panel_tilt_deg / optimal_tilt_deg) * 0.15
    if panel_tilt_deg <= optimal_tilt_deg + 30.0:
        return 1.0 - ((panel_tilt_deg - optimal_tilt_deg) / 30.0) * 0.15
    return 0.85 - ((panel_tilt_deg - optimal_tilt_deg - 30.0) / 30.0) * 0.10


def temperature_efficiency(day_of_year: int, latitude_deg: float = 0.0) -> float:
    """Seasonal heat derate: up to 5% loss around local midsummer, clamped to [0.95, 1.02]."""
    summer_day = 172 if latitude_deg >= 0 else 355
    offset = abs(day_of_year - summer_day)
    cycle = math.cos((offset / 182.5) * math.pi)
    return max(0.95, min(1.02, 1.0 - cycle * 0.05))


def panel_efficiency(
    panel_azimuth_deg: float,
    panel_tilt_deg: float,
    optimal_azimuth_deg: float,
    optimal_tilt_deg: float,
    day_of_year: Optional[int] = None,
    latitude_deg: float = 0.0,
    debug: DebugCollector | None = None,
) -> float:
    """Static orientation efficiency multiplier in (0, 1].

    When ``day_of_year`` is given the seasonal temperature derate is folded in.
    The result never drops below ``MIN_EFFICIENCY``.
    """

    debug = debug or NullDebugCollector()
    az_term = azimuth_efficiency(panel_azimuth_deg, optimal_azimuth_deg)
    tilt_term = tilt_efficiency(panel_tilt_deg, optimal_tilt_deg)
    temp_term = temperature_efficiency(day_of_year, latitude_deg) if day_of_year is not None else 1.0
    total = min(1.0, max(MIN_EFFICIENCY, az_term * tilt_term * temp_term))

    debug.emit(
        "efficiency.summary",
        {
            "optimal_azimuth_deg": optimal_azimuth_deg,
            "optimal_tilt_deg": optimal_tilt_deg,
            "azimuth_term": az_term,
            "tilt_term": tilt_term,
            "temperature_term": temp_term,
            "efficiency": total,
        },
        day=day_of_year,
    )
    return total


def clip_to_inverter(pdc_w: pd.Series, max_output_w: Optional[float]) -> pd.DataFrame:
    """Apply an inverter output ceiling to hourly power.

    Returns columns ``pac_w`` (delivered), ``clipping_loss_w`` and
    ``clipped_fraction`` (share of the hour's power that was discarded). With
    no ceiling nothing is clipped.
    """
    pdc = pdc_w.astype(float)
    if max_output_w is None:
        zeros = pd.Series(0.0, index=pdc.index)
        return pd.DataFrame({"pac_w": pdc, "clipping_loss_w": zeros, "clipped_fraction": zeros})

    over = pdc > max_output_w
    pac = pdc.where(~over, float(max_output_w))
    loss = (pdc - pac).where(over, 0.0)
    with np.errstate(divide="ignore", invalid="ignore"):
        fraction = (loss / pdc).where(over, 0.0)
    return pd.DataFrame({"pac_w": pac, "clipping_loss_w": loss, "clipped_fraction": fraction})


@dataclass(frozen=True)
class Compliance:
    exceeds_panel_limit: bool
    exceeds_inverter_capacity: bool
    is_compliant: bool


def check_compliance(
    total_wattage_w: float,
    max_instantaneous_power_w: float,
    regulation: RegionalRegulation,
) -> Compliance:
    """Business-rule check against the regional caps.

    The inverter check uses pre-clip power so an oversized array is flagged
    even though delivered output is capped. Uncapped regions are always
    compliant.
    """
    if not regulation.applies_cap:
        return Compliance(False, False, True)

    exceeds_panel = (
        regulation.max_panel_capacity_w is not None and total_wattage_w > regulation.max_panel_capacity_w
    )
    exceeds_inverter = (
        regulation.max_inverter_output_w is not None
        and max_instantaneous_power_w > regulation.max_inverter_output_w
    )
    return Compliance(exceeds_panel, exceeds_inverter, not exceeds_panel and not exceeds_inverter)


__all__ = [
    "MIN_EFFICIENCY",
    "angular_difference",
    "azimuth_efficiency",
    "tilt_efficiency",
    "temperature_efficiency",
    "panel_efficiency",
    "clip_to_inverter",
    "Compliance",
    "check_compliance",
]
