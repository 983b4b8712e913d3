"""Savings and CO2 figures derived from annual energy."""
from __future__ import annotations

import math
from dataclasses import dataclass

from balconysolar.core.models import ValidationError

DEFAULT_PRICE_PER_KWH = 0.32
DEFAULT_LIFETIME_YEARS = 20
# German grid mix.
DEFAULT_CO2_KG_PER_KWH = 0.4


@dataclass(frozen=True)
class Economics:
    annual_savings: float
    lifetime_savings: float
    co2_saved_kg_per_year: float


def estimate_economics(
    annual_energy_kwh: float,
    price_per_kwh: float = DEFAULT_PRICE_PER_KWH,
    lifetime_years: int = DEFAULT_LIFETIME_YEARS,
    co2_kg_per_kwh: float = DEFAULT_CO2_KG_PER_KWH,
) -> Economics:
    for name, value in (
        ("annual_energy_kwh", annual_energy_kwh),
        ("price_per_kwh", price_per_kwh),
        ("lifetime_years", lifetime_years),
        ("co2_kg_per_kwh", co2_kg_per_kwh),
    ):
        if not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
            raise ValidationError(f"{name} must be a non-negative number")

    annual = annual_energy_kwh * price_per_kwh
    return Economics(
        annual_savings=annual,
        lifetime_savings=annual * lifetime_years,
        co2_saved_kg_per_year=annual_energy_kwh * co2_kg_per_kwh,
    )


__all__ = ["Economics", "estimate_economics"]
