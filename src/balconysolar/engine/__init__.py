"""Engine package orchestrating end-to-end estimates."""

from .simulate import (
    EngineOptions,
    YearProjection,
    estimate_annual_output,
    seasonal_breakdown,
    simulate_day,
    simulate_year,
)

__all__ = [
    "EngineOptions",
    "YearProjection",
    "estimate_annual_output",
    "seasonal_breakdown",
    "simulate_day",
    "simulate_year",
]
