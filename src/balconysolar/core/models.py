"""Domain models for the balcony solar estimator.

Provides immutable value objects with validation for locations, panel arrays,
orientation and the results produced by the simulation engine.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

import pandas as pd


class ValidationError(ValueError):
    """Raised when model inputs violate constraints."""


def _require_finite(name: str, value: float) -> float:
    try:
        fval = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be numeric, got {value!r}") from exc
    if not math.isfinite(fval):
        raise ValidationError(f"{name} must be a finite number")
    return fval


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    label: str = "site"

    def __post_init__(self):
        lat = _require_finite("latitude", self.latitude)
        lon = _require_finite("longitude", self.longitude)
        if not (-90.0 <= lat <= 90.0):
            raise ValidationError("latitude must be between -90 and 90 degrees")
        if not (-180.0 <= lon <= 180.0):
            raise ValidationError("longitude must be between -180 and 180 degrees")
        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "longitude", lon)


@dataclass(frozen=True)
class PanelArrayConfig:
    """Physical panel array handed in by the layout/UI layer.

    ``total_wattage_w`` is always ``panel_count`` times the per-panel wattage;
    use :meth:`from_panels` to build one from per-panel values.
    """

    panel_count: int
    total_wattage_w: float
    total_area_m2: float

    def __post_init__(self):
        if isinstance(self.panel_count, bool) or int(self.panel_count) != self.panel_count:
            raise ValidationError("panel_count must be an integer")
        if self.panel_count < 0:
            raise ValidationError("panel_count must be non-negative")
        wattage = _require_finite("total_wattage_w", self.total_wattage_w)
        area = _require_finite("total_area_m2", self.total_area_m2)
        if wattage < 0:
            raise ValidationError("total_wattage_w must be non-negative")
        if area < 0:
            raise ValidationError("total_area_m2 must be non-negative")
        if self.panel_count == 0 and (wattage > 0 or area > 0):
            raise ValidationError("total_wattage_w and total_area_m2 must be 0 when panel_count is 0")
        object.__setattr__(self, "panel_count", int(self.panel_count))
        object.__setattr__(self, "total_wattage_w", wattage)
        object.__setattr__(self, "total_area_m2", area)

    @classmethod
    def from_panels(cls, panel_count: int, panel_wattage_w: float, panel_area_m2: float) -> "PanelArrayConfig":
        if _require_finite("panel_wattage_w", panel_wattage_w) < 0:
            raise ValidationError("panel_wattage_w must be non-negative")
        if _require_finite("panel_area_m2", panel_area_m2) < 0:
            raise ValidationError("panel_area_m2 must be non-negative")
        return cls(
            panel_count=panel_count,
            total_wattage_w=panel_count * float(panel_wattage_w),
            total_area_m2=panel_count * float(panel_area_m2),
        )

    @property
    def panel_wattage_w(self) -> float:
        if self.panel_count == 0:
            return 0.0
        return self.total_wattage_w / self.panel_count


@dataclass(frozen=True)
class OrientationParams:
    panel_azimuth_deg: float
    panel_tilt_deg: float

    def __post_init__(self):
        azimuth = _require_finite("panel_azimuth_deg", self.panel_azimuth_deg)
        tilt = _require_finite("panel_tilt_deg", self.panel_tilt_deg)
        # No normalization here: out-of-range input is a caller bug, not something to fix up.
        if not (0.0 <= azimuth < 360.0):
            raise ValidationError("panel_azimuth_deg must be in [0, 360) degrees")
        if not (0.0 <= tilt <= 90.0):
            raise ValidationError("panel_tilt_deg must be between 0 and 90 degrees")
        object.__setattr__(self, "panel_azimuth_deg", azimuth)
        object.__setattr__(self, "panel_tilt_deg", tilt)


@dataclass(frozen=True)
class SunPosition:
    elevation_deg: float
    azimuth_deg: float
    hour_angle_deg: float = 0.0

    @property
    def is_up(self) -> bool:
        return self.elevation_deg > 0


@dataclass(frozen=True)
class RegionalRegulation:
    """Power-output caps for a region; ``None`` means unconstrained."""

    max_inverter_output_w: Optional[float]
    max_panel_capacity_w: Optional[float]
    applies_cap: bool
    region_name: str
    description: str = ""


@dataclass(frozen=True)
class LocationInfo:
    hemisphere: str
    is_northern: bool
    optimal_azimuth_deg: float
    optimal_tilt_deg: float
    seasonal_shift_days: float = 0.0


@dataclass(frozen=True)
class HourlyProductionSample:
    hour: int
    instantaneous_power_w: float
    clipped_power_w: float
    clipping_loss_w: float
    irradiance: float = 0.0
    orientation_factor: float = 0.0


@dataclass(frozen=True)
class DailyProductionResult:
    day_of_year: int
    peak_sun_hours: float
    total_energy_wh: float
    energy_lost_to_clipping_wh: float
    max_instantaneous_power_w: float
    fractional_hours_clipped: float
    hourly: Tuple[HourlyProductionSample, ...] = field(default_factory=tuple)

    @property
    def unclipped_energy_wh(self) -> float:
        return self.total_energy_wh + self.energy_lost_to_clipping_wh

    def to_frame(self) -> pd.DataFrame:
        """Hourly detail as a DataFrame indexed by hour (for detail views)."""
        columns = [
            "irradiance",
            "orientation_factor",
            "instantaneous_power_w",
            "clipped_power_w",
            "clipping_loss_w",
        ]
        rows = [{"hour": s.hour, **{c: getattr(s, c) for c in columns}} for s in self.hourly]
        if not rows:
            return pd.DataFrame(columns=columns, index=pd.Index([], name="hour"))
        return pd.DataFrame(rows).set_index("hour")[columns]


@dataclass(frozen=True)
class SeasonalSample:
    season_name: str
    month: str
    reference_day_of_year: int
    daily_energy_kwh: float
    monthly_energy_kwh: float
    clipping_loss_percent: float
    peak_sun_hours: float
    hours_clipped: float = 0.0
    seasonal_factor: float = 0.0


@dataclass(frozen=True)
class SunshineEstimate:
    """Annual sunshine expressed as peak-sun hours per year (kWh/m^2/year)."""

    annual_sunshine_hours: float
    source: str

    def __post_init__(self):
        hours = _require_finite("annual_sunshine_hours", self.annual_sunshine_hours)
        if hours < 0:
            raise ValidationError("annual_sunshine_hours must be non-negative")
        object.__setattr__(self, "annual_sunshine_hours", hours)

    @property
    def daily_peak_sun_hours(self) -> float:
        return self.annual_sunshine_hours / 365.0


@dataclass(frozen=True)
class AnnualOutput:
    annual_energy_kwh: float
    unclipped_estimate_kwh: float
    energy_lost_to_clipping_kwh: float
    clipping_loss_percent: float
    max_instantaneous_power_w: float
    hours_clipped_per_day: float
    peak_sun_hours: float
    daily_energy_wh: float
    is_compliant: bool
    exceeds_panel_limit: bool
    exceeds_inverter_capacity: bool
    is_clipping_significant: bool
    efficiency: float
    regulation: RegionalRegulation
    location_info: LocationInfo
    sunshine_source: str
    seasonal_annual_energy_kwh: float
    seasonal_breakdown: Tuple[SeasonalSample, ...]
    reference_day: DailyProductionResult


__all__ = [
    "ValidationError",
    "Location",
    "PanelArrayConfig",
    "OrientationParams",
    "SunPosition",
    "RegionalRegulation",
    "LocationInfo",
    "HourlyProductionSample",
    "DailyProductionResult",
    "SeasonalSample",
    "SunshineEstimate",
    "AnnualOutput",
]
