"""Energy integration engine: hourly power, inverter clipping, daily/annual totals."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from balconysolar.core.debug import DebugCollector, NullDebugCollector, ScopedDebugCollector
from balconysolar.core.models import (
    AnnualOutput,
    DailyProductionResult,
    HourlyProductionSample,
    Location,
    OrientationParams,
    PanelArrayConfig,
    SeasonalSample,
    SunshineEstimate,
    ValidationError,
)
from balconysolar.core.regulation import location_info, resolve_regulation
from balconysolar.pv.power import check_compliance, clip_to_inverter, panel_efficiency
from balconysolar.solar.incidence import orientation_factors
from balconysolar.solar.irradiance import (
    SUMMER_SOLSTICE_DAY,
    build_daily_curve,
    climate_zone,
    climate_zone_annual_irradiance,
    scale_curve,
    seasonal_irradiance_ratio,
)
from balconysolar.solar.position import daily_sun_path

DAYS_PER_YEAR = 365
DAYS_PER_MONTH = 30
# Hours below this scaled irradiance are treated as dark.
MIN_IRRADIANCE = 0.001
SIGNIFICANT_CLIPPING_PERCENT = 5.0

# (day_of_year, month, northern label, southern label)
SEASON_REFERENCE_DAYS = (
    (355, "December", "Winter Solstice", "Summer Solstice"),
    (80, "March", "Spring Equinox", "Fall Equinox"),
    (172, "June", "Summer Solstice", "Winter Solstice"),
    (266, "September", "Fall Equinox", "Spring Equinox"),
)


@dataclass(frozen=True)
class EngineOptions:
    reference_day: int = SUMMER_SOLSTICE_DAY
    temperature_derate: bool = False

    def __post_init__(self):
        if not (1 <= self.reference_day <= 366):
            raise ValidationError("reference_day must be between 1 and 366")


@dataclass(frozen=True)
class YearProjection:
    """Annual totals extrapolated from a single representative day."""

    reference_day: DailyProductionResult
    annual_energy_kwh: float
    unclipped_estimate_kwh: float
    energy_lost_to_clipping_kwh: float
    clipping_loss_percent: float


def _check_range(name: str, value: float, low: float, high: float, *, high_inclusive: bool = True) -> float:
    try:
        fval = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be numeric, got {value!r}") from exc
    upper_ok = fval <= high if high_inclusive else fval < high
    if not math.isfinite(fval) or fval < low or not upper_ok:
        bracket = "]" if high_inclusive else ")"
        raise ValidationError(f"{name} must be in [{low}, {high}{bracket}, got {value!r}")
    return fval


def _validate_day_inputs(
    dc_capacity_w: float,
    peak_sun_hours: float,
    efficiency: float,
    max_inverter_output_w: Optional[float],
    panel_azimuth_deg: float,
    panel_tilt_deg: float,
    day_of_year: int,
    latitude_deg: float,
) -> None:
    _check_range("dc_capacity_w", dc_capacity_w, 0.0, math.inf)
    _check_range("peak_sun_hours", peak_sun_hours, 0.0, math.inf)
    _check_range("efficiency", efficiency, 0.0, 1.0)
    if max_inverter_output_w is not None:
        _check_range("max_inverter_output_w", max_inverter_output_w, 0.0, math.inf)
    _check_range("panel_azimuth_deg", panel_azimuth_deg, 0.0, 360.0, high_inclusive=False)
    _check_range("panel_tilt_deg", panel_tilt_deg, 0.0, 90.0)
    _check_range("day_of_year", day_of_year, 1, 366)
    if int(day_of_year) != day_of_year:
        raise ValidationError("day_of_year must be an integer")
    _check_range("latitude_deg", latitude_deg, -90.0, 90.0)


def simulate_day(
    dc_capacity_w: float,
    peak_sun_hours: float,
    efficiency: float,
    max_inverter_output_w: Optional[float],
    panel_azimuth_deg: float,
    panel_tilt_deg: float,
    day_of_year: int,
    latitude_deg: float,
    debug: DebugCollector | None = None,
) -> DailyProductionResult:
    """Integrate one day of production hour by hour.

    The irradiance curve for the day is scaled to ``peak_sun_hours``, projected
    onto the panel, converted to DC power and clipped at the inverter ceiling
    (``None`` = no ceiling). Each hourly sample counts as one hour, so summed
    watts are watt-hours. Clipped hours are fractional: an hour that loses a
    quarter of its power to the inverter contributes 0.25.
    """

    _validate_day_inputs(
        dc_capacity_w,
        peak_sun_hours,
        efficiency,
        max_inverter_output_w,
        panel_azimuth_deg,
        panel_tilt_deg,
        day_of_year,
        latitude_deg,
    )
    debug = debug or NullDebugCollector()
    day_of_year = int(day_of_year)

    curve = scale_curve(build_daily_curve(day_of_year, latitude_deg, debug=debug), peak_sun_hours)
    sun_path = daily_sun_path(day_of_year, latitude_deg)
    factors = orientation_factors(sun_path, panel_tilt_deg, panel_azimuth_deg, debug=debug)

    active = curve > MIN_IRRADIANCE
    effective = (curve * factors).where(active, 0.0)
    pdc = (dc_capacity_w * efficiency * effective).rename("pdc_w")
    clipped = clip_to_inverter(pdc, max_inverter_output_w)

    hourly = tuple(
        HourlyProductionSample(
            hour=int(hour),
            instantaneous_power_w=float(pdc[hour]),
            clipped_power_w=float(clipped.at[hour, "pac_w"]),
            clipping_loss_w=float(clipped.at[hour, "clipping_loss_w"]),
            irradiance=float(curve[hour]),
            orientation_factor=float(factors[hour]) if active[hour] else 0.0,
        )
        for hour in curve.index
    )

    result = DailyProductionResult(
        day_of_year=day_of_year,
        peak_sun_hours=float(peak_sun_hours),
        total_energy_wh=float(clipped["pac_w"].sum()),
        energy_lost_to_clipping_wh=float(clipped["clipping_loss_w"].sum()),
        max_instantaneous_power_w=float(pdc.max()) if not pdc.empty else 0.0,
        fractional_hours_clipped=float(clipped["clipped_fraction"].sum()),
        hourly=hourly,
    )

    debug.emit(
        "engine.day",
        {
            "dc_capacity_w": float(dc_capacity_w),
            "efficiency": float(efficiency),
            "max_inverter_output_w": max_inverter_output_w,
            "peak_sun_hours": float(peak_sun_hours),
            "total_energy_wh": result.total_energy_wh,
            "energy_lost_to_clipping_wh": result.energy_lost_to_clipping_wh,
            "max_instantaneous_power_w": result.max_instantaneous_power_w,
            "fractional_hours_clipped": result.fractional_hours_clipped,
            "active_hours": int(active.sum()),
        },
        day=day_of_year,
    )
    return result


def _clipping_percent(energy_wh: float, lost_wh: float) -> float:
    total = energy_wh + lost_wh
    return (lost_wh / total) * 100.0 if total > 0 else 0.0


def simulate_year(
    dc_capacity_w: float,
    peak_sun_hours: float,
    efficiency: float,
    max_inverter_output_w: Optional[float],
    panel_azimuth_deg: float,
    panel_tilt_deg: float,
    latitude_deg: float,
    reference_day: int = SUMMER_SOLSTICE_DAY,
    debug: DebugCollector | None = None,
) -> YearProjection:
    """Annual totals as one representative day times 365.

    Deliberately simple: the seasonal breakdown is computed separately and is
    not reconciled with this figure.
    """

    debug = debug or NullDebugCollector()
    day = simulate_day(
        dc_capacity_w,
        peak_sun_hours,
        efficiency,
        max_inverter_output_w,
        panel_azimuth_deg,
        panel_tilt_deg,
        reference_day,
        latitude_deg,
        debug=debug,
    )
    annual_wh = day.total_energy_wh * DAYS_PER_YEAR
    lost_wh = day.energy_lost_to_clipping_wh * DAYS_PER_YEAR
    projection = YearProjection(
        reference_day=day,
        annual_energy_kwh=annual_wh / 1000.0,
        unclipped_estimate_kwh=(annual_wh + lost_wh) / 1000.0,
        energy_lost_to_clipping_kwh=lost_wh / 1000.0,
        clipping_loss_percent=_clipping_percent(annual_wh, lost_wh),
    )
    debug.emit(
        "engine.year",
        {
            "annual_energy_kwh": projection.annual_energy_kwh,
            "energy_lost_to_clipping_kwh": projection.energy_lost_to_clipping_kwh,
            "clipping_loss_percent": projection.clipping_loss_percent,
        },
        day=reference_day,
    )
    return projection


def seasonal_breakdown(
    dc_capacity_w: float,
    annual_peak_sun_hours: float,
    efficiency: float,
    max_inverter_output_w: Optional[float],
    panel_azimuth_deg: float,
    panel_tilt_deg: float,
    latitude_deg: float,
    temperature_derate: bool = False,
    debug: DebugCollector | None = None,
) -> Tuple[SeasonalSample, ...]:
    """Production on the two solstices and two equinoxes.

    ``annual_peak_sun_hours`` is the average daily value; each reference day
    scales it by :func:`seasonal_irradiance_ratio`. Season labels follow the
    hemisphere of ``latitude_deg``.
    """

    debug = debug or NullDebugCollector()
    info = location_info(latitude_deg)
    samples = []
    for day, month, north_label, south_label in SEASON_REFERENCE_DAYS:
        label = north_label if info.is_northern else south_label
        season_debug = ScopedDebugCollector(debug, season=label)
        ratio = seasonal_irradiance_ratio(day, latitude_deg)
        peak_sun_hours = annual_peak_sun_hours * ratio
        day_efficiency = efficiency
        if temperature_derate:
            day_efficiency = panel_efficiency(
                panel_azimuth_deg,
                panel_tilt_deg,
                info.optimal_azimuth_deg,
                info.optimal_tilt_deg,
                day_of_year=day,
                latitude_deg=latitude_deg,
                debug=season_debug,
            )
        result = simulate_day(
            dc_capacity_w,
            peak_sun_hours,
            day_efficiency,
            max_inverter_output_w,
            panel_azimuth_deg,
            panel_tilt_deg,
            day,
            latitude_deg,
            debug=season_debug,
        )
        samples.append(
            SeasonalSample(
                season_name=label,
                month=month,
                reference_day_of_year=day,
                daily_energy_kwh=result.total_energy_wh / 1000.0,
                monthly_energy_kwh=result.total_energy_wh * DAYS_PER_MONTH / 1000.0,
                clipping_loss_percent=_clipping_percent(result.total_energy_wh, result.energy_lost_to_clipping_wh),
                peak_sun_hours=peak_sun_hours,
                hours_clipped=result.fractional_hours_clipped,
                seasonal_factor=ratio,
            )
        )
    return tuple(samples)


def resolve_peak_sun_hours(
    location: Location,
    sunshine: Optional[SunshineEstimate],
    debug: DebugCollector | None = None,
) -> Tuple[float, str]:
    """Average daily peak-sun hours and where the number came from.

    Without an external estimate the static climate-zone table is used and a
    ``sunshine.fallback`` notice is emitted.
    """
    debug = debug or NullDebugCollector()
    if sunshine is not None:
        return sunshine.daily_peak_sun_hours, sunshine.source
    annual = climate_zone_annual_irradiance(location.latitude)
    debug.emit(
        "sunshine.fallback",
        {
            "level": "notice",
            "reason": "no_external_estimate",
            "zone": climate_zone(location.latitude).name,
            "annual_sunshine_hours": annual,
        },
    )
    return annual / DAYS_PER_YEAR, "climate-zone"


def estimate_annual_output(
    location: Location,
    array: PanelArrayConfig,
    orientation: OrientationParams,
    sunshine: Optional[SunshineEstimate] = None,
    options: Optional[EngineOptions] = None,
    debug: DebugCollector | None = None,
) -> AnnualOutput:
    """Run the full estimate for one array at one location.

    Resolves the regional caps, computes the orientation efficiency, projects
    the reference day to a year, checks compliance and adds the four-season
    breakdown. Returns a new immutable :class:`AnnualOutput` on every call.
    """

    for name, value, kind in (
        ("location", location, Location),
        ("array", array, PanelArrayConfig),
        ("orientation", orientation, OrientationParams),
    ):
        if not isinstance(value, kind):
            raise ValidationError(f"{name} must be a {kind.__name__} instance")

    debug = debug or NullDebugCollector()
    options = options or EngineOptions()

    regulation = resolve_regulation(location, debug=debug)
    info = location_info(location.latitude)
    efficiency = panel_efficiency(
        orientation.panel_azimuth_deg,
        orientation.panel_tilt_deg,
        info.optimal_azimuth_deg,
        info.optimal_tilt_deg,
        day_of_year=options.reference_day if options.temperature_derate else None,
        latitude_deg=location.latitude,
        debug=debug,
    )
    peak_sun_hours, source = resolve_peak_sun_hours(location, sunshine, debug=debug)
    cap = regulation.max_inverter_output_w

    year = simulate_year(
        array.total_wattage_w,
        peak_sun_hours,
        efficiency,
        cap,
        orientation.panel_azimuth_deg,
        orientation.panel_tilt_deg,
        location.latitude,
        reference_day=options.reference_day,
        debug=debug,
    )
    reference = year.reference_day
    compliance = check_compliance(array.total_wattage_w, reference.max_instantaneous_power_w, regulation)

    seasons = seasonal_breakdown(
        array.total_wattage_w,
        peak_sun_hours,
        efficiency,
        cap,
        orientation.panel_azimuth_deg,
        orientation.panel_tilt_deg,
        location.latitude,
        temperature_derate=options.temperature_derate,
        debug=debug,
    )
    seasonal_annual = sum(s.daily_energy_kwh for s in seasons) / len(seasons) * DAYS_PER_YEAR

    output = AnnualOutput(
        annual_energy_kwh=year.annual_energy_kwh,
        unclipped_estimate_kwh=year.unclipped_estimate_kwh,
        energy_lost_to_clipping_kwh=year.energy_lost_to_clipping_kwh,
        clipping_loss_percent=year.clipping_loss_percent,
        max_instantaneous_power_w=reference.max_instantaneous_power_w,
        hours_clipped_per_day=reference.fractional_hours_clipped,
        peak_sun_hours=peak_sun_hours,
        daily_energy_wh=reference.total_energy_wh,
        is_compliant=compliance.is_compliant,
        exceeds_panel_limit=compliance.exceeds_panel_limit,
        exceeds_inverter_capacity=compliance.exceeds_inverter_capacity,
        is_clipping_significant=year.clipping_loss_percent > SIGNIFICANT_CLIPPING_PERCENT,
        efficiency=efficiency,
        regulation=regulation,
        location_info=info,
        sunshine_source=source,
        seasonal_annual_energy_kwh=seasonal_annual,
        seasonal_breakdown=seasons,
        reference_day=reference,
    )

    debug.emit(
        "engine.output",
        {
            "location": location.label,
            "region": regulation.region_name,
            "annual_energy_kwh": output.annual_energy_kwh,
            "seasonal_annual_energy_kwh": output.seasonal_annual_energy_kwh,
            "is_compliant": output.is_compliant,
            "sunshine_source": source,
        },
        day=options.reference_day,
    )
    return output


__all__ = [
    "EngineOptions",
    "YearProjection",
    "SEASON_REFERENCE_DAYS",
    "simulate_day",
    "simulate_year",
    "seasonal_breakdown",
    "resolve_peak_sun_hours",
    "estimate_annual_output",
]
