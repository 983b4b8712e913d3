"""Shared CLI helpers: serializing results and scenarios."""
from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from balconysolar.core.config import ConfigError, ScenarioConfig
from balconysolar.core.models import AnnualOutput
from balconysolar.pv.economics import Economics
from balconysolar.pv.layout import PanelLayout, compass_direction


def output_to_dict(
    output: AnnualOutput,
    economics: Optional[Economics] = None,
    scenario: Optional[ScenarioConfig] = None,
    include_hourly: bool = False,
) -> Dict[str, Any]:
    """Flatten an :class:`AnnualOutput` into plain JSON/YAML-friendly data."""

    reference = output.reference_day
    data: Dict[str, Any] = {
        "annual": {
            "energy_kwh": output.annual_energy_kwh,
            "unclipped_estimate_kwh": output.unclipped_estimate_kwh,
            "energy_lost_to_clipping_kwh": output.energy_lost_to_clipping_kwh,
            "clipping_loss_percent": output.clipping_loss_percent,
            "seasonal_estimate_kwh": output.seasonal_annual_energy_kwh,
        },
        "reference_day": {
            "day_of_year": reference.day_of_year,
            "energy_wh": reference.total_energy_wh,
            "energy_lost_to_clipping_wh": reference.energy_lost_to_clipping_wh,
            "max_instantaneous_power_w": reference.max_instantaneous_power_w,
            "hours_clipped": reference.fractional_hours_clipped,
            "peak_sun_hours": reference.peak_sun_hours,
        },
        "compliance": {
            "is_compliant": output.is_compliant,
            "exceeds_panel_limit": output.exceeds_panel_limit,
            "exceeds_inverter_capacity": output.exceeds_inverter_capacity,
            "is_clipping_significant": output.is_clipping_significant,
        },
        "regulation": asdict(output.regulation),
        "location_info": asdict(output.location_info),
        "efficiency": output.efficiency,
        "sunshine_source": output.sunshine_source,
        "seasons": [asdict(season) for season in output.seasonal_breakdown],
    }
    if include_hourly:
        data["reference_day"]["hourly"] = [asdict(sample) for sample in reference.hourly]
    if economics is not None:
        data["economics"] = asdict(economics)
    if scenario is not None:
        data["scenario"] = {
            "location": asdict(scenario.location),
            "array": {
                "panel_count": scenario.array.panel_count,
                "total_wattage_w": scenario.array.total_wattage_w,
                "total_area_m2": scenario.array.total_area_m2,
            },
            "orientation": {
                "azimuth_deg": scenario.orientation.panel_azimuth_deg,
                "tilt_deg": scenario.orientation.panel_tilt_deg,
                "facing": compass_direction(scenario.orientation.panel_azimuth_deg),
            },
        }
    return data


def layout_to_dict(layout: PanelLayout, panel_azimuth_deg: Optional[float] = None) -> Dict[str, Any]:
    data = {
        "panel_count": layout.array.panel_count,
        "total_wattage_w": layout.array.total_wattage_w,
        "total_area_m2": layout.array.total_area_m2,
        "line_length_m": layout.line_length_m,
        "constraint": layout.constraint,
    }
    if panel_azimuth_deg is not None:
        data["panel_azimuth_deg"] = panel_azimuth_deg
        data["facing"] = compass_direction(panel_azimuth_deg)
    return data


def render_payload(payload: Dict[str, Any], fmt: str) -> str:
    fmt = fmt.lower()
    if fmt == "json":
        return json.dumps(payload, indent=2)
    if fmt == "yaml":
        return yaml.safe_dump(payload, sort_keys=False)
    raise ValueError("format must be json or yaml")


def scenario_to_dict(scenario: ScenarioConfig) -> dict:
    data = {
        "location": {
            "lat": scenario.location.latitude,
            "lon": scenario.location.longitude,
            "label": scenario.location.label,
        },
        "array": {
            "panel_count": scenario.array.panel_count,
            "panel_wattage_w": scenario.array.panel_wattage_w,
            "panel_area_m2": scenario.array.total_area_m2 / scenario.array.panel_count
            if scenario.array.panel_count
            else 0.0,
        },
        "orientation": {
            "azimuth_deg": scenario.orientation.panel_azimuth_deg,
            "tilt_deg": scenario.orientation.panel_tilt_deg,
        },
        "economics": {"electricity_price_per_kwh": scenario.electricity_price_per_kwh},
        "run": {
            "sunshine_source": scenario.sunshine_source,
            "temperature_derate": scenario.options.temperature_derate,
            "reference_day": scenario.options.reference_day,
        },
    }
    if scenario.sunshine is not None:
        data["sunshine"] = {"annual_hours": scenario.sunshine.annual_sunshine_hours}
    return data


def write_scenario(path: Path, scenario: ScenarioConfig) -> None:
    """Persist a scenario as YAML or JSON depending on the suffix.

    Only suffixes :func:`load_scenario` reads back are accepted.
    """

    data = scenario_to_dict(scenario)
    if path.suffix.lower() in {".yaml", ".yml"}:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(data, sort_keys=False))
    elif path.suffix.lower() == ".json":
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, sort_keys=False))
    else:
        raise ConfigError(f"Unsupported config extension: {path.suffix}")


__all__ = ["output_to_dict", "layout_to_dict", "render_payload", "scenario_to_dict", "write_scenario"]
