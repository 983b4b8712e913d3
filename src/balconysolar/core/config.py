"""Configuration loader for scenarios.

Supports YAML and JSON files describing one balcony installation: where it
is, which panels, how they face and how the estimate should be run.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from balconysolar.engine.simulate import EngineOptions
from balconysolar.pv.economics import DEFAULT_PRICE_PER_KWH
from balconysolar.pv.layout import (
    DEFAULT_MAX_SYSTEM_WATTAGE_W,
    DEFAULT_WATTAGE_LEEWAY_W,
    MOUNTING_TILT_DEG,
    PanelLayout,
    PanelSpec,
    derive_array_config,
    panel_azimuth_from_line,
)
from .models import Location, OrientationParams, PanelArrayConfig, SunshineEstimate


class ConfigError(ValueError):
    """Raised when configuration cannot be parsed into domain models."""


_DEF_REQUIRED_ARRAY_KEYS = {"panel_count", "panel_wattage_w", "panel_area_m2"}
_DEF_REQUIRED_LAYOUT_KEYS = {"line_length_m", "panel_length_m", "panel_width_m", "panel_wattage_w"}
_SUNSHINE_SOURCES = {"climate", "pvgis", "open-meteo"}


@dataclass(frozen=True)
class ScenarioConfig:
    location: Location
    array: PanelArrayConfig
    orientation: OrientationParams
    layout: Optional[PanelLayout] = None
    electricity_price_per_kwh: float = DEFAULT_PRICE_PER_KWH
    sunshine: Optional[SunshineEstimate] = None
    sunshine_source: str = "climate"
    options: EngineOptions = EngineOptions()


def _load_raw(path: Path) -> Dict[str, Any]:
    text = path.read_text()
    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            raw = yaml.safe_load(text) or {}
        elif path.suffix.lower() == ".json":
            raw = json.loads(text)
        else:
            raise ConfigError(f"Unsupported config extension: {path.suffix}")
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Could not parse {path.name}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    return raw


def _as_int(value: Any, field: str) -> int:
    """Whole-number config value; fractional input is rejected, not truncated."""
    if isinstance(value, bool):
        raise ConfigError(f"{field} must be an integer")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field} must be an integer") from exc
    if not number.is_integer():
        raise ConfigError(f"{field} must be an integer, got {value}")
    return int(number)


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return value


def _parse_location(raw: Dict[str, Any]) -> Location:
    try:
        return Location(
            latitude=float(raw["lat"]),
            longitude=float(raw["lon"]),
            label=str(raw.get("label", "site")),
        )
    except KeyError as exc:
        raise ConfigError(f"Missing location field: {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid location: {exc}") from exc


def _parse_array(raw: Dict[str, Any]) -> PanelArrayConfig:
    missing = _DEF_REQUIRED_ARRAY_KEYS - raw.keys()
    if missing:
        raise ConfigError(f"Missing array fields: {sorted(missing)}")
    try:
        return PanelArrayConfig.from_panels(
            _as_int(raw["panel_count"], "panel_count"),
            float(raw["panel_wattage_w"]),
            float(raw["panel_area_m2"]),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid array: {exc}") from exc


def _parse_layout(raw: Dict[str, Any]) -> PanelLayout:
    missing = _DEF_REQUIRED_LAYOUT_KEYS - raw.keys()
    if missing:
        raise ConfigError(f"Missing layout fields: {sorted(missing)}")
    try:
        panel = PanelSpec(
            length_m=float(raw["panel_length_m"]),
            width_m=float(raw["panel_width_m"]),
            wattage_w=float(raw["panel_wattage_w"]),
            mounting=raw.get("mounting", "length"),
        )
        override = raw.get("panel_count_override")
        return derive_array_config(
            float(raw["line_length_m"]),
            panel,
            max_system_wattage_w=float(raw.get("max_system_wattage_w", DEFAULT_MAX_SYSTEM_WATTAGE_W)),
            wattage_leeway_w=float(raw.get("wattage_leeway_w", DEFAULT_WATTAGE_LEEWAY_W)),
            panel_count_override=_as_int(override, "panel_count_override") if override is not None else None,
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid layout: {exc}") from exc


def _parse_orientation(raw: Dict[str, Any], layout_raw: Dict[str, Any]) -> OrientationParams:
    """Orientation from explicit angles, or from the railing line and mounting style."""
    try:
        if "azimuth_deg" in raw:
            azimuth = float(raw["azimuth_deg"])
        elif "line_bearing_deg" in layout_raw:
            azimuth = panel_azimuth_from_line(float(layout_raw["line_bearing_deg"]), layout_raw.get("side", "right"))
        else:
            raise ConfigError("orientation needs azimuth_deg (or layout.line_bearing_deg)")

        if "tilt_deg" in raw:
            tilt = float(raw["tilt_deg"])
        elif "mounting_style" in raw:
            style = raw["mounting_style"]
            if style not in MOUNTING_TILT_DEG:
                raise ConfigError(f"mounting_style must be one of {sorted(MOUNTING_TILT_DEG)}")
            tilt = MOUNTING_TILT_DEG[style]
        else:
            raise ConfigError("orientation needs tilt_deg (or mounting_style)")
        return OrientationParams(panel_azimuth_deg=azimuth, panel_tilt_deg=tilt)
    except ConfigError:
        raise
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid orientation: {exc}") from exc


def _parse_run(raw: Dict[str, Any]) -> tuple[str, EngineOptions]:
    source = raw.get("sunshine_source", "climate")
    if source not in _SUNSHINE_SOURCES:
        raise ConfigError(f"sunshine_source must be one of {sorted(_SUNSHINE_SOURCES)}")
    derate = raw.get("temperature_derate", False)
    if not isinstance(derate, bool):
        raise ConfigError("temperature_derate must be true or false")
    try:
        reference_day = _as_int(raw.get("reference_day", 172), "reference_day")
        options = EngineOptions(reference_day=reference_day, temperature_derate=derate)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid run options: {exc}") from exc
    return source, options


def _parse_sunshine(raw: Dict[str, Any]) -> Optional[SunshineEstimate]:
    if raw.get("annual_hours") is None:
        return None
    try:
        return SunshineEstimate(annual_sunshine_hours=float(raw["annual_hours"]), source="config")
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid sunshine: {exc}") from exc


def _parse_price(raw: Dict[str, Any]) -> float:
    try:
        price = float(raw.get("electricity_price_per_kwh", DEFAULT_PRICE_PER_KWH))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid electricity price: {exc}") from exc
    if price < 0:
        raise ConfigError("electricity_price_per_kwh must be non-negative")
    return price


def load_scenario(path: str | Path) -> ScenarioConfig:
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    raw = _load_raw(path)
    if "location" not in raw:
        raise ConfigError("Config must contain a 'location' mapping")
    has_array, has_layout = "array" in raw, "layout" in raw
    if has_array == has_layout:
        raise ConfigError("Config must contain exactly one of 'array' or 'layout'")

    location = _parse_location(_section(raw, "location"))
    layout_raw = _section(raw, "layout")
    layout = _parse_layout(layout_raw) if has_layout else None
    array = layout.array if layout is not None else _parse_array(_section(raw, "array"))
    orientation = _parse_orientation(_section(raw, "orientation"), layout_raw)
    source, options = _parse_run(_section(raw, "run"))

    return ScenarioConfig(
        location=location,
        array=array,
        orientation=orientation,
        layout=layout,
        electricity_price_per_kwh=_parse_price(_section(raw, "economics")),
        sunshine=_parse_sunshine(_section(raw, "sunshine")),
        sunshine_source=source,
        options=options,
    )


__all__ = [
    "ConfigError",
    "ScenarioConfig",
    "load_scenario",
]
