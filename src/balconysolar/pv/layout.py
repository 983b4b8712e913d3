"""Panel layout along a balcony railing line.

Turns a drawn line (length and bearing) plus a panel datasheet into the
:class:`PanelArrayConfig` the engine consumes.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from balconysolar.core.models import PanelArrayConfig, ValidationError

MIN_PANEL_WATTAGE_W = 100.0
MAX_PANEL_WATTAGE_W = 800.0
DEFAULT_MAX_SYSTEM_WATTAGE_W = 2000.0
DEFAULT_WATTAGE_LEEWAY_W = 200.0

MOUNTINGS = ("length", "width")
SIDES = ("left", "right")

# Tilt implied by the common mounting styles.
MOUNTING_TILT_DEG = {
    "railing": 90.0,
    "angled": 45.0,
    "horizontal": 0.0,
}

_COMPASS_NAMES = (
    "North",
    "Northeast",
    "East",
    "Southeast",
    "South",
    "Southwest",
    "West",
    "Northwest",
)


@dataclass(frozen=True)
class PanelSpec:
    length_m: float = 1.7
    width_m: float = 1.1
    wattage_w: float = 400.0
    mounting: str = "length"

    def __post_init__(self):
        for name in ("length_m", "width_m"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
                raise ValidationError(f"{name} must be a positive number")
        watt = self.wattage_w
        if not isinstance(watt, (int, float)) or not (MIN_PANEL_WATTAGE_W <= watt <= MAX_PANEL_WATTAGE_W):
            raise ValidationError(
                f"wattage_w must be between {MIN_PANEL_WATTAGE_W:g} and {MAX_PANEL_WATTAGE_W:g} W"
            )
        if self.mounting not in MOUNTINGS:
            raise ValidationError(f"mounting must be one of {', '.join(MOUNTINGS)}")

    @property
    def area_m2(self) -> float:
        return self.length_m * self.width_m

    @property
    def footprint_m(self) -> float:
        """Space one panel takes along the line."""
        return self.length_m if self.mounting == "length" else self.width_m


@dataclass(frozen=True)
class PanelLayout:
    array: PanelArrayConfig
    line_length_m: float
    constrained_by_length: bool = False
    constrained_by_wattage: bool = False
    constrained_by_count: bool = False

    @property
    def constraint(self) -> str:
        if self.constrained_by_count:
            return "count"
        if self.constrained_by_wattage:
            return "wattage"
        return "length"


def panel_azimuth_from_line(line_bearing_deg: float, side: str) -> float:
    """Direction the panels face when hung on one side of a railing line.

    ``line_bearing_deg`` is the compass bearing from the line's start to its
    end; panels face 90 degrees to the left or right of it.
    """
    if side not in SIDES:
        raise ValidationError(f"side must be one of {', '.join(SIDES)}")
    if not math.isfinite(line_bearing_deg):
        raise ValidationError("line_bearing_deg must be finite")
    offset = -90.0 if side == "left" else 90.0
    return (line_bearing_deg + offset) % 360.0


def derive_array_config(
    line_length_m: float,
    panel: PanelSpec,
    max_system_wattage_w: float = DEFAULT_MAX_SYSTEM_WATTAGE_W,
    wattage_leeway_w: float = DEFAULT_WATTAGE_LEEWAY_W,
    panel_count_override: Optional[int] = None,
) -> PanelLayout:
    """Fit as many panels on the line as length and the wattage limit allow.

    An explicit ``panel_count_override`` skips both limits.
    """

    if not math.isfinite(line_length_m) or line_length_m < 0:
        raise ValidationError("line_length_m must be a non-negative number")

    if panel_count_override is not None:
        if int(panel_count_override) != panel_count_override or panel_count_override < 0:
            raise ValidationError("panel_count_override must be a non-negative integer")
        array = PanelArrayConfig.from_panels(int(panel_count_override), panel.wattage_w, panel.area_m2)
        return PanelLayout(array=array, line_length_m=float(line_length_m), constrained_by_count=True)

    if max_system_wattage_w < 0 or wattage_leeway_w < 0:
        raise ValidationError("max_system_wattage_w and wattage_leeway_w must be non-negative")

    by_length = math.floor(line_length_m / panel.footprint_m)
    by_wattage = math.floor((max_system_wattage_w + wattage_leeway_w) / panel.wattage_w)
    count = min(by_length, by_wattage)
    array = PanelArrayConfig.from_panels(count, panel.wattage_w, panel.area_m2)
    return PanelLayout(
        array=array,
        line_length_m=float(line_length_m),
        constrained_by_length=by_length <= by_wattage,
        constrained_by_wattage=by_length > by_wattage,
    )


def compass_direction(azimuth_deg: float) -> str:
    """Eight-point compass name for a bearing, sectors centred on each point."""
    index = int(((azimuth_deg % 360.0) + 22.5) // 45.0) % 8
    return _COMPASS_NAMES[index]


__all__ = [
    "PanelSpec",
    "PanelLayout",
    "MOUNTING_TILT_DEG",
    "panel_azimuth_from_line",
    "derive_array_config",
    "compass_direction",
]
