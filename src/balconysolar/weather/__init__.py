"""Sunshine provider interfaces and implementations."""

from __future__ import annotations

from pathlib import Path

from balconysolar.core.debug import DebugCollector

from .base import SunshineProvider
from .climate import ClimateZoneSunshineProvider
from .composite import FallbackSunshineProvider
from .open_meteo import OpenMeteoSunshineProvider
from .pvgis import PVGISSunshineProvider

SUNSHINE_SOURCES = ("climate", "pvgis", "open-meteo")


def build_sunshine_provider(
    source: str,
    debug: DebugCollector | None = None,
    cache_dir: str | Path | None = None,
) -> SunshineProvider:
    """Provider for a named source; online sources fall back to the climate table."""
    if source == "climate":
        return ClimateZoneSunshineProvider()
    if source == "pvgis":
        primary = PVGISSunshineProvider(debug=debug, cache_dir=cache_dir)
    elif source == "open-meteo":
        primary = OpenMeteoSunshineProvider(debug=debug)
    else:
        raise ValueError(f"Unsupported sunshine source: {source}")
    return FallbackSunshineProvider(primary, ClimateZoneSunshineProvider(), debug=debug)


__all__ = [
    "SUNSHINE_SOURCES",
    "SunshineProvider",
    "ClimateZoneSunshineProvider",
    "FallbackSunshineProvider",
    "OpenMeteoSunshineProvider",
    "PVGISSunshineProvider",
    "build_sunshine_provider",
]
