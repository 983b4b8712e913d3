"""Command line entrypoint for balconysolar.

Implements three commands:

* ``run``: estimate annual production for a scenario config file.
* ``layout``: work out how many panels fit on a railing line and where they face.
* ``init``: write a starter scenario config.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from balconysolar.core.config import ConfigError, ScenarioConfig, load_scenario
from balconysolar.core.debug import DebugCollector, NullDebugCollector, build_debug_collector
from balconysolar.core.models import (
    Location,
    OrientationParams,
    PanelArrayConfig,
    SunshineEstimate,
    ValidationError,
)
from balconysolar.cli_utils import layout_to_dict, output_to_dict, render_payload, write_scenario
from balconysolar.engine.simulate import estimate_annual_output
from balconysolar.pv.economics import estimate_economics
from balconysolar.pv.layout import (
    MOUNTING_TILT_DEG,
    PanelSpec,
    compass_direction,
    derive_array_config,
    panel_azimuth_from_line,
)
from balconysolar.weather import (
    SUNSHINE_SOURCES,
    ClimateZoneSunshineProvider,
    SunshineProvider,
    build_sunshine_provider,
)

__version__ = "0.1.0"

app = typer.Typer(add_completion=False, help="Balcony solar yield estimator CLI")


def default_sunshine_provider(
    source: str, debug: DebugCollector, cache_dir: Optional[Path] = None
) -> SunshineProvider:
    """Factory separated for easy monkeypatching in tests."""

    return build_sunshine_provider(source, debug=debug, cache_dir=cache_dir)


def _exit_with_error(msg: str) -> None:
    typer.echo(f"Error: {msg}", err=True)
    raise typer.Exit(code=1)


def _resolve_sunshine(
    scenario: ScenarioConfig,
    source: str,
    annual_hours: Optional[float],
    debug: DebugCollector,
    cache_dir: Optional[Path],
) -> Optional[SunshineEstimate]:
    """CLI value wins over the config value, which wins over a provider lookup."""
    if annual_hours is not None:
        try:
            return SunshineEstimate(annual_sunshine_hours=annual_hours, source="cli")
        except ValidationError as exc:
            _exit_with_error(str(exc))
    if scenario.sunshine is not None:
        return scenario.sunshine
    if source == "climate":
        # Requested explicitly, so this is not a fallback.
        return ClimateZoneSunshineProvider().get_annual_sunshine(scenario.location)
    provider = default_sunshine_provider(source, debug, cache_dir)
    return provider.get_annual_sunshine(scenario.location)


def _summary_lines(payload: dict) -> list[str]:
    annual = payload["annual"]
    compliance = payload["compliance"]
    lines = [
        f"Annual energy:        {annual['energy_kwh']:.1f} kWh",
        f"Lost to clipping:     {annual['energy_lost_to_clipping_kwh']:.1f} kWh ({annual['clipping_loss_percent']:.1f}%)",
        f"Region:               {payload['regulation']['region_name']}",
        f"Compliant:            {'yes' if compliance['is_compliant'] else 'no'}",
    ]
    if "economics" in payload:
        eco = payload["economics"]
        lines.append(f"Savings:              {eco['annual_savings']:.0f}/year ({eco['lifetime_savings']:.0f} lifetime)")
        lines.append(f"CO2 avoided:          {eco['co2_saved_kg_per_year']:.0f} kg/year")
    for season in payload["seasons"]:
        lines.append(
            f"  {season['season_name']:<16} {season['month']:<10} {season['daily_energy_kwh']:.2f} kWh/day"
        )
    return lines


@app.command()
def run(
    config: Path = typer.Option(Path("etc/config.yaml"), exists=True, readable=True, help="Scenario YAML/JSON file"),
    sunshine_source: Optional[str] = typer.Option(
        None, "--sunshine-source", help="Sunshine data: climate, pvgis or open-meteo (default from config)"
    ),
    annual_sunshine_hours: Optional[float] = typer.Option(
        None, "--annual-sunshine-hours", help="Override annual peak-sun hours (kWh/m^2/year)"
    ),
    price: Optional[float] = typer.Option(None, "--price", help="Electricity price per kWh"),
    pvgis_cache_dir: Optional[Path] = typer.Option(None, help="Cache PVGIS responses in this directory"),
    hourly: bool = typer.Option(False, "--hourly", help="Include the reference day's hourly detail"),
    debug: Optional[Path] = typer.Option(None, help="Write debug events to this path (.json or .jsonl)"),
    format: str = typer.Option("json", "--format", "-f", help="Output format: json or yaml"),
    output: Optional[Path] = typer.Option(None, help="Output file path; prints to stdout when omitted"),
):
    """Estimate annual production for the provided scenario."""

    try:
        scenario = load_scenario(config)
    except ConfigError as exc:
        _exit_with_error(str(exc))

    fmt = format.lower()
    if fmt not in {"json", "yaml"}:
        _exit_with_error("format must be json or yaml")
    source = (sunshine_source or scenario.sunshine_source).lower()
    if source not in SUNSHINE_SOURCES:
        _exit_with_error(f"Unsupported sunshine_source '{source}'")
    effective_price = price if price is not None else scenario.electricity_price_per_kwh

    debug_collector = build_debug_collector(debug) if debug else NullDebugCollector()
    try:
        sunshine = _resolve_sunshine(scenario, source, annual_sunshine_hours, debug_collector, pvgis_cache_dir)
        result = estimate_annual_output(
            scenario.location,
            scenario.array,
            scenario.orientation,
            sunshine=sunshine,
            options=scenario.options,
            debug=debug_collector,
        )
        economics = estimate_economics(result.annual_energy_kwh, effective_price)
    except ValidationError as exc:
        _exit_with_error(str(exc))
    finally:
        if hasattr(debug_collector, "close"):
            debug_collector.close()

    payload = output_to_dict(result, economics=economics, scenario=scenario, include_hourly=hourly)
    rendered = render_payload(payload, fmt)
    if output:
        output.write_text(rendered)
        for line in _summary_lines(payload):
            typer.echo(line)
        typer.echo(f"Wrote results to {output}")
    else:
        typer.echo(rendered)
    if debug:
        typer.echo(f"Debug events -> {debug}", err=True)


@app.command()
def layout(
    line_length: float = typer.Option(..., "--line-length", help="Railing line length in meters"),
    panel_length: float = typer.Option(1.7, "--panel-length", help="Panel length in meters"),
    panel_width: float = typer.Option(1.1, "--panel-width", help="Panel width in meters"),
    panel_wattage: float = typer.Option(400.0, "--panel-wattage", help="Panel rated power in W"),
    mounting: str = typer.Option("length", "--mounting", help="Panel side along the line: length or width"),
    max_system_wattage: float = typer.Option(2000.0, "--max-system-wattage", help="System power limit in W"),
    panel_count: Optional[int] = typer.Option(None, "--panel-count", help="Force a panel count"),
    line_bearing: Optional[float] = typer.Option(None, "--line-bearing", help="Compass bearing of the line"),
    side: str = typer.Option("right", "--side", help="Side of the line the panels face: left or right"),
    format: str = typer.Option("json", "--format", "-f", help="Output format: json or yaml"),
):
    """Derive the panel array that fits on a railing line."""

    try:
        panel = PanelSpec(length_m=panel_length, width_m=panel_width, wattage_w=panel_wattage, mounting=mounting)
        derived = derive_array_config(
            line_length, panel, max_system_wattage_w=max_system_wattage, panel_count_override=panel_count
        )
        azimuth = panel_azimuth_from_line(line_bearing, side) if line_bearing is not None else None
        typer.echo(render_payload(layout_to_dict(derived, azimuth), format))
    except ValueError as exc:
        _exit_with_error(str(exc))


@app.command()
def init(
    path: Path = typer.Argument(Path("etc/config.yaml"), help="Where to write the scenario"),
    lat: float = typer.Option(..., prompt="Latitude", help="Site latitude"),
    lon: float = typer.Option(..., prompt="Longitude", help="Site longitude"),
    label: str = typer.Option("site", help="Site label"),
    panels: int = typer.Option(2, help="Number of panels"),
    panel_wattage: float = typer.Option(400.0, help="Panel rated power in W"),
    panel_area: float = typer.Option(1.9, help="Panel area in m^2"),
    azimuth: float = typer.Option(180.0, help="Panel azimuth (0=N, 90=E, 180=S, 270=W)"),
    mounting_style: str = typer.Option("railing", help="railing, angled or horizontal"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
):
    """Write a starter scenario config."""

    if path.exists() and not force:
        _exit_with_error(f"{path} already exists; use --force to overwrite")
    if mounting_style not in MOUNTING_TILT_DEG:
        _exit_with_error(f"mounting_style must be one of {', '.join(MOUNTING_TILT_DEG)}")
    try:
        scenario = ScenarioConfig(
            location=Location(latitude=lat, longitude=lon, label=label),
            array=PanelArrayConfig.from_panels(panels, panel_wattage, panel_area),
            orientation=OrientationParams(
                panel_azimuth_deg=azimuth, panel_tilt_deg=MOUNTING_TILT_DEG[mounting_style]
            ),
        )
        write_scenario(path, scenario)
    except ValueError as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Wrote scenario to {path} (panels face {compass_direction(azimuth)})")


@app.callback(invoke_without_command=True)
def version_callback(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
):
    if version:
        typer.echo(__version__)
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def main() -> None:  # pragma: no cover - thin wrapper for console_script
    app()


__all__ = ["app", "main", "default_sunshine_provider"]


if __name__ == "__main__":  # pragma: no cover
    main()
