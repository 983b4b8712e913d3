import pytest

from balconysolar.core.debug import ListDebugCollector
from balconysolar.core.models import (
    Location,
    OrientationParams,
    PanelArrayConfig,
    SunshineEstimate,
    ValidationError,
)
from balconysolar.engine.simulate import (
    EngineOptions,
    estimate_annual_output,
    seasonal_breakdown,
    simulate_day,
    simulate_year,
)

GERMANY = Location(latitude=51.0, longitude=9.0, label="kassel")
CAPE_TOWN = Location(latitude=-33.9, longitude=18.4, label="cape-town")
KANSAS = Location(latitude=40.0, longitude=-100.0, label="kansas")
FOUR_PANELS = PanelArrayConfig.from_panels(4, 400, 2.0)
SOUTH_VERTICAL = OrientationParams(panel_azimuth_deg=180, panel_tilt_deg=90)


def test_annual_is_reference_day_times_365():
    out = estimate_annual_output(GERMANY, FOUR_PANELS, SOUTH_VERTICAL)
    day = simulate_day(
        FOUR_PANELS.total_wattage_w,
        out.peak_sun_hours,
        out.efficiency,
        out.regulation.max_inverter_output_w,
        SOUTH_VERTICAL.panel_azimuth_deg,
        SOUTH_VERTICAL.panel_tilt_deg,
        172,
        GERMANY.latitude,
    )
    assert out.annual_energy_kwh == day.total_energy_wh * 365 / 1000
    assert out.daily_energy_wh == day.total_energy_wh
    assert out.reference_day.day_of_year == 172


def test_without_sunshine_uses_climate_zone_table_and_notices():
    debug = ListDebugCollector()
    out = estimate_annual_output(GERMANY, FOUR_PANELS, SOUTH_VERTICAL, debug=debug)
    assert out.peak_sun_hours == pytest.approx(1100 / 365)
    assert out.sunshine_source == "climate-zone"
    notices = [e for e in debug.events if e["stage"] == "sunshine.fallback"]
    assert notices and notices[0]["payload"]["level"] == "notice"


def test_explicit_sunshine_is_used():
    debug = ListDebugCollector()
    out = estimate_annual_output(
        GERMANY, FOUR_PANELS, SOUTH_VERTICAL, sunshine=SunshineEstimate(1277.5, "pvgis"), debug=debug
    )
    assert out.peak_sun_hours == pytest.approx(3.5)
    assert out.sunshine_source == "pvgis"
    assert "sunshine.fallback" not in debug.stages()


def test_germany_compliance_and_efficiency():
    out = estimate_annual_output(GERMANY, FOUR_PANELS, SOUTH_VERTICAL)
    assert out.regulation.applies_cap
    assert out.efficiency == pytest.approx(0.82)
    assert not out.exceeds_panel_limit
    # realistic sunshine keeps a vertical 1.6 kWp array under the 800 W cap
    assert not out.exceeds_inverter_capacity
    assert out.is_compliant
    assert out.energy_lost_to_clipping_kwh == 0
    assert out.unclipped_estimate_kwh == pytest.approx(out.annual_energy_kwh)


def test_oversized_array_flags_panel_limit():
    big = PanelArrayConfig.from_panels(6, 400, 2.0)
    out = estimate_annual_output(GERMANY, big, SOUTH_VERTICAL)
    assert out.exceeds_panel_limit
    assert not out.is_compliant


def test_clipping_totals_when_sunny():
    out = estimate_annual_output(
        GERMANY,
        PanelArrayConfig.from_panels(5, 400, 2.0),
        OrientationParams(panel_azimuth_deg=180, panel_tilt_deg=45),
        sunshine=SunshineEstimate(3650, "test"),
    )
    assert out.exceeds_inverter_capacity
    assert out.energy_lost_to_clipping_kwh > 0
    assert out.unclipped_estimate_kwh == pytest.approx(out.annual_energy_kwh + out.energy_lost_to_clipping_kwh)
    expected_pct = out.energy_lost_to_clipping_kwh / out.unclipped_estimate_kwh * 100
    assert out.clipping_loss_percent == pytest.approx(expected_pct)
    assert out.is_clipping_significant == (out.clipping_loss_percent > 5)


def test_outside_europe_never_clips():
    big = PanelArrayConfig.from_panels(10, 400, 2.0)
    out = estimate_annual_output(
        KANSAS,
        big,
        OrientationParams(panel_azimuth_deg=180, panel_tilt_deg=35),
        sunshine=SunshineEstimate(3650, "test"),
    )
    assert not out.regulation.applies_cap
    assert out.is_compliant
    assert out.energy_lost_to_clipping_kwh == 0
    assert out.max_instantaneous_power_w > 800


def test_zero_panels_is_compliant_and_empty():
    empty = PanelArrayConfig(panel_count=0, total_wattage_w=0, total_area_m2=0)
    out = estimate_annual_output(GERMANY, empty, SOUTH_VERTICAL)
    assert out.annual_energy_kwh == 0
    assert out.max_instantaneous_power_w == 0
    assert out.is_compliant
    assert out.clipping_loss_percent == 0


def test_seasonal_labels_follow_hemisphere():
    north = estimate_annual_output(GERMANY, FOUR_PANELS, SOUTH_VERTICAL)
    assert [s.season_name for s in north.seasonal_breakdown] == [
        "Winter Solstice",
        "Spring Equinox",
        "Summer Solstice",
        "Fall Equinox",
    ]
    assert [s.reference_day_of_year for s in north.seasonal_breakdown] == [355, 80, 172, 266]
    assert [s.month for s in north.seasonal_breakdown] == ["December", "March", "June", "September"]

    south = estimate_annual_output(CAPE_TOWN, FOUR_PANELS, OrientationParams(panel_azimuth_deg=0, panel_tilt_deg=90))
    assert [s.season_name for s in south.seasonal_breakdown] == [
        "Summer Solstice",
        "Fall Equinox",
        "Winter Solstice",
        "Spring Equinox",
    ]
    assert south.location_info.optimal_azimuth_deg == 0


def test_seasonal_sample_arithmetic():
    out = estimate_annual_output(GERMANY, FOUR_PANELS, SOUTH_VERTICAL)
    for season in out.seasonal_breakdown:
        assert season.monthly_energy_kwh == pytest.approx(season.daily_energy_kwh * 30)
        assert season.peak_sun_hours == pytest.approx(out.peak_sun_hours * season.seasonal_factor)
        assert 0.1 <= season.seasonal_factor <= 1.5
    mean_daily = sum(s.daily_energy_kwh for s in out.seasonal_breakdown) / 4
    assert out.seasonal_annual_energy_kwh == pytest.approx(mean_daily * 365)


def test_seasonal_debug_events_are_labelled():
    debug = ListDebugCollector()
    seasonal_breakdown(1600, 3.0, 0.82, 800, 180, 90, 51.0, debug=debug)
    seasons = {e["season"] for e in debug.events if e["stage"] == "engine.day"}
    assert seasons == {"Winter Solstice", "Spring Equinox", "Summer Solstice", "Fall Equinox"}


def test_simulate_year_projection():
    year = simulate_year(1600, 3.0, 0.82, 800, 180, 90, 51.0)
    assert year.annual_energy_kwh == year.reference_day.total_energy_wh * 365 / 1000
    assert year.reference_day.day_of_year == 172


def test_temperature_derate_option_lowers_summer_output():
    plain = estimate_annual_output(GERMANY, FOUR_PANELS, SOUTH_VERTICAL)
    derated = estimate_annual_output(
        GERMANY, FOUR_PANELS, SOUTH_VERTICAL, options=EngineOptions(temperature_derate=True)
    )
    assert derated.efficiency == pytest.approx(plain.efficiency * 0.95)
    assert derated.annual_energy_kwh < plain.annual_energy_kwh


def test_custom_reference_day():
    out = estimate_annual_output(GERMANY, FOUR_PANELS, SOUTH_VERTICAL, options=EngineOptions(reference_day=80))
    assert out.reference_day.day_of_year == 80


def test_repeated_calls_return_fresh_equal_results():
    first = estimate_annual_output(GERMANY, FOUR_PANELS, SOUTH_VERTICAL)
    second = estimate_annual_output(GERMANY, FOUR_PANELS, SOUTH_VERTICAL)
    assert first == second
    assert first is not second


def test_rejects_wrong_input_types():
    with pytest.raises(ValidationError):
        estimate_annual_output({"lat": 51, "lon": 9}, FOUR_PANELS, SOUTH_VERTICAL)
    with pytest.raises(ValidationError):
        EngineOptions(reference_day=400)
