import pytest

from balconysolar.core.debug import ListDebugCollector
from balconysolar.core.models import ValidationError
from balconysolar.engine.simulate import simulate_day
from balconysolar.solar.position import sun_position


def _day(**overrides):
    params = dict(
        dc_capacity_w=1600.0,
        peak_sun_hours=3.0,
        efficiency=0.85,
        max_inverter_output_w=800.0,
        panel_azimuth_deg=180.0,
        panel_tilt_deg=90.0,
        day_of_year=172,
        latitude_deg=51.0,
    )
    params.update(overrides)
    return simulate_day(**params)


@pytest.mark.parametrize("day,lat", [(172, 51.0), (355, 51.0), (80, -33.9), (266, 0.0), (355, 70.0)])
def test_night_has_no_production(day, lat):
    result = _day(day_of_year=day, latitude_deg=lat)
    for sample in result.hourly:
        if sun_position(sample.hour, day, lat).elevation_deg == 0:
            assert sample.instantaneous_power_w == 0
            assert sample.clipped_power_w == 0


@pytest.mark.parametrize("psh", [1.0, 5.0, 20.0])
@pytest.mark.parametrize("azimuth,tilt", [(180.0, 90.0), (90.0, 30.0), (180.0, 35.0)])
def test_clipping_never_increases_output(psh, azimuth, tilt):
    capped = _day(peak_sun_hours=psh, panel_azimuth_deg=azimuth, panel_tilt_deg=tilt)
    uncapped = _day(peak_sun_hours=psh, panel_azimuth_deg=azimuth, panel_tilt_deg=tilt, max_inverter_output_w=None)
    assert capped.total_energy_wh <= uncapped.total_energy_wh
    assert uncapped.energy_lost_to_clipping_wh == 0
    assert capped.total_energy_wh + capped.energy_lost_to_clipping_wh == pytest.approx(uncapped.total_energy_wh)


def test_clipping_floor():
    uncapped = _day(peak_sun_hours=6.0, max_inverter_output_w=None)
    at_peak = _day(peak_sun_hours=6.0, max_inverter_output_w=uncapped.max_instantaneous_power_w)
    assert at_peak.energy_lost_to_clipping_wh == 0
    assert at_peak.fractional_hours_clipped == 0
    assert at_peak.total_energy_wh == uncapped.total_energy_wh


def test_oversized_vertical_array_clips_around_noon():
    # A vertical south array only reaches ~70 W per peak-sun hour per 1.6 kWp at 51N,
    # so a very sunny day is needed to push it past 800 W.
    capped = _day(peak_sun_hours=20.0)
    uncapped = _day(peak_sun_hours=20.0, max_inverter_output_w=None)

    assert capped.max_instantaneous_power_w > 1000
    assert capped.fractional_hours_clipped > 0
    assert capped.total_energy_wh < uncapped.total_energy_wh
    peak_hour = max(capped.hourly, key=lambda s: s.instantaneous_power_w).hour
    assert 10 <= peak_hour <= 14
    clipped_hours = [s for s in capped.hourly if s.clipping_loss_w > 0]
    assert all(s.clipped_power_w == 800 for s in clipped_hours)
    expected = sum(s.clipping_loss_w / s.instantaneous_power_w for s in clipped_hours)
    assert capped.fractional_hours_clipped == pytest.approx(expected)
    assert capped.fractional_hours_clipped < len(clipped_hours)


def test_zero_capacity_produces_nothing():
    result = _day(dc_capacity_w=0.0)
    assert result.total_energy_wh == 0
    assert result.max_instantaneous_power_w == 0
    assert result.fractional_hours_clipped == 0


def test_energy_is_sum_of_hourly_power():
    result = _day(peak_sun_hours=4.0)
    assert len(result.hourly) == 24
    assert result.total_energy_wh == pytest.approx(sum(s.clipped_power_w for s in result.hourly))
    assert result.max_instantaneous_power_w == pytest.approx(max(s.instantaneous_power_w for s in result.hourly))


def test_polar_night_is_dark():
    result = _day(day_of_year=355, latitude_deg=80.0, peak_sun_hours=1.0)
    assert result.total_energy_wh == 0


def test_debug_event_emitted_per_day():
    debug = ListDebugCollector()
    _day(debug=debug)
    day_events = [e for e in debug.events if e["stage"] == "engine.day"]
    assert len(day_events) == 1
    assert day_events[0]["day"] == 172
    assert "solar_position.summary" in debug.stages()
    assert "incidence.summary" in debug.stages()


@pytest.mark.parametrize(
    "overrides",
    [
        {"dc_capacity_w": -1.0},
        {"peak_sun_hours": -0.1},
        {"efficiency": 1.5},
        {"max_inverter_output_w": -5.0},
        {"panel_azimuth_deg": 360.0},
        {"panel_tilt_deg": 95.0},
        {"day_of_year": 0},
        {"day_of_year": 172.5},
        {"latitude_deg": 100.0},
        {"dc_capacity_w": float("nan")},
    ],
)
def test_invalid_inputs_rejected(overrides):
    with pytest.raises(ValidationError):
        _day(**overrides)
