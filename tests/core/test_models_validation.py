import pytest

from balconysolar.core.models import (
    DailyProductionResult,
    HourlyProductionSample,
    Location,
    OrientationParams,
    PanelArrayConfig,
    SunshineEstimate,
    ValidationError,
)


def test_location_invalid_lat_lon():
    with pytest.raises(ValidationError):
        Location(latitude=95, longitude=0)
    with pytest.raises(ValidationError):
        Location(latitude=0, longitude=190)
    with pytest.raises(ValidationError):
        Location(latitude=float("nan"), longitude=0)


def test_panel_array_from_panels_totals():
    arr = PanelArrayConfig.from_panels(4, 400, 2.0)
    assert arr.panel_count == 4
    assert arr.total_wattage_w == 1600
    assert arr.total_area_m2 == 8.0
    assert arr.panel_wattage_w == 400


def test_panel_array_validation():
    with pytest.raises(ValidationError):
        PanelArrayConfig(panel_count=-1, total_wattage_w=0, total_area_m2=0)
    with pytest.raises(ValidationError):
        PanelArrayConfig(panel_count=1.5, total_wattage_w=400, total_area_m2=2)
    with pytest.raises(ValidationError):
        PanelArrayConfig(panel_count=2, total_wattage_w=-800, total_area_m2=2)
    # zero panels cannot carry wattage
    with pytest.raises(ValidationError):
        PanelArrayConfig(panel_count=0, total_wattage_w=400, total_area_m2=0)
    empty = PanelArrayConfig(panel_count=0, total_wattage_w=0, total_area_m2=0)
    assert empty.panel_wattage_w == 0.0


def test_orientation_rejects_out_of_range_instead_of_normalizing():
    with pytest.raises(ValidationError):
        OrientationParams(panel_azimuth_deg=360, panel_tilt_deg=30)
    with pytest.raises(ValidationError):
        OrientationParams(panel_azimuth_deg=-10, panel_tilt_deg=30)
    with pytest.raises(ValidationError):
        OrientationParams(panel_azimuth_deg=180, panel_tilt_deg=91)
    ok = OrientationParams(panel_azimuth_deg=359.9, panel_tilt_deg=90)
    assert ok.panel_azimuth_deg == 359.9


def test_sunshine_estimate_daily_average():
    est = SunshineEstimate(annual_sunshine_hours=1095, source="test")
    assert est.daily_peak_sun_hours == pytest.approx(3.0)
    with pytest.raises(ValidationError):
        SunshineEstimate(annual_sunshine_hours=-1, source="test")


def test_daily_result_frame_is_indexed_by_hour():
    samples = tuple(
        HourlyProductionSample(hour=h, instantaneous_power_w=float(h), clipped_power_w=float(h), clipping_loss_w=0.0)
        for h in range(24)
    )
    result = DailyProductionResult(
        day_of_year=172,
        peak_sun_hours=3.0,
        total_energy_wh=276.0,
        energy_lost_to_clipping_wh=4.0,
        max_instantaneous_power_w=23.0,
        fractional_hours_clipped=0.0,
        hourly=samples,
    )
    df = result.to_frame()
    assert list(df.index) == list(range(24))
    assert df.loc[5, "instantaneous_power_w"] == 5.0
    assert result.unclipped_energy_wh == 280.0
