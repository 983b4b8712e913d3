import pytest

from balconysolar.core.debug import ListDebugCollector
from balconysolar.pv.power import (
    MIN_EFFICIENCY,
    angular_difference,
    azimuth_efficiency,
    panel_efficiency,
    temperature_efficiency,
    tilt_efficiency,
)


def test_angular_difference_wraps():
    assert angular_difference(350, 10) == 20
    assert angular_difference(0, 180) == 180
    assert angular_difference(90, 90) == 0


def test_azimuth_efficiency_range():
    assert azimuth_efficiency(180, 180) == pytest.approx(1.0)
    assert azimuth_efficiency(90, 180) == pytest.approx(0.7)
    assert azimuth_efficiency(0, 180) == pytest.approx(0.4)


def test_tilt_efficiency_piecewise():
    assert tilt_efficiency(0, 51) == pytest.approx(0.85)
    assert tilt_efficiency(51, 51) == pytest.approx(1.0)
    assert tilt_efficiency(81, 51) == pytest.approx(0.85)
    # vertical at 51N sits in the steep tail
    assert tilt_efficiency(90, 51) == pytest.approx(0.82)


def test_temperature_efficiency_seasonal():
    assert temperature_efficiency(172, 51.0) == pytest.approx(0.95)
    assert temperature_efficiency(355, 51.0) == pytest.approx(1.02)
    # southern summer is in December
    assert temperature_efficiency(355, -33.9) == pytest.approx(0.95)
    for day in range(1, 366, 7):
        assert 0.95 <= temperature_efficiency(day, 45.0) <= 1.02


def test_panel_efficiency_combines_terms():
    debug = ListDebugCollector()
    eff = panel_efficiency(180, 90, 180, 51, debug=debug)
    assert eff == pytest.approx(0.82)
    assert debug.stages() == ["efficiency.summary"]
    derated = panel_efficiency(180, 90, 180, 51, day_of_year=172, latitude_deg=51.0)
    assert derated == pytest.approx(0.82 * 0.95)


def test_panel_efficiency_floor_and_ceiling():
    # facing away from the equator, lying in the steep tail
    assert panel_efficiency(0, 90, 180, 10) == MIN_EFFICIENCY
    assert panel_efficiency(180, 51, 180, 51, day_of_year=355, latitude_deg=51.0) == 1.0
