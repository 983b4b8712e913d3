import pytest

from balconysolar.core.models import ValidationError
from balconysolar.pv.economics import estimate_economics


def test_default_economics():
    eco = estimate_economics(1000.0)
    assert eco.annual_savings == pytest.approx(320.0)
    assert eco.lifetime_savings == pytest.approx(6400.0)
    assert eco.co2_saved_kg_per_year == pytest.approx(400.0)


def test_custom_price_and_lifetime():
    eco = estimate_economics(500.0, price_per_kwh=0.4, lifetime_years=10, co2_kg_per_kwh=0.2)
    assert eco.annual_savings == pytest.approx(200.0)
    assert eco.lifetime_savings == pytest.approx(2000.0)
    assert eco.co2_saved_kg_per_year == pytest.approx(100.0)


def test_negative_inputs_rejected():
    with pytest.raises(ValidationError):
        estimate_economics(-1.0)
    with pytest.raises(ValidationError):
        estimate_economics(100.0, price_per_kwh=-0.1)
