import pytest
import requests

from balconysolar.core.debug import ListDebugCollector
from balconysolar.core.models import Location
from balconysolar.weather.open_meteo import OpenMeteoSunshineProvider

BERLIN = Location(latitude=52.52, longitude=13.41)


class DummyResp:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        return None

    def json(self):
        return self._payload


def _payload(values, units="MJ/m²"):
    return {
        "latitude": 52.52,
        "longitude": 13.41,
        "timezone": "Europe/Berlin",
        "daily_units": {"shortwave_radiation_sum": units},
        "daily": {"time": [f"d{i}" for i in range(len(values))], "shortwave_radiation_sum": values},
    }


def test_build_params_for_one_year():
    provider = OpenMeteoSunshineProvider(year=2023)
    params = provider._build_params(BERLIN)
    assert params["latitude"] == "52.52"
    assert params["start_date"] == "2023-01-01"
    assert params["end_date"] == "2023-12-31"
    assert params["daily"] == "shortwave_radiation_sum"


def test_parse_converts_megajoules_to_kwh():
    annual, days = OpenMeteoSunshineProvider._parse_annual(_payload([10.8] * 365))
    assert days == 365
    assert annual == pytest.approx(10.8 * 365 / 3.6)


def test_parse_ignores_missing_days():
    values = [7.2] * 300 + [None] * 65
    annual, days = OpenMeteoSunshineProvider._parse_annual(_payload(values))
    assert days == 300
    assert annual == pytest.approx(730.0)


def test_parse_guards():
    with pytest.raises(ValueError):
        OpenMeteoSunshineProvider._parse_annual({"hourly": {}})
    with pytest.raises(ValueError):
        OpenMeteoSunshineProvider._parse_annual(_payload([None, None]))
    with pytest.raises(ValueError):
        OpenMeteoSunshineProvider._parse_annual(_payload([3.0], units="Wh/m²"))


def test_get_annual_sunshine_handles_list_response():
    calls = []

    class Session:
        def get(self, url, params=None, timeout=None):
            calls.append(url)
            return DummyResp([_payload([3.6] * 365)])

    debug = ListDebugCollector()
    provider = OpenMeteoSunshineProvider(debug=debug, session=Session(), year=2023)
    estimate = provider.get_annual_sunshine(BERLIN)
    assert estimate.source == "open-meteo"
    assert estimate.annual_sunshine_hours == pytest.approx(365.0)
    assert calls[0].startswith("https://archive-api.open-meteo.com")
    meta = [e for e in debug.events if e["stage"] == "weather.response_meta"][0]
    assert meta["payload"]["timezone"] == "Europe/Berlin"


def test_retries_on_transport_error(monkeypatch):
    monkeypatch.setattr("balconysolar.weather.base.time.sleep", lambda seconds: None)
    calls = {"count": 0}

    class Session:
        def get(self, url, params=None, timeout=None):
            calls["count"] += 1
            if calls["count"] < 2:
                raise requests.Timeout("slow")
            return DummyResp(_payload([3.6] * 365))

    provider = OpenMeteoSunshineProvider(session=Session(), year=2023)
    estimate = provider.get_annual_sunshine(BERLIN)
    assert calls["count"] == 2
    assert estimate.annual_sunshine_hours == pytest.approx(365.0)
