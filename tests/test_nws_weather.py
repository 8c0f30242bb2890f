"""
Unit tests for NWS point, forecast and alert parsing.
"""
import pytest

from app.core.api_errors import ParseError
from app.core.risk import RiskLevel
from app.sources.nws_weather.client import NWSClient
from app.sources.nws_weather.metadata import (
    alert_severity_color,
    build_weather_data,
    classify_weather_alerts,
    parse_alerts,
    parse_forecast,
    parse_point,
    unavailable_weather_data,
)

FORECAST_URL = "https://api.weather.gov/gridpoints/TBW/71,98/forecast"

POINT_RESPONSE = {
    "properties": {
        "cwa": "TBW",
        "gridId": "TBW",
        "gridX": 71,
        "gridY": 98,
        "forecast": FORECAST_URL,
        "timeZone": "America/New_York",
        "relativeLocation": {"properties": {"city": "Tampa", "state": "FL"}},
    }
}


def forecast_response(count=16):
    return {
        "properties": {
            "periods": [
                {
                    "number": i + 1,
                    "name": f"Period {i + 1}",
                    "temperature": 80 + i,
                    "temperatureUnit": "F",
                    "windSpeed": "10 mph",
                    "windDirection": "E",
                    "shortForecast": "Sunny",
                    "detailedForecast": "Sunny, with a high near 80.",
                    "isDaytime": i % 2 == 0,
                    "probabilityOfPrecipitation": {"unitCode": "wmoUnit:percent", "value": 10},
                }
                for i in range(count)
            ]
        }
    }


def alert_feature(event, severity):
    return {
        "id": f"urn:oid:{event}",
        "properties": {
            "event": event,
            "severity": severity,
            "headline": f"{event} issued",
            "areaDesc": "Hillsborough",
            "senderName": "NWS Tampa Bay",
        },
    }


@pytest.mark.unit
class TestParsing:

    def test_parse_point(self):
        location = parse_point(POINT_RESPONSE)
        assert location.city == "Tampa"
        assert location.state == "FL"
        assert location.office == "TBW"
        assert location.grid_x == 71
        assert location.forecast_url == FORECAST_URL

    def test_point_without_forecast_url(self):
        with pytest.raises(ParseError):
            parse_point({"properties": {"gridId": "TBW"}})

    def test_parse_forecast_keeps_fourteen(self):
        periods = parse_forecast(forecast_response(16))
        assert len(periods) == 14
        assert periods[0].name == "Period 1"
        assert periods[0].probability_of_precipitation == 10

    def test_forecast_without_periods(self):
        with pytest.raises(ParseError):
            parse_forecast({"properties": {}})

    def test_parse_alerts(self):
        alerts = parse_alerts({"features": [alert_feature("Heat Advisory", "Moderate")]})
        assert alerts[0].event == "Heat Advisory"
        assert alerts[0].areas == "Hillsborough"


@pytest.mark.unit
class TestAlertClassification:

    def test_failed_alerts_are_unknown(self):
        assert classify_weather_alerts(None).level == RiskLevel.UNKNOWN

    def test_no_alerts_is_minimal(self):
        assert classify_weather_alerts([]).level == RiskLevel.MINIMAL

    def test_most_severe_wins(self):
        alerts = parse_alerts(
            {
                "features": [
                    alert_feature("Heat Advisory", "Minor"),
                    alert_feature("Hurricane Warning", "Extreme"),
                ]
            }
        )
        result = classify_weather_alerts(alerts)
        assert result.level == RiskLevel.HIGH
        assert "Hurricane Warning" in result.explanation
        assert result.recommendations[0].startswith("Postpone")

    def test_severe_is_elevated(self):
        alerts = parse_alerts({"features": [alert_feature("Flood Warning", "Severe")]})
        assert classify_weather_alerts(alerts).level == RiskLevel.ELEVATED

    def test_unspecified_severity_is_low(self):
        alerts = parse_alerts({"features": [alert_feature("Special Statement", "Unknown")]})
        assert classify_weather_alerts(alerts).level == RiskLevel.LOW

    def test_colors(self):
        assert alert_severity_color("Extreme") == "purple"
        assert alert_severity_color("Unknown") == "gray"


@pytest.mark.unit
class TestBuildWeatherData:

    def test_full(self):
        location = parse_point(POINT_RESPONSE)
        forecast = parse_forecast(forecast_response(3))
        alerts = parse_alerts({"features": [alert_feature("Flood Warning", "Severe")]})

        data = build_weather_data(location, forecast, alerts)

        assert data.forecast_available and data.alerts_available
        assert data.current_conditions.temperature == 80
        assert data.has_active_alerts is True
        assert data.has_severe_alerts is True
        assert data.risk_level == RiskLevel.ELEVATED

    def test_alerts_failed_is_not_no_alerts(self):
        data = build_weather_data(parse_point(POINT_RESPONSE), parse_forecast(forecast_response(2)), None)
        assert data.alerts_available is False
        assert data.has_active_alerts is False
        assert data.risk_level == RiskLevel.UNKNOWN

    def test_forecast_failed(self):
        data = build_weather_data(parse_point(POINT_RESPONSE), None, [])
        assert data.forecast_available is False
        assert data.current_conditions is None
        assert data.risk_level == RiskLevel.MINIMAL
        assert "forecast could not be retrieved" in data.explanation

    def test_unavailable(self):
        data = unavailable_weather_data("NWS is down.")
        assert data.risk_level == RiskLevel.UNKNOWN
        assert data.location.city == "Unknown"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_client_requests(settings, make_transport):
    transport = make_transport(lambda request: (200, {"features": []}))

    async with NWSClient(settings, transport=transport) as client:
        await client.get_point(27.95063, -82.45718)
        await client.get_active_alerts(27.95063, -82.45718)
        await client.get_forecast(FORECAST_URL)

    point, alerts, forecast = transport.requests
    assert point.url.path == "/points/27.9506,-82.4572"
    assert point.headers["Accept"] == "application/geo+json"
    assert point.headers["User-Agent"] == settings.user_agent
    assert alerts.url.params["point"] == "27.9506,-82.4572"
    assert str(forecast.url) == FORECAST_URL


@pytest.mark.unit
class TestMalformedPayloads:

    def test_null_alert_features_are_skipped(self):
        alerts = parse_alerts({"features": [None, alert_feature("Flood Watch", "Severe")]})
        assert [a.event for a in alerts] == ["Flood Watch"]

    def test_alert_properties_not_an_object(self):
        alerts = parse_alerts({"features": [{"id": "a1", "properties": "oops"}]})
        assert alerts[0].event == "Weather Alert"
        assert alerts[0].severity == "Unknown"

    def test_non_object_forecast_periods_are_skipped(self):
        data = forecast_response(2)
        data["properties"]["periods"].insert(0, "oops")
        assert [p.name for p in parse_forecast(data)] == ["Period 1", "Period 2"]

    def test_relative_location_not_an_object(self):
        response = {"properties": {"forecast": FORECAST_URL, "relativeLocation": "Tampa"}}
        assert parse_point(response).city == "Unknown"


@pytest.mark.unit
def test_alerts_carry_severity_color():
    alerts = parse_alerts({"features": [alert_feature("Hurricane Warning", "Extreme")]})
    assert alerts[0].color == "purple"
