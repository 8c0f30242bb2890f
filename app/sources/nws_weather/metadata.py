"""
NWS point, forecast and alert parsing plus alert-based risk level.

Handles:
- Gridpoint metadata (office, grid, relative city/state, time zone)
- Forecast periods (first 14) and current conditions approximation
- Active alerts and their severity
- Distinguishing "no alerts" from "alerts could not be retrieved"
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.api_errors import ParseError
from app.core.risk import RiskClassification, RiskLevel

logger = logging.getLogger(__name__)

SOURCE_LABEL = "National Weather Service"
NWS_URL = "https://www.weather.gov/"
MAX_FORECAST_PERIODS = 14

ALERT_SEVERITY_LEVELS = {
    "Extreme": RiskLevel.HIGH,
    "Severe": RiskLevel.ELEVATED,
    "Moderate": RiskLevel.MODERATE,
    "Minor": RiskLevel.LOW,
}

# Highest first
ALERT_SEVERITY_ORDER = ["Extreme", "Severe", "Moderate", "Minor"]

SEVERE_ALERT_SEVERITIES = {"Severe", "Extreme"}


class WeatherLocation(BaseModel):
    city: str = "Unknown"
    state: str = "Unknown"
    time_zone: Optional[str] = None
    forecast_url: Optional[str] = None
    office: Optional[str] = None
    grid_x: Optional[int] = None
    grid_y: Optional[int] = None


class ForecastPeriod(BaseModel):
    name: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    temperature: Optional[float] = None
    temperature_unit: Optional[str] = None
    temperature_trend: Optional[str] = None
    wind_speed: Optional[str] = None
    wind_direction: Optional[str] = None
    short_forecast: Optional[str] = None
    detailed_forecast: Optional[str] = None
    icon: Optional[str] = None
    is_daytime: Optional[bool] = None
    probability_of_precipitation: Optional[float] = None


class CurrentConditions(BaseModel):
    """Approximated from the first forecast period."""
    temperature: Optional[float] = None
    temperature_unit: Optional[str] = None
    wind_speed: Optional[str] = None
    wind_direction: Optional[str] = None
    description: Optional[str] = None
    short_forecast: Optional[str] = None
    icon: Optional[str] = None


class WeatherAlert(BaseModel):
    id: Optional[str] = None
    event: str
    severity: str = "Unknown"
    certainty: Optional[str] = None
    urgency: Optional[str] = None
    headline: Optional[str] = None
    description: Optional[str] = None
    instruction: Optional[str] = None
    areas: Optional[str] = None
    onset: Optional[str] = None
    expires: Optional[str] = None
    sender_name: Optional[str] = None
    color: str = "gray"


class WeatherData(BaseModel):
    """Forecast and alerts for a point."""
    location: WeatherLocation = Field(default_factory=WeatherLocation)
    current_conditions: Optional[CurrentConditions] = None
    forecast: List[ForecastPeriod] = Field(default_factory=list)
    alerts: List[WeatherAlert] = Field(default_factory=list)
    forecast_available: bool = False
    alerts_available: bool = False
    has_active_alerts: bool = False
    has_severe_alerts: bool = False
    risk_level: RiskLevel
    explanation: str
    recommendations: List[str] = Field(default_factory=list)
    source: str = SOURCE_LABEL
    source_url: str = NWS_URL
    queried_at: datetime = Field(default_factory=datetime.utcnow)


def parse_point(data: Any) -> WeatherLocation:
    """
    Parse /points metadata.

    Raises:
        ParseError: If the response has no forecast URL
    """
    props = data.get("properties") if isinstance(data, dict) else None
    if not isinstance(props, dict) or not props.get("forecast"):
        raise ParseError("NWS point response has no forecast URL", source="nws")

    relative = props.get("relativeLocation")
    relative = relative.get("properties") if isinstance(relative, dict) else None
    if not isinstance(relative, dict):
        relative = {}
    return WeatherLocation(
        city=relative.get("city") or "Unknown",
        state=relative.get("state") or "Unknown",
        time_zone=props.get("timeZone"),
        forecast_url=props["forecast"],
        office=props.get("cwa") or props.get("gridId"),
        grid_x=props.get("gridX"),
        grid_y=props.get("gridY"),
    )


def parse_forecast(data: Any) -> List[ForecastPeriod]:
    """First 14 forecast periods."""
    props = data.get("properties") if isinstance(data, dict) else None
    if not isinstance(props, dict) or not isinstance(props.get("periods"), list):
        raise ParseError("NWS forecast response has no periods", source="nws")

    periods = []
    for p in props["periods"][:MAX_FORECAST_PERIODS]:
        if not isinstance(p, dict):
            continue
        precipitation = p.get("probabilityOfPrecipitation")
        periods.append(
            ForecastPeriod(
                name=p.get("name") or "",
                start_time=p.get("startTime"),
                end_time=p.get("endTime"),
                temperature=p.get("temperature"),
                temperature_unit=p.get("temperatureUnit"),
                temperature_trend=p.get("temperatureTrend"),
                wind_speed=p.get("windSpeed"),
                wind_direction=p.get("windDirection"),
                short_forecast=p.get("shortForecast"),
                detailed_forecast=p.get("detailedForecast"),
                icon=p.get("icon"),
                is_daytime=p.get("isDaytime"),
                probability_of_precipitation=(
                    precipitation.get("value") if isinstance(precipitation, dict) else None
                ),
            )
        )
    return periods


def parse_alerts(data: Any) -> List[WeatherAlert]:
    """Active alerts from an alerts FeatureCollection."""
    if not isinstance(data, dict) or not isinstance(data.get("features"), list):
        raise ParseError("NWS alerts response has no features list", source="nws")

    alerts = []
    for feature in data["features"]:
        if not isinstance(feature, dict):
            continue
        props = feature.get("properties")
        if not isinstance(props, dict):
            props = {}
        alerts.append(
            WeatherAlert(
                id=feature.get("id"),
                event=props.get("event") or "Weather Alert",
                severity=props.get("severity") or "Unknown",
                certainty=props.get("certainty"),
                urgency=props.get("urgency"),
                headline=props.get("headline"),
                description=props.get("description"),
                instruction=props.get("instruction"),
                areas=props.get("areaDesc"),
                onset=props.get("onset"),
                expires=props.get("expires"),
                sender_name=props.get("senderName"),
                color=alert_severity_color(props.get("severity") or "Unknown"),
            )
        )
    return alerts


def current_conditions_from(forecast: List[ForecastPeriod]) -> Optional[CurrentConditions]:
    if not forecast:
        return None
    current = forecast[0]
    return CurrentConditions(
        temperature=current.temperature,
        temperature_unit=current.temperature_unit,
        wind_speed=current.wind_speed,
        wind_direction=current.wind_direction,
        description=current.detailed_forecast,
        short_forecast=current.short_forecast,
        icon=current.icon,
    )


def classify_weather_alerts(alerts: Optional[List[WeatherAlert]]) -> RiskClassification:
    """
    Risk level from the most severe active alert.

    ``alerts`` is None when the alerts call failed; that is reported as
    unknown rather than as "no alerts".
    """
    if alerts is None:
        return RiskClassification(
            level=RiskLevel.UNKNOWN,
            explanation=(
                f"Active weather alerts could not be retrieved. Check {NWS_URL} for current "
                f"watches and warnings."
            ),
            recommendations=["Check weather.gov for active alerts before visiting"],
        )

    if not alerts:
        return RiskClassification(
            level=RiskLevel.MINIMAL,
            explanation="There are no active weather alerts for this location.",
        )

    for severity in ALERT_SEVERITY_ORDER:
        matching = [a for a in alerts if a.severity == severity]
        if matching:
            events = ", ".join(sorted({a.event for a in matching}))
            level = ALERT_SEVERITY_LEVELS[severity]
            recommendations = ["Review the alert instructions from the National Weather Service"]
            if severity in SEVERE_ALERT_SEVERITIES:
                recommendations.insert(0, "Postpone property visits until the alert expires")
            return RiskClassification(
                level=level,
                explanation=(
                    f"{len(alerts)} active weather alert{'s' if len(alerts) > 1 else ''} for this "
                    f"location. The most severe is {severity.lower()}: {events}."
                ),
                recommendations=recommendations,
            )

    return RiskClassification(
        level=RiskLevel.LOW,
        explanation=(
            f"{len(alerts)} active weather alert{'s' if len(alerts) > 1 else ''} with unspecified "
            f"severity for this location."
        ),
        recommendations=["Review the alert details on weather.gov"],
    )


def alert_severity_color(severity: str) -> str:
    return {
        "Extreme": "purple",
        "Severe": "red",
        "Moderate": "orange",
        "Minor": "yellow",
    }.get(severity, "gray")


def build_weather_data(
    location: WeatherLocation,
    forecast: Optional[List[ForecastPeriod]],
    alerts: Optional[List[WeatherAlert]],
) -> WeatherData:
    """
    Combine the three hops. ``forecast`` or ``alerts`` is None when that
    call failed.
    """
    classification = classify_weather_alerts(alerts)
    explanation = classification.explanation
    if forecast is None:
        explanation = f"{explanation} The forecast could not be retrieved."

    active = alerts or []
    return WeatherData(
        location=location,
        current_conditions=current_conditions_from(forecast or []),
        forecast=forecast or [],
        alerts=active,
        forecast_available=forecast is not None,
        alerts_available=alerts is not None,
        has_active_alerts=bool(active),
        has_severe_alerts=any(a.severity in SEVERE_ALERT_SEVERITIES for a in active),
        risk_level=classification.level,
        explanation=explanation,
        recommendations=classification.recommendations,
    )


def unavailable_weather_data(reason: str) -> WeatherData:
    """Structurally complete result for when the point lookup failed."""
    return WeatherData(
        risk_level=RiskLevel.UNKNOWN,
        explanation=f"{reason} Check the National Weather Service directly at {NWS_URL}",
        recommendations=["Check weather.gov for the forecast and active alerts"],
    )
