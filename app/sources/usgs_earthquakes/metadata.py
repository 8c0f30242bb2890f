"""
USGS earthquake event parsing and seismic risk assessment.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.api_errors import ParseError
from app.core.geo import distance_miles, km_to_miles, nearest
from app.core.risk import RiskClassification, RiskLevel

logger = logging.getLogger(__name__)

SOURCE_LABEL = "USGS Earthquake Catalog"
CATALOG_URL = "https://earthquake.usgs.gov/earthquakes/search/"
DEFAULT_RADIUS_KM = 100
DEFAULT_YEARS = 25
MAX_EVENTS_RETURNED = 25

SIGNIFICANT_MAGNITUDE = 4.0
MAJOR_MAGNITUDE = 5.0


class EarthquakeEvent(BaseModel):
    id: str
    magnitude: float
    place: str
    time: datetime
    depth_km: Optional[float] = None
    distance_miles: float
    felt: Optional[int] = None
    tsunami: bool = False
    significance: Optional[int] = None
    url: Optional[str] = None
    magnitude_label: str = ""
    color: str = "gray"


class EarthquakeData(BaseModel):
    """Recorded earthquakes near a point and the resulting seismic risk."""
    events: List[EarthquakeEvent] = Field(default_factory=list)
    total_events: int = 0
    significant_events: int = 0
    major_events: int = 0
    largest_event: Optional[EarthquakeEvent] = None
    recent_event: Optional[EarthquakeEvent] = None
    average_annual_events: float = 0.0
    risk_level: RiskLevel
    explanation: str
    recommendations: List[str] = Field(default_factory=list)
    search_radius_km: float = DEFAULT_RADIUS_KM
    search_years: int = DEFAULT_YEARS
    source: str = SOURCE_LABEL
    source_url: str = CATALOG_URL
    queried_at: datetime = Field(default_factory=datetime.utcnow)


def parse_event(feature: Dict[str, Any], lat: float, lng: float) -> Optional[EarthquakeEvent]:
    """
    Build an event from a GeoJSON feature.

    Features without a magnitude or coordinates are skipped.
    """
    props = feature.get("properties")
    geometry = feature.get("geometry")
    if not isinstance(props, dict) or not isinstance(geometry, dict):
        return None
    coords = geometry.get("coordinates")
    magnitude = props.get("mag")
    if magnitude is None or not isinstance(coords, list) or len(coords) < 2:
        return None

    event_lng, event_lat = float(coords[0]), float(coords[1])
    time_ms = props.get("time")

    return EarthquakeEvent(
        id=str(feature.get("id") or props.get("code") or ""),
        magnitude=float(magnitude),
        place=props.get("place") or "Unknown location",
        time=datetime.utcfromtimestamp(time_ms / 1000) if time_ms is not None else datetime.utcfromtimestamp(0),
        depth_km=float(coords[2]) if len(coords) > 2 and coords[2] is not None else None,
        distance_miles=distance_miles(lat, lng, event_lat, event_lng),
        felt=props.get("felt"),
        tsunami=props.get("tsunami") == 1,
        significance=props.get("sig"),
        url=props.get("url"),
        magnitude_label=format_magnitude(float(magnitude)),
        color=magnitude_color(float(magnitude)),
    )


def assess_seismic_risk(
    events: List[EarthquakeEvent],
    radius_km: float = DEFAULT_RADIUS_KM,
    years: int = DEFAULT_YEARS,
) -> RiskClassification:
    """
    Rate seismic risk. Magnitude dominates count: one M5.0+ event is high
    regardless of how few smaller events there are.
    """
    significant = [e for e in events if e.magnitude >= SIGNIFICANT_MAGNITUDE]
    major = [e for e in events if e.magnitude >= MAJOR_MAGNITUDE]
    radius_miles = round(km_to_miles(radius_km))

    if major:
        largest = max(major, key=lambda e: e.magnitude)
        plural = "s" if len(major) > 1 else ""
        return RiskClassification(
            level=RiskLevel.HIGH,
            explanation=(
                f"This area has experienced {len(major)} significant earthquake{plural} of "
                f"magnitude 5.0 or greater within {radius_miles} miles over the past {years} "
                f"years. The largest was M{largest.magnitude:.1f} at {largest.place}. Earthquakes "
                f"of this magnitude can cause structural damage."
            ),
            recommendations=[
                "Consider earthquake insurance (typically a separate policy)",
                "Have the property inspected for earthquake-resistant features",
                "Check for foundation cracks or previous earthquake damage",
                "Ensure water heater is strapped and bookcases are secured",
                "Review the structural design if the home was built before modern seismic codes",
            ],
        )

    if len(significant) > 3:
        return RiskClassification(
            level=RiskLevel.MODERATE,
            explanation=(
                f"This area has experienced {len(significant)} earthquakes of magnitude 4.0 or "
                f"greater in the past {years} years. While earthquakes of this magnitude are felt, "
                f"they rarely cause significant damage. However, the frequency indicates an active "
                f"seismic zone."
            ),
            recommendations=[
                "Consider earthquake insurance for valuable properties",
                "Standard earthquake preparedness measures recommended",
                "Ensure heavy items are secured in the home",
                "Have an emergency kit prepared",
            ],
        )

    if len(events) > 10 or significant:
        if significant:
            detail = f"Only {len(significant)} event(s) reached M4.0+."
        else:
            detail = "No earthquakes reached M4.0."
        return RiskClassification(
            level=RiskLevel.LOW,
            explanation=(
                f"There has been some seismic activity in this region ({len(events)} recorded "
                f"events M2.5+), but significant earthquakes are rare. {detail} This represents "
                f"low earthquake risk."
            ),
            recommendations=[
                "Basic earthquake preparedness is advisable",
                "Earthquake insurance is generally optional but worth considering",
                "Standard home safety measures are sufficient",
            ],
        )

    count = len(events)
    return RiskClassification(
        level=RiskLevel.MINIMAL,
        explanation=(
            f"This area has minimal recorded seismic activity. Only {count} "
            f"earthquake{'' if count == 1 else 's'} of M2.5+ {'has' if count == 1 else 'have'} "
            f"been recorded within {radius_miles} miles over the past {years} years. Earthquake "
            f"risk is not a significant concern for this location."
        ),
        recommendations=[
            "No specific earthquake precautions necessary",
            "Standard home safety practices are sufficient",
        ],
    )


def magnitude_color(magnitude: float) -> str:
    if magnitude >= 6.0:
        return "red"
    if magnitude >= 5.0:
        return "orange"
    if magnitude >= 4.0:
        return "yellow"
    if magnitude >= 3.0:
        return "blue"
    return "green"


def format_magnitude(magnitude: float) -> str:
    return f"M{magnitude:.1f}"


def build_earthquake_data(
    data: Any,
    lat: float,
    lng: float,
    radius_km: float = DEFAULT_RADIUS_KM,
    years: int = DEFAULT_YEARS,
) -> EarthquakeData:
    """
    Build EarthquakeData from a GeoJSON FeatureCollection.

    Raises:
        ParseError: If the response has no features list
    """
    if not isinstance(data, dict) or not isinstance(data.get("features"), list):
        raise ParseError("USGS response has no features list", source="usgs_earthquake")

    events = []
    for feature in data["features"]:
        if not isinstance(feature, dict):
            continue
        event = parse_event(feature, lat, lng)
        if event is not None:
            events.append(event)

    classification = assess_seismic_risk(events, radius_km, years)
    average = len(events) / years if years > 0 else 0.0

    return EarthquakeData(
        events=nearest(events, lambda e: e.distance_miles, limit=MAX_EVENTS_RETURNED),
        total_events=len(events),
        significant_events=sum(1 for e in events if e.magnitude >= SIGNIFICANT_MAGNITUDE),
        major_events=sum(1 for e in events if e.magnitude >= MAJOR_MAGNITUDE),
        largest_event=max(events, key=lambda e: e.magnitude) if events else None,
        recent_event=max(events, key=lambda e: e.time) if events else None,
        average_annual_events=round(average, 1),
        risk_level=classification.level,
        explanation=classification.explanation,
        recommendations=classification.recommendations,
        search_radius_km=radius_km,
        search_years=years,
    )


def unavailable_earthquake_data(
    reason: str, radius_km: float = DEFAULT_RADIUS_KM, years: int = DEFAULT_YEARS
) -> EarthquakeData:
    """Structurally complete result for when the catalog could not be queried."""
    return EarthquakeData(
        risk_level=RiskLevel.UNKNOWN,
        explanation=f"{reason} Search the USGS catalog directly at {CATALOG_URL}",
        recommendations=["Check the USGS earthquake catalog for this area"],
        search_radius_km=radius_km,
        search_years=years,
    )
