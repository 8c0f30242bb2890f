"""
Google Places nearby search parsing and per-type summary.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.api_errors import ParseError
from app.core.geo import METERS_PER_MILE, distance_meters, nearest

logger = logging.getLogger(__name__)

SOURCE_LABEL = "Google Places"
MAPS_URL = "https://www.google.com/maps"
DEFAULT_RADIUS_METERS = 1609

PLACE_TYPES = {
    "restaurant": "Restaurants",
    "supermarket": "Supermarkets",
    "school": "Schools",
    "hospital": "Hospitals",
    "park": "Parks",
    "gym": "Gyms",
    "bank": "Banks",
    "gas_station": "Gas Stations",
    "transit_station": "Transit Stations",
}


class Place(BaseModel):
    place_id: str
    name: str
    address: Optional[str] = None
    latitude: float
    longitude: float
    types: List[str] = Field(default_factory=list)
    rating: Optional[float] = None
    user_ratings_total: Optional[int] = None
    price_level: Optional[int] = None
    business_status: Optional[str] = None
    open_now: Optional[bool] = None
    distance_meters: float
    distance_display: str = "N/A"
    price_display: str = "Price N/A"


class PlaceTypeSummary(BaseModel):
    place_type: str
    label: str
    available: bool = True
    count: int = 0
    nearest: Optional[Place] = None


class PlacesData(BaseModel):
    """Nearby places summarized by type."""
    summary: Dict[str, PlaceTypeSummary] = Field(default_factory=dict)
    unavailable_types: List[str] = Field(default_factory=list)
    radius_meters: int = DEFAULT_RADIUS_METERS
    explanation: str
    source: str = SOURCE_LABEL
    source_url: str = MAPS_URL
    queried_at: datetime = Field(default_factory=datetime.utcnow)


def parse_place(raw: Dict[str, Any], lat: float, lng: float) -> Optional[Place]:
    geometry = raw.get("geometry")
    location = geometry.get("location") if isinstance(geometry, dict) else None
    if not isinstance(location, dict):
        return None
    p_lat, p_lng = location.get("lat"), location.get("lng")
    if p_lat is None or p_lng is None:
        return None
    opening_hours = raw.get("opening_hours")
    distance = distance_meters(lat, lng, p_lat, p_lng)

    return Place(
        place_id=raw.get("place_id") or "",
        name=raw.get("name") or "Unknown place",
        address=raw.get("formatted_address") or raw.get("vicinity"),
        latitude=p_lat,
        longitude=p_lng,
        types=raw.get("types") or [],
        rating=raw.get("rating"),
        user_ratings_total=raw.get("user_ratings_total"),
        price_level=raw.get("price_level"),
        business_status=raw.get("business_status"),
        open_now=opening_hours.get("open_now") if isinstance(opening_hours, dict) else None,
        distance_meters=distance,
        distance_display=format_distance(distance),
        price_display=price_level_display(raw.get("price_level")),
    )


def parse_nearby_results(data: Any, lat: float, lng: float) -> List[Place]:
    """
    Places from a nearby search response, nearest first.

    Raises:
        ParseError: If the response has no results list
    """
    if not isinstance(data, dict):
        raise ParseError("Places response is not an object", source="google_places")
    results = data.get("results")
    if results is None and data.get("status") == "ZERO_RESULTS":
        results = []
    if not isinstance(results, list):
        raise ParseError("Places response has no results list", source="google_places")

    places = [parse_place(r, lat, lng) for r in results if isinstance(r, dict)]
    return nearest([p for p in places if p is not None], lambda p: p.distance_meters)


def build_places_data(
    lat: float,
    lng: float,
    responses: Dict[str, Any],
    radius_meters: int = DEFAULT_RADIUS_METERS,
) -> PlacesData:
    """
    Combine per-type nearby search responses. A type mapped to None could
    not be retrieved and is marked unavailable.
    """
    summary = {}
    unavailable = []
    for place_type, data in responses.items():
        label = PLACE_TYPES.get(place_type, place_type)
        if data is None:
            unavailable.append(place_type)
            summary[place_type] = PlaceTypeSummary(place_type=place_type, label=label, available=False)
            continue
        places = parse_nearby_results(data, lat, lng)
        summary[place_type] = PlaceTypeSummary(
            place_type=place_type,
            label=label,
            count=len(places),
            nearest=places[0] if places else None,
        )

    present = [s for s in summary.values() if s.count > 0]
    explanation = (
        f"{len(present)} of {len(summary)} place types found within "
        f"{radius_meters / METERS_PER_MILE:.1f} miles."
    )
    if unavailable:
        explanation = f"{explanation} Could not retrieve: {', '.join(unavailable)}."

    return PlacesData(
        summary=summary,
        unavailable_types=unavailable,
        radius_meters=radius_meters,
        explanation=explanation,
    )


def price_level_display(price_level: Optional[int]) -> str:
    if not isinstance(price_level, int):
        return "Price N/A"
    return "$" * (price_level + 1)


def format_distance(meters: Optional[float]) -> str:
    if not meters:
        return "N/A"
    if meters < 1609:
        return f"{round(meters)} m"
    return f"{meters / METERS_PER_MILE:.1f} mi"


def unavailable_places_data(reason: str, radius_meters: int = DEFAULT_RADIUS_METERS) -> PlacesData:
    """Structurally complete result when no place type could be retrieved."""
    return PlacesData(
        summary={
            place_type: PlaceTypeSummary(place_type=place_type, label=label, available=False)
            for place_type, label in PLACE_TYPES.items()
        },
        unavailable_types=list(PLACE_TYPES),
        radius_meters=radius_meters,
        explanation=f"{reason} Search nearby places at {MAPS_URL}",
    )
