"""
Yelp business parsing and nearby amenities summary.

Handles:
- Business search result parsing
- Distance from the query point (haversine, meters)
- Per-category count and nearest picks
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.api_errors import ParseError
from app.core.geo import METERS_PER_MILE, distance_meters, nearest

logger = logging.getLogger(__name__)

SOURCE_LABEL = "Yelp Fusion"
YELP_URL = "https://www.yelp.com/"
DEFAULT_RADIUS_METERS = 1609
TOP_PICKS_PER_CATEGORY = 3

AMENITY_CATEGORIES = {
    "restaurants": "Restaurants",
    "grocery": "Grocery",
    "gyms": "Gyms",
    "coffee": "Coffee & Tea",
    "banks": "Banks & Credit Unions",
    "pharmacy": "Pharmacy",
}


class YelpBusiness(BaseModel):
    id: str
    name: str
    url: Optional[str] = None
    rating: float = 0.0
    review_count: int = 0
    price: Optional[str] = None
    phone: Optional[str] = None
    is_closed: bool = False
    latitude: float
    longitude: float
    distance_meters: float
    distance_miles: float = 0.0
    categories: List[str] = Field(default_factory=list)
    address: Optional[str] = None


class AmenityCategory(BaseModel):
    category: str
    label: str
    available: bool = True
    count: int = 0
    top_picks: List[YelpBusiness] = Field(default_factory=list)


class AmenitiesData(BaseModel):
    """Nearby businesses grouped by amenity category."""
    categories: Dict[str, AmenityCategory] = Field(default_factory=dict)
    unavailable_categories: List[str] = Field(default_factory=list)
    radius_meters: int = DEFAULT_RADIUS_METERS
    explanation: str
    source: str = SOURCE_LABEL
    source_url: str = YELP_URL
    queried_at: datetime = Field(default_factory=datetime.utcnow)


def parse_business(raw: Dict[str, Any], lat: float, lng: float) -> Optional[YelpBusiness]:
    """Business from a search result, or None when it has no coordinates."""
    coords = raw.get("coordinates")
    if not isinstance(coords, dict):
        return None
    b_lat, b_lng = coords.get("latitude"), coords.get("longitude")
    if b_lat is None or b_lng is None:
        return None

    location = raw.get("location")
    display_address = location.get("display_address") if isinstance(location, dict) else None
    if not isinstance(display_address, list):
        display_address = []
    distance = distance_meters(lat, lng, b_lat, b_lng)

    return YelpBusiness(
        id=raw.get("id") or "",
        name=raw.get("name") or "Unknown business",
        url=raw.get("url"),
        rating=raw.get("rating") or 0.0,
        review_count=raw.get("review_count") or 0,
        price=raw.get("price"),
        phone=raw.get("display_phone") or raw.get("phone"),
        is_closed=bool(raw.get("is_closed")),
        latitude=b_lat,
        longitude=b_lng,
        distance_meters=distance,
        distance_miles=meters_to_miles(distance),
        categories=[
            c["title"] for c in raw.get("categories") or [] if isinstance(c, dict) and c.get("title")
        ],
        address=", ".join(str(line) for line in display_address) or None,
    )


def parse_search_results(data: Any, lat: float, lng: float) -> List[YelpBusiness]:
    """
    Businesses from a search response, nearest first.

    Raises:
        ParseError: If the response has no businesses list
    """
    if not isinstance(data, dict) or not isinstance(data.get("businesses"), list):
        raise ParseError("Yelp response has no businesses list", source="yelp")

    businesses = [parse_business(b, lat, lng) for b in data["businesses"] if isinstance(b, dict)]
    return nearest([b for b in businesses if b is not None], lambda b: b.distance_meters)


def build_amenity_category(
    category: str, data: Any, lat: float, lng: float
) -> AmenityCategory:
    businesses = parse_search_results(data, lat, lng)
    return AmenityCategory(
        category=category,
        label=AMENITY_CATEGORIES.get(category, category),
        count=data.get("total") or len(businesses),
        top_picks=businesses[:TOP_PICKS_PER_CATEGORY],
    )


def build_amenities_data(
    lat: float,
    lng: float,
    responses: Dict[str, Any],
    radius_meters: int = DEFAULT_RADIUS_METERS,
) -> AmenitiesData:
    """
    Combine per-category search responses.

    A category mapped to None could not be retrieved and is marked
    unavailable rather than reported as zero businesses.
    """
    categories = {}
    unavailable = []
    for category, data in responses.items():
        if data is None:
            unavailable.append(category)
            categories[category] = AmenityCategory(
                category=category,
                label=AMENITY_CATEGORIES.get(category, category),
                available=False,
            )
        else:
            categories[category] = build_amenity_category(category, data, lat, lng)

    found = [c for c in categories.values() if c.available and c.count > 0]
    radius_miles = radius_meters / METERS_PER_MILE
    explanation = (
        f"{len(found)} of {len(categories)} amenity categories have businesses within "
        f"{radius_miles:.1f} miles."
    )
    if unavailable:
        explanation = f"{explanation} Could not retrieve: {', '.join(unavailable)}."

    return AmenitiesData(
        categories=categories,
        unavailable_categories=unavailable,
        radius_meters=radius_meters,
        explanation=explanation,
    )


def meters_to_miles(meters: float) -> float:
    return round(meters / METERS_PER_MILE, 1)


def unavailable_amenities_data(
    reason: str, radius_meters: int = DEFAULT_RADIUS_METERS
) -> AmenitiesData:
    """Structurally complete result when no category could be retrieved."""
    return AmenitiesData(
        categories={
            category: AmenityCategory(category=category, label=label, available=False)
            for category, label in AMENITY_CATEGORIES.items()
        },
        unavailable_categories=list(AMENITY_CATEGORIES),
        radius_meters=radius_meters,
        explanation=f"{reason} Search nearby businesses at {YELP_URL}",
    )
