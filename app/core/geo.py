"""
Great-circle distance and proximity helpers.

All providers report feature coordinates; adapters compute the distance from
the query point themselves so every list is ordered on the same basis.
"""
from math import radians, sin, cos, sqrt, atan2
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")

EARTH_RADIUS_MILES = 3959.0
EARTH_RADIUS_METERS = 6371000.0

MILES_PER_DEGREE = 69.0
METERS_PER_MILE = 1609.34
KM_PER_MILE = 1.609344


def haversine_distance(
    lat1: float, lon1: float, lat2: float, lon2: float, radius: float = EARTH_RADIUS_MILES
) -> float:
    """Calculate distance between two points using the Haversine formula.

    The unit of the result is the unit of ``radius`` (miles by default).
    """
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = radians(lat2 - lat1)
    delta_lon = radians(lon2 - lon1)

    a = (
        sin(delta_lat / 2) ** 2
        + cos(lat1_rad) * cos(lat2_rad) * sin(delta_lon / 2) ** 2
    )
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return radius * c


def distance_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    return haversine_distance(lat1, lon1, lat2, lon2, EARTH_RADIUS_MILES)


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    return haversine_distance(lat1, lon1, lat2, lon2, EARTH_RADIUS_METERS)


def miles_to_degrees(miles: float) -> float:
    """Approximate a north-south distance as degrees of latitude."""
    return miles / MILES_PER_DEGREE


def km_to_miles(km: float) -> float:
    return km / KM_PER_MILE


def bounding_box(lat: float, lng: float, radius_miles: float) -> Tuple[float, float, float, float]:
    """Return (min_lat, max_lat, min_lng, max_lng) around a point."""
    delta = miles_to_degrees(radius_miles)
    return lat - delta, lat + delta, lng - delta, lng + delta


def nearest(
    items: Iterable[T],
    distance_of: Callable[[T], Optional[float]],
    max_distance: Optional[float] = None,
    limit: Optional[int] = None,
) -> List[T]:
    """
    Filter, sort by ascending distance, then truncate.

    Items whose distance is None (no usable coordinates) are dropped.
    Ties keep their input order.
    """
    with_distance = []
    for item in items:
        d = distance_of(item)
        if d is None:
            continue
        if max_distance is not None and d > max_distance:
            continue
        with_distance.append((d, item))

    with_distance.sort(key=lambda pair: pair[0])
    ordered = [item for _, item in with_distance]
    if limit is not None:
        ordered = ordered[:limit]
    return ordered
