"""
Google Places adapter.

Counts and nearest place for common property-search place types
(restaurant, supermarket, school, hospital, park, ...).

API Documentation: https://developers.google.com/maps/documentation/places/web-service
API Key: Required (GOOGLE_MAPS_API_KEY)
"""

from app.sources.google_places.client import GooglePlacesClient
from app.sources.google_places import metadata

__all__ = ["GooglePlacesClient", "metadata"]
