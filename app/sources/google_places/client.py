"""
Google Places API (legacy web service) client.

https://developers.google.com/maps/documentation/places/web-service/search-nearby

Nearby search by type around a point. The provider reports failures
in-band through a "status" field; OK and ZERO_RESULTS are successes.

API Key:
Required. Get at: https://console.cloud.google.com/google/maps-apis
"""
import logging
from typing import Any, Dict, Optional

from app.core.api_errors import APIError, AuthenticationError, FatalError
from app.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)

MAX_RADIUS_METERS = 50000
SUCCESS_STATUSES = {"OK", "ZERO_RESULTS"}


class GooglePlacesClient(BaseAPIClient):
    """HTTP client for Google Places nearby search."""

    SOURCE_NAME = "google_places"

    def _add_auth_to_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params["key"] = self.api_key
        return params

    def _check_api_error(self, data: Any, resource_id: str) -> Optional[APIError]:
        if not isinstance(data, dict):
            return None

        status = data.get("status")
        if status in SUCCESS_STATUSES:
            return None

        message = data.get("error_message") or f"API status: {status}"
        if status == "REQUEST_DENIED":
            return AuthenticationError(message=message, source=self.SOURCE_NAME, response_data=data)
        return FatalError(message=message, source=self.SOURCE_NAME, response_data=data)

    async def nearby_search(
        self,
        lat: float,
        lng: float,
        place_type: Optional[str] = None,
        radius: int = 1609,
        keyword: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Places of a type within a radius (meters, max 50000).

        Returns:
            Raw response ({"status": ..., "results": [...]})
        """
        params = {
            "location": f"{lat},{lng}",
            "radius": min(radius, MAX_RADIUS_METERS),
        }
        if place_type:
            params["type"] = place_type
        if keyword:
            params["keyword"] = keyword

        return await self.get(
            "nearbysearch/json",
            params=params,
            resource_id=f"NearbySearch:{place_type or keyword or 'all'}",
        )
