"""
Yelp Fusion API client.

Official API documentation:
https://docs.developer.yelp.com/docs/fusion-intro

Used for business search around a point (restaurants, grocery, gyms, ...).

Rate limits:
- Free tier: 500 API calls per day (new clients as of May 2023)
- QPS rate limiting applies (HTTP 429 when exceeded)

API Key:
Required. Get at: https://www.yelp.com/developers/v3/manage_app
"""
import logging
from typing import Any, Dict, Optional

from app.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)

MAX_RADIUS_METERS = 40000
MAX_LIMIT = 50


class YelpClient(BaseAPIClient):
    """HTTP client for Yelp Fusion business search."""

    SOURCE_NAME = "yelp"

    def _build_headers(self) -> Dict[str, str]:
        """Build request headers with Bearer token."""
        headers = super()._build_headers()
        headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def search_businesses(
        self,
        latitude: float,
        longitude: float,
        categories: Optional[str] = None,
        term: Optional[str] = None,
        radius: int = 1609,
        limit: int = 20,
        sort_by: str = "distance",
    ) -> Dict[str, Any]:
        """
        Search for businesses near a point.

        Args:
            latitude: Latitude coordinate
            longitude: Longitude coordinate
            categories: Category filter (e.g., "restaurants,bars")
            term: Search term (e.g., "coffee")
            radius: Search radius in meters (clamped to 40000)
            limit: Number of results (max 50)
            sort_by: Sorting mode (best_match, rating, review_count, distance)

        Returns:
            Dict containing businesses array and total count
        """
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "radius": min(radius, MAX_RADIUS_METERS),
            "limit": min(limit, MAX_LIMIT),
            "sort_by": sort_by,
        }
        if categories:
            params["categories"] = categories
        if term:
            params["term"] = term

        return await self.get(
            "businesses/search",
            params=params,
            resource_id=f"BusinessSearch:{categories or term or 'all'}",
        )
