"""
USGS Earthquake Catalog client.

FDSN event web service:
https://earthquake.usgs.gov/fdsnws/event/1/query

Circle search around a point with GeoJSON output. No API key required.
"""
import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional

from app.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class USGSEarthquakeClient(BaseAPIClient):
    """HTTP client for the USGS FDSN event service."""

    SOURCE_NAME = "usgs_earthquake"

    DEFAULT_RADIUS_KM = 100
    DEFAULT_YEARS = 25
    MIN_MAGNITUDE = 2.5
    MAX_EVENTS = 1000

    async def query(
        self,
        lat: float,
        lng: float,
        radius_km: float = DEFAULT_RADIUS_KM,
        years: int = DEFAULT_YEARS,
        min_magnitude: float = MIN_MAGNITUDE,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """
        Fetch earthquakes within a radius of a point, newest first.

        Returns:
            Raw GeoJSON FeatureCollection
        """
        end = today or date.today()
        start = end - timedelta(days=round(365.25 * years))

        params = {
            "format": "geojson",
            "latitude": f"{lat:.4f}",
            "longitude": f"{lng:.4f}",
            "maxradiuskm": radius_km,
            "starttime": start.isoformat(),
            "endtime": end.isoformat(),
            "minmagnitude": min_magnitude,
            "orderby": "time",
            "limit": self.MAX_EVENTS,
        }

        return await self.get(
            "query", params=params, resource_id=f"events near {lat:.4f},{lng:.4f}"
        )
