"""
National Weather Service API client.

https://www.weather.gov/documentation/services-web-api

Forecasts take two hops: /points/{lat},{lng} resolves the forecast office
grid and its forecast URL, which is then fetched as-is. Active alerts are
queried by point. No API key required; NWS asks for a descriptive
User-Agent with contact details.
"""
import logging
from typing import Any, Dict

from app.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class NWSClient(BaseAPIClient):
    """HTTP client for api.weather.gov."""

    SOURCE_NAME = "nws"
    ACCEPT = "application/geo+json"

    async def get_point(self, lat: float, lng: float) -> Dict[str, Any]:
        """Gridpoint metadata for a location (office, grid x/y, forecast URL)."""
        return await self.get(
            f"points/{lat:.4f},{lng:.4f}", resource_id=f"point {lat:.4f},{lng:.4f}"
        )

    async def get_forecast(self, forecast_url: str) -> Dict[str, Any]:
        """Forecast periods from the URL returned by get_point()."""
        return await self.get(forecast_url, resource_id="forecast")

    async def get_active_alerts(self, lat: float, lng: float) -> Dict[str, Any]:
        """Active alerts whose area contains the point."""
        return await self.get(
            "alerts/active",
            params={"point": f"{lat:.4f},{lng:.4f}"},
            resource_id=f"alerts {lat:.4f},{lng:.4f}",
        )
