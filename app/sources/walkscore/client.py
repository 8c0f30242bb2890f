"""
Walk Score API client.

Official API documentation:
https://www.walkscore.com/professional/api.php

Returns Walk Score, Transit Score and Bike Score for a point. The
provider reports failures in-band with a numeric "status" field even
when the HTTP status is 200.

API Key:
Required. Get at: https://www.walkscore.com/professional/api-sign-up.php
"""
import logging
from typing import Any, Dict, Optional

from app.core.api_errors import APIError, AuthenticationError, FatalError
from app.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)

STATUS_SUCCESS = 1

STATUS_MESSAGES = {
    2: "Score is being calculated, try again later",
    30: "Invalid latitude/longitude",
    31: "Walk Score API internal error",
    40: "Your IP address has been blocked",
    41: "Your API key is invalid",
    42: "API quota exceeded",
}


class WalkScoreClient(BaseAPIClient):
    """HTTP client for the Walk Score score endpoint."""

    SOURCE_NAME = "walkscore"

    def _add_auth_to_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Walk Score takes the key as the wsapikey query parameter."""
        params["wsapikey"] = self.api_key
        return params

    def _check_api_error(self, data: Any, resource_id: str) -> Optional[APIError]:
        if not isinstance(data, dict):
            return None

        status = data.get("status")
        if status == STATUS_SUCCESS:
            return None

        message = STATUS_MESSAGES.get(status, f"Unknown status: {status}")
        if status == 41:
            return AuthenticationError(message=message, source=self.SOURCE_NAME, response_data=data)
        return FatalError(message=message, source=self.SOURCE_NAME, response_data=data)

    async def get_score(
        self, lat: float, lng: float, address: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Fetch walk, transit and bike scores.

        Args:
            lat: Latitude
            lng: Longitude
            address: Full address (improves accuracy when given)
        """
        params = {
            "format": "json",
            "lat": lat,
            "lon": lng,
            "transit": 1,
            "bike": 1,
        }
        if address:
            params["address"] = address

        return await self.get("score", params=params, resource_id=f"score {lat:.4f},{lng:.4f}")
