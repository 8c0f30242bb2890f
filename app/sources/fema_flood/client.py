"""
FEMA National Flood Hazard Layer (NFHL) client.

Point-in-polygon query against the NFHL ArcGIS REST MapServer:
https://hazards.fema.gov/gis/nfhl/rest/services/public/NFHL/MapServer/28/query
Layer 28 = S_FLD_HAZ_AR (flood hazard areas)

No API key required. FEMA site is intermittently unavailable; failures are
reported to the caller, not retried.
"""
import logging
from typing import Any, Dict

from app.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class FEMAFloodClient(BaseAPIClient):
    """HTTP client for the NFHL flood hazard layer."""

    SOURCE_NAME = "fema_nfhl"

    FLOOD_HAZARD_LAYER = 28
    OUT_FIELDS = [
        "FLD_ZONE",
        "ZONE_SUBTY",
        "SFHA_TF",
        "STATIC_BFE",
        "FIRM_PAN",
        "EFF_DATE",
    ]

    async def query_point(self, lat: float, lng: float) -> Dict[str, Any]:
        """
        Fetch the flood hazard polygons containing a point.

        ArcGIS expects the point geometry as "x,y", i.e. longitude first.

        Returns:
            Raw feature collection ({"features": [{"attributes": {...}}]})
        """
        params = {
            "geometry": f"{lng},{lat}",
            "geometryType": "esriGeometryPoint",
            "inSR": "4326",
            "spatialRel": "esriSpatialRelIntersects",
            "outFields": ",".join(self.OUT_FIELDS),
            "returnGeometry": "false",
            "f": "json",
        }

        return await self.get(
            f"{self.FLOOD_HAZARD_LAYER}/query",
            params=params,
            resource_id=f"NFHL point {lat:.4f},{lng:.4f}",
        )
