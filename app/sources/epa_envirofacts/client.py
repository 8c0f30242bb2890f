"""
EPA Envirofacts Data Service client.

REST path queries against https://data.epa.gov/efservice/:
- SEMS_ACTIVE_SITES: Superfund (CERCLIS/SEMS) sites
- TRI_FACILITY: Toxic Release Inventory reporters
- RCRAInfo: RCRA hazardous waste handlers

Each table is filtered by a latitude/longitude bounding box. Responses are
JSON arrays. No API key required.
"""
import logging
from typing import Any, Dict, List, Tuple

from app.core.api_errors import ParseError
from app.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)

BoundingBox = Tuple[float, float, float, float]


class EPAEnvirofactsClient(BaseAPIClient):
    """HTTP client for EPA Envirofacts facility tables."""

    SOURCE_NAME = "epa_envirofacts"

    SUPERFUND_TABLE = "SEMS_ACTIVE_SITES"
    TRI_TABLE = "TRI_FACILITY"
    RCRA_TABLE = "RCRAInfo"
    MAX_ROWS = 50

    def _box_path(self, table: str, box: BoundingBox) -> str:
        min_lat, max_lat, min_lng, max_lng = box
        return (
            f"{table}/LATITUDE/{min_lat:.6f}:{max_lat:.6f}"
            f"/LONGITUDE/{min_lng:.6f}:{max_lng:.6f}"
        )

    async def _get_rows(self, path: str, resource_id: str) -> List[Dict[str, Any]]:
        data = await self.get(path, resource_id=resource_id)
        if not isinstance(data, list):
            raise ParseError(
                message=f"Expected a JSON array for {resource_id}",
                source=self.SOURCE_NAME,
            )
        return data

    async def get_superfund_sites(self, box: BoundingBox) -> List[Dict[str, Any]]:
        """Superfund sites inside the bounding box."""
        path = f"{self._box_path(self.SUPERFUND_TABLE, box)}/JSON"
        return await self._get_rows(path, self.SUPERFUND_TABLE)

    async def get_tri_facilities(self, box: BoundingBox) -> List[Dict[str, Any]]:
        """Toxic Release Inventory facilities inside the bounding box (first 50 rows)."""
        path = f"{self._box_path(self.TRI_TABLE, box)}/ROWS/0:{self.MAX_ROWS}/JSON"
        return await self._get_rows(path, self.TRI_TABLE)

    async def get_rcra_handlers(self, box: BoundingBox) -> List[Dict[str, Any]]:
        """RCRA hazardous waste handlers inside the bounding box (first 50 rows)."""
        path = f"{self._box_path(self.RCRA_TABLE, box)}/ROWS/0:{self.MAX_ROWS}/JSON"
        return await self._get_rows(path, self.RCRA_TABLE)
