"""
FEMA National Flood Hazard Layer adapter.

Provides the flood zone, Special Flood Hazard Area status and flood
insurance requirement for a single point.

API Documentation: https://hazards.fema.gov/gis/nfhl/rest/services
No API key required - free public API.
"""

from app.sources.fema_flood.client import FEMAFloodClient
from app.sources.fema_flood import metadata

__all__ = ["FEMAFloodClient", "metadata"]
