"""
EPA Envirofacts adapter.

Finds Superfund sites, Toxic Release Inventory facilities and RCRA
hazardous waste handlers near a point and rates environmental risk
by proximity.

API Documentation: https://www.epa.gov/enviro/envirofacts-data-service-api
No API key required - free public API.
"""

from app.sources.epa_envirofacts.client import EPAEnvirofactsClient
from app.sources.epa_envirofacts import metadata

__all__ = ["EPAEnvirofactsClient", "metadata"]
