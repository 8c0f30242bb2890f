"""
OpenFEMA disaster declarations adapter.

Summarizes federally declared disasters for a county: unique events,
counts by type and a frequency-based risk level.

API Documentation: https://www.fema.gov/about/openfema/api
No API key required - free public API.
"""

from app.sources.fema_disasters.client import OpenFEMAClient
from app.sources.fema_disasters import metadata

__all__ = ["OpenFEMAClient", "metadata"]
