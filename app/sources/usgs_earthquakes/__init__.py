"""
USGS earthquake history adapter.

Summarizes recorded earthquakes (M2.5+) near a point and rates
seismic risk from magnitude and frequency.

API Documentation: https://earthquake.usgs.gov/fdsnws/event/1/
No API key required - free public API.
"""

from app.sources.usgs_earthquakes.client import USGSEarthquakeClient
from app.sources.usgs_earthquakes import metadata

__all__ = ["USGSEarthquakeClient", "metadata"]
