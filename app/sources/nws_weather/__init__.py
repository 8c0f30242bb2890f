"""
National Weather Service adapter.

Forecast periods, approximate current conditions and active weather
alerts for a point.

API Documentation: https://www.weather.gov/documentation/services-web-api
No API key required - User-Agent header expected.
"""

from app.sources.nws_weather.client import NWSClient
from app.sources.nws_weather import metadata

__all__ = ["NWSClient", "metadata"]
