"""
Property Intelligence - Source Adapters.

One adapter per IntelligenceSource. Each opens its provider client for the
duration of a run, normalizes the response through the source's metadata
module and supplies the fallback payload used by SourceAdapter.run().

Adapters that fan out (EPA tables, Yelp categories, Places types, NWS
forecast/alerts) record partial failures in their payload and only fail
as a whole when nothing could be retrieved.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import httpx
import pydantic

from app.core.api_errors import APIError, ParseError
from app.core.geo import bounding_box
from app.intelligence.base import SourceAdapter, register_adapter
from app.intelligence.types import IntelligenceSource, LocationQuery
from app.sources.epa_envirofacts import metadata as epa_metadata
from app.sources.epa_envirofacts.client import EPAEnvirofactsClient
from app.sources.fema_disasters import metadata as disaster_metadata
from app.sources.fema_disasters.client import OpenFEMAClient
from app.sources.fema_flood import metadata as flood_metadata
from app.sources.fema_flood.client import FEMAFloodClient
from app.sources.google_places import metadata as places_metadata
from app.sources.google_places.client import GooglePlacesClient
from app.sources.nws_weather import metadata as weather_metadata
from app.sources.nws_weather.client import NWSClient
from app.sources.usgs_earthquakes import metadata as earthquake_metadata
from app.sources.usgs_earthquakes.client import USGSEarthquakeClient
from app.sources.walkscore import metadata as walkscore_metadata
from app.sources.walkscore.client import WalkScoreClient
from app.sources.yelp import metadata as yelp_metadata
from app.sources.yelp.client import YelpClient

logger = logging.getLogger(__name__)

# Failures a single sub-call may have without failing the whole adapter
PARTIAL_FAILURES = (APIError, httpx.HTTPError)


async def gather_partial(
    calls: Dict[Any, Awaitable[Any]], label: str
) -> Tuple[Dict[Any, Optional[Any]], List[BaseException]]:
    """
    Run keyed calls concurrently.

    Returns the results keyed like ``calls`` (None where a call failed with
    a provider or transport error) and the list of those errors. Any other
    exception propagates.
    """
    keys = list(calls)
    outcomes = await asyncio.gather(*calls.values(), return_exceptions=True)

    results: Dict[Any, Optional[Any]] = {}
    errors: List[BaseException] = []
    for key, outcome in zip(keys, outcomes):
        if isinstance(outcome, PARTIAL_FAILURES):
            logger.warning(f"[{label}] {key} unavailable: {outcome}")
            results[key] = None
            errors.append(outcome)
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results[key] = outcome
    return results, errors


@register_adapter(IntelligenceSource.FLOOD)
class FloodAdapter(SourceAdapter):
    """FEMA NFHL flood zone at the point."""

    source = IntelligenceSource.FLOOD
    provider = "fema_nfhl"

    async def fetch(self, query: LocationQuery, api_key: Optional[str]) -> Any:
        async with FEMAFloodClient(**self.client_kwargs(api_key)) as client:
            data = await client.query_point(query.latitude, query.longitude)
        return flood_metadata.build_flood_risk(data)

    def fallback(self, reason: str, query: LocationQuery) -> Any:
        return flood_metadata.unavailable_flood_risk(reason)


@register_adapter(IntelligenceSource.DISASTERS)
class DisasterAdapter(SourceAdapter):
    """OpenFEMA declared disasters for the county. Needs a FIPS code."""

    source = IntelligenceSource.DISASTERS
    provider = "openfema"

    years = disaster_metadata.DEFAULT_YEARS

    async def fetch(self, query: LocationQuery, api_key: Optional[str]) -> Any:
        async with OpenFEMAClient(**self.client_kwargs(api_key)) as client:
            data = await client.get_county_declarations(query.fips_code, years=self.years)
        return disaster_metadata.build_disaster_history(data, query.fips_code, self.years)

    def fallback(self, reason: str, query: LocationQuery) -> Any:
        return disaster_metadata.unavailable_disaster_history(reason, query.fips_code, self.years)


@register_adapter(IntelligenceSource.ENVIRONMENT)
class EnvironmentAdapter(SourceAdapter):
    """EPA Superfund, TRI and RCRA facilities near the point."""

    source = IntelligenceSource.ENVIRONMENT
    provider = "epa_envirofacts"

    radius_miles = epa_metadata.DEFAULT_RADIUS_MILES

    async def fetch(self, query: LocationQuery, api_key: Optional[str]) -> Any:
        box = bounding_box(query.latitude, query.longitude, self.radius_miles)
        SiteType = epa_metadata.SiteType

        async with EPAEnvirofactsClient(**self.client_kwargs(api_key)) as client:
            rows, errors = await gather_partial(
                {
                    SiteType.SUPERFUND: client.get_superfund_sites(box),
                    SiteType.TRI: client.get_tri_facilities(box),
                    SiteType.RCRA: client.get_rcra_handlers(box),
                },
                self.source.value,
            )

        if len(errors) == len(rows):
            raise errors[0]

        return epa_metadata.build_environmental_data(
            query.latitude, query.longitude, rows, self.radius_miles
        )

    def fallback(self, reason: str, query: LocationQuery) -> Any:
        return epa_metadata.unavailable_environmental_data(reason, self.radius_miles)


@register_adapter(IntelligenceSource.EARTHQUAKES)
class EarthquakeAdapter(SourceAdapter):
    """USGS recorded earthquakes near the point."""

    source = IntelligenceSource.EARTHQUAKES
    provider = "usgs_earthquake"

    radius_km = earthquake_metadata.DEFAULT_RADIUS_KM
    years = earthquake_metadata.DEFAULT_YEARS

    async def fetch(self, query: LocationQuery, api_key: Optional[str]) -> Any:
        async with USGSEarthquakeClient(**self.client_kwargs(api_key)) as client:
            data = await client.query(
                query.latitude, query.longitude, radius_km=self.radius_km, years=self.years
            )
        return earthquake_metadata.build_earthquake_data(
            data, query.latitude, query.longitude, self.radius_km, self.years
        )

    def fallback(self, reason: str, query: LocationQuery) -> Any:
        return earthquake_metadata.unavailable_earthquake_data(reason, self.radius_km, self.years)


@register_adapter(IntelligenceSource.WEATHER)
class WeatherAdapter(SourceAdapter):
    """NWS forecast and active alerts. The points lookup must succeed."""

    source = IntelligenceSource.WEATHER
    provider = "nws"

    async def fetch(self, query: LocationQuery, api_key: Optional[str]) -> Any:
        async with NWSClient(**self.client_kwargs(api_key)) as client:
            location = weather_metadata.parse_point(
                await client.get_point(query.latitude, query.longitude)
            )
            raw, _ = await gather_partial(
                {
                    "forecast": client.get_forecast(location.forecast_url),
                    "alerts": client.get_active_alerts(query.latitude, query.longitude),
                },
                self.source.value,
            )

        forecast = self._parse_hop("forecast", weather_metadata.parse_forecast, raw["forecast"])
        alerts = self._parse_hop("alerts", weather_metadata.parse_alerts, raw["alerts"])

        return weather_metadata.build_weather_data(location, forecast, alerts)

    def _parse_hop(self, hop: str, parse: Callable[[Any], Any], data: Any) -> Any:
        """Parsed hop, or None when it failed or its body is malformed."""
        if data is None:
            return None
        try:
            return parse(data)
        except (ParseError, pydantic.ValidationError) as e:
            logger.warning(f"[{self.source.value}] {hop} unavailable: {e}")
            return None

    def fallback(self, reason: str, query: LocationQuery) -> Any:
        return weather_metadata.unavailable_weather_data(reason)


@register_adapter(IntelligenceSource.WALKABILITY)
class WalkabilityAdapter(SourceAdapter):
    """Walk Score walk, transit and bike scores."""

    source = IntelligenceSource.WALKABILITY
    provider = "walkscore"

    async def fetch(self, query: LocationQuery, api_key: Optional[str]) -> Any:
        async with WalkScoreClient(**self.client_kwargs(api_key)) as client:
            data = await client.get_score(query.latitude, query.longitude, query.address)
        return walkscore_metadata.build_walkscore_data(
            data, query.latitude, query.longitude, query.address
        )

    def fallback(self, reason: str, query: LocationQuery) -> Any:
        return walkscore_metadata.unavailable_walkscore_data(reason)


@register_adapter(IntelligenceSource.AMENITIES)
class AmenitiesAdapter(SourceAdapter):
    """Yelp businesses per amenity category."""

    source = IntelligenceSource.AMENITIES
    provider = "yelp"

    radius_meters = yelp_metadata.DEFAULT_RADIUS_METERS
    results_per_category = 5

    async def fetch(self, query: LocationQuery, api_key: Optional[str]) -> Any:
        async with YelpClient(**self.client_kwargs(api_key)) as client:
            responses, errors = await gather_partial(
                {
                    category: client.search_businesses(
                        query.latitude,
                        query.longitude,
                        categories=category,
                        radius=self.radius_meters,
                        limit=self.results_per_category,
                    )
                    for category in yelp_metadata.AMENITY_CATEGORIES
                },
                self.source.value,
            )

        if len(errors) == len(responses):
            raise errors[0]

        return yelp_metadata.build_amenities_data(
            query.latitude, query.longitude, responses, self.radius_meters
        )

    def fallback(self, reason: str, query: LocationQuery) -> Any:
        return yelp_metadata.unavailable_amenities_data(reason, self.radius_meters)


@register_adapter(IntelligenceSource.PLACES)
class PlacesAdapter(SourceAdapter):
    """Google Places count and nearest place per place type."""

    source = IntelligenceSource.PLACES
    provider = "google_places"

    radius_meters = places_metadata.DEFAULT_RADIUS_METERS

    async def fetch(self, query: LocationQuery, api_key: Optional[str]) -> Any:
        async with GooglePlacesClient(**self.client_kwargs(api_key)) as client:
            responses, errors = await gather_partial(
                {
                    place_type: client.nearby_search(
                        query.latitude,
                        query.longitude,
                        place_type=place_type,
                        radius=self.radius_meters,
                    )
                    for place_type in places_metadata.PLACE_TYPES
                },
                self.source.value,
            )

        if len(errors) == len(responses):
            raise errors[0]

        return places_metadata.build_places_data(
            query.latitude, query.longitude, responses, self.radius_meters
        )

    def fallback(self, reason: str, query: LocationQuery) -> Any:
        return places_metadata.unavailable_places_data(reason, self.radius_meters)
