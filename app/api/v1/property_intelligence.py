"""
Property Intelligence API.

Endpoints for:
- Multi-source property intelligence for a point (POST and GET)
- Provider registry and configuration status
"""

import logging
from typing import Any, Dict, List, Optional

import pydantic
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field

from app.core.api_registry import API_REGISTRY
from app.core.config import Settings, get_settings
from app.intelligence.aggregator import (
    DEFAULT_TOGGLES,
    IntelligenceAggregator,
    resolve_sources,
)
from app.intelligence.scoring import calculate_property_score
from app.intelligence.types import IntelligenceComposite, LocationQuery

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/property-intelligence", tags=["Property Intelligence"])


class PropertyIntelligenceRequest(BaseModel):
    lat: float
    lng: float
    address: Optional[str] = None
    fips_code: Optional[str] = None
    toggles: List[str] = Field(default_factory=lambda: list(DEFAULT_TOGGLES))


def get_aggregator(settings: Settings = Depends(get_settings)) -> IntelligenceAggregator:
    return IntelligenceAggregator(settings)


def build_query(
    lat: float, lng: float, fips_code: Optional[str], address: Optional[str]
) -> LocationQuery:
    """Validated LocationQuery, or HTTP 400."""
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise HTTPException(status_code=400, detail="Invalid coordinates")
    try:
        return LocationQuery(latitude=lat, longitude=lng, fips_code=fips_code or None, address=address)
    except pydantic.ValidationError as e:
        raise HTTPException(
            status_code=400, detail="fips_code must be 5 digits (state + county)"
        ) from e


def cache_max_age(composite: IntelligenceComposite, aggregator: IntelligenceAggregator) -> Optional[int]:
    """Shortest cache lifetime among the sources that returned data."""
    ttls = [
        aggregator.adapters[source].config.cache_ttl_seconds
        for source in composite.available_sources()
        if source in aggregator.adapters
    ]
    return min(ttls) if ttls else None


async def run_intelligence(
    query: LocationQuery,
    toggles: List[str],
    aggregator: IntelligenceAggregator,
    response: Response,
) -> Dict[str, Any]:
    try:
        sources = resolve_sources(toggles)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    composite = await aggregator.aggregate(query, sources)
    score = calculate_property_score(composite)

    max_age = cache_max_age(composite, aggregator)
    if max_age is None:
        response.headers["Cache-Control"] = "no-store"
    else:
        response.headers["Cache-Control"] = f"public, max-age={max_age}"

    body = composite.model_dump(mode="json")
    body["summary"] = composite.summary()
    body["property_score"] = score.model_dump(mode="json")
    return body


@router.post("")
async def post_property_intelligence(
    request: PropertyIntelligenceRequest,
    response: Response,
    aggregator: IntelligenceAggregator = Depends(get_aggregator),
):
    """
    Property intelligence for a point.

    Toggles select sources: flood, disasters, environment, earthquakes,
    weather, walkability, amenities, places, or the groups "risk" and "all".
    """
    query = build_query(request.lat, request.lng, request.fips_code, request.address)
    return await run_intelligence(query, request.toggles, aggregator, response)


@router.get("")
async def get_property_intelligence(
    response: Response,
    lat: float = Query(..., description="Latitude"),
    lng: float = Query(..., description="Longitude"),
    toggles: str = Query(",".join(DEFAULT_TOGGLES), description="Comma-separated toggles"),
    fips: Optional[str] = Query(None, description="5-digit county FIPS code"),
    address: Optional[str] = Query(None, description="Street address"),
    aggregator: IntelligenceAggregator = Depends(get_aggregator),
):
    """Same as POST with query parameters."""
    query = build_query(lat, lng, fips, address)
    return await run_intelligence(query, toggles.split(","), aggregator, response)


@router.get("/sources")
async def list_sources(settings: Settings = Depends(get_settings)):
    """
    Registered providers with key requirements and configuration status.
    """
    return [
        {
            "name": config.source_name,
            "display_name": config.display_name,
            "requires_key": config.requires_key,
            "configured": (not config.requires_key) or bool(settings.get_api_key(config.config_key)),
            "signup_url": config.signup_url,
            "reference_url": config.reference_url,
            "cache_ttl_seconds": config.cache_ttl_seconds,
            "default_confidence": config.default_confidence,
            "freshness": config.freshness.value,
        }
        for config in API_REGISTRY.values()
    ]
