"""
Centralized provider configuration registry.

Consolidates all provider-specific settings in one place:
- Base URLs
- Required vs optional keys
- Authoritative reference pages for manual lookups
- Static cache lifetimes matched to how often each dataset changes
- Default confidence (0-100) and update cadence reported alongside results

This eliminates magic strings scattered across client files.
"""

from dataclasses import dataclass
from typing import Optional, Dict
from enum import Enum


class DataFreshness(str, Enum):
    """How often a provider's underlying dataset changes."""

    REAL_TIME = "real_time"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"
    UNKNOWN = "unknown"


class APIKeyRequirement(Enum):
    """Whether an API key is required or not needed."""

    REQUIRED = "required"
    OPTIONAL = "optional"


@dataclass(frozen=True)
class APIConfig:
    """Configuration for a single external provider."""

    source_name: str
    display_name: str
    base_url: str
    api_key_requirement: APIKeyRequirement
    reference_url: str  # Where a user can look the data up by hand
    config_key: Optional[str] = None  # Key name in Settings (e.g., "yelp_api_key")
    signup_url: Optional[str] = None

    # Request settings
    timeout_seconds: Optional[float] = None  # None = use Settings default

    # How long a response stays fresh for downstream caches
    cache_ttl_seconds: int = 3600

    # Trust metadata attached to every available result
    default_confidence: int = 80
    freshness: DataFreshness = DataFreshness.UNKNOWN

    # API-specific notes
    notes: Optional[str] = None

    @property
    def requires_key(self) -> bool:
        return self.api_key_requirement == APIKeyRequirement.REQUIRED


# =============================================================================
# API REGISTRY - All external provider configurations
# =============================================================================

API_REGISTRY: Dict[str, APIConfig] = {
    # -------------------------------------------------------------------------
    # HAZARDS
    # -------------------------------------------------------------------------
    "fema_nfhl": APIConfig(
        source_name="fema_nfhl",
        display_name="FEMA National Flood Hazard Layer",
        base_url="https://hazards.fema.gov/gis/nfhl/rest/services/public/NFHL/MapServer",
        api_key_requirement=APIKeyRequirement.OPTIONAL,
        reference_url="https://msc.fema.gov/portal/search",
        cache_ttl_seconds=86400,
        default_confidence=95,
        freshness=DataFreshness.ANNUAL,
        notes="Layer 28 = S_FLD_HAZ_AR. Service is intermittently unavailable.",
    ),
    "openfema": APIConfig(
        source_name="openfema",
        display_name="OpenFEMA Disaster Declarations",
        base_url="https://www.fema.gov/api/open/v2",
        api_key_requirement=APIKeyRequirement.OPTIONAL,
        reference_url="https://www.fema.gov/disaster/declarations",
        cache_ttl_seconds=86400,
        default_confidence=95,
        freshness=DataFreshness.DAILY,
        notes="Multiple rows per declaration (one per designated area/program).",
    ),
    "epa_envirofacts": APIConfig(
        source_name="epa_envirofacts",
        display_name="EPA Envirofacts",
        base_url="https://data.epa.gov/efservice",
        api_key_requirement=APIKeyRequirement.OPTIONAL,
        reference_url="https://www.epa.gov/enviro/",
        timeout_seconds=10.0,
        cache_ttl_seconds=86400,
        default_confidence=90,
        freshness=DataFreshness.DAILY,
        notes="Bounding boxes are expressed in degrees; 1 degree ~ 69 miles.",
    ),
    "usgs_earthquake": APIConfig(
        source_name="usgs_earthquake",
        display_name="USGS Earthquake Catalog",
        base_url="https://earthquake.usgs.gov/fdsnws/event/1",
        api_key_requirement=APIKeyRequirement.OPTIONAL,
        reference_url="https://earthquake.usgs.gov/earthquakes/search/",
        cache_ttl_seconds=3600,
        default_confidence=90,
        freshness=DataFreshness.WEEKLY,
        notes="Radius parameter is in kilometers.",
    ),
    "nws": APIConfig(
        source_name="nws",
        display_name="National Weather Service",
        base_url="https://api.weather.gov",
        api_key_requirement=APIKeyRequirement.OPTIONAL,
        reference_url="https://www.weather.gov/",
        cache_ttl_seconds=300,
        default_confidence=85,
        freshness=DataFreshness.REAL_TIME,
        notes="User-Agent header is mandatory. Points -> forecast/alerts.",
    ),
    # -------------------------------------------------------------------------
    # LOCATION & AMENITIES
    # -------------------------------------------------------------------------
    "walkscore": APIConfig(
        source_name="walkscore",
        display_name="Walk Score",
        base_url="https://api.walkscore.com",
        api_key_requirement=APIKeyRequirement.REQUIRED,
        reference_url="https://www.walkscore.com/",
        config_key="walkscore_api_key",
        signup_url="https://www.walkscore.com/professional/api-sign-up.php",
        cache_ttl_seconds=86400,
        default_confidence=80,
        freshness=DataFreshness.MONTHLY,
        notes="In-band status field; 1 = success.",
    ),
    "yelp": APIConfig(
        source_name="yelp",
        display_name="Yelp Fusion",
        base_url="https://api.yelp.com/v3",
        api_key_requirement=APIKeyRequirement.REQUIRED,
        reference_url="https://www.yelp.com/",
        config_key="yelp_api_key",
        signup_url="https://www.yelp.com/developers/v3/manage_app",
        cache_ttl_seconds=3600,
        default_confidence=70,
        freshness=DataFreshness.WEEKLY,
        notes="Radius in meters, max 40000. 500 calls/day on the free tier.",
    ),
    "google_places": APIConfig(
        source_name="google_places",
        display_name="Google Places",
        base_url="https://maps.googleapis.com/maps/api/place",
        api_key_requirement=APIKeyRequirement.REQUIRED,
        reference_url="https://maps.google.com/",
        config_key="google_maps_api_key",
        signup_url="https://developers.google.com/maps/documentation/places/web-service/get-api-key",
        cache_ttl_seconds=3600,
        default_confidence=85,
        freshness=DataFreshness.WEEKLY,
        notes="Radius in meters, max 50000. In-band status field.",
    ),
}


def get_api_config(source_name: str) -> APIConfig:
    """
    Get configuration for a provider.

    Raises:
        KeyError: If the provider is not registered
    """
    if source_name not in API_REGISTRY:
        raise KeyError(
            f"Unknown provider: {source_name}. "
            f"Available: {', '.join(sorted(API_REGISTRY))}"
        )
    return API_REGISTRY[source_name]
