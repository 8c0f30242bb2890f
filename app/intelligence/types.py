"""
Property Intelligence - Types and Pydantic Models.

Defines the source and status enums, the per-request location query, the
per-source result envelope and the composite returned by the aggregator.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.core.api_registry import DataFreshness
from app.core.risk import RiskLevel, max_level


# =============================================================================
# ENUMS
# =============================================================================

class IntelligenceSource(str, Enum):
    """Independent providers that can be requested for a location."""
    FLOOD = "flood"
    DISASTERS = "disasters"
    ENVIRONMENT = "environment"
    EARTHQUAKES = "earthquakes"
    WEATHER = "weather"
    WALKABILITY = "walkability"
    AMENITIES = "amenities"
    PLACES = "places"


class SourceStatus(str, Enum):
    """Outcome of a requested source."""
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"  # Fallback payload, see reason
    SKIPPED = "skipped"  # Requested but a precondition (e.g. FIPS code) was missing


# =============================================================================
# REQUEST / RESULT MODELS
# =============================================================================

class LocationQuery(BaseModel):
    """A point to assess. Immutable for the life of a request."""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    fips_code: Optional[str] = Field(
        None, pattern=r"^\d{5}$", description="2-digit state + 3-digit county FIPS"
    )
    address: Optional[str] = None


def confidence_level(score: int) -> str:
    """Bucket a 0-100 confidence score."""
    if score >= 80:
        return "high"
    if score >= 60:
        return "medium"
    if score >= 40:
        return "low"
    return "unverified"


class SourceResult(BaseModel):
    """Result of one source, tagged with how it was obtained."""
    source: IntelligenceSource
    status: SourceStatus
    data: Optional[Any] = None
    reason: Optional[str] = None
    error_category: Optional[str] = None  # configuration, transport, parse
    confidence_score: int = 0  # 0-100, zero for anything not retrieved
    freshness: Optional[DataFreshness] = None

    @property
    def confidence(self) -> str:
        return confidence_level(self.confidence_score)

    @property
    def is_available(self) -> bool:
        return self.status == SourceStatus.AVAILABLE


class IntelligenceComposite(BaseModel):
    """Per-source results for one location, keyed by source."""
    location: LocationQuery
    results: Dict[IntelligenceSource, SourceResult] = Field(default_factory=dict)
    closest_concern: Optional[Any] = None
    queried_at: datetime = Field(default_factory=datetime.utcnow)

    def get(self, source: IntelligenceSource) -> Optional[SourceResult]:
        return self.results.get(source)

    def status_of(self, source: IntelligenceSource) -> Optional[SourceStatus]:
        """Status of a source, or None if it was not requested."""
        result = self.results.get(source)
        return result.status if result else None

    def data_of(self, source: IntelligenceSource) -> Optional[Any]:
        """Payload of an available source, else None."""
        result = self.results.get(source)
        if result is None or not result.is_available:
            return None
        return result.data

    def available_sources(self) -> List[IntelligenceSource]:
        return [s for s, r in self.results.items() if r.status == SourceStatus.AVAILABLE]

    def unavailable_sources(self) -> List[IntelligenceSource]:
        return [s for s, r in self.results.items() if r.status == SourceStatus.UNAVAILABLE]

    def skipped_sources(self) -> List[IntelligenceSource]:
        return [s for s, r in self.results.items() if r.status == SourceStatus.SKIPPED]

    def highest_risk_level(self) -> RiskLevel:
        """Highest known risk level among available sources, else unknown."""
        levels = []
        for source in self.available_sources():
            level = getattr(self.results[source].data, "risk_level", None)
            if level is not None:
                levels.append(level)
        return max_level(levels)

    def sources_queried(self) -> List[IntelligenceSource]:
        """Sources whose adapter actually ran."""
        return [s for s, r in self.results.items() if r.status != SourceStatus.SKIPPED]

    def data_completeness(self) -> int:
        """Percentage of requested sources that returned data."""
        if not self.results:
            return 0
        return round(100 * len(self.available_sources()) / len(self.results))

    def average_confidence(self) -> int:
        """Mean confidence of the sources that returned data, else 0."""
        scores = [self.results[s].confidence_score for s in self.available_sources()]
        if not scores:
            return 0
        return round(sum(scores) / len(scores))

    def summary(self) -> Dict[str, Any]:
        return {
            "available": [s.value for s in self.available_sources()],
            "unavailable": [s.value for s in self.unavailable_sources()],
            "skipped": [s.value for s in self.skipped_sources()],
            "sources_queried": [s.value for s in self.sources_queried()],
            "sources_succeeded": [s.value for s in self.available_sources()],
            "highest_risk_level": self.highest_risk_level().value,
            "data_completeness": self.data_completeness(),
            "average_confidence": self.average_confidence(),
        }
