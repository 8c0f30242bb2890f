"""
Property Intelligence - Aggregator.

Resolves requested toggles to sources, runs one adapter per source
concurrently and merges the results into an IntelligenceComposite.

Usage:
    aggregator = IntelligenceAggregator(get_settings())

    composite = await aggregator.aggregate(
        LocationQuery(latitude=27.95, longitude=-82.46, fips_code="12057"),
        resolve_sources(["risk", "environment"]),
    )
"""
import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Set

from app.core.api_errors import CATEGORY_TRANSPORT
from app.core.config import Settings
from app.intelligence import adapters as registered_adapters  # noqa: F401
from app.intelligence.base import ADAPTER_REGISTRY, SourceAdapter
from app.intelligence.types import (
    IntelligenceComposite,
    IntelligenceSource,
    LocationQuery,
    SourceResult,
    SourceStatus,
)

logger = logging.getLogger(__name__)


# Toggle groups accepted in addition to individual source names
TOGGLE_GROUPS: Dict[str, Set[IntelligenceSource]] = {
    "risk": {
        IntelligenceSource.FLOOD,
        IntelligenceSource.DISASTERS,
        IntelligenceSource.EARTHQUAKES,
    },
    "all": set(IntelligenceSource),
}

DEFAULT_TOGGLES = ["flood"]

# Sources that need a county FIPS code
FIPS_SOURCES = {IntelligenceSource.DISASTERS}


def resolve_sources(toggles: Iterable[str]) -> Set[IntelligenceSource]:
    """
    Map toggle names to sources.

    Raises:
        ValueError: For an unrecognized toggle
    """
    sources: Set[IntelligenceSource] = set()
    unknown = []
    for raw in toggles:
        toggle = raw.strip().lower()
        if not toggle:
            continue
        if toggle in TOGGLE_GROUPS:
            sources |= TOGGLE_GROUPS[toggle]
            continue
        try:
            sources.add(IntelligenceSource(toggle))
        except ValueError:
            unknown.append(raw)

    if unknown:
        valid = sorted([s.value for s in IntelligenceSource] + list(TOGGLE_GROUPS))
        raise ValueError(
            f"Unknown toggle(s): {', '.join(unknown)}. Valid toggles: {', '.join(valid)}"
        )
    return sources


class IntelligenceAggregator:
    """
    Fans a location query out to the requested source adapters.

    A failing source only ever affects its own slot in the composite.
    """

    def __init__(
        self,
        settings: Settings,
        adapters: Optional[Dict[IntelligenceSource, SourceAdapter]] = None,
    ):
        """
        Initialize the aggregator.

        Args:
            settings: Loaded application settings
            adapters: Adapter instances by source (defaults to one of each
                registered adapter)
        """
        self.settings = settings
        if adapters is None:
            adapters = {source: cls(settings) for source, cls in ADAPTER_REGISTRY.items()}
        self.adapters = adapters

    def _skipped(self, source: IntelligenceSource, reason: str) -> SourceResult:
        return SourceResult(source=source, status=SourceStatus.SKIPPED, reason=reason)

    async def _run(self, source: IntelligenceSource, query: LocationQuery) -> SourceResult:
        return await self.adapters[source].run(query)

    async def aggregate(
        self,
        query: LocationQuery,
        sources: Optional[Iterable[IntelligenceSource]] = None,
    ) -> IntelligenceComposite:
        """
        Query every requested source concurrently and merge the results.

        Args:
            query: Location to assess
            sources: Sources to query (defaults to flood only)

        Returns:
            Composite with one result per requested source
        """
        requested = set(sources) if sources is not None else resolve_sources(DEFAULT_TOGGLES)
        # Stable order for logging and response bodies
        ordered = [s for s in IntelligenceSource if s in requested]

        results: Dict[IntelligenceSource, SourceResult] = {}
        to_run: List[IntelligenceSource] = []

        for source in ordered:
            if source in FIPS_SOURCES and not query.fips_code:
                results[source] = self._skipped(
                    source, "A 5-digit county FIPS code is required for this source."
                )
            elif source not in self.adapters:
                results[source] = self._skipped(source, "No adapter is registered for this source.")
            else:
                to_run.append(source)

        outcomes = await asyncio.gather(
            *(self._run(source, query) for source in to_run), return_exceptions=True
        )

        for source, outcome in zip(to_run, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    f"[{source.value}] adapter raised unexpectedly: {outcome}",
                    exc_info=outcome,
                )
                adapter = self.adapters[source]
                reason = adapter.unavailable_reason(outcome)
                results[source] = SourceResult(
                    source=source,
                    status=SourceStatus.UNAVAILABLE,
                    data=adapter.fallback(reason, query),
                    reason=reason,
                    error_category=CATEGORY_TRANSPORT,
                    freshness=adapter.config.freshness,
                )
            else:
                results[source] = outcome

        composite = IntelligenceComposite(
            location=query,
            results={s: results[s] for s in ordered},
        )
        composite.closest_concern = self._closest_concern(composite)

        summary = composite.summary()
        logger.info(
            f"Property intelligence for {query.latitude:.4f},{query.longitude:.4f}: "
            f"available={summary['available']} unavailable={summary['unavailable']} "
            f"skipped={summary['skipped']} highest={summary['highest_risk_level']} "
            f"completeness={summary['data_completeness']}%"
        )
        return composite

    def _closest_concern(self, composite: IntelligenceComposite):
        environment = composite.data_of(IntelligenceSource.ENVIRONMENT)
        if environment is None:
            return None
        return environment.closest_concern
