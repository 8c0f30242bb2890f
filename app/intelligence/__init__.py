"""
Property Intelligence package.

Runs one adapter per public data source for a location and merges the
results into a single composite with a property score.
"""

from app.intelligence.aggregator import IntelligenceAggregator, resolve_sources
from app.intelligence.scoring import calculate_property_score

__all__ = ["IntelligenceAggregator", "resolve_sources", "calculate_property_score"]
