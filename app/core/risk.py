"""
Shared ordinal risk vocabulary.

Every hazard source (flood zone, disaster frequency, seismic history,
environmental proximity, weather alerts) converges on the same ordered levels
even though each derives its level from different raw signals.
"""
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RiskLevel(str, Enum):
    """Ordinal risk levels, lowest first. UNKNOWN has no rank."""
    MINIMAL = "minimal"
    LOW = "low"
    MODERATE = "moderate"
    ELEVATED = "elevated"
    HIGH = "high"
    VERY_HIGH = "very_high"
    UNKNOWN = "unknown"

    @property
    def rank(self) -> Optional[int]:
        return _RANKS.get(self)

    @property
    def is_known(self) -> bool:
        return self is not RiskLevel.UNKNOWN

    def at_least(self, other: "RiskLevel") -> bool:
        """True if this level is known and ranks at or above ``other``."""
        if not self.is_known or not other.is_known:
            return False
        return self.rank >= other.rank


_RANKS = {
    RiskLevel.MINIMAL: 0,
    RiskLevel.LOW: 1,
    RiskLevel.MODERATE: 2,
    RiskLevel.ELEVATED: 3,
    RiskLevel.HIGH: 4,
    RiskLevel.VERY_HIGH: 5,
}


def max_level(levels: Iterable[RiskLevel]) -> RiskLevel:
    """
    Highest known level in ``levels``.

    Returns UNKNOWN when nothing known is present, so an empty or
    all-unknown input is never reported as minimal.
    """
    known = [level for level in levels if level.is_known]
    if not known:
        return RiskLevel.UNKNOWN
    return max(known, key=lambda level: level.rank)


class RiskClassification(BaseModel):
    """A level plus the rationale and next steps that produced it."""
    model_config = ConfigDict(frozen=True)

    level: RiskLevel
    explanation: str
    recommendations: List[str] = Field(default_factory=list)
