"""
Property Intelligence - Property Score.

Rolls the hazard sources of a composite into a 0-100 score with a letter
grade. Starts at 100 and deducts per factor; only available sources
contribute, unavailable ones are listed as not assessed.
"""
import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from app.core.risk import RiskLevel
from app.intelligence.types import IntelligenceComposite, IntelligenceSource, SourceStatus

logger = logging.getLogger(__name__)

MAX_SCORE = 100

FLOOD_SFHA_DEDUCTION = 20
FLOOD_MODERATE_DEDUCTION = 5

DISASTER_DEDUCTIONS = [  # (min average per year, deduction), highest first
    (2.0, 15),
    (1.0, 10),
    (0.5, 5),
]

ENVIRONMENT_DEDUCTIONS = {
    RiskLevel.HIGH: 20,
    RiskLevel.ELEVATED: 10,
    RiskLevel.MODERATE: 3,
}

SEISMIC_DEDUCTIONS = {
    RiskLevel.HIGH: 15,
    RiskLevel.MODERATE: 8,
    RiskLevel.LOW: 2,
}

GRADES = [  # (min score, grade, summary), highest first
    (90, "A", "Excellent location profile with minimal identified risks. Standard due diligence recommended."),
    (80, "B", "Good location with minor considerations. Review the identified factors before proceeding."),
    (70, "C", "Acceptable location with notable factors requiring attention. Careful evaluation recommended."),
    (60, "D", "Location has significant risk factors. Thorough investigation and professional consultation advised."),
    (0, "F", "Multiple serious risk factors identified. Proceed with extreme caution and professional guidance."),
]

SCORED_SOURCES = {
    IntelligenceSource.FLOOD: "Flood Zone",
    IntelligenceSource.DISASTERS: "Disaster History",
    IntelligenceSource.ENVIRONMENT: "Environmental",
    IntelligenceSource.EARTHQUAKES: "Seismic Activity",
}


class ScoreFactor(BaseModel):
    name: str
    impact: int
    reason: str
    assessed: bool = True


class PropertyScore(BaseModel):
    score: int
    grade: str
    summary: str
    factors: List[ScoreFactor] = Field(default_factory=list)


def grade_for(score: int):
    """(grade, summary) for a clamped score."""
    for minimum, grade, summary in GRADES:
        if score >= minimum:
            return grade, summary
    return GRADES[-1][1], GRADES[-1][2]


def _flood_factor(flood) -> Optional[ScoreFactor]:
    if flood.sfha:
        return ScoreFactor(
            name="Flood Zone",
            impact=-FLOOD_SFHA_DEDUCTION,
            reason=(
                f"Property in Zone {flood.flood_zone} - Special Flood Hazard Area "
                f"(flood insurance required)"
            ),
        )
    if flood.risk_level == RiskLevel.MODERATE:
        return ScoreFactor(
            name="Flood Zone",
            impact=-FLOOD_MODERATE_DEDUCTION,
            reason="Moderate flood risk zone (500-year floodplain)",
        )
    if flood.risk_level == RiskLevel.MINIMAL:
        return ScoreFactor(
            name="Flood Zone",
            impact=0,
            reason=f"Zone {flood.flood_zone} - Minimal flood risk",
        )
    return None


def _disaster_factor(disasters) -> Optional[ScoreFactor]:
    average = disasters.average_per_year
    for minimum, deduction in DISASTER_DEDUCTIONS:
        if average >= minimum:
            if minimum >= 2.0:
                reason = f"High disaster frequency ({average:.1f} events/year avg)"
            elif minimum >= 1.0:
                reason = f"Moderate disaster history ({average:.1f} events/year)"
            else:
                reason = (
                    f"Some disaster history ({disasters.total_disasters} events in "
                    f"{disasters.years_analyzed} years)"
                )
            return ScoreFactor(name="Disaster History", impact=-deduction, reason=reason)
    return None


def _environment_factor(environment) -> Optional[ScoreFactor]:
    deduction = ENVIRONMENT_DEDUCTIONS.get(environment.risk_level)
    if deduction is None:
        return None
    reasons = {
        RiskLevel.HIGH: "Superfund site within 0.5 miles - significant environmental concern",
        RiskLevel.ELEVATED: "Environmental facilities nearby warrant review",
        RiskLevel.MODERATE: "Some environmental facilities in area (at safe distances)",
    }
    return ScoreFactor(
        name="Environmental", impact=-deduction, reason=reasons[environment.risk_level]
    )


def _seismic_factor(earthquakes) -> Optional[ScoreFactor]:
    deduction = SEISMIC_DEDUCTIONS.get(earthquakes.risk_level)
    if deduction is None:
        return None
    reasons = {
        RiskLevel.HIGH: (
            f"History of M5.0+ earthquakes - {earthquakes.major_events} major events recorded"
        ),
        RiskLevel.MODERATE: "Moderate seismic activity history",
        RiskLevel.LOW: "Low seismic activity - minor risk",
    }
    return ScoreFactor(
        name="Seismic Activity", impact=-deduction, reason=reasons[earthquakes.risk_level]
    )


def _environment_coverage_factor(environment) -> Optional[ScoreFactor]:
    if not environment.unavailable_tables:
        return None
    missing = ", ".join(t.value for t in environment.unavailable_tables)
    return ScoreFactor(
        name="Environmental",
        impact=0,
        reason=f"Partially assessed - {missing} data unavailable",
        assessed=False,
    )


FACTOR_BUILDERS = {
    IntelligenceSource.FLOOD: _flood_factor,
    IntelligenceSource.DISASTERS: _disaster_factor,
    IntelligenceSource.ENVIRONMENT: _environment_factor,
    IntelligenceSource.EARTHQUAKES: _seismic_factor,
}

# Extra factors noting gaps inside an otherwise available source
COVERAGE_BUILDERS = {
    IntelligenceSource.ENVIRONMENT: _environment_coverage_factor,
}


def calculate_property_score(composite: IntelligenceComposite) -> PropertyScore:
    """Score a composite. Deterministic for a given set of results."""
    score = MAX_SCORE
    factors: List[ScoreFactor] = []

    for source, build in FACTOR_BUILDERS.items():
        status = composite.status_of(source)
        if status is None or status == SourceStatus.SKIPPED:
            continue
        if status == SourceStatus.UNAVAILABLE:
            factors.append(
                ScoreFactor(
                    name=SCORED_SOURCES[source],
                    impact=0,
                    reason="Not assessed - data unavailable",
                    assessed=False,
                )
            )
            continue

        data = composite.data_of(source)
        factor = build(data)
        if factor is not None:
            score += factor.impact
            factors.append(factor)

        coverage = COVERAGE_BUILDERS.get(source)
        if coverage is not None:
            gap = coverage(data)
            if gap is not None:
                factors.append(gap)

    weather = composite.data_of(IntelligenceSource.WEATHER)
    if weather is not None and weather.has_severe_alerts:
        factors.append(
            ScoreFactor(
                name="Active Alerts",
                impact=0,
                reason=f"{len(weather.alerts)} active weather alert(s) - review before visiting",
            )
        )

    score = max(0, min(MAX_SCORE, score))
    grade, summary = grade_for(score)
    return PropertyScore(score=score, grade=grade, summary=summary, factors=factors)
