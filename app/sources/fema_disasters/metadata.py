"""
OpenFEMA disaster declaration parsing and frequency classification.

Handles:
- County FIPS validation and state name lookup
- Deduplication of per-area declaration rows into unique disasters
- Counts by incident type, most common type, yearly average
- Frequency band classification and narrative
- Florida-specific hazard context
"""
import logging
import re
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from app.core.api_errors import ParseError, ValidationError
from app.core.risk import RiskClassification, RiskLevel

logger = logging.getLogger(__name__)

SOURCE_LABEL = "OpenFEMA Disaster Declarations"
DECLARATIONS_URL = "https://www.fema.gov/disaster/declarations"
DEFAULT_YEARS = 25

FIPS_PATTERN = re.compile(r"^\d{5}$")

FLORIDA_STATE_FIPS = "12"

STATE_FIPS = {
    "01": "Alabama", "02": "Alaska", "04": "Arizona", "05": "Arkansas",
    "06": "California", "08": "Colorado", "09": "Connecticut", "10": "Delaware",
    "11": "District of Columbia", "12": "Florida", "13": "Georgia", "15": "Hawaii",
    "16": "Idaho", "17": "Illinois", "18": "Indiana", "19": "Iowa",
    "20": "Kansas", "21": "Kentucky", "22": "Louisiana", "23": "Maine",
    "24": "Maryland", "25": "Massachusetts", "26": "Michigan", "27": "Minnesota",
    "28": "Mississippi", "29": "Missouri", "30": "Montana", "31": "Nebraska",
    "32": "Nevada", "33": "New Hampshire", "34": "New Jersey", "35": "New Mexico",
    "36": "New York", "37": "North Carolina", "38": "North Dakota", "39": "Ohio",
    "40": "Oklahoma", "41": "Oregon", "42": "Pennsylvania", "44": "Rhode Island",
    "45": "South Carolina", "46": "South Dakota", "47": "Tennessee", "48": "Texas",
    "49": "Utah", "50": "Vermont", "51": "Virginia", "53": "Washington",
    "54": "West Virginia", "55": "Wisconsin", "56": "Wyoming",
    "60": "American Samoa", "66": "Guam", "69": "Northern Mariana Islands",
    "72": "Puerto Rico", "78": "U.S. Virgin Islands",
}

FLORIDA_DISASTER_CONTEXT = {
    "Hurricane": (
        "Florida is one of the most hurricane-prone states. Hurricane season runs June 1 - "
        "November 30. Consider hurricane shutters, impact windows, and wind mitigation features."
    ),
    "Flood": (
        "Florida experiences frequent flooding due to its low elevation, high water table, and "
        "tropical climate. Check flood zone status and consider flood insurance even outside "
        "SFHA zones."
    ),
    "Severe Storm": (
        "Severe thunderstorms are common in Florida, particularly during summer months. "
        "Lightning strikes are a significant hazard."
    ),
    "Tornado": (
        "Florida ranks among the top states for tornadoes. Most occur during summer "
        "thunderstorms and tropical systems."
    ),
    "Fire": (
        "Wildfires can occur in Florida, particularly during dry seasons. Check if the property "
        "is in a wildland-urban interface zone."
    ),
}

# OpenFEMA boolean flag -> program label
ASSISTANCE_PROGRAMS = [
    ("ihProgramDeclared", "Individual & Households"),
    ("iaProgramDeclared", "Individual Assistance"),
    ("paProgramDeclared", "Public Assistance"),
    ("hmProgramDeclared", "Hazard Mitigation"),
]


class DisasterEvent(BaseModel):
    """One unique federally declared disaster."""
    id: Optional[str] = None
    disaster_number: int
    incident_type: str
    title: Optional[str] = None
    state: Optional[str] = None
    declaration_date: Optional[str] = None
    incident_begin_date: Optional[str] = None
    incident_end_date: Optional[str] = None
    designated_area: Optional[str] = None
    assistance_programs: List[str] = Field(default_factory=list)
    fips_code: Optional[str] = None


class DisasterHistory(BaseModel):
    """Declared-disaster history for a county over a lookback window."""
    county: str
    state: str
    fips_code: Optional[str] = None
    disasters: List[DisasterEvent] = Field(default_factory=list)
    total_disasters: int = 0
    disasters_by_type: Dict[str, int] = Field(default_factory=dict)
    last_disaster: Optional[DisasterEvent] = None
    most_common_type: str = "None"
    average_per_year: float = 0.0
    risk_level: RiskLevel
    explanation: str
    recommendations: List[str] = Field(default_factory=list)
    florida_context: Optional[str] = None
    severity_color: str = "gray"
    years_analyzed: int = DEFAULT_YEARS
    source: str = SOURCE_LABEL
    source_url: str = DECLARATIONS_URL
    queried_at: datetime = Field(default_factory=datetime.utcnow)


def split_fips(fips_code: Optional[str]) -> Tuple[str, str]:
    """
    Split a county FIPS code into (state, county) parts.

    Raises:
        ValidationError: If the code is not exactly five digits
    """
    if not fips_code or not FIPS_PATTERN.match(fips_code):
        raise ValidationError(
            message=f"Invalid county FIPS code: {fips_code!r} (expected 5 digits)",
            source="openfema",
            invalid_params={"fips_code": str(fips_code)},
        )
    return fips_code[:2], fips_code[2:]


def state_name_from_fips(state_code: str) -> str:
    return STATE_FIPS.get(state_code, "Unknown")


def parse_declaration(row: Dict[str, Any]) -> DisasterEvent:
    """Convert one DisasterDeclarationsSummaries row to a DisasterEvent."""
    programs = [label for flag, label in ASSISTANCE_PROGRAMS if row.get(flag)]
    state_fips = row.get("fipsStateCode") or ""
    county_fips = row.get("fipsCountyCode") or ""

    return DisasterEvent(
        id=row.get("id"),
        disaster_number=int(row["disasterNumber"]),
        incident_type=row.get("incidentType") or "Other",
        title=row.get("declarationTitle"),
        state=row.get("state"),
        declaration_date=row.get("declarationDate"),
        incident_begin_date=row.get("incidentBeginDate"),
        incident_end_date=row.get("incidentEndDate"),
        designated_area=row.get("designatedArea"),
        assistance_programs=programs,
        fips_code=f"{state_fips}{county_fips}" or None,
    )


def deduplicate_declarations(rows: List[Dict[str, Any]]) -> List[DisasterEvent]:
    """
    Collapse declaration rows to one event per disaster number.

    A single disaster produces a row per designated area and program. Rows
    arrive newest first, so the first row seen for a number is kept.
    """
    unique: Dict[int, DisasterEvent] = {}
    for row in rows:
        if not isinstance(row, dict):
            continue
        number = row.get("disasterNumber")
        if number is None or number in unique:
            continue
        unique[number] = parse_declaration(row)
    return list(unique.values())


def count_by_type(disasters: List[DisasterEvent]) -> Dict[str, int]:
    return dict(Counter(d.incident_type for d in disasters))


def most_common_type(disasters_by_type: Dict[str, int]) -> str:
    if not disasters_by_type:
        return "None"
    # Ties go to the type seen first
    return max(disasters_by_type.items(), key=lambda item: item[1])[0]


def classify_disaster_frequency(
    total: int,
    average_per_year: float,
    common_type: str,
    years: int = DEFAULT_YEARS,
) -> RiskClassification:
    """Band the unrounded yearly average into a risk level with narrative."""
    if total == 0:
        return RiskClassification(
            level=RiskLevel.MINIMAL,
            explanation=(
                f"No federally-declared disasters have been recorded for this county in the past "
                f"{years} years. This indicates relatively low disaster risk, though local "
                f"incidents may occur that don't reach federal declaration thresholds."
            ),
            recommendations=["Maintain standard homeowners coverage and an emergency kit"],
        )

    if average_per_year < 0.5:
        plural = "s" if total > 1 else ""
        return RiskClassification(
            level=RiskLevel.LOW,
            explanation=(
                f"This county has experienced {total} federally-declared disaster{plural} over "
                f"the past {years} years (averaging less than one every two years). The most "
                f"common type is {common_type.lower()}. This represents relatively low historical "
                f"disaster frequency, though preparedness is always recommended."
            ),
            recommendations=["Review the homeowners policy for the most common hazard type"],
        )

    if average_per_year < 1:
        return RiskClassification(
            level=RiskLevel.MODERATE,
            explanation=(
                f"This county averages about {average_per_year:.1f} federally-declared disasters "
                f"per year over the past {years} years. {common_type} events are most common "
                f"({total} total events). This represents moderate disaster risk. Review insurance "
                f"coverage and emergency preparedness plans."
            ),
            recommendations=[
                "Review insurance coverage for the county's most common hazard",
                "Keep an emergency preparedness plan up to date",
            ],
        )

    if average_per_year < 2:
        return RiskClassification(
            level=RiskLevel.ELEVATED,
            explanation=(
                f"This county has significant disaster history with approximately "
                f"{average_per_year:.1f} federally-declared events per year. {common_type} is the "
                f"primary hazard. Consider this in your insurance decisions and budget for "
                f"potential disaster-related expenses. Verify the property has appropriate "
                f"mitigation features."
            ),
            recommendations=[
                "Budget for disaster-related deductibles and repairs",
                "Verify the property has mitigation features for the primary hazard",
                "Compare insurance quotes before committing",
            ],
        )

    return RiskClassification(
        level=RiskLevel.HIGH,
        explanation=(
            f"This county has a high frequency of federally-declared disasters, averaging "
            f"{average_per_year:.1f} events per year over {years} years. {common_type} events are "
            f"most prevalent. This level of exposure warrants careful consideration of insurance "
            f"coverage, property resilience features, and emergency preparedness."
        ),
        recommendations=[
            "Request documentation of any property improvements that provide disaster protection",
            "Get insurance quotes early; coverage may be costly or limited",
            "Have an evacuation and emergency preparedness plan",
        ],
    )


def disaster_severity_color(average_per_year: float) -> str:
    if average_per_year < 0.5:
        return "green"
    if average_per_year < 1:
        return "yellow"
    if average_per_year < 2:
        return "orange"
    return "red"


def build_disaster_history(
    data: Any, fips_code: str, years: int = DEFAULT_YEARS
) -> DisasterHistory:
    """
    Build a DisasterHistory from a DisasterDeclarationsSummaries response.

    Raises:
        ParseError: If the response has no declarations list
    """
    if not isinstance(data, dict):
        raise ParseError("OpenFEMA response is not an object", source="openfema")
    rows = data.get("DisasterDeclarationsSummaries")
    if rows is None:
        rows = []
    if not isinstance(rows, list):
        raise ParseError("DisasterDeclarationsSummaries is not a list", source="openfema")

    state_code, county_code = split_fips(fips_code)
    disasters = deduplicate_declarations(rows)
    by_type = count_by_type(disasters)
    common_type = most_common_type(by_type)
    average = len(disasters) / years if years > 0 else 0.0

    classification = classify_disaster_frequency(len(disasters), average, common_type, years)

    florida_context = None
    if state_code == FLORIDA_STATE_FIPS:
        florida_context = FLORIDA_DISASTER_CONTEXT.get(common_type)

    first = disasters[0] if disasters else None
    county = (first.designated_area if first else None) or f"County {county_code}"

    logger.debug(
        f"Disaster history for {fips_code}: {len(rows)} rows, "
        f"{len(disasters)} unique disasters over {years} years"
    )

    return DisasterHistory(
        county=county,
        state=state_name_from_fips(state_code),
        fips_code=fips_code,
        disasters=disasters,
        total_disasters=len(disasters),
        disasters_by_type=by_type,
        last_disaster=first,
        most_common_type=common_type,
        average_per_year=round(average, 2),
        risk_level=classification.level,
        explanation=classification.explanation,
        recommendations=classification.recommendations,
        florida_context=florida_context,
        severity_color=disaster_severity_color(average),
        years_analyzed=years,
    )


def unavailable_disaster_history(
    reason: str, fips_code: Optional[str] = None, years: int = DEFAULT_YEARS
) -> DisasterHistory:
    """Structurally complete result for when the history could not be retrieved."""
    return DisasterHistory(
        county="Unknown",
        state="Unknown",
        fips_code=fips_code,
        most_common_type="Unknown",
        risk_level=RiskLevel.UNKNOWN,
        explanation=(
            f"{reason} Please check FEMA resources directly at {DECLARATIONS_URL}"
        ),
        years_analyzed=years,
    )
