"""
FEMA NFHL flood zone parsing and risk classification.

Handles:
- Flood zone code lookup (descriptions and risk levels)
- Parsing the point query feature collection
- Special Flood Hazard Area and insurance requirement rules
- Explanation and recommendation text for each zone family
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.api_errors import ParseError
from app.core.risk import RiskClassification, RiskLevel

logger = logging.getLogger(__name__)

SOURCE_LABEL = "FEMA NFHL"
FLOOD_MAP_URL = "https://msc.fema.gov/portal/search"

# NFHL uses -9999 for "no static BFE"
NO_BFE_SENTINEL = -9999.0


@dataclass(frozen=True)
class ZoneInfo:
    description: str
    level: RiskLevel
    coastal: bool = False


FLOOD_ZONE_INFO: Dict[str, ZoneInfo] = {
    "V": ZoneInfo("High-risk coastal flood area with wave action", RiskLevel.VERY_HIGH, coastal=True),
    "VE": ZoneInfo("High-risk coastal area with base flood elevations and wave action", RiskLevel.VERY_HIGH, coastal=True),
    "A": ZoneInfo("High-risk flood area with 1% annual chance of flooding", RiskLevel.HIGH),
    "AE": ZoneInfo("High-risk flood area with base flood elevations determined", RiskLevel.HIGH),
    "AH": ZoneInfo("High-risk shallow flooding area (1-3 feet)", RiskLevel.HIGH),
    "AO": ZoneInfo("High-risk sheet flow flooding area", RiskLevel.HIGH),
    "AR": ZoneInfo("High-risk area temporarily protected by levee", RiskLevel.HIGH),
    "A99": ZoneInfo("High-risk area protected by federal flood control system under construction", RiskLevel.HIGH),
    "B": ZoneInfo("Moderate flood hazard area (0.2% annual chance)", RiskLevel.MODERATE),
    "X500": ZoneInfo("Moderate flood hazard area (0.2% annual chance)", RiskLevel.MODERATE),
    "D": ZoneInfo("Undetermined flood hazard - possible but not analyzed", RiskLevel.LOW),
    "C": ZoneInfo("Minimal flood hazard area", RiskLevel.MINIMAL),
    "X": ZoneInfo("Minimal flood hazard area", RiskLevel.MINIMAL),
}

SHADED_X = ZoneInfo("Moderate flood hazard area (0.2% annual chance)", RiskLevel.MODERATE)

SFHA_ZONES = {"A", "AE", "AH", "AO", "AR", "A99", "V", "VE"}

# ZONE_SUBTY values that turn an X zone into "shaded X"
SHADED_X_MARKERS = ("0.2 PCT", "REDUCED FLOOD RISK DUE TO LEVEE")


class FloodRiskData(BaseModel):
    """Flood zone determination for a single point."""
    flood_zone: str
    zone_subtype: Optional[str] = None
    flood_zone_description: str
    risk_level: RiskLevel
    sfha: bool
    insurance_required: bool
    insurance_recommended: bool
    insurance_reason: str
    base_flood_elevation_ft: Optional[float] = None
    panel_number: Optional[str] = None
    effective_date: Optional[str] = None
    explanation: str
    recommendations: List[str] = Field(default_factory=list)
    source: str = SOURCE_LABEL
    source_url: str = FLOOD_MAP_URL
    queried_at: datetime = Field(default_factory=datetime.utcnow)


def normalize_zone(zone_code: Optional[str]) -> str:
    return (zone_code or "").strip().upper().replace(" ", "")


def is_shaded_x(zone_code: str, zone_subtype: Optional[str]) -> bool:
    if zone_code != "X" or not zone_subtype:
        return False
    subtype = zone_subtype.upper()
    return any(marker in subtype for marker in SHADED_X_MARKERS)


def lookup_zone(zone_code: str, zone_subtype: Optional[str] = None) -> Optional[ZoneInfo]:
    """Zone info for a normalized code, or None if the code is not recognized."""
    if is_shaded_x(zone_code, zone_subtype):
        return SHADED_X
    return FLOOD_ZONE_INFO.get(zone_code)


def parse_static_bfe(value: Any) -> Optional[float]:
    """Static BFE in feet, or None when absent or the -9999 sentinel."""
    if value is None or value == "":
        return None
    try:
        bfe = float(value)
    except (TypeError, ValueError):
        return None
    if bfe <= NO_BFE_SENTINEL or bfe <= 0:
        return None
    return bfe


def is_special_flood_hazard_area(zone_code: str, sfha_flag: Optional[str] = None) -> bool:
    """SFHA_TF == 'T' or any A/V family zone."""
    if (sfha_flag or "").strip().upper() == "T":
        return True
    return zone_code in SFHA_ZONES


def classify_flood_zone(
    zone_code: str,
    zone_subtype: Optional[str] = None,
    sfha: bool = False,
    base_flood_elevation: Optional[float] = None,
) -> RiskClassification:
    """
    Map a flood zone to a risk level, explanation and next steps.

    The zone family decides the level; the BFE and SFHA flag shape the
    wording and recommendations.
    """
    info = lookup_zone(zone_code, zone_subtype)

    if info is None:
        return RiskClassification(
            level=RiskLevel.UNKNOWN,
            explanation=(
                f"FEMA reports flood zone '{zone_code or 'blank'}', which is not a recognized "
                f"zone designation. The flood risk for this property could not be classified. "
                f"Look the address up on the FEMA Flood Map Service Center before relying on it."
            ),
            recommendations=[
                "Look up the official flood map panel at the FEMA Flood Map Service Center",
                "Ask the local floodplain administrator for a zone determination",
            ],
        )

    bfe_sentence = ""
    if base_flood_elevation is not None:
        bfe_sentence = (
            f" FEMA has computed a base flood elevation of {base_flood_elevation:g} ft for this area."
        )

    if info.level == RiskLevel.VERY_HIGH:
        recommendations = [
            "Request an elevation certificate from the seller or a licensed surveyor",
            "Get flood insurance quotes (NFIP and private) before making an offer",
            "Confirm the structure meets coastal (V-zone) construction standards",
            "Ask about prior flood and storm-surge claims and repairs",
        ]
        if base_flood_elevation is not None:
            recommendations.insert(
                1,
                f"Compare the lowest floor elevation against the {base_flood_elevation:g} ft base flood elevation",
            )
        return RiskClassification(
            level=info.level,
            explanation=(
                f"This property is in Zone {zone_code}, a coastal high-hazard area with a 1% "
                f"annual chance of flooding and additional hazard from storm-driven waves."
                f"{bfe_sentence} It is a Special Flood Hazard Area, so flood insurance is "
                f"required for federally backed mortgages and premiums are typically the highest "
                f"of any zone."
            ),
            recommendations=recommendations,
        )

    if info.level == RiskLevel.HIGH:
        recommendations = [
            "Request an elevation certificate from the seller or a licensed surveyor",
            "Get flood insurance quotes (NFIP and private) before making an offer",
            "Ask about prior flood claims and repairs",
        ]
        if base_flood_elevation is not None:
            recommendations.insert(
                1,
                f"Compare the lowest floor elevation against the {base_flood_elevation:g} ft base flood elevation",
            )
        elif zone_code == "A":
            recommendations.append(
                "Ask the local floodplain administrator for a base flood elevation determination"
            )
        return RiskClassification(
            level=info.level,
            explanation=(
                f"This property is in Zone {zone_code}: {info.description.lower()}."
                f"{bfe_sentence} It is a Special Flood Hazard Area, meaning there is at least a "
                f"26% chance of flooding over a 30-year mortgage. Flood insurance is required for "
                f"federally backed mortgages."
            ),
            recommendations=recommendations,
        )

    if info.level == RiskLevel.MODERATE:
        return RiskClassification(
            level=info.level,
            explanation=(
                f"This property is in a moderate flood hazard area (Zone {zone_code}"
                f"{' shaded' if zone_code == 'X' else ''}), between the limits of the 1% and 0.2% "
                f"annual chance floods. Flood insurance is not required but is recommended; more "
                f"than 20% of flood claims come from outside high-risk zones."
            ),
            recommendations=[
                "Consider a flood insurance policy; premiums are typically low outside the SFHA",
                "Check drainage and grading around the foundation",
            ],
        )

    if info.level == RiskLevel.LOW:
        return RiskClassification(
            level=info.level,
            explanation=(
                f"This property is in Zone {zone_code}. Flood hazard is possible here but has not "
                f"been analyzed by FEMA, so the true risk is undetermined rather than known to be low."
            ),
            recommendations=[
                "Ask the local floodplain manager about known flooding in the area",
                "Consider flood insurance given the undetermined hazard",
            ],
        )

    return RiskClassification(
        level=info.level,
        explanation=(
            f"This property is in Zone {zone_code}, an area of minimal flood hazard outside the "
            f"0.2% annual chance floodplain. Flood insurance is optional and usually available at "
            f"lower rates."
        ),
        recommendations=[
            "Flood insurance is optional but inexpensive in minimal-risk zones",
            "Standard property due diligence is sufficient for flood risk",
        ],
    )


def flood_insurance_requirement(sfha: bool, level: RiskLevel) -> Dict[str, Any]:
    """Whether flood insurance is required or recommended, and why."""
    if sfha:
        return {
            "required": True,
            "recommended": True,
            "reason": (
                "Property is in a Special Flood Hazard Area (SFHA). Flood insurance is required "
                "for federally-backed mortgages."
            ),
        }

    if not level.is_known:
        return {
            "required": False,
            "recommended": True,
            "reason": (
                "Flood zone could not be determined. Verify the zone on the FEMA flood map before "
                "treating flood insurance as optional."
            ),
        }

    if level.at_least(RiskLevel.MODERATE):
        return {
            "required": False,
            "recommended": True,
            "reason": (
                "Property is in a moderate-risk flood zone. Flood insurance is recommended but not "
                "required."
            ),
        }

    return {
        "required": False,
        "recommended": False,
        "reason": (
            "Property is in a low-risk flood zone. Flood insurance is optional but may be "
            "available at lower rates."
        ),
    }


def build_flood_risk(data: Any) -> FloodRiskData:
    """
    Build a FloodRiskData from an NFHL layer query response.

    Raises:
        ParseError: If the response is not a feature collection
    """
    if not isinstance(data, dict) or not isinstance(data.get("features"), list):
        raise ParseError("NFHL response has no features list", source="fema_nfhl")

    features = data["features"]
    if not features:
        return FloodRiskData(
            flood_zone="X",
            flood_zone_description="Area not mapped or minimal flood hazard",
            risk_level=RiskLevel.MINIMAL,
            sfha=False,
            insurance_required=False,
            insurance_recommended=False,
            insurance_reason=flood_insurance_requirement(False, RiskLevel.MINIMAL)["reason"],
            explanation=(
                "No flood hazard polygon was found at this point. The area is either unmapped or "
                "outside any mapped floodplain."
            ),
            recommendations=[
                "Flood insurance is optional but inexpensive in minimal-risk zones",
            ],
        )

    attributes = features[0].get("attributes") if isinstance(features[0], dict) else None
    if not isinstance(attributes, dict):
        raise ParseError("NFHL feature has no attributes", source="fema_nfhl")

    zone_code = normalize_zone(attributes.get("FLD_ZONE"))
    zone_subtype = attributes.get("ZONE_SUBTY") or None
    bfe = parse_static_bfe(attributes.get("STATIC_BFE"))
    sfha = is_special_flood_hazard_area(zone_code, attributes.get("SFHA_TF"))

    classification = classify_flood_zone(zone_code, zone_subtype, sfha, bfe)
    insurance = flood_insurance_requirement(sfha, classification.level)
    info = lookup_zone(zone_code, zone_subtype)

    effective_date = attributes.get("EFF_DATE")
    return FloodRiskData(
        flood_zone=zone_code or "Unknown",
        zone_subtype=zone_subtype,
        flood_zone_description=info.description if info else f"Unrecognized flood zone {zone_code}",
        risk_level=classification.level,
        sfha=sfha,
        insurance_required=insurance["required"],
        insurance_recommended=insurance["recommended"],
        insurance_reason=insurance["reason"],
        base_flood_elevation_ft=bfe,
        panel_number=attributes.get("FIRM_PAN"),
        effective_date=str(effective_date) if effective_date is not None else None,
        explanation=classification.explanation,
        recommendations=classification.recommendations,
    )


def unavailable_flood_risk(reason: str) -> FloodRiskData:
    """Structurally complete result for when the zone could not be retrieved."""
    insurance = flood_insurance_requirement(False, RiskLevel.UNKNOWN)
    return FloodRiskData(
        flood_zone="Unknown",
        flood_zone_description="Flood zone data unavailable for this location",
        risk_level=RiskLevel.UNKNOWN,
        sfha=False,
        insurance_required=False,
        insurance_recommended=insurance["recommended"],
        insurance_reason=insurance["reason"],
        explanation=(
            f"{reason} Check the FEMA Flood Map Service Center directly at {FLOOD_MAP_URL}"
        ),
        recommendations=["Look up the flood zone at the FEMA Flood Map Service Center"],
    )
