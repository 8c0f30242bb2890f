"""
EPA Envirofacts facility parsing and proximity risk assessment.

Handles:
- Row parsing for Superfund, TRI and RCRA tables (field names may come
  back upper- or lower-case)
- Distance from the query point, radius filter, nearest-first ordering
- Overall environmental risk level and narrative
- Closest concern across all facility classes
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.geo import distance_miles, nearest
from app.core.risk import RiskClassification, RiskLevel, max_level

logger = logging.getLogger(__name__)

SOURCE_LABEL = "EPA Envirofacts"
ENVIROFACTS_URL = "https://www.epa.gov/enviro/"
DEFAULT_RADIUS_MILES = 3.0
MAX_SITES_PER_CLASS = 10


class SiteType(str, Enum):
    SUPERFUND = "Superfund"
    TRI = "TRI"
    RCRA = "RCRA"


# Per-class default concern level
SITE_RISK = {
    SiteType.SUPERFUND: RiskLevel.HIGH,
    SiteType.TRI: RiskLevel.MODERATE,
    SiteType.RCRA: RiskLevel.MODERATE,
}

# Highest level each table can produce on its own
TABLE_CEILING = {
    SiteType.SUPERFUND: RiskLevel.HIGH,
    SiteType.TRI: RiskLevel.ELEVATED,
    SiteType.RCRA: RiskLevel.MODERATE,
}

TABLE_LABELS = {
    SiteType.SUPERFUND: "Superfund sites",
    SiteType.TRI: "Toxic Release Inventory facilities",
    SiteType.RCRA: "RCRA hazardous waste handlers",
}


class EnvironmentalSite(BaseModel):
    """A tracked facility near the query point."""
    name: str
    site_type: SiteType
    distance_miles: float
    status: str
    latitude: float
    longitude: float
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    epa_id: Optional[str] = None
    risk_level: RiskLevel


class EnvironmentalData(BaseModel):
    """Facilities near a point and the resulting environmental risk."""
    superfund_sites: List[EnvironmentalSite] = Field(default_factory=list)
    toxic_release_facilities: List[EnvironmentalSite] = Field(default_factory=list)
    hazardous_waste_sites: List[EnvironmentalSite] = Field(default_factory=list)
    superfund_count: int = 0
    tri_count: int = 0
    rcra_count: int = 0
    total_facilities_nearby: int = 0
    closest_concern: Optional[EnvironmentalSite] = None
    risk_level: RiskLevel
    risk_color: str = "gray"
    explanation: str
    recommendations: List[str] = Field(default_factory=list)
    unavailable_tables: List[SiteType] = Field(default_factory=list)
    search_radius_miles: float = DEFAULT_RADIUS_MILES
    source: str = SOURCE_LABEL
    source_url: str = ENVIROFACTS_URL
    queried_at: datetime = Field(default_factory=datetime.utcnow)


def _field(record: Dict[str, Any], name: str) -> Any:
    # Envirofacts has returned both casings over time
    value = record.get(name.lower())
    if value is None:
        value = record.get(name.upper())
    return value


def _parse_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def _coordinates(record: Dict[str, Any]) -> Optional[tuple]:
    lat = _parse_float(_field(record, "latitude"))
    lng = _parse_float(_field(record, "longitude"))
    # 0/0 means "not geocoded" in these tables
    if lat is None or lng is None or (lat == 0 and lng == 0):
        return None
    return lat, lng


def parse_site(
    record: Dict[str, Any], site_type: SiteType, origin_lat: float, origin_lng: float
) -> Optional[EnvironmentalSite]:
    """Build a site from a table row, or None when it has no usable coordinates."""
    coords = _coordinates(record)
    if coords is None:
        return None
    lat, lng = coords

    if site_type == SiteType.SUPERFUND:
        name = _field(record, "site_name") or "Unknown Superfund Site"
        status = _field(record, "npl_status") or _field(record, "site_status") or "Unknown"
        address = _field(record, "address")
        city = _field(record, "city")
        state = _field(record, "state")
        epa_id = _field(record, "epa_id")
    elif site_type == SiteType.TRI:
        name = _field(record, "facility_name") or "Unknown TRI Facility"
        status = "Active TRI Reporter"
        address = _field(record, "street_address")
        city = _field(record, "city_name")
        state = _field(record, "state_abbr")
        epa_id = _field(record, "tri_facility_id")
    else:
        name = _field(record, "handler_name") or "Unknown RCRA Handler"
        status = _field(record, "activity_desc") or "Hazardous Waste Handler"
        address = _field(record, "location_street")
        city = _field(record, "location_city")
        state = _field(record, "location_state")
        epa_id = _field(record, "handler_id")

    return EnvironmentalSite(
        name=str(name),
        site_type=site_type,
        distance_miles=distance_miles(origin_lat, origin_lng, lat, lng),
        status=str(status),
        latitude=lat,
        longitude=lng,
        address=address,
        city=city,
        state=state,
        epa_id=str(epa_id).strip() if epa_id else None,
        risk_level=SITE_RISK[site_type],
    )


def sites_within_radius(
    records: List[Dict[str, Any]],
    site_type: SiteType,
    lat: float,
    lng: float,
    radius_miles: float,
) -> List[EnvironmentalSite]:
    """Parse rows, drop those outside the radius, nearest first (not truncated)."""
    sites = []
    for record in records:
        if not isinstance(record, dict):
            continue
        site = parse_site(record, site_type, lat, lng)
        if site is not None:
            sites.append(site)
    return nearest(sites, lambda s: s.distance_miles, max_distance=radius_miles)


def closest_concern(*site_lists: List[EnvironmentalSite]) -> Optional[EnvironmentalSite]:
    """Minimum-distance site across all lists."""
    candidates = nearest(
        [site for sites in site_lists for site in sites], lambda s: s.distance_miles, limit=1
    )
    return candidates[0] if candidates else None


def classify_environmental_risk(
    superfund: List[EnvironmentalSite],
    tri: List[EnvironmentalSite],
    rcra: List[EnvironmentalSite],
) -> RiskClassification:
    """
    Rate environmental risk from facility proximity.

    Lists must already be limited to the search radius.
    """
    very_near_superfund = [s for s in superfund if s.distance_miles < 0.5]
    near_superfund = [s for s in superfund if s.distance_miles < 1]
    near_tri = [s for s in tri if s.distance_miles < 1]

    if very_near_superfund:
        return RiskClassification(
            level=RiskLevel.HIGH,
            explanation=(
                f"A Superfund site ({very_near_superfund[0].name}) is located within 0.5 miles of "
                f"this property. Superfund sites are areas where hazardous waste contamination "
                f"requires long-term cleanup. This proximity may affect property values, require "
                f"environmental disclosure, and could pose health considerations."
            ),
            recommendations=[
                "Request a Phase I Environmental Site Assessment before purchase",
                "Review the EPA Superfund site profile for contamination details",
                "Consult with an environmental attorney",
                "Verify the property itself is not part of the contamination zone",
                "Check if the property relies on well water",
            ],
        )

    if near_superfund or len(near_tri) >= 3:
        findings = []
        if near_superfund:
            findings.append(f"{len(near_superfund)} Superfund site(s) within 1 mile")
        if near_tri:
            findings.append(f"{len(near_tri)} Toxic Release Inventory facilities within 1 mile")
        return RiskClassification(
            level=RiskLevel.ELEVATED,
            explanation=(
                f"This area has notable environmental considerations: {' and '.join(findings)}. "
                f"While not necessarily affecting the property directly, these warrant review."
            ),
            recommendations=[
                "Review EPA detailed reports for each identified facility",
                "Consider a Phase I Environmental Assessment if concerned",
                "Check local water quality reports",
                "Inquire about any environmental issues disclosed for the property",
            ],
        )

    # Counts cover every site in the radius, not only the ten listed, so the
    # RCRA rule can fire here where it never could on a truncated list.
    if superfund or len(tri) > 5 or len(rcra) > 10:
        return RiskClassification(
            level=RiskLevel.MODERATE,
            explanation=(
                f"There are some environmental facilities within the search area, but none in "
                f"immediate proximity to the property. {len(superfund)} Superfund site(s), "
                f"{len(tri)} TRI facilities, and {len(rcra)} hazardous waste handlers were "
                f"identified within the search radius."
            ),
            recommendations=[
                "Review EPA facility details for any of concern",
                "Standard due diligence should be sufficient for most transactions",
                "Ask the seller about any known environmental issues",
            ],
        )

    if superfund or tri or rcra:
        detail = "Only minor facilities identified at safe distances."
    else:
        detail = "No EPA-tracked facilities found nearby."
    return RiskClassification(
        level=RiskLevel.LOW,
        explanation=(
            f"No significant environmental concerns were identified within the search area. {detail}"
        ),
        recommendations=[
            "Standard property due diligence recommended",
            "No specific environmental concerns identified",
        ],
    )


def environmental_risk_color(level: RiskLevel) -> str:
    return {
        RiskLevel.LOW: "green",
        RiskLevel.MODERATE: "yellow",
        RiskLevel.ELEVATED: "orange",
        RiskLevel.HIGH: "red",
    }.get(level, "gray")


def assess_with_missing_tables(
    classification: RiskClassification, unavailable: List[SiteType]
) -> RiskClassification:
    """
    Downgrade to unknown when a missing table could have raised the level.

    Elevated or high findings from the tables that did load stand on their
    own. A lower level is kept only if no missing table could exceed it.
    """
    if not unavailable or classification.level.at_least(RiskLevel.ELEVATED):
        return classification

    ceiling = max_level(TABLE_CEILING[t] for t in unavailable)
    if classification.level.at_least(ceiling):
        return classification

    return RiskClassification(
        level=RiskLevel.UNKNOWN,
        explanation=(
            "Environmental risk could not be fully assessed for this location. No elevated "
            "concerns were found in the EPA tables that could be retrieved."
        ),
        recommendations=[
            f"Check EPA Envirofacts directly at {ENVIROFACTS_URL} before relying on this result",
            "Consider a Phase I Environmental Assessment if concerned",
        ],
    )


def build_environmental_data(
    lat: float,
    lng: float,
    rows_by_type: Dict[SiteType, Optional[List[Dict[str, Any]]]],
    radius_miles: float = DEFAULT_RADIUS_MILES,
) -> EnvironmentalData:
    """
    Combine per-table rows into EnvironmentalData.

    A table mapped to None could not be retrieved; it is listed in
    ``unavailable_tables`` and the explanation says the assessment is
    incomplete. Classification uses every site in the radius, the
    returned lists keep only the nearest ten per class.
    """
    unavailable = [site_type for site_type in SiteType if rows_by_type.get(site_type) is None]

    in_radius = {
        site_type: sites_within_radius(rows_by_type.get(site_type) or [], site_type, lat, lng, radius_miles)
        for site_type in SiteType
    }
    superfund = in_radius[SiteType.SUPERFUND]
    tri = in_radius[SiteType.TRI]
    rcra = in_radius[SiteType.RCRA]

    classification = assess_with_missing_tables(
        classify_environmental_risk(superfund, tri, rcra), unavailable
    )
    explanation = classification.explanation
    if unavailable:
        missing = ", ".join(TABLE_LABELS[t] for t in unavailable)
        explanation = (
            f"{explanation} This assessment is incomplete: {missing} could not be retrieved."
        )

    return EnvironmentalData(
        superfund_sites=superfund[:MAX_SITES_PER_CLASS],
        toxic_release_facilities=tri[:MAX_SITES_PER_CLASS],
        hazardous_waste_sites=rcra[:MAX_SITES_PER_CLASS],
        superfund_count=len(superfund),
        tri_count=len(tri),
        rcra_count=len(rcra),
        total_facilities_nearby=len(superfund) + len(tri) + len(rcra),
        closest_concern=closest_concern(superfund, tri, rcra),
        risk_level=classification.level,
        risk_color=environmental_risk_color(classification.level),
        explanation=explanation,
        recommendations=classification.recommendations,
        unavailable_tables=unavailable,
        search_radius_miles=radius_miles,
    )


def unavailable_environmental_data(
    reason: str, radius_miles: float = DEFAULT_RADIUS_MILES
) -> EnvironmentalData:
    """Structurally complete result for when no table could be retrieved."""
    return EnvironmentalData(
        risk_level=RiskLevel.UNKNOWN,
        explanation=(
            f"{reason} We recommend checking EPA resources directly at {ENVIROFACTS_URL}"
        ),
        recommendations=["Check EPA Envirofacts directly for environmental information"],
        unavailable_tables=list(SiteType),
        search_radius_miles=radius_miles,
    )
