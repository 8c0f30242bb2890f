"""
Walk Score response parsing, score descriptions and grades.
"""
import logging
from datetime import datetime
from typing import Any, Optional
from urllib.parse import quote

from pydantic import BaseModel, Field

from app.core.api_errors import ParseError

logger = logging.getLogger(__name__)

SOURCE_LABEL = "Walk Score"
WALKSCORE_URL = "https://www.walkscore.com/"
DEFAULT_LOGO_URL = "https://cdn.walk.sc/images/api-logo.png"
DEFAULT_HELP_URL = "https://www.walkscore.com/how-it-works/"


class WalkScoreData(BaseModel):
    """Walk, transit and bike scores for a point (0-100, None if not offered)."""
    available: bool = True
    walk_score: Optional[int] = None
    walk_description: str
    walk_grade: str = "N/A"
    transit_score: Optional[int] = None
    transit_description: str
    bike_score: Optional[int] = None
    bike_description: str
    logo_url: str = DEFAULT_LOGO_URL
    more_info_url: Optional[str] = None
    help_url: str = DEFAULT_HELP_URL
    ws_link: Optional[str] = None
    snapped_lat: Optional[float] = None
    snapped_lng: Optional[float] = None
    explanation: Optional[str] = None
    source: str = SOURCE_LABEL
    source_url: str = WALKSCORE_URL
    queried_at: datetime = Field(default_factory=datetime.utcnow)


def walk_description(score: Optional[int]) -> str:
    if score is None:
        return "Score unavailable"
    if score >= 90:
        return "Walker's Paradise - Daily errands do not require a car"
    if score >= 70:
        return "Very Walkable - Most errands can be accomplished on foot"
    if score >= 50:
        return "Somewhat Walkable - Some errands can be accomplished on foot"
    if score >= 25:
        return "Car-Dependent - Most errands require a car"
    return "Almost All Errands Require a Car"


def transit_description(score: Optional[int]) -> str:
    if score is None:
        return "Transit data unavailable"
    if score >= 90:
        return "Rider's Paradise - World-class public transportation"
    if score >= 70:
        return "Excellent Transit - Many nearby public transportation options"
    if score >= 50:
        return "Good Transit - Many nearby public transportation options"
    if score >= 25:
        return "Some Transit - A few public transportation options"
    return "Minimal Transit - Few public transportation options"


def bike_description(score: Optional[int]) -> str:
    if score is None:
        return "Bike data unavailable"
    if score >= 90:
        return "Biker's Paradise - Daily errands can be accomplished on a bike"
    if score >= 70:
        return "Very Bikeable - Biking is convenient for most trips"
    if score >= 50:
        return "Bikeable - Some bike infrastructure"
    return "Somewhat Bikeable - Minimal bike infrastructure"


def score_grade(score: Optional[int]) -> str:
    """Letter grade for a 0-100 score."""
    if score is None:
        return "N/A"
    if score >= 90:
        return "A+"
    if score >= 80:
        return "A"
    if score >= 70:
        return "B"
    if score >= 60:
        return "C"
    if score >= 50:
        return "D"
    return "F"


def _score(value: Any) -> Optional[int]:
    if value is None:
        return None
    return int(value)


def build_walkscore_data(
    data: Any, lat: float, lng: float, address: Optional[str] = None
) -> WalkScoreData:
    """
    Build WalkScoreData from a successful (status 1) score response.

    Provider descriptions are kept when present, otherwise derived from
    the score band.

    Raises:
        ParseError: If the response is not an object
    """
    if not isinstance(data, dict):
        raise ParseError("Walk Score response is not an object", source="walkscore")

    transit = data.get("transit")
    if not isinstance(transit, dict):
        transit = {}
    bike = data.get("bike")
    if not isinstance(bike, dict):
        bike = {}

    walk = _score(data.get("walkscore"))
    transit_score = _score(transit.get("score"))
    bike_score = _score(bike.get("score"))

    more_info = data.get("more_info_link") or (
        f"https://www.walkscore.com/score/{quote(address or f'{lat},{lng}')}"
    )

    return WalkScoreData(
        walk_score=walk,
        walk_description=data.get("description") or walk_description(walk),
        walk_grade=score_grade(walk),
        transit_score=transit_score,
        transit_description=transit.get("description") or transit_description(transit_score),
        bike_score=bike_score,
        bike_description=bike.get("description") or bike_description(bike_score),
        logo_url=data.get("logo_url") or DEFAULT_LOGO_URL,
        more_info_url=more_info,
        help_url=data.get("help_link") or DEFAULT_HELP_URL,
        ws_link=data.get("ws_link"),
        snapped_lat=data.get("snapped_lat") or lat,
        snapped_lng=data.get("snapped_lon") or lng,
    )


def unavailable_walkscore_data(reason: str) -> WalkScoreData:
    """Structurally complete result when scores could not be retrieved."""
    return WalkScoreData(
        available=False,
        walk_description=walk_description(None),
        transit_description=transit_description(None),
        bike_description=bike_description(None),
        explanation=f"{reason} Look the address up at {WALKSCORE_URL}",
    )
