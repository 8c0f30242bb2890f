"""
Unit tests for the Walk Score client and response parsing.
"""
import pytest

from app.core.api_errors import AuthenticationError, FatalError
from app.sources.walkscore.client import WalkScoreClient
from app.sources.walkscore.metadata import (
    bike_description,
    build_walkscore_data,
    score_grade,
    transit_description,
    unavailable_walkscore_data,
    walk_description,
)

SCORE_RESPONSE = {
    "status": 1,
    "walkscore": 82,
    "description": "Very Walkable",
    "updated": "2024-03-01 12:00:00.000000",
    "logo_url": "https://cdn.walk.sc/images/api-logo.png",
    "more_info_link": "https://www.redfin.com/how-walk-score-works",
    "ws_link": "https://www.walkscore.com/score/loc/lat=27.95/lng=-82.46",
    "help_link": "https://www.redfin.com/how-walk-score-works",
    "snapped_lat": 27.9505,
    "snapped_lon": -82.4575,
    "transit": {"score": 41, "description": "Some Transit", "summary": "12 nearby routes"},
    "bike": {"score": 65, "description": "Bikeable"},
}


@pytest.mark.unit
class TestDescriptions:

    @pytest.mark.parametrize(
        "score,prefix",
        [(95, "Walker's Paradise"), (70, "Very Walkable"), (55, "Somewhat Walkable"),
         (30, "Car-Dependent"), (10, "Almost All Errands")],
    )
    def test_walk(self, score, prefix):
        assert walk_description(score).startswith(prefix)

    def test_transit_and_bike(self):
        assert transit_description(92).startswith("Rider's Paradise")
        assert transit_description(None) == "Transit data unavailable"
        assert bike_description(49).startswith("Somewhat Bikeable")

    def test_grades(self):
        assert score_grade(90) == "A+"
        assert score_grade(82) == "A"
        assert score_grade(49) == "F"
        assert score_grade(None) == "N/A"


@pytest.mark.unit
class TestBuildWalkScoreData:

    def test_full_response(self):
        data = build_walkscore_data(SCORE_RESPONSE, 27.95, -82.46)
        assert data.available is True
        assert data.walk_score == 82
        assert data.walk_description == "Very Walkable"
        assert data.walk_grade == "A"
        assert data.transit_score == 41
        assert data.bike_score == 65
        assert data.snapped_lng == -82.4575

    def test_missing_transit_and_bike(self):
        data = build_walkscore_data({"status": 1, "walkscore": 20}, 27.95, -82.46, "1 Main St")
        assert data.transit_score is None
        assert data.transit_description == "Transit data unavailable"
        assert data.bike_score is None
        assert data.walk_description == "Almost All Errands Require a Car"
        assert data.more_info_url == "https://www.walkscore.com/score/1%20Main%20St"

    def test_unavailable(self):
        data = unavailable_walkscore_data("Walk Score is not configured.")
        assert data.available is False
        assert data.walk_score is None
        assert data.walk_grade == "N/A"
        assert "not configured" in data.explanation


@pytest.mark.unit
class TestClient:

    @pytest.mark.asyncio
    async def test_sends_key_and_params(self, settings, make_transport):
        transport = make_transport(lambda request: (200, SCORE_RESPONSE))

        async with WalkScoreClient(settings, api_key="ws-key", transport=transport) as client:
            data = await client.get_score(27.95, -82.46, "1 Main St, Tampa, FL")

        assert data["walkscore"] == 82
        params = transport.requests[0].url.params
        assert params["wsapikey"] == "ws-key"
        assert params["transit"] == "1"
        assert params["bike"] == "1"
        assert params["address"] == "1 Main St, Tampa, FL"

    @pytest.mark.asyncio
    async def test_invalid_key_status(self, settings, make_transport):
        transport = make_transport(lambda request: (200, {"status": 41}))

        async with WalkScoreClient(settings, api_key="bad", transport=transport) as client:
            with pytest.raises(AuthenticationError):
                await client.get_score(27.95, -82.46)

    @pytest.mark.asyncio
    async def test_other_status_is_fatal(self, settings, make_transport):
        transport = make_transport(lambda request: (200, {"status": 42}))

        async with WalkScoreClient(settings, api_key="k", transport=transport) as client:
            with pytest.raises(FatalError) as exc_info:
                await client.get_score(27.95, -82.46)

        assert "quota" in str(exc_info.value)


@pytest.mark.unit
def test_transit_and_bike_not_objects():
    data = build_walkscore_data(
        {"status": 1, "walkscore": 70, "transit": "n/a", "bike": 12}, 27.95, -82.46
    )
    assert data.walk_score == 70
    assert data.transit_score is None
    assert data.bike_score is None
