"""
Unit tests for Yelp business parsing and amenities summary.
"""
import pytest

from app.core.api_errors import ParseError
from app.sources.yelp.client import YelpClient
from app.sources.yelp.metadata import (
    AMENITY_CATEGORIES,
    build_amenities_data,
    meters_to_miles,
    parse_business,
    parse_search_results,
    unavailable_amenities_data,
)

LAT, LNG = 27.95, -82.46


def business(business_id, dlat, name=None):
    return {
        "id": business_id,
        "name": name or business_id.title(),
        "url": f"https://www.yelp.com/biz/{business_id}",
        "rating": 4.5,
        "review_count": 120,
        "price": "$$",
        "display_phone": "(813) 555-0100",
        "is_closed": False,
        "coordinates": {"latitude": LAT + dlat, "longitude": LNG},
        "categories": [{"alias": "coffee", "title": "Coffee & Tea"}],
        "location": {"display_address": ["100 Main St", "Tampa, FL 33602"]},
    }


def search_response(*businesses, total=None):
    return {"businesses": list(businesses), "total": total if total is not None else len(businesses)}


@pytest.mark.unit
class TestParsing:

    def test_parse_business(self):
        parsed = parse_business(business("blue-bean", 0.001), LAT, LNG)
        assert parsed.name == "Blue-Bean"
        assert parsed.phone == "(813) 555-0100"
        assert parsed.categories == ["Coffee & Tea"]
        assert parsed.address == "100 Main St, Tampa, FL 33602"
        assert parsed.distance_meters == pytest.approx(111, abs=2)

    def test_business_without_coordinates(self):
        raw = business("x", 0)
        raw["coordinates"] = {}
        assert parse_business(raw, LAT, LNG) is None

    def test_results_nearest_first(self):
        results = parse_search_results(
            search_response(business("far", 0.01), business("near", 0.001)), LAT, LNG
        )
        assert [b.id for b in results] == ["near", "far"]

    def test_missing_businesses_is_parse_error(self):
        with pytest.raises(ParseError):
            parse_search_results({"error": {}}, LAT, LNG)


@pytest.mark.unit
class TestBuildAmenitiesData:

    def test_counts_and_top_picks(self):
        coffee = search_response(*[business(f"c{i}", 0.001 * (i + 1)) for i in range(5)], total=37)
        data = build_amenities_data(LAT, LNG, {"coffee": coffee, "gyms": search_response()})

        assert data.categories["coffee"].count == 37
        assert [b.id for b in data.categories["coffee"].top_picks] == ["c0", "c1", "c2"]
        assert data.categories["gyms"].count == 0
        assert data.categories["gyms"].available is True
        assert data.explanation.startswith("1 of 2 amenity categories")

    def test_failed_category_is_unavailable_not_zero(self):
        data = build_amenities_data(LAT, LNG, {"coffee": search_response(), "banks": None})
        assert data.categories["banks"].available is False
        assert data.unavailable_categories == ["banks"]
        assert "Could not retrieve: banks" in data.explanation

    def test_unavailable(self):
        data = unavailable_amenities_data("Yelp is not configured.")
        assert set(data.categories) == set(AMENITY_CATEGORIES)
        assert all(not c.available for c in data.categories.values())


@pytest.mark.unit
def test_meters_to_miles():
    assert meters_to_miles(1609) == 1.0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_client_bearer_and_clamping(settings, make_transport):
    transport = make_transport(lambda request: (200, search_response()))

    async with YelpClient(settings, api_key="yelp-key", transport=transport) as client:
        await client.search_businesses(LAT, LNG, categories="coffee", radius=100000, limit=80)

    request = transport.requests[0]
    assert request.headers["Authorization"] == "Bearer yelp-key"
    assert request.url.path == "/v3/businesses/search"
    assert request.url.params["radius"] == "40000"
    assert request.url.params["limit"] == "50"
    assert request.url.params["categories"] == "coffee"
    assert request.url.params["sort_by"] == "distance"


@pytest.mark.unit
class TestMalformedBusinesses:

    def test_coordinates_not_an_object(self):
        raw = business("x", 0)
        raw["coordinates"] = [LAT, LNG]
        assert parse_business(raw, LAT, LNG) is None

    def test_non_object_categories_and_location(self):
        raw = business("x", 0.001)
        raw["categories"] = ["coffee", {"title": "Coffee & Tea"}]
        raw["location"] = "100 Main St"
        parsed = parse_business(raw, LAT, LNG)
        assert parsed.categories == ["Coffee & Tea"]
        assert parsed.address is None

    def test_non_object_results_are_skipped(self):
        results = parse_search_results(search_response(None, "oops", business("ok", 0.001)), LAT, LNG)
        assert [b.id for b in results] == ["ok"]


@pytest.mark.unit
def test_business_distance_in_miles():
    parsed = parse_business(business("far", 0.0145), LAT, LNG)
    assert parsed.distance_miles == 1.0
