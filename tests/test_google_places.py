"""
Unit tests for Google Places nearby search parsing.
"""
import pytest

from app.core.api_errors import AuthenticationError, FatalError, ParseError
from app.sources.google_places.client import GooglePlacesClient
from app.sources.google_places.metadata import (
    PLACE_TYPES,
    build_places_data,
    format_distance,
    parse_nearby_results,
    price_level_display,
    unavailable_places_data,
)

LAT, LNG = 27.95, -82.46


def place(place_id, dlat, **extra):
    raw = {
        "place_id": place_id,
        "name": place_id.upper(),
        "vicinity": "100 Main St, Tampa",
        "geometry": {"location": {"lat": LAT + dlat, "lng": LNG}},
        "types": ["park", "point_of_interest"],
        "rating": 4.6,
        "user_ratings_total": 210,
        "business_status": "OPERATIONAL",
        "opening_hours": {"open_now": True},
    }
    raw.update(extra)
    return raw


def nearby_response(*places):
    return {"status": "OK" if places else "ZERO_RESULTS", "results": list(places)}


@pytest.mark.unit
class TestParsing:

    def test_nearest_first(self):
        places = parse_nearby_results(nearby_response(place("far", 0.01), place("near", 0.002)), LAT, LNG)
        assert [p.place_id for p in places] == ["near", "far"]
        assert places[0].address == "100 Main St, Tampa"
        assert places[0].open_now is True

    def test_zero_results_without_list(self):
        assert parse_nearby_results({"status": "ZERO_RESULTS"}, LAT, LNG) == []

    def test_no_results_is_parse_error(self):
        with pytest.raises(ParseError):
            parse_nearby_results({"status": "OK"}, LAT, LNG)

    def test_place_without_location_dropped(self):
        raw = place("x", 0)
        raw["geometry"] = {}
        assert parse_nearby_results(nearby_response(raw), LAT, LNG) == []


@pytest.mark.unit
class TestBuildPlacesData:

    def test_summary(self):
        data = build_places_data(
            LAT, LNG,
            {
                "park": nearby_response(place("p1", 0.005), place("p2", 0.001)),
                "school": nearby_response(),
                "hospital": None,
            },
        )
        assert data.summary["park"].count == 2
        assert data.summary["park"].nearest.place_id == "p2"
        assert data.summary["school"].count == 0
        assert data.summary["school"].nearest is None
        assert data.summary["hospital"].available is False
        assert data.unavailable_types == ["hospital"]
        assert data.explanation.startswith("1 of 3 place types")

    def test_unavailable(self):
        data = unavailable_places_data("Google Places is not configured.")
        assert set(data.summary) == set(PLACE_TYPES)
        assert data.unavailable_types == list(PLACE_TYPES)


@pytest.mark.unit
def test_display_helpers():
    assert price_level_display(2) == "$$$"
    assert price_level_display(None) == "Price N/A"
    assert format_distance(250.4) == "250 m"
    assert format_distance(3218.68) == "2.0 mi"
    assert format_distance(None) == "N/A"


@pytest.mark.unit
class TestClient:

    @pytest.mark.asyncio
    async def test_params(self, settings, make_transport):
        transport = make_transport(lambda request: (200, nearby_response()))

        async with GooglePlacesClient(settings, api_key="g-key", transport=transport) as client:
            await client.nearby_search(LAT, LNG, place_type="park", radius=99999)

        params = transport.requests[0].url.params
        assert params["key"] == "g-key"
        assert params["location"] == "27.95,-82.46"
        assert params["radius"] == "50000"
        assert params["type"] == "park"

    @pytest.mark.asyncio
    async def test_request_denied(self, settings, make_transport):
        transport = make_transport(
            lambda request: (200, {"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid."})
        )

        async with GooglePlacesClient(settings, api_key="bad", transport=transport) as client:
            with pytest.raises(AuthenticationError):
                await client.nearby_search(LAT, LNG, place_type="park")

    @pytest.mark.asyncio
    async def test_over_query_limit(self, settings, make_transport):
        transport = make_transport(lambda request: (200, {"status": "OVER_QUERY_LIMIT", "results": []}))

        async with GooglePlacesClient(settings, api_key="k", transport=transport) as client:
            with pytest.raises(FatalError):
                await client.nearby_search(LAT, LNG, place_type="park")


@pytest.mark.unit
class TestMalformedPlaces:

    def test_geometry_not_an_object(self):
        raw = place("x", 0)
        raw["geometry"] = "oops"
        assert parse_nearby_results(nearby_response(raw), LAT, LNG) == []

    def test_opening_hours_not_an_object(self):
        raw = place("x", 0.001, opening_hours=["9-5"])
        assert parse_nearby_results(nearby_response(raw), LAT, LNG)[0].open_now is None

    def test_non_object_results_are_skipped(self):
        response = {"status": "OK", "results": [None, 7, place("ok", 0.001)]}
        assert [p.place_id for p in parse_nearby_results(response, LAT, LNG)] == ["ok"]


@pytest.mark.unit
def test_places_carry_display_fields():
    places = parse_nearby_results(nearby_response(place("p", 0.002, price_level=1)), LAT, LNG)
    assert places[0].price_display == "$$"
    assert places[0].distance_display == "222 m"
