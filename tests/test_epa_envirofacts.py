"""
Unit tests for EPA Envirofacts facility parsing and risk assessment.

Rows are canned; no network requests are made.
"""
import pytest

from app.core.api_errors import ParseError
from app.core.risk import RiskLevel
from app.sources.epa_envirofacts.client import EPAEnvirofactsClient
from app.sources.epa_envirofacts.metadata import (
    SiteType,
    build_environmental_data,
    classify_environmental_risk,
    closest_concern,
    environmental_risk_color,
    parse_site,
    sites_within_radius,
    unavailable_environmental_data,
)

LAT, LNG = 40.0, -75.0

# Degrees of latitude north of the origin; 0.01 deg is about 0.69 miles
VERY_NEAR = 0.005
NEAR = 0.01
MID = 0.03
OUTSIDE = 0.1


def superfund_row(name, dlat, upper=False):
    row = {
        "site_name": name,
        "npl_status": "Currently on the Final NPL",
        "latitude": LAT + dlat,
        "longitude": LNG,
        "city": "Springfield",
        "state": "PA",
        "epa_id": "PAD000000001 ",
    }
    if upper:
        row = {k.upper(): v for k, v in row.items()}
    return row


def tri_row(name, dlat):
    return {"facility_name": name, "latitude": LAT + dlat, "longitude": LNG, "city_name": "Springfield"}


def rcra_row(name, dlat):
    return {"handler_name": name, "latitude": str(LAT + dlat), "longitude": str(LNG)}


def sites(rows, site_type):
    return sites_within_radius(rows, site_type, LAT, LNG, 3.0)


@pytest.mark.unit
class TestParseSite:

    def test_superfund_fields(self):
        site = parse_site(superfund_row("Acme Landfill", NEAR), SiteType.SUPERFUND, LAT, LNG)
        assert site.name == "Acme Landfill"
        assert site.status == "Currently on the Final NPL"
        assert site.epa_id == "PAD000000001"
        assert site.risk_level == RiskLevel.HIGH
        assert site.distance_miles == pytest.approx(0.69, abs=0.01)

    def test_upper_case_fields(self):
        site = parse_site(superfund_row("Acme", NEAR, upper=True), SiteType.SUPERFUND, LAT, LNG)
        assert site.name == "Acme"

    def test_string_coordinates(self):
        site = parse_site(rcra_row("Shop", NEAR), SiteType.RCRA, LAT, LNG)
        assert site.status == "Hazardous Waste Handler"
        assert site.risk_level == RiskLevel.MODERATE

    def test_missing_coordinates_dropped(self):
        assert parse_site({"facility_name": "X"}, SiteType.TRI, LAT, LNG) is None

    def test_zero_coordinates_dropped(self):
        row = {"facility_name": "X", "latitude": 0, "longitude": 0}
        assert parse_site(row, SiteType.TRI, LAT, LNG) is None


@pytest.mark.unit
def test_sites_within_radius_sorted_and_filtered():
    rows = [tri_row("mid", MID), tri_row("outside", OUTSIDE), tri_row("near", NEAR), "junk"]
    result = sites(rows, SiteType.TRI)
    assert [s.name for s in result] == ["near", "mid"]


@pytest.mark.unit
def test_closest_concern_across_classes():
    superfund = sites([superfund_row("sf", MID)], SiteType.SUPERFUND)
    rcra = sites([rcra_row("rcra", NEAR)], SiteType.RCRA)
    assert closest_concern(superfund, [], rcra).name == "rcra"
    assert closest_concern([], [], []) is None


@pytest.mark.unit
class TestClassification:

    def test_superfund_within_half_mile_is_high(self):
        superfund = sites([superfund_row("Acme", VERY_NEAR)], SiteType.SUPERFUND)
        result = classify_environmental_risk(superfund, [], [])
        assert result.level == RiskLevel.HIGH
        assert "Acme" in result.explanation

    def test_superfund_within_one_mile_is_elevated(self):
        superfund = sites([superfund_row("Acme", NEAR)], SiteType.SUPERFUND)
        assert classify_environmental_risk(superfund, [], []).level == RiskLevel.ELEVATED

    def test_three_near_tri_is_elevated(self):
        tri = sites([tri_row(f"t{i}", NEAR) for i in range(3)], SiteType.TRI)
        assert classify_environmental_risk([], tri, []).level == RiskLevel.ELEVATED

    def test_distant_superfund_is_moderate(self):
        superfund = sites([superfund_row("Acme", MID)], SiteType.SUPERFUND)
        assert classify_environmental_risk(superfund, [], []).level == RiskLevel.MODERATE

    def test_many_tri_is_moderate(self):
        tri = sites([tri_row(f"t{i}", MID) for i in range(6)], SiteType.TRI)
        assert classify_environmental_risk([], tri, []).level == RiskLevel.MODERATE

    def test_few_facilities_is_low(self):
        rcra = sites([rcra_row("r", MID)], SiteType.RCRA)
        result = classify_environmental_risk([], [], rcra)
        assert result.level == RiskLevel.LOW
        assert "minor facilities" in result.explanation

    def test_nothing_is_low(self):
        result = classify_environmental_risk([], [], [])
        assert result.level == RiskLevel.LOW
        assert "No EPA-tracked facilities" in result.explanation

    def test_colors(self):
        assert environmental_risk_color(RiskLevel.HIGH) == "red"
        assert environmental_risk_color(RiskLevel.UNKNOWN) == "gray"


@pytest.mark.unit
class TestBuildEnvironmentalData:

    def test_counts_use_full_radius_and_lists_are_truncated(self):
        rcra_rows = [rcra_row(f"r{i}", MID) for i in range(12)]
        data = build_environmental_data(
            LAT, LNG,
            {SiteType.SUPERFUND: [], SiteType.TRI: [], SiteType.RCRA: rcra_rows},
        )

        assert data.rcra_count == 12
        assert len(data.hazardous_waste_sites) == 10
        # More than ten RCRA handlers is moderate even though only ten are listed
        assert data.risk_level == RiskLevel.MODERATE
        assert data.total_facilities_nearby == 12
        assert data.unavailable_tables == []

    def test_closest_concern_and_high_risk(self):
        data = build_environmental_data(
            LAT, LNG,
            {
                SiteType.SUPERFUND: [superfund_row("Acme", VERY_NEAR)],
                SiteType.TRI: [tri_row("t", NEAR)],
                SiteType.RCRA: [],
            },
        )
        assert data.risk_level == RiskLevel.HIGH
        assert data.closest_concern.name == "Acme"
        assert data.risk_color == "red"
        assert data.closest_concern.site_type == SiteType.SUPERFUND

    def test_missing_table_marks_incomplete(self):
        data = build_environmental_data(
            LAT, LNG,
            {SiteType.SUPERFUND: [], SiteType.TRI: None, SiteType.RCRA: []},
        )
        assert data.unavailable_tables == [SiteType.TRI]
        assert "incomplete" in data.explanation
        assert "Toxic Release Inventory" in data.explanation
        # The missing table alone could have raised the level
        assert data.risk_level == RiskLevel.UNKNOWN

    def test_missing_superfund_is_unknown_not_low(self):
        data = build_environmental_data(
            LAT, LNG,
            {SiteType.SUPERFUND: None, SiteType.TRI: [], SiteType.RCRA: []},
        )
        assert data.risk_level == RiskLevel.UNKNOWN
        assert data.risk_color == "gray"
        assert "Superfund sites could not be retrieved" in data.explanation

    def test_missing_superfund_keeps_elevated_tri_finding(self):
        data = build_environmental_data(
            LAT, LNG,
            {
                SiteType.SUPERFUND: None,
                SiteType.TRI: [tri_row(f"t{i}", NEAR) for i in range(3)],
                SiteType.RCRA: [],
            },
        )
        assert data.risk_level == RiskLevel.ELEVATED
        assert data.risk_color == "orange"
        assert data.unavailable_tables == [SiteType.SUPERFUND]

    def test_missing_rcra_keeps_moderate(self):
        data = build_environmental_data(
            LAT, LNG,
            {SiteType.SUPERFUND: [superfund_row("Acme", MID)], SiteType.TRI: [], SiteType.RCRA: None},
        )
        assert data.risk_level == RiskLevel.MODERATE

    def test_missing_rcra_with_nothing_found_is_unknown(self):
        data = build_environmental_data(
            LAT, LNG,
            {SiteType.SUPERFUND: [], SiteType.TRI: [], SiteType.RCRA: None},
        )
        assert data.risk_level == RiskLevel.UNKNOWN

    def test_unavailable(self):
        data = unavailable_environmental_data("EPA is down.")
        assert data.risk_level == RiskLevel.UNKNOWN
        assert data.total_facilities_nearby == 0
        assert data.closest_concern is None
        assert set(data.unavailable_tables) == set(SiteType)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_client_paths(settings, make_transport):
    transport = make_transport(lambda request: (200, []))
    box = (39.9, 40.1, -75.1, -74.9)

    async with EPAEnvirofactsClient(settings, transport=transport) as client:
        await client.get_superfund_sites(box)
        await client.get_tri_facilities(box)

    superfund_path, tri_path = [r.url.path for r in transport.requests]
    assert superfund_path.endswith(
        "/SEMS_ACTIVE_SITES/LATITUDE/39.900000:40.100000/LONGITUDE/-75.100000:-74.900000/JSON"
    )
    assert tri_path.endswith("/TRI_FACILITY/LATITUDE/39.900000:40.100000"
                             "/LONGITUDE/-75.100000:-74.900000/ROWS/0:50/JSON")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_client_rejects_non_array(settings, make_transport):
    transport = make_transport(lambda request: (200, {"message": "table not found"}))

    async with EPAEnvirofactsClient(settings, transport=transport) as client:
        with pytest.raises(ParseError):
            await client.get_rcra_handlers((0, 1, 0, 1))
