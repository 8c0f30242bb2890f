"""
Unit tests for the API error hierarchy and HTTP error classification.
"""
import pytest

from app.core.api_errors import (
    APIError,
    AuthenticationError,
    CATEGORY_CONFIGURATION,
    CATEGORY_PARSE,
    CATEGORY_TRANSPORT,
    ConfigurationError,
    FatalError,
    NotFoundError,
    ParseError,
    RateLimitError,
    TransportError,
    ValidationError,
    classify_http_error,
)


@pytest.mark.unit
class TestClassifyHttpError:

    def test_429_is_rate_limit(self):
        error = classify_http_error(429, "slow down", "yelp")
        assert isinstance(error, RateLimitError)
        assert isinstance(error, TransportError)
        assert error.status_code == 429

    def test_401_is_authentication(self):
        error = classify_http_error(401, "bad key", "walkscore")
        assert isinstance(error, AuthenticationError)
        assert isinstance(error, FatalError)

    def test_403_is_fatal(self):
        error = classify_http_error(403, "", "google_places")
        assert type(error) is FatalError
        assert error.status_code == 403

    def test_404_is_not_found(self):
        assert isinstance(classify_http_error(404, "", "nws"), NotFoundError)

    def test_400_is_validation(self):
        assert isinstance(classify_http_error(400, "", "openfema"), ValidationError)

    @pytest.mark.parametrize("status", [500, 502, 503, 504])
    def test_5xx_is_transport(self, status):
        error = classify_http_error(status, "down", "fema_nfhl")
        assert type(error) is TransportError
        assert error.status_code == status

    def test_other_status_is_fatal(self):
        error = classify_http_error(418, "teapot", "usgs_earthquake")
        assert type(error) is FatalError
        assert "418" in str(error)


@pytest.mark.unit
class TestErrorCategories:

    def test_transport_and_fatal_are_transport_category(self):
        assert TransportError("x").category == CATEGORY_TRANSPORT
        assert FatalError("x").category == CATEGORY_TRANSPORT

    def test_parse_category(self):
        assert ParseError("x").category == CATEGORY_PARSE

    def test_configuration_category(self):
        error = ConfigurationError("missing", source="yelp", missing_config="yelp_api_key")
        assert error.category == CATEGORY_CONFIGURATION
        assert error.missing_config == "yelp_api_key"

    def test_str_includes_source_and_status(self):
        error = APIError("boom", source="nws", status_code=503)
        assert str(error) == "[nws] boom (HTTP 503)"

    def test_to_dict(self):
        error = NotFoundError(source="nws", resource_id="points/1,2")
        data = error.to_dict()
        assert data["error_type"] == "NotFoundError"
        assert data["status_code"] == 404
        assert data["message"] == "Resource not found: points/1,2"
        assert data["category"] == CATEGORY_TRANSPORT
