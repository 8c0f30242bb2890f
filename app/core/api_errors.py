"""
Standardized API error classification system.

Provides a unified error hierarchy for all external data provider clients.
Each error type carries a category (configuration, transport or parse) so
adapters can turn it into the right "unavailable" explanation, plus
context for debugging.
"""

from typing import Optional, Dict, Any


CATEGORY_CONFIGURATION = "configuration"
CATEGORY_TRANSPORT = "transport"
CATEGORY_PARSE = "parse"


class APIError(Exception):
    """
    Base exception for all API-related errors.

    Attributes:
        message: Human-readable error description
        source: Provider name (e.g., 'fema_nfhl', 'usgs_earthquake')
        status_code: HTTP status code if applicable
        response_data: Raw response data for debugging
    """

    category: str = CATEGORY_TRANSPORT

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.source = source
        self.status_code = status_code
        self.response_data = response_data

    def __str__(self) -> str:
        parts = [self.message]
        if self.source:
            parts.insert(0, f"[{self.source}]")
        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "category": self.category,
            "message": self.message,
            "source": self.source,
            "status_code": self.status_code,
            "response_data": self.response_data,
        }


class TransportError(APIError):
    """
    The provider could not be reached or did not answer successfully.

    Examples:
    - HTTP 500-599 server errors
    - Network timeouts
    - Connection reset errors
    """


class RateLimitError(TransportError):
    """
    Rate limiting error (HTTP 429 or API-specific throttling).

    Requests are single-attempt, so this is reported, not waited out.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        retry_after: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            source=source,
            status_code=429,
            response_data=response_data,
        )
        self.retry_after = retry_after


class FatalError(APIError):
    """
    The provider answered, but refused the request.

    Examples:
    - Invalid API key (401)
    - Resource not found (404)
    - Invalid request parameters (400)
    - Forbidden access (403)
    - In-band provider status codes (Walk Score status 41, Places REQUEST_DENIED)
    """


class AuthenticationError(FatalError):
    """
    Authentication failed - invalid API key.

    HTTP 401 or API-specific authentication errors.
    """

    def __init__(
        self,
        message: str = "Authentication failed - check API key",
        source: Optional[str] = None,
        response_data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message, source=source, status_code=401, response_data=response_data
        )


class NotFoundError(FatalError):
    """
    Requested resource not found.

    HTTP 404 or API-specific "not found" responses.
    """

    def __init__(
        self,
        message: str = "Resource not found",
        source: Optional[str] = None,
        resource_id: Optional[str] = None,
        response_data: Optional[Dict[str, Any]] = None,
    ):
        if resource_id:
            message = f"{message}: {resource_id}"
        super().__init__(
            message=message, source=source, status_code=404, response_data=response_data
        )
        self.resource_id = resource_id


class ValidationError(FatalError):
    """
    Request validation failed - invalid parameters.

    HTTP 400, or input rejected before the request is sent
    (e.g. a malformed FIPS code).
    """

    def __init__(
        self,
        message: str = "Invalid request parameters",
        source: Optional[str] = None,
        invalid_params: Optional[Dict[str, str]] = None,
        response_data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message, source=source, status_code=400, response_data=response_data
        )
        self.invalid_params = invalid_params or {}


class ParseError(APIError):
    """
    Response body was not JSON or did not have the expected shape.
    """

    category = CATEGORY_PARSE


class ConfigurationError(APIError):
    """
    Configuration error - missing required settings.

    Raised when a provider's API key is not configured. Never sent
    over the network.
    """

    category = CATEGORY_CONFIGURATION

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        missing_config: Optional[str] = None,
    ):
        super().__init__(message=message, source=source)
        self.missing_config = missing_config


def classify_http_error(
    status_code: int, response_text: str = "", source: Optional[str] = None
) -> APIError:
    """
    Classify an HTTP error into the appropriate APIError subclass.

    Args:
        status_code: HTTP status code
        response_text: Response body text
        source: Provider name

    Returns:
        Appropriate APIError subclass instance
    """
    if status_code == 429:
        return RateLimitError(
            message=f"Rate limited: {response_text[:200]}", source=source
        )
    elif status_code == 401:
        return AuthenticationError(
            message=f"Authentication failed: {response_text[:200]}", source=source
        )
    elif status_code == 403:
        return FatalError(
            message=f"Access forbidden: {response_text[:200]}",
            source=source,
            status_code=403,
        )
    elif status_code == 404:
        return NotFoundError(message=f"Not found: {response_text[:200]}", source=source)
    elif status_code == 400:
        return ValidationError(
            message=f"Bad request: {response_text[:200]}", source=source
        )
    elif 500 <= status_code < 600:
        return TransportError(
            message=f"Server error: {response_text[:200]}",
            source=source,
            status_code=status_code,
        )
    else:
        return FatalError(
            message=f"HTTP error {status_code}: {response_text[:200]}",
            source=source,
            status_code=status_code,
        )
