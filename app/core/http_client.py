"""
Base HTTP client with unified timeouts, caller identification and error handling.

Provides a reusable foundation for all external provider clients.
Every call is a single, time-boxed attempt: failures are classified into the
APIError hierarchy and left for the adapter boundary to turn into a
fallback result.
"""
import logging
from abc import ABC
from typing import Dict, Optional, Any

import httpx

from app.core.api_errors import (
    APIError,
    ParseError,
    TransportError,
    classify_http_error
)
from app.core.api_registry import APIConfig, get_api_config
from app.core.config import Settings

logger = logging.getLogger(__name__)


class BaseAPIClient(ABC):
    """
    Base class for all external provider clients.

    Provides unified:
    - HTTP request handling with per-request timeouts
    - Descriptive User-Agent on every request
    - Standardized error classification
    - Connection pooling

    Subclasses should:
    - Set SOURCE_NAME (a key of API_REGISTRY)
    - Implement provider-specific methods that call get()
    - Override _check_api_error() for in-band error detection
    """

    # Override in subclass
    SOURCE_NAME: str = "unknown"
    ACCEPT: str = "application/json"

    def __init__(
        self,
        settings: Settings,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the API client.

        Args:
            settings: Loaded application settings
            api_key: Optional API key for authentication
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.settings = settings
        self.config: APIConfig = get_api_config(self.SOURCE_NAME)
        self.api_key = api_key
        self.timeout = self.config.timeout_seconds or settings.request_timeout_seconds
        self.connect_timeout = min(settings.connect_timeout_seconds, self.timeout)
        self._transport = transport

        # HTTP client (lazy initialization)
        self._client: Optional[httpx.AsyncClient] = None

        logger.debug(
            f"Initialized {self.SOURCE_NAME} client: "
            f"api_key_present={api_key is not None}, "
            f"timeout={self.timeout}s"
        )

    @property
    def base_url(self) -> str:
        return self.config.base_url

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client with connection pooling."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug(f"{self.SOURCE_NAME} client closed")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit - ensures cleanup."""
        await self.close()

    def _check_api_error(
        self,
        data: Any,
        resource_id: str
    ) -> Optional[APIError]:
        """
        Check API response for provider-specific errors.

        Override in subclass to handle API-specific error formats.

        Args:
            data: Parsed JSON response
            resource_id: Resource being requested (for logging)

        Returns:
            APIError if error detected, None otherwise
        """
        # Common pattern: "error" field (ArcGIS, Yelp)
        if isinstance(data, dict) and "error" in data:
            error = data.get("error")
            if isinstance(error, dict):
                status_code = error.get("code") if isinstance(error.get("code"), int) else None
                message = error.get("message") or error.get("description") or str(error)
                if status_code is not None:
                    return classify_http_error(status_code, str(message), self.SOURCE_NAME)
                return TransportError(
                    message=str(message),
                    source=self.SOURCE_NAME,
                    response_data=data,
                )
            return TransportError(
                message=str(error),
                source=self.SOURCE_NAME,
                response_data=data,
            )

        return None

    def _build_headers(self) -> Dict[str, str]:
        """
        Build request headers.

        Override to add API-specific headers (e.g., Authorization).

        Returns:
            Dict of headers
        """
        return {
            "Accept": self.ACCEPT,
            "User-Agent": self.settings.user_agent,
        }

    def _add_auth_to_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Add authentication to request parameters.

        Override to add API-specific auth (e.g., key query param).

        Args:
            params: Request parameters

        Returns:
            Parameters with authentication added
        """
        return params

    def _build_url(self, url: str) -> str:
        # Prepend base URL if url is a path
        if url.startswith("http"):
            return url
        return f"{self.base_url.rstrip('/')}/{url.lstrip('/')}"

    async def get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        resource_id: str = "unknown",
    ) -> Any:
        """
        Make a single GET request and return the decoded JSON body.

        Args:
            url: Full URL or path (if path, the provider base URL is prepended)
            params: Query parameters
            resource_id: Identifier for logging

        Returns:
            Parsed JSON response (dict or list)

        Raises:
            TransportError: Network failure, timeout or 5xx
            FatalError: Other non-2xx responses and in-band provider errors
            ParseError: Body is not JSON
        """
        url = self._build_url(url)
        params = self._add_auth_to_params(dict(params or {}))
        headers = self._build_headers()
        client = await self._get_client()

        logger.debug(f"[{self.SOURCE_NAME}] GET {resource_id}")

        try:
            response = await client.get(url, params=params, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise classify_http_error(
                e.response.status_code,
                e.response.text[:500],
                self.SOURCE_NAME
            ) from e
        except httpx.TimeoutException as e:
            raise TransportError(
                message=f"Request timed out after {self.timeout}s",
                source=self.SOURCE_NAME
            ) from e
        except httpx.RequestError as e:
            raise TransportError(
                message=f"Request failed: {str(e)}",
                source=self.SOURCE_NAME
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(
                message=f"Response for {resource_id} is not valid JSON",
                source=self.SOURCE_NAME,
                status_code=response.status_code,
            ) from e

        api_error = self._check_api_error(data, resource_id)
        if api_error:
            raise api_error

        logger.debug(f"[{self.SOURCE_NAME}] Successfully fetched {resource_id}")
        return data
