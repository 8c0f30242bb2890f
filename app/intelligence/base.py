"""
Property Intelligence - Base Adapter.

Abstract base class for all source adapters. An adapter owns one provider:
it checks the credential, runs the provider calls inside the per-adapter
time budget and converts every failure into a structurally complete
fallback payload. run() never raises.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type

import httpx
import pydantic

from app.core.api_errors import APIError, ConfigurationError, CATEGORY_PARSE, CATEGORY_TRANSPORT
from app.core.api_registry import APIConfig, get_api_config
from app.core.config import Settings
from app.intelligence.types import (
    IntelligenceSource,
    LocationQuery,
    SourceResult,
    SourceStatus,
)

logger = logging.getLogger(__name__)


# Registry of available adapters, populated by @register_adapter
ADAPTER_REGISTRY: Dict[IntelligenceSource, Type["SourceAdapter"]] = {}


def register_adapter(source: IntelligenceSource):
    """Decorator to register an adapter class."""

    def decorator(cls: Type["SourceAdapter"]):
        ADAPTER_REGISTRY[source] = cls
        return cls

    return decorator


class SourceAdapter(ABC):
    """
    Abstract base class for source adapters.

    Subclasses must implement:
    - source: The IntelligenceSource this adapter serves
    - provider: API_REGISTRY key of the provider it calls
    - fetch(): Provider calls and normalization
    - fallback(): Payload used when fetch() fails
    """

    # Must be overridden by subclasses
    source: IntelligenceSource
    provider: str

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the adapter.

        Args:
            settings: Loaded application settings
            transport: Optional httpx transport passed to the provider client
        """
        self.settings = settings
        self.transport = transport
        self.config: APIConfig = get_api_config(self.provider)

    @property
    def timeout(self) -> float:
        return self.settings.adapter_timeout_seconds

    def api_key(self) -> Optional[str]:
        """
        Credential for the provider.

        Raises:
            ConfigurationError: If the provider needs a key and none is set
        """
        if not self.config.requires_key:
            return None
        require = getattr(self.settings, f"require_{self.config.config_key}")
        return require()

    def client_kwargs(self, api_key: Optional[str] = None) -> Dict[str, Any]:
        return {"settings": self.settings, "api_key": api_key, "transport": self.transport}

    @abstractmethod
    async def fetch(self, query: LocationQuery, api_key: Optional[str]) -> Any:
        """
        Call the provider and return the normalized payload.

        May raise anything; run() converts failures into the fallback.
        """
        pass

    @abstractmethod
    def fallback(self, reason: str, query: LocationQuery) -> Any:
        """Structurally complete payload with unknown risk."""
        pass

    def unavailable_reason(self, error: BaseException) -> str:
        if isinstance(error, ConfigurationError):
            return (
                f"{self.config.display_name} is not configured "
                f"(set {(error.missing_config or '').upper()})."
            )
        return (
            f"Unable to retrieve {self.config.display_name} data. "
            f"See {self.config.reference_url}."
        )

    def _unavailable(
        self, query: LocationQuery, error: BaseException, category: str
    ) -> SourceResult:
        reason = self.unavailable_reason(error)
        logger.warning(
            f"[{self.source.value}] {self.provider} unavailable "
            f"({category}): {error}"
        )
        return SourceResult(
            source=self.source,
            status=SourceStatus.UNAVAILABLE,
            data=self.fallback(reason, query),
            reason=reason,
            error_category=category,
            freshness=self.config.freshness,
        )

    async def run(self, query: LocationQuery) -> SourceResult:
        """
        Produce a SourceResult for the query. Never raises.

        A missing credential is reported before any network call.
        """
        try:
            api_key = self.api_key()
        except ConfigurationError as e:
            return self._unavailable(query, e, e.category)

        try:
            data = await asyncio.wait_for(self.fetch(query, api_key), timeout=self.timeout)
        except APIError as e:
            return self._unavailable(query, e, e.category)
        except asyncio.TimeoutError:
            return self._unavailable(
                query, TimeoutError(f"exceeded {self.timeout}s adapter budget"), CATEGORY_TRANSPORT
            )
        except httpx.HTTPError as e:
            return self._unavailable(query, e, CATEGORY_TRANSPORT)
        except (pydantic.ValidationError, AttributeError, KeyError, TypeError, ValueError) as e:
            return self._unavailable(query, e, CATEGORY_PARSE)

        logger.debug(f"[{self.source.value}] {self.provider} available")
        return SourceResult(
            source=self.source,
            status=SourceStatus.AVAILABLE,
            data=data,
            confidence_score=self.config.default_confidence,
            freshness=self.config.freshness,
        )

