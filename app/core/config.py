"""
Configuration module with strict validation.

Key principles:
- APP STARTUP does NOT require any provider API key
- Keyed providers (Walk Score, Yelp, Google Places) report "not configured"
  instead of failing when their key is absent
- Timeouts and the outbound User-Agent are configurable
- Safe defaults for all optional settings
"""
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.api_errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings with validation.

    Loads from environment variables and .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Walk Score API Configuration (OPTIONAL for startup, REQUIRED for walkability)
    walkscore_api_key: Optional[str] = Field(
        default=None,
        description="Walk Score API key - required only for walkability lookups"
    )

    # Yelp Fusion API Configuration (OPTIONAL for startup, REQUIRED for amenities)
    yelp_api_key: Optional[str] = Field(
        default=None,
        description="Yelp Fusion API key - required only for business amenities"
    )

    # Google Places API Configuration (OPTIONAL for startup, REQUIRED for places)
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="Google Maps API key - required only for nearby places"
    )

    # Outbound request policy
    request_timeout_seconds: float = Field(
        default=8.0,
        ge=1.0,
        le=60.0,
        description="Timeout for a single outbound HTTP request"
    )

    connect_timeout_seconds: float = Field(
        default=5.0,
        ge=0.5,
        le=30.0,
        description="Connection timeout for outbound HTTP requests"
    )

    adapter_timeout_seconds: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="Overall budget for one adapter run, including multi-hop calls"
    )

    user_agent: str = Field(
        default="PropertyIntelligence/1.0 (+support@propertyintel.example)",
        min_length=1,
        description="Descriptive client identifier sent to every provider"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # Testing
    run_integration_tests: bool = Field(
        default=False,
        description="Enable integration tests (requires API keys and network)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    @field_validator("walkscore_api_key", "yelp_api_key", "google_maps_api_key")
    @classmethod
    def blank_key_is_missing(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty or whitespace-only keys as not configured."""
        if v is None or not v.strip():
            return None
        return v.strip()

    def require_walkscore_api_key(self) -> str:
        """
        Get Walk Score API key, raising clear error if missing.

        Raises:
            ConfigurationError: If the key is not configured

        Returns:
            str: The API key
        """
        if not self.walkscore_api_key:
            raise ConfigurationError(
                "WALKSCORE_API_KEY is not configured. "
                "Get a key at: https://www.walkscore.com/professional/api-sign-up.php",
                source="walkscore",
                missing_config="walkscore_api_key",
            )
        return self.walkscore_api_key

    def require_yelp_api_key(self) -> str:
        """
        Get Yelp Fusion API key, raising clear error if missing.

        Raises:
            ConfigurationError: If the key is not configured
        """
        if not self.yelp_api_key:
            raise ConfigurationError(
                "YELP_API_KEY is not configured. "
                "Get a key at: https://www.yelp.com/developers/v3/manage_app",
                source="yelp",
                missing_config="yelp_api_key",
            )
        return self.yelp_api_key

    def require_google_maps_api_key(self) -> str:
        """
        Get Google Maps API key, raising clear error if missing.

        Raises:
            ConfigurationError: If the key is not configured
        """
        if not self.google_maps_api_key:
            raise ConfigurationError(
                "GOOGLE_MAPS_API_KEY is not configured. "
                "Get a key at: https://developers.google.com/maps/documentation/places/web-service/get-api-key",
                source="google_places",
                missing_config="google_maps_api_key",
            )
        return self.google_maps_api_key

    def get_walkscore_api_key(self) -> Optional[str]:
        return self.walkscore_api_key

    def get_yelp_api_key(self) -> Optional[str]:
        return self.yelp_api_key

    def get_google_maps_api_key(self) -> Optional[str]:
        return self.google_maps_api_key

    def get_api_key(self, config_key: Optional[str]) -> Optional[str]:
        """
        Look up a provider key by its settings attribute name.

        Returns None for keyless providers and for keys that are not set.
        """
        if not config_key:
            return None
        return getattr(self, config_key, None)


# Global settings instance
# Loaded once at process start and treated as read-only afterwards
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the global settings instance.

    This pattern allows:
    - Easy testing (can reset settings between tests)
    - Lazy loading (only loads when first accessed)
    - Singleton pattern (same instance used everywhere)
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """
    Reset the global settings instance.

    Useful for testing to ensure clean state between tests.
    """
    global _settings
    _settings = None
