"""
Configuration module for the admin gateway.

This module uses Pydantic Settings to load and validate environment variables
for upstream API communication, the session cookie, the geocoding service,
and CORS settings.

Environment variables are loaded from .env file or system environment.
The Settings object is built once by the application factory and handed to
every proxy call; nothing reads the environment at request time.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The upstream base URL is optional on purpose: a gateway started without
    it still serves requests, answering every proxy call with a
    configuration error envelope.
    """

    # =========================================================================
    # Upstream API Configuration
    # =========================================================================

    RINSR_API_BASE: Optional[str] = Field(
        None,
        description="Upstream API base URL (e.g., https://api.example.com or https://api.example.com/api)",
    )

    RINSR_PUBLIC_API_BASE: Optional[str] = Field(
        None,
        description="Public-facing fallback base URL, used by the vendor detail route only",
    )

    UPSTREAM_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Timeout for a single upstream call in seconds",
        gt=0,
        le=300,
    )

    # =========================================================================
    # Session Cookie
    # =========================================================================

    SESSION_COOKIE_NAME: str = Field(
        default="rinsr_token",
        description="Name of the cookie carrying the upstream bearer token",
        min_length=1,
    )

    # =========================================================================
    # Geocoding (vendor creation form)
    # =========================================================================

    LOCATIONIQ_KEY: Optional[str] = Field(
        None,
        description="LocationIQ API key used by the vendor location autocomplete",
    )

    LOCATIONIQ_URL: str = Field(
        default="https://api.locationiq.com/v1/autocomplete",
        description="LocationIQ autocomplete endpoint",
    )

    # =========================================================================
    # Gateway Server Configuration
    # =========================================================================

    GATEWAY_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the gateway server",
    )

    GATEWAY_PORT: int = Field(
        default=8080,
        description="Port to bind the gateway server",
        ge=1,
        le=65535,
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # =========================================================================
    # CORS Configuration
    # =========================================================================

    ALLOWED_ORIGINS: Optional[str] = Field(
        None,
        description="Comma-separated list of allowed CORS origins (leave empty for no CORS)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def allowed_origins_list(self) -> List[str]:
        """
        Parse and return ALLOWED_ORIGINS as a list.

        Returns:
            List of allowed origin URLs, or empty list if not configured.
        """
        if not self.ALLOWED_ORIGINS:
            return []

        return [
            origin.strip()
            for origin in self.ALLOWED_ORIGINS.split(",")
            if origin.strip()
        ]

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("RINSR_API_BASE", "RINSR_PUBLIC_API_BASE", "LOCATIONIQ_KEY")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty or whitespace-only value as unset."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate LOG_LEVEL is a standard logging level name.

        Raises:
            ValueError: If the level is unknown
        """
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()

        if v not in allowed_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {allowed_levels}, got: {v}"
            )

        return v


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create a singleton Settings instance.

    This function is cached so that the settings are loaded only once
    during the application lifecycle.

    Returns:
        Settings instance with all configuration loaded and validated.

    Raises:
        ValidationError: If environment variables are invalid.
    """
    return Settings()


# =============================================================================
# Configuration Helpers
# =============================================================================

def validate_configuration(settings: Settings) -> dict:
    """
    Validate critical configuration settings and return a status report.

    Called during application startup so that a missing upstream URL shows
    up in the logs before the first request fails.

    Returns:
        Dictionary with validation status and any warnings.
    """
    errors = []
    warnings = []

    if not settings.RINSR_API_BASE:
        errors.append("RINSR_API_BASE is not set (every proxy call will fail with 500)")
    elif not settings.RINSR_API_BASE.startswith(("http://", "https://")):
        errors.append(f"RINSR_API_BASE is not an http(s) URL: {settings.RINSR_API_BASE}")

    if not settings.LOCATIONIQ_KEY:
        warnings.append("LOCATIONIQ_KEY is not set (vendor location autocomplete disabled)")

    if settings.RINSR_API_BASE and (
        "localhost" in settings.RINSR_API_BASE or "127.0.0.1" in settings.RINSR_API_BASE
    ):
        warnings.append("Upstream URL points to localhost (may cause issues in containers)")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "session_cookie": settings.SESSION_COOKIE_NAME,
        "upstream_timeout_seconds": settings.UPSTREAM_TIMEOUT_SECONDS,
    }


if __name__ == "__main__":
    """
    Run this module directly to validate your .env configuration:
        python -m admin_gateway.app.config
    """
    print("=" * 80)
    print("ADMIN GATEWAY CONFIGURATION")
    print("=" * 80)

    try:
        config = get_settings()
    except Exception as e:
        print(f"\n✗ Configuration error: {e}")
        raise SystemExit(1)

    print("\nUpstream:")
    print(f"  API base:        {config.RINSR_API_BASE or '(unset)'}")
    print(f"  Public fallback: {config.RINSR_PUBLIC_API_BASE or '(unset)'}")
    print(f"  Timeout:         {config.UPSTREAM_TIMEOUT_SECONDS}s")

    print("\nSession:")
    print(f"  Cookie name:     {config.SESSION_COOKIE_NAME}")

    print("\nServer:")
    print(f"  Host:            {config.GATEWAY_HOST}")
    print(f"  Port:            {config.GATEWAY_PORT}")

    if config.allowed_origins_list:
        print("\nCORS Configuration:")
        print(f"  Allowed Origins: {', '.join(config.allowed_origins_list)}")

    status = validate_configuration(config)

    print("\n" + "=" * 80)
    if status["valid"]:
        print("✓ All critical checks passed!")
    else:
        print("✗ Configuration errors found:")
        for error in status["errors"]:
            print(f"  - {error}")

    if status["warnings"]:
        print("\n⚠ Warnings:")
        for warning in status["warnings"]:
            print(f"  - {warning}")
