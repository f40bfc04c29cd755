"""Application settings and configuration management.

This module provides Pydantic-based settings management that loads
configuration from environment variables or a .env file. Settings include
the two public dataset catalog feeds, the user-configured analysis endpoint
and its bearer token, the service account credential input, CORS origins,
and logging level.

Example:
    Settings can be accessed via the cached get_settings() function:
        >>> from eecatalog.core.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.official_catalog_url)

    Environment variables can override defaults:
        >>> TILE_ENDPOINT=https://huggingface.co/spaces/giswqs/ee-tile-request
        >>> TILE_ENDPOINT_TOKEN=hf_xxx
        >>> HTTP_TIMEOUT_SECONDS=30
"""

import functools

import pydantic_settings

OFFICIAL_CATALOG_URL = (
    "https://raw.githubusercontent.com/opengeos/Earth-Engine-Catalog/"
    "master/gee_catalog.json"
)
COMMUNITY_CATALOG_URL = (
    "https://raw.githubusercontent.com/samapriya/awesome-gee-community-datasets/"
    "master/community_datasets.json"
)


class Settings(pydantic_settings.BaseSettings):
    """Runtime configuration pulled from environment variables or defaults.

    All settings can be overridden via environment variables or .env file.

    Attributes:
        official_catalog_url: JSON listing of official Earth Engine datasets.
        community_catalog_url: JSON listing of community-contributed datasets.
        tile_endpoint: User-configured endpoint URL for tile, inspect,
            export and time-series requests. None means tile-only mode
            is not available either.
        tile_endpoint_token: Optional bearer token sent to the endpoint.
        http_timeout_seconds: Timeout applied to outbound HTTP calls.
            None (default) waits indefinitely.
        ee_service_account: Inline service account JSON or a path to it.
        allow_origins: List of allowed CORS origins (["*"] allows all).
        log_level: Root logging level name.

    Example:
        Create settings with custom values:
            >>> settings = Settings(
            ...     tile_endpoint="https://example.com/tile",
            ...     tile_endpoint_token="secret",
            ... )

        Or use environment variables:
            >>> export TILE_ENDPOINT=https://example.com/tile
            >>> settings = Settings()  # Loads from environment
    """

    official_catalog_url: str = OFFICIAL_CATALOG_URL
    community_catalog_url: str = COMMUNITY_CATALOG_URL
    tile_endpoint: str | None = None
    tile_endpoint_token: str | None = None
    http_timeout_seconds: float | None = None
    ee_service_account: str | None = None
    allow_origins: list[str] = ["*"]
    log_level: str = "INFO"

    model_config = pydantic_settings.SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


@functools.lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables or .env file and cached
    for the lifetime of the application. Subsequent calls return the same
    cached instance.

    Returns:
        Settings instance with all configuration values populated.

    Example:
        The settings are cached, so multiple calls return the same instance:
            >>> settings1 = get_settings()
            >>> settings2 = get_settings()
            >>> assert settings1 is settings2  # Same instance
    """
    return Settings()
