"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings

from sisocc.core.geocoding import GeocodingPolicy


class Settings(BaseSettings):
    app_name: str = "sisocc"
    debug: bool = False
    log_level: str = "INFO"

    # Address resolution (OpenCage)
    geocoding_api_key: str | None = None
    geocoding_url: str = "https://api.opencagedata.com/geocode/v1/json"
    geocoding_region_suffix: str = "Recife, Pernambuco, Brasil"
    geocoding_timeout_seconds: float = 5.0
    geocoding_failure_policy: GeocodingPolicy = GeocodingPolicy.FALLBACK

    # Recife city centre, used by the fallback policy
    default_latitude: float = -8.0476
    default_longitude: float = -34.877

    default_page_size: int = 50

    model_config = {"env_prefix": "SISOCC_"}


settings = Settings()
