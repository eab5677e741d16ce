"""
Mangrove Watch - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import Dict, Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Record store
    database_url: str = "sqlite:///./mangrove_watch.db"
    database_echo: bool = False

    # Photo uploads
    upload_dir: str = "uploads"
    upload_base_url: str = "/uploads"

    # Mapbox (commercial tile renderer)
    mapbox_access_token: Optional[str] = None
    mapbox_style: str = "mapbox/streets-v12"
    credential_store_dir: str = ".mangrove_credentials"

    # Map defaults (India)
    default_center_lat: float = 20.5937
    default_center_lng: float = 78.9629
    default_zoom: int = 5
    map_css_class: str = "w-full h-[500px] rounded-lg shadow-md overflow-hidden"

    # Severity palette
    severity_colors: Dict[str, str] = Field(
        default_factory=lambda: {
            "critical": "#dc2626",
            "high": "#f97316",
            "medium": "#eab308",
            "low": "#16a34a",
        }
    )
    severity_default_color: str = "#6b7280"
    marker_radius: int = 9

    # Gamification
    points_per_report: int = 10

    # Geolocation
    geolocation_url: str = "http://ip-api.com/json/"
    geolocation_timeout_seconds: float = 10.0

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def default_center(self) -> Tuple[float, float]:
        return (self.default_center_lat, self.default_center_lng)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
