"""Application configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the babymap service."""
    model_config = SettingsConfigDict(env_prefix="BABYMAP_", extra="ignore")

    # upstream credentials
    weather_api_key: str | None = None
    gemini_api_key: str | None = None

    # upstream endpoints
    nominatim_url: str = "https://nominatim.openstreetmap.org/search"
    overpass_url: str = "https://overpass-api.de/api/interpreter"
    openweather_url: str = "https://api.openweathermap.org/data/2.5/weather"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-1.5-flash"
    user_agent: str = "babymap/0.1 (caregiver facility map)"
    http_timeout_seconds: float | None = None

    # facility search
    search_radius_meters: int = 2500
    overpass_timeout_seconds: int = 30
    walking_meters_per_minute: int = 80

    # weather
    weather_units: str = "metric"
    weather_lang: str = "ja"

    # initial viewport (Tokyo Station)
    default_latitude: float = 35.6812
    default_longitude: float = 139.7671
    default_label: str = "東京駅 (サンプル)"
    default_zoom: int = 15
    focus_zoom: int = 16

    # service
    api_key: str | None = None
    session_ttl_seconds: int = 3600

    @field_validator("nominatim_url", "overpass_url", "openweather_url", "gemini_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'weather_api_key', 'gemini_api_key'})}")
