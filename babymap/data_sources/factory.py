"""Factory helpers for wiring upstream services at startup."""

from __future__ import annotations

from babymap import config
from babymap.data_sources.base import CallableDataSource, UpstreamDataSource
from babymap.data_sources.nominatim_client import resolve
from babymap.data_sources.openweather_client import fetch_current_weather
from babymap.data_sources.overpass_client import fetch_elements
from babymap.gemini_client import generate_text
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


def build_data_source(settings: config.Settings | None = None) -> UpstreamDataSource:
    """Bind the configured upstream services."""
    settings = settings or config.settings
    logger.info(
        "Using public upstreams",
        extra={"nominatim": settings.nominatim_url, "overpass": settings.overpass_url},
    )
    return CallableDataSource(
        geocoder=resolve,
        overpass=fetch_elements,
        weather=fetch_current_weather,
        text_generator=generate_text,
    )
