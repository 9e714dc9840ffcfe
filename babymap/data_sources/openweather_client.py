"""Current-conditions lookup against the OpenWeatherMap API."""
from __future__ import annotations

import math

import requests

from babymap.config import settings
from babymap.data_sources.http import request_json
from babymap.domain import Coordinate, WeatherSnapshot
from babymap.errors import ResponseFormatError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="openweather_client")

session = requests.Session()


def _to_snapshot(data) -> WeatherSnapshot:
    """Normalize the fields we use; JS-style half-up rounding on temperature."""
    try:
        main = data["main"]
        temp = float(main["temp"])
        humidity = int(main["humidity"])
        description = str(data["weather"][0]["description"])
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise ResponseFormatError(f"Unexpected OpenWeatherMap payload: {exc}", endpoint="openweather") from exc
    return WeatherSnapshot(
        temperature_c=_round_half_up(temp),
        description=description,
        humidity_percent=humidity,
    )


def _round_half_up(value: float) -> int:
    """Round like Math.round: .5 goes toward +infinity."""
    return int(math.floor(value + 0.5))


def fetch_current_weather(
    coordinate: Coordinate,
    *,
    api_key: str | None = None,
    units: str | None = None,
    lang: str | None = None,
) -> WeatherSnapshot:
    """Fetch the current weather for `coordinate` in metric units."""
    params = {
        "lat": coordinate.latitude,
        "lon": coordinate.longitude,
        "units": units or settings.weather_units,
        "lang": lang or settings.weather_lang,
        "appid": api_key if api_key is not None else (settings.weather_api_key or ""),
    }
    data = request_json(
        session,
        "GET",
        settings.openweather_url,
        endpoint="openweather",
        params=params,
        timeout=settings.http_timeout_seconds,
    )
    snapshot = _to_snapshot(data)
    logger.info(
        "Current weather",
        extra={"temperature_c": snapshot.temperature_c, "humidity": snapshot.humidity_percent},
    )
    return snapshot
