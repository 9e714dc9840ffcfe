"""Weather lookup followed by a generated one-line tip."""
from __future__ import annotations

import random

from babymap.advice import build_advice_prompt, validate_advice_output
from babymap.data_sources.base import UpstreamDataSource
from babymap.domain import Coordinate, ErrorKind, FetchResult, WeatherAdvice, WeatherSnapshot
from babymap.errors import BabymapError
from babymap.fallback_policy import advice_or_fallback, weather_line_or_none
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="weather_advice")


class WeatherAdviceGenerator:
    """Two-step fetch: current weather, then advice generated from it."""

    def __init__(self, source: UpstreamDataSource, rng: random.Random | None = None) -> None:
        self.source = source
        self.rng = rng or random.Random()

    def fetch_weather(self, coordinate: Coordinate) -> FetchResult[WeatherSnapshot]:
        try:
            return FetchResult.success(self.source.current_weather(coordinate))
        except BabymapError as exc:
            logger.error("Weather fetch failed: %s", exc)
            return FetchResult.failure(exc.kind, str(exc))
        except Exception as exc:  # pragma: no cover - safety net
            logger.exception("Unexpected weather fetch failure")
            return FetchResult.failure(ErrorKind.TRANSPORT, str(exc))

    def generate_advice(self, snapshot: WeatherSnapshot) -> FetchResult[str]:
        prompt = build_advice_prompt(snapshot)
        try:
            raw = self.source.generate_text(prompt)
        except BabymapError as exc:
            logger.error("Advice generation failed: %s", exc)
            return FetchResult.failure(exc.kind, str(exc))
        except Exception as exc:  # pragma: no cover - safety net
            logger.exception("Unexpected advice generation failure")
            return FetchResult.failure(ErrorKind.TRANSPORT, str(exc))
        try:
            return FetchResult.success(validate_advice_output(raw))
        except ValueError as exc:
            logger.warning("Rejected generated advice: %s", exc, extra={"raw": (raw or "")[:100]})
            return FetchResult.failure(ErrorKind.PARSE, str(exc))

    def fetch(self, coordinate: Coordinate) -> tuple[FetchResult[WeatherSnapshot], FetchResult[str]]:
        """Weather result plus advice result; advice is skipped when weather failed."""
        weather = self.fetch_weather(coordinate)
        if not weather.ok:
            return weather, FetchResult.failure(weather.error, "weather unavailable")
        return weather, self.generate_advice(weather.value)

    def describe(self, coordinate: Coordinate) -> WeatherAdvice:
        """Weather line and advice for `coordinate`. Never raises."""
        weather, advice = self.fetch(coordinate)
        return WeatherAdvice(
            weather_line=weather_line_or_none(weather),
            advice=advice_or_fallback(advice, self.rng),
        )
