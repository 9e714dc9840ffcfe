"""Degrade policies applied to fetch results.

No upstream failure reaches the user as an error: facilities degrade to an
empty layer, advice to a random static tip, and the weather line to "leave
whatever is shown".
"""
from __future__ import annotations

import random
from typing import List, Optional

from babymap.advice import FALLBACK_TIPS, format_weather_line, pick_fallback_tip
from babymap.domain import Facility, FetchResult, WeatherSnapshot
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="fallback_policy")


def facilities_or_empty(result: FetchResult[List[Facility]]) -> List[Facility]:
    if result.ok:
        return list(result.value or [])
    logger.warning("Facility fetch degraded to empty set", extra={"error": result.error.value, "detail": result.detail})
    return []


def advice_or_fallback(result: FetchResult[str], rng: random.Random | None = None) -> str:
    if result.ok and result.value:
        return result.value
    tip = pick_fallback_tip(rng, FALLBACK_TIPS)
    logger.warning(
        "Advice degraded to fallback tip",
        extra={"error": result.error.value if result.error else None, "detail": result.detail},
    )
    return tip


def weather_line_or_none(result: FetchResult[WeatherSnapshot]) -> Optional[str]:
    """Status line for a successful fetch; None means keep the previous line."""
    if result.ok and result.value is not None:
        return format_weather_line(result.value)
    return None
