"""Prompt construction, reply validation and the static tip pool for advice."""

from __future__ import annotations

import random
from typing import Sequence

from babymap.domain import WeatherSnapshot


FALLBACK_TIPS: tuple[str, ...] = (
    "娘さんの靴下、脱げてないか見てあげてね。",
    "パパ、たまには深呼吸してリラックス！",
    "目的地まであと少し。娘さんと楽しんで！",
)

BANNED_PHRASES: tuple[str, ...] = ("水分補給",)

ADVICE_MAX_CHARS = 30


def format_weather_line(snapshot: WeatherSnapshot) -> str:
    """Status line shown above the map, e.g. `🌡 23℃ / clear sky (湿度55%)`."""
    return f"🌡 {snapshot.temperature_c}℃ / {snapshot.description} (湿度{snapshot.humidity_percent}%)"


def build_advice_prompt(snapshot: WeatherSnapshot, *, max_chars: int = ADVICE_MAX_CHARS) -> str:
    """Ask for one short carry-item, clothing, or encouragement tip for the weather."""
    banned = "」「".join(BANNED_PHRASES)
    return "\n".join([
        "あなたは育児経験豊富なアドバイザーです。",
        f"場所の状況：気温{snapshot.temperature_c}度、天気は{snapshot.description}、湿度は{snapshot.humidity_percent}%。",
        "ベビーカーで娘と外出中のパパへ、今の状況にぴったりの「持ち物」「娘の服装」「パパへのねぎらい」のいずれかを、"
        f"{max_chars}文字以内で親しみやすく教えて。",
        f"「{banned}」という言葉は使わずに、毎回違う視点でアドバイスしてください。",
    ])


def _strip_markdown_fences(text: str) -> str:
    """Remove surrounding Markdown code fences from text."""
    t = text.strip()
    if not t.startswith("```"):
        return t
    lines = t.splitlines()
    if lines and lines[0].strip().startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def validate_advice_output(raw_text: str, banned_phrases: Sequence[str] | None = None) -> str:
    """
    Clean a generated tip and reject replies we would not show.

    The model is told not to use the hydration phrase; it still does often
    enough that a reply containing it is rejected here and the caller falls
    back to a static tip instead.
    """
    banned = tuple(banned_phrases if banned_phrases is not None else BANNED_PHRASES)
    text = _strip_markdown_fences(raw_text or "")
    if not text:
        raise ValueError("Empty advice")
    if any(b in text for b in banned):
        raise ValueError("Banned phrasing detected")
    return text


def pick_fallback_tip(rng: random.Random | None = None, tips: Sequence[str] = FALLBACK_TIPS) -> str:
    """Uniformly random tip from the static pool."""
    return (rng or random).choice(tuple(tips))
