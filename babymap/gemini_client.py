"""Thin client for the Gemini generateContent API."""

import requests

from .config import settings
from .errors import ResponseFormatError, TransportError
from utils.logging_utils import get_tagged_logger, mask_secret_url

logger = get_tagged_logger(__name__, tag="gemini_client")


class GeminiClient:
    """Minimal single-prompt client; no retries."""
    def __init__(self, api_key: str | None = None, model: str | None = None, base_url: str | None = None):
        """Initialize client configuration from settings, with optional overrides."""
        self.api_key = api_key if api_key is not None else (settings.gemini_api_key or "")
        self.model = model or settings.gemini_model
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent?key={self.api_key}"

    def generate(self, prompt: str) -> str:
        """Send one text prompt and return the first candidate's first text part."""
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            r = requests.post(self.url, json=payload, timeout=settings.http_timeout_seconds)
        except requests.exceptions.RequestException as exc:
            message = f"Gemini POST failed: {type(exc).__name__} ({mask_secret_url(self.url)})"
            logger.warning(message)
            raise TransportError(message, endpoint="gemini") from exc

        if r.status_code != 200:
            error_text = (r.text or "")[:200]
            raise TransportError(
                f"Gemini POST failed with status {r.status_code}: {error_text} (model={self.model})",
                status_code=r.status_code,
                endpoint="gemini",
            )

        try:
            data = r.json()
        except ValueError as exc:
            raise ResponseFormatError(f"Gemini returned non-JSON response: {r.text[:200]}", endpoint="gemini") from exc

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ResponseFormatError(f"Gemini response has no candidate text: {str(data)[:200]}", endpoint="gemini") from exc
        logger.debug("Gemini reply: %s", text[:200])
        return str(text)


def generate_text(prompt: str) -> str:
    """Module-level entry point bound into the data source bundle."""
    return GeminiClient().generate(prompt)
