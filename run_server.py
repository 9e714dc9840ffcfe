import os

import uvicorn

from babymap.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def check_credentials() -> None:
    """
    Warn about missing upstream keys. The service still starts: without
    them, weather lookups fail and the advice panel shows fallback tips.
    """
    if not settings.weather_api_key:
        logger.warning("BABYMAP_WEATHER_API_KEY is not set")
    if not settings.gemini_api_key:
        logger.warning("BABYMAP_GEMINI_API_KEY is not set")


if __name__ == "__main__":
    setup_logging(level=os.getenv("LOG_LEVEL", "INFO"), job_name="babymap")
    check_credentials()

    uvicorn.run(
        "babymap.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
