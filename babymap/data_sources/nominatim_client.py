"""Free-text place search against the Nominatim geocoding API."""
from __future__ import annotations

import requests

from babymap.config import settings
from babymap.data_sources.http import request_json
from babymap.domain import Coordinate
from babymap.errors import GeocodeNotFoundError, ResponseFormatError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="nominatim_client")

session = requests.Session()


def _first_coordinate(data, query: str) -> Coordinate:
    """Pull the first match's lat/lon strings out of a Nominatim response."""
    if not isinstance(data, list):
        raise ResponseFormatError("Nominatim response is not a list", endpoint="nominatim")
    if not data:
        raise GeocodeNotFoundError(query)
    first = data[0]
    try:
        return Coordinate(latitude=float(first["lat"]), longitude=float(first["lon"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise ResponseFormatError(f"Unusable Nominatim match: {first!r}", endpoint="nominatim") from exc


def resolve(query: str, *, url: str | None = None) -> Coordinate:
    """Resolve a place name to the coordinate of its best match.

    Blank queries raise GeocodeNotFoundError without calling the service.
    """
    query = (query or "").strip()
    if not query:
        raise GeocodeNotFoundError(query)

    params = {"format": "json", "q": query, "limit": 1}
    logger.info("Geocoding query", extra={"query": query})
    data = request_json(
        session,
        "GET",
        url or settings.nominatim_url,
        endpoint="nominatim",
        params=params,
        headers={"User-Agent": settings.user_agent},
        timeout=settings.http_timeout_seconds,
    )
    coordinate = _first_coordinate(data, query)
    logger.debug("Geocoded %r to %s", query, coordinate.as_pair())
    return coordinate
