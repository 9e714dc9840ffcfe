"""Overpass QL query construction and execution for caregiver facilities."""
from __future__ import annotations

from typing import Any, Dict, List

import requests

from babymap.config import settings
from babymap.data_sources.http import request_json
from babymap.domain import Coordinate
from babymap.errors import ResponseFormatError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="overpass_client")

session = requests.Session()

# Each selector is applied to nodes and to ways (ways resolve via `out center`).
FACILITY_SELECTORS = (
    '["amenity"~"baby_feeding|diaper_change"]',
    '["changing_table"="yes"]',
    '["amenity"="toilets"]["wheelchair"="yes"]',
)
ELEMENT_TYPES = ("node", "way")


def build_facility_query(center: Coordinate, radius_meters: int, *, timeout_seconds: int = 30) -> str:
    """Return the Overpass QL union for facilities within `radius_meters` of `center`."""
    around = f"(around:{radius_meters},{center.latitude},{center.longitude})"
    statements = [
        f"  {element}{selector}{around};"
        for element in ELEMENT_TYPES
        for selector in FACILITY_SELECTORS
    ]
    return "\n".join([
        f"[out:json][timeout:{timeout_seconds}];",
        "(",
        *statements,
        ");",
        "out center;",
    ])


def fetch_elements(query: str, *, url: str | None = None) -> List[Dict[str, Any]]:
    """Run an Overpass query and return its `elements` list."""
    logger.debug("Overpass query:\n%s", query)
    data = request_json(
        session,
        "GET",
        url or settings.overpass_url,
        endpoint="overpass",
        params={"data": query},
        headers={"User-Agent": settings.user_agent},
        timeout=settings.http_timeout_seconds,
    )
    if not isinstance(data, dict) or not isinstance(data.get("elements"), list):
        raise ResponseFormatError("Overpass response has no elements list", endpoint="overpass")
    elements = data["elements"]
    logger.info("Overpass returned %d elements", len(elements))
    return elements
