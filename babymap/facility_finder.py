"""Turn Overpass elements around a coordinate into Facilities."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from babymap.config import settings
from babymap.data_sources.base import UpstreamDataSource
from babymap.data_sources.overpass_client import build_facility_query
from babymap.domain import Coordinate, ErrorKind, Facility, FacilityCategory, FetchResult
from babymap.errors import BabymapError
from babymap.fallback_policy import facilities_or_empty
from babymap.geo import rounded_distance_meters, walk_minutes
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="facility_finder")


def classify(tags: Dict[str, str]) -> FacilityCategory:
    """Only `amenity=baby_feeding` is a feeding room; everything else is toilet/changing."""
    amenity = tags.get("amenity")
    if amenity == "baby_feeding":
        return FacilityCategory.FEEDING
    if amenity == "toilets":
        return FacilityCategory.ACCESSIBLE_TOILET
    return FacilityCategory.DIAPER_CHANGE


def element_position(element: Dict[str, Any]) -> Optional[Coordinate]:
    """Node coordinate if present, else the way's computed center."""
    if element.get("lat") is not None and element.get("lon") is not None:
        return Coordinate(latitude=element["lat"], longitude=element["lon"])
    center = element.get("center")
    if isinstance(center, dict) and center.get("lat") is not None and center.get("lon") is not None:
        return Coordinate(latitude=center["lat"], longitude=center["lon"])
    return None


def facilities_from_elements(
    center: Coordinate,
    elements: Iterable[Dict[str, Any]],
    *,
    meters_per_minute: int,
) -> List[Facility]:
    """Map elements to Facilities in response order."""
    out: List[Facility] = []
    for element in elements:
        position = element_position(element)
        if position is None:
            logger.debug("Skipping element without position: %s", element.get("id"))
            continue
        tags = element.get("tags") or {}
        distance = rounded_distance_meters(center, position)
        out.append(Facility(
            position=position,
            category=classify(tags),
            name=tags.get("name"),
            amenity=tags.get("amenity"),
            distance_meters=distance,
            walk_minutes=walk_minutes(distance, meters_per_minute),
        ))
    return out


class FacilityFinder:
    """Query caregiver facilities within a fixed radius of a coordinate."""

    def __init__(
        self,
        source: UpstreamDataSource,
        *,
        radius_meters: int | None = None,
        timeout_seconds: int | None = None,
        meters_per_minute: int | None = None,
    ) -> None:
        self.source = source
        self.radius_meters = radius_meters or settings.search_radius_meters
        self.timeout_seconds = timeout_seconds or settings.overpass_timeout_seconds
        self.meters_per_minute = meters_per_minute or settings.walking_meters_per_minute

    def fetch(self, center: Coordinate, radius_meters: int | None = None) -> FetchResult[List[Facility]]:
        """Run the query; upstream failures come back as an error result."""
        radius = radius_meters or self.radius_meters
        query = build_facility_query(center, radius, timeout_seconds=self.timeout_seconds)
        try:
            elements = self.source.facility_elements(query)
            facilities = facilities_from_elements(center, elements, meters_per_minute=self.meters_per_minute)
        except BabymapError as exc:
            logger.error("Facility search failed: %s", exc)
            return FetchResult.failure(exc.kind, str(exc))
        except (ValueError, TypeError, AttributeError) as exc:
            logger.error("Facility search returned unusable elements: %s", exc)
            return FetchResult.failure(ErrorKind.PARSE, str(exc))
        logger.info("Found %d facilities", len(facilities), extra={"radius_m": radius})
        return FetchResult.success(facilities)

    def find(self, center: Coordinate, radius_meters: int | None = None) -> List[Facility]:
        """Facilities around `center`; an empty list when the search fails."""
        return facilities_or_empty(self.fetch(center, radius_meters))
