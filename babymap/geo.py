"""Straight-line distance and walking-time estimates."""
from __future__ import annotations

import math

from babymap.domain import Coordinate

# Same mean radius Leaflet uses for map.distance().
EARTH_RADIUS_M = 6_371_000.0
WALKING_METERS_PER_MINUTE = 80


def haversine_meters(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates, in metres."""
    lat1_r, lon1_r = math.radians(a.latitude), math.radians(a.longitude)
    lat2_r, lon2_r = math.radians(b.latitude), math.radians(b.longitude)

    dlat = lat2_r - lat1_r
    dlon = lon2_r - lon1_r

    h = (math.sin(dlat / 2) ** 2
         + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlon / 2) ** 2)
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def rounded_distance_meters(a: Coordinate, b: Coordinate) -> int:
    """Distance rounded half-up to whole metres, as shown in popups."""
    return int(math.floor(haversine_meters(a, b) + 0.5))


def walk_minutes(distance_meters: int, meters_per_minute: int = WALKING_METERS_PER_MINUTE) -> int:
    """Minutes on foot, rounded up."""
    if meters_per_minute <= 0:
        raise ValueError("meters_per_minute must be positive")
    return math.ceil(distance_meters / meters_per_minute)
