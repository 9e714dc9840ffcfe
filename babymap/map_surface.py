"""Server-side map state: viewport, the single user marker, and the facility layer.

The browser page draws exactly what `MapSurface.snapshot()` returns. All
mutation is replace-or-clear; nothing is diffed incrementally.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from babymap.domain import Coordinate, Facility, FacilityCategory

FEEDING_ICON = "🍼"
TOILET_ICON = "🚽"
USER_ICON = "🚶"
DEFAULT_FACILITY_NAME = "赤ちゃん休憩室"

NAVIGATION_URL = "https://www.google.com/maps/dir/?api=1&destination={lat},{lon}"


def navigation_url(position: Coordinate) -> str:
    """Turn-by-turn directions link for an external maps app."""
    return NAVIGATION_URL.format(lat=position.latitude, lon=position.longitude)


def facility_icon(category: FacilityCategory) -> str:
    return FEEDING_ICON if category == FacilityCategory.FEEDING else TOILET_ICON


class UserMarker(BaseModel):
    position: Coordinate
    label: str
    icon: str = USER_ICON


class FacilityMarker(BaseModel):
    """A facility plus the display strings its popup needs."""
    facility: Facility
    icon: str
    title: str
    distance_text: str
    navigation_url: str

    @classmethod
    def from_facility(cls, facility: Facility) -> "FacilityMarker":
        return cls(
            facility=facility,
            icon=facility_icon(facility.category),
            title=facility.name or DEFAULT_FACILITY_NAME,
            distance_text=f"約{facility.distance_meters}m (徒歩{facility.walk_minutes}分)",
            navigation_url=navigation_url(facility.position),
        )


class Viewport(BaseModel):
    center: Coordinate
    zoom: int


class MapState(BaseModel):
    """Serializable view of everything rendered on the map."""
    viewport: Viewport
    user_marker: Optional[UserMarker] = None
    facilities: List[FacilityMarker] = Field(default_factory=list)


class MapSurface:
    """Owns the viewport, at most one user marker, and one facility layer."""

    def __init__(self, center: Coordinate, zoom: int) -> None:
        self.viewport = Viewport(center=center, zoom=zoom)
        self._user_marker: Optional[UserMarker] = None
        self._facility_layer: List[FacilityMarker] = []

    @property
    def user_marker(self) -> Optional[UserMarker]:
        return self._user_marker

    @property
    def facility_markers(self) -> List[FacilityMarker]:
        return list(self._facility_layer)

    def set_view(self, center: Coordinate, zoom: int | None = None) -> None:
        self.viewport = Viewport(center=center, zoom=self.viewport.zoom if zoom is None else zoom)

    def place_user_marker(self, position: Coordinate, label: str) -> UserMarker:
        """Replace the user marker; the previous one (if any) is torn down."""
        self._user_marker = UserMarker(position=position, label=label)
        return self._user_marker

    def clear_user_marker(self) -> None:
        self._user_marker = None

    def clear_facilities(self) -> None:
        self._facility_layer = []

    def replace_facilities(self, facilities: List[Facility]) -> None:
        """Clear the layer, then render the new set."""
        self.clear_facilities()
        self._facility_layer = [FacilityMarker.from_facility(f) for f in facilities]

    def snapshot(self) -> MapState:
        return MapState(
            viewport=self.viewport,
            user_marker=self._user_marker,
            facilities=list(self._facility_layer),
        )
