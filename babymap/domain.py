"""Domain vocabulary for the facility map: coordinates, facilities, weather and
the explicit fetch result type that carries degrade-able failures.

Nothing here talks to the network; clients produce these values and the
refresh pipeline consumes them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class _StrictBaseModel(BaseModel):
    """Base model with strict extra handling."""

    model_config = ConfigDict(extra="forbid")


class _FrozenModel(_StrictBaseModel):
    """Immutable value object."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class FacilityCategory(str, Enum):
    """What kind of caregiver facility a POI is."""
    FEEDING = "feeding"
    ACCESSIBLE_TOILET = "accessible_toilet"
    DIAPER_CHANGE = "diaper_change"


class ErrorKind(str, Enum):
    """Failure classes shared by every upstream fetch."""
    NOT_FOUND = "not_found"
    TRANSPORT = "transport"
    PARSE = "parse"
    PERMISSION_DENIED = "permission_denied"


class RefreshTrigger(str, Enum):
    """The user-facing event that asked for a refresh."""
    INITIAL_LOAD = "initial_load"
    DESTINATION_SEARCH = "destination_search"
    SEARCH_AROUND = "search_around"
    CURRENT_LOCATION = "current_location"


class Coordinate(_FrozenModel):
    """WGS84 point."""
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)

    def as_pair(self) -> tuple[float, float]:
        return self.latitude, self.longitude


class Facility(_FrozenModel):
    """A caregiver facility derived from one POI element."""
    position: Coordinate
    category: FacilityCategory
    name: Optional[str] = None
    amenity: Optional[str] = None
    distance_meters: int = Field(ge=0)
    walk_minutes: int = Field(ge=0)


class WeatherSnapshot(_FrozenModel):
    """Current weather reduced to what the status line and prompt need."""
    temperature_c: int
    description: str
    humidity_percent: int


class WeatherAdvice(_FrozenModel):
    """Outcome of a weather/advice cycle. `weather_line` is None when weather could not be read."""
    weather_line: Optional[str] = None
    advice: str


T = TypeVar("T")


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Either a value or an ErrorKind, never both.

    Upstream clients raise; the components that wrap them return one of
    these so the degrade policy can be applied (and tested) on its own.
    """
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    detail: str = ""

    @classmethod
    def success(cls, value: T) -> "FetchResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, detail: str = "") -> "FetchResult[T]":
        return cls(error=error, detail=detail)

    @property
    def ok(self) -> bool:
        return self.error is None
