"""Browser geolocation reports."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from babymap.domain import Coordinate
from babymap.errors import PermissionDeniedError

PERMISSION_NOTICE = "位置情報を許可してください"


class GeolocationReport(BaseModel):
    """Outcome of navigator.geolocation.getCurrentPosition as posted by the page."""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    error: Optional[str] = None


def coordinate_from_report(report: GeolocationReport) -> Coordinate:
    """Coordinate for a successful report; PermissionDeniedError otherwise."""
    if report.error:
        raise PermissionDeniedError(report.error)
    if report.latitude is None or report.longitude is None:
        raise PermissionDeniedError("position unavailable")
    try:
        return Coordinate(latitude=report.latitude, longitude=report.longitude)
    except ValueError as exc:
        raise PermissionDeniedError(f"invalid position: {exc}") from exc
