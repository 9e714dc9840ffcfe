"""HTTP API for the caregiver facility map."""

import hmac

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel

from .config import settings
from .data_sources import build_data_source
from .domain import Coordinate
from .errors import GeocodeNotFoundError, PermissionDeniedError, TransportError
from .geolocation import PERMISSION_NOTICE, GeolocationReport
from .orchestrator import RefreshOrchestrator
from .session import MapSession, SessionView
from .session_manager import create_session, get_session
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="babymap/api")

NOT_FOUND_NOTICE = "場所が見つかりませんでした"
UPSTREAM_NOTICE = "検索サービスに接続できませんでした"


def require_api_key(x_api_key: str | None = Header(default=None)):
    """Validate X-API-Key against the configured static key; open when none is configured."""
    if not settings.api_key:
        return

    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if hmac.compare_digest(str(x_api_key), str(settings.api_key)):
        return

    logger.debug("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


router = APIRouter(dependencies=[Depends(require_api_key)])
DATA_SOURCE = build_data_source(settings)


class SearchRequest(BaseModel):
    """Destination search box contents."""
    query: str


def _orchestrator(session: MapSession) -> RefreshOrchestrator:
    return RefreshOrchestrator(session, DATA_SOURCE)


def _require_session(session_id: str) -> MapSession:
    session = get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Unknown session ID")
    return session


@router.post("/session/start", response_model=SessionView)
async def start_session():
    """Create a session and run the initial load at the default location."""
    session = create_session()
    return await _orchestrator(session).initial_load()


@router.get("/session/{session_id}", response_model=SessionView)
def read_session(session_id: str):
    """Return the current map state and text fields."""
    return _require_session(session_id).view()


@router.post("/session/{session_id}/search", response_model=SessionView)
async def search_destination(session_id: str, req: SearchRequest):
    """Geocode a destination and refresh there (advice first, then facilities)."""
    session = _require_session(session_id)
    try:
        return await _orchestrator(session).search_destination(req.query)
    except GeocodeNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_NOTICE)
    except TransportError as exc:
        logger.error("Geocoding failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=UPSTREAM_NOTICE)


@router.post("/session/{session_id}/around", response_model=SessionView)
async def search_around(session_id: str, center: Coordinate):
    """Refresh facilities and advice around the map's current center."""
    session = _require_session(session_id)
    return await _orchestrator(session).search_around(center)


@router.post("/session/{session_id}/locate", response_model=SessionView)
async def current_location(session_id: str, report: GeolocationReport):
    """Refresh at the browser-reported position."""
    session = _require_session(session_id)
    try:
        return await _orchestrator(session).locate(report)
    except PermissionDeniedError as exc:
        logger.info("Geolocation unavailable: %s", exc.reason)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=PERMISSION_NOTICE)
