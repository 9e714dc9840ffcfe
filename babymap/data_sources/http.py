"""Shared request helper that turns requests failures into babymap errors."""
from __future__ import annotations

from typing import Any

import requests

from babymap.errors import ResponseFormatError, TransportError
from utils.logging_utils import get_tagged_logger, mask_secret_url

logger = get_tagged_logger(__name__, tag="data_sources/http")


def request_json(
    session: requests.Session,
    method: str,
    url: str,
    *,
    endpoint: str,
    timeout: float | None = None,
    **kwargs: Any,
) -> Any:
    """Issue a request and return the decoded JSON body.

    Raises TransportError for network errors and non-2xx statuses and
    ResponseFormatError when the body is not JSON.
    """
    try:
        resp = session.request(method, url, timeout=timeout, **kwargs)
    except requests.exceptions.RequestException as exc:
        # the exception text embeds the full request URL, credentials included
        reason = type(exc).__name__
        logger.warning("%s request failed: %s", endpoint, reason, extra={"url": mask_secret_url(url)})
        raise TransportError(f"{endpoint} request failed: {reason}", endpoint=endpoint) from exc

    status_code = getattr(resp, "status_code", 200)
    if status_code >= 400:
        body = (getattr(resp, "text", "") or "")[:200]
        logger.warning("%s returned HTTP %s: %s", endpoint, status_code, body)
        raise TransportError(
            f"{endpoint} returned HTTP {status_code}",
            status_code=status_code,
            endpoint=endpoint,
        )

    try:
        return resp.json()
    except ValueError as exc:
        body = (getattr(resp, "text", "") or "")[:200]
        raise ResponseFormatError(
            f"{endpoint} returned non-JSON response: {body}",
            status_code=status_code,
            endpoint=endpoint,
        ) from exc
