"""Exception hierarchy for babymap."""

from __future__ import annotations

from babymap.domain import ErrorKind


class BabymapError(Exception):
    """Base exception for all babymap errors."""

    kind: ErrorKind = ErrorKind.TRANSPORT


class GeocodeNotFoundError(BabymapError):
    """The geocoder returned no match for the query."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"No location found for {query!r}")


class TransportError(BabymapError):
    """HTTP-level failure (network, non-2xx status)."""

    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class ResponseFormatError(TransportError):
    """Upstream answered but the body was not the JSON shape we expect."""

    kind = ErrorKind.PARSE


class PermissionDeniedError(BabymapError):
    """The browser could not (or was not allowed to) report a position."""

    kind = ErrorKind.PERMISSION_DENIED

    def __init__(self, reason: str = "") -> None:
        self.reason = reason
        super().__init__(f"Geolocation unavailable: {reason or 'denied'}")
