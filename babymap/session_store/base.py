"""Shared protocol for session storage backends."""

from typing import Optional, Protocol

from babymap.session import MapSession


class SessionStore(Protocol):
    """Protocol for session storage backends."""
    def create_session(self, session: MapSession) -> str:
        """Persist a new session and return its id."""

    def get_session(self, session_id: str) -> Optional[MapSession]:
        """Fetch a session by id, returning None if missing or expired."""

    def delete_session(self, session_id: str) -> None:
        """Delete a session without raising if it is absent."""

    def clear(self) -> None:
        """Clear all stored sessions."""
