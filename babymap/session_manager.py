"""Session manager facade over the session store."""
from typing import Optional

from babymap.config import settings
from babymap.session import MapSession
from babymap.session_store import InMemorySessionStore, SessionStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="session_manager")


def _init_store() -> SessionStore:
    """Initialize the backing session store based on configuration."""
    logger.debug("Initializing in-memory session store (ttl=%ss)", settings.session_ttl_seconds)
    return InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)


_store: SessionStore = _init_store()


def use_in_memory_store_for_tests(ttl_seconds: int = 3600) -> None:
    """Override store for tests to ensure isolation and determinism."""
    global _store
    _store = InMemorySessionStore(ttl_seconds=ttl_seconds)


def create_session(session: Optional[MapSession] = None) -> MapSession:
    """Create (or adopt) a session, persist it, and return it."""
    session = session or MapSession.create()
    _store.create_session(session)
    logger.info("Created session %s", session.session_id)
    return session


def get_session(session_id: str) -> Optional[MapSession]:
    """Fetch a session by ID, refreshing TTL if applicable."""
    return _store.get_session(session_id)


def delete_session(session_id: str):
    """Delete a session by ID."""
    return _store.delete_session(session_id)


def clear_sessions():
    """Clear all sessions from the backing store (dev/testing)."""
    return _store.clear()
