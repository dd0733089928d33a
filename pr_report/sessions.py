"""In-memory store of logged-in sessions."""

import logging
import secrets
from datetime import datetime, timedelta
from threading import Lock
from typing import Any, Dict, Optional

from .models import AuthenticatedIdentity, Session


def generate_token() -> str:
    """Return 32 random bytes, hex encoded (64 characters)."""
    return secrets.token_hex(32)


class SessionStore:
    """Maps session IDs to the identity and OAuth token of a logged-in user.

    All access goes through ``create``, ``lookup`` and ``delete`` under a
    single lock. Sessions never expire unless ``ttl_seconds`` is given; an
    abandoned session otherwise stays in memory until the process exits.
    """

    def __init__(self, ttl_seconds: Optional[int] = None):
        """Initialize the store.

        Args:
            ttl_seconds: Session lifetime in seconds, None for no expiry
        """
        self.ttl = timedelta(seconds=ttl_seconds) if ttl_seconds else None
        self._sessions: Dict[str, Session] = {}
        self._lock = Lock()

    def _is_expired(self, session: Session, now: datetime) -> bool:
        return self.ttl is not None and now - session.created_at >= self.ttl

    def create(self, identity: AuthenticatedIdentity, token: Dict[str, Any]) -> str:
        """Store a new session and return its ID."""
        session_id = generate_token()
        session = Session(session_id=session_id, identity=identity, token=token)
        with self._lock:
            self._sessions[session_id] = session
        logging.info(f"Created session for user '{identity.login}'")
        return session_id

    def lookup(self, session_id: Optional[str]) -> Optional[Session]:
        """Return the session for ``session_id``, or None if unknown or expired."""
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None and self._is_expired(session, datetime.now()):
                del self._sessions[session_id]
                logging.info(f"Session for user '{session.identity.login}' expired")
                return None
        return session

    def delete(self, session_id: Optional[str]) -> None:
        """Remove a session. Unknown IDs are ignored."""
        if not session_id:
            return
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            logging.info(f"Deleted session for user '{session.identity.login}'")

    def sweep_expired(self) -> int:
        """Remove all expired sessions.

        Returns:
            Number of sessions removed
        """
        if self.ttl is None:
            return 0
        now = datetime.now()
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if self._is_expired(s, now)]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logging.debug(f"Swept {len(expired)} expired session(s)")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions
