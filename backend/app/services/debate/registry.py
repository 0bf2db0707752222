"""
Debate Session Registry — lookup of live debate sessions by id.

WHAT THIS DOES:
Maps session id → DebateSession for every debate that is currently running.
It is the only shared mutable state in the debate subsystem.

OWNERSHIP:
The registry is an observation surface, not an owner. The orchestration task
that put a session in is the only one that mutates or removes it, and
remove() can be told which session object the caller owns so a stale
caller never deletes somebody else's run.

LOCKING:
A threading.Lock guards the dict. Async handlers touch it from the event
loop, but sync FastAPI handlers run in a threadpool, so asyncio alone is not
enough. The lock is only held for dict operations, never across a model call.
"""

import logging
import threading
from typing import Optional

from app.services.debate.models import DebateSession

logger = logging.getLogger(__name__)


class SessionAlreadyActive(Exception):
    """Raised when a session id is registered while a run with that id is live."""

    def __init__(self, session_id: str):
        super().__init__(f"A debate is already running for session {session_id}")
        self.session_id = session_id


class DebateSessionRegistry:
    """Thread-safe map of running debate sessions."""

    def __init__(self):
        self._sessions: dict[str, DebateSession] = {}
        self._lock = threading.Lock()

    def put(self, session: DebateSession) -> None:
        """
        Register a session.

        Raises:
            SessionAlreadyActive: if a session with the same id is live
        """
        with self._lock:
            if session.session_id in self._sessions:
                raise SessionAlreadyActive(session.session_id)
            self._sessions[session.session_id] = session
        logger.debug(f"Registered debate session {session.session_id}")

    def get(self, session_id: str) -> Optional[DebateSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def snapshot(self, session_id: str) -> Optional[dict]:
        """
        Copy of a session for introspection.

        Safe to call from any thread while the owner keeps appending turns.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            return session.to_dict()

    def remove(self, session_id: str, session: Optional[DebateSession] = None) -> bool:
        """
        Remove a session. Removing an absent id is a no-op.

        Args:
            session_id: Id to remove
            session: If given, only remove when this exact object is registered

        Returns:
            True if an entry was removed
        """
        with self._lock:
            current = self._sessions.get(session_id)
            if current is None:
                return False
            if session is not None and current is not session:
                logger.warning(f"Refusing to remove session {session_id}: owned by another run")
                return False
            del self._sessions[session_id]
        logger.debug(f"Removed debate session {session_id}")
        return True

    def session_ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions
