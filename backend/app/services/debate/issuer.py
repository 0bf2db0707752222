"""
Session Issuer — validates debate requests and mints session ids.

Issuing a session does not start anything. The client gets its id back
immediately, subscribes to the session's update topic, and only then
triggers the debate, so the first turn is never published to nobody.
"""

import logging
import re
import uuid
from dataclasses import dataclass

from app.services.debate.models import DebateRequest

logger = logging.getLogger(__name__)

_TURNS_PATTERN = re.compile(r"[+-]?[0-9]+")


class InvalidDebateRequest(ValueError):
    """The request can be corrected and retried by the caller."""


@dataclass(frozen=True)
class IssuedSession:
    session_id: str
    topic: str
    turn_limit: int


class SessionIssuer:
    """Turns a DebateRequest into a session id plus an effective turn limit."""

    def __init__(self, max_turns: int):
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self.max_turns = max_turns

    def validate(self, request: DebateRequest) -> tuple[str, int]:
        """
        Check a request and compute its effective turn limit.

        Returns:
            (topic, turn_limit) with turn_limit = min(requested, max_turns)

        Raises:
            InvalidDebateRequest: empty topic, non-numeric or non-positive turns
        """
        topic = (request.topic or "").strip()
        if not topic:
            raise InvalidDebateRequest("Please enter a debate topic.")

        requested = self.max_turns
        raw_turns = request.turns
        if raw_turns is not None and str(raw_turns).strip():
            text = str(raw_turns).strip()
            if not _TURNS_PATTERN.fullmatch(text):
                raise InvalidDebateRequest("Invalid number of debate turns.")
            requested = int(text)
            if requested <= 0:
                raise InvalidDebateRequest("The number of debate turns must be at least 1.")

        return topic, min(requested, self.max_turns)

    def issue(self, request: DebateRequest) -> IssuedSession:
        """Validate a request and mint a fresh session id for it."""
        topic, turn_limit = self.validate(request)
        session_id = uuid.uuid4().hex
        logger.info(
            f"Issued debate session {session_id} - topic: '{topic}', "
            f"requested turns: {request.turns}, effective turns: {turn_limit}"
        )
        return IssuedSession(session_id=session_id, topic=topic, turn_limit=turn_limit)
