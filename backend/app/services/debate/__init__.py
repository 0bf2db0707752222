"""
Debate Module — two AI personas argue a topic, turn by turn.

A client asks for a session, subscribes to the session's update topic, and
triggers the debate. The orchestrator then alternates between the two
personas, publishing every turn as it is generated and finishing with one
completed event.

COMPONENTS:
- SessionIssuer: validates requests, mints session ids
- DebateOrchestrator: the turn-by-turn state machine
- DebateSessionRegistry: live sessions by id
- InMemoryUpdateChannel: per-session publish/subscribe
- build_default_personas: the two configured debaters

USAGE:
    from app.services.debate import DebateOrchestrator, SessionIssuer

    issued = issuer.issue(DebateRequest(topic="...", turns="3"))
    subscription = channel.subscribe(channel.topic_for(issued.session_id))
    orchestrator.start(issued.session_id, issued.topic, issued.turn_limit)
"""

# Main entry points
from app.services.debate.orchestrator import (
    DebateOrchestrator,
    build_prompt,
)
from app.services.debate.issuer import (
    InvalidDebateRequest,
    IssuedSession,
    SessionIssuer,
)

# Data models
from app.services.debate.models import (
    DebateRequest,
    DebateResult,
    DebateSession,
    DebateState,
    Persona,
    TranscriptEntry,
    TurnEvent,
)

# Components
from app.services.debate.registry import DebateSessionRegistry, SessionAlreadyActive
from app.services.debate.channel import InMemoryUpdateChannel, Subscription
from app.services.debate.personas import build_default_personas

# Abstract bases
from app.services.debate.protocols import BaseModelInvoker, BaseUpdateChannel

__all__ = [
    # Main entry points
    "DebateOrchestrator",
    "build_prompt",
    "SessionIssuer",
    "IssuedSession",
    "InvalidDebateRequest",
    # Data models
    "DebateRequest",
    "DebateResult",
    "DebateSession",
    "DebateState",
    "Persona",
    "TranscriptEntry",
    "TurnEvent",
    # Components
    "DebateSessionRegistry",
    "SessionAlreadyActive",
    "InMemoryUpdateChannel",
    "Subscription",
    "build_default_personas",
    # Abstract bases
    "BaseModelInvoker",
    "BaseUpdateChannel",
]
