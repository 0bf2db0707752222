# Database models and API schemas
from app.models.menu import Menu
from app.models.schemas import (
    MenuResponse,
    StartDebateRequest,
    DebateTriggerMessage,
    SessionIssuedResponse,
    TurnEventMessage,
    DebateRunResponse,
    FailureResponse,
)

__all__ = [
    "Menu",
    "MenuResponse",
    "StartDebateRequest",
    "DebateTriggerMessage",
    "SessionIssuedResponse",
    "TurnEventMessage",
    "DebateRunResponse",
    "FailureResponse",
]
