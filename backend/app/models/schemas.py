"""
Pydantic schemas for API request/response validation.

These define the shape of data that goes in and out of the API.
Field names on the wire are camelCase (sessionId, isCompleted) because the
browser client was written against those names; Python code uses snake_case
and the aliases do the translation.

FLOW OVERVIEW:
==============
1. Client sends StartDebateRequest to POST /ai-debate/api/sessions
2. Server answers SessionIssuedResponse (sessionId + effective turn limit)
3. Client opens the WebSocket for that session and sends DebateTriggerMessage
4. Server streams TurnEventMessage frames until one has isCompleted=true
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# MENU SCHEMAS
# =============================================================================

class MenuResponse(BaseModel):
    """
    A navigation sidebar entry as returned by the API.

    USED BY: GET /api/menus
    """
    model_config = ConfigDict(from_attributes=True)  # Allows creating from SQLAlchemy model

    id: int
    name: str
    path: str
    icon: str | None = None
    display_order: int
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


# =============================================================================
# DEBATE REQUEST SCHEMAS
# =============================================================================
#
# Validation of topic and turns is done by the SessionIssuer, not pydantic,
# so that the client gets the same human-readable message on every path
# (HTTP session creation, HTTP trigger, WebSocket trigger).
#

class StartDebateRequest(BaseModel):
    """
    Request body for creating a debate session.

    USED BY: POST /ai-debate/api/sessions, POST /ai-debate/api/start-debate
    Example:
        {"topic": "should pineapple go on pizza", "turns": "3"}
    """
    topic: str = ""
    turns: str | int | None = Field(
        default=None,
        description="Requested number of turns; capped by the server maximum",
    )


class DebateTriggerMessage(BaseModel):
    """
    Payload that starts a debate for an already issued session.

    USED BY: WebSocket /ws/ai-debate/{session_id}, POST /ai-debate/api/sessions/{session_id}/start
    """
    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(default=None, alias="sessionId")
    topic: str = ""
    turns: str | int | None = None


# =============================================================================
# DEBATE RESPONSE SCHEMAS
# =============================================================================

class SessionIssuedResponse(BaseModel):
    """Returned when a session is issued or triggered."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    session_id: str = Field(alias="sessionId")
    turn_limit: int = Field(
        alias="turnLimit",
        description="Turn count that will actually run after the server cap",
    )


class TurnEventMessage(BaseModel):
    """
    One frame on the update channel.

    The stream for a session always ends with exactly one frame whose
    isCompleted is true; speaker "System" means success, "Error" failure.
    """
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    speaker: str
    message: str
    is_completed: bool = Field(alias="isCompleted")


class DebateLogEntry(BaseModel):
    speaker: str
    message: str


class DebateRunResponse(BaseModel):
    """
    Result of the synchronous debate endpoint.

    USED BY: POST /ai-debate/api/start-debate
    """
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    session_id: str = Field(alias="sessionId")
    turn_limit: int = Field(alias="turnLimit")
    debate_log: list[DebateLogEntry] = Field(default_factory=list, alias="debateLog")


class SessionSnapshotResponse(BaseModel):
    """Diagnostic view of a running session."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    topic: str
    turn_limit: int = Field(alias="turnLimit")
    state: str
    transcript: list[DebateLogEntry]


class FailureResponse(BaseModel):
    """Body of every 4xx response produced by the debate API."""
    success: bool = False
    message: str
