"""
AI Debate routes — session issue, trigger, and live updates.

ENDPOINTS:
- POST /ai-debate/api/sessions                      → issue a session id
- POST /ai-debate/api/sessions/{session_id}/start   → trigger the debate (HTTP)
- GET  /ai-debate/api/sessions/{session_id}         → snapshot of a running debate
- POST /ai-debate/api/start-debate                  → run a whole debate in one request
- WS   /ws/ai-debate/{session_id}                   → subscribe + trigger, then stream turns

FLOW:
1. POST /ai-debate/api/sessions {"topic": "...", "turns": "3"} → {"sessionId": "..."}
2. Open WS /ws/ai-debate/{sessionId} (this subscribes to the session topic)
3. Send {"sessionId": "...", "topic": "...", "turns": "3"} over the socket
   (or POST .../start) to begin
4. Receive {"sessionId", "speaker", "message", "isCompleted"} frames until
   isCompleted is true; the server then closes the socket
"""

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request, WebSocket, WebSocketDisconnect, status

from app.models.schemas import (
    DebateLogEntry,
    DebateRunResponse,
    DebateTriggerMessage,
    FailureResponse,
    SessionIssuedResponse,
    SessionSnapshotResponse,
    StartDebateRequest,
    TurnEventMessage,
)
from app.services.debate import (
    DebateOrchestrator,
    DebateRequest,
    DebateSessionRegistry,
    InMemoryUpdateChannel,
    InvalidDebateRequest,
    SessionAlreadyActive,
    SessionIssuer,
    Subscription,
    TurnEvent,
)
from app.services.debate.models import ERROR_SPEAKER

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai-debate/api", tags=["ai-debate"])
ws_router = APIRouter(tags=["ai-debate"])


# =============================================================================
# DEPENDENCIES (built once in the lifespan, stored on app.state)
# =============================================================================

def get_issuer(request: Request) -> SessionIssuer:
    return request.app.state.issuer


def get_orchestrator(request: Request) -> DebateOrchestrator:
    return request.app.state.orchestrator


def get_registry(request: Request) -> DebateSessionRegistry:
    return request.app.state.registry


def _to_debate_request(topic: str, turns) -> DebateRequest:
    return DebateRequest(topic=topic, turns=None if turns is None else str(turns))


# =============================================================================
# HTTP ENDPOINTS
# =============================================================================

@router.post(
    "/sessions",
    response_model=SessionIssuedResponse,
    responses={400: {"model": FailureResponse}},
)
async def create_session(body: StartDebateRequest, request: Request) -> SessionIssuedResponse:
    """
    Issue a debate session id. No model is called here.

    Example:
        POST /ai-debate/api/sessions
        {"topic": "should pineapple go on pizza", "turns": "3"}

        Returns {"success": true, "sessionId": "3f2a...", "turnLimit": 3}
    """
    issued = get_issuer(request).issue(_to_debate_request(body.topic, body.turns))
    return SessionIssuedResponse(session_id=issued.session_id, turn_limit=issued.turn_limit)


@router.post(
    "/sessions/{session_id}/start",
    response_model=SessionIssuedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={400: {"model": FailureResponse}, 409: {"model": FailureResponse}},
)
async def start_session(
    session_id: str,
    body: DebateTriggerMessage,
    request: Request,
) -> SessionIssuedResponse:
    """
    Start the debate for an issued session in the background.

    Subscribe to the session's WebSocket first; turns published before the
    subscription exists are not replayed.
    """
    if body.session_id and body.session_id != session_id:
        raise InvalidDebateRequest("Session id in the body does not match the URL.")

    topic, turn_limit = get_issuer(request).validate(_to_debate_request(body.topic, body.turns))
    get_orchestrator(request).start(session_id, topic, turn_limit)
    return SessionIssuedResponse(session_id=session_id, turn_limit=turn_limit)


@router.get("/sessions/{session_id}", response_model=SessionSnapshotResponse)
def get_session(session_id: str, request: Request) -> SessionSnapshotResponse:
    """Snapshot of a running debate (404 once it has finished)."""
    snapshot = get_registry(request).snapshot(session_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"No running debate for session {session_id}")

    return SessionSnapshotResponse(
        session_id=snapshot["session_id"],
        topic=snapshot["topic"],
        turn_limit=snapshot["turn_limit"],
        state=snapshot["state"],
        transcript=[DebateLogEntry(**entry) for entry in snapshot["transcript"]],
    )


@router.post(
    "/start-debate",
    response_model=DebateRunResponse,
    responses={400: {"model": FailureResponse}},
)
async def run_debate(body: StartDebateRequest, request: Request) -> DebateRunResponse:
    """
    Run a whole debate inside this request and return the transcript.

    Turn events are still published on the session topic while it runs.
    A failed model call returns success=false with the turns produced so far.
    """
    issued = get_issuer(request).issue(_to_debate_request(body.topic, body.turns))
    result = await get_orchestrator(request).run(issued.session_id, issued.topic, issued.turn_limit)

    return DebateRunResponse(
        success=result.succeeded,
        message="AI debate completed." if result.succeeded else (result.error or "AI debate failed."),
        session_id=result.session_id,
        turn_limit=result.turn_limit,
        debate_log=[DebateLogEntry(speaker=e.speaker, message=e.message) for e in result.transcript],
    )


# =============================================================================
# WEBSOCKET: subscribe, trigger, stream
# =============================================================================

@ws_router.websocket("/ws/ai-debate/{session_id}")
async def debate_updates(websocket: WebSocket, session_id: str):
    """
    Stream one session's turn events to one client.

    The subscription is made before the handshake completes, so anything the
    client triggers after connecting is delivered. Trigger payloads may
    arrive over this socket at any time; the stream ends with the first
    completed event.
    """
    state = websocket.app.state
    channel: InMemoryUpdateChannel = state.channel
    subscription = channel.subscribe(channel.topic_for(session_id))

    try:
        await websocket.accept()
        forwarder = asyncio.create_task(_forward_events(websocket, subscription))
        reader = asyncio.create_task(_accept_triggers(websocket, session_id, subscription))

        done, pending = await asyncio.wait({forwarder, reader}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        if forwarder in done:
            error = forwarder.exception()
            if error is None:
                await websocket.close()
            elif not isinstance(error, WebSocketDisconnect):
                logger.error(f"Failed to stream debate {session_id}: {error}")
        else:
            error = reader.exception()
            if error is None:
                logger.info(f"Client left debate stream {session_id}")
            else:
                logger.error(f"Debate trigger reader failed for {session_id}: {error}")
    finally:
        channel.unsubscribe(subscription)


async def _forward_events(websocket: WebSocket, subscription: Subscription):
    async for event in subscription:
        frame = TurnEventMessage(
            session_id=event.session_id,
            speaker=event.speaker,
            message=event.message,
            is_completed=event.is_completed,
        )
        await websocket.send_json(frame.model_dump(by_alias=True))
        if event.is_completed:
            return


async def _accept_triggers(websocket: WebSocket, session_id: str, subscription: Subscription):
    """Handle trigger payloads until the client disconnects."""
    state = websocket.app.state

    while True:
        try:
            payload = await websocket.receive_json()
        except WebSocketDisconnect:
            return
        except (KeyError, TypeError, ValueError):
            # Binary frames and non-JSON text
            _reject(subscription, session_id, "Invalid debate trigger payload.")
            continue

        try:
            trigger = DebateTriggerMessage.model_validate(payload)
            if trigger.session_id and trigger.session_id != session_id:
                raise InvalidDebateRequest("Session id does not match this connection.")
            topic, turn_limit = state.issuer.validate(_to_debate_request(trigger.topic, trigger.turns))
            state.orchestrator.start(session_id, topic, turn_limit)
        except InvalidDebateRequest as e:
            _reject(subscription, session_id, str(e))
        except SessionAlreadyActive:
            # Already running: this socket is subscribed and will get its events
            logger.warning(f"Ignoring duplicate trigger for running debate {session_id}")
        except ValueError:
            _reject(subscription, session_id, "Invalid debate trigger payload.")


def _reject(subscription: Subscription, session_id: str, message: str):
    """Terminate only this client's stream with an Error event."""
    logger.info(f"Rejected debate trigger for {session_id}: {message}")
    subscription.deliver(TurnEvent(session_id, ERROR_SPEAKER, message, True))
