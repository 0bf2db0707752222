import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.debate_routes import router as debate_router, ws_router as debate_ws_router
from app.api.routes import router as api_router
from app.config import get_settings
from app.database import engine, Base
from app.services.debate import (
    DebateOrchestrator,
    DebateSessionRegistry,
    InMemoryUpdateChannel,
    InvalidDebateRequest,
    SessionAlreadyActive,
    SessionIssuer,
    build_default_personas,
)
from app.services.model_invoker import ModelInvoker

# Import models so SQLAlchemy knows about them when creating tables
from app.models.menu import Menu  # noqa: F401

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# LIFESPAN: Startup and Shutdown Logic
# =============================================================================
#
# Startup builds the debate subsystem once and hangs it on app.state:
# - registry: live sessions by id (the only shared mutable state)
# - channel: per-session publish/subscribe used by the WebSocket route
# - invoker: OpenRouter client (API key is checked per call, not here)
# - issuer + orchestrator
#
# Shutdown cancels running debates first (each one still sends its final
# Error event and leaves the registry), then closes HTTP and DB connections.
#
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""

    # === STARTUP ===
    async with engine.begin() as conn:
        # Create all database tables defined in our models
        # If tables already exist, this does nothing (safe to run repeatedly)
        await conn.run_sync(Base.metadata.create_all)

    registry = DebateSessionRegistry()
    channel = InMemoryUpdateChannel()
    invoker = ModelInvoker(settings)

    app.state.registry = registry
    app.state.channel = channel
    app.state.invoker = invoker
    app.state.issuer = SessionIssuer(max_turns=settings.debate_max_turns)
    app.state.orchestrator = DebateOrchestrator(
        invoker=invoker,
        registry=registry,
        channel=channel,
        personas=build_default_personas(settings),
        max_output_tokens=settings.debate_max_tokens,
        temperature=settings.debate_temperature,
        turn_delay_seconds=settings.debate_turn_delay_seconds,
    )

    if not settings.openrouter_api_key:
        logger.warning("OPENROUTER_API_KEY is not set; debates will fail at the first turn")

    # === YIELD (server is now running and handling requests) ===
    yield

    # === SHUTDOWN ===
    await app.state.orchestrator.shutdown()
    await invoker.close()
    await engine.dispose()


app = FastAPI(
    title="Toolbox AI Debate",
    description="Two AI personas debate a topic; turns stream to the browser over WebSocket",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
app.include_router(debate_router)
app.include_router(debate_ws_router)


# =============================================================================
# ERROR RESPONSES
# =============================================================================
#
# Same body shape on every failure so the page script can show "message".
#

@app.exception_handler(InvalidDebateRequest)
async def invalid_debate_request_handler(request: Request, exc: InvalidDebateRequest):
    return JSONResponse(status_code=400, content={"success": False, "message": str(exc)})


@app.exception_handler(SessionAlreadyActive)
async def session_already_active_handler(request: Request, exc: SessionAlreadyActive):
    return JSONResponse(status_code=409, content={"success": False, "message": str(exc)})


@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    return {
        "status": "healthy",
        "active_debates": orchestrator.active_tasks if orchestrator else 0,
    }
