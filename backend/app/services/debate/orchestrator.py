"""
Debate Orchestrator — Drives one AI vs AI debate from first turn to last.

WHAT THIS DOES:
Two personas take turns arguing a topic. Every generated turn is appended to
the session transcript and published on the session's update topic. The run
always ends with exactly one completed event: speaker "System" on success,
speaker "Error" on failure.

HOW IT WORKS:
1. Register the session in the registry
2. Turn 1: persona A, prompt = its instructions for the topic
3. Turn n: personas alternate A, B, A, B, ...; prompt = instructions plus
   the whole transcript so far as "Speaker: message" lines
4. After each turn: append, publish, optional pause
5. After turn_limit turns: publish the completion event
6. A failed model call publishes an Error event and ends the run (no retry)
7. Whatever happens, the session leaves the registry

Turns within a debate are strictly sequential: each prompt needs the full
transcript produced so far. Different debates run as independent asyncio
tasks and share nothing but the registry.

USAGE:
    orchestrator = DebateOrchestrator(invoker, registry, channel, personas)

    # Fire and forget (WebSocket / HTTP trigger)
    orchestrator.start(session_id, topic, turn_limit)

    # Or wait for the whole thing
    result = await orchestrator.run(session_id, topic, turn_limit)
"""

import asyncio
import logging
from typing import Sequence

from app.services.debate.models import (
    COMPLETION_MESSAGE,
    ERROR_SPEAKER,
    SYSTEM_SPEAKER,
    DebateResult,
    DebateSession,
    DebateState,
    Persona,
    TranscriptEntry,
    TurnEvent,
)
from app.services.debate.protocols import BaseModelInvoker, BaseUpdateChannel
from app.services.debate.registry import DebateSessionRegistry
from app.services.model_invoker import ModelInvocationError

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "debate cancelled"

_TERMINAL_STATES = (DebateState.COMPLETED, DebateState.FAILED)


def build_prompt(
    persona: Persona,
    topic: str,
    transcript: Sequence[TranscriptEntry],
) -> str:
    """
    Build the prompt for a persona's next turn.

    The first turn sees only the topic. Later turns get the full transcript
    replayed in order, so every prompt can be rebuilt from the transcript.
    """
    instructions = persona.instructions_for(topic)
    if not transcript:
        return instructions

    history = "\n".join(entry.render() for entry in transcript)
    return f"{instructions}\n\nDebate so far:\n{history}\n"


class DebateOrchestrator:
    """
    Runs debates and reports their progress on the update channel.

    One orchestrator serves the whole application; each debate is its own
    DebateSession and, when started with start(), its own asyncio task.
    """

    def __init__(
        self,
        invoker: BaseModelInvoker,
        registry: DebateSessionRegistry,
        channel: BaseUpdateChannel,
        personas: Sequence[Persona],
        max_output_tokens: int = 300,
        temperature: float = 0.7,
        turn_delay_seconds: float = 0.0,
    ):
        """
        Args:
            invoker: Turns prompts into text
            registry: Where live sessions are registered
            channel: Where turn events are published
            personas: Exactly two personas; the first one opens
            max_output_tokens: Token budget per turn
            temperature: Sampling temperature per turn
            turn_delay_seconds: Pause after each turn (0 disables)
        """
        if len(personas) != 2:
            raise ValueError(f"A debate needs exactly 2 personas, got {len(personas)}")
        self.invoker = invoker
        self.registry = registry
        self.channel = channel
        self.personas = tuple(personas)
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature
        self.turn_delay_seconds = turn_delay_seconds
        self._tasks: set[asyncio.Task] = set()

    @property
    def active_tasks(self) -> int:
        """Number of background debates still running."""
        return len(self._tasks)

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    def start(self, session_id: str, topic: str, turn_limit: int) -> asyncio.Task:
        """
        Start a debate in the background and return immediately.

        The session is registered before this returns, so a second trigger
        for the same id fails right away with SessionAlreadyActive.
        """
        session = self._open_session(session_id, topic, turn_limit)
        task = asyncio.create_task(self._drive(session), name=f"debate-{session_id}")
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._on_task_done(session, t))
        return task

    async def run(self, session_id: str, topic: str, turn_limit: int) -> DebateResult:
        """Run a debate in the caller's task and return its result."""
        session = self._open_session(session_id, topic, turn_limit)
        return await self._drive(session)

    async def shutdown(self):
        """Cancel every running debate and wait for them to clean up."""
        tasks = list(self._tasks)
        if not tasks:
            return
        logger.info(f"Cancelling {len(tasks)} running debates")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # =========================================================================
    # STATE MACHINE
    # =========================================================================

    def _open_session(self, session_id: str, topic: str, turn_limit: int) -> DebateSession:
        if turn_limit < 1:
            raise ValueError("turn_limit must be at least 1")
        session = DebateSession(session_id=session_id, topic=topic, turn_limit=turn_limit)
        self.registry.put(session)
        return session

    async def _drive(self, session: DebateSession) -> DebateResult:
        topic = self.channel.topic_for(session.session_id)
        session.state = DebateState.RUNNING
        logger.info(
            f"Debate started - session: {session.session_id}, "
            f"topic: '{session.topic}', turns: {session.turn_limit}"
        )

        try:
            await self._take_turns(session, topic)
        except ModelInvocationError as e:
            logger.error(f"Debate {session.session_id} stopped: {e}")
            return self._finish(session, topic, DebateState.FAILED, str(e))
        except asyncio.CancelledError:
            logger.warning(f"Debate {session.session_id} cancelled")
            self._finish(session, topic, DebateState.FAILED, CANCELLED_MESSAGE)
            raise
        except Exception as e:
            logger.exception(f"Unexpected error in debate {session.session_id}")
            return self._finish(session, topic, DebateState.FAILED, f"debate failed: {e}")
        else:
            return self._finish(session, topic, DebateState.COMPLETED)
        finally:
            self.registry.remove(session.session_id, session)
            logger.info(f"Debate finished - session: {session.session_id}, state: {session.state.value}")

    async def _take_turns(self, session: DebateSession, topic: str):
        for turn_index in range(session.turn_limit):
            persona = self.personas[turn_index % 2]
            prompt = build_prompt(persona, session.topic, session.transcript)

            try:
                message = await self.invoker.invoke(
                    persona.model_id,
                    prompt,
                    self.max_output_tokens,
                    self.temperature,
                )
            except ModelInvocationError as e:
                raise ModelInvocationError(
                    f"{persona.display_name} response generation failed: {e}"
                ) from e

            session.append(persona.display_name, message)
            self.channel.publish(
                topic,
                TurnEvent(
                    session_id=session.session_id,
                    speaker=persona.display_name,
                    message=message,
                    is_completed=False,
                ),
            )
            logger.debug(
                f"Debate {session.session_id} turn {turn_index + 1}/{session.turn_limit} "
                f"by {persona.display_name}"
            )

            if self.turn_delay_seconds > 0:
                await asyncio.sleep(self.turn_delay_seconds)

    def _finish(
        self,
        session: DebateSession,
        topic: str,
        state: DebateState,
        error: str | None = None,
    ) -> DebateResult:
        """Move to a terminal state and publish the one completed event."""
        session.state = state
        if state == DebateState.COMPLETED:
            event = TurnEvent(session.session_id, SYSTEM_SPEAKER, COMPLETION_MESSAGE, True)
        else:
            event = TurnEvent(session.session_id, ERROR_SPEAKER, error or "debate failed", True)

        # Best effort: a broken channel must not keep the registry entry alive
        try:
            self.channel.publish(topic, event)
        except Exception:
            logger.exception(f"Could not publish final event for debate {session.session_id}")

        return DebateResult(
            session_id=session.session_id,
            topic=session.topic,
            turn_limit=session.turn_limit,
            status=state,
            transcript=list(session.transcript),
            error=error,
        )

    def _on_task_done(self, session: DebateSession, task: asyncio.Task):
        self._tasks.discard(task)
        # Cancelled before _drive ever ran: nothing was published or cleaned up
        if task.cancelled() and session.state not in _TERMINAL_STATES:
            topic = self.channel.topic_for(session.session_id)
            self._finish(session, topic, DebateState.FAILED, CANCELLED_MESSAGE)
            self.registry.remove(session.session_id, session)
            logger.info(f"Debate {session.session_id} cancelled before its first turn")
