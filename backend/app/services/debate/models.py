"""
Debate Models — Data structures for the AI vs AI debate.

These dataclasses define the contract between debate components:
- Persona: one side of the debate (name, backing model, instructions)
- DebateSession: the live state of one run, owned by its orchestration task
- TurnEvent: what gets published on the update channel
- DebateResult: what a finished run hands back to its caller
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# Reserved speaker labels for terminal events
SYSTEM_SPEAKER = "System"
ERROR_SPEAKER = "Error"

COMPLETION_MESSAGE = "debate complete"


class DebateState(str, Enum):
    """Lifecycle of a debate session. completed and failed are terminal."""

    INITIATED = "initiated"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Persona:
    """
    One debater.

    Configured once at startup and shared by every session.
    """

    display_name: str
    """Label shown to clients and used in the transcript (e.g., 'AI 1')"""

    model_id: str
    """Provider model identifier the persona speaks through"""

    instruction_template: str
    """Stance instructions; formatted with {topic}"""

    def instructions_for(self, topic: str) -> str:
        return self.instruction_template.format(topic=topic)


@dataclass(frozen=True)
class DebateRequest:
    """Raw debate request as received from a client, before validation."""

    topic: Optional[str]
    turns: Optional[str] = None


@dataclass(frozen=True)
class TranscriptEntry:
    speaker: str
    message: str

    def render(self) -> str:
        return f"{self.speaker}: {self.message}"


@dataclass
class DebateSession:
    """
    The mutable state of one debate run.

    Only the orchestration task that created it appends to the transcript
    or changes the state.
    """

    session_id: str
    topic: str
    turn_limit: int
    transcript: list[TranscriptEntry] = field(default_factory=list)
    state: DebateState = DebateState.INITIATED

    @property
    def turns_taken(self) -> int:
        return len(self.transcript)

    def append(self, speaker: str, message: str) -> TranscriptEntry:
        if len(self.transcript) >= self.turn_limit:
            raise RuntimeError(
                f"Session {self.session_id} already has {self.turn_limit} turns"
            )
        entry = TranscriptEntry(speaker=speaker, message=message)
        self.transcript.append(entry)
        return entry

    def to_dict(self) -> dict:
        """Copy of the session for introspection; never shares the live list."""
        return {
            "session_id": self.session_id,
            "topic": self.topic,
            "turn_limit": self.turn_limit,
            "state": self.state.value,
            "transcript": [
                {"speaker": e.speaker, "message": e.message} for e in list(self.transcript)
            ],
        }


@dataclass(frozen=True)
class TurnEvent:
    """One update published for a session."""

    session_id: str
    speaker: str
    message: str
    is_completed: bool = False


@dataclass
class DebateResult:
    """
    Final result of a debate run.

    status is COMPLETED or FAILED; error holds the message that was sent to
    subscribers when the run failed.
    """

    session_id: str
    topic: str
    turn_limit: int
    status: DebateState
    transcript: list[TranscriptEntry] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == DebateState.COMPLETED
