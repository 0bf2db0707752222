"""
Debate Protocols — Abstract base classes for the orchestrator's collaborators.

WHAT THIS IS:
The orchestrator only talks to two outside things: something that turns a
prompt into text, and something that delivers turn events to observers.
Both are abstract so the orchestrator can run against fakes in tests and
against OpenRouter + WebSockets in production.

IMPLEMENTATIONS:
- BaseModelInvoker → app.services.model_invoker.ModelInvoker
  (defined next to it, since model invocation is not debate-specific)
- BaseUpdateChannel → app.services.debate.channel.InMemoryUpdateChannel
"""

from abc import ABC, abstractmethod

from app.services.debate.models import TurnEvent
from app.services.model_invoker import BaseModelInvoker


class BaseUpdateChannel(ABC):
    """
    Abstract base class for publish/subscribe delivery of turn events.

    Delivery is best effort and at most once: observers that subscribe
    after an event was published never see it.
    """

    @abstractmethod
    def topic_for(self, session_id: str) -> str:
        """Deterministic topic name for a session."""
        pass

    @abstractmethod
    def publish(self, topic: str, event: TurnEvent) -> None:
        """
        Fan the event out to current subscribers of the topic.

        Args:
            topic: Topic name from topic_for()
            event: The turn event to deliver
        """
        pass


__all__ = ["BaseModelInvoker", "BaseUpdateChannel"]
