"""
Update Channel — per-session publish/subscribe for turn events.

WHAT THIS DOES:
Each debate session has its own topic. Whoever subscribes to that topic
(normally the WebSocket handler serving the client that owns the session)
gets every TurnEvent published after it subscribed.

DELIVERY:
- Best effort, at most once. No acknowledgements.
- No history: a subscriber that arrives late misses earlier events.
- Per-subscriber asyncio.Queue, so publish never blocks the orchestrator.

USAGE:
    channel = InMemoryUpdateChannel()
    subscription = channel.subscribe(channel.topic_for(session_id))
    ...
    async for event in subscription:
        await send(event)
        if event.is_completed:
            break
    channel.unsubscribe(subscription)
"""

import asyncio
import logging

from app.services.debate.models import TurnEvent
from app.services.debate.protocols import BaseUpdateChannel

logger = logging.getLogger(__name__)

TOPIC_PREFIX = "/topic/ai-debate-updates/"


class Subscription:
    """One observer's view of a topic."""

    def __init__(self, topic: str):
        self.topic = topic
        # Unbounded; one session publishes at most turn_limit + 1 events
        self._queue: asyncio.Queue[TurnEvent] = asyncio.Queue()

    def deliver(self, event: TurnEvent) -> None:
        self._queue.put_nowait(event)

    async def get(self) -> TurnEvent:
        """Wait for the next event."""
        return await self._queue.get()

    def get_nowait(self) -> TurnEvent:
        return self._queue.get_nowait()

    def pending(self) -> int:
        return self._queue.qsize()

    def __aiter__(self):
        return self

    async def __anext__(self) -> TurnEvent:
        return await self.get()


class InMemoryUpdateChannel(BaseUpdateChannel):
    """In-process fan-out keyed by topic name."""

    def __init__(self):
        self._subscribers: dict[str, set[Subscription]] = {}

    def topic_for(self, session_id: str) -> str:
        return f"{TOPIC_PREFIX}{session_id}"

    def subscribe(self, topic: str) -> Subscription:
        subscription = Subscription(topic)
        self._subscribers.setdefault(topic, set()).add(subscription)
        logger.debug(f"Subscribed to {topic} ({len(self._subscribers[topic])} subscribers)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Stop delivering to a subscription. Unknown subscriptions are ignored."""
        subscribers = self._subscribers.get(subscription.topic)
        if not subscribers:
            return
        subscribers.discard(subscription)
        if not subscribers:
            del self._subscribers[subscription.topic]

    def publish(self, topic: str, event: TurnEvent) -> None:
        subscribers = list(self._subscribers.get(topic, ()))
        for subscription in subscribers:
            subscription.deliver(event)
        logger.debug(
            f"Published to {topic} ({len(subscribers)} subscribers): "
            f"{event.speaker} completed={event.is_completed}"
        )

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))
