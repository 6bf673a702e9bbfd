"""In-memory async event bus between the orchestrator and the UI layer.

The orchestrator and the notification queue publish; views subscribe. Each
subscriber gets its own asyncio.Queue. Publishing never blocks: with no
subscribers an event is dropped, and a full subscriber queue loses the
event (logged) rather than stalling a simulation.

Event types:
    playoffs.simulation_started    {"campaign_id", "scope"}
    playoffs.simulation_finished   {"campaign_id", "scope", "status"}
    playoffs.series_completed      {"campaign_id", "series_id", "winner_team_id"}
    playoffs.champion_crowned      {"campaign_id", "series_id", "team_id", "team_name", "date"}
    notification.shown             {"kind", "message", "duration"}
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import defaultdict
from collections.abc import AsyncIterator
from typing import Any

logger = logging.getLogger(__name__)

SIMULATION_STARTED = "playoffs.simulation_started"
SIMULATION_FINISHED = "playoffs.simulation_finished"
SERIES_COMPLETED = "playoffs.series_completed"
CHAMPION_CROWNED = "playoffs.champion_crowned"
NOTIFICATION_SHOWN = "notification.shown"

Envelope = dict[str, Any]


class EventBus:
    """Async pub/sub keyed by event type, plus wildcard (all-events) subscribers.

    Usage:
        bus = EventBus()

        async with bus.subscribe(CHAMPION_CROWNED) as sub:
            event = await sub.get(timeout=5.0)

        await bus.publish(CHAMPION_CROWNED, {"team_name": "Boston Celtics"})
    """

    def __init__(self) -> None:
        self._subscribers: dict[str | None, list[asyncio.Queue[Envelope]]] = defaultdict(list)
        self.dropped = 0

    async def publish(self, event_type: str, data: dict[str, Any]) -> int:
        """Deliver to typed and wildcard subscribers. Returns deliveries made."""
        envelope: Envelope = {"type": event_type, "data": data}
        delivered = 0
        for queue in [*self._subscribers.get(event_type, []), *self._subscribers.get(None, [])]:
            try:
                queue.put_nowait(envelope)
            except asyncio.QueueFull:
                self.dropped += 1
                logger.warning("event_dropped type=%s reason=subscriber_full", event_type)
            else:
                delivered += 1
        return delivered

    @contextlib.asynccontextmanager
    async def subscribe(
        self, event_type: str | None = None, max_size: int = 100
    ) -> AsyncIterator[Subscription]:
        """Subscribe to one event type, or to everything with None."""
        queue: asyncio.Queue[Envelope] = asyncio.Queue(maxsize=max_size)
        self._subscribers[event_type].append(queue)
        try:
            yield Subscription(queue)
        finally:
            with contextlib.suppress(ValueError):
                self._subscribers[event_type].remove(queue)

    @property
    def subscriber_count(self) -> int:
        return sum(len(queues) for queues in self._subscribers.values())


class Subscription:
    """Read side of one subscriber queue."""

    def __init__(self, queue: asyncio.Queue[Envelope]) -> None:
        self._queue = queue

    async def get(self, timeout: float | None = None) -> Envelope | None:
        """Next event, or None if nothing arrives within ``timeout`` seconds."""
        try:
            return await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except TimeoutError:
            return None

    def drain(self) -> list[Envelope]:
        """Everything already queued, without waiting."""
        events: list[Envelope] = []
        while not self._queue.empty():
            events.append(self._queue.get_nowait())
        return events
