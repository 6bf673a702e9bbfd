"""Staggered notification queue. Toasts shown one after another at a fixed pace.

A simulation can produce several notifications at once (upgrade points,
a clinched series, an engine failure). Instead of firing them all in the
same frame, they are queued in order and ``flush()`` publishes them one at
a time with ``stagger_seconds`` between consecutive items.

Usage:
    queue = NotificationQueue(event_bus, stagger_seconds=0.6)
    queue.award("+3 upgrade points")
    queue.success("Series clinched")
    await queue.flush()
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal

from postseason.core.event_bus import NOTIFICATION_SHOWN, EventBus

logger = logging.getLogger(__name__)

NotificationKind = Literal["info", "success", "error", "award"]

_DEFAULT_DURATIONS: dict[str, float] = {
    "info": 4.0,
    "success": 2.0,
    "error": 4.0,
    "award": 5.0,
}


@dataclass(frozen=True)
class Notification:
    """A single toast."""

    id: int
    kind: NotificationKind
    message: str
    duration: float


class NotificationQueue:
    """FIFO of pending notifications with a fixed inter-item delay."""

    def __init__(
        self,
        event_bus: EventBus | None = None,
        stagger_seconds: float = 0.6,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._bus = event_bus
        self._stagger = max(0.0, stagger_seconds)
        self._sleep = sleep
        self._pending: deque[Notification] = deque()
        self._ids = itertools.count()
        self._flushing = False
        self.shown: list[Notification] = []

    def push(
        self, kind: NotificationKind, message: str, duration: float | None = None
    ) -> Notification:
        item = Notification(
            id=next(self._ids),
            kind=kind,
            message=message,
            duration=_DEFAULT_DURATIONS[kind] if duration is None else duration,
        )
        self._pending.append(item)
        return item

    def info(self, message: str) -> Notification:
        return self.push("info", message)

    def success(self, message: str) -> Notification:
        return self.push("success", message)

    def error(self, message: str) -> Notification:
        return self.push("error", message)

    def award(self, message: str) -> Notification:
        return self.push("award", message)

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)

    async def flush(self) -> list[Notification]:
        """Show every pending notification in order, pausing between items.

        Items pushed while a flush is running are shown by that same flush.
        A concurrent second flush returns immediately with nothing shown.
        """
        if self._flushing:
            return []
        self._flushing = True
        shown: list[Notification] = []
        try:
            while self._pending:
                if shown and self._stagger:
                    await self._sleep(self._stagger)
                item = self._pending.popleft()
                await self._show(item)
                shown.append(item)
        finally:
            self._flushing = False
        return shown

    async def _show(self, item: Notification) -> None:
        self.shown.append(item)
        logger.debug("notification_shown kind=%s id=%d", item.kind, item.id)
        if self._bus is not None:
            await self._bus.publish(
                NOTIFICATION_SHOWN,
                {
                    "id": item.id,
                    "kind": item.kind,
                    "message": item.message,
                    "duration": item.duration,
                },
            )
