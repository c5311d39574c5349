"""EventBus — in-process Observer pattern for save lifecycle events."""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from datetime import UTC, datetime
from typing import Any

from varsave.domain.models import SaveEvent

logger = logging.getLogger(__name__)

# Type alias for async event listeners
EventListener = Callable[[SaveEvent], Coroutine[Any, Any, None]]


class EventBus:
    """Publish-subscribe event bus for decoupled observability.

    Listeners are async callables that receive SaveEvent instances.
    Listener failures are logged but never block the publisher, so a broken
    journal can never fail a save.
    """

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []

    def subscribe(self, listener: EventListener) -> None:
        """Register an async listener to receive all published events."""
        self._listeners.append(listener)

    async def publish(self, event: SaveEvent) -> None:
        """Dispatch an event to all subscribed listeners, sequentially."""
        for listener in self._listeners:
            try:
                await listener(event)
            except Exception:
                logger.exception(
                    "Listener %s failed for event %s",
                    getattr(listener, "__name__", repr(listener)),
                    event.event_name,
                )

    async def emit(self, event_name: str, **data: Any) -> None:
        """Build a timestamped SaveEvent and publish it."""
        if not self._listeners:
            return
        await self.publish(SaveEvent(timestamp=datetime.now(UTC).isoformat(), event_name=event_name, data=data))

    @property
    def listener_count(self) -> int:
        """Number of registered listeners."""
        return len(self._listeners)
