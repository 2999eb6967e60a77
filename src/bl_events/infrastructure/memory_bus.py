"""In-process event bus: one asyncio.Queue per subscriber."""

import asyncio
import logging

from src.bl_events.domain.events import DomainEvent

logger = logging.getLogger(__name__)


class InMemoryEventBus:
    def __init__(self, max_queue_size: int = 1000) -> None:
        self._max_queue_size = max_queue_size
        self._subscribers: list[asyncio.Queue[DomainEvent]] = []

    def subscribe(self) -> asyncio.Queue[DomainEvent]:
        queue: asyncio.Queue[DomainEvent] = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[DomainEvent]) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    async def publish(self, event: DomainEvent) -> None:
        for queue in self._subscribers:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(
                    "Subscriber queue full, dropping %s for market %s",
                    event.event_type,
                    event.market_id,
                )
