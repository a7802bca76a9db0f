"""Fan-out of progress events to connected observers.

Each subscription owns a FIFO ``asyncio.Queue``; ``publish`` enqueues without
awaiting, so events of one session reach a given observer in emission order.
"""

import asyncio
from collections.abc import AsyncIterator

from legalflow.events.models import ProgressEvent
from legalflow.logging.logger import Log


class Subscription:
    """Handle for one observer channel, optionally scoped to a single session."""

    def __init__(self, session_id: str | None = None, maxsize: int = 0) -> None:
        self.session_id = session_id
        self._queue: asyncio.Queue[ProgressEvent | None] = asyncio.Queue(maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def wants(self, event: ProgressEvent) -> bool:
        return self.session_id is None or self.session_id == event.session_id

    def offer(self, event: ProgressEvent) -> bool:
        """Enqueue without blocking. Returns ``False`` if the event was dropped."""
        if self._closed:
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            return False
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            # A full queue still ends iteration once drained.
            pass

    async def get(self) -> ProgressEvent | None:
        """Next event, or ``None`` once the subscription is closed and drained."""
        if self._closed and self._queue.empty():
            return None
        return await self._queue.get()

    def get_nowait(self) -> ProgressEvent | None:
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    def __aiter__(self) -> AsyncIterator[ProgressEvent]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[ProgressEvent]:
        while True:
            event = await self.get()
            if event is None:
                return
            yield event


class ProgressBroadcaster:
    """Best-effort publisher: closed or saturated observers are skipped."""

    def __init__(self, queue_size: int = 256) -> None:
        self._queue_size = queue_size
        self._subscriptions: set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, session_id: str | None = None) -> Subscription:
        subscription = Subscription(session_id=session_id, maxsize=self._queue_size)
        self._subscriptions.add(subscription)
        Log.debug(f"Observer subscribed (session filter: {session_id})")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        self._subscriptions.discard(subscription)
        subscription.close()

    def publish(self, event: ProgressEvent) -> int:
        """Deliver ``event`` to every open, interested observer.

        Returns the number of observers that received it. Never raises.
        """
        delivered = 0
        for subscription in list(self._subscriptions):
            if subscription.closed:
                self._subscriptions.discard(subscription)
                continue
            if not subscription.wants(event):
                continue
            if subscription.offer(event):
                delivered += 1
            else:
                Log.warning(
                    f"Dropped {event.stage.value} event for session "
                    f"{event.session_id}: observer queue full"
                )
        Log.debug(
            f"Published {event.stage.value} {event.progress}% for session "
            f"{event.session_id} to {delivered} observers"
        )
        return delivered

    def close(self) -> None:
        for subscription in list(self._subscriptions):
            self.unsubscribe(subscription)
