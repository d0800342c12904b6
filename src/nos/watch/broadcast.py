"""Reload broadcaster — fan out file-change events to connected browsers.

The file watcher publishes a ``ReloadEvent`` for every changed path; each
open ``/__nos/events`` SSE stream is one subscriber.

Free-threading safety:
    - ReloadEvent is a frozen dataclass (immutable, safe to share)
    - A Lock protects the subscriber set
    - Each subscriber gets its own asyncio.Queue
"""

import asyncio
import logging
import threading
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

logger = logging.getLogger("nos.watch")


@dataclass(frozen=True, slots=True)
class ReloadEvent:
    """A watched file was created, modified, or deleted."""

    path: str
    timestamp: float = field(default_factory=time.time)

    @property
    def is_stylesheet(self) -> bool:
        """True when the browser can hot-swap CSS instead of reloading."""
        return self.path.lower().endswith(".css")


class ReloadBroadcaster:
    """Async broadcast channel for reload events.

    Each call to ``subscribe()`` returns an async iterator backed by its
    own queue; ``publish()`` puts the event into every queue.

    Usage in an SSE stream::

        async def stream():
            async for event in broadcaster.subscribe():
                yield SSEEvent(data=event.path, event="reload")
    """

    __slots__ = ("_lock", "_subscribers")

    def __init__(self) -> None:
        self._subscribers: set[asyncio.Queue[ReloadEvent | None]] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)

    async def publish(self, event: ReloadEvent) -> int:
        """Broadcast *event*. Returns the number of subscribers reached."""
        with self._lock:
            subscribers = set(self._subscribers)
        reached = 0
        for queue in subscribers:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                # Drop events for stalled browsers rather than blocking
                logger.debug("dropping reload for %s: subscriber queue full", event.path)
            else:
                reached += 1
        return reached

    async def subscribe(self) -> AsyncIterator[ReloadEvent]:
        """Yield reload events until ``close()`` or the consumer exits."""
        queue: asyncio.Queue[ReloadEvent | None] = asyncio.Queue(maxsize=64)
        with self._lock:
            self._subscribers.add(queue)
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
        finally:
            with self._lock:
                self._subscribers.discard(queue)

    def close(self) -> None:
        """Signal all subscribers to stop."""
        with self._lock:
            for queue in self._subscribers:
                try:
                    queue.put_nowait(None)
                except asyncio.QueueFull:
                    pass
            self._subscribers.clear()
