"""Stat-polling file watcher.

Every ``interval`` seconds, stats each path in the watch registry and
publishes a ``ReloadEvent`` for paths whose state changed since the
previous poll, or since registration for a path polled for the first
time. A missing file has state ``None``, so creating a watched
``index.html`` that did not exist yet is a change like any other.
"""

from __future__ import annotations

import asyncio
import logging

import anyio

from nos.watch.broadcast import ReloadBroadcaster, ReloadEvent
from nos.watch.registry import FileState, WatchRegistry, stat_file

logger = logging.getLogger("nos.watch")


class FileWatcher:
    """Poll the registry's files and broadcast changes.

    A path's first poll is compared against the state recorded when it
    was registered; later polls against the previous poll.
    """

    __slots__ = ("_broadcaster", "_interval", "_registry", "_states", "_stopped")

    def __init__(
        self,
        registry: WatchRegistry,
        broadcaster: ReloadBroadcaster,
        *,
        interval: float = 0.3,
    ) -> None:
        self._registry = registry
        self._broadcaster = broadcaster
        self._interval = interval
        self._states: dict[str, FileState] = {}
        self._stopped = asyncio.Event()

    def _scan(self) -> tuple[dict[str, FileState], dict[str, FileState]]:
        baselines = self._registry.baselines()
        current = {path: stat_file(self._registry.absolute(path)) for path in baselines}
        return baselines, current

    async def poll_once(self) -> list[str]:
        """Stat every watched path once. Returns the changed paths."""
        baselines, current = await anyio.to_thread.run_sync(self._scan)
        changed: list[str] = []
        for path, state in sorted(current.items()):
            previous = self._states.get(path, baselines[path])
            self._states[path] = state
            if previous != state:
                changed.append(path)

        for path in changed:
            reached = await self._broadcaster.publish(ReloadEvent(path))
            logger.info("changed: %s (reloading %d client(s))", path, reached)
        return changed

    async def run(self) -> None:
        """Poll until ``stop()`` is called."""
        logger.debug("file watcher started (every %.2fs)", self._interval)
        while not self._stopped.is_set():
            try:
                await self.poll_once()
            except OSError:
                logger.warning("file watcher poll failed", exc_info=True)
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self._interval)
            except TimeoutError:
                pass
        logger.debug("file watcher stopped")

    def stop(self) -> None:
        """Ask ``run()`` to return after the current poll."""
        self._stopped.set()
