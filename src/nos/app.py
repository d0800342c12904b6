"""The nos application — an ASGI callable around one assembled pipeline.

Owns the process-wide collaborators (watch registry, reload broadcaster,
file watcher) and hands them to the handlers that need them. The
pipeline is assembled once in ``__init__`` and never changes.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from nos._internal.asgi import Receive, Scope, Send
from nos._internal.invoke import invoke
from nos.assemble import assemble
from nos.config import ServeConfig
from nos.handlers.dev_helper import DevHelper
from nos.handlers.proxy import ProxyForward
from nos.pipeline.engine import Pipeline
from nos.server.handler import handle_request
from nos.watch.broadcast import ReloadBroadcaster
from nos.watch.registry import WatchRegistry
from nos.watch.watcher import FileWatcher

logger = logging.getLogger("nos.server")


class App:
    """Serve a directory.

    Basic usage::

        app = App(ServeConfig(root="./site", proxy_to="127.0.0.1:8000"))
        app.run()

    Or hand ``app`` to any ASGI server.
    """

    def __init__(
        self,
        config: ServeConfig | None = None,
        *,
        cwd: str | Path | None = None,
        pipeline: Pipeline | None = None,
    ) -> None:
        self.config = config or ServeConfig()
        self.registry = WatchRegistry(cwd)
        self.broadcaster = ReloadBroadcaster()

        self.helper: DevHelper | None = None
        self._watcher: FileWatcher | None = None
        if not self.config.production:
            self.helper = DevHelper(
                self.registry,
                self.broadcaster,
                heartbeat_interval=self.config.sse_heartbeat_interval,
            )
            self._watcher = FileWatcher(
                self.registry,
                self.broadcaster,
                interval=self.config.watch_interval,
            )

        # A custom chain replaces the assembled one; collaborators stay available
        self.pipeline: Pipeline = (
            pipeline if pipeline is not None else assemble(self.config, helper=self.helper)
        )

        self._watcher_task: asyncio.Task[None] | None = None
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []

    @property
    def watcher(self) -> FileWatcher | None:
        """The file watcher (development mode only)."""
        return self._watcher

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator."""
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._shutdown_hooks.append(func)
        return func

    async def startup(self) -> None:
        """Start the file watcher, then run startup hooks."""
        if self._watcher is not None and self._watcher_task is None:
            self._watcher_task = asyncio.create_task(self._watcher.run())
        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        """Run shutdown hooks and release every collaborator."""
        for hook in self._shutdown_hooks:
            await invoke(hook)

        if self._watcher is not None:
            self._watcher.stop()
        if self._watcher_task is not None:
            self._watcher_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._watcher_task
            self._watcher_task = None

        # Let open reload streams end cleanly
        self.broadcaster.close()

        for handler in self.pipeline:
            if isinstance(handler, ProxyForward):
                await handler.aclose()

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start pounce and block until it stops."""
        from nos.server.dev import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            log_level=self.config.log_level,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await handle_request(
            scope,
            receive,
            send,
            pipeline=self.pipeline,
            debug=not self.config.production,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return
