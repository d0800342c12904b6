"""Handler protocol.

A handler is any callable matching::

    async def my_handler(ctx: Context) -> Outcome: ...

No base class required, and plain ``def`` works too. The pipeline
checks the returned value, not the lineage.
"""

from collections.abc import Awaitable
from typing import Protocol

from nos.pipeline.context import Context, Outcome


class Handler(Protocol):
    """Protocol for nos handlers.

    Accepts both functions and callable objects::

        # Function handler
        async def teapot(ctx: Context) -> Outcome:
            if ctx.path == "/teapot":
                return Complete("I'm a teapot", status=418)
            return CONTINUE

        # Class handler closing over a collaborator
        class Watched:
            def __init__(self, registry: WatchRegistry) -> None:
                self.registry = registry

            async def __call__(self, ctx: Context) -> Outcome:
                self.registry.add(ctx.path.lstrip("/"))
                return CONTINUE
    """

    def __call__(self, ctx: Context) -> Outcome | Awaitable[Outcome]: ...
