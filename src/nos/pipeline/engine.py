"""Pipeline engine — drive one Context through an ordered handler chain.

The chain is assembled once at startup and shared read-only by every
request. Each handler is awaited before the next one runs, so a later
handler never observes a half-applied context.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from nos._internal.invoke import invoke
from nos.errors import PipelineError
from nos.pipeline.context import CONTINUE, Complete, Context, Continue, Outcome
from nos.pipeline.protocol import Handler


@dataclass(frozen=True, slots=True)
class Pipeline:
    """An immutable, ordered sequence of handlers.

    Built append-only::

        pipeline = Pipeline().then(access_log).then(static, listing)
        outcome = await pipeline.run(ctx)
    """

    handlers: tuple[Handler, ...] = ()

    def then(self, *handlers: Handler) -> Pipeline:
        """Return a new pipeline with *handlers* appended."""
        return Pipeline((*self.handlers, *handlers))

    def __len__(self) -> int:
        return len(self.handlers)

    def __iter__(self) -> Iterator[Handler]:
        return iter(self.handlers)

    async def run(self, ctx: Context) -> Outcome:
        """Resolve *ctx* and return the final outcome.

        Returns the ``Complete`` that answered the request (already
        applied to *ctx*), or ``CONTINUE`` when every handler deferred.
        Handler exceptions propagate; side effects of handlers that ran
        earlier are kept either way.
        """
        for handler in self.handlers:
            outcome = await invoke(handler, ctx)
            if isinstance(outcome, Complete):
                ctx.complete(outcome)
                return outcome
            if not isinstance(outcome, Continue):
                msg = (
                    f"Handler {handler!r} returned {type(outcome).__name__}, "
                    "expected Complete or CONTINUE"
                )
                raise PipelineError(msg)
        return CONTINUE
