"""Per-request resolution state and handler outcomes.

A handler answers every call with an ``Outcome``: either ``Complete``
(the request is answered, carrying the body) or ``CONTINUE`` (not my
concern, try the next handler). Control flow is inspectable without
running any side effects::

    outcome = await handler(ctx)
    assert outcome is CONTINUE
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

from nos.errors import PipelineError
from nos.http.request import Request

if TYPE_CHECKING:
    from nos.realtime.events import EventStream

# Anything a handler may answer with: a full body, a chunk stream, or SSE
type Body = bytes | str | AsyncIterator[bytes] | EventStream

HTML: Final = "text/html; charset=utf-8"


@dataclass(frozen=True, slots=True)
class Complete:
    """The request is answered; stop the pipeline."""

    body: Any
    status: int = 200
    content_type: str = HTML
    headers: tuple[tuple[str, str], ...] = ()


class Continue:
    """Defer to the next handler. Use the ``CONTINUE`` singleton."""

    __slots__ = ()
    _instance: Continue | None = None

    def __new__(cls) -> Continue:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CONTINUE"


CONTINUE: Final = Continue()

type Outcome = Complete | Continue


@dataclass(slots=True)
class Context:
    """One request's mutable resolution state.

    Owned by the pipeline for the lifetime of the request. Once
    ``completed`` is set the body is frozen: a second ``complete()``
    raises ``PipelineError``.
    """

    request: Request
    body: Any = None
    status: int = 200
    content_type: str = HTML
    headers: tuple[tuple[str, str], ...] = ()
    completed: bool = False
    # Scratch space shared by handlers of this request only
    state: dict[str, Any] = field(default_factory=dict)

    @property
    def path(self) -> str:
        """The request path being resolved."""
        return self.request.path

    def complete(self, outcome: Complete) -> None:
        """Apply a ``Complete`` outcome and mark the context finished."""
        if self.completed:
            msg = f"Context for {self.request.path!r} is already completed"
            raise PipelineError(msg)
        self.body = outcome.body
        self.status = outcome.status
        self.content_type = outcome.content_type
        self.headers = outcome.headers
        self.completed = True
