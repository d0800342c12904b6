"""nos exception hierarchy.

Shared across the pipeline, handlers, watch layer and ASGI handler so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class NosError(Exception):
    """Base for all nos-specific errors."""


class ConfigurationError(NosError):
    """Raised when serve configuration is invalid.

    Typically raised by ``assemble()`` at startup, before any request.
    """


class PipelineError(NosError):
    """A handler broke the resolution protocol.

    Raised when a context is completed twice or a handler returns
    something other than an ``Outcome``.
    """


class WatchSubscriptionError(NosError):
    """A path could not be registered for reload notifications.

    Never reaches the pipeline: ``DevHelper.watch()`` logs and drops it.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(NosError):
    """An error that maps directly to an HTTP status code.

    The ASGI handler catches these and answers with a plain-text body.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no handler completed the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
