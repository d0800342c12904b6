"""ASGI handler — one request, one Context, one pipeline run.

The only component that touches raw ASGI scopes. Converts the scope to a
typed Request, pushes a fresh Context through the pipeline, maps misses
and failures to error responses, and sends the result.
"""

import logging

from nos._internal.asgi import Receive, Scope, Send
from nos.errors import HTTPError, NotFound
from nos.http.request import Request
from nos.pipeline.context import Complete, Context
from nos.pipeline.engine import Pipeline
from nos.server.sender import send_context

logger = logging.getLogger("nos.server")

_TEXT = "text/plain; charset=utf-8"


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    pipeline: Pipeline,
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    ctx = Context(request)

    try:
        await pipeline.run(ctx)
        if not ctx.completed:
            raise NotFound()
    except HTTPError as exc:
        ctx = Context(request)
        ctx.complete(http_error_outcome(exc, request))
    except Exception as exc:
        logger.exception("500 %s %s", request.method, request.url)
        ctx = Context(request)
        ctx.complete(internal_error_outcome(exc, debug=debug))

    await send_context(ctx, send, receive)


def http_error_outcome(exc: HTTPError, request: Request) -> Complete:
    """Map an HTTPError to a plain-text response."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.url, exc.detail)
    return Complete(
        exc.detail or f"Error {exc.status}",
        status=exc.status,
        content_type=_TEXT,
        headers=exc.headers,
    )


def internal_error_outcome(exc: Exception, *, debug: bool = False) -> Complete:
    """Generic 500 for an uncaught handler failure."""
    body = "Internal Server Error"
    if debug:
        body = f"{body}\n\n{type(exc).__name__}: {exc}"
    return Complete(body, status=500, content_type=_TEXT)
