"""ASGI response sending — translates a completed Context to ASGI messages.

Bodies are dispatched by type:
    - ``bytes`` / ``str``: one body message with ``content-length``
    - async byte iterator: chunked streaming (proxied responses)
    - ``EventStream``: Server-Sent Events (live reload)
"""

import logging
from collections.abc import AsyncIterator

from nos._internal.asgi import Receive, Send
from nos.pipeline.context import Context
from nos.realtime.events import EventStream
from nos.realtime.sse import handle_sse

logger = logging.getLogger("nos.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def _raw_headers(ctx: Context) -> list[tuple[bytes, bytes]]:
    raw: list[tuple[bytes, bytes]] = [
        (b"content-type", ctx.content_type.encode("latin-1")),
    ]
    raw.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in ctx.headers
    )
    return raw


async def send_context(ctx: Context, send: Send, receive: Receive) -> None:
    """Send the response held by a completed *ctx*."""
    body = ctx.body
    if isinstance(body, EventStream):
        await handle_sse(body, send, receive)
    elif isinstance(body, AsyncIterator):
        await send_streaming_response(ctx, body, send)
    else:
        await send_response(ctx, send)


async def send_response(ctx: Context, send: Send) -> None:
    """Send a full-body response."""
    body = ctx.body if ctx.body is not None else b""
    if isinstance(body, str):
        body = body.encode("utf-8")

    raw_headers = _raw_headers(ctx)
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    if not _body_allowed(ctx.status):
        body = b""
        raw_headers[-1] = (b"content-length", b"0")
    elif ctx.request.method == "HEAD":
        body = b""

    await send({"type": "http.response.start", "status": ctx.status, "headers": raw_headers})
    await send({"type": "http.response.body", "body": body})


async def send_streaming_response(
    ctx: Context,
    chunks: AsyncIterator[bytes],
    send: Send,
) -> None:
    """Send a streamed body via chunked transfer encoding.

    Headers go out immediately, then each chunk with ``more_body=True``.
    A mid-stream failure is logged and the stream is closed.
    """
    raw_headers = _raw_headers(ctx)
    raw_headers.append((b"transfer-encoding", b"chunked"))
    await send({"type": "http.response.start", "status": ctx.status, "headers": raw_headers})

    try:
        if ctx.request.method != "HEAD" and _body_allowed(ctx.status):
            async for chunk in chunks:
                if chunk:
                    await send({"type": "http.response.body", "body": chunk, "more_body": True})
    except Exception:
        logger.exception("stream failed mid-response: %s %s", ctx.request.method, ctx.request.url)
    finally:
        aclose = getattr(chunks, "aclose", None)
        if aclose is not None:
            await aclose()

    await send({"type": "http.response.body", "body": b"", "more_body": False})
