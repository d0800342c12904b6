"""Server-Sent Events protocol implementation over ASGI.

Carries reload notifications to the browser bootstrap: sends
``text/event-stream`` headers, produces events from an async generator,
watches for client disconnect, and sends heartbeat comments when idle.
"""

import asyncio
import contextlib
import json as json_module
import logging
from typing import Any

from nos._internal.asgi import Receive, Send
from nos.realtime.events import EventStream, SSEEvent

logger = logging.getLogger("nos.server")


async def handle_sse(event_stream: EventStream, send: Send, receive: Receive) -> None:
    """Stream Server-Sent Events over an ASGI connection.

    1. Sends ``http.response.start`` with ``text/event-stream`` headers.
    2. Runs two tasks until either finishes:
       - **producer**: consumes the generator and sends each event;
         sends a ``: heartbeat`` comment when idle.
       - **disconnect monitor**: returns on ``http.disconnect``.
    3. Closes the response body.
    """
    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": [
                (b"content-type", b"text/event-stream"),
                (b"cache-control", b"no-cache"),
                (b"connection", b"keep-alive"),
                (b"x-accel-buffering", b"no"),
            ],
        }
    )

    disconnected = asyncio.Event()

    async def monitor_disconnect() -> None:
        while not disconnected.is_set():
            message = await receive()
            if message.get("type") == "http.disconnect":
                disconnected.set()
                return

    async def produce_events() -> None:
        # asyncio.wait does not cancel the pending __anext__ on timeout,
        # so the same task survives across heartbeat intervals.
        pending_next: asyncio.Task[Any] | None = None
        gen_iter = event_stream.generator.__aiter__()
        try:
            while not disconnected.is_set():
                if pending_next is None:

                    async def _next() -> Any:
                        return await gen_iter.__anext__()

                    pending_next = asyncio.create_task(_next())

                done, _ = await asyncio.wait(
                    {pending_next},
                    timeout=event_stream.heartbeat_interval,
                )

                if not done:
                    try:
                        await _send_chunk(send, b": heartbeat\n\n")
                    except RuntimeError:
                        break  # Response already closed (client disconnected)
                    continue

                pending_next = None
                try:
                    value = done.pop().result()
                except StopAsyncIteration:
                    break

                text = format_event(value, default_event=event_stream.event_type)
                try:
                    await _send_chunk(send, text.encode("utf-8"))
                except RuntimeError:
                    break
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("SSE stream failed")
            with contextlib.suppress(Exception):
                error_event = SSEEvent(data="Internal server error", event="error")
                await _send_chunk(send, error_event.encode().encode("utf-8"))
        finally:
            if pending_next is not None:
                if not pending_next.done():
                    pending_next.cancel()
                with contextlib.suppress(asyncio.CancelledError, StopAsyncIteration):
                    await pending_next

    producer_task = asyncio.create_task(produce_events())
    monitor_task = asyncio.create_task(monitor_disconnect())

    try:
        _done, pending = await asyncio.wait(
            {producer_task, monitor_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
        for task in pending:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
    finally:
        with contextlib.suppress(RuntimeError):
            await send({"type": "http.response.body", "body": b"", "more_body": False})


async def _send_chunk(send: Send, body: bytes) -> None:
    await send({"type": "http.response.body", "body": body, "more_body": True})


def format_event(value: Any, *, default_event: str | None = None) -> str:
    """Convert a yielded value to SSE wire format.

    Dispatch:
        - ``SSEEvent`` -> encode as-is
        - ``str`` -> wrap as data
        - ``dict`` -> JSON-serialize as data
    """
    if isinstance(value, SSEEvent):
        return value.encode()
    if isinstance(value, dict):
        return SSEEvent(data=json_module.dumps(value), event=default_event).encode()
    return SSEEvent(data=str(value), event=default_event).encode()
