"""Proxy forwarder — hand unmatched traffic to an upstream server.

Terminal: every request that reaches it is forwarded with httpx and the
upstream response is streamed back unchanged (minus hop-by-hop headers).
Transport failures become a ``502 Bad Gateway``; the pipeline never
sees an exception from here.
"""

import logging
from collections.abc import AsyncIterator
from typing import Final
from urllib.parse import quote

import httpx

from nos.http.request import Request
from nos.pipeline.context import Complete, Context, Outcome

logger = logging.getLogger("nos.handlers")

# RFC 9110 §7.6.1 connection-specific headers, plus ones httpx recomputes
HOP_BY_HOP: Final = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "host",
        "content-length",
    }
)


def normalize_target(target: str) -> str:
    """Turn ``host:port`` (or a bare port) into a base URL."""
    target = target.strip().rstrip("/")
    if not target:
        msg = "Proxy target must not be empty"
        raise ValueError(msg)
    if target.isdigit():
        target = f"127.0.0.1:{target}"
    if "://" not in target:
        target = f"http://{target}"
    return target


# Unreserved and sub-delim characters, plus "%" so existing escapes survive
_PATH_SAFE: Final = "/%:@!$&'()*+,;=-._~"


def upstream_url(base: httpx.URL, request: Request) -> httpx.URL:
    """*base* joined with the client's path and query string.

    Built from ``raw_path`` when the server supplied one, so an escaped
    ``/`` or ``?`` reaches the upstream exactly as the client sent it.
    """
    raw = request.raw_path or request.path.encode("utf-8")
    path = base.path.rstrip("/") + quote(raw, safe=_PATH_SAFE)
    query = quote(request.query_string, safe=_PATH_SAFE + "?") or None
    return base.copy_with(path=path, query=query)


class ProxyForward:
    """Handler that forwards requests to *target*.

    Usage::

        ProxyForward("127.0.0.1:8000")
        ProxyForward("https://api.example.com", transport=httpx.MockTransport(fn))
    """

    __slots__ = ("_base", "_client", "_target", "_transport")

    def __init__(
        self,
        target: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._target = normalize_target(target)
        self._base = httpx.URL(self._target)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def target(self) -> str:
        return self._target

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._target,
                transport=self._transport,
                follow_redirects=False,
                timeout=httpx.Timeout(30.0, connect=5.0),
            )
        return self._client

    async def __call__(self, ctx: Context) -> Outcome:
        request = ctx.request
        headers = [(k, v) for k, v in request.headers.pairs() if k not in HOP_BY_HOP]
        body = await request.body()

        client = self._get_client()
        upstream_request = client.build_request(
            request.method,
            upstream_url(self._base, request),
            headers=headers,
            content=body or None,
        )
        try:
            upstream = await client.send(upstream_request, stream=True)
        except httpx.HTTPError as exc:
            logger.warning(
                "proxy %s %s -> %s failed: %s", request.method, request.url, self._target, exc
            )
            return Complete(
                f"Bad Gateway: {self._target} is unreachable",
                status=502,
                content_type="text/plain; charset=utf-8",
            )

        content_type = upstream.headers.get("content-type", "application/octet-stream")
        response_headers = tuple(
            (k, v)
            for k, v in upstream.headers.multi_items()
            if k.lower() not in HOP_BY_HOP and k.lower() != "content-type"
        )
        return Complete(
            _relay(upstream),
            status=upstream.status_code,
            content_type=content_type,
            headers=response_headers,
        )

    async def aclose(self) -> None:
        """Release the upstream connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


async def _relay(upstream: httpx.Response) -> AsyncIterator[bytes]:
    """Yield the upstream body as it arrives, then release the response."""
    try:
        async for chunk in upstream.aiter_raw():
            yield chunk
    finally:
        await upstream.aclose()
