"""Test helpers shared across modules."""

from pathlib import Path

from nos.http.headers import Headers
from nos.http.request import Request
from nos.pipeline.context import Context


def make_context(
    path: str,
    *,
    method: str = "GET",
    headers: dict[str, str] | None = None,
    query: bytes = b"",
    raw_path: bytes = b"",
) -> Context:
    """Build a Context for *path* without going through ASGI."""
    raw = tuple(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in (headers or {}).items()
    )
    request = Request(
        method=method,
        path=path,
        headers=Headers(raw),
        query_string=query,
        raw_path=raw_path,
    )
    return Context(request)


class FakeHelper:
    """Records watch registrations instead of touching a registry."""

    browser_helper = b"<!--reload-->"

    def __init__(self) -> None:
        self.watched: list[str] = []

    def watch(self, path: str | Path) -> None:
        self.watched.append(str(path))
