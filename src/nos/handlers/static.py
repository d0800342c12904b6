"""Static file resolver.

Serves files from the root directory, with automatic ``index.html``
resolution for directories. Defers to the next handler when nothing
matches, so directory listings and the proxy get their turn.

Every file actually served is reported through the ``on_file``
callback; in development that registers it for live reload.
"""

import logging
import mimetypes
from collections.abc import Callable
from pathlib import Path
from typing import Literal

import anyio

from nos.pipeline.context import CONTINUE, Complete, Context, Outcome

logger = logging.getLogger("nos.handlers")

type DotfilePolicy = Literal["allow", "deny", "ignore"]


class StaticFiles:
    """Handler that serves static files from a directory.

    Security: resolves symlinks and verifies the final path is within
    the root to prevent path traversal.

    Dotfiles (any path segment starting with ``.``):
        - ``"allow"``: served like any other file
        - ``"deny"``: answered with 403
        - ``"ignore"``: treated as missing (defer)

    Usage::

        StaticFiles("./site", dotfiles="allow", on_file=helper.watch)
    """

    __slots__ = ("_cache_control", "_dotfiles", "_index", "_on_file", "_root")

    def __init__(
        self,
        root: str | Path,
        *,
        dotfiles: DotfilePolicy = "ignore",
        on_file: Callable[[str], None] | None = None,
        index: str = "index.html",
        cache_control: str = "no-cache",
    ) -> None:
        if dotfiles not in ("allow", "deny", "ignore"):
            msg = f"dotfiles must be 'allow', 'deny' or 'ignore', got {dotfiles!r}"
            raise ValueError(msg)
        self._root = Path(root).resolve()
        self._dotfiles = dotfiles
        self._on_file = on_file
        self._index = index
        self._cache_control = cache_control

    async def __call__(self, ctx: Context) -> Outcome:
        """Serve a static file or defer."""
        if ctx.request.method not in ("GET", "HEAD"):
            return CONTINUE

        path = ctx.path
        relative = path.lstrip("/")
        if "\x00" in relative:
            return CONTINUE

        if self._dotfiles != "allow" and has_dotfile(relative):
            if self._dotfiles == "deny":
                return Complete("Forbidden", status=403, content_type="text/plain; charset=utf-8")
            return CONTINUE

        file_path = (self._root / relative).resolve() if relative else self._root
        if not file_path.is_relative_to(self._root):
            return Complete("Forbidden", status=403, content_type="text/plain; charset=utf-8")

        if file_path.is_dir():
            index_path = file_path / self._index
            if not index_path.is_file():
                return CONTINUE
            # Relative links in the index need the trailing slash
            if relative and not path.endswith("/"):
                return Complete(
                    "",
                    status=301,
                    headers=(("Location", path + "/"),),
                )
            file_path = index_path

        if not file_path.is_file():
            return CONTINUE

        return await self._serve_file(file_path)

    async def _serve_file(self, file_path: Path) -> Outcome:
        """Read a file and build the outcome."""
        try:
            body = await anyio.Path(file_path).read_bytes()
        except OSError as exc:
            logger.warning("cannot read %s: %s", file_path, exc)
            return CONTINUE

        if self._on_file is not None:
            self._on_file(str(file_path))

        content_type, _ = mimetypes.guess_type(file_path.name)
        if content_type is None:
            content_type = "application/octet-stream"
        elif content_type.startswith("text/") or content_type == "application/javascript":
            content_type += "; charset=utf-8"

        return Complete(
            body,
            content_type=content_type,
            headers=(("Cache-Control", self._cache_control),),
        )


def has_dotfile(relative: str) -> bool:
    """True if any segment of *relative* is hidden (starts with a dot)."""
    return any(part.startswith(".") and part not in (".", "..") for part in relative.split("/"))
