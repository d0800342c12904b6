"""HTML fallback resolver — extensionless and HTML routes to live pages.

For requests whose extension is ``""``, ``.htm`` or ``.html``, try
two candidates under the serving root:

1. the exact path (``/about.html`` -> ``root/about.html``)
2. on any read failure, ``<exact>/index.html`` — which is registered for
   reload notifications *before* the read, so a page that does not exist
   yet reloads the browser the moment it is created.

Whichever read succeeds is answered with the live-reload bootstrap
appended. When both fail the handler defers to the static, directory
and proxy handlers. Other extensions are never touched.

Only the fallback candidate is watched here. Files answered from the
exact path are left to the static resolver's own ``on_file`` hook.
"""

import logging
import os
import posixpath
from pathlib import Path
from typing import Final, Protocol

import anyio

from nos.pipeline.context import CONTINUE, HTML, Complete, Context, Outcome

logger = logging.getLogger("nos.handlers")

HTML_EXTENSIONS: Final = frozenset({"", ".htm", ".html"})

# Reads that fail because the candidate simply isn't a file (ValueError: embedded NUL)
_MISSING = (FileNotFoundError, IsADirectoryError, NotADirectoryError, ValueError)


class ReloadHelper(Protocol):
    """What the resolver needs from the dev helper."""

    browser_helper: bytes

    def watch(self, path: str | Path) -> None: ...


def is_html_route(path: str) -> bool:
    """True if *path* has no extension or an HTML one (case-insensitive)."""
    return posixpath.splitext(path)[1].lower() in HTML_EXTENSIONS


class HTMLFallback:
    """Resolve HTML routes to files, appending the reload bootstrap.

    Usage::

        pipeline = Pipeline().then(
            helper,
            HTMLFallback("./site", helper),
            StaticFiles("./site", on_file=helper.watch),
        )
    """

    __slots__ = ("_cwd", "_helper", "_root")

    def __init__(
        self,
        root: str | Path,
        helper: ReloadHelper,
        *,
        cwd: str | Path | None = None,
    ) -> None:
        self._root = os.fspath(root)
        self._helper = helper
        self._cwd = os.path.abspath(cwd if cwd is not None else os.getcwd())

    async def __call__(self, ctx: Context) -> Outcome:
        request = ctx.request
        if request.method not in ("GET", "HEAD") or not is_html_route(request.path):
            return CONTINUE

        exact = os.path.join(self._root, request.path.lstrip("/"))
        if not self._inside_root(exact):
            return CONTINUE

        content = await self._read(exact)
        if content is None:
            index = os.path.join(exact, "index.html")
            self._helper.watch(os.path.relpath(os.path.abspath(index), self._cwd))
            content = await self._read(index)
            if content is None:
                return CONTINUE

        return Complete(content + self._helper.browser_helper, content_type=HTML)

    def _inside_root(self, path: str) -> bool:
        root = os.path.abspath(self._root)
        return os.path.commonpath([root, os.path.abspath(path)]) == root

    async def _read(self, path: str) -> bytes | None:
        """Read *path*; None when it cannot be read."""
        try:
            return await anyio.Path(path).read_bytes()
        except _MISSING:
            logger.debug("no file at %s", path)
        except OSError as exc:
            logger.warning("cannot read %s: %s", path, exc)
        return None
