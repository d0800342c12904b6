"""Directory listing handler.

Terminal for directories: any request whose path maps to a directory
under the root gets a listing. Everything else is deferred.

The listing is negotiated on ``Accept``: HTML (rendered with kida) by
default, a JSON array of names for ``application/json``, and one name
per line for ``text/plain``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import datetime
from functools import cache
from pathlib import Path
from typing import TYPE_CHECKING, Final, Literal
from urllib.parse import quote

import anyio
from kida import Environment

from nos.handlers.static import has_dotfile
from nos.pipeline.context import CONTINUE, HTML, Complete, Context, Outcome

if TYPE_CHECKING:
    from kida import Template

type ListingView = Literal["tiles", "details"]

_LISTING_TEMPLATE: Final = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width">
<title>listing directory {{ directory }}</title>
<style>
body { margin: 0; padding: 40px; font: 14px/1.4 "Helvetica Neue", Helvetica, Arial, sans-serif; color: #333; }
h1 { font-weight: normal; font-size: 18px; margin-bottom: 24px; }
h1 a { color: #555; text-decoration: none; }
ul#files { list-style: none; margin: 0; padding: 0; }
ul#files a { display: block; padding: 4px 8px; color: #333; text-decoration: none; border-radius: 3px; }
ul#files a:hover { background: #e8f0fe; }
ul.view-tiles li { display: inline-block; width: 220px; margin: 2px; overflow: hidden; white-space: nowrap; text-overflow: ellipsis; }
ul.view-details li { display: block; }
ul.view-details span { display: inline-block; }
ul.view-details .name { width: 60%; }
ul.view-details .size { width: 12%; text-align: right; }
ul.view-details .date { width: 24%; text-align: right; color: #888; }
ul.view-details li.header { font-weight: bold; padding: 4px 8px; border-bottom: 1px solid #ddd; }
.icon::before { display: inline-block; width: 1.5em; content: "\\1F4C4"; }
.icon-directory::before { content: "\\1F4C1"; }
.icon-image::before { content: "\\1F5BC"; }
.icon-code::before { content: "\\1F4DC"; }
.icon-text::before { content: "\\1F4DD"; }
</style>
</head>
<body>
<h1>{% for crumb in crumbs %}<a href="{{ crumb.href }}">{{ crumb.name }}</a> / {% end %}</h1>
<ul id="files" class="view-{{ view }}">
{% if details %}<li class="header"><span class="name">Name</span><span class="size">Size</span><span class="date">Modified</span></li>{% end %}
{% for entry in entries %}<li><a href="{{ entry.href }}" class="{{ entry.css_class }}" title="{{ entry.name }}"><span class="name">{{ entry.name }}</span>{% if details %}<span class="size">{{ entry.size }}</span><span class="date">{{ entry.modified }}</span>{% end %}</a></li>
{% end %}</ul>
</body>
</html>
"""

_ICON_GROUPS: Final = {
    "image": {".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".ico", ".bmp"},
    "code": {".js", ".mjs", ".ts", ".css", ".json", ".py", ".sh", ".wasm", ".map"},
    "text": {".txt", ".md", ".html", ".htm", ".xml", ".csv", ".yml", ".yaml", ".toml"},
}


@dataclass(frozen=True, slots=True)
class Entry:
    """One row of a directory listing."""

    name: str
    href: str
    is_dir: bool
    size: str = "-"
    modified: str = ""
    css_class: str = ""


@dataclass(frozen=True, slots=True)
class Crumb:
    name: str
    href: str


@cache
def _template() -> Template:
    return Environment(autoescape=True).from_string(_LISTING_TEMPLATE)


def _icon_class(name: str, is_dir: bool) -> str:
    if is_dir:
        return "icon icon-directory"
    ext = os.path.splitext(name)[1].lower()
    for group, extensions in _ICON_GROUPS.items():
        if ext in extensions:
            return f"icon icon-{group}"
    return "icon"


def _human_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


class DirectoryListing:
    """Handler that lists directories under *root*.

    Usage::

        DirectoryListing("./site", show_hidden=True, show_icons=True, view="details")
    """

    __slots__ = ("_root", "_show_hidden", "_show_icons", "_view")

    def __init__(
        self,
        root: str | Path,
        *,
        show_hidden: bool = False,
        show_icons: bool = False,
        view: ListingView = "tiles",
    ) -> None:
        if view not in ("tiles", "details"):
            msg = f"view must be 'tiles' or 'details', got {view!r}"
            raise ValueError(msg)
        self._root = Path(root).resolve()
        self._show_hidden = show_hidden
        self._show_icons = show_icons
        self._view = view

    async def __call__(self, ctx: Context) -> Outcome:
        request = ctx.request
        if request.method not in ("GET", "HEAD"):
            return CONTINUE

        relative = request.path.lstrip("/")
        if "\x00" in relative:
            return CONTINUE
        if not self._show_hidden and has_dotfile(relative):
            return CONTINUE
        directory = (self._root / relative).resolve() if relative else self._root
        if not directory.is_relative_to(self._root) or not directory.is_dir():
            return CONTINUE

        url_dir = request.path if request.path.endswith("/") else request.path + "/"
        entries = await anyio.to_thread.run_sync(self._scan, directory, url_dir)
        if directory != self._root:
            parent = url_dir.rstrip("/").rsplit("/", 1)[0] + "/"
            entries.insert(0, Entry("..", quote(parent), True, css_class=self._css("..", True)))

        accept = request.accept
        if "text/html" in accept or "*/*" in accept or not accept:
            return Complete(self._render_html(url_dir, entries), content_type=HTML)
        if "application/json" in accept:
            names = [entry.name for entry in entries if entry.name != ".."]
            return Complete(json.dumps(names), content_type="application/json; charset=utf-8")
        if "text/plain" in accept:
            names = [entry.name for entry in entries if entry.name != ".."]
            return Complete("\n".join(names) + "\n", content_type="text/plain; charset=utf-8")
        return Complete(self._render_html(url_dir, entries), content_type=HTML)

    def _css(self, name: str, is_dir: bool) -> str:
        return _icon_class(name, is_dir) if self._show_icons else ""

    def _scan(self, directory: Path, url_dir: str) -> list[Entry]:
        """Read *directory*: subdirectories first, then files, by name."""
        dirs: list[Entry] = []
        files: list[Entry] = []
        with os.scandir(directory) as it:
            for item in it:
                if item.name.startswith(".") and not self._show_hidden:
                    continue
                try:
                    is_dir = item.is_dir()
                    st = item.stat()
                except OSError:
                    # Broken symlink or vanished entry
                    files.append(Entry(item.name, quote(url_dir + item.name), False))
                    continue
                href = quote(url_dir + item.name) + ("/" if is_dir else "")
                entry = Entry(
                    name=item.name,
                    href=href,
                    is_dir=is_dir,
                    size="-" if is_dir else _human_size(st.st_size),
                    modified=datetime.fromtimestamp(st.st_mtime).strftime("%Y-%m-%d %H:%M"),
                    css_class=self._css(item.name, is_dir),
                )
                (dirs if is_dir else files).append(entry)
        dirs.sort(key=lambda e: e.name.lower())
        files.sort(key=lambda e: e.name.lower())
        return dirs + files

    def _render_html(self, url_dir: str, entries: list[Entry]) -> str:
        crumbs = [Crumb("~", "/")]
        href = "/"
        for part in [p for p in url_dir.split("/") if p]:
            href += part + "/"
            crumbs.append(Crumb(part, quote(href)))
        return _template().render(
            {
                "directory": url_dir,
                "crumbs": crumbs,
                "entries": entries,
                "view": self._view,
                "details": self._view == "details",
            }
        )
