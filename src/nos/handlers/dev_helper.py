"""Development helper — watch registration and the live-reload channel.

Three jobs, one object:

- ``watch(path)``: register a file for reload notifications. Called by
  the HTML fallback resolver and by the static resolver's ``on_file``
  callback. Never raises.
- ``browser_helper``: the ``<script>`` bootstrap appended to HTML pages.
  It opens an ``EventSource`` on ``/__nos/events`` and reloads the page
  (or just the stylesheets, for CSS changes) on each ``reload`` event.
- As a handler: answers ``GET /__nos/events`` with that SSE stream.
"""

import logging
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Final

from nos.errors import WatchSubscriptionError
from nos.pipeline.context import CONTINUE, Complete, Context, Outcome
from nos.realtime.events import EventStream, SSEEvent
from nos.watch.broadcast import ReloadBroadcaster
from nos.watch.registry import WatchRegistry

logger = logging.getLogger("nos.watch")

EVENTS_PATH: Final = "/__nos/events"

_BOOTSTRAP_JS: Final = """\
(function () {
  if (!window.EventSource || window.__nosReload) return;
  window.__nosReload = true;
  var source = new EventSource("%(events_path)s");
  source.addEventListener("reload", function (event) {
    if (/\\.css$/i.test(event.data)) {
      var links = document.querySelectorAll('link[rel="stylesheet"]');
      for (var i = 0; i < links.length; i++) {
        var href = links[i].href.replace(/[?&]_nos=\\d+/, "");
        links[i].href = href + (href.indexOf("?") < 0 ? "?" : "&") + "_nos=" + Date.now();
      }
      return;
    }
    location.reload();
  });
})();"""


def browser_helper_snippet(events_path: str = EVENTS_PATH) -> str:
    """The live-reload ``<script>`` tag appended to HTML responses."""
    js = _BOOTSTRAP_JS % {"events_path": events_path}
    return f'\n<script data-nos="reload">\n{js}\n</script>\n'


class DevHelper:
    """Live-reload collaborator shared by the development pipeline.

    Usage::

        helper = DevHelper(WatchRegistry(), ReloadBroadcaster())
        helper.watch("site/index.html")
        html = content + helper.browser_helper
    """

    __slots__ = ("_broadcaster", "_events_path", "_heartbeat", "_registry", "browser_helper")

    def __init__(
        self,
        registry: WatchRegistry,
        broadcaster: ReloadBroadcaster,
        *,
        events_path: str = EVENTS_PATH,
        heartbeat_interval: float = 15.0,
    ) -> None:
        self._registry = registry
        self._broadcaster = broadcaster
        self._events_path = events_path
        self._heartbeat = heartbeat_interval
        self.browser_helper: bytes = browser_helper_snippet(events_path).encode("utf-8")

    @property
    def registry(self) -> WatchRegistry:
        return self._registry

    @property
    def broadcaster(self) -> ReloadBroadcaster:
        return self._broadcaster

    def watch(self, path: str | Path) -> None:
        """Register *path* for reload notifications; failures are logged."""
        try:
            self._registry.add(path)
        except (WatchSubscriptionError, OSError, ValueError) as exc:
            logger.warning("cannot watch %s: %s", path, exc)

    async def __call__(self, ctx: Context) -> Outcome:
        """Serve the reload event stream; defer everything else."""
        if ctx.path != self._events_path or ctx.request.method != "GET":
            return CONTINUE
        stream = EventStream(self._events(), heartbeat_interval=self._heartbeat)
        return Complete(stream, content_type="text/event-stream")

    async def _events(self) -> AsyncIterator[SSEEvent]:
        async for event in self._broadcaster.subscribe():
            yield SSEEvent(data=event.path, event="reload")
