"""Live-reload side channel: watch registry, stat poller, broadcaster."""

from nos.watch.broadcast import ReloadBroadcaster, ReloadEvent
from nos.watch.registry import WatchRegistry
from nos.watch.watcher import FileWatcher

__all__ = ["FileWatcher", "ReloadBroadcaster", "ReloadEvent", "WatchRegistry"]
