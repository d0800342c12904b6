"""Watch registry — the set of files whose changes trigger a reload.

An interest index: handlers insert paths while resolving requests, the
file watcher reads them. Nothing is ever removed, and inserting a path
twice is a no-op.

Each path is stored with the state it had when it was registered. The
watcher compares its first poll of a path against that baseline, so a
file created between registration and the next poll still counts as a
change.

Free-threading safety:
    - Paths are normalized strings (immutable, safe to share)
    - A Lock protects the mapping; readers get point-in-time copies
"""

import logging
import os
import threading
from collections.abc import Iterator
from pathlib import Path

from nos.errors import WatchSubscriptionError

logger = logging.getLogger("nos.watch")

# (mtime_ns, size) for an existing file, None for a missing or unreadable one
type FileState = tuple[int, int] | None


def stat_file(path: str) -> FileState:
    """Return the change-detection state of *path*.

    Never raises: a path that cannot be stat'ed (missing, name too long,
    permission denied, symlink loop, embedded NUL) has state ``None``.
    """
    try:
        st = os.stat(path)
    except (OSError, ValueError):
        return None
    return (st.st_mtime_ns, st.st_size)


class WatchRegistry:
    """De-duplicated set of watched paths, relative to *cwd*.

    Usage::

        registry = WatchRegistry()
        registry.add("site/index.html")   # True
        registry.add("./site/index.html") # False — same path
    """

    __slots__ = ("_cwd", "_lock", "_paths")

    def __init__(self, cwd: str | Path | None = None) -> None:
        self._cwd = os.path.abspath(cwd if cwd is not None else os.getcwd())
        self._paths: dict[str, FileState] = {}
        self._lock = threading.Lock()

    @property
    def cwd(self) -> str:
        """Directory that registered paths are relative to."""
        return self._cwd

    def normalize(self, path: str | Path) -> str:
        """Return *path* as a normalized path relative to ``cwd``.

        Raises:
            WatchSubscriptionError: If *path* is empty or cannot be made
                relative (e.g. another drive on Windows).
        """
        raw = os.fspath(path)
        if not raw:
            msg = "Cannot watch an empty path"
            raise WatchSubscriptionError(msg)
        if os.path.isabs(raw):
            try:
                raw = os.path.relpath(raw, self._cwd)
            except ValueError as exc:
                msg = f"Cannot watch {raw!r} relative to {self._cwd!r}"
                raise WatchSubscriptionError(msg) from exc
        return os.path.normpath(raw)

    def add(self, path: str | Path) -> bool:
        """Register *path*. Returns True if it was not watched before."""
        key = self.normalize(path)
        with self._lock:
            if key in self._paths:
                return False
        state = stat_file(self.absolute(key))
        with self._lock:
            if key in self._paths:
                return False
            self._paths[key] = state
        logger.debug("watching %s", key)
        return True

    def absolute(self, path: str) -> str:
        """Resolve a registered relative path against ``cwd``."""
        return os.path.join(self._cwd, path)

    def snapshot(self) -> frozenset[str]:
        """Point-in-time copy of the watched paths."""
        with self._lock:
            return frozenset(self._paths)

    def baselines(self) -> dict[str, FileState]:
        """Point-in-time copy of each path's state at registration."""
        with self._lock:
            return dict(self._paths)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        try:
            key = self.normalize(path)
        except WatchSubscriptionError:
            return False
        with self._lock:
            return key in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.snapshot()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)
