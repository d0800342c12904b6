"""Serve configuration.

ServeConfig is a frozen dataclass — parsed once at startup by the CLI,
never mutated afterwards, shared read-only by every request.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ServeConfig:
    """Serve configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ServeConfig(root="./site", port=3000, proxy_to="127.0.0.1:8000")
    """

    # Content
    root: str | Path = "."

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    open_browser: bool = True

    # Upstream for unmatched traffic ("host:port" or a full URL)
    proxy_to: str | None = None

    # Mode: development installs live reload, production serves files only
    production: bool = False

    # Live reload (development only)
    watch_interval: float = 0.3  # seconds between stat polls
    sse_heartbeat_interval: float = 15.0

    # Static files
    cache_control: str = "no-cache"

    # Logging
    log_level: str = "info"

    @property
    def url(self) -> str:
        """Local URL the server is reachable on."""
        return f"http://127.0.0.1:{self.port}"
