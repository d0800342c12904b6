"""Server startup.

Starts a pounce ASGI server with the live nos App object. Always a
single worker: the watch registry and reload broadcaster live in this
process, and live reload is handled by nos itself, so pounce's own
code reload stays off.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nos.app import App


def run_server(app: App, host: str, port: int, *, log_level: str = "info") -> None:
    """Start a pounce server for *app* and block until it stops.

    Pounce's ``run()`` takes an import string (e.g., ``"myapp:app"``),
    but nos has a live ``App`` object, so ``pounce.Server`` is used
    directly with the ASGI callable.

    Args:
        app: ASGI callable (nos App instance).
        host: Bind host address.
        port: Bind port number.
        log_level: Pounce log level (``"debug"``, ``"info"``, ...).
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=False,
        log_level=log_level,
    )
    server = Server(config, app)
    server.run()
