"""``nos [path]`` — build the config and app, then start the server."""

import argparse
import logging
import sys
import webbrowser
from pathlib import Path

import anyio

from nos.app import App
from nos.config import ServeConfig
from nos.errors import ConfigurationError

logger = logging.getLogger("nos.server")


def config_from_args(args: argparse.Namespace) -> ServeConfig:
    """Translate parsed CLI arguments into a ServeConfig."""
    return ServeConfig(
        root=args.path,
        host=args.host,
        port=args.port,
        proxy_to=args.proxy_to,
        open_browser=args.open_browser,
        production=args.production,
        log_level=args.log_level,
    )


def serve(args: argparse.Namespace) -> None:
    """Serve ``args.path`` until interrupted.

    Exits with status 1 when the root is not a directory or the
    configuration is rejected.
    """
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(message)s",
    )

    if not Path(args.path).is_dir():
        print(f"Error: {args.path!r} is not a directory", file=sys.stderr)
        raise SystemExit(1)

    config = config_from_args(args)
    try:
        app = App(config)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if config.open_browser:

        @app.on_startup
        async def open_browser() -> None:
            await anyio.to_thread.run_sync(webbrowser.open, config.url)

    mode = "production" if config.production else "development"
    logger.info("Serve: %s (%s mode, root %s)", config.url, mode, Path(config.root).resolve())
    app.run()
