"""nos CLI — statically serve a folder.

Entry point registered as ``nos`` in ``pyproject.toml``::

    [project.scripts]
    nos = "nos.cli:main"
"""

import argparse


def _on_off(value: str) -> bool:
    if value not in ("on", "off"):
        msg = f"expected 'on' or 'off', got {value!r}"
        raise argparse.ArgumentTypeError(msg)
    return value == "on"


def build_parser() -> argparse.ArgumentParser:
    """The ``nos`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="nos",
        description="a tool to statically serve a folder",
        usage="%(prog)s [options] [path]",
    )
    parser.add_argument("path", nargs="?", default=".", help="Directory to serve [.]")
    parser.add_argument("-p", "--port", type=int, default=8080, help="port of the service [8080]")
    parser.add_argument("--host", default="0.0.0.0", help="host of the service [0.0.0.0]")
    parser.add_argument(
        "-t",
        "--proxy-to",
        dest="proxy_to",
        default=None,
        metavar="HOST:PORT",
        help="proxy the rest traffic to the specific host",
    )
    parser.add_argument(
        "--open-browser",
        dest="open_browser",
        type=_on_off,
        default=True,
        metavar="on|off",
        help="auto open browser [on]",
    )
    parser.add_argument(
        "--production",
        action="store_true",
        help="start as production mode, default is development mode",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default="info",
        choices=("debug", "info", "warning", "error"),
        help="logging verbosity [info]",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``nos`` command."""
    args = build_parser().parse_args(argv)

    from nos.cli._run import serve

    serve(args)
