"""nos — statically serve a folder, with live reload.

Serves files from a directory, falls back to directory listings,
live-reloads HTML pages in development mode, and can proxy everything
else to an upstream server.

Basic usage::

    from nos import App, ServeConfig

    app = App(ServeConfig(root="./site"))
    app.run()

Custom pipelines::

    from nos import CONTINUE, Complete, Pipeline

    async def teapot(ctx):
        return Complete("short and stout", status=418) if ctx.path == "/tea" else CONTINUE

    pipeline = Pipeline().then(teapot, StaticFiles("./site"))
"""

__version__ = "0.1.0"
__all__ = [
    "CONTINUE",
    "App",
    "Complete",
    "ConfigurationError",
    "Context",
    "Continue",
    "Handler",
    "NosError",
    "Pipeline",
    "ServeConfig",
    "WatchRegistry",
    "assemble",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import nos`` fast while providing a clean top-level API.
    """
    if name == "App":
        from nos.app import App

        return App

    if name == "ServeConfig":
        from nos.config import ServeConfig

        return ServeConfig

    if name == "assemble":
        from nos.assemble import assemble

        return assemble

    if name in ("CONTINUE", "Complete", "Context", "Continue", "Handler", "Pipeline"):
        from nos import pipeline as _pipeline

        return getattr(_pipeline, name)

    if name == "WatchRegistry":
        from nos.watch.registry import WatchRegistry

        return WatchRegistry

    if name in ("ConfigurationError", "NosError"):
        from nos import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
