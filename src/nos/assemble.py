"""Pipeline assembly — decide the handler chain once, at startup.

Development::

    access_log -> DevHelper -> HTMLFallback -> StaticFiles(watching)
               -> DirectoryListing(details) -> [ProxyForward]

Production::

    access_log -> StaticFiles -> DirectoryListing -> [ProxyForward]

The mode is never consulted again per request.
"""

from nos.config import ServeConfig
from nos.errors import ConfigurationError
from nos.handlers.access_log import access_log
from nos.handlers.dev_helper import DevHelper
from nos.handlers.directory import DirectoryListing
from nos.handlers.html_fallback import HTMLFallback
from nos.handlers.proxy import ProxyForward
from nos.handlers.static import StaticFiles
from nos.pipeline.engine import Pipeline


def assemble(config: ServeConfig, *, helper: DevHelper | None = None) -> Pipeline:
    """Build the immutable handler chain for *config*.

    Raises:
        ConfigurationError: If development mode is requested without a
            dev helper, or the proxy target is malformed.
    """
    root = config.root
    pipeline = Pipeline().then(access_log)

    if config.production:
        pipeline = pipeline.then(
            StaticFiles(root, dotfiles="ignore", cache_control=config.cache_control),
            DirectoryListing(root),
        )
    else:
        if helper is None:
            msg = "Development mode needs a DevHelper for live reload"
            raise ConfigurationError(msg)
        pipeline = pipeline.then(
            helper,
            HTMLFallback(root, helper, cwd=helper.registry.cwd),
            StaticFiles(
                root,
                dotfiles="allow",
                on_file=helper.watch,
                cache_control=config.cache_control,
            ),
            DirectoryListing(root, show_hidden=True, show_icons=True, view="details"),
        )

    if config.proxy_to:
        try:
            pipeline = pipeline.then(ProxyForward(config.proxy_to))
        except ValueError as exc:
            msg = f"Invalid proxy target {config.proxy_to!r}: {exc}"
            raise ConfigurationError(msg) from exc

    return pipeline
