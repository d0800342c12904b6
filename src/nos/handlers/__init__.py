"""Built-in handlers.

    access_log -- Log every request, then defer
    DevHelper -- Watch registration and the live-reload SSE channel
    HTMLFallback -- Extensionless/HTML routes to files or index.html
    StaticFiles -- Serve files from the root directory
    DirectoryListing -- List directories (HTML, JSON or plain text)
    ProxyForward -- Forward everything else to an upstream host
"""

from nos.handlers.access_log import access_log
from nos.handlers.dev_helper import DevHelper
from nos.handlers.directory import DirectoryListing
from nos.handlers.html_fallback import HTMLFallback
from nos.handlers.proxy import ProxyForward
from nos.handlers.static import StaticFiles

__all__ = [
    "DevHelper",
    "DirectoryListing",
    "HTMLFallback",
    "ProxyForward",
    "StaticFiles",
    "access_log",
]
