"""Invoke helpers — call sync or async callables uniformly.

Handlers and lifecycle hooks can be ``def`` or ``async def``. Any code
that calls one must handle both cases; the check lives here.

Usage::

    from nos._internal.invoke import invoke

    outcome = await invoke(handler, ctx)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
