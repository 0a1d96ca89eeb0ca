"""Invoke helpers — call sync or async callables uniformly.

Route handlers, error handlers and batch jobs can be ``def`` or
``async def``. Any code that calls user-provided code goes through
this helper so the sync/async check lives in exactly one place.

Usage::

    from wicket._internal.invoke import invoke

    result = await invoke(handler, ctx, *params)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
