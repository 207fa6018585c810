"""Invoke helper: call sync or async callables uniformly.

Middlewares and context constructors can be ``def`` or ``async def``.
The sync/async check lives here and nowhere else.

Usage::

    from chainmux._internal.invoke import invoke

    outcome = await invoke(middleware, writer, request, ctx)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
