"""Middleware protocol and chain outcomes.

A middleware is any callable matching::

    def my_mw(writer: ResponseWriter, request: Request, ctx: Context) -> Outcome | None: ...

``async def`` works the same way. No base class required.

What a middleware returns decides what the chain does next:

- ``Continue`` (or ``None`` after calling ``ctx.next()``): run the next one.
- ``Stop`` (or ``None`` without calling ``ctx.next()``): the middleware has
  handled the response; nothing else runs.
- ``Fail(error)``, a returned exception, or a raised exception: the chain
  halts and a 500 error with the error's message is written.
"""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from chainmux.context import Context
    from chainmux.http.request import Request
    from chainmux.http.response import ResponseWriter


@dataclass(frozen=True, slots=True)
class Continue:
    """Proceed to the next middleware."""


@dataclass(frozen=True, slots=True)
class Stop:
    """The response is complete; run no further middlewares."""


@dataclass(frozen=True, slots=True)
class Fail:
    """Halt the chain with *error*."""

    error: BaseException


type Outcome = Continue | Stop | Fail

CONTINUE = Continue()
STOP = Stop()


class Middleware(Protocol):
    """Protocol for chain elements.

    Accepts both functions and callable objects::

        # Function middleware
        async def require_json(writer, request, ctx):
            if request.content_type != "application/json":
                ctx.response.error("expected JSON", 415)
                return STOP
            return ctx.next()

        # Class middleware
        class Tagger:
            def __call__(self, writer, request, ctx):
                writer.headers.set("X-Tag", "1")
                return CONTINUE
    """

    def __call__(
        self, writer: ResponseWriter, request: Request, ctx: Context[Any], /
    ) -> Outcome | BaseException | None | Awaitable[Outcome | BaseException | None]: ...
