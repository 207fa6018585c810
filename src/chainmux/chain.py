"""Middleware chain executor.

Composes an ordered list of middlewares into one request handler. The
protocol makes stopping the default: a middleware must opt into
continuing (``ctx.next()`` or returning ``CONTINUE``), and any error halts
the chain unconditionally.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from chainmux._internal.invoke import invoke
from chainmux.context import Context
from chainmux.errors import ConfigurationError
from chainmux.http.request import Request
from chainmux.http.response import ResponseWriter
from chainmux.middleware.protocol import Continue, Fail, Middleware, Stop

# A composed handler: runs a whole chain for one request.
type RequestHandler = Callable[[Request, ResponseWriter], Awaitable[None]]

# Builds the per-request application payload; sync or async.
type ContextFactory = Callable[[], Any]


@dataclass(slots=True)
class ChainSettings:
    """Server-wide knobs every chain reads at request time.

    A ``Server`` owns one instance and hands it to each chain it builds,
    so its logger setters apply to chains registered before them.
    """

    status_logger: logging.Logger | None = None
    context_factory: ContextFactory | None = None


class MiddlewareChain[AppT]:
    """A frozen, non-empty sequence of middlewares run as one handler.

    Usage::

        chain = MiddlewareChain([authenticate, load_item, render_item])
        await chain(request, writer)

    Raises ``ConfigurationError`` at construction if *middlewares* is empty,
    so a bad registration fails before the server starts serving.
    """

    __slots__ = ("_middlewares", "settings")

    def __init__(
        self,
        middlewares: Sequence[Middleware],
        *,
        settings: ChainSettings | None = None,
        context_factory: ContextFactory | None = None,
        status_logger: logging.Logger | None = None,
    ) -> None:
        if not middlewares:
            msg = "Missing at least one middleware; a chain needs a terminal handler."
            raise ConfigurationError(msg)
        self._middlewares: tuple[Middleware, ...] = tuple(middlewares)
        self.settings = settings or ChainSettings(
            status_logger=status_logger, context_factory=context_factory
        )

    @property
    def middlewares(self) -> tuple[Middleware, ...]:
        return self._middlewares

    async def __call__(self, request: Request, writer: ResponseWriter) -> None:
        ctx: Context[AppT] = Context(writer, request.path_params)
        if self.settings.context_factory is not None:
            # A failing constructor is a per-request error like any middleware's.
            try:
                ctx.app = await invoke(self.settings.context_factory)
            except Exception as exc:
                self._fail(request, ctx, exc)
                return

        for middleware in self._middlewares:
            ctx._reset_next()
            try:
                result = await invoke(middleware, writer, request, ctx)
            except Exception as exc:
                result = Fail(exc)

            if isinstance(result, BaseException):
                result = Fail(result)

            match result:
                case Fail(error=error):
                    self._fail(request, ctx, error)
                    return
                case Stop():
                    return
                case Continue():
                    continue
                case None if ctx.next_called:
                    continue
                case _:
                    return

    def _fail(self, request: Request, ctx: Context[AppT], error: BaseException) -> None:
        status_logger = self.settings.status_logger
        if status_logger is not None:
            status_logger.error(
                "%s %s %r", request.method, request.url, error, exc_info=error
            )
        ctx.response.error(str(error), 500)

    def __len__(self) -> int:
        return len(self._middlewares)

    def __repr__(self) -> str:
        names = ", ".join(getattr(m, "__name__", type(m).__name__) for m in self._middlewares)
        return f"MiddlewareChain([{names}])"
