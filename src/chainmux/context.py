"""Per-request context threaded through a middleware chain.

A ``Context`` is created fresh by the chain executor for each request and
dropped when the chain ends. It is never shared between requests, so it
needs no locking.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from chainmux.http.response import ResponseHelper, ResponseWriter
from chainmux.middleware.protocol import CONTINUE, Continue


class Context[AppT]:
    """State shared by every middleware of one request.

    Attributes:
        path_params: Read-only variables bound by the router match.
        writer: The request's response writer (same object every
            middleware receives as its first argument).
        response: Helper for writing common responses via ``writer``.
        app: Application payload built by the server's context
            constructor, or ``None`` when none is configured.
    """

    __slots__ = ("_next_called", "app", "path_params", "response", "writer")

    def __init__(
        self,
        writer: ResponseWriter,
        path_params: Mapping[str, str] | None = None,
        app: AppT | None = None,
    ) -> None:
        self.path_params: Mapping[str, str] = MappingProxyType(dict(path_params or {}))
        self.writer = writer
        self.response = ResponseHelper(writer)
        self.app: AppT | None = app
        self._next_called = False

    def next(self) -> Continue:
        """Ask the chain to run the next middleware after this one returns.

        Returns ``CONTINUE`` so a middleware can ``return ctx.next()``.
        """
        self._next_called = True
        return CONTINUE

    def _reset_next(self) -> None:
        self._next_called = False

    @property
    def next_called(self) -> bool:
        """Whether ``next()`` was called during the current invocation."""
        return self._next_called

    def __repr__(self) -> str:
        return f"<Context path_params={dict(self.path_params)!r} app={self.app!r}>"
