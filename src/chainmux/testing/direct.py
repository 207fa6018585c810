"""Run a middleware chain directly, without a server or routing.

Handy for unit-testing middlewares::

    result = await call_chain([authenticate, show_item], path_params={"id": "7"})
    assert result.response.status == 200
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from chainmux.chain import ContextFactory, MiddlewareChain
from chainmux.http.headers import Headers
from chainmux.http.request import Request
from chainmux.http.response import Response, ResponseWriter
from chainmux.middleware.protocol import Middleware


@dataclass(frozen=True, slots=True)
class ChainResult:
    """What a chain produced: the request it saw and the buffered response."""

    request: Request
    response: Response


async def call_chain(
    middlewares: Sequence[Middleware],
    *,
    method: str = "GET",
    path: str = "/",
    headers: Mapping[str, str] | None = None,
    path_params: Mapping[str, str] | None = None,
    context_factory: ContextFactory | None = None,
    status_logger: logging.Logger | None = None,
) -> ChainResult:
    """Build a request, run *middlewares* as one chain, and snapshot the writer."""
    path_part, _, query = path.partition("?")
    raw = tuple(
        (k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in (headers or {}).items()
    )
    request = Request(
        method=method.upper(),
        path=path_part,
        headers=Headers(raw),
        query_string=query.encode("latin-1"),
    ).with_path_params(path_params or {})

    chain: MiddlewareChain[object] = MiddlewareChain(
        middlewares, context_factory=context_factory, status_logger=status_logger
    )
    writer = ResponseWriter()
    await chain(request, writer)
    return ChainResult(request=request, response=writer.to_response())
