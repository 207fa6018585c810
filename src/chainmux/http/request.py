"""Immutable HTTP request.

Frozen metadata with async body access. Path parameters are bound by the
version router after matching, via ``with_path_params``.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any
from urllib.parse import parse_qs

from chainmux._internal.asgi import Receive
from chainmux.http.headers import Headers

_EMPTY: Mapping[str, str] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable inbound HTTP request.

    Body is read asynchronously via ``.body()``, ``.json()``, ``.text()``
    and cached after the first read, so several middlewares in one chain
    can each look at it.
    """

    method: str
    path: str
    headers: Headers
    query_string: bytes = b""
    path_params: Mapping[str, str] = _EMPTY
    http_version: str = "1.1"
    client: tuple[str, int] | None = None

    _receive: Receive | None = field(default=None, repr=False, compare=False)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def url(self) -> str:
        """Request target: path plus query string."""
        if self.query_string:
            return f"{self.path}?{self.query_string.decode('latin-1')}"
        return self.path

    @property
    def query(self) -> dict[str, list[str]]:
        """Parsed query string (name -> all values)."""
        if "_query" not in self._cache:
            self._cache["_query"] = parse_qs(
                self.query_string.decode("latin-1"), keep_blank_values=True
            )
        return self._cache["_query"]

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def remote_addr(self) -> str:
        """``host:port`` of the peer, or ``"-"`` when unknown."""
        if self.client is None:
            return "-"
        host, port = self.client
        return f"{host}:{port}"

    def with_path_params(self, params: Mapping[str, str]) -> Request:
        """Return a copy bound to the router's path variables.

        The body cache is shared so a body read before routing is not lost.
        """
        return replace(self, path_params=MappingProxyType(dict(params)))

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body (cached)."""
        if "_body" in self._cache:
            return self._cache["_body"]
        result = b"".join([chunk async for chunk in self.stream()])
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncIterator[bytes]:
        """Stream the request body in chunks."""
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    async def json(self) -> Any:
        return json_module.loads(await self.body())

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI HTTP scope and receive callable."""
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query_string=scope.get("query_string", b""),
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            _receive=receive,
        )
