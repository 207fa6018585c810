"""Async test client for chainmux servers.

Sends requests through the ASGI interface in-process (no sockets) and
returns the same ``Response`` type a ``ResponseWriter`` produces.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from chainmux.app import Server
from chainmux.http.response import DEFAULT_CONTENT_TYPE, Response


def _http_scope(
    method: str,
    target: str,
    headers: Mapping[str, str],
    client: tuple[str, int],
) -> dict[str, Any]:
    path, _, query = target.partition("?")
    return {
        "type": "http",
        "asgi": {"version": "3.0", "spec_version": "2.3"},
        "http_version": "1.1",
        "scheme": "http",
        "method": method.upper(),
        "path": path,
        "raw_path": path.encode("latin-1"),
        "query_string": query.encode("latin-1"),
        "root_path": "",
        "headers": [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in headers.items()],
        "client": client,
        "server": ("testserver", 80),
    }


@dataclass(slots=True)
class _Exchange:
    """One request body going in, the ASGI messages coming out."""

    body: bytes
    delivered: bool = False
    status: int = 200
    headers: list[tuple[bytes, bytes]] = field(default_factory=list)
    chunks: list[bytes] = field(default_factory=list)

    async def receive(self) -> dict[str, Any]:
        if self.delivered:
            return {"type": "http.disconnect"}
        self.delivered = True
        return {"type": "http.request", "body": self.body, "more_body": False}

    async def send(self, message: dict[str, Any]) -> None:
        kind = message["type"]
        if kind == "http.response.start":
            self.status = message["status"]
            self.headers = list(message.get("headers", ()))
        elif kind == "http.response.body":
            self.chunks.append(message.get("body", b""))

    def to_response(self) -> Response:
        content_type = DEFAULT_CONTENT_TYPE
        rest: list[tuple[str, str]] = []
        for raw_name, raw_value in self.headers:
            name, value = raw_name.decode("latin-1"), raw_value.decode("latin-1")
            if name == "content-type":
                content_type = value
            elif name != "content-length":
                rest.append((name, value))
        return Response(
            body=b"".join(self.chunks),
            status=self.status,
            content_type=content_type,
            headers=tuple(rest),
        )


class TestClient:
    """Drives a chainmux ``Server`` through ASGI without a network.

    Usage::

        async with TestClient(server) as client:
            response = await client.get("/v1/items/42")
            assert response.text == "item 42"

    Entering the client freezes the server, exactly like the first request
    to a listening server would.
    """

    __test__ = False  # not a pytest test class

    __slots__ = ("client_addr", "server")

    def __init__(self, server: Server[Any], *, client_addr: tuple[str, int] = ("127.0.0.1", 0)) -> None:
        self.server = server
        self.client_addr = client_addr

    async def __aenter__(self) -> TestClient:
        self.server._ensure_frozen()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    async def get(self, path: str, *, headers: Mapping[str, str] | None = None) -> Response:
        return await self.request("GET", path, headers=headers)

    async def head(self, path: str, *, headers: Mapping[str, str] | None = None) -> Response:
        return await self.request("HEAD", path, headers=headers)

    async def delete(self, path: str, *, headers: Mapping[str, str] | None = None) -> Response:
        return await self.request("DELETE", path, headers=headers)

    async def put(
        self, path: str, *, headers: Mapping[str, str] | None = None, body: bytes = b""
    ) -> Response:
        return await self.request("PUT", path, headers=headers, body=body)

    async def post(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
        json: object | None = None,
    ) -> Response:
        """POST *body*, or *json* encoded with an ``application/json`` type."""
        merged = dict(headers or {})
        if json is not None:
            body = json_module.dumps(json).encode("utf-8")
            merged.setdefault("content-type", "application/json")
        return await self.request("POST", path, headers=merged, body=body)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
    ) -> Response:
        """Run one request of any method through the server."""
        scope = _http_scope(method, path, headers or {}, self.client_addr)
        exchange = _Exchange(body=body)
        await self.server(scope, exchange.receive, exchange.send)
        return exchange.to_response()
