"""ASGI handler: the only place that turns scopes into chainmux types.

Builds a ``Request`` and a fresh ``ResponseWriter`` per HTTP scope, picks
the mount whose prefix best matches the path (a version router or a
static directory), runs it, and flushes the writer through ASGI.
"""

import logging

from chainmux._internal.asgi import Receive, Scope, Send
from chainmux.chain import RequestHandler
from chainmux.errors import MethodNotAllowed, NotFound
from chainmux.http.request import Request
from chainmux.http.response import ResponseHelper, ResponseWriter
from chainmux.routing.router import Router
from chainmux.server.sender import send_response

logger = logging.getLogger("chainmux.server")

NOT_FOUND_BODY = "404 page not found"


class VersionDispatcher:
    """Runs the route of one version router that matches the request.

    Falls back to the router's fallback handler (or a plain 404) when no
    route matches, and answers 405 when only the method is wrong.
    """

    __slots__ = ("router", "version")

    def __init__(self, version: str, router: Router) -> None:
        self.version = version
        self.router = router

    async def __call__(self, request: Request, writer: ResponseWriter) -> None:
        try:
            match = self.router.match(request.method, request.path)
        except MethodNotAllowed as exc:
            for name, value in exc.headers:
                writer.headers.set(name, value)
            ResponseHelper(writer).error(exc.detail, exc.status)
            return
        except NotFound:
            if self.router.fallback is not None:
                await self.router.fallback(request, writer)
            else:
                ResponseHelper(writer).error(NOT_FOUND_BODY, 404)
            return

        await match.route.handler(request.with_path_params(match.path_params), writer)


class Mux:
    """Top-level prefix dispatcher.

    Prefixes end with ``/``; the longest matching prefix wins. A request for
    a prefix without its trailing slash is redirected to it.
    """

    __slots__ = ("_mounts",)

    def __init__(self) -> None:
        self._mounts: dict[str, RequestHandler] = {}

    def mount(self, prefix: str, handler: RequestHandler) -> None:
        if not prefix.endswith("/"):
            prefix += "/"
        self._mounts[prefix] = handler

    @property
    def prefixes(self) -> tuple[str, ...]:
        return tuple(self._mounts)

    def resolve(self, path: str) -> RequestHandler | None:
        best: str | None = None
        for prefix in self._mounts:
            if path.startswith(prefix) and (best is None or len(prefix) > len(best)):
                best = prefix
        return self._mounts[best] if best is not None else None

    async def __call__(self, request: Request, writer: ResponseWriter) -> None:
        handler = self.resolve(request.path)
        if handler is not None:
            await handler(request, writer)
            return

        if request.path + "/" in self._mounts:
            location = request.path + "/"
            if request.query_string:
                location += "?" + request.query_string.decode("latin-1")
            writer.headers.set("Location", location)
            writer.write_header(301)
            return

        ResponseHelper(writer).error(NOT_FOUND_BODY, 404)


async def handle_request(scope: Scope, receive: Receive, send: Send, *, mux: Mux) -> None:
    """Process a single HTTP request through the mux."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    writer = ResponseWriter()
    try:
        await mux(request, writer)
    except Exception:
        # Middleware errors never get here; the chain contains them.
        logger.exception("500 %s %s", request.method, request.path)
        writer = ResponseWriter()
        ResponseHelper(writer).error("Internal Server Error", 500)

    await send_response(writer.to_response(), send, method=request.method)
