"""Chainmux dispatch server.

Mutable while configuring (loggers, context constructor, routes,
fallbacks, static mounts). Frozen when ``listen()`` or the first ASGI
call starts serving.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import replace

from chainmux._internal.asgi import Receive, Scope, Send
from chainmux.access import AccessLogHandler, default_access_reporter
from chainmux.chain import ChainSettings, ContextFactory, MiddlewareChain, RequestHandler
from chainmux.config import ServerConfig
from chainmux.middleware.protocol import Middleware
from chainmux.routing.registry import RouterRegistry
from chainmux.routing.router import Router
from chainmux.server.handler import Mux, VersionDispatcher, handle_request
from chainmux.server.static import StaticFiles

logger = logging.getLogger("chainmux.server")


class Phase(enum.Enum):
    """Server lifecycle. Transitions only go forward."""

    CONFIGURING = "configuring"
    SERVING = "serving"
    TERMINATED = "terminated"


class Server[AppT]:
    """Versioned middleware-chain dispatcher.

    Usage::

        server = Server("0.0.0.0", 8080)
        server.set_logger(new_simple_logger("api"))
        server.set_app_context(AppState)

        server.serve("GET", "/v1/items/{id}", authenticate, load_item, render_item)
        server.serve_not_found(not_found)
        server.listen()

    Thread safety:
        Configuration is single-threaded by contract. The switch to
        serving uses a lock with a double check so concurrent first
        requests compile the routers exactly once.
    """

    __slots__ = (
        "_access_logger",
        "_freeze_lock",
        "_mux",
        "_phase",
        "_settings",
        "_static",
        "config",
        "registry",
    )

    def __init__(
        self,
        host: str | None = None,
        port: int | str | None = None,
        *,
        config: ServerConfig | None = None,
    ) -> None:
        config = config or ServerConfig()
        if host is not None:
            config = replace(config, host=host)
        if port is not None:
            config = replace(config, port=int(port))
        self.config: ServerConfig = config
        self.registry = RouterRegistry()
        self._settings = ChainSettings()
        self._access_logger: logging.Logger | None = None
        self._static: list[StaticFiles] = []
        self._mux: Mux | None = None
        self._phase = Phase.CONFIGURING
        self._freeze_lock = threading.Lock()

    # -- Logging and app context --

    def set_logger(self, logger: logging.Logger) -> None:
        """Use *logger* as both the access and the status sink."""
        self.set_access_logger(logger)
        self.set_status_logger(logger)

    def set_access_logger(self, logger: logging.Logger | None) -> None:
        """Sink for one record per request; applies to routes served later."""
        self._check_configuring()
        self._access_logger = logger

    def set_status_logger(self, logger: logging.Logger | None) -> None:
        """Sink for middleware errors and listener status."""
        self._check_configuring()
        self._settings.status_logger = logger

    def set_app_context(self, constructor: ContextFactory | None) -> None:
        """Set the callable that builds ``ctx.app`` for every request."""
        self._check_configuring()
        self._settings.context_factory = constructor

    @property
    def access_logger(self) -> logging.Logger | None:
        return self._access_logger

    @property
    def status_logger(self) -> logging.Logger | None:
        return self._settings.status_logger

    # -- Registration --

    def new_middleware_handler(self, middlewares: tuple[Middleware, ...]) -> MiddlewareChain[AppT]:
        """Compose *middlewares* into a chain bound to this server's settings.

        Raises ``ConfigurationError`` if *middlewares* is empty.
        """
        return MiddlewareChain(middlewares, settings=self._settings)

    def serve(self, method: str, path: str, *middlewares: Middleware) -> None:
        """Register a middleware chain for *method* on *path*.

        The first path segment is the version: ``/v1/items`` lands in the
        ``v1`` router. Raises ``ConfigurationError`` when no middleware is
        given or the path has no version segment.
        """
        self._check_configuring()
        handler: RequestHandler = self.new_middleware_handler(middlewares)
        if self._access_logger is not None:
            handler = AccessLogHandler(default_access_reporter(self._access_logger), handler)
        self.registry.register(method, path, handler)

    def serve_not_found(self, *middlewares: Middleware) -> None:
        """Install a fallback chain on every version registered so far."""
        self._check_configuring()
        self.registry.set_fallback(self.new_middleware_handler(middlewares))

    def serve_static(self, url_path: str, fs_path: str) -> None:
        """Serve files under *fs_path* at the *url_path* prefix."""
        self._check_configuring()
        self._static.append(StaticFiles(fs_path, url_path))

    def get_router(self, version: str) -> Router:
        """Return the router for *version*.

        Raises ``RouterNotFound`` when nothing is registered for it.
        """
        return self.registry.get(version)

    # -- Serving --

    @property
    def phase(self) -> Phase:
        return self._phase

    def listen(self) -> None:
        """Start serving on ``config.addr`` and block.

        A failure to bind or serve is fatal: it is logged at CRITICAL and
        the process exits with status 1.
        """
        from chainmux.server.runner import run_server

        self._ensure_frozen()
        status = self._settings.status_logger or logger
        status.info("starting service on %s", self.config.addr)
        try:
            run_server(self, self.config)
        except Exception as exc:
            self._phase = Phase.TERMINATED
            status.critical("service on %s failed: %s", self.config.addr, exc, exc_info=exc)
            raise SystemExit(1) from exc

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._mux is not None
        await handle_request(scope, receive, send, mux=self._mux)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._phase is not Phase.CONFIGURING:
            return
        with self._freeze_lock:
            if self._phase is not Phase.CONFIGURING:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile routers and attach every mount. Hold ``_freeze_lock``."""
        self.registry.compile()
        mux = Mux()
        for version, router in self.registry.items():
            mux.mount(f"/{version}/", VersionDispatcher(version, router))
        for static in self._static:
            mux.mount(static.prefix, static)
        self._mux = mux
        self._phase = Phase.SERVING
        logger.debug("serving mounts: %s", ", ".join(mux.prefixes) or "(none)")

    def _check_configuring(self) -> None:
        if self._phase is not Phase.CONFIGURING:
            msg = (
                "Cannot modify the server after it has started serving. "
                "Register routes, fallbacks and loggers before calling listen()."
            )
            raise RuntimeError(msg)

    def __repr__(self) -> str:
        versions = ", ".join(self.registry.versions)
        return f"<Server {self.config.addr} phase={self._phase.value} versions=[{versions}]>"

