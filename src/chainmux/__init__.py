"""Chainmux: versioned routing onto ordered middleware chains.

Each route is a chain of middlewares sharing one per-request context.
Stopping is the default: a middleware must opt into running the next one.

Basic usage::

    from chainmux import Server

    server = Server("127.0.0.1", 8080)

    def authenticate(writer, request, ctx):
        if "authorization" not in request.headers:
            ctx.response.error("unauthorized", 401)
            return None
        return ctx.next()

    def show_item(writer, request, ctx):
        ctx.response.json({"id": ctx.path_params["id"]})

    server.serve("GET", "/v1/items/{id}", authenticate, show_item)
    server.listen()
"""

__version__ = "0.1.0"
__all__ = [
    "CONTINUE",
    "STOP",
    "ChainmuxError",
    "ConfigurationError",
    "Context",
    "Continue",
    "Fail",
    "Middleware",
    "MiddlewareChain",
    "Outcome",
    "Phase",
    "Request",
    "Response",
    "ResponseWriter",
    "RouterNotFound",
    "Server",
    "ServerConfig",
    "Stop",
    "new_simple_logger",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import chainmux`` cheap while providing a flat top-level API.
    """
    if name in ("Server", "Phase"):
        from chainmux import app as _app

        return getattr(_app, name)

    if name == "ServerConfig":
        from chainmux.config import ServerConfig

        return ServerConfig

    if name == "Context":
        from chainmux.context import Context

        return Context

    if name == "MiddlewareChain":
        from chainmux.chain import MiddlewareChain

        return MiddlewareChain

    if name in ("CONTINUE", "STOP", "Continue", "Stop", "Fail", "Outcome", "Middleware"):
        from chainmux.middleware import protocol as _mw

        return getattr(_mw, name)

    if name == "Request":
        from chainmux.http.request import Request

        return Request

    if name in ("Response", "ResponseWriter"):
        from chainmux.http import response as _resp

        return getattr(_resp, name)

    if name in ("ChainmuxError", "ConfigurationError", "RouterNotFound"):
        from chainmux import errors as _errors

        return getattr(_errors, name)

    if name == "new_simple_logger":
        from chainmux.log import new_simple_logger

        return new_simple_logger

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
