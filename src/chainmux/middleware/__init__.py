"""Middleware: protocol-based, no inheritance required.

A middleware is any callable matching:
    def mw(writer: ResponseWriter, request: Request, ctx: Context) -> Outcome | None

Outcomes:
    CONTINUE / Continue() -- run the next middleware
    STOP / Stop() -- the response is done
    Fail(error) -- halt with a 500 carrying the error message
"""

from chainmux.middleware.protocol import CONTINUE, STOP, Continue, Fail, Middleware, Outcome, Stop

__all__ = [
    "CONTINUE",
    "STOP",
    "Continue",
    "Fail",
    "Middleware",
    "Outcome",
    "Stop",
]
