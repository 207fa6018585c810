"""Access logging decorator.

Wraps a request handler and reports one ``AccessRecord`` per request once
the handler has finished. The response itself is never touched.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from chainmux.chain import RequestHandler
from chainmux.http.request import Request
from chainmux.http.response import ResponseWriter


@dataclass(frozen=True, slots=True)
class AccessRecord:
    """What the access log knows about one finished request."""

    method: str
    path: str
    url: str
    status: int
    size: int
    duration: float
    remote_addr: str
    user_agent: str | None = None


type AccessReporter = Callable[[AccessRecord], None]


def default_access_reporter(logger: logging.Logger) -> AccessReporter:
    """Report each record as one INFO line on *logger*.

    Format: ``<remote> "<METHOD> <url>" <status> <bytes> <ms>ms``.
    """

    def report(record: AccessRecord) -> None:
        logger.info(
            '%s "%s %s" %d %d %.3fms',
            record.remote_addr,
            record.method,
            record.url,
            record.status,
            record.size,
            record.duration * 1000,
            extra={"access": record},
        )

    return report


class AccessLogHandler:
    """Request handler decorator that feeds an ``AccessReporter``.

    Usage::

        handler = AccessLogHandler(default_access_reporter(access_logger), chain)
    """

    __slots__ = ("inner", "reporter")

    def __init__(self, reporter: AccessReporter, inner: RequestHandler) -> None:
        self.reporter = reporter
        self.inner = inner

    async def __call__(self, request: Request, writer: ResponseWriter) -> None:
        start = time.monotonic()
        try:
            await self.inner(request, writer)
        finally:
            self.reporter(
                AccessRecord(
                    method=request.method,
                    path=request.path,
                    url=request.url,
                    status=writer.status,
                    size=writer.size,
                    duration=time.monotonic() - start,
                    remote_addr=request.remote_addr,
                    user_agent=request.headers.get("user-agent"),
                )
            )
