"""Outbound response types.

``ResponseWriter`` is the mutable handle every middleware of one request
shares: it buffers status, headers and body until the chain finishes,
then the sender flushes it over ASGI.

``ResponseHelper`` is the convenience wrapper exposed as
``ctx.response``.

``Response`` is the frozen snapshot produced by a writer (and returned by
the test client).
"""

import json as json_module
import logging
from dataclasses import dataclass
from typing import Any

from chainmux.http.headers import MutableHeaders

logger = logging.getLogger("chainmux.server")

DEFAULT_CONTENT_TYPE = "text/plain; charset=utf-8"


@dataclass(frozen=True, slots=True)
class Response:
    """A finished HTTP response."""

    body: bytes = b""
    status: int = 200
    content_type: str = DEFAULT_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    @property
    def json(self) -> Any:
        return json_module.loads(self.body)

    def header(self, name: str) -> str | None:
        """First value of header *name* (case-insensitive), or ``None``."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None


class ResponseWriter:
    """The per-request response channel.

    Mirrors the classic writer protocol: headers may be changed until the
    status is written; ``write`` implies a 200 status if none was written.
    A second ``write_header`` is ignored and logged; the writer does not
    stop a middleware from writing after another one already did.
    """

    __slots__ = ("_body", "_status", "headers")

    def __init__(self) -> None:
        self.headers = MutableHeaders()
        self._status: int | None = None
        self._body = bytearray()

    @property
    def status(self) -> int:
        """The written status, or 200 if nothing was written yet."""
        return self._status or 200

    @property
    def written(self) -> bool:
        """True once a status has been written."""
        return self._status is not None

    @property
    def size(self) -> int:
        """Number of body bytes written so far."""
        return len(self._body)

    def write_header(self, status: int) -> None:
        if self._status is not None:
            logger.warning(
                "superfluous write_header(%d); status %d already written", status, self._status
            )
            return
        self._status = status

    def write(self, data: str | bytes) -> int:
        if self._status is None:
            self._status = 200
        chunk = data.encode("utf-8") if isinstance(data, str) else data
        self._body.extend(chunk)
        return len(chunk)

    def to_response(self) -> Response:
        """Snapshot the buffered state as a ``Response``."""
        content_type = self.headers.get("content-type") or DEFAULT_CONTENT_TYPE
        extra = tuple((k, v) for k, v in self.headers.items() if k.lower() != "content-type")
        return Response(
            body=bytes(self._body),
            status=self.status,
            content_type=content_type,
            headers=extra,
        )


class ResponseHelper:
    """Shortcuts for writing common responses through a writer.

    Headers are only touched while the status is still unwritten. Once a
    middleware has written, a later call appends to the body and leaves
    the committed status and headers alone.
    """

    __slots__ = ("_writer",)

    def __init__(self, writer: ResponseWriter) -> None:
        self._writer = writer

    def error(self, message: str, status: int = 500) -> None:
        """Write a plain-text error with *status* and *message* as body."""
        if not self._writer.written:
            self._writer.headers.set("X-Content-Type-Options", "nosniff")
        self._start(status, "text/plain; charset=utf-8")
        self._writer.write(message)

    def text(self, body: str, status: int = 200) -> None:
        self._start(status, "text/plain; charset=utf-8")
        self._writer.write(body)

    def json(self, payload: object, status: int = 200) -> None:
        self._start(status, "application/json")
        self._writer.write(json_module.dumps(payload))

    def _start(self, status: int, content_type: str) -> None:
        if not self._writer.written:
            self._writer.headers.set("Content-Type", content_type)
        self._writer.write_header(status)
