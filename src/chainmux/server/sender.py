"""ASGI response sending: flushes a finished ``Response`` to the client."""

from chainmux._internal.asgi import Send
from chainmux.http.response import Response


def _body_allowed(status: int, method: str) -> bool:
    """Whether a response to *method* with *status* may carry a body."""
    # RFC 9110: 1xx, 204 and 304 never have a body; HEAD gets headers only.
    if method == "HEAD":
        return False
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Translate a ``Response`` into ASGI ``send()`` calls."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    raw_headers.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
        if name.lower() != "content-length"
    )
    body = response.body if _body_allowed(response.status, method) else b""
    # HEAD advertises the length the GET body would have.
    length = len(response.body) if method == "HEAD" else len(body)
    raw_headers.append((b"content-length", str(length).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send({"type": "http.response.body", "body": body})
