"""Static file serving.

Mounted at a URL prefix by ``Server.serve_static()`` and dispatched by
the top-level mux, outside any middleware chain. Files are read in a
worker thread so a large file does not block the event loop.
"""

import mimetypes
from pathlib import Path

from anyio import to_thread

from chainmux.http.request import Request
from chainmux.http.response import ResponseWriter


class StaticFiles:
    """Request handler serving files below *directory* for *prefix*.

    Security: resolves symlinks and checks the final path is inside the
    configured directory, so ``..`` segments cannot escape it.

    Usage::

        server.serve_static("/assets/", "./public")
    """

    __slots__ = ("_cache_control", "_directory", "_index", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/static/",
        *,
        index: str = "index.html",
        cache_control: str = "public, max-age=3600",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._index = index
        self._cache_control = cache_control
        self._prefix = "/" + prefix.strip("/") + "/" if prefix.strip("/") else "/"

    @property
    def prefix(self) -> str:
        return self._prefix

    async def __call__(self, request: Request, writer: ResponseWriter) -> None:
        if request.method not in ("GET", "HEAD"):
            writer.headers.set("Allow", "GET, HEAD")
            _plain(writer, 405, "405 method not allowed")
            return

        relative = request.path[len(self._prefix) :] if request.path.startswith(self._prefix) else ""
        file_path = (self._directory / relative).resolve() if relative else self._directory
        if not file_path.is_relative_to(self._directory):
            _plain(writer, 404, "404 page not found")
            return

        if file_path.is_dir():
            index_path = file_path / self._index
            if not index_path.is_file():
                _plain(writer, 404, "404 page not found")
                return
            if not request.path.endswith("/"):
                writer.headers.set("Location", request.path + "/")
                writer.write_header(301)
                return
            file_path = index_path

        if not file_path.is_file():
            _plain(writer, 404, "404 page not found")
            return

        body = await to_thread.run_sync(file_path.read_bytes)
        content_type, _ = mimetypes.guess_type(str(file_path))
        writer.headers.set("Content-Type", content_type or "application/octet-stream")
        writer.headers.set("Cache-Control", self._cache_control)
        writer.write_header(200)
        writer.write(body)


def _plain(writer: ResponseWriter, status: int, message: str) -> None:
    writer.headers.set("Content-Type", "text/plain; charset=utf-8")
    writer.write_header(status)
    writer.write(message)
