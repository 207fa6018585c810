"""Router registry: one routing table per API version.

The version (namespace) of a route is the first ``/``-separated segment
of its path: ``/v2/items`` belongs to ``v2``. Routers are created lazily on
the first registration for a version and never removed.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from chainmux.errors import ConfigurationError, RouterNotFound
from chainmux.routing.route import Route
from chainmux.routing.router import Router

if TYPE_CHECKING:
    from chainmux.chain import RequestHandler


def version_of(path: str) -> str:
    """Return the version segment of *path*.

    Raises ``ConfigurationError`` when the path has no segment to use.
    """
    version = path.lstrip("/").split("/", 1)[0]
    if not version:
        msg = f"Route path {path!r} has no version segment (expected '/<version>/...')"
        raise ConfigurationError(msg)
    return version


class RouterRegistry:
    """Mapping of version string to ``Router``.

    Owned by a ``Server``; mutated only while the server is configuring.
    No locking: registration is single-threaded by contract.
    """

    __slots__ = ("_routers",)

    def __init__(self) -> None:
        self._routers: dict[str, Router] = {}

    def register(self, method: str, path: str, handler: RequestHandler) -> Router:
        """Register *handler* for *method* + *path* in the path's version router."""
        version = version_of(path)
        router = self._routers.get(version)
        if router is None:
            router = self._routers[version] = Router()
        router.add(Route(path=path, handler=handler, methods=frozenset({method.upper()})))
        return router

    def set_fallback(self, handler: RequestHandler) -> None:
        """Make *handler* the fallback of every router known right now.

        Versions registered afterwards do not inherit it.
        """
        for router in self._routers.values():
            router.fallback = handler

    def get(self, version: str) -> Router:
        """Return the router for *version*.

        Raises ``RouterNotFound`` (carrying a fresh unused ``Router`` as
        ``default``) when the version has no routes.
        """
        try:
            return self._routers[version]
        except KeyError:
            raise RouterNotFound(version, default=Router()) from None

    def compile(self) -> None:
        for router in self._routers.values():
            router.compile()

    @property
    def versions(self) -> tuple[str, ...]:
        return tuple(self._routers)

    def items(self) -> Iterator[tuple[str, Router]]:
        return iter(self._routers.items())

    def __contains__(self, version: object) -> bool:
        return version in self._routers

    def __len__(self) -> int:
        return len(self._routers)
