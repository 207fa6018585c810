"""Per-version router with trie-based path matching.

Routes are registered while the server is configuring and the trie is
frozen when the server starts serving. Each router also carries an
optional fallback handler, run when nothing in this version matches.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chainmux.errors import ConfigurationError, MethodNotAllowed, NotFound
from chainmux.routing.params import CONVERTERS
from chainmux.routing.route import PathSegment, Route, RouteMatch

if TYPE_CHECKING:
    from chainmux.chain import RequestHandler


def parse_path(path: str) -> list[PathSegment]:
    """Split a route path into static and parameter segments.

    Examples::

        "/v1/items"            -> [v1, items]
        "/v1/items/{id:int}"   -> [v1, items, {id:int}]
        "/v1/files/{rest:path}" -> [v1, files, {rest:path}]
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if not (part.startswith("{") and part.endswith("}")):
            segments.append(PathSegment(value=part))
            continue
        name, _, kind = part[1:-1].partition(":")
        kind = kind or "str"
        if kind not in CONVERTERS:
            msg = f"Unknown path converter {kind!r} in route {path!r}"
            raise ConfigurationError(msg)
        segments.append(PathSegment(value=part, is_param=True, param_name=name, param_type=kind))
    return segments


@dataclass(slots=True)
class _Node:
    """A trie node. Mutable only while routes are being added."""

    static: dict[str, _Node] = field(default_factory=dict)
    param: _ParamEdge | None = None
    # method -> (route, catch-all variable name)
    rest: dict[str, tuple[Route, str]] = field(default_factory=dict)
    routes: dict[str, Route] = field(default_factory=dict)


@dataclass(slots=True)
class _ParamEdge:
    name: str
    kind: str
    regex: re.Pattern[str]
    node: _Node


# method -> (route, bound path variables)
type _Candidates = dict[str, tuple[Route, dict[str, str]]]


class Router:
    """Routing table for one API version.

    Usage::

        router = Router()
        router.add(Route("/v1/items/{id}", handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/v1/items/42")

    A trie level holds one parameter edge. Routes sharing a level must
    spell that parameter identically (same name, same converter).
    """

    __slots__ = ("_compiled", "_root", "fallback")

    def __init__(self) -> None:
        self._root = _Node()
        self._compiled = False
        # Handler run when no route in this version matches.
        self.fallback: RequestHandler | None = None

    def add(self, route: Route) -> None:
        """Add a route. Must be called before ``compile()``.

        Raises ``ConfigurationError`` when a parameter conflicts with one
        already registered at the same position.
        """
        if self._compiled:
            msg = "Cannot add routes after the router has been compiled."
            raise RuntimeError(msg)

        node = self._root
        for seg in parse_path(route.path):
            if seg.is_param and seg.param_type == "path":
                name = seg.param_name or "path"
                node.rest.update(dict.fromkeys(route.methods, (route, name)))
                return
            if seg.is_param:
                node = self._param_node(node, seg, route.path)
            else:
                node = node.static.setdefault(seg.value, _Node())

        node.routes.update(dict.fromkeys(route.methods, route))

    @staticmethod
    def _param_node(node: _Node, seg: PathSegment, path: str) -> _Node:
        name = seg.param_name or ""
        edge = node.param
        if edge is None:
            pattern, _ = CONVERTERS[seg.param_type]
            edge = node.param = _ParamEdge(
                name=name, kind=seg.param_type, regex=re.compile(f"^{pattern}$"), node=_Node()
            )
        elif (edge.name, edge.kind) != (name, seg.param_type):
            msg = (
                f"Route {path!r} declares {seg.value!r} where another route "
                f"already declares '{{{edge.name}:{edge.kind}}}'"
            )
            raise ConfigurationError(msg)
        return edge.node

    def compile(self) -> None:
        """Freeze the route table."""
        self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled

    @property
    def routes(self) -> list[Route]:
        """Every distinct registered route, in trie order."""
        seen: set[int] = set()
        result: list[Route] = []
        stack = [self._root]
        while stack:
            node = stack.pop(0)
            rest_routes = [route for route, _ in node.rest.values()]
            for route in (*node.routes.values(), *rest_routes):
                if id(route) not in seen:
                    seen.add(id(route))
                    result.append(route)
            stack.extend(node.static.values())
            if node.param is not None:
                stack.append(node.param.node)
        return result

    def match(self, method: str, path: str) -> RouteMatch:
        """Match *method* and *path* against the table.

        Raises ``NotFound`` if no route matches the path and
        ``MethodNotAllowed`` if the path matches under other methods.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        candidates = self._walk(self._root, parts, 0, {})
        if candidates is None:
            raise NotFound(f"No route matches {method} {path!r}")

        if method in candidates:
            route, params = candidates[method]
            return RouteMatch.of(route, params)
        raise MethodNotAllowed(frozenset(candidates))

    def _walk(
        self,
        node: _Node,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> _Candidates | None:
        if index == len(parts):
            if not node.routes:
                return None
            return {method: (route, params) for method, route in node.routes.items()}

        part = parts[index]

        # Static children win over parameters, parameters over catch-alls.
        child = node.static.get(part)
        if child is not None:
            found = self._walk(child, parts, index + 1, params)
            if found is not None:
                return found

        edge = node.param
        if edge is not None and edge.regex.match(part):
            found = self._walk(edge.node, parts, index + 1, {**params, edge.name: part})
            if found is not None:
                return found

        if node.rest:
            tail = "/".join(parts[index:])
            return {
                method: (route, {**params, name: tail})
                for method, (route, name) in node.rest.items()
            }

        return None
