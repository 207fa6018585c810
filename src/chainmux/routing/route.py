"""Route, RouteMatch and PathSegment frozen dataclasses."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chainmux.chain import RequestHandler


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/items``       (is_param=False)
    Param:   ``/{id}``        (is_param=True, param_name="id")
    Typed:   ``/{id:int}``    (param_type="int")
    Rest:    ``/{rest:path}`` (param_type="path", must be last)
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Route:
    """A registered (path, methods) -> handler entry. Immutable once added."""

    path: str
    handler: RequestHandler
    methods: frozenset[str]


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: Mapping[str, str]

    @classmethod
    def of(cls, route: Route, params: dict[str, str]) -> RouteMatch:
        return cls(route=route, path_params=MappingProxyType(params))
