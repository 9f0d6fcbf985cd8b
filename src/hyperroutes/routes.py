"""Routes derived from a hyper-schema, and the views the generators use.

A Route is one (path, method) pair. by_resource() groups routes sharing a
path, json_named_types() lists the types to declare for them.
"""

from pydantic import BaseModel

from hyperroutes.errors import TypeRedefinitionError
from hyperroutes.naming import handler_func_name
from hyperroutes.schema.base import Link
from hyperroutes.types import JSONType, is_named, signature, walk_type

METHODS_ORDER = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class RouteParam(BaseModel):
    """A variable chunk of a route path."""

    name: str  # spell-name
    varname: str  # spellName
    type: JSONType


class RouteIO(BaseModel):
    """JSON types going in and out of a route."""

    in_type: JSONType | None = None
    out_type: JSONType | None = None
    input_is_not_json: bool = False
    output_is_not_json: bool = False
    link: Link | None = None


class Route(RouteIO):
    path: str
    name: str
    route_params: list[RouteParam] = []
    method: str

    @property
    def io(self) -> RouteIO:
        return RouteIO(
            in_type=self.in_type,
            out_type=self.out_type,
            input_is_not_json=self.input_is_not_json,
            output_is_not_json=self.output_is_not_json,
            link=self.link,
        )


def method_sort_key(method: str) -> tuple[int, str]:
    """Known methods in METHODS_ORDER, then the others lexically."""
    m = method.upper()
    if m in METHODS_ORDER:
        return METHODS_ORDER.index(m), ""
    return len(METHODS_ORDER), m


class ResourceRoute(BaseModel):
    """The routes of one path, keyed by method."""

    path: str
    name: str
    route_params: list[RouteParam] = []
    method_route_io: dict[str, RouteIO] = {}

    def methods(self) -> list[str]:
        return sorted(self.method_route_io, key=method_sort_key)


def by_resource(routes: list[Route]) -> list[ResourceRoute]:
    """Group routes by path.

    Routes sharing a path share their name and params; the first one seen
    provides them.
    """
    resources: dict[str, ResourceRoute] = {}
    for route in routes:
        resource = resources.get(route.path)
        if resource is None:
            resources[route.path] = ResourceRoute(
                path=route.path,
                name=route.name,
                route_params=route.route_params,
                method_route_io={route.method: route.io},
            )
            continue
        resource.method_route_io[route.method] = route.io
    return sorted(resources.values(), key=lambda r: (r.name, r.path))


def _route_types(routes: list[Route]):
    for route in routes:
        for typ in (route.in_type, route.out_type):
            if typ is not None:
                yield typ


def json_named_types(routes: list[Route]) -> list:
    """Every named type reachable from the input and output of routes, once per name."""
    found: dict[str, object] = {}

    def visit(jt):
        if not is_named(jt):
            return
        if not jt.name:
            raise RuntimeError(f"no unnamed type should exist: {signature(jt)}")
        found.setdefault(jt.name, jt)

    for typ in _route_types(routes):
        walk_type(typ, visit)
    return sorted(found.values(), key=lambda jt: jt.name)


def check_type_redefinitions(routes: list[Route]) -> None:
    """Raise TypeRedefinitionError if two named types share a name but not a definition.

    Only the first conflicting name is reported, with all its redefinitions.
    """
    first: dict[str, object] = {}
    redefs: dict[str, list] = {}

    def visit(jt):
        if not is_named(jt) or not jt.name:
            return
        known = first.setdefault(jt.name, jt)
        if signature(known) == signature(jt):
            return
        occurrences = redefs.setdefault(jt.name, [])
        if all(signature(o) != signature(jt) for o in occurrences):
            occurrences.append(jt)

    for typ in _route_types(routes):
        walk_type(typ, visit)
    for name, occurrences in redefs.items():
        raise TypeRedefinitionError(name, first[name], occurrences)


def missing_handlers(routes: list[Route], existing: list[str]) -> list[str]:
    """Handler function names of routes which are not in existing."""
    declared = set(existing)
    names = []
    for route in routes:
        name = handler_func_name(route.method, route.name)
        if name not in declared and name not in names:
            names.append(name)
    return names


def all_handlers_implemented(routes: list[Route], existing: list[str]) -> bool:
    return not missing_handlers(routes, existing)


def missing_types(routes: list[Route], existing: list[str]) -> list:
    """Named types of routes whose name is not in existing."""
    declared = set(existing)
    return [jt for jt in json_named_types(routes) if jt.name not in declared]
