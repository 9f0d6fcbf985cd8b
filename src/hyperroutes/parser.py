"""Derive routes and JSON types from a hyper-schema.

Each top-level property of the root schema is a resource; each link of a
resource is a route. Usage:

    schema = load_schema(Path("api.json"))
    routes = parse_routes(schema)

A SchemaParser holds the state of one parse (the ref -> type registry), so
parsing different schemas with different parsers never interferes.
"""

import logging

from hyperroutes.errors import CyclicReferenceError, InvalidSchemaError
from hyperroutes.href import href_to_name, href_to_path, vars_from_href
from hyperroutes.naming import param_varname, ref_path_name, ref_type_name, symbol_name
from hyperroutes.resolver import SchemaResolver
from hyperroutes.routes import Route, RouteParam, check_type_redefinitions
from hyperroutes.schema.base import Link, Schema
from hyperroutes.types import (
    JSONArray,
    JSONBoolean,
    JSONDateTime,
    JSONField,
    JSONInteger,
    JSONNull,
    JSONNumber,
    JSONObject,
    JSONString,
    signature,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/json"

_SCALAR_TYPES = {
    "boolean": JSONBoolean,
    "integer": JSONInteger,
    "number": JSONNumber,
    "null": JSONNull,
}


def is_json_media_type(content_type: str) -> bool:
    """True for application/json and any +json media type, parameters ignored."""
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == DEFAULT_CONTENT_TYPE or media_type.endswith("+json")


def with_content_type_defaults(link: Link) -> Link:
    return link.model_copy(update={
        "enc_type": link.enc_type or DEFAULT_CONTENT_TYPE,
        "media_type": link.media_type or DEFAULT_CONTENT_TYPE,
    })


class SchemaParser:
    """Parses the routes of a root schema."""

    def __init__(self, root: Schema | None):
        self.root = root
        self.resolver = SchemaResolver(root) if root is not None else None
        self.ref_types: dict[str, object] = {}

    def resolve_schema(self, schema: Schema) -> Schema:
        return self.resolver.resolve(schema)

    def type_for_ref(self, ref: str):
        """The type registered first for ref, or None."""
        return self.ref_types.get(ref)

    def parse_routes(self) -> list[Route]:
        """Routes of every link of every resource, sorted by path."""
        if self.root is None:
            raise InvalidSchemaError(None, "no schema provided")
        if self.root.type != "object":
            raise InvalidSchemaError(self.root, "root schema is not an object")

        routes: list[Route] = []
        for property_name, prop in self.root.properties.items():
            resource = self.resolve_schema(prop)
            seen_rels: set[str] = set()
            for link in resource.links:
                if link.rel in seen_rels:
                    raise InvalidSchemaError(resource, f'duplicate link "rel" {link.rel}')
                seen_rels.add(link.rel)
                routes.append(self.route_from_link(property_name, resource, link))

        routes.sort(key=lambda r: r.path)
        check_type_redefinitions(routes)
        logger.debug("parsed %d routes", len(routes))
        return routes

    def route_from_link(self, property_name: str, resource: Schema, link: Link) -> Route:
        link = with_content_type_defaults(link)
        route = Route(
            path=href_to_path(link.href),
            name=href_to_name(link.href),
            method=link.method.upper(),
            route_params=self.route_params_from_link(link, resource),
            link=link,
        )
        logger.debug("route %s %s (%s)", route.method, route.path, route.name)

        type_prefix = symbol_name(link.rel) + symbol_name(property_name)
        if link.request_schema is not None:
            if is_json_media_type(link.enc_type):
                route.in_type = self.type_from_schema(
                    type_prefix + "In", link.request_schema, link.request_schema.ref
                )
            else:
                route.input_is_not_json = True
        if link.target_schema is not None:
            if is_json_media_type(link.media_type):
                route.out_type = self.type_from_schema(
                    type_prefix + "Out", link.target_schema, link.target_schema.ref
                )
            else:
                route.output_is_not_json = True
        return route

    def route_params_from_link(self, link: Link, resource: Schema) -> list[RouteParam]:
        """Typed variables of the link's href, resolved against the resource schema."""
        params = []
        for var in vars_from_href(link.href):
            name = ref_path_name(var)
            var_schema = self.resolve_schema(self.resolver.resolve_ref(var, resource))
            typ = self.type_from_schema(var.split("/")[-1], var_schema, var)
            params.append(RouteParam(name=name, varname=param_varname(name), type=typ))
        return params

    def type_from_schema(self, name: str, schema: Schema, ref: str = "", _stack: tuple[str, ...] = ()):
        """Build the JSON type of schema.

        Types of schemas with a ref are named after the ref; name is only
        used for those without one. Inline property types are named after
        their parent, e.g. ListSpellOutMeta.

        Only absolute refs are registered: a relative ref such as "id" names
        a different property in every resource.
        """
        if ref:
            if ref in _stack:
                raise CyclicReferenceError(ref, list(_stack))
            _stack = (*_stack, ref)
            name = ref_type_name(ref)
        jt = self._type_from_resolved(name, self.resolve_schema(schema), schema, ref, _stack)
        if ref.startswith("#/"):
            self._register(jt)
        return jt

    def _type_from_resolved(self, name, res_schema, schema, ref, stack):
        t = res_schema.type
        if t in ("object", ""):
            fields = []
            for property_name, property_schema in res_schema.properties.items():
                typ = self.type_from_schema(
                    name + symbol_name(property_name), property_schema, property_schema.ref, stack
                )
                fields.append(JSONField(name=property_name, type=typ))
            fields.sort(key=lambda f: f.name)
            return JSONObject(name=name, ref=ref, fields=fields)
        if t == "array":
            items = res_schema.items
            if items is None:
                raise InvalidSchemaError(schema, "missing items property for type array")
            return JSONArray(
                name=name,
                ref=ref,
                items=self.type_from_schema(name + "One", items, items.ref, stack),
            )
        if t == "string":
            if res_schema.format == "date-time":
                return JSONDateTime(ref=ref)
            return JSONString(ref=ref)
        if t in _SCALAR_TYPES:
            return _SCALAR_TYPES[t](ref=ref)
        raise InvalidSchemaError(schema, f'unknown type "{t}"')

    def _register(self, jt) -> None:
        known = self.ref_types.setdefault(jt.ref, jt)
        if known is not jt and signature(known) != signature(jt):
            logger.warning(
                "type %s redefined: %s, keeping %s", jt.ref, signature(jt), signature(known)
            )


def parse_routes(schema: Schema | None) -> list[Route]:
    """Parse the routes of schema with a fresh SchemaParser."""
    return SchemaParser(schema).parse_routes()
