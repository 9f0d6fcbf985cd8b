"""Resolve $ref pointers of a hyper-schema to concrete schemas."""

import logging

from hyperroutes.errors import CyclicReferenceError, InvalidSchemaRefError
from hyperroutes.href import percent_decode
from hyperroutes.schema.base import Schema, json_field_names

logger = logging.getLogger(__name__)

SCHEMA_KEYWORDS = json_field_names(Schema)


class SchemaResolver:
    """Follows $ref pointers within one root schema document."""

    def __init__(self, root: Schema):
        self.root = root

    def resolve(self, schema: Schema) -> Schema:
        """Follow the $ref of schema, and of every schema it points to, until a concrete schema."""
        seen: list[str] = []
        s = schema
        while s.ref:
            if s.ref in seen:
                raise CyclicReferenceError(s.ref, seen)
            seen.append(s.ref)
            s = self.resolve_ref(s.ref, s)
        return s

    def resolve_ref(self, ref: str, rel_schema: Schema) -> Schema:
        """Return the schema pointed to by ref, dereferenced once.

        Absolute refs ("#/...") are looked up in the root document; anything
        else is the name of one of the properties of rel_schema.
        """
        if ref.startswith("#/"):
            return self._resolve_pointer(ref)
        prop = rel_schema.properties.get(ref)
        if prop is None:
            raise InvalidSchemaRefError(ref, "value is not a valid Schema")
        return prop

    def _resolve_pointer(self, ref: str) -> Schema:
        logger.debug("resolving %s", ref)
        current = self.root
        for key in ref[2:].split("/"):
            if isinstance(current, Schema):
                attr = SCHEMA_KEYWORDS.get(key)
                if attr is None:
                    raise InvalidSchemaRefError(ref, f"unknown keyword {key!r}")
                current = getattr(current, attr)
            elif isinstance(current, dict):
                try:
                    ukey = percent_decode(key)
                except ValueError as e:
                    raise InvalidSchemaRefError(ref, str(e)) from e
                if ukey not in current:
                    raise InvalidSchemaRefError(ref, "invalid ref")
                current = current[ukey]
            else:
                raise InvalidSchemaRefError(ref, "value is not a valid Schema")
        if not isinstance(current, Schema):
            raise InvalidSchemaRefError(ref, "value is not a valid Schema")
        return current
