"""JSON types derived from schemas.

A JSONType is one of a closed set of variants, discriminated by `kind`.
Objects and arrays are named types; scalars only carry the ref of the
schema which defined them, if any.
"""

from collections.abc import Callable
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _JSONTypeBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    ref: str = ""  # absolute ref of the defining schema, identity of named types


class JSONString(_JSONTypeBase):
    kind: Literal["string"] = "string"


class JSONDateTime(_JSONTypeBase):
    """A string with format date-time."""

    kind: Literal["date-time"] = "date-time"


class JSONBoolean(_JSONTypeBase):
    kind: Literal["boolean"] = "boolean"


class JSONInteger(_JSONTypeBase):
    kind: Literal["integer"] = "integer"


class JSONNumber(_JSONTypeBase):
    kind: Literal["number"] = "number"


class JSONNull(_JSONTypeBase):
    kind: Literal["null"] = "null"


class JSONField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: "JSONType"


class JSONObject(_JSONTypeBase):
    """An object; fields are always sorted by name."""

    kind: Literal["object"] = "object"
    name: str | None = None
    fields: list[JSONField] = []


class JSONArray(_JSONTypeBase):
    kind: Literal["array"] = "array"
    name: str | None = None
    items: "JSONType"


JSONType = Annotated[
    Union[JSONObject, JSONArray, JSONString, JSONDateTime, JSONBoolean, JSONInteger, JSONNumber, JSONNull],
    Field(discriminator="kind"),
]

JSONField.model_rebuild()
JSONObject.model_rebuild()
JSONArray.model_rebuild()


def is_named(jt) -> bool:
    return isinstance(jt, (JSONObject, JSONArray))


def signature(jt) -> str:
    """Structural rendering of a type, used to compare same-named types.

    Named types nested in jt render as their name only.
    """
    if isinstance(jt, JSONObject):
        return "object{" + ", ".join(f"{f.name}: {_reference(f.type)}" for f in jt.fields) + "}"
    if isinstance(jt, JSONArray):
        return f"array[{_reference(jt.items)}]"
    return jt.kind


def _reference(jt) -> str:
    if is_named(jt) and jt.name:
        return jt.name
    return signature(jt)


def walk_type(jt, visit: Callable) -> None:
    """Call visit on jt, then on every type nested in it, depth first."""
    visit(jt)
    if isinstance(jt, JSONObject):
        for f in jt.fields:
            walk_type(f.type, visit)
    elif isinstance(jt, JSONArray):
        walk_type(jt.items, visit)
