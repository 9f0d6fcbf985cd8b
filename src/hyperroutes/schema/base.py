"""Data models for a JSON Hyper-Schema document.

Models follow the draft-04 hyper-schema shape. Validation keywords are kept
so a document round-trips, but only a handful of them matter for deriving
routes: type, $ref, properties, items, definitions, format and links.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Link(BaseModel):
    """A link description: one HTTP operation on a resource."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    title: str = ""
    description: str = ""
    href: str = ""
    rel: str = ""  # unique within one resource's links
    method: str = ""
    request_schema: "Schema | None" = Field(default=None, alias="schema")
    target_schema: "Schema | None" = Field(default=None, alias="targetSchema")
    enc_type: str = Field(default="", alias="encType")
    media_type: str = Field(default="", alias="mediaType")


class Schema(BaseModel):
    """A (sub-)schema node. An empty type means object."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = ""
    title: str = ""
    description: str = ""
    version: str = ""

    default: Any = None
    read_only: bool = Field(default=False, alias="readOnly")
    example: Any = None
    format: str = ""

    type: str = ""

    ref: str = Field(default="", alias="$ref")
    schema_uri: str = Field(default="", alias="$schema")

    definitions: dict[str, "Schema"] = {}

    multiple_of: float | None = Field(default=None, alias="multipleOf")
    maximum: float | None = None
    exclusive_maximum: bool = Field(default=False, alias="exclusiveMaximum")
    minimum: float | None = None
    exclusive_minimum: bool = Field(default=False, alias="exclusiveMinimum")

    min_length: int | None = Field(default=None, alias="minLength")
    max_length: int | None = Field(default=None, alias="maxLength")
    pattern: str = ""

    min_properties: int | None = Field(default=None, alias="minProperties")
    max_properties: int | None = Field(default=None, alias="maxProperties")
    required: list[str] = []
    properties: dict[str, "Schema"] = {}
    dependencies: dict[str, Any] = {}
    additional_properties: Any = Field(default=None, alias="additionalProperties")
    pattern_properties: dict[str, "Schema"] = Field(default={}, alias="patternProperties")

    items: "Schema | None" = None
    min_items: int | None = Field(default=None, alias="minItems")
    max_items: int | None = Field(default=None, alias="maxItems")
    unique_items: bool = Field(default=False, alias="uniqueItems")
    additional_items: Any = Field(default=None, alias="additionalItems")

    enum: list[Any] = []

    one_of: list["Schema"] = Field(default=[], alias="oneOf")
    any_of: list["Schema"] = Field(default=[], alias="anyOf")
    all_of: list["Schema"] = Field(default=[], alias="allOf")
    not_: "Schema | None" = Field(default=None, alias="not")

    links: list[Link] = []


Link.model_rebuild()
Schema.model_rebuild()


def json_field_names(model: type[BaseModel]) -> dict[str, str]:
    """Map each JSON keyword of a model to its attribute name."""
    return {(info.alias or name): name for name, info in model.model_fields.items()}
