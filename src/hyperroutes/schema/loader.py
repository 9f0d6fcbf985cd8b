"""Load a hyper-schema document from JSON or YAML."""

import json
from pathlib import Path

import yaml
from pydantic import ValidationError

from hyperroutes.errors import InvalidSchemaError
from .base import Schema


def load_schema(file_path: Path) -> Schema:
    """Read a schema file. .json files are decoded as JSON, anything else as YAML."""
    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidSchemaError(None, f"{file_path}: invalid JSON: {e}") from e
        return _to_schema(data)
    return load_schema_string(text)


def load_schema_string(text: str) -> Schema:
    """Decode a schema from a JSON or YAML string."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise InvalidSchemaError(None, f"invalid document: {e}") from e
    return _to_schema(data)


def _to_schema(data) -> Schema:
    if not isinstance(data, dict):
        raise InvalidSchemaError(None, "schema document is not an object")
    try:
        return Schema.model_validate(data)
    except ValidationError as e:
        raise InvalidSchemaError(None, f"malformed schema: {e}") from e
