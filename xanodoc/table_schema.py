"""Convert platform table field descriptors to JSON Schema."""

from __future__ import annotations

import math
from typing import Any

# Platform field type -> JSON Schema type
TYPE_MAP: dict[str, str] = {
    "int": "integer",
    "decimal": "number",
    "text": "string",
    "enum": "string",
    "timestamp": "integer",
    "object": "object",
    "json": "object",
    "vector": "number",
}


def _coerce_default(value: Any) -> Any:
    """Turn numeric-looking string defaults into numbers."""
    if not isinstance(value, str):
        return value
    try:
        number = float(value)
    except ValueError:
        return value
    if not math.isfinite(number):
        return value
    if number.is_integer() and "." not in value and "e" not in value.lower():
        return int(number)
    return number


def convert_field(field: dict[str, Any]) -> dict[str, Any]:
    """Convert a single field descriptor to a JSON Schema property."""
    field_type = field.get("type")

    if field_type == "vector":
        return {"type": "array", "items": {"type": "number"}}

    if field.get("style") == "list":
        return {"type": "array", "items": convert_field({**field, "style": "single"})}

    schema: dict[str, Any] = {"type": TYPE_MAP.get(field_type, "string")}

    if field_type == "enum" and isinstance(field.get("values"), list):
        schema["enum"] = field["values"]

    default = field.get("default")
    if default is not None and default != "":
        schema["default"] = _coerce_default(default)

    if field.get("nullable"):
        schema["type"] = [schema["type"], "null"]

    if field.get("description"):
        schema["description"] = field["description"]

    children = field.get("children")
    if isinstance(children, list):
        schema["title"] = "sub-object"
        schema["properties"] = {}
        required = []
        for child in children:
            if not isinstance(child, dict) or not child.get("name"):
                continue
            schema["properties"][child["name"]] = convert_field(child)
            if child.get("required"):
                required.append(child["name"])
        if required:
            schema["required"] = required

    return schema


def convert_table_schema(fields: Any, include_internal: bool = False) -> dict[str, Any]:
    """Convert a table's field list to an object JSON Schema.

    Fields with ``access == "internal"`` are left out unless
    ``include_internal`` is set.
    """
    if isinstance(fields, dict):
        fields = [fields]
    if not isinstance(fields, list):
        fields = []

    properties: dict[str, Any] = {}
    required: list[str] = []
    for field in fields:
        if not isinstance(field, dict) or not field.get("name"):
            continue
        if not include_internal and field.get("access") == "internal":
            continue
        properties[field["name"]] = convert_field(field)
        if field.get("required"):
            required.append(field["name"])

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema
