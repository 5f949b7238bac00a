"""Normalize legacy platform schemas to JSON Schema 2020-12.

Handles:
- Arrays of field descriptors ([{name, type, required}, ...])
- Numeric ``required`` indices (mapped to property names by position)
- ``nullable: true`` (folded into a ``type`` union with "null")
- String ``minItems`` / ``maxItems``
- ``values`` used in place of ``enum``
- Recursion through properties, items, additionalProperties, allOf/oneOf/anyOf

Normalization is total: anything not recognized is returned unchanged.
"""

from __future__ import annotations

from typing import Any

# Shapes recognized by the normalizer
FIELD_LIST = "field_list"
SCHEMA_OBJECT = "schema_object"
PASSTHROUGH = "passthrough"

_COMPOSITION_KEYS = ("allOf", "oneOf", "anyOf")


def classify_schema(schema: Any) -> str:
    """Return which shape a schema node has."""
    if isinstance(schema, list):
        return FIELD_LIST
    if isinstance(schema, dict):
        return SCHEMA_OBJECT
    return PASSTHROUGH


def _to_number(value: str) -> int | float | str:
    """Coerce a numeric string; leave anything unparsable alone."""
    try:
        number = float(value)
    except ValueError:
        return value
    if number.is_integer():
        return int(number)
    return number


def _normalize_field_list(fields: list[Any]) -> dict[str, Any]:
    properties: dict[str, Any] = {}
    required: list[str] = []
    for field in fields:
        if not isinstance(field, dict) or not field.get("name"):
            continue
        properties[field["name"]] = normalize_schema(field)
        if field.get("required"):
            required.append(field["name"])

    out: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        out["required"] = required
    return out


def _remap_required(out: dict[str, Any]) -> None:
    """Turn positional ``required`` indices into property names."""
    required = out["required"]
    properties = out["properties"]
    if required and isinstance(required[0], int) and not isinstance(required[0], bool):
        keys = list(properties)
        required = [
            keys[idx] for idx in required
            if isinstance(idx, int) and 0 <= idx < len(keys)
        ]
        out["required"] = required
    if not required:
        del out["required"]


def _normalize_object(schema: dict[str, Any]) -> dict[str, Any]:
    out = dict(schema)

    if isinstance(out.get("required"), list) and isinstance(out.get("properties"), dict):
        _remap_required(out)

    if out.get("nullable") is True and isinstance(out.get("type"), str):
        out["type"] = [out["type"], "null"]
        del out["nullable"]

    for key in ("minItems", "maxItems"):
        if isinstance(out.get(key), str):
            out[key] = _to_number(out[key])

    if "values" in out and "enum" not in out:
        out["enum"] = out.pop("values")

    if isinstance(out.get("properties"), dict):
        out["properties"] = {
            name: normalize_schema(prop) for name, prop in out["properties"].items()
        }

    if out.get("items"):
        out["items"] = normalize_schema(out["items"])

    if isinstance(out.get("additionalProperties"), dict):
        out["additionalProperties"] = normalize_schema(out["additionalProperties"])

    for key in _COMPOSITION_KEYS:
        if isinstance(out.get(key), list):
            out[key] = [normalize_schema(sub) for sub in out[key]]

    return out


def normalize_schema(schema: Any) -> Any:
    """Recursively normalize a (possibly legacy) schema to JSON Schema 2020-12.

    Never mutates its input and never raises.
    """
    shape = classify_schema(schema)
    if shape == FIELD_LIST:
        return _normalize_field_list(schema)
    if shape == SCHEMA_OBJECT:
        return _normalize_object(schema)
    return schema
