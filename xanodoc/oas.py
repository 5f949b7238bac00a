"""Enrich a raw platform OpenAPI document into OpenAPI 3.1.

Steps applied by ``enrich_oas``:
- bump ``openapi`` to 3.1.1
- hoist operation tags to a global ``tags`` list
- add shared error responses/schemas and any table schemas to components
- default to bearer (JWT) security
- normalize request/response schemas and point error statuses at the
  shared responses
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any

from .codegen import render_template
from .naming import join_path
from .schema_parser import normalize_schema
from .table_schema import convert_table_schema

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.1.1"

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

REQUEST_CONTENT_TYPES = ("application/json", "multipart/form-data")

# Response name -> (description, example error code, example message)
STANDARD_ERRORS: dict[str, tuple[str, str, str]] = {
    "AccessDenied": (
        "Access denied due to insufficient permissions.",
        "ERROR_CODE_ACCESS_DENIED",
        "Forbidden access.",
    ),
    "Unauthorized": (
        "Authentication is required and has failed or has not yet been provided.",
        "ERROR_CODE_UNAUTHORIZED",
        "Authentication required.",
    ),
    "InternalServerError": (
        "A generic server error.",
        "ERROR_FATAL",
        "Something went wrong.",
    ),
    "TooManyRequests": (
        "Hit quota limits.",
        "ERROR_CODE_TOO_MANY_REQUESTS",
        "Hit quota limits.",
    ),
    "NotFound": (
        "The requested resource cannot be found.",
        "ERROR_CODE_NOT_FOUND",
        "The requested resource cannot be found.",
    ),
    "BadRequest": (
        "The provided inputs are not correct.",
        "ERROR_CODE_BAD_REQUEST",
        "The provided inputs are not correct.",
    ),
}

# Status code -> shared response it is replaced with
ERROR_STATUS_RESPONSES: dict[str, str] = {
    "400": "BadRequest",
    "401": "Unauthorized",
    "403": "AccessDenied",
    "404": "NotFound",
    "429": "TooManyRequests",
    "500": "InternalServerError",
}

BEARER_SCHEME = {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}


def error_schema(name: str, code: str, message: str) -> dict[str, Any]:
    """The ``{code, message, payload}`` envelope for an error response."""
    return {
        "type": "object",
        "title": f"Errors.{name}",
        "properties": {
            "code": {"type": "string", "format": "const", "maxLength": 64, "example": code},
            "message": {"type": "string", "format": "const", "maxLength": 256, "example": message},
            "payload": {
                "anyOf": [
                    {"type": "string", "format": "const", "maxLength": 1024},
                    {"type": "null"},
                    {"type": "object", "properties": {}, "additionalProperties": True},
                ],
            },
        },
    }


def standard_error_components() -> tuple[dict[str, Any], dict[str, Any]]:
    """Return (responses, schemas) for the shared error responses."""
    responses: dict[str, Any] = {}
    schemas: dict[str, Any] = {}
    for name, (description, code, message) in STANDARD_ERRORS.items():
        responses[name] = {
            "description": description,
            "content": {
                "application/json": {"schema": {"$ref": f"#/components/schemas/Errors.{name}"}},
            },
        }
        schemas[f"Errors.{name}"] = error_schema(name, code, message)
    return responses, schemas


def extract_global_tags(paths: Any) -> list[dict[str, str]]:
    """Collect operation tags, in first-seen order, as global tag objects."""
    seen: dict[str, None] = {}
    for _path, _method, operation in iter_operations(paths):
        tags = operation.get("tags")
        if not isinstance(tags, list):
            continue
        for tag in tags:
            if isinstance(tag, str):
                seen.setdefault(tag, None)
    return [{"name": tag, "description": f"Auto-generated tag for {tag}"} for tag in seen]


def iter_operations(paths: Any):
    """Yield (path, method, operation) for every HTTP operation in ``paths``."""
    if not isinstance(paths, dict):
        return
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        for method, operation in path_item.items():
            if str(method).lower() in HTTP_METHODS and isinstance(operation, dict):
                yield path, str(method), operation


def _json_schema_holder(container: Any, content_type: str = "application/json") -> dict[str, Any] | None:
    """Return the media-type object holding a schema, if there is one."""
    if not isinstance(container, dict):
        return None
    content = container.get("content")
    if not isinstance(content, dict):
        return None
    media = content.get(content_type)
    if isinstance(media, dict) and media.get("schema"):
        return media
    return None


def _normalize_request_body(operation: dict[str, Any]) -> None:
    for content_type in REQUEST_CONTENT_TYPES:
        media = _json_schema_holder(operation.get("requestBody"), content_type)
        if media is not None:
            media["schema"] = normalize_schema(media["schema"])


def _patch_responses(
    operation: dict[str, Any],
    map_key: str,
    response_schemas: dict[str, Any],
) -> None:
    responses = operation.get("responses")
    if not isinstance(responses, dict):
        return

    for status in list(responses):
        code = str(status)
        if code in ERROR_STATUS_RESPONSES:
            responses[status] = {"$ref": f"#/components/responses/{ERROR_STATUS_RESPONSES[code]}"}
            continue

        if code == "200" and map_key in response_schemas:
            responses[status] = {
                "description": "Successful response",
                "content": {"application/json": {"schema": copy.deepcopy(response_schemas[map_key])}},
            }
            continue

        media = _json_schema_holder(responses[status])
        if media is not None:
            media["schema"] = normalize_schema(media["schema"])


def patch_operations(oas: dict[str, Any], response_schemas: dict[str, Any] | None = None) -> None:
    """Normalize schemas, swap in shared errors and set summaries, in place."""
    response_schemas = response_schemas or {}
    for path, method, operation in iter_operations(oas.get("paths")):
        map_key = f"{method.upper()}:{path}"
        operation["summary"] = map_key
        _normalize_request_body(operation)
        _patch_responses(operation, map_key, response_schemas)


def enrich_oas(
    oas: dict[str, Any],
    table_schemas: dict[str, Any] | None = None,
    response_schemas: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return an enriched copy of ``oas``; the input is left untouched.

    ``table_schemas`` are merged into ``components.schemas`` as-is (see
    ``build_table_component``). ``response_schemas`` maps
    ``"<METHOD>:<path>"`` to a schema that replaces that operation's 200
    response.
    """
    doc = copy.deepcopy(oas) if isinstance(oas, dict) else {}

    doc["openapi"] = OPENAPI_VERSION
    doc["tags"] = extract_global_tags(doc.get("paths"))

    components = doc.get("components")
    if not isinstance(components, dict):
        components = {}
    error_responses, error_schemas = standard_error_components()

    responses = components.get("responses") if isinstance(components.get("responses"), dict) else {}
    schemas = components.get("schemas") if isinstance(components.get("schemas"), dict) else {}
    components["responses"] = {**responses, **error_responses}
    components["schemas"] = {**schemas, **error_schemas, **copy.deepcopy(table_schemas or {})}

    if not components.get("securitySchemes"):
        components["securitySchemes"] = {"bearerAuth": dict(BEARER_SCHEME)}
    doc["components"] = components

    if doc.get("security") is None:
        doc["security"] = [{"bearerAuth": []}]

    patch_operations(doc, response_schemas)
    logger.debug("Enriched OAS with %d table schemas", len(table_schemas or {}))
    return doc


def table_component_name(table_name: str) -> str:
    return f"Table.{table_name.replace(' ', '_')}"


def build_table_component(table: dict[str, Any], fields: Any) -> tuple[str, dict[str, Any]]:
    """Build the ``components.schemas`` entry for one table."""
    name = table_component_name(str(table.get("name") or table.get("id")))
    description = f"#### Table id: {table.get('id')}. "
    if table.get("auth"):
        description += "\n\n **This table is used for AUTH.**"
    return name, {
        "title": name,
        "description": description,
        "type": "object",
        "properties": convert_table_schema(fields, include_internal=True)["properties"],
    }


def build_artifacts(oas: dict[str, Any]) -> list[tuple[str, str]]:
    """Files published for an enriched document: the JSON and an HTML viewer."""
    spec_json = json.dumps(oas, indent=2, ensure_ascii=False)
    info = oas.get("info") if isinstance(oas.get("info"), dict) else {}
    html = render_template(
        "index.html.j2",
        title=info.get("title") or "API Reference",
        spec_url="./spec.json",
    )
    return [
        ("spec.json", spec_json),
        (join_path("html", "spec.json"), spec_json),
        (join_path("html", "index.html"), html),
    ]
