"""Cross-reference tables from entity guid to display name and repo path."""

from __future__ import annotations

from typing import Any, NamedTuple

from .naming import join_path, sanitize_filename


class EntityRef(NamedTuple):
    name: str
    path: str
    description: str


def build_entity_map(entities: Any, kind: str) -> dict[str, EntityRef]:
    """Map each entity guid to its name, repo path and description.

    ``kind`` is the top-level directory ("function" or "dbo"). Entities
    without a guid are skipped; non-list input gives an empty map.
    """
    if not isinstance(entities, list):
        return {}

    mapping: dict[str, EntityRef] = {}
    for entity in entities:
        if not isinstance(entity, dict) or not entity.get("guid"):
            continue
        name = entity.get("name") or "unnamed"
        mapping[entity["guid"]] = EntityRef(
            name=name,
            path=join_path(kind, sanitize_filename(name)),
            description=entity.get("description") or "",
        )
    return mapping


def build_function_map(functions: Any) -> dict[str, EntityRef]:
    return build_entity_map(functions, "function")


def build_table_map(tables: Any) -> dict[str, EntityRef]:
    return build_entity_map(tables, "dbo")
