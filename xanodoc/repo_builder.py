"""Build the repository file tree from a workspace export.

Every entity gets ``<dir>/<guid>.json``; endpoints ("queries") and
functions also get a README narrating their steps, tables a README with
DBML/SQL. Each app gets a README listing its endpoints grouped by path.

Layout:
  app/<app>/<query>/<VERB>/<guid>.json    endpoints that belong to an app
  app/<app>/README.md                     endpoint structure per app
  <kind>/<name>/<guid>.json               everything else

The builder only computes ``OutputFile`` entries; writing them is up to the
caller (see codegen.write_outputs).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, NamedTuple

from .codegen import render_template
from .entity_mapper import EntityRef, build_function_map, build_table_map
from .naming import join_path, sanitize_filename, sanitize_identifier
from .run_list import DEFAULT_DESCRIPTION, narrate
from .table_description import describe_table

logger = logging.getLogger(__name__)

ENTITY_KINDS = ("dbo", "app", "query", "function", "addon", "trigger", "task", "middleware")

# Kinds whose README narrates a run list
_RUNNABLE_KINDS = {"query", "function"}

# Two entities sharing a guid within a kind map to the same <guid>.json
# path. Nothing is deduplicated: both writes are emitted in export order
# and the later one wins when applied.
DUPLICATE_GUID_POLICY = "last-write-wins"

ProgressCallback = Callable[[int, int, str, dict], None]


class OutputFile(NamedTuple):
    path: str
    content: str


def _entities(export: dict[str, Any], kind: str) -> list[dict[str, Any]]:
    value = export.get(kind)
    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def query_app_id(entity: dict[str, Any]) -> Any:
    """Return the id of the app an endpoint belongs to, if any."""
    app = entity.get("app")
    if isinstance(app, dict) and isinstance(app.get("id"), (str, int)):
        return app["id"]
    return None


def app_dir_name(app_id: Any, app_names: dict[Any, str]) -> str:
    """Directory name for an app, falling back to its id."""
    name = app_names.get(app_id)
    slug = sanitize_identifier(name) if name else ""
    return slug or sanitize_identifier(f"app-{app_id}")


def item_dir(kind: str, entity: dict[str, Any], app_names: dict[Any, str]) -> str:
    """Compute the directory an entity is written to."""
    name = sanitize_filename(entity.get("name") or "unnamed") or "unnamed"

    if kind == "query":
        app_id = query_app_id(entity)
        if app_id is not None:
            base = join_path("app", app_dir_name(app_id, app_names), name)
        else:
            base = join_path(kind, name)
        verb = entity.get("verb")
        return join_path(base, str(verb)) if verb else base

    if kind == "app":
        return join_path(kind, app_dir_name(entity.get("guid"), app_names))

    return join_path(kind, name)


def _entity_readme(
    kind: str,
    entity: dict[str, Any],
    function_map: dict[str, EntityRef],
    table_map: dict[str, EntityRef],
) -> str | None:
    name = entity.get("name") or "unnamed"
    description = entity.get("description") or DEFAULT_DESCRIPTION

    if kind in _RUNNABLE_KINDS:
        steps = narrate(entity.get("run"), 0, function_map, table_map)
        return render_template("entity_readme.md.j2", name=name, description=description, steps=steps)

    if kind == "dbo":
        return render_template(
            "entity_readme.md.j2", name=name, description=description, table=describe_table(entity),
        )

    return None


def process_entity(
    kind: str,
    entity: dict[str, Any],
    app_names: dict[Any, str],
    function_map: dict[str, EntityRef],
    table_map: dict[str, EntityRef],
) -> list[OutputFile]:
    """Produce the JSON dump and (where relevant) README for one entity."""
    directory = item_dir(kind, entity, app_names)
    guid = entity.get("guid") or "no-guid"

    outputs = [
        OutputFile(
            join_path(directory, f"{guid}.json"),
            json.dumps(entity, indent=2, ensure_ascii=False, default=str),
        )
    ]
    readme = _entity_readme(kind, entity, function_map, table_map)
    if readme is not None:
        outputs.append(OutputFile(join_path(directory, "README.md"), readme))
    return outputs


def group_by_prefix(queries: list[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    """Group queries by every path segment of their name except the last."""
    grouped: dict[str, list[dict[str, Any]]] = {}
    for query in queries:
        parts = str(query.get("name") or "").split("/")
        prefix = "/".join(parts[:-1]) if len(parts) > 1 else ""
        grouped.setdefault(prefix, []).append(query)
    return grouped


def build_app_readmes(
    app_queries: dict[Any, list[dict[str, Any]]],
    app_names: dict[Any, str],
    app_descriptions: dict[Any, str],
) -> list[OutputFile]:
    """Render one structure README per app that has endpoints."""
    outputs = []
    for app_id, queries in app_queries.items():
        groups = []
        for prefix, members in group_by_prefix(queries).items():
            groups.append({
                "prefix": prefix,
                "queries": [
                    {
                        "name": q["name"],
                        "verb": q["verb"],
                        "link": join_path(".", sanitize_filename(q["name"]) or "unnamed", q["verb"]),
                    }
                    for q in members
                ],
            })
        content = render_template(
            "app_readme.md.j2",
            name=app_names.get(app_id) or f"app_{app_id}",
            description=app_descriptions.get(app_id) or DEFAULT_DESCRIPTION,
            groups=groups,
        )
        directory = join_path("app", app_dir_name(app_id, app_names))
        outputs.append(OutputFile(join_path(directory, "README.md"), content))
    return outputs


def build_repository(
    export: dict[str, Any],
    on_progress: ProgressCallback | None = None,
) -> list[OutputFile]:
    """Build every output file for a workspace export.

    Output order follows ``ENTITY_KINDS`` then export order, with the app
    structure READMEs last. Duplicate guids are not detected
    (see ``DUPLICATE_GUID_POLICY``).
    """
    if not isinstance(export, dict):
        return []

    apps = _entities(export, "app")
    app_names = {a["guid"]: str(a.get("name") or "") for a in apps if a.get("guid")}
    app_descriptions = {a["guid"]: a.get("description") or "" for a in apps if a.get("guid")}
    function_map = build_function_map(export.get("function"))
    table_map = build_table_map(export.get("dbo"))

    work = [(kind, entity) for kind in ENTITY_KINDS for entity in _entities(export, kind)]
    total = len(work)

    outputs: list[OutputFile] = []
    app_queries: dict[Any, list[dict[str, Any]]] = {}

    for step, (kind, entity) in enumerate(work, start=1):
        logger.debug("Processing %s: %s", kind, entity.get("name") or "[unnamed]")
        if on_progress is not None:
            on_progress(step, total, kind, entity)

        if kind == "query":
            app_id = query_app_id(entity)
            if app_id is not None:
                app_queries.setdefault(app_id, []).append({
                    "name": entity.get("name") or "unnamed",
                    "verb": entity.get("verb") or "",
                    "description": entity.get("description") or "",
                })

        outputs.extend(process_entity(kind, entity, app_names, function_map, table_map))

    outputs.extend(build_app_readmes(app_queries, app_names, app_descriptions))
    logger.info("Built %d files from %d entities", len(outputs), total)
    return outputs


def collapse_outputs(outputs: list[OutputFile]) -> dict[str, str]:
    """Apply outputs in order the way a sequential writer would.

    Later entries for the same path replace earlier ones.
    """
    files: dict[str, str] = {}
    for output in outputs:
        files[output.path] = output.content
    return files
