"""Narrate endpoint/function run lists as indented Markdown.

A run list is the ordered list of steps an endpoint or function executes.
Steps nest in three places in the export (``context.run``,
``context.<key>.run`` and ``step.run``); ``parse_steps`` folds all of them
into a single ``children`` list so the narrator walks one shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .entity_mapper import EntityRef
from .query_sql import compile_expression

DEFAULT_DESCRIPTION = "//..."

# Root that step links are rendered against
LINK_ROOT = "/repo"

# Platform operation name -> human label
STEP_LABELS: dict[str, str] = {
    "mvp:function": "Run function",
    "mvp:lambda": "Run lambda",
    "mvp:api_request": "External API request",
    "mvp:set_var": "Create variable",
    "mvp:update_var": "Update variable",
    "mvp:precondition": "Precondition",
    "mvp:conditional": "Conditional",
    "mvp:foreach": "For each loop",
    "mvp:for": "For loop",
    "mvp:while": "While loop",
    "mvp:switch": "Switch",
    "mvp:group": "Group",
    "mvp:try_catch": "Try / catch",
    "mvp:throw_error": "Throw error",
    "mvp:return": "Return",
    "mvp:debug_log": "Debug log",
    "mvp:sleep": "Sleep",
    "mvp:array_push": "Add to end of array",
    "mvp:array_merge": "Merge arrays",
    "mvp:dbo_view": "Query all records",
    "mvp:dbo_get": "Get record",
    "mvp:dbo_has": "Has record",
    "mvp:dbo_add": "Add record",
    "mvp:dbo_edit": "Edit record",
    "mvp:dbo_addoredit": "Add or edit record",
    "mvp:dbo_patch": "Patch record",
    "mvp:dbo_delete": "Delete record",
    "mvp:dbo_bulk_add": "Bulk add records",
    "mvp:dbo_bulk_delete": "Bulk delete records",
    "mvp:dbo_truncate": "Clear all records",
    "mvp:dbo_transaction": "Database transaction",
    "mvp:dbo_direct_query": "Direct database query",
    "mvp:create_auth_token": "Create authentication token",
    "mvp:send_email": "Send email",
}


@dataclass
class Step:
    name: str
    disabled: bool = False
    alias: str = ""
    description: str = ""
    function_id: Any = None
    table_id: Any = None
    search_expression: list = field(default_factory=list)
    return_kind: str = ""
    children: list[Step] = field(default_factory=list)


def _ref_id(context: dict[str, Any], key: str) -> Any:
    ref = context.get(key)
    if isinstance(ref, dict) and isinstance(ref.get("id"), (str, int)):
        return ref["id"]
    return None


def _nested_runs(raw: dict[str, Any], context: dict[str, Any]) -> list[Any]:
    """Collect nested steps from every location they can live in."""
    nested: list[Any] = []
    if isinstance(context.get("run"), list):
        nested.extend(context["run"])
    for key, value in context.items():
        if key == "run":
            continue
        if isinstance(value, dict) and isinstance(value.get("run"), list):
            nested.extend(value["run"])
    if isinstance(raw.get("run"), list):
        nested.extend(raw["run"])
    return nested


def parse_step(raw: dict[str, Any]) -> Step:
    context = raw.get("context")
    if not isinstance(context, dict):
        context = {}

    search = context.get("search")
    expression = search.get("expression") if isinstance(search, dict) else None
    returns = context.get("return")
    return_kind = returns.get("type") if isinstance(returns, dict) else None

    alias = raw.get("as")
    return Step(
        name=str(raw.get("name") or ""),
        disabled=bool(raw.get("disabled")),
        alias=alias.strip() if isinstance(alias, str) else "",
        description=raw.get("description") or "",
        function_id=_ref_id(context, "function"),
        table_id=_ref_id(context, "dbo"),
        search_expression=expression if isinstance(expression, list) else [],
        return_kind=return_kind if isinstance(return_kind, str) else "",
        children=parse_steps(_nested_runs(raw, context)),
    )


def parse_steps(raw_steps: Any) -> list[Step]:
    """Normalize a raw run list into Step objects (non-dict entries dropped)."""
    if not isinstance(raw_steps, list):
        return []
    return [parse_step(raw) for raw in raw_steps if isinstance(raw, dict)]


def _link(ref: EntityRef | None) -> str:
    if ref is None:
        return ""
    return f"**[{ref.name}]({LINK_ROOT}/{ref.path}/)**"


def _describe_step(
    step: Step,
    depth: int,
    function_map: dict[str, EntityRef],
    table_map: dict[str, EntityRef],
) -> list[str]:
    indent = "  " * depth
    function_ref = function_map.get(step.function_id) if step.name == "mvp:function" else None
    table_ref = table_map.get(step.table_id) if step.table_id else None

    label = STEP_LABELS.get(step.name, step.name)
    heading = " ".join(part for part in (f"**{label}**", _link(function_ref), _link(table_ref)) if part)

    target = function_ref or table_ref
    description = step.description or (target.description if target else "") or DEFAULT_DESCRIPTION

    lines = [f"{indent}- {heading}", f"{indent}  *Description*: {description}", indent]

    if step.alias:
        returned = f"{indent}  *Returns value as*: _**{step.alias}**_"
        if step.table_id and "dbo_view" in step.name and step.return_kind:
            returned += f" **{step.return_kind.upper()}**"
        lines += [returned, indent]

    if step.table_id and step.search_expression:
        lines += [
            f"{indent}  *SQL sentence*:",
            indent,
            f"{indent}  ```",
            f"{indent}  {compile_expression(step.search_expression)}",
            f"{indent}  ```",
            indent,
        ]
    return lines


def narrate_steps(
    steps: list[Step],
    depth: int = 0,
    function_map: dict[str, EntityRef] | None = None,
    table_map: dict[str, EntityRef] | None = None,
) -> str:
    """Render parsed steps (and their children) as Markdown."""
    function_map = function_map or {}
    table_map = table_map or {}

    lines: list[str] = []
    for step in steps:
        if step.disabled:
            continue
        lines += _describe_step(step, depth, function_map, table_map)
        nested = narrate_steps(step.children, depth + 1, function_map, table_map)
        if nested:
            lines.append(nested)
    return "\n".join(lines)


def narrate(
    run: Any,
    depth: int = 0,
    function_map: dict[str, EntityRef] | None = None,
    table_map: dict[str, EntityRef] | None = None,
) -> str:
    """Render a raw run list as Markdown. Never raises."""
    return narrate_steps(parse_steps(run), depth, function_map, table_map)
