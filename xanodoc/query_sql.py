"""Render database filter expressions as pseudo-SQL WHERE clauses.

The output is documentation, not an executable query: literals are left
unquoted and unknown operators are passed through as-is.

Example:
  [{"type": "statement",
    "statement": {"op": "=", "left": {"tag": "col", "operand": "id"},
                  "right": {"tag": "input", "operand": "id"}}}]
  -> "id = :id"
"""

from __future__ import annotations

import re
from typing import Any

KNOWN_OPERATORS = frozenset({"=", ">", "<", ">=", "<=", "!="})

_LEADING_JOINER = re.compile(r"^(AND|OR)\s")


def render_operand(operand: Any) -> str:
    """Render one side of a comparison."""
    if not isinstance(operand, dict):
        return ""
    tag = operand.get("tag")
    value = operand.get("operand")
    if tag == "col":
        return str(value)
    if tag == "input":
        return f":{value}"
    if tag == "const:epochms":
        return "CURRENT_TIMESTAMP"
    return "" if value is None else str(value)


def render_operator(op: Any) -> str:
    # Unknown operators are kept verbatim, same as the known ones
    if op in KNOWN_OPERATORS:
        return op
    return "" if op is None else str(op)


def _render_node(node: Any) -> str:
    if not isinstance(node, dict):
        return ""
    joiner = "OR " if node.get("or") else "AND "

    statement = node.get("statement")
    if node.get("type") == "statement" and isinstance(statement, dict):
        left = render_operand(statement.get("left"))
        right = render_operand(statement.get("right"))
        operator = render_operator(statement.get("op"))
        return f"{joiner}{left} {operator} {right}"

    group = node.get("group")
    if node.get("type") == "group" and isinstance(group, dict):
        return f"{joiner}({compile_expression(group.get('expression'))})"

    return ""


def compile_expression(expression: Any) -> str:
    """Convert a filter expression tree into a pseudo-SQL condition string."""
    if not isinstance(expression, list) or not expression:
        return ""
    rendered = [part for part in (_render_node(node) for node in expression) if part]
    return _LEADING_JOINER.sub("", " ".join(rendered), count=1)
