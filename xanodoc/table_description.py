"""Describe a table entity as DBML and SQL DDL for its README.

Object columns become sub-tables named ``<table>_<column>``, linked back
through a ``ref`` setting.
"""

from __future__ import annotations

from typing import Any

_SQL_TYPES: dict[str, str] = {
    "int": "INTEGER",
    "string": "VARCHAR(255)",
    "bool": "BOOLEAN",
    "float": "FLOAT",
    "obj": "INTEGER",  # foreign key to the sub-table
}


def _columns(table: dict[str, Any]) -> list[dict[str, Any]]:
    columns = [c for c in table.get("schema") or [] if isinstance(c, dict) and c.get("name")]
    if not any(c["name"] == "id" for c in columns):
        columns.insert(0, {"name": "id", "type": "int", "nullable": False, "default": None})
    return columns


def _default_literal(value: Any, quote: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return f"{quote}{value}{quote}"
    return str(value)


def to_dbml(name: str, columns: list[dict[str, Any]]) -> str:
    lines = [f"Table {name} {{"]
    for column in columns:
        col_name = column["name"]
        col_type = column.get("type") or "text"
        settings = []
        if not column.get("nullable"):
            settings.append("not null")
        if col_name == "id":
            settings.append("pk")
        default = _default_literal(column.get("default"), '"')
        if default is not None:
            settings.append(f"default: {default}")
        if col_type == "obj":
            style = column.get("style")
            is_list = style == "list" or (isinstance(style, dict) and style.get("type") == "list")
            settings.append(f"ref: {'>' if is_list else '-'} {name}_{col_name}.id")
        suffix = f" [{', '.join(settings)}]" if settings else ""
        lines.append(f"  {col_name} {col_type}{suffix}")
    lines.append("}")
    return "\n".join(lines) + "\n"


def to_sql(name: str, columns: list[dict[str, Any]]) -> str:
    definitions = []
    for column in columns:
        col_type = column.get("type") or "text"
        parts = [column["name"], _SQL_TYPES.get(col_type, str(col_type).upper())]
        if not column.get("nullable"):
            parts.append("NOT NULL")
        if column["name"] == "id":
            parts.append("PRIMARY KEY")
        default = _default_literal(column.get("default"), "'")
        if default is not None:
            parts.append(f"DEFAULT {default}")
        definitions.append(" ".join(parts))
    body = ",\n  ".join(definitions)
    return f"CREATE TABLE {name} (\n  {body}\n);"


def collect_tables(table: dict[str, Any]) -> list[dict[str, str]]:
    """Flatten a table and its object columns into DBML/SQL pairs."""
    name = table.get("name") or "unnamed"
    columns = _columns(table)
    tables = [{"name": name, "dbml": to_dbml(name, columns), "sql": to_sql(name, columns)}]
    for column in columns:
        if column.get("type") == "obj":
            tables.extend(collect_tables({
                "name": f"{name}_{column['name']}",
                "schema": column.get("children") or [],
            }))
    return tables


def describe_table(table: dict[str, Any]) -> str:
    """Markdown section with DBML and SQL for a table entity."""
    sections = []
    for entry in collect_tables(table):
        sections.append(
            f"---\n\n# Table: {entry['name']}\n\n"
            f"## DBML\n\n```dbml\n{entry['dbml']}```\n\n"
            f"## SQL\n\n```sql\n{entry['sql']}\n```\n"
        )
    return "\n".join(sections)
