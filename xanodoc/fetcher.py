"""Fetch table schemas from the platform metadata API.

Endpoints (relative to ``<base_url>/api:meta``):
  GET /workspace/{ws}/table?sort=name&order=asc&page=1&per_page=500
  GET /workspace/{ws}/table/{table_id}/schema

Schemas are fetched concurrently; results are cached on a ``FetchContext``
the caller owns, so separate runs never share state.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from .oas import build_table_component

logger = logging.getLogger(__name__)

TABLE_PAGE_SIZE = 500
DEFAULT_TIMEOUT = 30.0


@dataclass
class FetchContext:
    """Connection details plus a per-run cache of fetched table schemas."""

    base_url: str
    token: str
    workspace_id: str | int
    timeout: float = DEFAULT_TIMEOUT
    schema_cache: dict[Any, Any] = field(default_factory=dict)

    @property
    def meta_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/api:meta"

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def _client(ctx: FetchContext, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=ctx.meta_url,
        headers=ctx.headers,
        timeout=ctx.timeout,
        transport=transport,
    )


async def list_tables(client: httpx.AsyncClient, ctx: FetchContext) -> list[dict[str, Any]]:
    """Return the workspace's tables (``{id, name, auth?}``)."""
    resp = await client.get(
        f"/workspace/{ctx.workspace_id}/table",
        params={"sort": "name", "order": "asc", "page": 1, "per_page": TABLE_PAGE_SIZE},
    )
    resp.raise_for_status()
    data = resp.json()
    items = data.get("items", []) if isinstance(data, dict) else data
    return [t for t in items or [] if isinstance(t, dict)]


async def fetch_table_fields(client: httpx.AsyncClient, ctx: FetchContext, table_id: Any) -> Any:
    """Return a table's field descriptors, using the context cache."""
    if table_id in ctx.schema_cache:
        return ctx.schema_cache[table_id]
    resp = await client.get(f"/workspace/{ctx.workspace_id}/table/{table_id}/schema")
    resp.raise_for_status()
    fields = resp.json()
    ctx.schema_cache[table_id] = fields
    return fields


async def _table_component(
    client: httpx.AsyncClient, ctx: FetchContext, table: dict[str, Any],
) -> tuple[str, dict[str, Any]] | None:
    try:
        fields = await fetch_table_fields(client, ctx, table.get("id"))
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Skipping table %s: %s", table.get("name"), exc)
        return None
    return build_table_component(table, fields)


async def fetch_table_schemas(
    ctx: FetchContext,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """Fetch every table schema and build ``components.schemas`` entries.

    Failing the table listing raises; a failing individual table is logged
    and left out.
    """
    async with _client(ctx, transport) as client:
        tables = await list_tables(client, ctx)
        results = await asyncio.gather(*(_table_component(client, ctx, t) for t in tables))

    schemas = dict(r for r in results if r is not None)
    logger.info("Fetched %d/%d table schemas", len(schemas), len(tables))
    return schemas


def fetch_table_schemas_sync(
    ctx: FetchContext,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    return asyncio.run(fetch_table_schemas(ctx, transport))
