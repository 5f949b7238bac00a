"""Shared fixtures: a small workspace export and a raw OpenAPI document."""

from __future__ import annotations

from typing import Any

import pytest


def statement(left: Any, op: str, right: Any, *, left_tag: str = "col",
              right_tag: str = "input", or_: bool = False) -> dict[str, Any]:
    """Build a filter-expression statement node."""
    node: dict[str, Any] = {
        "type": "statement",
        "statement": {
            "op": op,
            "left": {"tag": left_tag, "operand": left},
            "right": {"tag": right_tag, "operand": right},
        },
    }
    if or_:
        node["or"] = True
    return node


# ---------------------------------------------------------------------------
# Workspace export
# ---------------------------------------------------------------------------

@pytest.fixture
def shop_export() -> dict[str, Any]:
    """One app with two endpoints, a function, a table and a task."""
    return {
        "app": [{"guid": "a1", "name": "Shop", "description": "Storefront API"}],
        "query": [
            {
                "guid": "q1",
                "name": "list-items",
                "verb": "GET",
                "app": {"id": "a1"},
                "run": [],
            },
            {
                "guid": "q2",
                "name": "items/{id}",
                "verb": "GET",
                "app": {"id": "a1"},
                "description": "Fetch one item",
                "run": [
                    {
                        "name": "mvp:dbo_view",
                        "as": "item",
                        "context": {
                            "dbo": {"id": "t1"},
                            "search": {"expression": [statement("id", "=", "id")]},
                            "return": {"type": "single"},
                        },
                    },
                    {
                        "name": "mvp:function",
                        "as": "tax",
                        "context": {"function": {"id": "f1"}},
                    },
                ],
            },
        ],
        "function": [
            {
                "guid": "f1",
                "name": "Calc Tax",
                "description": "Computes sales tax",
                "run": [{"name": "mvp:set_var", "as": "rate", "description": "Load the rate"}],
            },
        ],
        "dbo": [
            {
                "guid": "t1",
                "name": "items",
                "description": "Catalog items",
                "schema": [
                    {"name": "id", "type": "int"},
                    {"name": "title", "type": "text", "nullable": True},
                ],
            },
        ],
        "task": [{"guid": "k1", "name": "nightly cleanup", "run": []}],
    }


# ---------------------------------------------------------------------------
# Raw OpenAPI document
# ---------------------------------------------------------------------------

@pytest.fixture
def raw_oas() -> dict[str, Any]:
    """A platform-generated OpenAPI 3.0 document with legacy schemas."""
    return {
        "openapi": "3.0.0",
        "info": {"title": "Shop API", "version": "1.0"},
        "paths": {
            "/items": {
                "get": {
                    "tags": ["items"],
                    "summary": "List items",
                    "responses": {
                        "200": {
                            "description": "Success!",
                            "content": {
                                "application/json": {
                                    "schema": {"type": "string", "nullable": True},
                                },
                            },
                        },
                        "201": {
                            "description": "Created",
                            "content": {
                                "application/json": {
                                    "schema": {"type": "string", "values": ["a", "b"]},
                                },
                            },
                        },
                        "400": {"description": "Input Error"},
                        "500": {
                            "description": "Unexpected error",
                            "content": {"application/json": {"schema": {"type": "object"}}},
                        },
                    },
                },
                "post": {
                    "tags": ["items", "admin"],
                    "requestBody": {
                        "content": {
                            "application/json": {
                                "schema": [
                                    {"name": "title", "type": "string", "required": True},
                                    {"name": "price", "type": "number"},
                                ],
                            },
                            "multipart/form-data": {
                                "schema": {
                                    "type": "object",
                                    "properties": {"file": {"type": "string", "nullable": True}},
                                },
                            },
                        },
                    },
                    "responses": {
                        "401": {"description": "Unauthorized"},
                        "403": {"description": "Forbidden"},
                        "404": {"description": "Missing"},
                        "429": {"description": "Rate limited"},
                    },
                },
            },
            "/users/{id}": {
                "parameters": [{"name": "id", "in": "path", "required": True}],
                "get": {
                    "tags": ["users"],
                    "responses": {
                        "200": {
                            "description": "Success!",
                            "content": {
                                "application/json": {
                                    "schema": {
                                        "type": "object",
                                        "properties": {"a": {}, "b": {}},
                                        "required": [1],
                                    },
                                },
                            },
                        },
                    },
                },
            },
        },
        "components": {"schemas": {"Item": {"type": "object"}}},
    }
