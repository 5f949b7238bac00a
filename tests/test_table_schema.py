"""Tests for the table_schema module."""

import pytest

from xanodoc.table_schema import TYPE_MAP, convert_field, convert_table_schema


class TestConvertField:

    @pytest.mark.parametrize("field", [
        {"type": "vector"},
        {"type": "vector", "nullable": True},
        {"type": "vector", "style": "list", "default": "3"},
    ])
    def test_vector_always_number_array(self, field):
        assert convert_field(field) == {"type": "array", "items": {"type": "number"}}

    @pytest.mark.parametrize("platform_type,json_type", [
        ("int", "integer"),
        ("decimal", "number"),
        ("text", "string"),
        ("timestamp", "integer"),
        ("json", "object"),
        ("uuid", "string"),
    ])
    def test_type_map(self, platform_type, json_type):
        assert convert_field({"type": platform_type})["type"] == json_type

    def test_type_map_covers_vector(self):
        assert TYPE_MAP["vector"] == "number"

    def test_list_style(self):
        assert convert_field({"name": "tags", "type": "text", "style": "list"}) == {
            "type": "array",
            "items": {"type": "string"},
        }

    def test_enum_values(self):
        result = convert_field({"type": "enum", "values": ["draft", "live"]})
        assert result == {"type": "string", "enum": ["draft", "live"]}

    @pytest.mark.parametrize("raw,expected", [
        ("5", 5),
        ("1.5", 1.5),
        ("abc", "abc"),
        (True, True),
        (7, 7),
    ])
    def test_default_coercion(self, raw, expected):
        assert convert_field({"type": "text", "default": raw})["default"] == expected

    @pytest.mark.parametrize("raw", ["", None])
    def test_empty_default_omitted(self, raw):
        assert "default" not in convert_field({"type": "int", "default": raw})

    def test_nullable(self):
        assert convert_field({"type": "int", "nullable": True})["type"] == ["integer", "null"]

    def test_description(self):
        assert convert_field({"type": "int", "description": "Row id"})["description"] == "Row id"

    def test_children(self):
        result = convert_field({
            "type": "object",
            "children": [
                {"name": "city", "type": "text", "required": True},
                {"name": "zip", "type": "int"},
            ],
        })
        assert result["title"] == "sub-object"
        assert result["properties"]["zip"] == {"type": "integer"}
        assert result["required"] == ["city"]

    def test_list_of_objects(self):
        result = convert_field({
            "type": "object",
            "style": "list",
            "children": [{"name": "sku", "type": "text"}],
        })
        assert result["type"] == "array"
        assert result["items"]["properties"]["sku"] == {"type": "string"}


class TestConvertTableSchema:

    FIELDS = [
        {"name": "id", "type": "int", "required": True},
        {"name": "email", "type": "text"},
        {"name": "password", "type": "text", "access": "internal"},
    ]

    def test_internal_skipped_by_default(self):
        result = convert_table_schema(self.FIELDS)
        assert list(result["properties"]) == ["id", "email"]

    def test_internal_included_on_request(self):
        result = convert_table_schema(self.FIELDS, include_internal=True)
        assert "password" in result["properties"]

    def test_required(self):
        assert convert_table_schema(self.FIELDS)["required"] == ["id"]

    def test_required_omitted_when_empty(self):
        assert "required" not in convert_table_schema([{"name": "a", "type": "text"}])

    def test_garbage_input(self):
        assert convert_table_schema(None) == {"type": "object", "properties": {}}
