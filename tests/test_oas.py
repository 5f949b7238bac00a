"""Tests for the oas module."""

import copy
import json

import pytest

from xanodoc.oas import (
    ERROR_STATUS_RESPONSES,
    STANDARD_ERRORS,
    build_artifacts,
    build_table_component,
    enrich_oas,
    extract_global_tags,
)


class TestExtractGlobalTags:

    def test_dedup_in_first_seen_order(self, raw_oas):
        tags = extract_global_tags(raw_oas["paths"])
        assert [t["name"] for t in tags] == ["items", "admin", "users"]
        assert tags[0]["description"] == "Auto-generated tag for items"

    def test_no_paths(self):
        assert extract_global_tags(None) == []


class TestEnrichOas:
    """Document-level enrichment."""

    def test_version(self, raw_oas):
        assert enrich_oas(raw_oas)["openapi"] == "3.1.1"

    def test_input_not_mutated(self, raw_oas):
        before = copy.deepcopy(raw_oas)
        enrich_oas(raw_oas, {"Table.x": {"type": "object"}})
        assert raw_oas == before

    def test_global_tags(self, raw_oas):
        assert [t["name"] for t in enrich_oas(raw_oas)["tags"]] == ["items", "admin", "users"]

    def test_error_components(self, raw_oas):
        components = enrich_oas(raw_oas)["components"]
        assert set(STANDARD_ERRORS) <= set(components["responses"])
        for name in STANDARD_ERRORS:
            schema = components["schemas"][f"Errors.{name}"]
            assert set(schema["properties"]) == {"code", "message", "payload"}
            assert {"type": "null"} in schema["properties"]["payload"]["anyOf"]
            ref = components["responses"][name]["content"]["application/json"]["schema"]["$ref"]
            assert ref == f"#/components/schemas/Errors.{name}"

    def test_existing_schemas_kept(self, raw_oas):
        assert enrich_oas(raw_oas)["components"]["schemas"]["Item"] == {"type": "object"}

    def test_table_schemas_merged(self, raw_oas):
        schemas = enrich_oas(raw_oas, {"Table.user": {"type": "object", "title": "Table.user"}})["components"]["schemas"]
        assert schemas["Table.user"]["title"] == "Table.user"

    def test_default_security(self, raw_oas):
        doc = enrich_oas(raw_oas)
        assert doc["components"]["securitySchemes"] == {
            "bearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"},
        }
        assert doc["security"] == [{"bearerAuth": []}]

    def test_existing_security_kept(self, raw_oas):
        raw_oas["components"]["securitySchemes"] = {"apiKey": {"type": "apiKey", "in": "header", "name": "X-Key"}}
        raw_oas["security"] = [{"apiKey": []}]
        doc = enrich_oas(raw_oas)
        assert list(doc["components"]["securitySchemes"]) == ["apiKey"]
        assert doc["security"] == [{"apiKey": []}]

    def test_empty_document(self):
        doc = enrich_oas({})
        assert doc["openapi"] == "3.1.1"
        assert doc["tags"] == []
        assert len(doc["components"]["responses"]) == 6


class TestOperations:
    """Per-operation patching."""

    def test_summary(self, raw_oas):
        paths = enrich_oas(raw_oas)["paths"]
        assert paths["/items"]["get"]["summary"] == "GET:/items"
        assert paths["/items"]["post"]["summary"] == "POST:/items"
        assert paths["/users/{id}"]["get"]["summary"] == "GET:/users/{id}"

    def test_path_level_parameters_untouched(self, raw_oas):
        doc = enrich_oas(raw_oas)
        assert doc["paths"]["/users/{id}"]["parameters"] == raw_oas["paths"]["/users/{id}"]["parameters"]

    def test_error_statuses_replaced(self, raw_oas):
        paths = enrich_oas(raw_oas)["paths"]
        assert paths["/items"]["get"]["responses"]["400"] == {"$ref": "#/components/responses/BadRequest"}
        assert paths["/items"]["get"]["responses"]["500"] == {"$ref": "#/components/responses/InternalServerError"}
        post = paths["/items"]["post"]["responses"]
        assert post["401"] == {"$ref": "#/components/responses/Unauthorized"}
        assert post["403"] == {"$ref": "#/components/responses/AccessDenied"}
        assert post["404"] == {"$ref": "#/components/responses/NotFound"}
        assert post["429"] == {"$ref": "#/components/responses/TooManyRequests"}

    @pytest.mark.parametrize("status", sorted(ERROR_STATUS_RESPONSES))
    @pytest.mark.parametrize("original", [
        {},
        {"description": "custom", "content": {"application/json": {"schema": {"type": "string"}}}},
        {"$ref": "#/components/responses/Other"},
    ])
    def test_error_status_always_ref(self, status, original):
        oas = {"paths": {"/x": {"get": {"responses": {status: original}}}}}
        response = enrich_oas(oas)["paths"]["/x"]["get"]["responses"][status]
        assert response == {"$ref": f"#/components/responses/{ERROR_STATUS_RESPONSES[status]}"}

    def test_request_bodies_normalized(self, raw_oas):
        content = enrich_oas(raw_oas)["paths"]["/items"]["post"]["requestBody"]["content"]
        body = content["application/json"]["schema"]
        assert body["type"] == "object"
        assert body["required"] == ["title"]
        form = content["multipart/form-data"]["schema"]
        assert form["properties"]["file"]["type"] == ["string", "null"]

    def test_200_normalized_in_place(self, raw_oas):
        ok = enrich_oas(raw_oas)["paths"]["/items"]["get"]["responses"]["200"]
        assert ok["description"] == "Success!"
        assert ok["content"]["application/json"]["schema"] == {"type": ["string", "null"]}

    def test_200_required_indices_remapped(self, raw_oas):
        ok = enrich_oas(raw_oas)["paths"]["/users/{id}"]["get"]["responses"]["200"]
        assert ok["content"]["application/json"]["schema"]["required"] == ["b"]

    def test_other_status_normalized(self, raw_oas):
        created = enrich_oas(raw_oas)["paths"]["/items"]["get"]["responses"]["201"]
        assert created["description"] == "Created"
        assert created["content"]["application/json"]["schema"] == {"type": "string", "enum": ["a", "b"]}

    def test_200_substituted_from_precomputed(self, raw_oas):
        custom = {"type": "array", "items": {"$ref": "#/components/schemas/Item"}}
        doc = enrich_oas(raw_oas, response_schemas={"GET:/items": custom})
        ok = doc["paths"]["/items"]["get"]["responses"]["200"]
        assert ok == {
            "description": "Successful response",
            "content": {"application/json": {"schema": custom}},
        }
        other = doc["paths"]["/users/{id}"]["get"]["responses"]["200"]
        assert other["description"] == "Success!"


class TestTableComponent:

    def test_component(self):
        fields = [
            {"name": "id", "type": "int"},
            {"name": "password", "type": "text", "access": "internal"},
        ]
        name, schema = build_table_component({"id": 7, "name": "order items", "auth": True}, fields)
        assert name == "Table.order_items"
        assert schema["title"] == "Table.order_items"
        assert schema["type"] == "object"
        assert schema["description"].startswith("#### Table id: 7.")
        assert "AUTH" in schema["description"]
        assert set(schema["properties"]) == {"id", "password"}

    def test_non_auth_table(self):
        _, schema = build_table_component({"id": 1, "name": "log"}, [])
        assert "AUTH" not in schema["description"]
        assert schema["properties"] == {}


class TestBuildArtifacts:

    def test_files(self, raw_oas):
        doc = enrich_oas(raw_oas)
        artifacts = dict(build_artifacts(doc))
        assert list(artifacts) == ["spec.json", "html/spec.json", "html/index.html"]
        assert json.loads(artifacts["spec.json"]) == doc
        assert artifacts["html/spec.json"] == artifacts["spec.json"]
        assert "<title>Shop API</title>" in artifacts["html/index.html"]
        assert "url: './spec.json'" in artifacts["html/index.html"]

    def test_title_escaped(self):
        html = dict(build_artifacts({"info": {"title": "<A&B>"}}))["html/index.html"]
        assert "<title>&lt;A&amp;B&gt;</title>" in html

    def test_default_title(self):
        html = dict(build_artifacts({}))["html/index.html"]
        assert "<title>API Reference</title>" in html
