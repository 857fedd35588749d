"""Tests for response structure analysis."""

from typing import Any

import pytest

from ts_oas_generator.analysis.responses import analyze_responses, sorted_status_codes
from ts_oas_generator.config import GeneratorOptions
from ts_oas_generator.errors import UnsupportedReferenceError


class TestAnalyzeResponses:
    """Status ordering, union synthesis and content-type maps."""

    def test_statuses_are_sorted_numerically(self, users_document: dict[str, Any]) -> None:
        """Test that responses are processed in ascending status order."""
        operation = users_document["paths"]["/users/{userId}"]["get"]
        analysis = analyze_responses(operation, users_document, "GetUser")
        assert analysis.status_codes == ("200", "404", "500"), "Declared 500, 404, 200 should sort ascending"

    def test_union_members_follow_status_order(self, users_document: dict[str, Any]) -> None:
        """Test the synthesized discriminated union."""
        operation = users_document["paths"]["/users/{userId}"]["get"]
        analysis = analyze_responses(operation, users_document, "GetUser")
        assert analysis.union_members == (
            "ApiResponse<200, User>",
            "ApiResponse<404, GetUser404Response>",
            "ApiResponse<500, void>",
        ), "Union members should be named per status"

    def test_inline_schema_name_is_stable(self, users_document: dict[str, Any]) -> None:
        """Test that an inline 404 schema on getUser is always named GetUser404Response."""
        operation = users_document["paths"]["/users/{userId}"]["get"]
        first = analyze_responses(operation, users_document, "GetUser")
        operation["responses"]["404"]["content"]["application/json"]["schema"] = {"type": "string"}
        second = analyze_responses(operation, users_document, "GetUser")

        assert [r.name for r in first.inline_schemas] == ["GetUser404Response"], "Inline schema should register"
        assert [r.name for r in second.inline_schemas] == ["GetUser404Response"], "Name must not depend on content"
        assert first.type_imports == frozenset({"User", "GetUser404Response"}), "Both types should be imported"

    def test_default_response_is_excluded(self, users_document: dict[str, Any]) -> None:
        """Test that default and wildcard responses never enter the union."""
        operation = users_document["paths"]["/users"]["get"]
        operation["responses"]["2XX"] = {"description": "wildcard"}
        analysis = analyze_responses(operation, users_document, "ListUsers")
        assert analysis.status_codes == ("200",), "Only numeric statuses should be kept"
        assert analysis.union_members == ("ApiResponse<200, ListUsers200Response>",), "Union should have one member"

    def test_no_numeric_status_falls_back(self) -> None:
        """Test that operations without numeric statuses get a generic member."""
        analysis = analyze_responses({"responses": {"default": {"description": "x"}}}, {}, "Ping")
        assert analysis.responses == (), "No statuses should be analyzed"
        assert analysis.union_members == ("ApiResponse<number, unknown>",), "Fallback member expected"

    def test_integer_status_keys(self) -> None:
        """Test that YAML-style integer status keys are understood."""
        operation = {"responses": {404: {"description": "x"}, 200: {"description": "y"}}}
        assert analyze_responses(operation, {}, "Op").status_codes == ("200", "404"), "Integer keys should work"

    def test_referenced_response_objects(self) -> None:
        """Test that responses defined under components are resolved."""
        document = {
            "components": {
                "responses": {
                    "NotFound": {
                        "description": "missing",
                        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Error"}}},
                    },
                },
            },
        }
        operation = {"responses": {"404": {"$ref": "#/components/responses/NotFound"}}}
        analysis = analyze_responses(operation, document, "GetThing")
        assert analysis.union_members == ("ApiResponse<404, Error>",), "Referenced responses should be followed"

    def test_response_map_and_content_type_generic(self) -> None:
        """Test that several media types produce a map and a selectable content type."""
        operation = {
            "responses": {
                "200": {
                    "content": {
                        "application/json": {"schema": {"$ref": "#/components/schemas/Report"}},
                        "text/csv": {"schema": {"type": "string"}},
                    },
                },
            },
        }
        analysis = analyze_responses(operation, {}, "GetReport")

        assert analysis.response_map == (
            ("200", (("application/json", "Report"), ("text/csv", "GetReport200Response"))),
        ), "Map should list every media type per status"
        assert analysis.has_response_content_type_generic, "Two media types should allow selection"
        assert analysis.default_response_content_type == "application/json", "JSON should be the default"
        assert analysis.responses[0].parsing_strategy.requires_runtime_content_type_check, "Mixed needs a check"

    def test_single_mapping_collapses(self) -> None:
        """Test that a single (status, media type) pair produces no map."""
        operation = {"responses": {"200": {"content": {"application/json": {"schema": {"type": "string"}}}}}}
        analysis = analyze_responses(operation, {}, "Echo")
        assert analysis.response_map is None, "One mapping should not produce a map"
        assert not analysis.has_response_content_type_generic, "No generic without a map"

    def test_maps_can_be_disabled(self) -> None:
        """Test the content-type map switch."""
        operation = {
            "responses": {
                "200": {"content": {"application/json": {"schema": {}}, "text/plain": {"schema": {}}}},
            },
        }
        options = GeneratorOptions(generate_content_type_maps=False)
        analysis = analyze_responses(operation, {}, "Echo", options)
        assert analysis.response_map is None, "Disabled maps should never be built"
        assert not analysis.responses[0].parsing_strategy.requires_runtime_content_type_check

    def test_validation_strategy(self) -> None:
        """Test that only JSON schemas are validated unless forced."""
        operation = {"responses": {"200": {"content": {"text/plain": {"schema": {"type": "string"}}}}}}
        plain = analyze_responses(operation, {}, "Echo")
        forced = analyze_responses(operation, {}, "Echo", GeneratorOptions(force_validation=True))
        assert not plain.responses[0].parsing_strategy.use_validation, "Text is not validated by default"
        assert forced.responses[0].parsing_strategy.use_validation, "Forced validation covers text"

    def test_unknown_response_mode_members(self, users_document: dict[str, Any]) -> None:
        """Test union members when response data is left untyped."""
        operation = users_document["paths"]["/users/{userId}"]["get"]
        analysis = analyze_responses(operation, users_document, "GetUser", GeneratorOptions(unknown_response_mode=True))
        assert analysis.union_members == (
            "ApiResponseWithParse<200, User>",
            "ApiResponseWithParse<404, GetUser404Response>",
            "ApiResponse<500, void>",
        ), "Schema-backed statuses should carry a parse function"

    def test_non_component_reference_is_rejected(self) -> None:
        """Test that schema references outside components fail."""
        operation = {"responses": {"200": {"content": {"application/json": {"schema": {"$ref": "#/paths/x"}}}}}}
        with pytest.raises(UnsupportedReferenceError, match="response 200"):
            analyze_responses(operation, {}, "Op")


class TestSortedStatusCodes:
    """Filtering and ordering of response keys."""

    def test_filters_non_numeric(self) -> None:
        """Test that default and wildcard keys are dropped."""
        assert sorted_status_codes({"default": {}, "5XX": {}, "201": {}, "200": {}}) == ["200", "201"]
        assert sorted_status_codes(None) == [], "Missing responses give no statuses"
