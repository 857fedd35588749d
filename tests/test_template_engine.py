"""Tests for file generation through the template engine."""

from pathlib import Path
from typing import Any

import pytest

from ts_oas_generator.errors import OperationGenerationError, SchemaNameConflictError
from ts_oas_generator.generator.template_engine import TsCodeGenerator, TsTemplateEngine
from ts_oas_generator.parser.oas_parser import OASParser, ParsedSpec

OUTPUT_DIR = Path("out")


class TestTsTemplateEngine:
    """Template rendering."""

    def test_render_index(self) -> None:
        """Test the barrel module."""
        content = TsTemplateEngine().render_template("files/index.ts.j2", {"modules": ["getUser", "listUsers"]})
        assert content == (
            'export * from "./config.js";\nexport * from "./getUser.js";\nexport * from "./listUsers.js";\n'
        ), "Index should re-export config and every operation"

    def test_render_schema(self) -> None:
        """Test a schema module."""
        content = TsTemplateEngine().render_template(
            "files/schema.ts.j2",
            {"name": "Pet", "code": "z.lazy(() => Owner)", "references": ["Owner"], "recursive": False, "description": None},
        )
        assert content == (
            'import { z } from "zod";\n'
            'import { Owner } from "./Owner.js";\n'
            "\n"
            "export const Pet = z.lazy(() => Owner);\n"
            "export type Pet = z.infer<typeof Pet>;\n"
        ), "Schema modules export a validator and its inferred type"


class TestTsCodeGenerator:
    """File maps produced for a whole document."""

    @pytest.fixture
    def files(self, users_spec: ParsedSpec) -> dict[Path, str]:
        return TsCodeGenerator().generate_client(users_spec, OUTPUT_DIR)

    def test_file_layout(self, files: dict[Path, str]) -> None:
        """Test that every operation, schema and support module is generated."""
        operations = OUTPUT_DIR / "operations"
        schemas = OUTPUT_DIR / "schemas"
        assert set(files) == {
            operations / "createUser.ts",
            operations / "listUsers.ts",
            operations / "getUser.ts",
            operations / "deleteUser.ts",
            operations / "healthCheck.ts",
            operations / "config.ts",
            operations / "index.ts",
            schemas / "User.ts",
            schemas / "CreateUserRequest.ts",
            schemas / "CreateUser400Response.ts",
            schemas / "ListUsers200Response.ts",
            schemas / "GetUser404Response.ts",
        }, "Unexpected set of generated files"

    def test_server_wrapper_files(self, users_spec: ParsedSpec) -> None:
        """Test that server wrappers get their own directory and barrel."""
        files = TsCodeGenerator().generate_client(users_spec, OUTPUT_DIR, server_wrappers=True)
        server = OUTPUT_DIR / "server-operations"

        assert {path for path in files if path.parent == server} == {
            server / "createUser.ts",
            server / "listUsers.ts",
            server / "getUser.ts",
            server / "deleteUser.ts",
            server / "healthCheck.ts",
            server / "index.ts",
        }, "One wrapper module per operation plus a barrel"
        module = files[server / "createUser.ts"]
        assert module.startswith('import { z } from "zod";\nimport { CreateUser400Response } from "../schemas/')
        assert 'import { User } from "../schemas/User.js";\n\nexport const CreateUserServerQuerySchema' in module
        assert module.endswith("} as const;\n"), "Module ends with the route constant"
        assert files[server / "index.ts"].splitlines()[0] == 'export * from "./createUser.js";', (
            "Barrel follows document order"
        )

    def test_operation_module_imports(self, files: dict[Path, str]) -> None:
        """Test the import block of an operation module."""
        content = files[OUTPUT_DIR / "operations" / "getUser.ts"]
        assert content.startswith(
            'import { z } from "zod";\n'
            "import { type ApiResponse, type GlobalConfig, globalConfig, parseResponseBody, "
            'ResponseValidationError, UnexpectedResponseError } from "./config.js";\n'
            'import { GetUser404Response } from "../schemas/GetUser404Response.js";\n'
            'import { User } from "../schemas/User.js";\n'
            "\n"
        ), "Operation modules should import zod, config helpers and schemas"
        assert content.endswith("}\n"), "Module should end with the function"
        assert not content.endswith("\n\n"), "No trailing blank line"

    def test_index_keeps_document_order(self, files: dict[Path, str]) -> None:
        """Test the index module order."""
        lines = files[OUTPUT_DIR / "operations" / "index.ts"].splitlines()
        assert lines == [
            'export * from "./config.js";',
            'export * from "./createUser.js";',
            'export * from "./listUsers.js";',
            'export * from "./getUser.js";',
            'export * from "./deleteUser.js";',
            'export * from "./healthCheck.js";',
        ], "Operations should be exported in document order"

    def test_config_module(self, files: dict[Path, str]) -> None:
        """Test the generated support module."""
        content = files[OUTPUT_DIR / "operations" / "config.ts"]
        assert '  "Authorization"?: string;\n' in content, "Global auth headers should be typed"
        assert (
            '  baseURL: "https://api.example.com/v1" | "https://sandbox.example.com/v1" | (string & {});\n'
        ) in content, "Server URLs should be suggested"
        assert '  baseURL: "https://api.example.com/v1",\n' in content, "First server is the default"
        assert "export class ResponseValidationError extends Error {" in content
        assert "export async function parseResponseBody(response: Response): Promise<unknown> {" in content

    def test_schema_module(self, files: dict[Path, str]) -> None:
        """Test a component schema module."""
        content = files[OUTPUT_DIR / "schemas" / "ListUsers200Response.ts"]
        assert 'import { User } from "./User.js";\n' in content, "Referenced schemas should be imported"
        assert "export const ListUsers200Response = z.array(z.lazy(() => User));\n" in content

    def test_workers_do_not_change_output(self, users_spec: ParsedSpec) -> None:
        """Test that parallel generation is byte-identical to sequential generation."""
        sequential = TsCodeGenerator().generate_client(users_spec, OUTPUT_DIR)
        parallel = TsCodeGenerator().generate_client(users_spec, OUTPUT_DIR, workers=4)
        assert sequential == parallel, "Output must not depend on the number of workers"
        assert list(sequential) == list(parallel), "File order must not depend on the number of workers"

    def test_recursive_schema(self) -> None:
        """Test that self-referencing schemas are annotated."""
        spec = OASParser().parse_dict(
            {
                "openapi": "3.0.0",
                "paths": {},
                "components": {
                    "schemas": {
                        "Node": {"type": "object", "properties": {"children": {"type": "array", "items": {"$ref": "#/components/schemas/Node"}}}},
                    },
                },
            }
        )
        content = TsCodeGenerator().generate_client(spec, OUTPUT_DIR)[OUTPUT_DIR / "schemas" / "Node.ts"]
        assert "export const Node: z.ZodTypeAny = z.object({\n" in content, "Recursive schemas need a type annotation"
        assert 'import { Node } from "./Node.js";' not in content, "A schema never imports itself"

    def test_json_detection_agrees_with_analysis(self) -> None:
        """Test that a text/json response is validated and parsed as JSON at runtime."""
        spec = OASParser().parse_dict(
            {
                "openapi": "3.0.0",
                "paths": {
                    "/status": {
                        "get": {
                            "operationId": "getStatus",
                            "responses": {
                                "200": {
                                    "description": "Status",
                                    "content": {
                                        "text/json": {
                                            "schema": {"type": "object", "properties": {"ok": {"type": "boolean"}}},
                                        },
                                    },
                                },
                            },
                        },
                    },
                },
            }
        )
        files = TsCodeGenerator().generate_client(spec, OUTPUT_DIR)

        operation = files[OUTPUT_DIR / "operations" / "getStatus.ts"]
        config = files[OUTPUT_DIR / "operations" / "config.ts"]
        assert "GetStatus200Response.safeParse(data)" in operation, "text/json bodies should be validated"
        assert '  return contentType.includes("json");\n' in config, "Runtime JSON detection should match analysis"
        assert config.index("isJsonLikeContentType(contentType)) {") < config.index('contentType.startsWith("text/")'), (
            "JSON-like media types must be parsed before the text branch"
        )


class TestGenerationFailures:
    """Abort and skip policies."""

    @pytest.fixture
    def broken_spec(self, users_document: dict[str, Any]) -> ParsedSpec:
        users_document["paths"]["/broken"] = {"get": {"responses": {}}}
        return OASParser().parse_dict(users_document)

    def test_abort_by_default(self, broken_spec: ParsedSpec) -> None:
        """Test that a failing operation aborts generation."""
        with pytest.raises(OperationGenerationError, match="GET /broken"):
            TsCodeGenerator().generate_client(broken_spec, OUTPUT_DIR)

    def test_skip_invalid(self, broken_spec: ParsedSpec, caplog: pytest.LogCaptureFixture) -> None:
        """Test that skip mode logs and continues."""
        files = TsCodeGenerator().generate_client(broken_spec, OUTPUT_DIR, skip_invalid=True)
        assert OUTPUT_DIR / "operations" / "getUser.ts" in files, "Valid operations should still be generated"
        assert "Skipping operation <anonymous> (GET /broken)" in caplog.text, "Skipped operation should be logged"

    def test_duplicate_function_names(self, users_document: dict[str, Any], caplog: pytest.LogCaptureFixture) -> None:
        """Test that the first operation with a function name wins."""
        users_document["paths"]["/users-copy"] = {"get": {"operationId": "getUser", "responses": {}}}
        spec = OASParser().parse_dict(users_document)

        files = TsCodeGenerator().generate_client(spec, OUTPUT_DIR)

        assert "`/users/${" in files[OUTPUT_DIR / "operations" / "getUser.ts"], "First declaration should win"
        assert "function name getUser is already generated" in caplog.text, "Duplicate should be logged"

    def test_inline_schema_name_clash_aborts(self, users_document: dict[str, Any]) -> None:
        """Test that an inline schema reusing a component schema name fails its operation."""
        users_document["components"]["schemas"]["GetUser404Response"] = {"type": "string"}
        spec = OASParser().parse_dict(users_document)

        with pytest.raises(OperationGenerationError, match="operation getUser") as exc_info:
            TsCodeGenerator().generate_client(spec, OUTPUT_DIR)
        assert isinstance(exc_info.value.cause, SchemaNameConflictError), "Cause should be the name clash"
        assert exc_info.value.cause.name == "GetUser404Response", "Clashing name should be recorded"

    def test_inline_schema_name_clash_skipped(
        self, users_document: dict[str, Any], caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that skip mode drops the clashing operation and keeps the component schema."""
        users_document["components"]["schemas"]["GetUser404Response"] = {"type": "string"}
        spec = OASParser().parse_dict(users_document)

        files = TsCodeGenerator().generate_client(spec, OUTPUT_DIR, skip_invalid=True)

        assert OUTPUT_DIR / "operations" / "getUser.ts" not in files, "Clashing operation should be skipped"
        assert OUTPUT_DIR / "operations" / "listUsers.ts" in files, "Other operations should still be generated"
        schema = files[OUTPUT_DIR / "schemas" / "GetUser404Response.ts"]
        assert "export const GetUser404Response = z.string();\n" in schema, "Component schema should be kept"
        assert "clashes with an existing schema" in caplog.text, "Skipped operation should be logged"
