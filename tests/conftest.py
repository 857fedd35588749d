"""Shared fixtures: small OpenAPI documents and metadata helpers."""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

import pytest

from ts_oas_generator.analysis import OperationMetadata, extract_operation_metadata
from ts_oas_generator.config import DEFAULT_OPTIONS, GeneratorOptions
from ts_oas_generator.generator.zod import ZodSchemaCompiler
from ts_oas_generator.parser.oas_parser import OASParser, ParsedSpec

USER_REF = {"$ref": "#/components/schemas/User"}

USERS_DOCUMENT: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Users API", "version": "1.0.0"},
    "servers": [{"url": "https://api.example.com/v1"}, {"url": "https://sandbox.example.com/v1"}],
    "security": [{"bearerAuth": []}],
    "paths": {
        "/users": {
            "post": {
                "operationId": "createUser",
                "summary": "Create a user",
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {"schema": USER_REF},
                        "application/x-www-form-urlencoded": {
                            "schema": {"type": "object", "properties": {"name": {"type": "string"}}},
                        },
                    },
                },
                "responses": {
                    "201": {"description": "Created", "content": {"application/json": {"schema": USER_REF}}},
                    "400": {
                        "description": "Invalid input",
                        "content": {
                            "application/json": {
                                "schema": {"type": "object", "properties": {"message": {"type": "string"}}},
                            },
                        },
                    },
                },
            },
            "get": {
                "operationId": "listUsers",
                "security": [],
                "parameters": [
                    {"name": "limit", "in": "query", "schema": {"type": "integer", "minimum": 1}},
                    {"name": "tag", "in": "query", "schema": {"type": "array", "items": {"type": "string"}}},
                ],
                "responses": {
                    "200": {
                        "description": "Users",
                        "content": {"application/json": {"schema": {"type": "array", "items": USER_REF}}},
                    },
                    "default": {"description": "Unexpected error"},
                },
            },
        },
        "/users/{userId}": {
            "parameters": [{"name": "userId", "in": "path", "schema": {"type": "string"}}],
            "get": {
                "operationId": "getUser",
                "description": "Fetch a single user.",
                "parameters": [{"name": "X-Request-Id", "in": "header", "schema": {"type": "string"}}],
                "responses": {
                    "500": {"description": "Server error"},
                    "404": {
                        "description": "Not found",
                        "content": {
                            "application/json": {
                                "schema": {"type": "object", "properties": {"error": {"type": "string"}}},
                            },
                        },
                    },
                    "200": {"description": "The user", "content": {"application/json": {"schema": USER_REF}}},
                },
            },
            "delete": {
                "operationId": "deleteUser",
                "deprecated": True,
                "security": [{"apiKey": []}],
                "responses": {"204": {"description": "Deleted"}},
            },
        },
        "/health": {"get": {"operationId": "healthCheck", "responses": {}}},
    },
    "components": {
        "schemas": {
            "User": {
                "type": "object",
                "required": ["id", "email"],
                "properties": {
                    "id": {"type": "string", "format": "uuid"},
                    "email": {"type": "string", "format": "email"},
                    "name": {"type": "string"},
                },
            },
        },
        "securitySchemes": {
            "bearerAuth": {"type": "http", "scheme": "bearer"},
            "apiKey": {"type": "apiKey", "in": "header", "name": "X-API-Key"},
        },
    },
}


@pytest.fixture
def users_document() -> dict[str, Any]:
    """A fresh copy of the users document."""
    return copy.deepcopy(USERS_DOCUMENT)


@pytest.fixture
def users_spec(users_document: dict[str, Any]) -> ParsedSpec:
    """The users document parsed."""
    return OASParser().parse_dict(users_document)


@pytest.fixture
def compiler() -> ZodSchemaCompiler:
    return ZodSchemaCompiler()


@pytest.fixture
def build_metadata(
    users_document: dict[str, Any], compiler: ZodSchemaCompiler
) -> Callable[..., OperationMetadata]:
    """Build the metadata of one operation of the users document, by operationId."""

    def _build(operation_id: str, options: GeneratorOptions = DEFAULT_OPTIONS) -> OperationMetadata:
        for entry in OASParser().parse_dict(users_document).operations:
            if entry.operation_id == operation_id:
                return extract_operation_metadata(
                    entry.path,
                    entry.method,
                    entry.operation,
                    users_document,
                    compiler=compiler,
                    path_level_params=entry.path_level_parameters,
                    options=options,
                )
        msg = f"no operation {operation_id}"
        raise KeyError(msg)

    return _build
