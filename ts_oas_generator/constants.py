"""Shared constants for TypeScript operation generation."""

from __future__ import annotations

from typing import Final

HTTP_METHODS: Final = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

PARAMETER_LOCATIONS: Final = ("path", "query", "header")

COMPONENT_SCHEMA_PREFIX: Final = "#/components/schemas/"

# Sentinel emitted in place of a content-type map that would hold a single mapping
EMPTY_MAP: Final = "{}"

DEFAULT_REQUEST_CONTENT_TYPE: Final = "application/json"

REQUEST_CONTENT_TYPE_PRIORITY: Final = (
    "application/json",
    "application/x-www-form-urlencoded",
    "multipart/form-data",
    "text/plain",
    "application/xml",
    "application/octet-stream",
)

RESPONSE_JSON_PRIORITY: Final = ("application/json", "application/problem+json")

JSON_SUFFIX: Final = "+json"

# Identifiers declared inside every generated function body
RESERVED_VARIABLE_NAMES: Final = frozenset(
    {
        "body",
        "contentType",
        "config",
        "url",
        "response",
        "finalHeaders",
        "bodyContent",
        "requestContentType",
        "data",
        "parsed",
        "fetch",
        "headers",
        "value",
        "formData",
        "isJson",
    }
)

# Header names produced by the security schemes we understand
AUTHORIZATION_HEADER: Final = "Authorization"

SCHEMA_FILE_EXTENSION: Final = ".ts"
IMPORT_EXTENSION: Final = ".js"
