"""
Data model of the operation pipeline.

Every record here is a frozen dataclass built once per operation by the
analysis functions and consumed read-only by the renderers. Maps that must
keep a deterministic order are stored as tuples of pairs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from ts_oas_generator.config import DEFAULT_OPTIONS, GeneratorOptions
from ts_oas_generator.constants import EMPTY_MAP
from ts_oas_generator.parser.schema_node import SchemaNode
from ts_oas_generator.utils.string_case import ts_property_key


@dataclass(frozen=True)
class CompiledSchema:
    """A validator expression and the schema names it refers to."""

    code: str
    type_references: frozenset[str] = frozenset()


class SchemaCompiler(Protocol):
    """Turns a schema into runtime validator code."""

    def compile(self, schema: SchemaNode | dict[str, Any] | bool) -> CompiledSchema: ...


@dataclass(frozen=True)
class InlineSchemaRegistration:
    """An inline schema that needs its own generated validator."""

    name: str
    schema: dict[str, Any]


@dataclass(frozen=True)
class TypeResolution:
    """Result of resolving a schema to a type name."""

    type_name: str
    imports: frozenset[str] = frozenset()
    inline_schemas: tuple[InlineSchemaRegistration, ...] = ()


@dataclass(frozen=True)
class Parameter:
    """A path, query or header parameter after ``$ref`` resolution."""

    name: str
    location: str
    required: bool
    var_name: str
    schema: SchemaNode | None = None
    description: str | None = None
    is_array: bool = False


@dataclass(frozen=True)
class ParameterGroups:
    """Parameters partitioned by location, each group in declaration order."""

    path: tuple[Parameter, ...] = ()
    query: tuple[Parameter, ...] = ()
    header: tuple[Parameter, ...] = ()

    @property
    def all(self) -> tuple[Parameter, ...]:
        return self.path + self.query + self.header

    @property
    def is_empty(self) -> bool:
        return not self.all

    def by_location(self, location: str) -> tuple[Parameter, ...]:
        match location:
            case "path":
                return self.path
            case "query":
                return self.query
            case "header":
                return self.header
            case _:
                return ()


@dataclass(frozen=True)
class ParameterSchema:
    """A zod object schema describing one parameter group.

    ``fields`` holds ``(parameter name, validator)`` pairs in declaration
    order; optional parameters already carry ``.optional()``.
    """

    location: str
    schema_name: str
    type_name: str
    fields: tuple[tuple[str, str], ...] = ()
    imports: frozenset[str] = frozenset()

    @property
    def code(self) -> str:
        return self.object_code()

    def object_code(self, constructor: str = "z.object", *, lowercase_keys: bool = False) -> str:
        """Render the group as ``constructor({...})``."""
        if not self.fields:
            return f"{constructor}({{}})"
        entries = []
        for name, validator in self.fields:
            key = name.lower() if lowercase_keys else name
            nested = validator.replace("\n", "\n  ")
            entries.append(f"  {ts_property_key(key)}: {nested},")
        return f"{constructor}({{\n" + "\n".join(entries) + "\n})"


@dataclass(frozen=True)
class SecurityHeader:
    scheme_name: str
    header_name: str
    is_required: bool = True


@dataclass(frozen=True)
class ContentTypeAnalysis:
    """Media types declared by a request body or a response."""

    all_types: tuple[str, ...] = ()
    has_json_like: bool = False
    has_non_json: bool = False

    @property
    def has_mixed(self) -> bool:
        return self.has_json_like and self.has_non_json


@dataclass(frozen=True)
class RequestBodyInfo:
    """Resolved request body of an operation.

    ``request_map`` holds ``(content type, type name)`` pairs and is only set
    when more than one content type is declared and maps are enabled.
    """

    type_name: str | None
    is_required: bool
    content_type: str
    content_types: tuple[str, ...] = ()
    request_map: tuple[tuple[str, str], ...] | None = None


@dataclass(frozen=True)
class ParsingStrategy:
    is_json_like: bool
    use_validation: bool
    requires_runtime_content_type_check: bool


@dataclass(frozen=True)
class ResponseInfo:
    """One status code of an operation's responses."""

    status_code: str
    content_type: str | None
    type_name: str | None
    has_schema: bool
    parsing_strategy: ParsingStrategy
    content_types: tuple[str, ...] = ()
    description: str | None = None

    @property
    def has_content(self) -> bool:
        return bool(self.content_types)

    @property
    def data_type(self) -> str:
        if self.type_name:
            return self.type_name
        return "unknown" if self.has_content else "void"


@dataclass(frozen=True)
class ResponseAnalysis:
    """Status-ordered response structure and the synthesized union type."""

    responses: tuple[ResponseInfo, ...] = ()
    response_map: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] | None = None
    response_content_types: tuple[str, ...] = ()
    default_response_content_type: str | None = None
    union_members: tuple[str, ...] = ()
    type_imports: frozenset[str] = frozenset()
    inline_schemas: tuple[InlineSchemaRegistration, ...] = ()

    @property
    def status_codes(self) -> tuple[str, ...]:
        return tuple(info.status_code for info in self.responses)

    @property
    def union_type(self) -> str:
        return " | ".join(self.union_members)

    @property
    def has_response_content_type_generic(self) -> bool:
        return self.response_map is not None and len(self.response_content_types) > 1

    @property
    def requires_runtime_content_type_check(self) -> bool:
        return any(info.parsing_strategy.requires_runtime_content_type_check for info in self.responses)


@dataclass(frozen=True)
class OperationMetadata:
    """Everything the renderers need to know about one operation."""

    operation_id: str
    function_name: str
    operation_name: str
    method: str
    path: str
    parameter_groups: ParameterGroups
    response_analysis: ResponseAnalysis
    body_info: RequestBodyInfo | None = None
    summary: str | None = None
    description: str | None = None
    deprecated: bool = False
    security_headers: tuple[SecurityHeader, ...] = ()
    overrides_security: bool = False
    auth_headers: tuple[str, ...] = ()
    parameter_schemas: tuple[ParameterSchema, ...] = ()
    type_imports: frozenset[str] = frozenset()
    inline_schemas: tuple[InlineSchemaRegistration, ...] = ()
    options: GeneratorOptions = field(default=DEFAULT_OPTIONS)

    @property
    def request_map_name(self) -> str:
        return f"{self.operation_name}RequestMap"

    @property
    def response_map_name(self) -> str:
        return f"{self.operation_name}ResponseMap"

    @property
    def response_content_type_name(self) -> str:
        return f"{self.operation_name}ResponseContentType"

    @property
    def response_type_name(self) -> str:
        return f"{self.operation_name}Response"

    @property
    def request_map_type(self) -> str:
        """Name of the request map type, or the empty-map sentinel."""
        if self.body_info is not None and self.body_info.request_map is not None:
            return self.request_map_name
        return EMPTY_MAP

    @property
    def response_map_type(self) -> str:
        """Name of the response map type, or the empty-map sentinel."""
        if self.response_analysis.response_map is not None:
            return self.response_map_name
        return EMPTY_MAP

    @property
    def has_request_content_type_generic(self) -> bool:
        return self.request_map_type != EMPTY_MAP

    @property
    def has_response_content_type_generic(self) -> bool:
        return self.response_map_type != EMPTY_MAP and self.response_analysis.has_response_content_type_generic

    @property
    def has_content_type_option(self) -> bool:
        return self.has_request_content_type_generic or self.has_response_content_type_generic
