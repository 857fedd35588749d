"""
Server operation wrappers.

A wrapper is the server-side counterpart of a generated operation function:
it validates an incoming request (query, path, headers, then body) with zod
and passes either the parsed values or the first validation failure to a
user-supplied handler, whose result is typed by the operation's declared
responses. Wrappers are rendered from the same :class:`OperationMetadata` as
the client functions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from jinja2 import Environment

from ts_oas_generator.analysis.models import OperationMetadata, ParameterSchema, ResponseInfo
from ts_oas_generator.generator.environment import default_environment
from ts_oas_generator.generator.filters import ts_string_literal

UNTYPED_VALIDATOR: Final = "z.unknown()"
FALLBACK_RESPONSE_MEMBER: Final = "{ status: number; contentType?: string; data?: unknown }"

_WRAPPER_TEMPLATE: Final = "server/wrapper.ts.j2"

# (location, name suffix, zod constructor); unknown query and path keys are rejected
_SERVER_PARAMETER_GROUPS: Final = (
    ("query", "Query", "z.strictObject"),
    ("path", "Path", "z.strictObject"),
    ("header", "Headers", "z.object"),
)


@dataclass(frozen=True)
class ServerParameterSchema:
    location: str
    schema_name: str
    type_name: str
    code: str


@dataclass(frozen=True)
class ServerNames:
    """Names exported by the server module of one operation."""

    wrapper: str
    route: str
    handler: str
    parsed_params: str
    validation_error: str
    request_schemas: str
    request_body: str
    response: str

    @classmethod
    def for_operation(cls, metadata: OperationMetadata) -> ServerNames:
        name = metadata.operation_name
        return cls(
            wrapper=f"{metadata.function_name}Wrapper",
            route=f"{metadata.function_name}Route",
            handler=f"{name}Handler",
            parsed_params=f"{name}ParsedParams",
            validation_error=f"{name}ValidationError",
            request_schemas=f"{name}ServerRequestSchemas",
            request_body=f"{name}ServerRequestBody",
            response=f"{name}ServerResponse",
        )


@dataclass(frozen=True)
class ServerWrapperFragment:
    """Everything generated for the server side of one operation."""

    function_name: str
    names: ServerNames
    type_declarations: tuple[str, ...]
    wrapper: str
    type_imports: tuple[str, ...] = ()

    def to_source(self) -> str:
        return "\n\n".join([*self.type_declarations, self.wrapper])


def build_server_parameter_schemas(metadata: OperationMetadata) -> tuple[ServerParameterSchema, ...]:
    """One schema per location, in validation order, empty when nothing is declared.

    Header keys are lowercased because servers receive header names in
    lower case.
    """
    declared = {schema.location: schema for schema in metadata.parameter_schemas}
    schemas = []
    for location, suffix, constructor in _SERVER_PARAMETER_GROUPS:
        schema = declared.get(location) or ParameterSchema(location=location, schema_name="", type_name="")
        type_name = f"{metadata.operation_name}Server{suffix}"
        schemas.append(
            ServerParameterSchema(
                location=location,
                schema_name=f"{type_name}Schema",
                type_name=type_name,
                code=schema.object_code(constructor, lowercase_keys=location == "header"),
            )
        )
    return tuple(schemas)


def build_request_schema_entries(metadata: OperationMetadata) -> tuple[tuple[str, str], ...]:
    """``(content type, validator)`` pairs accepted for the request body.

    Keys are lowercased media types. A content type without a generated
    schema accepts any value.
    """
    body = metadata.body_info
    if body is None:
        return ()
    typed = dict(body.request_map or ())
    if body.request_map is None and body.type_name:
        typed[body.content_type] = body.type_name

    entries: dict[str, str] = {}
    for content_type in body.content_types or (body.content_type,):
        type_name = typed.get(content_type)
        validator = type_name if type_name and type_name != "unknown" else UNTYPED_VALIDATOR
        entries.setdefault(content_type.lower(), validator)
    return tuple(entries.items())


def _response_members(info: ResponseInfo, typed: dict[str, str]) -> list[str]:
    if not info.has_content:
        return [f"{{ status: {info.status_code} }}"]
    members = []
    for content_type in info.content_types:
        data_type = typed.get(content_type, "unknown")
        members.append(
            f"{{ status: {info.status_code}; contentType: {ts_string_literal(content_type)}; data: {data_type} }}"
        )
    return members


def build_server_response_members(metadata: OperationMetadata) -> tuple[str, ...]:
    """Members of the handler result union, one per declared ``(status, media type)``."""
    analysis = metadata.response_analysis
    by_status = {status: dict(mapping) for status, mapping in analysis.response_map or ()}
    members: list[str] = []
    for info in analysis.responses:
        typed = by_status.get(info.status_code, {})
        if analysis.response_map is None and info.type_name and info.content_type:
            typed = {info.content_type: info.type_name}
        members.extend(_response_members(info, typed))
    return tuple(members) or (FALLBACK_RESPONSE_MEMBER,)


def _union(name: str, members: tuple[str, ...] | list[str]) -> str:
    if len(members) == 1:
        return f"export type {name} = {members[0]};"
    return f"export type {name} =\n" + "\n".join(f"  | {member}" for member in members) + ";"


def build_server_declarations(
    metadata: OperationMetadata,
    names: ServerNames,
    parameter_schemas: tuple[ServerParameterSchema, ...],
) -> tuple[str, ...]:
    """Render schemas and types that precede the wrapper function."""
    declarations = [
        f"export const {schema.schema_name} = {schema.code};\n"
        f"export type {schema.type_name} = z.infer<typeof {schema.schema_name}>;"
        for schema in parameter_schemas
    ]

    body = metadata.body_info
    if body is not None:
        entries = "\n".join(
            f"  {ts_string_literal(content_type)}: {validator},"
            for content_type, validator in build_request_schema_entries(metadata)
        )
        declarations.append(
            f"export const {names.request_schemas} = {{\n{entries}\n}};\n"
            f"export type {names.request_body} = z.infer<"
            f"(typeof {names.request_schemas})[keyof typeof {names.request_schemas}]>;"
        )
        body_field = f"  body: {names.request_body}{'' if body.is_required else ' | undefined'};"
    else:
        body_field = "  body: undefined;"

    declarations.append(_union(names.response, build_server_response_members(metadata)))

    query, path, headers = (schema.type_name for schema in parameter_schemas)
    declarations.append(
        f"export type {names.parsed_params} = {{\n"
        f"  query: {query};\n"
        f"  path: {path};\n"
        f"  headers: {headers};\n"
        f"{body_field}\n"
        "};"
    )

    errors = [
        f'{{ success: false; kind: "{kind}-error"; error: z.ZodError }}' for kind in ("query", "path", "headers")
    ]
    if body is not None:
        errors.append('{ success: false; kind: "body-error"; error: z.ZodError }')
        errors.append('{ success: false; kind: "content-type-error"; contentType: string }')
    declarations.append(_union(names.validation_error, errors))

    declarations.append(
        f"export type {names.handler} = (\n"
        f"  params: {{ success: true; value: {names.parsed_params} }} | {names.validation_error},\n"
        f") => Promise<{names.response}>;"
    )
    return tuple(declarations)


def render_server_wrapper(metadata: OperationMetadata, env: Environment | None = None) -> ServerWrapperFragment:
    """Compose the server module fragment of one operation."""
    env = env or default_environment()
    names = ServerNames.for_operation(metadata)
    parameter_schemas = build_server_parameter_schemas(metadata)
    body = metadata.body_info
    wrapper = env.get_template(_WRAPPER_TEMPLATE).render(
        metadata=metadata,
        names=names,
        parameter_schemas=parameter_schemas,
        body=body,
        default_content_type=body.content_type.lower() if body is not None else None,
    )
    return ServerWrapperFragment(
        function_name=metadata.function_name,
        names=names,
        type_declarations=build_server_declarations(metadata, names, parameter_schemas),
        wrapper=wrapper.strip(),
        type_imports=tuple(sorted(metadata.type_imports)),
    )
