"""
Operation renderers.

Each renderer is a pure function of an :class:`OperationMetadata` record. The
composed output of one operation is, in order: type aliases and content-type
maps, the summary comment, the function signature and the function body.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from jinja2 import Environment

from ts_oas_generator.analysis.content_types import body_serialization_kind
from ts_oas_generator.analysis.models import OperationMetadata, ResponseInfo, SecurityHeader
from ts_oas_generator.analysis.parameters import allocate_variable_name
from ts_oas_generator.generator.environment import default_environment
from ts_oas_generator.generator.filters import ts_doc_comment, ts_string_literal, ts_template_literal_path
from ts_oas_generator.generator.fragments import ConfigImport, FunctionSignature, OperationFragment
from ts_oas_generator.utils.string_case import is_identifier, ts_property_key

EMPTY_PARAMETER_DECLARATION: Final = "{}: {} = {}"
UNTYPED_BODY: Final = "unknown"

_BODY_TEMPLATE: Final = "operation/function_body.ts.j2"
_SECURITY_LOCATION: Final = "header"


@dataclass(frozen=True)
class RequestBodyCase:
    content_type: str
    kind: str


@dataclass(frozen=True)
class ResponseCase:
    """How the generated code handles one status code.

    ``kind`` is one of ``empty``, ``untyped``, ``validated``, ``cast``,
    ``runtime_check``, ``lazy_parse`` or ``lazy_parse_runtime_check``.
    """

    status_code: str
    kind: str
    type_name: str | None = None
    validate: bool = False


@dataclass(frozen=True)
class _Section:
    pattern: str
    declaration: str
    optional: bool


def security_header_variables(metadata: OperationMetadata) -> tuple[tuple[SecurityHeader, str], ...]:
    """Variable names for operation-level security headers.

    Names are allocated after all parameter names so they never collide.
    """
    taken = {param.var_name for param in metadata.parameter_groups.all}
    return tuple(
        (header, allocate_variable_name(header.header_name, _SECURITY_LOCATION, taken))
        for header in metadata.security_headers
    )


def _destructure_entry(name: str, var_name: str) -> str:
    if name == var_name and is_identifier(name):
        return name
    return f"{ts_property_key(name)}: {var_name}"


def _object_pattern(entries: list[str]) -> str:
    return "{ " + ", ".join(entries) + " }"


def body_type(metadata: OperationMetadata) -> str:
    """TypeScript type of the ``body`` argument."""
    body = metadata.body_info
    if body is None:
        return UNTYPED_BODY
    if metadata.has_request_content_type_generic:
        return f"{metadata.request_map_name}[TRequestContentType]"
    return body.type_name or UNTYPED_BODY


def _parameter_sections(metadata: OperationMetadata) -> list[_Section]:
    groups = metadata.parameter_groups
    schema_types = {schema.location: schema.type_name for schema in metadata.parameter_schemas}
    sections: list[_Section] = []

    if groups.path:
        entries = [_destructure_entry(param.name, param.var_name) for param in groups.path]
        sections.append(_Section(f"path: {_object_pattern(entries)}", f"path: {schema_types['path']}", optional=False))

    if groups.query:
        entries = [_destructure_entry(param.name, param.var_name) for param in groups.query]
        optional = not any(param.required for param in groups.query)
        sections.append(
            _Section(
                f"query: {_object_pattern(entries)}" + (" = {}" if optional else ""),
                f"query{'?' if optional else ''}: {schema_types['query']}",
                optional=optional,
            )
        )

    security = security_header_variables(metadata)
    if groups.header or security:
        entries = [_destructure_entry(param.name, param.var_name) for param in groups.header]
        entries.extend(f"{ts_property_key(header.header_name)}: {var_name}" for header, var_name in security)
        type_parts = [schema_types["header"]] if groups.header else []
        if security:
            security_fields = "; ".join(
                f"{ts_property_key(header.header_name)}{'' if header.is_required else '?'}: string"
                for header, _ in security
            )
            type_parts.append(f"{{ {security_fields} }}")
        optional = not any(param.required for param in groups.header) and not any(
            header.is_required for header, _ in security
        )
        sections.append(
            _Section(
                f"headers: {_object_pattern(entries)}" + (" = {}" if optional else ""),
                f"headers{'?' if optional else ''}: {' & '.join(type_parts)}",
                optional=optional,
            )
        )

    if metadata.body_info is not None:
        optional = not metadata.body_info.is_required
        sections.append(_Section("body", f"body{'?' if optional else ''}: {body_type(metadata)}", optional=optional))

    if metadata.has_content_type_option:
        fields = []
        if metadata.has_request_content_type_generic:
            fields.append("request?: TRequestContentType")
        if metadata.has_response_content_type_generic:
            fields.append("response?: TResponseContentType")
        sections.append(_Section("contentType = {}", f"contentType?: {{ {'; '.join(fields)} }}", optional=True))

    return sections


def build_parameter_declaration(metadata: OperationMetadata) -> str:
    """Render the destructured parameter object of the function signature.

    Operations without any input get ``{}: {} = {}`` so they stay callable
    with no arguments; the whole object defaults to ``{}`` whenever every
    section is optional.
    """
    sections = _parameter_sections(metadata)
    if not sections:
        return EMPTY_PARAMETER_DECLARATION

    patterns = "\n".join(f"  {section.pattern}," for section in sections)
    declarations = "\n".join(f"  {section.declaration};" for section in sections)
    declaration = f"{{\n{patterns}\n}}: {{\n{declarations}\n}}"
    if all(section.optional for section in sections):
        declaration = f"{declaration} = {{}}"
    return declaration


def build_generic_params(metadata: OperationMetadata) -> str:
    """Render content-type selection generics, or an empty string.

    Generics only appear when the corresponding map holds more than one
    mapping; a collapsed map never produces a type parameter.
    """
    params: list[str] = []
    if metadata.has_request_content_type_generic and metadata.body_info is not None:
        default = ts_string_literal(metadata.body_info.content_type)
        params.append(f"TRequestContentType extends keyof {metadata.request_map_name} = {default}")
    default_response = metadata.response_analysis.default_response_content_type
    if metadata.has_response_content_type_generic and default_response is not None:
        default = ts_string_literal(default_response)
        params.append(f"TResponseContentType extends {metadata.response_content_type_name} = {default}")
    return f"<{', '.join(params)}>" if params else ""


def _map_declaration(name: str, entries: list[str]) -> str:
    return f"export type {name} = {{\n" + "\n".join(entries) + "\n};"


def build_type_aliases(metadata: OperationMetadata) -> tuple[str, ...]:
    """Render parameter schemas, content-type maps and the response union alias."""
    aliases: list[str] = [
        f"export const {schema.schema_name} = {schema.code};\n"
        f"export type {schema.type_name} = z.infer<typeof {schema.schema_name}>;"
        for schema in metadata.parameter_schemas
    ]

    body = metadata.body_info
    if body is not None and body.request_map is not None:
        entries = [f"  {ts_string_literal(content_type)}: {type_name};" for content_type, type_name in body.request_map]
        aliases.append(_map_declaration(metadata.request_map_name, entries))

    analysis = metadata.response_analysis
    if analysis.response_map is not None:
        entries = []
        for status_code, mapping in analysis.response_map:
            entries.append(f"  {status_code}: {{")
            entries.extend(f"    {ts_string_literal(content_type)}: {type_name};" for content_type, type_name in mapping)
            entries.append("  };")
        aliases.append(_map_declaration(metadata.response_map_name, entries))

    if metadata.has_response_content_type_generic:
        members = " | ".join(ts_string_literal(ct) for ct in analysis.response_content_types)
        aliases.append(f"export type {metadata.response_content_type_name} = {members};")

    if len(analysis.union_members) == 1:
        aliases.append(f"export type {metadata.response_type_name} = {analysis.union_members[0]};")
    else:
        members = "\n".join(f"  | {member}" for member in analysis.union_members)
        aliases.append(f"export type {metadata.response_type_name} =\n{members};")

    return tuple(aliases)


def build_summary_comment(metadata: OperationMetadata) -> str:
    lines: list[str] = []
    if metadata.summary:
        lines.append(metadata.summary.strip())
    if metadata.description and metadata.description.strip() != (metadata.summary or "").strip():
        if lines:
            lines.append("")
        lines.append(metadata.description.strip())
    if metadata.deprecated:
        lines.append("@deprecated")
    return ts_doc_comment("\n".join(lines))


def _response_case(info: ResponseInfo, metadata: OperationMetadata) -> ResponseCase:
    strategy = info.parsing_strategy
    if not info.has_content:
        kind = "empty"
    elif not info.has_schema:
        kind = "untyped"
    elif metadata.options.unknown_response_mode:
        kind = "lazy_parse_runtime_check" if strategy.requires_runtime_content_type_check else "lazy_parse"
    elif strategy.requires_runtime_content_type_check:
        kind = "runtime_check"
    elif strategy.use_validation:
        kind = "validated"
    else:
        kind = "cast"
    return ResponseCase(
        status_code=info.status_code,
        kind=kind,
        type_name=info.type_name,
        validate=strategy.use_validation,
    )


def build_response_handlers(metadata: OperationMetadata) -> tuple[ResponseCase, ...]:
    """Decide the handling of every declared status code, in ascending order."""
    return tuple(_response_case(info, metadata) for info in metadata.response_analysis.responses)


def build_request_body_cases(metadata: OperationMetadata) -> tuple[RequestBodyCase, ...]:
    """Serialization branches for the request body.

    A single case is returned unless the request content type is selectable
    at call time, in which case there is one case per declared content type.
    """
    body = metadata.body_info
    if body is None:
        return ()
    content_types = body.content_types if metadata.has_request_content_type_generic else (body.content_type,)
    return tuple(RequestBodyCase(content_type, body_serialization_kind(content_type)) for content_type in content_types)


def build_function_body(metadata: OperationMetadata, env: Environment | None = None) -> str:
    """Render the statements of the generated function."""
    env = env or default_environment()
    path_variables = {param.name: param.var_name for param in metadata.parameter_groups.path}
    excluded = metadata.auth_headers if metadata.overrides_security else ()
    context = {
        "metadata": metadata,
        "http_method": metadata.method.upper(),
        "excluded_auth_headers": excluded,
        "header_params": metadata.parameter_groups.header,
        "security_variables": security_header_variables(metadata),
        "accept_header": metadata.has_response_content_type_generic,
        "url_literal": ts_template_literal_path(metadata.path, path_variables),
        "query_params": metadata.parameter_groups.query,
        "body_cases": build_request_body_cases(metadata),
        "dynamic_body": metadata.has_request_content_type_generic,
        "response_cases": build_response_handlers(metadata),
    }
    return env.get_template(_BODY_TEMPLATE).render(**context)


def collect_config_imports(metadata: OperationMetadata) -> tuple[ConfigImport, ...]:
    """Names the operation needs from the generated config module, sorted."""
    cases = build_response_handlers(metadata)
    names: dict[str, bool] = {
        "GlobalConfig": True,
        "globalConfig": False,
        "UnexpectedResponseError": False,
        "parseResponseBody": False,
    }
    members = metadata.response_analysis.union_members
    if any(member.startswith("ApiResponse<") for member in members):
        names["ApiResponse"] = True
    if any(member.startswith("ApiResponseWithParse<") for member in members):
        names["ApiResponseWithParse"] = True
    if any(case.validate for case in cases if case.kind in {"validated", "runtime_check"}):
        names["ResponseValidationError"] = False
    if any(case.kind == "lazy_parse_runtime_check" or (case.kind == "runtime_check" and case.validate) for case in cases):
        names["getResponseContentType"] = False
        names["isJsonLikeContentType"] = False
    return tuple(ConfigImport(name, is_type) for name, is_type in sorted(names.items(), key=lambda item: item[0].lower()))


def render_operation_function(metadata: OperationMetadata, env: Environment | None = None) -> OperationFragment:
    """Compose all renderers into the fragment of one operation."""
    return OperationFragment(
        function_name=metadata.function_name,
        signature=FunctionSignature(
            name=metadata.function_name,
            generic_params=build_generic_params(metadata),
            parameter_declaration=build_parameter_declaration(metadata),
            return_type=metadata.response_type_name,
        ),
        body=build_function_body(metadata, env),
        type_declarations=build_type_aliases(metadata),
        summary_comment=build_summary_comment(metadata),
        type_imports=tuple(sorted(metadata.type_imports)),
        config_imports=collect_config_imports(metadata),
        uses_zod=bool(metadata.parameter_schemas),
    )
