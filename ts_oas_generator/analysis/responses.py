"""
Response structure analysis.

Responses are processed as a fold over status codes in ascending numeric
order. The ``default`` response and wildcard keys such as ``2XX`` are not
discriminable by status and are left out of the union; unexpected statuses
are reported by the generated default branch instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ts_oas_generator.analysis.content_types import (
    analyze_content_types,
    is_json_like,
    select_response_content_type,
)
from ts_oas_generator.analysis.models import (
    InlineSchemaRegistration,
    ParsingStrategy,
    ResponseAnalysis,
    ResponseInfo,
    TypeResolution,
)
from ts_oas_generator.analysis.references import resolve_type_name
from ts_oas_generator.config import DEFAULT_OPTIONS, GeneratorOptions
from ts_oas_generator.parser.oas_parser import resolve_reference
from ts_oas_generator.parser.schema_node import schema_node_from

logger = logging.getLogger(__name__)

FALLBACK_UNION_MEMBER = "ApiResponse<number, unknown>"


@dataclass(frozen=True)
class _StatusResolution:
    status_code: str
    response: dict[str, Any]
    primary_content_type: str | None
    resolutions: dict[str, TypeResolution]


def sorted_status_codes(responses: dict[Any, Any] | None) -> list[str]:
    """Numeric status keys as strings, ascending.

    Examples:
        >>> sorted_status_codes({"404": {}, "200": {}, "default": {}, "500": {}})
        ['200', '404', '500']
        >>> sorted_status_codes({"100": {}, "99": {}})
        ['99', '100']
    """
    return sorted((str(code) for code in responses or {} if str(code).isdigit()), key=int)


def _lookup_response(responses: dict[Any, Any], status_code: str) -> Any:  # noqa: ANN401
    # YAML loaders turn unquoted status keys into integers
    if status_code in responses:
        return responses[status_code]
    return responses.get(int(status_code))


def _resolve_response(response: Any, document: dict[str, Any]) -> dict[str, Any]:  # noqa: ANN401
    while isinstance(response, dict) and isinstance(response.get("$ref"), str):
        response = resolve_reference(document, response["$ref"])
    return response if isinstance(response, dict) else {}


def _resolve_status(
    status_code: str,
    response: dict[str, Any],
    operation_name: str,
) -> _StatusResolution:
    content = response.get("content") or {}
    resolutions: dict[str, TypeResolution] = {}
    for content_type, media in content.items():
        node = schema_node_from((media or {}).get("schema"))
        if node is not None:
            resolutions[content_type] = resolve_type_name(
                node,
                operation_name,
                f"{status_code}Response",
                f"response {status_code}",
            )
    return _StatusResolution(
        status_code=status_code,
        response=response,
        primary_content_type=select_response_content_type(tuple(content)),
        resolutions=resolutions,
    )


def union_member(info: ResponseInfo, options: GeneratorOptions = DEFAULT_OPTIONS) -> str:
    """Render the union member for one status, e.g. ``ApiResponse<200, User>``."""
    if options.unknown_response_mode and info.has_schema:
        return f"ApiResponseWithParse<{info.status_code}, {info.type_name}>"
    return f"ApiResponse<{info.status_code}, {info.data_type}>"


def analyze_responses(
    operation: dict[str, Any],
    document: dict[str, Any],
    operation_name: str,
    options: GeneratorOptions = DEFAULT_OPTIONS,
) -> ResponseAnalysis:
    """Build the status-ordered response structure of an operation.

    Args:
        operation: The operation object.
        document: The full document, used for ``$ref`` resolution.
        operation_name: PascalCase operation name seeding inline type names.
        options: Generation flags.

    Returns:
        The response analysis. Union members are never deduplicated.

    Raises:
        UnsupportedReferenceError: If a response schema references anything
            other than a component schema.
    """
    responses = operation.get("responses") or {}
    statuses = [
        _resolve_status(code, _resolve_response(_lookup_response(responses, code), document), operation_name)
        for code in sorted_status_codes(responses)
    ]

    pairs = [
        (status.status_code, content_type, resolution.type_name)
        for status in statuses
        for content_type, resolution in status.resolutions.items()
    ]
    build_map = options.generate_content_type_maps and len(pairs) > 1

    infos: list[ResponseInfo] = []
    imports: set[str] = set()
    inline_schemas: list[InlineSchemaRegistration] = []
    response_content_types: list[str] = []

    for status in statuses:
        analysis = analyze_content_types(status.response)
        primary = status.primary_content_type
        primary_resolution = status.resolutions.get(primary) if primary else None
        has_schema = primary_resolution is not None
        json_like = is_json_like(primary)

        used = list(status.resolutions.values()) if build_map else [primary_resolution] if has_schema else []
        for resolution in used:
            imports.update(resolution.imports)

        inline = [resolution for resolution in used if resolution.inline_schemas]
        if inline:
            chosen = primary_resolution if primary_resolution and primary_resolution.inline_schemas else inline[0]
            inline_schemas.extend(chosen.inline_schemas)

        for content_type in analysis.all_types:
            if content_type not in response_content_types:
                response_content_types.append(content_type)

        infos.append(
            ResponseInfo(
                status_code=status.status_code,
                content_type=primary,
                type_name=primary_resolution.type_name if primary_resolution else None,
                has_schema=has_schema,
                parsing_strategy=ParsingStrategy(
                    is_json_like=json_like,
                    use_validation=has_schema and (json_like or options.force_validation),
                    requires_runtime_content_type_check=analysis.has_mixed and build_map,
                ),
                content_types=analysis.all_types,
                description=status.response.get("description"),
            )
        )

    response_map = None
    if build_map:
        response_map = tuple(
            (
                status.status_code,
                tuple((content_type, resolution.type_name) for content_type, resolution in status.resolutions.items()),
            )
            for status in statuses
            if status.resolutions
        )

    members = tuple(union_member(info, options) for info in infos) or (FALLBACK_UNION_MEMBER,)
    if not infos:
        logger.debug("Operation %s declares no numeric status codes", operation_name)

    return ResponseAnalysis(
        responses=tuple(infos),
        response_map=response_map,
        response_content_types=tuple(response_content_types),
        default_response_content_type=select_response_content_type(tuple(response_content_types)),
        union_members=members,
        type_imports=frozenset(imports),
        inline_schemas=tuple(inline_schemas),
    )
