"""Request body analysis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ts_oas_generator.analysis.content_types import declared_content_types, select_request_content_type
from ts_oas_generator.analysis.models import InlineSchemaRegistration, RequestBodyInfo, TypeResolution
from ts_oas_generator.analysis.references import resolve_type_name
from ts_oas_generator.config import DEFAULT_OPTIONS, GeneratorOptions
from ts_oas_generator.parser.oas_parser import resolve_reference
from ts_oas_generator.parser.schema_node import schema_node_from

_REQUEST_CONTEXT = "Request"
_REQUEST_LABEL = "requestBody"
_UNTYPED = "unknown"


@dataclass(frozen=True)
class RequestBodyAnalysis:
    body_info: RequestBodyInfo | None = None
    type_imports: frozenset[str] = frozenset()
    inline_schemas: tuple[InlineSchemaRegistration, ...] = ()


def _resolve_request_body(operation: dict[str, Any], document: dict[str, Any]) -> dict[str, Any] | None:
    request_body = operation.get("requestBody")
    while isinstance(request_body, dict) and isinstance(request_body.get("$ref"), str):
        request_body = resolve_reference(document, request_body["$ref"])
    return request_body if isinstance(request_body, dict) else None


def analyze_request_body(
    operation: dict[str, Any],
    document: dict[str, Any],
    operation_name: str,
    options: GeneratorOptions = DEFAULT_OPTIONS,
) -> RequestBodyAnalysis:
    """Resolve the request body type and, when needed, the request content-type map.

    Every inline body schema is named ``{OperationName}Request``. When several
    content types declare inline schemas only the schema of the selected
    content type (or the first inline one) is registered for generation.

    Raises:
        UnsupportedReferenceError: If a body schema references anything other
            than a component schema.
        MissingReferenceError: If a ``$ref`` to the body itself does not resolve.
    """
    request_body = _resolve_request_body(operation, document)
    if request_body is None:
        return RequestBodyAnalysis()

    content = request_body.get("content") or {}
    content_types = declared_content_types(request_body)
    selected = select_request_content_type(content_types)

    resolutions: dict[str, TypeResolution] = {}
    for content_type in content_types:
        node = schema_node_from((content.get(content_type) or {}).get("schema"))
        if node is not None:
            resolutions[content_type] = resolve_type_name(node, operation_name, _REQUEST_CONTEXT, _REQUEST_LABEL)

    build_map = options.generate_content_type_maps and len(content_types) > 1
    request_map = None
    if build_map:
        request_map = tuple(
            (content_type, resolutions[content_type].type_name if content_type in resolutions else _UNTYPED)
            for content_type in content_types
        )
        used = list(resolutions.values())
    else:
        used = [resolutions[selected]] if selected in resolutions else []

    imports: frozenset[str] = frozenset().union(*(resolution.imports for resolution in used))

    inline_candidates = [resolution for resolution in used if resolution.inline_schemas]
    inline_schemas: tuple[InlineSchemaRegistration, ...] = ()
    if inline_candidates:
        winner = resolutions.get(selected)
        chosen = winner if winner is not None and winner.inline_schemas else inline_candidates[0]
        inline_schemas = chosen.inline_schemas

    selected_resolution = resolutions.get(selected)
    body_info = RequestBodyInfo(
        type_name=selected_resolution.type_name if selected_resolution else None,
        is_required=bool(request_body.get("required", False)),
        content_type=selected,
        content_types=content_types,
        request_map=request_map,
    )
    return RequestBodyAnalysis(body_info=body_info, type_imports=imports, inline_schemas=inline_schemas)
