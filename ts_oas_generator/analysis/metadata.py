"""
Operation metadata assembly.

Runs the analyzers for one operation in a fixed order (parameters, request
body and content-type maps, responses, security) and freezes the results into
an :class:`OperationMetadata` record. Failures are re-raised as
:class:`OperationGenerationError` naming the operation, so callers can report
or skip it without inspecting partial results.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Final

from ts_oas_generator.analysis.models import (
    CompiledSchema,
    OperationMetadata,
    ParameterGroups,
    ParameterSchema,
    SchemaCompiler,
)
from ts_oas_generator.analysis.parameters import extract_parameter_groups
from ts_oas_generator.analysis.request_body import analyze_request_body
from ts_oas_generator.analysis.responses import analyze_responses
from ts_oas_generator.analysis.security import (
    extract_auth_headers,
    get_operation_security_schemes,
    has_security_override,
)
from ts_oas_generator.config import DEFAULT_OPTIONS, GeneratorOptions
from ts_oas_generator.errors import GeneratorError, MissingOperationIdError, OperationGenerationError
from ts_oas_generator.utils.string_case import capitalcase, sanitize_identifier

logger = logging.getLogger(__name__)

_PARAMETER_SCHEMA_SUFFIXES: Final = (("path", "Path"), ("query", "Query"), ("header", "Headers"))
_UNTYPED_PARAMETER: Final = CompiledSchema(code="z.string()")


def build_parameter_schemas(
    operation_name: str,
    groups: ParameterGroups,
    compiler: SchemaCompiler,
) -> tuple[ParameterSchema, ...]:
    """Compile one zod object schema per non-empty parameter group.

    Parameters without a schema are typed as strings. Optional parameters get
    ``.optional()``; path parameters never do.
    """
    schemas: list[ParameterSchema] = []
    for location, suffix in _PARAMETER_SCHEMA_SUFFIXES:
        params = groups.by_location(location)
        if not params:
            continue

        imports: set[str] = set()
        fields: list[tuple[str, str]] = []
        for param in params:
            compiled = compiler.compile(param.schema) if param.schema is not None else _UNTYPED_PARAMETER
            imports.update(compiled.type_references)
            fields.append((param.name, compiled.code if param.required else f"{compiled.code}.optional()"))

        schemas.append(
            ParameterSchema(
                location=location,
                schema_name=f"{operation_name}{suffix}Schema",
                type_name=f"{operation_name}{suffix}",
                fields=tuple(fields),
                imports=frozenset(imports),
            )
        )
    return tuple(schemas)


def _assemble(
    path: str,
    method: str,
    operation: dict[str, Any],
    document: dict[str, Any],
    path_level_params: Sequence[dict[str, Any]],
    options: GeneratorOptions,
    compiler: SchemaCompiler,
) -> OperationMetadata:
    operation_id = operation.get("operationId")
    if not operation_id:
        msg = "missing operationId"
        raise MissingOperationIdError(msg)

    function_name = sanitize_identifier(operation_id)
    operation_name = capitalcase(function_name)

    groups = extract_parameter_groups(operation.get("parameters"), path_level_params, document)
    parameter_schemas = build_parameter_schemas(operation_name, groups, compiler)

    body = analyze_request_body(operation, document, operation_name, options)

    responses = analyze_responses(operation, document, operation_name, options)

    overrides_security = has_security_override(operation)
    security_headers = tuple(get_operation_security_schemes(operation, document))
    auth_headers = tuple(extract_auth_headers(document))

    type_imports = body.type_imports | responses.type_imports
    for schema in parameter_schemas:
        type_imports |= schema.imports

    return OperationMetadata(
        operation_id=operation_id,
        function_name=function_name,
        operation_name=operation_name,
        method=method.lower(),
        path=path,
        parameter_groups=groups,
        response_analysis=responses,
        body_info=body.body_info,
        summary=operation.get("summary"),
        description=operation.get("description"),
        deprecated=bool(operation.get("deprecated", False)),
        security_headers=security_headers,
        overrides_security=overrides_security,
        auth_headers=auth_headers,
        parameter_schemas=parameter_schemas,
        type_imports=frozenset(type_imports),
        inline_schemas=body.inline_schemas + responses.inline_schemas,
        options=options,
    )


def extract_operation_metadata(
    path: str,
    method: str,
    operation: dict[str, Any],
    document: dict[str, Any],
    *,
    compiler: SchemaCompiler,
    path_level_params: Sequence[dict[str, Any]] = (),
    options: GeneratorOptions = DEFAULT_OPTIONS,
) -> OperationMetadata:
    """Assemble the metadata of one operation.

    Args:
        path: The path template, e.g. ``/users/{userId}``.
        method: The HTTP method.
        operation: The operation object.
        document: The full document. It is never modified.
        compiler: Compiler used for parameter schemas.
        path_level_params: ``parameters`` declared on the path item.
        options: Generation flags.

    Returns:
        The immutable metadata record.

    Raises:
        OperationGenerationError: If any analyzer fails. The original error is
            available as ``cause``.
    """
    try:
        metadata = _assemble(path, method, operation, document, path_level_params, options, compiler)
    except (GeneratorError, ValueError) as exc:
        raise OperationGenerationError(operation.get("operationId"), path, method, exc) from exc

    logger.debug(
        "Assembled %s: %d parameters, %d statuses",
        metadata.function_name,
        len(metadata.parameter_groups.all),
        len(metadata.response_analysis.responses),
    )
    return metadata
