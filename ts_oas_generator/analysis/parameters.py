"""
Parameter grouping.

Path-level and operation-level parameter declarations are merged into one
ordered map keyed by ``(name, in)``, then stably partitioned into path, query
and header groups. Cookie parameters are not part of generated signatures and
are dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any, Final

from ts_oas_generator.analysis.models import Parameter, ParameterGroups
from ts_oas_generator.constants import PARAMETER_LOCATIONS, RESERVED_VARIABLE_NAMES
from ts_oas_generator.errors import MissingReferenceError
from ts_oas_generator.parser.oas_parser import resolve_reference
from ts_oas_generator.parser.schema_node import InlineSchema, SchemaNode, SchemaRef, schema_node_from
from ts_oas_generator.utils.string_case import capitalcase, is_reserved_word, to_valid_variable_name

logger = logging.getLogger(__name__)

_MAX_REF_DEPTH: Final = 32
_FALLBACK_VARIABLE_NAME: Final = "param"


def resolve_parameter(param: dict[str, Any], document: dict[str, Any]) -> dict[str, Any]:
    """Follow ``$ref`` chains until a parameter object is reached.

    Raises:
        MissingReferenceError: If a reference does not resolve to an object.
    """
    resolved = param
    for _ in range(_MAX_REF_DEPTH):
        ref = resolved.get("$ref") if isinstance(resolved, dict) else None
        if not isinstance(ref, str):
            return resolved
        resolved = resolve_reference(document, ref)
        if not isinstance(resolved, dict):
            raise MissingReferenceError(ref)
    msg = f"Reference chain too deep starting at {param.get('$ref')!r}"
    raise ValueError(msg)


def merge_parameters(
    operation_params: Iterable[dict[str, Any]],
    path_level_params: Iterable[dict[str, Any]],
    document: dict[str, Any],
) -> list[dict[str, Any]]:
    """Merge declarations so operation-level entries override path-level ones.

    A parameter overridden by a later declaration keeps the position of its
    first declaration.
    """
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for raw in (*path_level_params, *operation_params):
        param = resolve_parameter(raw, document)
        name = param.get("name")
        location = param.get("in")
        if not name or not location:
            logger.debug("Skipping parameter without name or location: %r", raw)
            continue
        merged[(name, location)] = param
    return list(merged.values())


def allocate_variable_name(name: str, location: str, taken: set[str]) -> str:
    """Return a variable name for ``name`` that is not yet in ``taken`` and record it.

    Examples:
        >>> allocate_variable_name("X-Request-Id", "header", set())
        'XRequestId'
        >>> allocate_variable_name("body", "query", set())
        'bodyQuery'
    """
    base = to_valid_variable_name(name) or _FALLBACK_VARIABLE_NAME
    if base[0].isdigit():
        base = f"_{base}"

    def _is_free(candidate: str) -> bool:
        return candidate not in taken and candidate not in RESERVED_VARIABLE_NAMES and not is_reserved_word(candidate)

    candidate = base
    if not _is_free(candidate):
        suffixed = f"{base}{capitalcase(location)}"
        candidate = suffixed
        counter = 2
        while not _is_free(candidate):
            candidate = f"{suffixed}{counter}"
            counter += 1

    taken.add(candidate)
    return candidate


def _is_array_schema(node: SchemaNode | None, document: dict[str, Any]) -> bool:
    match node:
        case InlineSchema(schema=schema):
            schema_type = schema.get("type")
            return schema_type == "array" or (isinstance(schema_type, list) and "array" in schema_type)
        case SchemaRef(ref=ref):
            target = resolve_reference(document, ref)
            return isinstance(target, dict) and _is_array_schema(schema_node_from(target), document)
    return False


def extract_parameter_groups(
    operation_params: Sequence[dict[str, Any]] | None,
    path_level_params: Sequence[dict[str, Any]] | None,
    document: dict[str, Any],
) -> ParameterGroups:
    """Merge and partition the parameters of one operation.

    Args:
        operation_params: ``parameters`` of the operation object.
        path_level_params: ``parameters`` of the enclosing path item.
        document: The full document, used to resolve ``$ref`` entries.

    Returns:
        The path, query and header groups. Path parameters are always marked
        required.

    Raises:
        MissingReferenceError: If a parameter reference does not resolve.
    """
    merged = merge_parameters(operation_params or (), path_level_params or (), document)
    taken: set[str] = set()
    grouped: dict[str, list[Parameter]] = {location: [] for location in PARAMETER_LOCATIONS}

    for param in merged:
        location = param["in"]
        if location not in grouped:
            logger.debug("Ignoring %s parameter %s", location, param["name"])
            continue
        schema = schema_node_from(param.get("schema"))
        grouped[location].append(
            Parameter(
                name=param["name"],
                location=location,
                required=location == "path" or bool(param.get("required", False)),
                var_name=allocate_variable_name(param["name"], location, taken),
                schema=schema,
                description=param.get("description"),
                is_array=_is_array_schema(schema, document),
            )
        )

    return ParameterGroups(
        path=tuple(grouped["path"]),
        query=tuple(grouped["query"]),
        header=tuple(grouped["header"]),
    )
