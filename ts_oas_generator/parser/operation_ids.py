"""Synthesis of missing ``operationId`` values.

Operations without an ``operationId`` are named from their HTTP method and
path segments, e.g. ``GET /users/{userId}/pets`` becomes ``getUsersUserIdPets``.
Explicit ids are never changed; generated ids that would clash with an id
already taken get a numeric suffix starting at 2.
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Any, Final

from ts_oas_generator.constants import HTTP_METHODS
from ts_oas_generator.utils.string_case import capitalcase, sanitize_identifier

logger = logging.getLogger(__name__)

_SEGMENT_WORD_SEPARATOR: Final = re.compile(r"[-_]")
_NON_ALPHANUMERIC: Final = re.compile(r"[^a-zA-Z0-9]")


def _segment_to_pascal(segment: str) -> str:
    if segment.startswith("{") and segment.endswith("}"):
        segment = segment[1:-1]
    words = (_NON_ALPHANUMERIC.sub("", word) for word in _SEGMENT_WORD_SEPARATOR.split(segment))
    return "".join(capitalcase(word) for word in words if word)


def generate_operation_id(method: str, path: str) -> str:
    """Build an operation id from an HTTP method and a path template.

    Examples:
        >>> generate_operation_id("GET", "/users/{userId}")
        'getUsersUserId'
        >>> generate_operation_id("post", "/api-keys")
        'postApiKeys'
        >>> generate_operation_id("get", "/")
        'get'
    """
    normalized_method = method.lower()
    segments = "".join(_segment_to_pascal(segment) for segment in path.split("/") if segment)
    return sanitize_identifier(normalized_method + segments)


def _iter_operations(document: dict[str, Any]):  # noqa: ANN202
    for path, path_item in (document.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        for method, operation in path_item.items():
            if method.lower() in HTTP_METHODS and isinstance(operation, dict):
                yield path, method, operation


def apply_generated_operation_ids(document: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of the document with every missing ``operationId`` filled.

    Args:
        document: The OpenAPI document. It is not modified.

    Returns:
        A deep copy in which each operation has an ``operationId``.
    """
    result = copy.deepcopy(document)
    taken = {op["operationId"] for _, _, op in _iter_operations(result) if op.get("operationId")}

    for path, method, operation in _iter_operations(result):
        if operation.get("operationId"):
            continue
        base_id = generate_operation_id(method, path)
        operation_id = base_id
        suffix = 2
        while operation_id in taken:
            operation_id = f"{base_id}{suffix}"
            suffix += 1
        taken.add(operation_id)
        operation["operationId"] = operation_id
        logger.debug("Generated operationId %s for %s %s", operation_id, method.upper(), path)

    return result
