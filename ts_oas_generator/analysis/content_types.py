"""
Content-type analysis for request bodies and responses.

Selection of the primary content type follows a fixed priority list so the
same document always yields the same default, regardless of the order in
which media types are declared.
"""

from __future__ import annotations

from typing import Any

from ts_oas_generator.analysis.models import ContentTypeAnalysis
from ts_oas_generator.constants import (
    DEFAULT_REQUEST_CONTENT_TYPE,
    JSON_SUFFIX,
    REQUEST_CONTENT_TYPE_PRIORITY,
    RESPONSE_JSON_PRIORITY,
)


def is_json_like(content_type: str | None) -> bool:
    """Check whether a media type carries JSON.

    Examples:
        >>> is_json_like("application/vnd.api+json")
        True
        >>> is_json_like("text/plain")
        False
    """
    if not content_type:
        return False
    lowered = content_type.lower()
    return "json" in lowered or lowered.endswith(JSON_SUFFIX)


def declared_content_types(body_or_response: dict[str, Any] | None) -> tuple[str, ...]:
    """Media types declared under ``content``, in declaration order."""
    if not body_or_response:
        return ()
    content = body_or_response.get("content") or {}
    return tuple(content)


def analyze_content_types(body_or_response: dict[str, Any] | None) -> ContentTypeAnalysis:
    """Summarize the media types of a request body or response object."""
    all_types = declared_content_types(body_or_response)
    return ContentTypeAnalysis(
        all_types=all_types,
        has_json_like=any(is_json_like(ct) for ct in all_types),
        has_non_json=any(not is_json_like(ct) for ct in all_types),
    )


def select_request_content_type(content_types: tuple[str, ...] | list[str]) -> str:
    """Pick the content type a request body is sent with by default.

    Falls back to ``application/json`` when nothing is declared.
    """
    for preferred in REQUEST_CONTENT_TYPE_PRIORITY:
        if preferred in content_types:
            return preferred
    return content_types[0] if content_types else DEFAULT_REQUEST_CONTENT_TYPE


def select_response_content_type(content_types: tuple[str, ...] | list[str]) -> str | None:
    """Pick the content type a response is read as, or ``None`` without content."""
    for preferred in RESPONSE_JSON_PRIORITY:
        if preferred in content_types:
            return preferred
    for content_type in content_types:
        if content_type.lower().endswith(JSON_SUFFIX):
            return content_type
    return content_types[0] if content_types else None


def body_serialization_kind(content_type: str) -> str:
    """Classify how a request body is serialized for a content type.

    Returns one of ``json``, ``form``, ``multipart``, ``text``, ``binary`` or
    ``other``.
    """
    lowered = content_type.lower()
    if is_json_like(lowered):
        return "json"
    match lowered:
        case "application/x-www-form-urlencoded":
            return "form"
        case "multipart/form-data":
            return "multipart"
        case "text/plain" | "application/xml" | "text/xml":
            return "text"
        case "application/octet-stream":
            return "binary"
        case _:
            return "other"
