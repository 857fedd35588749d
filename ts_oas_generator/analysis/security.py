"""
Security requirement extraction.

Only schemes that travel in a request header are turned into generated
parameters: ``apiKey`` located in ``header`` (using the declared header name)
and ``http`` with the ``bearer`` scheme (``Authorization``). Basic auth,
OAuth2, OpenID Connect and API keys in query or cookie are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ts_oas_generator.analysis.models import SecurityHeader
from ts_oas_generator.constants import AUTHORIZATION_HEADER


def security_scheme_header(scheme: dict[str, Any] | None) -> str | None:
    """Return the request header a security scheme is sent in, if any.

    Examples:
        >>> security_scheme_header({"type": "apiKey", "in": "header", "name": "X-API-Key"})
        'X-API-Key'
        >>> security_scheme_header({"type": "http", "scheme": "Bearer"})
        'Authorization'
        >>> security_scheme_header({"type": "http", "scheme": "basic"}) is None
        True
    """
    if not scheme:
        return None
    match scheme.get("type"):
        case "apiKey" if scheme.get("in") == "header":
            return scheme.get("name") or None
        case "http" if str(scheme.get("scheme", "")).lower() == "bearer":
            return AUTHORIZATION_HEADER
        case _:
            return None


def _security_schemes(document: dict[str, Any]) -> dict[str, Any]:
    return (document.get("components") or {}).get("securitySchemes") or {}


def _headers_for_requirements(
    requirements: Iterable[dict[str, Any]],
    document: dict[str, Any],
) -> list[tuple[str, str]]:
    """``(scheme name, header name)`` pairs in first-seen order, unique by header."""
    schemes = _security_schemes(document)
    seen: set[str] = set()
    headers: list[tuple[str, str]] = []
    for requirement in requirements:
        for scheme_name in requirement or {}:
            header = security_scheme_header(schemes.get(scheme_name))
            if header and header not in seen:
                seen.add(header)
                headers.append((scheme_name, header))
    return headers


def extract_auth_headers(document: dict[str, Any]) -> list[str]:
    """Header names required by the document-level ``security`` requirements."""
    return [header for _, header in _headers_for_requirements(document.get("security") or [], document)]


def has_security_override(operation: dict[str, Any]) -> bool:
    """Whether the operation declares its own ``security``, including ``[]``."""
    return "security" in operation


def get_operation_security_schemes(operation: dict[str, Any], document: dict[str, Any]) -> list[SecurityHeader]:
    """Headers demanded by an operation-level ``security`` declaration.

    Operations without their own declaration rely on the configured global
    headers and yield nothing here.
    """
    if not has_security_override(operation):
        return []
    return [
        SecurityHeader(scheme_name=scheme_name, header_name=header, is_required=True)
        for scheme_name, header in _headers_for_requirements(operation.get("security") or [], document)
    ]
