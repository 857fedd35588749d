"""
Jinja2 filters for TypeScript code generation.

This module provides the custom filters used by the templates to emit
TypeScript literals, property keys and JSDoc comments.
"""

from __future__ import annotations

import json
import re
from typing import Any, Final

from ts_oas_generator.utils.string_case import ts_property_key

_DOC_OPEN: Final = "/**"
_DOC_LINE_PREFIX: Final = " * "
_DOC_CLOSE: Final = " */"


def ts_string_literal(text: str) -> str:
    """Format text as a double-quoted TypeScript string literal.

    Example:
        >>> ts_string_literal('say "hi"')
        '"say \\\\"hi\\\\""'
    """
    return json.dumps(text)


def ts_literal(value: Any) -> str:  # noqa: ANN401
    """Format a JSON value as a TypeScript literal."""
    return json.dumps(value)


def ts_doc_comment(text: str | None, indent: int = 0) -> str:
    """Convert text to a JSDoc block.

    Args:
        text: The text to convert, possibly spanning several lines.
        indent: Number of spaces for base indentation.

    Returns:
        The formatted comment, or an empty string for empty text.

    Example:
        >>> print(ts_doc_comment("Get a user"))
        /**
         * Get a user
         */
    """
    if not text or not text.strip():
        return ""

    indent_str = " " * indent
    lines = [line.rstrip().replace("*/", "*\\/") for line in text.strip().split("\n")]
    body = [f"{indent_str}{_DOC_LINE_PREFIX}{line}".rstrip() for line in lines]
    return "\n".join([f"{indent_str}{_DOC_OPEN}", *body, f"{indent_str}{_DOC_CLOSE}"])


def indent_block(text: str, width: int = 2, *, first: bool = True) -> str:
    """Indent every non-empty line of a block."""
    pad = " " * width
    lines = text.split("\n")
    return "\n".join(
        f"{pad}{line}" if line and (first or index) else line for index, line in enumerate(lines)
    )


def ts_template_literal_path(path: str, variables: dict[str, str]) -> str:
    """Turn an OpenAPI path template into a TypeScript template literal.

    Path parameters are URI-encoded at call time.

    Example:
        >>> ts_template_literal_path("/users/{id}", {"id": "userId"})
        '`/users/${encodeURIComponent(String(userId))}`'
    """
    parts: list[str] = []
    for index, chunk in enumerate(re.split(r"\{([^}]+)\}", path)):
        if index % 2:
            variable = variables.get(chunk)
            if variable is None:
                parts.append(_escape_template_text("{" + chunk + "}"))
            else:
                parts.append(f"${{encodeURIComponent(String({variable}))}}")
        else:
            parts.append(_escape_template_text(chunk))
    return "`" + "".join(parts) + "`"


def _escape_template_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


# Registry of all filters for easy import
FILTERS: Final = {
    "ts_string_literal": ts_string_literal,
    "ts_literal": ts_literal,
    "ts_property_key": ts_property_key,
    "ts_doc_comment": ts_doc_comment,
    "indent_block": indent_block,
}
