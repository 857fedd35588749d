"""
String case conversion utilities for TypeScript code generation.

This module provides the case conversions used when naming generated
functions, types and variables, together with TypeScript identifier
sanitization and reserved word handling.

Based on https://github.com/okunishinishi/python-stringcase
with additional TypeScript-specific naming conventions.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from typing import Final

from ts_oas_generator.errors import InvalidIdentifierError

# Regex patterns for case conversion
_INVALID_IDENTIFIER_CHAR_PATTERN: Final = re.compile(r"[^a-zA-Z0-9_$]")
_IDENTIFIER_SEPARATOR_PATTERN: Final = re.compile(r"[-_]+")
_NON_ALPHANUMERIC_RUN_PATTERN: Final = re.compile(r"[^a-zA-Z0-9]+")
_UNDERSCORE_LETTER_PATTERN: Final = re.compile(r"_([a-zA-Z0-9])")
_IDENTIFIER_PATTERN: Final = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

# Names that cannot be used as exported TypeScript identifiers (compared lowercase)
TS_RESERVED_WORDS: Final = frozenset(
    {
        # ECMAScript keywords
        "break",
        "case",
        "catch",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "else",
        "enum",
        "export",
        "extends",
        "false",
        "finally",
        "for",
        "function",
        "if",
        "import",
        "in",
        "instanceof",
        "new",
        "null",
        "return",
        "super",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "typeof",
        "var",
        "void",
        "while",
        "with",
        # Strict mode and contextual keywords
        "await",
        "implements",
        "interface",
        "let",
        "package",
        "private",
        "protected",
        "public",
        "static",
        "yield",
        "async",
        # TypeScript type keywords
        "any",
        "boolean",
        "number",
        "string",
        "symbol",
        "bigint",
        "object",
        "never",
        "unknown",
        "undefined",
        "type",
        "namespace",
        "declare",
        "module",
    }
)


def _convert_if_not_empty(string: str | None, conversion_func: Callable[[str], str]) -> str:
    """Safely convert a string, returning empty string if input is None or empty."""
    return conversion_func(string) if string else ""


def capitalcase(string: str | None) -> str:
    """Convert string into capital case (first letter uppercase).

    Examples:
        >>> capitalcase("getUser")
        'GetUser'
    """

    def _capitalcase(s: str) -> str:
        return s[0].upper() + s[1:]

    return _convert_if_not_empty(string, _capitalcase)


def to_valid_variable_name(string: str | None) -> str:
    """Turn an arbitrary parameter name into a camelCase variable name.

    Runs of characters outside ``[A-Za-z0-9]`` become a single word break.

    Examples:
        >>> to_valid_variable_name("X-Api-Key")
        'XApiKey'
        >>> to_valid_variable_name("page[size]")
        'pageSize'
    """

    def _convert(s: str) -> str:
        joined = _NON_ALPHANUMERIC_RUN_PATTERN.sub("_", s).strip("_")
        return _UNDERSCORE_LETTER_PATTERN.sub(lambda m: m.group(1).upper(), joined)

    return _convert_if_not_empty(string, _convert)


def is_reserved_word(name: str) -> bool:
    """Check if a name is a TypeScript reserved word (case-insensitive)."""
    return name.lower() in TS_RESERVED_WORDS


def sanitize_identifier(name: str) -> str:
    """Convert a name into a valid TypeScript identifier.

    Characters outside ``[A-Za-z0-9_$]`` become separators, separator-delimited
    parts are camel-joined with the first part kept as is, a leading digit gets
    an ``_`` prefix and reserved words get a ``Schema`` suffix.

    Args:
        name: The raw name, e.g. an ``operationId`` or component schema key.

    Returns:
        A valid TypeScript identifier.

    Raises:
        InvalidIdentifierError: If nothing usable remains after sanitization.

    Examples:
        >>> sanitize_identifier("discount-per-redemption")
        'discountPerRedemption'
        >>> sanitize_identifier("1-api-key")
        '_1ApiKey'
        >>> sanitize_identifier("in")
        'inSchema'
    """
    trimmed = name.strip() if name else ""
    if not trimmed:
        msg = "Cannot sanitize empty or whitespace-only string to identifier"
        raise InvalidIdentifierError(msg)

    replaced = _INVALID_IDENTIFIER_CHAR_PATTERN.sub("_", trimmed)
    parts = [part for part in _IDENTIFIER_SEPARATOR_PATTERN.split(replaced) if part]
    if not parts:
        msg = f"Cannot sanitize string '{name}' to identifier - no valid parts remaining"
        raise InvalidIdentifierError(msg)

    identifier = parts[0] + "".join(capitalcase(part) for part in parts[1:])

    if identifier[0].isdigit():
        identifier = f"_{identifier}"

    if is_reserved_word(identifier):
        identifier = f"{identifier}Schema"

    return identifier


def is_identifier(name: str) -> bool:
    """Check if a name can be used unquoted as a TypeScript identifier or key."""
    return bool(_IDENTIFIER_PATTERN.match(name))


def ts_property_key(name: str) -> str:
    """Quote an object key unless it is a plain identifier.

    Examples:
        >>> ts_property_key("userId")
        'userId'
        >>> ts_property_key("X-Request-Id")
        '"X-Request-Id"'
    """
    return name if is_identifier(name) else json.dumps(name)
