"""Exceptions raised while turning an OpenAPI document into TypeScript operations."""

from __future__ import annotations


class GeneratorError(Exception):
    """Base class for every error raised by the generator."""


class UnsupportedDocumentError(GeneratorError):
    """The document is not an OpenAPI 3.x document."""


class InvalidIdentifierError(GeneratorError, ValueError):
    """A name cannot be turned into a valid TypeScript identifier."""


class MissingOperationIdError(GeneratorError):
    """An operation has no ``operationId``."""


class MissingReferenceError(GeneratorError):
    """A ``$ref`` points at nothing inside the document."""

    def __init__(self, ref: str) -> None:
        super().__init__(f"unresolved reference {ref!r}")
        self.ref = ref


class UnsupportedReferenceError(GeneratorError):
    """A schema ``$ref`` points outside ``#/components/schemas/``."""

    def __init__(self, ref: str, context: str | None = None) -> None:
        location = f"{context} references" if context else "references"
        super().__init__(f"{location} unsupported $ref {ref!r}")
        self.ref = ref
        self.context = context


class OperationGenerationError(GeneratorError):
    """Wraps any failure raised while generating a single operation."""

    def __init__(self, operation_id: str | None, path: str, method: str, cause: Exception) -> None:
        name = operation_id or "<anonymous>"
        super().__init__(f"operation {name} ({method.upper()} {path}): {cause}")
        self.operation_id = operation_id
        self.path = path
        self.method = method
        self.cause = cause


class SchemaNameConflictError(GeneratorError):
    """A generated inline schema name is already taken by another schema."""

    def __init__(self, name: str) -> None:
        super().__init__(f"inline schema {name!r} clashes with an existing schema of the same name")
        self.name = name
