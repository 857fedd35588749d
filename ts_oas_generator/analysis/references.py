"""Schema reference resolution."""

from __future__ import annotations

from ts_oas_generator.analysis.models import InlineSchemaRegistration, TypeResolution
from ts_oas_generator.errors import UnsupportedReferenceError
from ts_oas_generator.parser.schema_node import InlineSchema, SchemaNode, SchemaRef
from ts_oas_generator.utils.string_case import sanitize_identifier


def component_type_name(ref: SchemaRef, context: str | None = None) -> str:
    """Return the generated type name of a component schema reference.

    Raises:
        UnsupportedReferenceError: If the reference is not a component schema.
    """
    if not ref.is_component or not ref.component_name:
        raise UnsupportedReferenceError(ref.ref, context)
    return sanitize_identifier(ref.component_name)


def inline_type_name(operation_name: str, context: str) -> str:
    """Name of an inline schema, e.g. ``GetUser404Response`` or ``CreateUserRequest``."""
    return f"{operation_name}{context}"


def resolve_type_name(
    node: SchemaNode,
    operation_name: str,
    context: str,
    label: str | None = None,
) -> TypeResolution:
    """Resolve a schema to the type name generated code refers to.

    Args:
        node: The schema to resolve.
        operation_name: PascalCase operation name seeding inline names.
        context: Discriminator appended for inline schemas, ``"Request"`` or
            ``"{status}Response"``.
        label: Where the schema sits, used in error messages.

    Returns:
        The type name together with the names to import and, for inline
        schemas, the registration the schema file writer needs.

    Raises:
        UnsupportedReferenceError: For references outside component schemas.
    """
    match node:
        case SchemaRef():
            type_name = component_type_name(node, label or context)
            return TypeResolution(type_name=type_name, imports=frozenset({type_name}))
        case InlineSchema(schema=schema):
            type_name = inline_type_name(operation_name, context)
            return TypeResolution(
                type_name=type_name,
                imports=frozenset({type_name}),
                inline_schemas=(InlineSchemaRegistration(name=type_name, schema=schema),),
            )
    msg = f"Unsupported schema node {node!r}"
    raise TypeError(msg)
