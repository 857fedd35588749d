"""
OpenAPI Parser Module

Loading of OpenAPI 3.x documents, reference resolution and operationId
synthesis.
"""

from .oas_parser import OASParser, OperationEntry, ParsedSpec, resolve_reference
from .operation_ids import apply_generated_operation_ids, generate_operation_id
from .schema_node import InlineSchema, SchemaNode, SchemaRef, schema_node_from

__all__ = [
    "InlineSchema",
    "OASParser",
    "OperationEntry",
    "ParsedSpec",
    "SchemaNode",
    "SchemaRef",
    "apply_generated_operation_ids",
    "generate_operation_id",
    "resolve_reference",
    "schema_node_from",
]
