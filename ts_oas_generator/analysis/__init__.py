"""
Operation Analysis Module

Turns OpenAPI operations into immutable metadata records consumed by the
TypeScript renderers.
"""

from .metadata import extract_operation_metadata
from .models import (
    CompiledSchema,
    OperationMetadata,
    Parameter,
    ParameterGroups,
    RequestBodyInfo,
    ResponseAnalysis,
    ResponseInfo,
    SchemaCompiler,
    SecurityHeader,
)

__all__ = [
    "CompiledSchema",
    "OperationMetadata",
    "Parameter",
    "ParameterGroups",
    "RequestBodyInfo",
    "ResponseAnalysis",
    "ResponseInfo",
    "SchemaCompiler",
    "SecurityHeader",
    "extract_operation_metadata",
]
