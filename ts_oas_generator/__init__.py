"""
TypeScript OpenAPI Operation Generator

A Jinja2-based generator that produces one typed, zod-validated TypeScript
fetch function per OpenAPI operation.
"""

from .config import GeneratorOptions
from .errors import GeneratorError, OperationGenerationError
from .generator import TsCodeGenerator, TsTemplateEngine
from .parser import OASParser, ParsedSpec

__version__ = "1.0.0"
__author__ = "OpenAPI TypeScript Generator"

__all__ = [
    "GeneratorError",
    "GeneratorOptions",
    "OASParser",
    "OperationGenerationError",
    "ParsedSpec",
    "TsCodeGenerator",
    "TsTemplateEngine",
]
