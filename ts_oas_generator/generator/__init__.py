"""
TypeScript Code Generator Module

This module provides Jinja2-based rendering of TypeScript operation functions,
server-side operation wrappers and zod schemas from OpenAPI specifications.
"""

from .renderers import render_operation_function
from .server import render_server_wrapper
from .template_engine import TsCodeGenerator, TsTemplateEngine
from .zod import ZodSchemaCompiler

__all__ = [
    "TsCodeGenerator",
    "TsTemplateEngine",
    "ZodSchemaCompiler",
    "render_operation_function",
    "render_server_wrapper",
]
