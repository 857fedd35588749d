"""
TypeScript Template Engine for OpenAPI Operation Generation

This module uses Jinja2 templates to turn a parsed OpenAPI specification into
one TypeScript module per operation, a shared ``config.ts`` support module,
an ``index.ts`` barrel and one zod schema module per named schema. On request
it also writes a server-side wrapper module per operation.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ts_oas_generator.analysis import OperationMetadata, extract_operation_metadata
from ts_oas_generator.analysis.models import SchemaCompiler
from ts_oas_generator.analysis.security import extract_auth_headers
from ts_oas_generator.config import DEFAULT_OPTIONS, GeneratorOptions
from ts_oas_generator.constants import IMPORT_EXTENSION, SCHEMA_FILE_EXTENSION
from ts_oas_generator.errors import GeneratorError, OperationGenerationError, SchemaNameConflictError
from ts_oas_generator.generator.environment import create_environment
from ts_oas_generator.generator.fragments import OperationFragment
from ts_oas_generator.generator.renderers import render_operation_function
from ts_oas_generator.generator.server import ServerWrapperFragment, render_server_wrapper
from ts_oas_generator.generator.zod import ZodSchemaCompiler
from ts_oas_generator.parser.oas_parser import OperationEntry, ParsedSpec
from ts_oas_generator.utils.string_case import sanitize_identifier

logger = logging.getLogger(__name__)

OPERATIONS_DIR = "operations"
SCHEMAS_DIR = "schemas"
SERVER_OPERATIONS_DIR = "server-operations"


@dataclass(frozen=True)
class GeneratedOperation:
    """Metadata and rendered fragment of one operation."""

    metadata: OperationMetadata
    fragment: OperationFragment
    server: ServerWrapperFragment | None = None


class TsTemplateEngine:
    """Template engine for generating TypeScript operation code."""

    def __init__(self, template_dir: Path | None = None) -> None:
        """Initialize the template engine.

        Args:
            template_dir: Directory holding the templates. Defaults to the
                templates shipped with the package.
        """
        self.env = create_environment(template_dir)
        self.env.globals.update(
            {
                "operations_dir": OPERATIONS_DIR,
                "schemas_dir": SCHEMAS_DIR,
                "import_extension": IMPORT_EXTENSION,
            }
        )

    def render_template(self, template_name: str, context: dict[str, Any]) -> str:
        """Render a template with the given context."""
        template = self.env.get_template(template_name)
        return template.render(**context)

    def render_operation(
        self,
        entry: OperationEntry,
        document: dict[str, Any],
        compiler: SchemaCompiler,
        options: GeneratorOptions = DEFAULT_OPTIONS,
        *,
        server_wrappers: bool = False,
    ) -> GeneratedOperation:
        """Analyze and render a single operation, and its server wrapper when requested.

        Raises:
            OperationGenerationError: If analysis or rendering fails.
        """
        metadata = extract_operation_metadata(
            entry.path,
            entry.method,
            entry.operation,
            document,
            compiler=compiler,
            path_level_params=entry.path_level_parameters,
            options=options,
        )
        try:
            fragment = render_operation_function(metadata, self.env)
            server = render_server_wrapper(metadata, self.env) if server_wrappers else None
        except (GeneratorError, ValueError) as exc:
            raise OperationGenerationError(metadata.operation_id, entry.path, entry.method, exc) from exc
        return GeneratedOperation(metadata=metadata, fragment=fragment, server=server)


class TsCodeGenerator:
    """Main code generator for TypeScript operations."""

    def __init__(
        self,
        template_engine: TsTemplateEngine | None = None,
        compiler: SchemaCompiler | None = None,
    ) -> None:
        """Initialize the code generator."""
        self.template_engine = template_engine or TsTemplateEngine()
        self.compiler = compiler or ZodSchemaCompiler()

    def generate_client(
        self,
        spec: ParsedSpec,
        output_dir: Path,
        *,
        options: GeneratorOptions = DEFAULT_OPTIONS,
        skip_invalid: bool = False,
        workers: int = 1,
        server_wrappers: bool = False,
    ) -> dict[Path, str]:
        """Generate every TypeScript file for the specification.

        Args:
            spec: The parsed OpenAPI specification.
            output_dir: Root directory of the generated sources.
            options: Generation flags.
            skip_invalid: Log and skip operations that fail to generate
                instead of aborting.
            workers: Number of threads used to render operations. The
                output does not depend on it.
            server_wrappers: Also generate a server-side request validation
                wrapper per operation under ``server-operations/``.

        Returns:
            Mapping of file paths to their contents.

        Raises:
            OperationGenerationError: If an operation fails and
                ``skip_invalid`` is false.
        """
        output_dir = Path(output_dir)
        operations = self._generate_operations(spec, options, skip_invalid, workers, server_wrappers)

        files: dict[Path, str] = {}
        files.update(self._generate_operation_files(operations, output_dir))
        files.update(self._generate_support_files(spec, operations, output_dir))
        files.update(self._generate_schema_files(spec, operations, output_dir))
        if server_wrappers:
            files.update(self._generate_server_files(operations, output_dir))

        logger.info("Generated %d operations and %d files", len(operations), len(files))
        return files

    def _generate_operations(
        self,
        spec: ParsedSpec,
        options: GeneratorOptions,
        skip_invalid: bool,
        workers: int,
        server_wrappers: bool = False,
    ) -> list[GeneratedOperation]:
        """Render all operations, keeping document order and the first of each function name."""

        def render(entry: OperationEntry) -> GeneratedOperation | OperationGenerationError:
            try:
                return self.template_engine.render_operation(
                    entry, spec.document, self.compiler, options, server_wrappers=server_wrappers
                )
            except OperationGenerationError as exc:
                if not skip_invalid:
                    raise
                return exc

        with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
            results = list(executor.map(render, spec.operations))

        generated: list[GeneratedOperation] = []
        seen: set[str] = set()
        schema_names = {sanitize_identifier(name) for name in spec.schemas}
        for result in results:
            if isinstance(result, OperationGenerationError):
                logger.warning("Skipping %s", result)
                continue
            name = result.metadata.function_name
            if name in seen:
                logger.warning(
                    "Skipping %s %s: function name %s is already generated",
                    result.metadata.method.upper(),
                    result.metadata.path,
                    name,
                )
                continue
            conflict = self._check_inline_schema_names(result, schema_names, skip_invalid)
            if conflict is not None:
                logger.warning("Skipping %s", conflict)
                continue
            seen.add(name)
            schema_names.update(registration.name for registration in result.metadata.inline_schemas)
            generated.append(result)
        return generated

    @staticmethod
    def _check_inline_schema_names(
        operation: GeneratedOperation,
        schema_names: set[str],
        skip_invalid: bool,
    ) -> OperationGenerationError | None:
        """Reject an operation whose inline schemas would reuse an existing schema name.

        Raises:
            OperationGenerationError: On a clash when ``skip_invalid`` is false.
        """
        metadata = operation.metadata
        for registration in metadata.inline_schemas:
            if registration.name not in schema_names:
                continue
            cause = SchemaNameConflictError(registration.name)
            error = OperationGenerationError(metadata.operation_id, metadata.path, metadata.method, cause)
            if not skip_invalid:
                raise error from cause
            return error
        return None

    def _generate_operation_files(
        self,
        operations: list[GeneratedOperation],
        output_dir: Path,
    ) -> dict[Path, str]:
        """Generate one module per operation."""
        files = {}
        operations_dir = output_dir / OPERATIONS_DIR

        for operation in operations:
            content = self.template_engine.render_template(
                "files/operation.ts.j2",
                {"fragment": operation.fragment},
            )
            files[operations_dir / f"{operation.fragment.function_name}{SCHEMA_FILE_EXTENSION}"] = content

        return files

    def _generate_support_files(
        self,
        spec: ParsedSpec,
        operations: list[GeneratedOperation],
        output_dir: Path,
    ) -> dict[Path, str]:
        """Generate ``config.ts`` and the ``index.ts`` barrel."""
        operations_dir = output_dir / OPERATIONS_DIR
        config_context = {
            "title": spec.title,
            "server_urls": spec.servers,
            "auth_headers": extract_auth_headers(spec.document),
        }
        index_context = {"modules": [operation.fragment.function_name for operation in operations]}
        return {
            operations_dir / f"config{SCHEMA_FILE_EXTENSION}": self.template_engine.render_template(
                "files/config.ts.j2", config_context
            ),
            operations_dir / f"index{SCHEMA_FILE_EXTENSION}": self.template_engine.render_template(
                "files/index.ts.j2", index_context
            ),
        }

    def _generate_schema_files(
        self,
        spec: ParsedSpec,
        operations: list[GeneratedOperation],
        output_dir: Path,
    ) -> dict[Path, str]:
        """Generate one zod module per component schema and per inline schema."""
        schemas: dict[str, Any] = {}
        for raw_name, schema in spec.schemas.items():
            schemas.setdefault(sanitize_identifier(raw_name), schema)
        for operation in operations:
            for registration in operation.metadata.inline_schemas:
                schemas[registration.name] = registration.schema

        files = {}
        schemas_dir = output_dir / SCHEMAS_DIR
        for name, schema in schemas.items():
            compiled = self.compiler.compile(schema)
            context = {
                "name": name,
                "code": compiled.code,
                "references": sorted(compiled.type_references - {name}),
                "recursive": name in compiled.type_references,
                "description": schema.get("description") if isinstance(schema, dict) else None,
            }
            files[schemas_dir / f"{name}{SCHEMA_FILE_EXTENSION}"] = self.template_engine.render_template(
                "files/schema.ts.j2", context
            )
        return files

    def _generate_server_files(
        self,
        operations: list[GeneratedOperation],
        output_dir: Path,
    ) -> dict[Path, str]:
        """Generate one server wrapper module per operation and their barrel."""
        files = {}
        server_dir = output_dir / SERVER_OPERATIONS_DIR
        modules = []
        for operation in operations:
            if operation.server is None:
                continue
            files[server_dir / f"{operation.server.function_name}{SCHEMA_FILE_EXTENSION}"] = (
                self.template_engine.render_template("files/server_operation.ts.j2", {"fragment": operation.server})
            )
            modules.append(operation.server.function_name)
        files[server_dir / f"index{SCHEMA_FILE_EXTENSION}"] = self.template_engine.render_template(
            "files/server_index.ts.j2", {"modules": modules}
        )
        return files
