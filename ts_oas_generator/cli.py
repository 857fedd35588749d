#!/usr/bin/env python3
"""Command-line interface for the TypeScript OAS Generator."""

import argparse
import contextlib
import json
import logging
import shutil
import sys
import tempfile
import traceback
from collections.abc import Generator
from pathlib import Path

import yaml

from ts_oas_generator.config import GeneratorOptions
from ts_oas_generator.generator.template_engine import TsCodeGenerator
from ts_oas_generator.parser.oas_parser import OASParser
from ts_oas_generator.parser.operation_ids import apply_generated_operation_ids
from ts_oas_generator.utils.file_utils import get_relative_path, write_files_to_disk
from ts_oas_generator.utils.log import configure_logging

logger = logging.getLogger(__name__)

# Exit codes for better error reporting
EXIT_SUCCESS = 0
EXIT_FILE_NOT_FOUND = 1
EXIT_INVALID_JSON = 2
EXIT_GENERATION_ERROR = 3


def parse_command_line_args(args: list[str] | None = None) -> argparse.Namespace:
    """Create and configure the command line argument parser."""
    parser = argparse.ArgumentParser(
        description="Generate typed TypeScript operations from an OpenAPI specification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s spec.json
  %(prog)s spec.yaml --output ./src/api
  %(prog)s spec.json --unknown-response-mode --workers 4 --verbose
  %(prog)s spec.json --server-wrappers
        """,
    )
    parser.add_argument(
        "spec_file",
        type=Path,
        help="Path to OpenAPI specification file (JSON or YAML)",
        metavar="SPEC_FILE",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=Path("./generated"),
        help="Output directory for generated files (default: %(default)s)",
        dest="output_dir",
    )
    parser.add_argument(
        "--force-validation",
        action="store_true",
        help="Validate every response that has a schema, not only JSON responses",
    )
    parser.add_argument(
        "--unknown-response-mode",
        action="store_true",
        help="Return untyped response data with a lazy parse() instead of validating",
    )
    parser.add_argument(
        "--no-content-type-maps",
        action="store_false",
        dest="content_type_maps",
        help="Do not generate request/response content-type maps",
    )
    parser.add_argument(
        "--generate-operation-ids",
        action="store_true",
        help="Derive missing operationIds from the HTTP method and path",
    )
    parser.add_argument(
        "--skip-invalid-operations",
        action="store_true",
        help="Skip operations that fail to generate instead of aborting",
    )
    parser.add_argument(
        "--server-wrappers",
        action="store_true",
        help="Also generate server-side request validation wrappers",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of threads used to render operations (default: %(default)s)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    parsed_args = parser.parse_args(args)

    # Validate spec file exists
    if not parsed_args.spec_file.exists():
        parser.error(f"Specification file not found: {parsed_args.spec_file}")
    if parsed_args.workers < 1:
        parser.error("--workers must be at least 1")

    return parsed_args


def print_verbose_info(*, operation_count: int, schema_count: int) -> None:
    """Print verbose information about parsed specification."""
    print(f"Parsed {operation_count} operations")
    print(f"Found {schema_count} schemas")


def print_generation_summary(*, file_count: int, files: dict[Path, str], output_dir: Path) -> None:
    """Print summary of generated files."""
    print(f"Generated {file_count} files:")
    for file_path in sorted(files.keys()):
        print(f"  {get_relative_path(file_path, output_dir)}")
    print(f"\nTypeScript operations generated successfully in {output_dir}")


@contextlib.contextmanager
def backup_and_clean_output_dir(output_dir: Path) -> Generator[None, None, None]:
    """A context manager to backup and clean the output directory."""
    backup_dir = None
    if output_dir.exists() and any(output_dir.iterdir()):
        backup_dir = Path(tempfile.mkdtemp())
        shutil.copytree(output_dir, backup_dir, dirs_exist_ok=True)

    # Clean output directory before generation
    if output_dir.exists():
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    try:
        yield
    except Exception:
        if backup_dir:
            print(
                "Error: Generation failed. Restoring original content.",
                file=sys.stderr,
            )
            if output_dir.exists():
                shutil.rmtree(output_dir)
            shutil.copytree(backup_dir, output_dir, dirs_exist_ok=True)
        raise
    finally:
        if backup_dir:
            shutil.rmtree(backup_dir)


def generate_typescript_operations_from_spec(
    *,
    spec_file: Path,
    output_dir: Path,
    options: GeneratorOptions,
    verbose: bool,
    generate_operation_ids: bool = False,
    skip_invalid: bool = False,
    workers: int = 1,
    server_wrappers: bool = False,
) -> dict[Path, str]:
    """Generate TypeScript operations from an OpenAPI specification file."""
    parser = OASParser()
    parsed_spec = parser.parse_file(spec_file)
    if generate_operation_ids:
        parsed_spec = parser.parse_dict(apply_generated_operation_ids(parsed_spec.document))

    if verbose:
        print_verbose_info(
            operation_count=len(parsed_spec.operations),
            schema_count=len(parsed_spec.schemas),
        )

    generator = TsCodeGenerator()
    return generator.generate_client(
        parsed_spec,
        output_dir,
        options=options,
        skip_invalid=skip_invalid,
        workers=workers,
        server_wrappers=server_wrappers,
    )


def main(args: list[str] | None = None) -> int:
    """Generate TypeScript operations from an OpenAPI specification."""
    parsed_args = parse_command_line_args(args)
    configure_logging(verbose=parsed_args.verbose)

    options = GeneratorOptions(
        generate_content_type_maps=parsed_args.content_type_maps,
        force_validation=parsed_args.force_validation,
        unknown_response_mode=parsed_args.unknown_response_mode,
    )
    logger.debug("Generating with %s", options)

    try:
        with backup_and_clean_output_dir(parsed_args.output_dir):
            generated_files = generate_typescript_operations_from_spec(
                spec_file=parsed_args.spec_file,
                output_dir=parsed_args.output_dir,
                options=options,
                verbose=parsed_args.verbose,
                generate_operation_ids=parsed_args.generate_operation_ids,
                skip_invalid=parsed_args.skip_invalid_operations,
                workers=parsed_args.workers,
                server_wrappers=parsed_args.server_wrappers,
            )

            # Write files to disk
            write_files_to_disk(generated_files)

            if parsed_args.verbose:
                print_generation_summary(
                    file_count=len(generated_files),
                    files=generated_files,
                    output_dir=parsed_args.output_dir,
                )
            else:
                print(f"TypeScript operations generated successfully in {parsed_args.output_dir}")

        return EXIT_SUCCESS

    except FileNotFoundError:
        print(f"Error: Specification file not found: {parsed_args.spec_file}", file=sys.stderr)
        return EXIT_FILE_NOT_FOUND
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in specification file: {e}", file=sys.stderr)
        return EXIT_INVALID_JSON
    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in specification file: {e}", file=sys.stderr)
        return EXIT_INVALID_JSON
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if parsed_args.verbose:
            traceback.print_exc()
        return EXIT_GENERATION_ERROR


if __name__ == "__main__":
    sys.exit(main())
