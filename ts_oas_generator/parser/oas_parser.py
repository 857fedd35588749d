"""
OpenAPI Specification Parser for TypeScript Operation Generation.

This module loads OpenAPI 3.x documents (JSON or YAML) and exposes the pieces
the operation pipeline consumes: the operations in document order, component
schemas, security schemes and server URLs. Schemas and operations stay as raw
dictionaries; interpretation happens in the analysis package.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

import yaml

from ts_oas_generator.constants import HTTP_METHODS
from ts_oas_generator.errors import MissingReferenceError, UnsupportedDocumentError

logger = logging.getLogger(__name__)

_YAML_SUFFIXES: Final = frozenset({".yaml", ".yml"})
_SUPPORTED_MAJOR_VERSION: Final = "3."


def _unescape_pointer_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def resolve_reference(document: dict[str, Any], ref: str) -> Any:  # noqa: ANN401
    """Resolve a local JSON reference against the document.

    Args:
        document: The full OpenAPI document.
        ref: A local reference such as ``#/components/parameters/Limit``.

    Returns:
        The referenced value.

    Raises:
        MissingReferenceError: If the reference is not local or does not
            point at anything.
    """
    if not ref.startswith("#/"):
        raise MissingReferenceError(ref)

    resolved: Any = document
    for token in ref[2:].split("/"):
        key = _unescape_pointer_token(token)
        if isinstance(resolved, dict) and key in resolved:
            resolved = resolved[key]
        elif isinstance(resolved, list) and key.isdigit() and int(key) < len(resolved):
            resolved = resolved[int(key)]
        else:
            raise MissingReferenceError(ref)
    return resolved


@dataclass(frozen=True)
class OperationEntry:
    """One (path, method) pair of the document."""

    path: str
    method: str
    operation: dict[str, Any]
    path_level_parameters: tuple[dict[str, Any], ...] = ()

    @property
    def operation_id(self) -> str | None:
        return self.operation.get("operationId")


@dataclass
class ParsedSpec:
    """Represents a parsed OpenAPI specification."""

    document: dict[str, Any]
    info: dict[str, Any]
    servers: list[str]
    operations: list[OperationEntry]
    schemas: dict[str, Any]
    security_schemes: dict[str, Any] = field(default_factory=dict)
    security: list[dict[str, list[str]]] = field(default_factory=list)

    @property
    def title(self) -> str:
        return str(self.info.get("title", ""))


class OASParser:
    """Parser for OpenAPI 3.x specifications."""

    def __init__(self) -> None:
        self.spec_data: dict[str, Any] | None = None

    def parse_file(self, file_path: str | Path) -> ParsedSpec:
        """Parse OpenAPI specification from a JSON or YAML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            json.JSONDecodeError: If a JSON file is malformed.
            yaml.YAMLError: If a YAML file is malformed.
        """
        path = Path(file_path)
        with path.open(encoding="utf-8") as f:
            if path.suffix.lower() in _YAML_SUFFIXES:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
        logger.debug("Loaded specification from %s", path)
        return self.parse_dict(data)

    def parse_dict(self, spec_dict: dict[str, Any]) -> ParsedSpec:
        """Parse OpenAPI specification from dictionary."""
        self.spec_data = spec_dict
        return self._parse_spec()

    def _parse_spec(self) -> ParsedSpec:
        """Parse the loaded specification."""
        if not self.spec_data or not isinstance(self.spec_data, dict):
            msg = "No specification data loaded"
            raise UnsupportedDocumentError(msg)

        spec_data = self.spec_data
        self._check_version(spec_data)

        components = spec_data.get("components") or {}
        operations = self._parse_operations(spec_data)
        logger.debug("Found %d operations", len(operations))

        return ParsedSpec(
            document=spec_data,
            info=spec_data.get("info") or {},
            servers=self._extract_server_urls(spec_data),
            operations=operations,
            schemas=components.get("schemas") or {},
            security_schemes=components.get("securitySchemes") or {},
            security=spec_data.get("security") or [],
        )

    def _check_version(self, spec_data: dict[str, Any]) -> None:
        if "swagger" in spec_data:
            msg = f"Swagger {spec_data['swagger']} documents must be upgraded to OpenAPI 3.x first"
            raise UnsupportedDocumentError(msg)

        version = str(spec_data.get("openapi", ""))
        if not version.startswith(_SUPPORTED_MAJOR_VERSION):
            msg = f"Unsupported OpenAPI version {version!r}, expected 3.x"
            raise UnsupportedDocumentError(msg)

    def _extract_server_urls(self, spec_data: dict[str, Any]) -> list[str]:
        urls: list[str] = []
        for server in spec_data.get("servers") or []:
            url = server.get("url") if isinstance(server, dict) else None
            if url and url not in urls:
                urls.append(url)
        return urls

    def _parse_operations(self, spec_data: dict[str, Any]) -> list[OperationEntry]:
        """Collect all operations from paths, in document order."""
        operations: list[OperationEntry] = []
        paths = spec_data.get("paths") or {}

        for path, path_item in paths.items():
            if not isinstance(path_item, dict):
                continue
            path_level_parameters = tuple(path_item.get("parameters") or ())
            for method, operation_data in path_item.items():
                if method.lower() not in HTTP_METHODS or not isinstance(operation_data, dict):
                    continue
                operations.append(
                    OperationEntry(
                        path=path,
                        method=method.lower(),
                        operation=operation_data,
                        path_level_parameters=path_level_parameters,
                    )
                )

        return operations
