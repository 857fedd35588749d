"""
Structured code fragments.

Renderers return these records instead of raw strings so tests can assert on
individual parts (imports, declarations, signature) and serialization to text
happens in one place.
"""

from __future__ import annotations

from dataclasses import dataclass

from ts_oas_generator.generator.filters import indent_block


@dataclass(frozen=True)
class FunctionSignature:
    name: str
    generic_params: str
    parameter_declaration: str
    return_type: str

    def to_source(self) -> str:
        parameters = indent_block(self.parameter_declaration)
        return (
            f"export async function {self.name}{self.generic_params}(\n"
            f"{parameters},\n"
            "  config: GlobalConfig = globalConfig,\n"
            f"): Promise<{self.return_type}>"
        )


@dataclass(frozen=True)
class ConfigImport:
    """A name imported from the generated ``config`` module."""

    name: str
    is_type: bool = False

    def to_source(self) -> str:
        return f"type {self.name}" if self.is_type else self.name


@dataclass(frozen=True)
class OperationFragment:
    """Everything generated for one operation.

    Attributes:
        function_name: Name of the exported function.
        signature: The function signature.
        body: Function body statements, already indented.
        type_declarations: Exported aliases and maps emitted before the function.
        summary_comment: JSDoc block, possibly empty.
        type_imports: Schema names imported from the schemas directory.
        config_imports: Names imported from the config module.
        uses_zod: Whether the declarations reference ``z``.
    """

    function_name: str
    signature: FunctionSignature
    body: str
    type_declarations: tuple[str, ...] = ()
    summary_comment: str = ""
    type_imports: tuple[str, ...] = ()
    config_imports: tuple[ConfigImport, ...] = ()
    uses_zod: bool = False

    def to_source(self) -> str:
        """Serialize as type aliases, summary comment, signature, body."""
        parts = [*self.type_declarations]
        function = f"{self.signature.to_source()} {{\n{self.body}}}\n"
        if self.summary_comment:
            function = f"{self.summary_comment}\n{function}"
        parts.append(function)
        return "\n\n".join(parts)

    @property
    def config_import_list(self) -> str:
        return ", ".join(imp.to_source() for imp in self.config_imports)
