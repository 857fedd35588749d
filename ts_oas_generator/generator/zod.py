"""
Zod schema compiler.

Turns JSON-Schema-like OpenAPI schema objects into zod validator expressions.
Component references become ``z.lazy(() => Name)`` so generated schema files
can reference each other regardless of declaration order, and the referenced
names are returned alongside the code for import generation.
"""

from __future__ import annotations

from typing import Any, Final

from ts_oas_generator.analysis.models import CompiledSchema
from ts_oas_generator.analysis.references import component_type_name
from ts_oas_generator.generator.filters import ts_literal, ts_string_literal
from ts_oas_generator.parser.schema_node import InlineSchema, SchemaNode, SchemaRef, schema_node_from
from ts_oas_generator.utils.string_case import ts_property_key

_INDENT: Final = "  "

_STRING_FORMATS: Final = {
    "email": ".email()",
    "uuid": ".uuid()",
    "uri": ".url()",
    "url": ".url()",
    "date-time": ".datetime()",
}

_BINARY_FORMATS: Final = frozenset({"binary"})


class ZodSchemaCompiler:
    """Compiles schemas into zod expressions."""

    def compile(self, schema: SchemaNode | dict[str, Any] | bool) -> CompiledSchema:
        """Compile a schema.

        Args:
            schema: A raw schema dictionary, a boolean schema or a schema node.

        Returns:
            The zod expression and the component names it references.

        Raises:
            UnsupportedReferenceError: For references outside component schemas.

        Example:
            >>> ZodSchemaCompiler().compile({"type": "string", "format": "email"}).code
            'z.string().email()'
        """
        references: set[str] = set()
        code = self._compile(self._as_raw(schema), references, 0)
        return CompiledSchema(code=code, type_references=frozenset(references))

    @staticmethod
    def _as_raw(schema: SchemaNode | dict[str, Any] | bool) -> Any:  # noqa: ANN401
        match schema:
            case SchemaRef(ref=ref):
                return {"$ref": ref}
            case InlineSchema(schema=raw):
                return raw
        return schema

    def _compile(self, schema: Any, references: set[str], depth: int) -> str:  # noqa: ANN401
        if isinstance(schema, bool):
            return "z.unknown()" if schema else "z.never()"
        if not isinstance(schema, dict):
            return "z.unknown()"

        node = schema_node_from(schema)
        if isinstance(node, SchemaRef):
            name = component_type_name(node)
            references.add(name)
            return f"z.lazy(() => {name})"

        code = self._compile_base(schema, references, depth)

        if schema.get("nullable") is True and not code.endswith(".nullable()"):
            code = f"{code}.nullable()"
        if "default" in schema:
            code = f"{code}.default({ts_literal(schema['default'])})"
        return code

    def _compile_base(self, schema: dict[str, Any], references: set[str], depth: int) -> str:
        if "const" in schema:
            return f"z.literal({ts_literal(schema['const'])})"
        if "enum" in schema:
            return self._compile_enum(schema["enum"])
        for keyword in ("oneOf", "anyOf"):
            if keyword in schema:
                return self._compile_union(schema[keyword], references, depth)
        if "allOf" in schema:
            return self._compile_intersection(schema["allOf"], references, depth)

        schema_type = schema.get("type")
        if isinstance(schema_type, list):
            return self._compile_type_list(schema, schema_type, references, depth)
        if schema_type is None and ("properties" in schema or "additionalProperties" in schema):
            schema_type = "object"
        return self._compile_typed(schema, schema_type, references, depth)

    def _compile_typed(
        self,
        schema: dict[str, Any],
        schema_type: str | None,
        references: set[str],
        depth: int,
    ) -> str:
        match schema_type:
            case "string":
                return self._compile_string(schema)
            case "integer":
                return self._with_bounds("z.number().int()", schema, "minimum", "maximum")
            case "number":
                return self._with_bounds("z.number()", schema, "minimum", "maximum")
            case "boolean":
                return "z.boolean()"
            case "null":
                return "z.null()"
            case "array":
                items = self._compile(schema.get("items", True), references, depth)
                return self._with_bounds(f"z.array({items})", schema, "minItems", "maxItems")
            case "object":
                return self._compile_object(schema, references, depth)
            case _:
                return "z.unknown()"

    def _compile_type_list(
        self,
        schema: dict[str, Any],
        types: list[str],
        references: set[str],
        depth: int,
    ) -> str:
        non_null = [schema_type for schema_type in types if schema_type != "null"]
        variants = [self._compile_typed(schema, schema_type, references, depth) for schema_type in non_null]
        if not variants:
            return "z.null()"
        code = variants[0] if len(variants) == 1 else f"z.union([{', '.join(variants)}])"
        return f"{code}.nullable()" if "null" in types else code

    def _compile_string(self, schema: dict[str, Any]) -> str:
        schema_format = schema.get("format")
        if schema_format in _BINARY_FORMATS:
            return "z.instanceof(Blob)"
        code = "z.string()" + _STRING_FORMATS.get(schema_format, "")
        code = self._with_bounds(code, schema, "minLength", "maxLength")
        if "pattern" in schema:
            code = f"{code}.regex(new RegExp({ts_string_literal(schema['pattern'])}))"
        return code

    @staticmethod
    def _with_bounds(code: str, schema: dict[str, Any], lower: str, upper: str) -> str:
        if lower in schema:
            code = f"{code}.min({schema[lower]})"
        if upper in schema:
            code = f"{code}.max({schema[upper]})"
        return code

    @staticmethod
    def _compile_enum(values: list[Any]) -> str:
        if not values:
            return "z.never()"
        if all(isinstance(value, str) for value in values):
            return f"z.enum([{', '.join(ts_string_literal(value) for value in values)}])"
        literals = [f"z.literal({ts_literal(value)})" for value in values]
        return literals[0] if len(literals) == 1 else f"z.union([{', '.join(literals)}])"

    def _compile_union(self, members: list[Any], references: set[str], depth: int) -> str:
        compiled = [self._compile(member, references, depth) for member in members]
        if not compiled:
            return "z.unknown()"
        if len(compiled) == 1:
            return compiled[0]
        return f"z.union([{', '.join(compiled)}])"

    def _compile_intersection(self, members: list[Any], references: set[str], depth: int) -> str:
        compiled = [self._compile(member, references, depth) for member in members]
        if not compiled:
            return "z.unknown()"
        code = compiled[0]
        for member in compiled[1:]:
            code = f"z.intersection({code}, {member})"
        return code

    def _compile_object(self, schema: dict[str, Any], references: set[str], depth: int) -> str:
        properties = schema.get("properties") or {}
        additional = schema.get("additionalProperties")

        if not properties:
            if isinstance(additional, dict):
                return f"z.record(z.string(), {self._compile(additional, references, depth)})"
            if additional is False:
                return "z.object({}).strict()"
            return "z.record(z.string(), z.unknown())"

        required = set(schema.get("required") or ())
        inner = _INDENT * (depth + 1)
        entries = []
        for name, property_schema in properties.items():
            code = self._compile(property_schema, references, depth + 1)
            if name not in required:
                code = f"{code}.optional()"
            entries.append(f"{inner}{ts_property_key(name)}: {code},")
        code = "z.object({\n" + "\n".join(entries) + f"\n{_INDENT * depth}}})"

        if additional is True:
            return f"{code}.passthrough()"
        if isinstance(additional, dict):
            return f"{code}.catchall({self._compile(additional, references, depth)})"
        return code
