"""Tagged representation of schema objects.

A schema is either a ``$ref`` or an inline definition. The distinction is made
once, where a raw schema dictionary is first read, and consumers branch on the
variant type instead of probing dictionary keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeAlias

from ts_oas_generator.constants import COMPONENT_SCHEMA_PREFIX


@dataclass(frozen=True)
class SchemaRef:
    """A ``{"$ref": ...}`` schema."""

    ref: str

    @property
    def is_component(self) -> bool:
        return self.ref.startswith(COMPONENT_SCHEMA_PREFIX)

    @property
    def component_name(self) -> str:
        """Raw component key, e.g. ``User`` for ``#/components/schemas/User``."""
        return self.ref[len(COMPONENT_SCHEMA_PREFIX) :]


@dataclass(frozen=True)
class InlineSchema:
    """Any schema that is not a bare reference."""

    schema: dict[str, Any]


SchemaNode: TypeAlias = SchemaRef | InlineSchema


def schema_node_from(raw: Any) -> SchemaNode | None:  # noqa: ANN401
    """Classify a raw schema value.

    Args:
        raw: The value found under a ``schema`` key, possibly missing.

    Returns:
        ``None`` when there is no schema, otherwise the matching variant.

    Examples:
        >>> schema_node_from({"$ref": "#/components/schemas/User"})
        SchemaRef(ref='#/components/schemas/User')
        >>> schema_node_from(None) is None
        True
    """
    if raw is None:
        return None
    if isinstance(raw, dict):
        ref = raw.get("$ref")
        if isinstance(ref, str):
            return SchemaRef(ref)
        return InlineSchema(raw)
    # Boolean schemas (true/false) are kept inline
    return InlineSchema({} if raw else {"not": {}})
