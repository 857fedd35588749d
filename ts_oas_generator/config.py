"""Generator options.

All behaviour switches of the operation pipeline live in a single frozen
dataclass so one metadata model serves every generation mode.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GeneratorOptions:
    """Feature flags for operation generation.

    Attributes:
        generate_content_type_maps: Emit request/response content-type maps
            and the matching generic parameters when an operation declares
            more than one mapping.
        force_validation: Validate every response that has a schema, not only
            JSON-like ones.
        unknown_response_mode: Leave schema-backed response data untyped and
            attach a lazy ``parse()`` to each result instead of validating.
    """

    generate_content_type_maps: bool = True
    force_validation: bool = False
    unknown_response_mode: bool = False


DEFAULT_OPTIONS = GeneratorOptions()
