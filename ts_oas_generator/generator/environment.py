"""Jinja2 environment shared by the renderers and the template engine."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from ts_oas_generator.generator.filters import FILTERS

DEFAULT_TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


def create_environment(template_dir: Path | None = None) -> Environment:
    """Create a Jinja2 environment with the TypeScript filters registered."""
    env = Environment(
        loader=FileSystemLoader(str(template_dir or DEFAULT_TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters.update(FILTERS)
    return env


@lru_cache(maxsize=1)
def default_environment() -> Environment:
    return create_environment()
