"""
Utilities Module

Case conversion, identifier sanitization, logging setup and file helpers.
"""

from .file_utils import get_relative_path, write_files_to_disk
from .log import configure_logging
from .string_case import capitalcase, sanitize_identifier, to_valid_variable_name

__all__ = [
    "capitalcase",
    "configure_logging",
    "get_relative_path",
    "sanitize_identifier",
    "to_valid_variable_name",
    "write_files_to_disk",
]
