"""Utility modules"""

from .files import (
    discover_dump_files,
    format_file_size,
    format_file_age,
    sanitize_filename,
    get_timestamp,
    database_name_from_file,
    rename_dump,
    replace_dump,
    delete_dumps,
)
from .exclusions import load_exclusions, parse_exclusions
from .sql import quote_identifier, quote_literal, escape_like

__all__ = [
    "discover_dump_files",
    "format_file_size",
    "format_file_age",
    "sanitize_filename",
    "get_timestamp",
    "database_name_from_file",
    "rename_dump",
    "replace_dump",
    "delete_dumps",
    "load_exclusions",
    "parse_exclusions",
    "quote_identifier",
    "quote_literal",
    "escape_like",
]
