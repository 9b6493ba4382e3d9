"""Quoting for identifiers and literals passed to the client"""

from core.exceptions import InvalidNameError


def quote_identifier(name: str) -> str:
    """Backtick-quote a database or table name"""
    if not name or "\x00" in name:
        raise InvalidNameError(f"Invalid identifier: {name!r}")
    return "`" + name.replace("`", "``") + "`"


def quote_literal(value: str) -> str:
    """Single-quote a string literal"""
    if "\x00" in value:
        raise InvalidNameError(f"Invalid literal: {value!r}")
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the pattern matches literally"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
