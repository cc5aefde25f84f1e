"""Small helpers for building SQL text that has to interpolate names or paths."""

import re

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_identifier(name: str) -> str:
    """Return `name` unchanged, or raise ValueError if it is not a plain SQL identifier."""
    if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
        raise ValueError(f"invalid SQL identifier: {name!r}")
    return name


def validate_qualified_name(name: str) -> str:
    """Validate a dotted name such as `priority_mart.priority_jobs_snapshot`."""
    if not isinstance(name, str):
        raise ValueError(f"invalid SQL identifier: {name!r}")
    for part in name.split("."):
        validate_identifier(part)
    return name


def split_qualified_name(name: str, default_schema: str = "main") -> tuple[str, str]:
    """`schema.table` → (schema, table); bare `table` lands in `default_schema`."""
    validate_qualified_name(name)
    parts = name.split(".")
    if len(parts) == 1:
        return default_schema, parts[0]
    if len(parts) == 2:
        return parts[0], parts[1]
    raise ValueError(f"expected [schema.]table, got {name!r}")


def quote_literal(value: str) -> str:
    """Single-quote a string for use as a SQL literal (file paths, URLs)."""
    return "'" + str(value).replace("'", "''") + "'"
