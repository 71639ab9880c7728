"""Helpers for turning Supabase rows into typed values."""

from datetime import date, datetime
from uuid import UUID


def parse_uuid(row: dict[str, object], key: str) -> UUID:
    """Return a required UUID column; missing keys raise KeyError."""
    return UUID(str(row[key]))


def optional_str(value: object) -> str | None:
    return str(value) if value else None


def parse_timestamp(value: object) -> datetime:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return datetime.min


def parse_date(value: object) -> date:
    if isinstance(value, str) and value:
        return date.fromisoformat(value[:10])
    raise ValueError(f"Invalid date value: {value!r}")


def nested_row(value: object) -> dict[str, object] | None:
    """Return an embedded to-one relation, which may arrive as a list."""
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, dict) else None
