"""
Lightweight domain validation helpers.

Pure checks with no I/O, shared by aggregates that need the same
"required identifier" and "bounded text" rules.
"""

from __future__ import annotations

from uuid import UUID

NIL_UUID = UUID(int=0)


def is_empty_id(value: UUID | None) -> bool:
    """True for a missing identifier: ``None`` or the nil UUID."""
    return value is None or value == NIL_UUID


def is_blank(value: str | None) -> bool:
    """True for ``None``, the empty string, or whitespace only."""
    return value is None or not value.strip()


def clean_optional(value: str | None) -> str | None:
    """Trim optional free text, keeping ``None`` as ``None``."""
    return value.strip() if value is not None else None
