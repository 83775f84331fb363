"""Identifier generation for occurrences and history entries."""

from __future__ import annotations

from uuid import UUID, uuid4


def new_id() -> UUID:
    """Generate a new random UUID v4."""
    return uuid4()
