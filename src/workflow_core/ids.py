"""Identifier helpers for workflow entities."""

from __future__ import annotations

import uuid

# Opaque, globally unique token (UUID4 string) used for node, port and edge ids.
Identifier = str


def generate_id() -> Identifier:
    """Generate a fresh identifier."""
    return str(uuid.uuid4())


def is_blank(value: object) -> bool:
    """True for None, non-strings and whitespace-only strings."""
    return not isinstance(value, str) or not value.strip()


__all__ = ["Identifier", "generate_id", "is_blank"]
