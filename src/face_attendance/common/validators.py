from __future__ import annotations

from typing import Iterable, Sequence

from ..core.exceptions import DimensionMismatchError, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_vector(values: Iterable, dimension: int) -> tuple[float, ...]:
    """Coerce an embedding payload to a float tuple of exactly ``dimension`` items."""
    try:
        vector = tuple(float(v) for v in values)
    except (TypeError, ValueError):
        raise ValidationError("Embedding must be a list of numbers")
    if len(vector) != dimension:
        raise DimensionMismatchError(dimension, len(vector))
    return vector


def require_choice(value: str, choices: Sequence[str], field_name: str) -> str:
    v = (value or "").strip().lower()
    if v not in choices:
        raise ValidationError(f"{field_name} must be one of: {', '.join(choices)}")
    return v
