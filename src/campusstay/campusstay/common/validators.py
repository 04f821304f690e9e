from __future__ import annotations

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_positive(value: float, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number <= 0:
        raise ValidationError(f"{field_name} must be greater than zero")
    return number


def floor_capacity(value) -> int:
    """Floor a requested capacity to an int of at least 1."""
    try:
        return max(1, int(float(value)))
    except (TypeError, ValueError):
        raise ValidationError("Capacity must be a number")


def require_id(value, field_name: str) -> int:
    if value in (None, ""):
        raise ValidationError(f"{field_name} is required")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")


def clean_optional(value) -> str | None:
    text = (value or "").strip()
    return text or None
