from __future__ import annotations

from typing import Any

from ..core.constants import MAX_CUSTOM_HOURS
from ..core.exceptions import ValidationError


def require_positive_id(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field_name} is invalid") from exc
    if number <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return number


def require_custom_hours(value: Any) -> float:
    """Custom hour counts must satisfy ``0 < h <= 24``."""

    try:
        hours = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Hours must be a number, got {value!r}") from exc
    if hours != hours or hours <= 0 or hours > MAX_CUSTOM_HOURS:
        raise ValidationError(f"Hours must be greater than 0 and at most {MAX_CUSTOM_HOURS:g}")
    return hours
