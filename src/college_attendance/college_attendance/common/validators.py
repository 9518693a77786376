from __future__ import annotations

from enum import Enum
from typing import Any, Optional, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required", code="missing_fields")
    return str(value).strip()


def require_choice(value: Any, enum_cls: type[E], field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(str(m.value) for m in enum_cls)
        raise ValidationError(f"Invalid {field_name} {value!r}. Allowed: {allowed}", code=f"invalid_{field_name}")


def optional_int(value: Any, field_name: str) -> Optional[int]:
    """Coerce request values into an int id; blank/None means absent."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid id", code=f"invalid_{field_name}")


def optional_float(value: Any, field_name: str) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number", code=f"invalid_{field_name}")
