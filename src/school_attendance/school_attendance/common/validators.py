from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_id(value: Any, field_name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is required") from None
    if parsed <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return parsed


def optional_id(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_id(value, field_name)


def require_email(value: Optional[str]) -> str:
    email = require_non_empty(value, "Email").lower()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("Email is invalid")
    return email
