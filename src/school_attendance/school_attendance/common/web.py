"""Small Flask helpers shared by the JSON controllers."""

from __future__ import annotations

from datetime import date
from functools import wraps
from typing import Optional

from flask import request, session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .datetime_utils import parse_iso_date


def login_required(role: Optional[Role] = None):
    """Require a logged-in session, optionally with a given role.

    Errors are raised, not rendered; the app-level error handler turns them into JSON.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                raise AuthenticationError("Not logged in")
            if role is not None and session.get("role") != role.value:
                raise AuthorizationError("You do not have permission to access this resource")
            return view(*args, **kwargs)

        return wrapper

    return decorator


admin_required = login_required(Role.ADMIN)
teacher_required = login_required(Role.TEACHER)


def current_user_id() -> int:
    return int(session["user_id"])


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def query_date(name: str) -> Optional[date]:
    raw = request.args.get(name)
    return parse_date(raw, name) if raw else None


def parse_date(raw: Optional[str], name: str = "date") -> date:
    try:
        return parse_iso_date(raw or "")
    except ValueError:
        raise ValidationError(f"{name} must be a date in YYYY-MM-DD format") from None


def query_int(name: str) -> Optional[int]:
    raw = request.args.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number") from None
