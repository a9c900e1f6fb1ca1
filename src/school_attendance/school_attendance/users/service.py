from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..classes.repository import ClassRepository
from ..common.validators import optional_id, require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    full_name: str
    email: str
    role: Role


class AuthService:
    """Use case: authenticate user (login) and describe the logged-in actor."""

    def __init__(self, users: UserRepository, classes: ClassRepository):
        self._users = users
        self._classes = classes

    def authenticate(self, email: str, password: str) -> SessionUser:
        if not isinstance(email, str) or not isinstance(password, str):
            raise ValidationError("Email and password must be strings")

        user = self._users.get_by_email(email.strip().lower())
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME'
            ok = False

        if not ok:
            logger.info("Failed login for %s", user.email)
            raise AuthenticationError("Invalid email or password")

        return SessionUser(user_id=user.user_id, full_name=user.full_name, email=user.email, role=user.role)

    def register_admin(self, *, email: str, password: str, first_name: str, last_name: str) -> int:
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")

        if self._users.get_by_email(email):
            raise ConflictError("Email is already registered")

        return self._users.create_user(
            email=email,
            password_hash=generate_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=Role.ADMIN,
        )

    def current_user(self, user_id: int) -> dict:
        user = self._users.get_by_id(user_id)
        if not user:
            raise AuthenticationError("Not logged in")

        out = {
            "id": user.user_id,
            "email": user.email,
            "firstName": user.first_name,
            "lastName": user.last_name,
            "role": user.role.value,
        }
        if user.role == Role.TEACHER:
            out["assignedClassIds"] = [c.class_id for c in self._classes.list_for_teacher(user.user_id)]
        return out


class TeacherAccountService:
    """Use case: manage teacher accounts (admin)."""

    def __init__(self, users: UserRepository, classes: ClassRepository):
        self._users = users
        self._classes = classes

    def list_teachers(self) -> list[dict]:
        teachers = self._users.list_by_role(Role.TEACHER)
        by_teacher: dict[int, list[dict]] = {}
        for row in self._classes.list_overview():
            if row.teacher_id is None:
                continue
            by_teacher.setdefault(row.teacher_id, []).append(
                {
                    "id": row.class_id,
                    "name": row.name,
                    "gradeLevel": row.grade_level,
                    "studentCount": row.student_count,
                }
            )

        return [
            {
                "id": t.user_id,
                "firstName": t.first_name,
                "lastName": t.last_name,
                "email": t.email,
                "classes": by_teacher.get(t.user_id, []),
            }
            for t in teachers
        ]

    def create_teacher(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        class_id: Any = None,
    ) -> int:
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        class_id = optional_id(class_id, "Class")

        if self._users.get_by_email(email):
            raise ConflictError("Email is already registered")
        if class_id is not None and not self._classes.get_by_id(class_id):
            raise NotFoundError("Class not found")

        teacher_id = self._users.create_user(
            email=email,
            password_hash=generate_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=Role.TEACHER,
            class_id=class_id,
        )
        logger.info("Teacher created: id=%s class=%s", teacher_id, class_id)
        return teacher_id

    def update_teacher(self, teacher_id: int, payload: dict) -> None:
        """Apply the fields present in ``payload``; ``classId`` (even null) reassigns classes."""

        teacher = self._users.get_by_id(teacher_id)
        if not teacher or teacher.role != Role.TEACHER:
            raise NotFoundError("Teacher not found")

        first_name = last_name = email = password_hash = None
        if "firstName" in payload:
            first_name = require_non_empty(payload.get("firstName"), "First name")
        if "lastName" in payload:
            last_name = require_non_empty(payload.get("lastName"), "Last name")
        if "email" in payload:
            email = require_email(payload.get("email"))
            other = self._users.get_by_email(email)
            if other and other.user_id != teacher_id:
                raise ConflictError("Email is already registered")
        if payload.get("password"):
            require_min_length(payload["password"], "Password", MIN_PASSWORD_LENGTH)
            password_hash = generate_password_hash(payload["password"])

        reassign = "classId" in payload
        class_id = optional_id(payload.get("classId"), "Class") if reassign else None
        if class_id is not None and not self._classes.get_by_id(class_id):
            raise NotFoundError("Class not found")

        self._users.update_teacher(
            teacher_id=teacher_id,
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=password_hash,
            reassign_class=reassign,
            class_id=class_id,
        )
