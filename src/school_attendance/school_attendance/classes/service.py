from __future__ import annotations

import logging
from typing import Any, Optional

from ..common.rates import present_fraction
from ..common.validators import optional_id, require_non_empty
from ..core.enums import Role
from ..core.exceptions import ConflictError, NotFoundError
from ..users.repository import UserRepository
from .repository import ClassRepository

logger = logging.getLogger(__name__)


class ClassService:
    """Use case: manage classes (admin). A class is named after its grade level."""

    def __init__(self, classes: ClassRepository, users: UserRepository):
        self._classes = classes
        self._users = users

    def list_classes(self) -> list[dict]:
        return [
            {
                "id": row.class_id,
                "name": row.name,
                "gradeLevel": row.grade_level,
                "teacherId": row.teacher_id,
                "teacherName": row.teacher_name,
                "studentCount": row.student_count,
                "attendanceRate": present_fraction(row.present_count, row.record_count),
            }
            for row in self._classes.list_overview()
        ]

    def record_class(self, *, grade_level: Optional[str], teacher_id: Any = None) -> int:
        grade_level = require_non_empty(grade_level, "Grade level")
        teacher_id = self._check_teacher(optional_id(teacher_id, "Teacher"))

        if self._classes.find_by_grade_level(grade_level):
            raise ConflictError(f"A class for grade level {grade_level} already exists")

        class_id = self._classes.create_class(name=grade_level, grade_level=grade_level, teacher_id=teacher_id)
        logger.info("Class created: id=%s grade=%s teacher=%s", class_id, grade_level, teacher_id)
        return class_id

    def update_class(self, class_id: int, payload: dict) -> None:
        """Apply ``gradeLevel`` and/or ``teacherId`` from ``payload``; a null teacher unassigns."""

        if not self._classes.get_by_id(class_id):
            raise NotFoundError("Class not found")

        grade_level = None
        if "gradeLevel" in payload:
            grade_level = require_non_empty(payload.get("gradeLevel"), "Grade level")
            if self._classes.find_by_grade_level(grade_level, exclude_id=class_id):
                raise ConflictError(f"A class for grade level {grade_level} already exists")

        set_teacher = "teacherId" in payload
        teacher_id = self._check_teacher(optional_id(payload.get("teacherId"), "Teacher")) if set_teacher else None

        self._classes.update_class(
            class_id=class_id,
            name=grade_level,
            grade_level=grade_level,
            set_teacher=set_teacher,
            teacher_id=teacher_id,
        )

    def delete_class(self, class_id: int) -> None:
        if not self._classes.get_by_id(class_id):
            raise NotFoundError("Class not found")
        self._classes.delete_cascade(class_id)
        logger.info("Class deleted: id=%s", class_id)

    def _check_teacher(self, teacher_id: Optional[int]) -> Optional[int]:
        if teacher_id is None:
            return None
        teacher = self._users.get_by_id(teacher_id)
        if not teacher or teacher.role != Role.TEACHER:
            raise NotFoundError("Teacher not found")
        return teacher_id
