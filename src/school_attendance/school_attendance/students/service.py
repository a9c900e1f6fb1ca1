from __future__ import annotations

import logging
import re
from typing import Any, Optional

from ..classes.repository import ClassRepository
from ..common.validators import require_id, require_non_empty
from ..core.exceptions import ConflictError, NotFoundError
from .model import StudentListRow
from .repository import StudentRepository

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"(\d+)")


def natural_key(value: Optional[str]) -> tuple:
    """Sort key that orders ``"2"`` before ``"10"`` (digit runs compare as numbers)."""
    parts = _DIGITS.split(str(value or ""))
    return tuple((0, int(p), "") if p.isdigit() else (1, 0, p.casefold()) for p in parts if p)


def _list_key(row: StudentListRow) -> tuple:
    return (natural_key(row.grade_level), natural_key(row.roll_number), row.student_id)


class StudentService:
    """Use case: manage the student roster (admin)."""

    def __init__(self, students: StudentRepository, classes: ClassRepository):
        self._students = students
        self._classes = classes

    def list_students(self) -> list[dict]:
        return [
            {
                "id": row.student_id,
                "firstName": row.first_name,
                "lastName": row.last_name,
                "rollNumber": row.roll_number,
                "classId": row.class_id,
                "className": row.class_name,
                "gradeLevel": row.grade_level,
            }
            for row in sorted(self._students.list_with_class(), key=_list_key)
        ]

    def create_student(
        self,
        *,
        first_name: Optional[str],
        last_name: Optional[str],
        roll_number: Any,
        class_id: Any,
    ) -> int:
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        roll_number = require_non_empty(None if roll_number is None else str(roll_number), "Roll number")
        class_id = self._check_class(require_id(class_id, "Class"))

        if self._students.find_by_roll_number(class_id, roll_number):
            raise ConflictError(f"Roll number {roll_number} is already used in this class")

        student_id = self._students.create_student(
            first_name=first_name,
            last_name=last_name,
            roll_number=roll_number,
            class_id=class_id,
        )
        logger.info("Student created: id=%s class=%s", student_id, class_id)
        return student_id

    def update_student(self, student_id: int, payload: dict) -> None:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")

        first_name = last_name = roll_number = class_id = None
        if "firstName" in payload:
            first_name = require_non_empty(payload.get("firstName"), "First name")
        if "lastName" in payload:
            last_name = require_non_empty(payload.get("lastName"), "Last name")
        if "rollNumber" in payload:
            raw = payload.get("rollNumber")
            roll_number = require_non_empty(None if raw is None else str(raw), "Roll number")
        if "classId" in payload:
            class_id = self._check_class(require_id(payload.get("classId"), "Class"))

        target_class = class_id if class_id is not None else student.class_id
        target_roll = roll_number if roll_number is not None else student.roll_number
        if self._students.find_by_roll_number(target_class, target_roll, exclude_id=student.student_id):
            raise ConflictError(f"Roll number {target_roll} is already used in this class")

        self._students.update_student(
            student_id=student.student_id,
            first_name=first_name,
            last_name=last_name,
            roll_number=roll_number,
            class_id=class_id,
        )

    def delete_student(self, student_id: int) -> None:
        if not self._students.get_by_id(student_id):
            raise NotFoundError("Student not found")
        self._students.delete_cascade(student_id)
        logger.info("Student deleted: id=%s", student_id)

    def _check_class(self, class_id: int) -> int:
        if not self._classes.get_by_id(class_id):
            raise NotFoundError("Class not found")
        return class_id
