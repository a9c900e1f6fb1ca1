from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    student_id: int
    first_name: str
    last_name: str
    roll_number: str
    class_id: int

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class StudentListRow:
    """Read-model for the admin student list (student joined with its class)."""

    student_id: int
    first_name: str
    last_name: str
    roll_number: str
    class_id: int
    class_name: Optional[str]
    grade_level: Optional[str]
