from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SchoolClass:
    """Domain entity: a class. Grade level is unique across classes."""

    class_id: int
    name: str
    grade_level: str
    teacher_id: Optional[int] = None


@dataclass(frozen=True)
class ClassOverviewRow:
    """Read-model for admin listings (class joined with teacher, roster and record counts)."""

    class_id: int
    name: str
    grade_level: str
    teacher_id: Optional[int]
    teacher_name: Optional[str]
    student_count: int
    record_count: int
    present_count: int
