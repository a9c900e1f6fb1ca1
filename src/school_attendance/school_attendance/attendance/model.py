from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: submitted attendance, unique per (student_id, work_date).

    ``class_id`` is a snapshot of the student's class when the record was created.
    """

    record_id: int
    student_id: int
    class_id: int
    work_date: date
    status: AttendanceStatus
    recorded_by: int
    recorded_at: datetime


@dataclass(frozen=True)
class AttendanceDraft:
    """Unsubmitted mark, unique per (teacher_id, class_id, student_id, work_date)."""

    draft_id: int
    teacher_id: int
    class_id: int
    student_id: int
    work_date: date
    status: AttendanceStatus
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class TeacherAttendance:
    teacher_id: int
    work_date: date
    status: AttendanceStatus


@dataclass(frozen=True)
class Submission:
    """One ``{studentId, status}`` entry of a draft/submit/correction payload."""

    student_id: int
    status: AttendanceStatus


@dataclass(frozen=True)
class AttendanceDetailRow:
    """Read-model for reports: a record joined with its student and class."""

    record_id: int
    student_id: int
    first_name: str
    last_name: str
    class_id: int
    class_name: str
    work_date: date
    status: AttendanceStatus

    @property
    def student_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
