from __future__ import annotations

from datetime import date, datetime
from typing import ContextManager, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceDetailRow, AttendanceDraft, AttendanceRecord, TeacherAttendance


class AttendanceTransaction(Protocol):
    """Handle given out by ``AttendanceRepository.transaction()``.

    Writes issued through one handle commit together or not at all.
    """

    def upsert_record(
        self,
        *,
        student_id: int,
        class_id: int,
        work_date: date,
        status: AttendanceStatus,
        recorded_by: int,
        recorded_at: datetime,
    ) -> None:
        """Create the (student_id, work_date) record, or update status/recorded_by/recorded_at.

        The class snapshot of an existing record is kept.
        """

        raise NotImplementedError

    def insert_draft(
        self,
        *,
        teacher_id: int,
        class_id: int,
        student_id: int,
        work_date: date,
        status: AttendanceStatus,
    ) -> None:
        raise NotImplementedError

    def delete_drafts(self, *, teacher_id: int, class_id: int, work_date: date) -> int:
        raise NotImplementedError


class AttendanceRepository(Protocol):
    def transaction(self) -> ContextManager[AttendanceTransaction]:
        raise NotImplementedError

    def list_records(
        self,
        *,
        start_date: date,
        end_date: date,
        class_ids: Optional[Sequence[int]] = None,
        student_ids: Optional[Sequence[int]] = None,
        recorded_by: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records with ``start_date <= work_date <= end_date``, oldest first."""

        raise NotImplementedError

    def list_detail_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        class_id: Optional[int] = None,
    ) -> Sequence[AttendanceDetailRow]:
        """Records joined with student and class, newest first then student first name."""

        raise NotImplementedError

    def list_for_class(self, class_id: int) -> Sequence[AttendanceRecord]:
        """Every record of a class, newest first."""

        raise NotImplementedError

    def list_drafts(self, *, teacher_id: int, class_id: int, work_date: date) -> Sequence[AttendanceDraft]:
        raise NotImplementedError

    def list_teacher_attendance(self, *, teacher_id: int, start_date: date, end_date: date) -> Sequence[TeacherAttendance]:
        raise NotImplementedError

    def upsert_teacher_attendance(self, *, teacher_id: int, work_date: date, status: AttendanceStatus) -> None:
        raise NotImplementedError
