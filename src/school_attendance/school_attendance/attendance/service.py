from __future__ import annotations

import calendar
import logging
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta
from typing import Any, Optional, Sequence

from ..classes.model import SchoolClass
from ..classes.repository import ClassRepository
from ..common.datetime_utils import days_between, iso_date
from ..common.rates import count_statuses, empty_counts
from ..core.constants import ATTENDANCE_CUTOFF_DAYS, DEFAULT_HISTORY_DAYS
from ..core.enums import AttendanceStatus
from ..core.exceptions import AuthorizationError, EditWindowExpiredError, NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .dashboard import DISPLAY_DEFAULT, project_dashboard
from .model import Submission
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def normalize_submissions(raw: Optional[Sequence[Any]]) -> list[Submission]:
    """Turn ``[{studentId, status}]`` payload entries into ``Submission`` values.

    Statuses use the client spelling (``present``...). A student listed twice keeps
    the last status given.
    """
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise ValidationError("submissions must be a list")

    by_student: dict[int, Submission] = {}
    for item in raw:
        if isinstance(item, Submission):
            by_student[item.student_id] = item
            continue
        if not isinstance(item, dict):
            raise ValidationError("Each submission must be an object with studentId and status")

        student_id = item.get("studentId", item.get("student_id"))
        try:
            student_id = int(student_id)
        except (TypeError, ValueError):
            raise ValidationError("studentId is required") from None
        try:
            status = AttendanceStatus.from_client(item.get("status", ""))
        except ValueError as e:
            raise ValidationError(str(e)) from None

        by_student.pop(student_id, None)
        by_student[student_id] = Submission(student_id=student_id, status=status)
    return list(by_student.values())


class AttendanceService:
    """Use cases for a teacher's daily attendance: draft, submit, correct and review.

    State per (teacher, class, day) is NO_DATA, DRAFT (draft rows only) or SUBMITTED
    (attendance records exist). Submitting removes that day's drafts in the same
    transaction as the record upserts.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        classes: ClassRepository,
        students: StudentRepository,
        *,
        cutoff_days: int = ATTENDANCE_CUTOFF_DAYS,
    ):
        self._attendance = attendance
        self._classes = classes
        self._students = students
        self._cutoff_days = int(cutoff_days)

    # ----- lifecycle -----

    def save_draft(self, teacher_id: int, class_id: int, submissions: Sequence[Any], *, now: datetime | None = None) -> None:
        now = now or datetime.now()
        today = now.date()
        entries = normalize_submissions(submissions)
        school_class = self._owned_class(teacher_id, class_id)
        self._check_roster(school_class, entries)

        with self._attendance.transaction() as tx:
            tx.delete_drafts(teacher_id=teacher_id, class_id=school_class.class_id, work_date=today)
            for entry in entries:
                tx.insert_draft(
                    teacher_id=teacher_id,
                    class_id=school_class.class_id,
                    student_id=entry.student_id,
                    work_date=today,
                    status=entry.status,
                )

        logger.info("Draft saved: teacher=%s class=%s entries=%d", teacher_id, school_class.class_id, len(entries))

    def submit_attendance(self, teacher_id: int, class_id: int, submissions: Sequence[Any], *, now: datetime | None = None) -> None:
        now = now or datetime.now()
        today = now.date()
        entries = normalize_submissions(submissions)
        school_class = self._owned_class(teacher_id, class_id)
        self._check_roster(school_class, entries)

        with self._attendance.transaction() as tx:
            for entry in entries:
                tx.upsert_record(
                    student_id=entry.student_id,
                    class_id=school_class.class_id,
                    work_date=today,
                    status=entry.status,
                    recorded_by=teacher_id,
                    recorded_at=now,
                )
            tx.delete_drafts(teacher_id=teacher_id, class_id=school_class.class_id, work_date=today)

        logger.info("Attendance submitted: teacher=%s class=%s entries=%d", teacher_id, school_class.class_id, len(entries))

    def update_attendance_by_date(
        self,
        teacher_id: int,
        class_id: int,
        work_date: date,
        submissions: Sequence[Any],
        *,
        now: datetime | None = None,
    ) -> None:
        now = now or datetime.now()
        today = now.date()

        age = days_between(work_date, today)
        if age < 0:
            raise ValidationError("Attendance cannot be recorded for a future date")
        if age > self._cutoff_days:
            logger.warning(
                "Correction rejected: teacher=%s class=%s date=%s is %d days old",
                teacher_id, class_id, iso_date(work_date), age,
            )
            raise EditWindowExpiredError("Editing window has expired for this entry")

        entries = normalize_submissions(submissions)
        school_class = self._owned_class(teacher_id, class_id)
        self._check_roster(school_class, entries)

        with self._attendance.transaction() as tx:
            for entry in entries:
                tx.upsert_record(
                    student_id=entry.student_id,
                    class_id=school_class.class_id,
                    work_date=work_date,
                    status=entry.status,
                    recorded_by=teacher_id,
                    recorded_at=now,
                )

        logger.info(
            "Attendance corrected: teacher=%s class=%s date=%s entries=%d",
            teacher_id, school_class.class_id, iso_date(work_date), len(entries),
        )

    def is_editable(self, work_date: date, today: date) -> bool:
        return 0 <= days_between(work_date, today) <= self._cutoff_days

    # ----- views -----

    def get_dashboard(self, teacher_id: int, *, now: datetime | None = None) -> dict:
        now = now or datetime.now()
        today = now.date()

        primary = self._primary_class(teacher_id)
        if primary is None:
            return project_dashboard(school_class=None, students=[], records=[], drafts=[], now=now)

        students = self._students.list_for_classes([primary.class_id])
        records = self._attendance.list_records(
            start_date=today,
            end_date=today,
            student_ids=[s.student_id for s in students],
        )
        drafts = self._attendance.list_drafts(teacher_id=teacher_id, class_id=primary.class_id, work_date=today)
        return project_dashboard(school_class=primary, students=students, records=records, drafts=drafts, now=now)

    def get_notifications(self, teacher_id: int, *, now: datetime | None = None) -> list[dict]:
        return self.get_dashboard(teacher_id, now=now)["notifications"]

    def get_history(
        self,
        teacher_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: datetime | None = None,
    ) -> dict:
        """Per-day counts of what this teacher recorded, newest day first."""

        now = now or datetime.now()
        today = now.date()
        start = start or today - timedelta(days=DEFAULT_HISTORY_DAYS - 1)
        end = end or today

        classes = self._classes.list_for_teacher(teacher_id)
        records = []
        if classes:
            records = self._attendance.list_records(
                start_date=start,
                end_date=end,
                class_ids=[c.class_id for c in classes],
                recorded_by=teacher_id,
            )

        grouped: dict[date, dict] = {}
        for r in records:
            day = grouped.get(r.work_date)
            if not day:
                day = empty_counts()
                del day["total"]
                grouped[r.work_date] = day
            day[r.status.to_client()] += 1

        summaries = []
        totals = {"present": 0, "absent": 0, "late": 0, "leave": 0}
        for work_date in sorted(grouped, reverse=True):
            counts = grouped[work_date]
            for key in totals:
                totals[key] += counts[key]
            summaries.append({"date": iso_date(work_date), **counts, "editable": self.is_editable(work_date, today)})

        return {
            "range": {"startDate": iso_date(start), "endDate": iso_date(end)},
            "summaries": summaries,
            "totals": totals,
        }

    def get_details(self, teacher_id: int, work_date: date, *, now: datetime | None = None) -> list[dict]:
        now = now or datetime.now()
        classes = self._classes.list_for_teacher(teacher_id)
        if not classes:
            return []

        students = self._students.list_for_classes([c.class_id for c in classes])
        records = self._attendance.list_records(
            start_date=work_date,
            end_date=work_date,
            class_ids=[c.class_id for c in classes],
        )
        record_map = {r.student_id: r for r in records}
        editable = self.is_editable(work_date, now.date())

        out = []
        for school_class in classes:
            roster = [s for s in students if s.class_id == school_class.class_id]
            out.append(
                {
                    "classId": school_class.class_id,
                    "className": school_class.name,
                    "submissions": [
                        {
                            "studentId": s.student_id,
                            "studentName": s.full_name,
                            "rollNumber": s.roll_number,
                            "status": (record_map[s.student_id].status if s.student_id in record_map else DISPLAY_DEFAULT).to_client(),
                        }
                        for s in roster
                    ],
                    "editable": editable,
                }
            )
        return out

    def list_class_students(self, teacher_id: int, class_id: int) -> list[dict]:
        school_class = self._classes.get_by_id(class_id)
        if not school_class or school_class.teacher_id != teacher_id:
            raise NotFoundError("Class not found")

        return [
            {
                "id": s.student_id,
                "firstName": s.first_name,
                "lastName": s.last_name,
                "rollNumber": s.roll_number,
                "classId": school_class.class_id,
            }
            for s in self._students.list_for_classes([school_class.class_id])
        ]

    def student_monthly_attendance(
        self,
        teacher_id: int,
        student_id: int,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        now: datetime | None = None,
    ) -> dict:
        now = now or datetime.now()
        month = int(month or now.month)
        year = int(year or now.year)
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")
        if not MINYEAR <= year <= MAXYEAR:
            raise ValidationError(f"year must be between {MINYEAR} and {MAXYEAR}")

        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        school_class = self._classes.get_by_id(student.class_id)
        if not school_class or school_class.teacher_id != teacher_id:
            raise NotFoundError("Student not found")

        first = date(year, month, 1)
        last = date(year, month, calendar.monthrange(year, month)[1])
        records = self._attendance.list_records(start_date=first, end_date=last, student_ids=[student.student_id])

        return {
            "studentId": student.student_id,
            "studentName": student.full_name,
            "month": month,
            "year": year,
            "days": [{"date": iso_date(r.work_date), "status": r.status.to_client()} for r in records],
            "summary": count_statuses(r.status for r in records),
        }

    # ----- helpers -----

    def _primary_class(self, teacher_id: int) -> Optional[SchoolClass]:
        classes = self._classes.list_for_teacher(teacher_id)
        return classes[0] if classes else None

    def _owned_class(self, teacher_id: int, class_id: int) -> SchoolClass:
        school_class = self._classes.get_by_id(class_id)
        if not school_class:
            raise NotFoundError("Class not found")
        if school_class.teacher_id != teacher_id:
            raise AuthorizationError("You are not assigned to this class")
        return school_class

    def _check_roster(self, school_class: SchoolClass, entries: Sequence[Submission]) -> None:
        if not entries:
            return
        roster: set[int] = {s.student_id for s in self._students.list_for_classes([school_class.class_id])}
        unknown = [e.student_id for e in entries if e.student_id not in roster]
        if unknown:
            raise ValidationError(f"Students not in {school_class.name}: {', '.join(str(i) for i in unknown)}")
