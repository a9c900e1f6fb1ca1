from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from ..attendance.model import AttendanceDetailRow
from ..attendance.repository import AttendanceRepository
from ..classes.repository import ClassRepository
from ..common.datetime_utils import iso_date
from ..common.rates import add_status, count_statuses, empty_counts, format_percentage, present_fraction, rounded_rate
from ..core.constants import DEFAULT_HISTORY_DAYS, OVERVIEW_HISTORY_DAYS
from ..core.enums import AttendanceStatus, Period, Role
from ..core.exceptions import NotFoundError
from ..periods.resolver import DateRange, resolve_period
from ..students.repository import StudentRepository
from ..users.repository import UserRepository


def _by_name(row: dict):
    return (row["name"].casefold(), row["id"])


def group_breakdown(
    rows: Sequence[AttendanceDetailRow],
    key: Callable[[AttendanceDetailRow], tuple[int, str]],
) -> list[dict]:
    """Count statuses per entity; ``key`` maps a row to ``(id, name)``. Sorted by name."""
    groups: dict[int, dict] = {}
    for row in rows:
        entity_id, name = key(row)
        group = groups.get(entity_id)
        if not group:
            group = {"id": entity_id, "name": name, **empty_counts()}
            groups[entity_id] = group
        add_status(group, row.status)
    return sorted(groups.values(), key=_by_name)


def detail_records(rows: Sequence[AttendanceDetailRow]) -> list[dict]:
    return [
        {
            "id": r.record_id,
            "studentId": r.student_id,
            "studentName": r.student_name,
            "className": r.class_name,
            "status": r.status.value,
            "date": iso_date(r.work_date),
        }
        for r in rows
    ]


class ReportService:
    """Read-only attendance reports over a resolved period.

    Every report resolves its period first, loads the records in range, then groups
    them. Nothing here writes to the store.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        classes: ClassRepository,
        students: StudentRepository,
        users: UserRepository,
    ):
        self._attendance = attendance
        self._classes = classes
        self._students = students
        self._users = users

    def class_attendance_summary(
        self,
        class_id: int,
        *,
        period: Period = Period.DAILY,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: datetime | None = None,
    ) -> dict:
        school_class = self._classes.get_by_id(class_id)
        if not school_class:
            raise NotFoundError("Class not found")

        rng = resolve_period(period, start, end, reference_end=now)
        rows = self._attendance.list_detail_rows(start_date=rng.start_date, end_date=rng.end_date, class_id=class_id)
        summary = count_statuses(r.status for r in rows)

        return {
            **self._header(period, rng),
            "summary": summary,
            "attendanceRate": format_percentage(summary["present"], summary["total"]),
            "students": group_breakdown(rows, lambda r: (r.student_id, r.student_name)),
            "records": detail_records(rows),
        }

    def school_attendance_summary(
        self,
        *,
        period: Period = Period.DAILY,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: datetime | None = None,
    ) -> dict:
        rng = resolve_period(period, start, end, reference_end=now)
        rows = self._attendance.list_detail_rows(start_date=rng.start_date, end_date=rng.end_date)
        summary = count_statuses(r.status for r in rows)

        return {
            **self._header(period, rng),
            "summary": summary,
            "attendanceRate": format_percentage(summary["present"], summary["total"]),
            "classes": group_breakdown(rows, lambda r: (r.class_id, r.class_name)),
            "records": detail_records(rows),
        }

    def student_daily_attendance(
        self,
        *,
        period: Period = Period.WEEKLY,
        class_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: datetime | None = None,
    ) -> dict:
        if class_id is not None and not self._classes.get_by_id(class_id):
            raise NotFoundError("Class not found")

        rng = resolve_period(period, start, end, reference_end=now)
        rows = self._attendance.list_detail_rows(start_date=rng.start_date, end_date=rng.end_date, class_id=class_id)

        students: dict[int, dict] = {}
        for r in rows:
            entry = students.get(r.student_id)
            if not entry:
                entry = {
                    "id": r.student_id,
                    "name": r.student_name,
                    "className": r.class_name,
                    "classId": r.class_id,
                    "dailyRecords": [],
                    "summary": empty_counts(),
                }
                students[r.student_id] = entry
            entry["dailyRecords"].append({"date": iso_date(r.work_date), "status": r.status.value})
            add_status(entry["summary"], r.status)

        return {
            **self._header(period, rng),
            "students": sorted(students.values(), key=_by_name),
        }

    def teacher_detail(
        self,
        teacher_id: int,
        *,
        period: Period = Period.MONTHLY,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: datetime | None = None,
    ) -> dict:
        teacher = self._users.get_by_id(teacher_id)
        if not teacher or teacher.role != Role.TEACHER:
            raise NotFoundError("Teacher not found")

        rng = resolve_period(period, start, end, reference_end=now)
        own = self._attendance.list_teacher_attendance(
            teacher_id=teacher_id,
            start_date=rng.start_date,
            end_date=rng.end_date,
        )
        summary = count_statuses(a.status for a in own)

        return {
            "teacher": {
                "id": teacher.user_id,
                "firstName": teacher.first_name,
                "lastName": teacher.last_name,
                "email": teacher.email,
            },
            "classes": self._teacher_classes(teacher_id),
            "attendance": summary,
            "attendanceRate": format_percentage(summary["present"], summary["total"]),
            **self._header(period, rng),
        }

    def teacher_profile(self, teacher_id: int, *, now: datetime | None = None) -> dict:
        """Teacher's own view: trailing 30-day attendance with a whole-number rate."""

        now = now or datetime.now()
        teacher = self._users.get_by_id(teacher_id)
        if not teacher:
            raise NotFoundError("Teacher not found")

        today = now.date()
        own = self._attendance.list_teacher_attendance(
            teacher_id=teacher_id,
            start_date=today - timedelta(days=DEFAULT_HISTORY_DAYS - 1),
            end_date=today,
        )
        summary = count_statuses(a.status for a in own)

        return {
            "teacher": {"id": teacher.user_id, "name": teacher.full_name, "email": teacher.email},
            "classes": self._teacher_classes(teacher_id),
            "attendanceSummary": {
                **summary,
                "attendanceRate": rounded_rate(summary["present"], summary["total"], empty=100),
            },
        }

    def class_attendance_log(self, class_id: int) -> list[dict]:
        if not self._classes.get_by_id(class_id):
            raise NotFoundError("Class not found")

        out = []
        for r in self._attendance.list_for_class(class_id):
            row = {"date": iso_date(r.work_date), "present": 0, "absent": 0, "late": 0, "leave": 0}
            row[r.status.to_client()] = 1
            out.append(row)
        return out

    def overview(self, *, now: datetime | None = None) -> dict:
        now = now or datetime.now()
        today = now.date()
        first_day = today - timedelta(days=OVERVIEW_HISTORY_DAYS - 1)

        buckets = {
            first_day + timedelta(days=i): {"present": 0, "absent": 0}
            for i in range(OVERVIEW_HISTORY_DAYS)
        }
        records = self._attendance.list_records(start_date=first_day, end_date=today)
        for r in records:
            bucket = buckets.get(r.work_date)
            if bucket is None:
                continue
            if r.status == AttendanceStatus.PRESENT:
                bucket["present"] += 1
            else:
                bucket["absent"] += 1

        present = sum(b["present"] for b in buckets.values())
        total = sum(b["present"] + b["absent"] for b in buckets.values())

        class_rows = self._classes.list_overview()
        teachers = self._users.list_by_role(Role.TEACHER)
        assigned = {row.teacher_id for row in class_rows if row.teacher_id is not None}

        return {
            "students": {"total": self._students.count_all(), "delta": 0},
            "attendance": {
                "rate": present_fraction(present, total),
                "history": [{"date": iso_date(d), **counts} for d, counts in sorted(buckets.items())],
            },
            "teachers": {
                "coverage": f"{sum(1 for t in teachers if t.user_id in assigned)}/{len(teachers)}",
            },
            "classes": {
                "distribution": [
                    {
                        "id": row.class_id,
                        "name": row.name,
                        "students": row.student_count,
                        "attendance": rounded_rate(row.present_count, row.record_count),
                        "gradeLevel": row.grade_level,
                        "teacherName": row.teacher_name,
                    }
                    for row in class_rows
                ]
            },
        }

    def _teacher_classes(self, teacher_id: int) -> list[dict]:
        return [
            {
                "id": row.class_id,
                "name": row.name,
                "gradeLevel": row.grade_level,
                "studentCount": row.student_count,
            }
            for row in self._classes.list_overview()
            if row.teacher_id == teacher_id
        ]

    @staticmethod
    def _header(period: Period, rng: DateRange) -> dict:
        return {"period": period.value, **rng.as_dict()}
