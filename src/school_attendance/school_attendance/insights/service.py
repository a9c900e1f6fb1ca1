from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..classes.repository import ClassRepository
from ..common.datetime_utils import iso_date
from ..common.rates import rounded_rate
from ..core.constants import (
    ANALYTICS_WINDOW_DAYS,
    INSIGHTS_WINDOW_DAYS,
    LOW_ATTENDANCE_THRESHOLD,
    MIN_ABSENCE_STREAK,
    MONTHLY_TREND_BUCKETS,
    MONTHLY_TREND_DAYS,
    PEAK_ABSENCE_DAYS_LIMIT,
    WEEKLY_TREND_BUCKETS,
)
from ..core.enums import AttendanceStatus
from ..students.model import Student
from ..students.repository import StudentRepository


def present_rate(records: Sequence[AttendanceRecord], *, empty: int = 0) -> int:
    present = sum(1 for r in records if r.status == AttendanceStatus.PRESENT)
    return rounded_rate(present, len(records), empty=empty)


def absence_streak(records: Sequence[AttendanceRecord]) -> tuple[int, Optional[date]]:
    """Length of the trailing run of ABSENT records and the newest date in it.

    ``records`` must be oldest first. The run is counted by record order, so gaps in
    the calendar do not break it.
    """
    streak = 0
    last_absent: Optional[date] = None
    for record in reversed(records):
        if record.status != AttendanceStatus.ABSENT:
            break
        streak += 1
        if last_absent is None:
            last_absent = record.work_date
    return streak, last_absent


def low_attendance_students(
    students: Sequence[Student],
    records_by_student: dict[int, list[AttendanceRecord]],
    class_names: dict[int, str],
    *,
    threshold: int = LOW_ATTENDANCE_THRESHOLD,
) -> list[dict]:
    out = []
    for student in students:
        entries = records_by_student.get(student.student_id) or []
        if not entries:
            continue
        rate = present_rate(entries, empty=100)
        if rate < threshold:
            out.append(
                {
                    "studentId": student.student_id,
                    "studentName": student.full_name,
                    "className": class_names.get(student.class_id),
                    "attendanceRate": rate,
                    "present": sum(1 for r in entries if r.status == AttendanceStatus.PRESENT),
                    "total": len(entries),
                }
            )
    out.sort(key=lambda x: x["attendanceRate"])
    return out


def consecutive_absences(
    students: Sequence[Student],
    records_by_student: dict[int, list[AttendanceRecord]],
    class_names: dict[int, str],
    *,
    min_streak: int = MIN_ABSENCE_STREAK,
) -> list[dict]:
    out = []
    for student in students:
        entries = records_by_student.get(student.student_id) or []
        streak, last_absent = absence_streak(entries)
        if streak >= min_streak:
            out.append(
                {
                    "studentId": student.student_id,
                    "studentName": student.full_name,
                    "className": class_names.get(student.class_id),
                    "streak": streak,
                    "lastAbsentDate": iso_date(last_absent) if last_absent else None,
                }
            )
    out.sort(key=lambda x: x["streak"], reverse=True)
    return out


def _label(start: date, end: date) -> str:
    return f"{start:%b} {start.day} - {end:%b} {end.day}"


def _within(records: Sequence[AttendanceRecord], start: date, end: date) -> list[AttendanceRecord]:
    return [r for r in records if start <= r.work_date <= end]


class InsightsService:
    """Trailing-window scans over a teacher's classes (not driven by report periods)."""

    def __init__(self, attendance: AttendanceRepository, classes: ClassRepository, students: StudentRepository):
        self._attendance = attendance
        self._classes = classes
        self._students = students

    def student_insights(self, teacher_id: int, *, now: datetime | None = None) -> dict:
        now = now or datetime.now()
        today = now.date()
        start = today - timedelta(days=INSIGHTS_WINDOW_DAYS - 1)
        period = {"startDate": iso_date(start), "endDate": iso_date(today)}

        classes = self._classes.list_for_teacher(teacher_id)
        if not classes:
            return {"period": period, "lowAttendanceStudents": [], "consecutiveAbsences": []}

        class_names = {c.class_id: c.name for c in classes}
        students = self._students.list_for_classes(list(class_names))
        records = self._attendance.list_records(
            start_date=start,
            end_date=today,
            student_ids=[s.student_id for s in students],
        )

        by_student: dict[int, list[AttendanceRecord]] = defaultdict(list)
        for r in sorted(records, key=lambda r: (r.work_date, r.record_id)):
            by_student[r.student_id].append(r)

        return {
            "period": period,
            "lowAttendanceStudents": low_attendance_students(students, by_student, class_names),
            "consecutiveAbsences": consecutive_absences(students, by_student, class_names),
        }

    def class_analytics(self, teacher_id: int, *, now: datetime | None = None) -> dict:
        now = now or datetime.now()
        today = now.date()

        classes = self._classes.list_for_teacher(teacher_id)
        if not classes:
            return {"weeklyTrend": [], "monthlyTrend": [], "peakAbsenceDays": []}

        span = max(ANALYTICS_WINDOW_DAYS, WEEKLY_TREND_BUCKETS * 7, MONTHLY_TREND_BUCKETS * MONTHLY_TREND_DAYS)
        earliest = today - timedelta(days=span - 1)
        school_records = self._attendance.list_records(start_date=earliest, end_date=today)
        class_ids = {c.class_id for c in classes}
        class_records = [r for r in school_records if r.class_id in class_ids]

        def trend(buckets: int, days: int, key: str) -> list[dict]:
            out = []
            for offset in range(buckets):
                bucket_end = today - timedelta(days=offset * days)
                bucket_start = bucket_end - timedelta(days=days - 1)
                out.insert(
                    0,
                    {
                        key: _label(bucket_start, bucket_end),
                        "classRate": present_rate(_within(class_records, bucket_start, bucket_end)),
                        "schoolRate": present_rate(_within(school_records, bucket_start, bucket_end)),
                    },
                )
            return out

        peak_start = today - timedelta(days=ANALYTICS_WINDOW_DAYS - 1)
        absences = Counter(
            r.work_date
            for r in _within(class_records, peak_start, today)
            if r.status == AttendanceStatus.ABSENT
        )
        peak_days = sorted(absences.items(), key=lambda item: (-item[1], item[0]))[:PEAK_ABSENCE_DAYS_LIMIT]

        return {
            "weeklyTrend": trend(WEEKLY_TREND_BUCKETS, 7, "week"),
            "monthlyTrend": trend(MONTHLY_TREND_BUCKETS, MONTHLY_TREND_DAYS, "month"),
            "peakAbsenceDays": [{"date": iso_date(d), "count": n} for d, n in peak_days],
        }
