"""Teacher dashboard projection for today.

Pure functions over already-loaded rows. A student with neither a record nor a
draft is shown as ``present``; that default exists only in this view and is never
written to the store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..classes.model import SchoolClass
from ..common.datetime_utils import iso_date
from ..common.rates import empty_counts
from ..core.enums import AttendanceStatus, DayStatus
from ..students.model import Student
from .model import AttendanceDraft, AttendanceRecord

DISPLAY_DEFAULT = AttendanceStatus.PRESENT


def resolve_day_status(
    *,
    has_class: bool,
    students: Sequence[Student],
    recorded_ids: set[int],
    draft_count: int,
) -> DayStatus:
    if not has_class:
        return DayStatus.NO_CLASS
    if all(s.student_id in recorded_ids for s in students):
        return DayStatus.SUBMITTED
    if draft_count > 0:
        return DayStatus.DRAFT
    return DayStatus.PENDING


def _stamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="seconds") if value else None


def build_notifications(
    *,
    school_class: Optional[SchoolClass],
    day_status: DayStatus,
    student_count: int,
    now: datetime,
) -> list[dict]:
    stamp = now.isoformat(timespec="seconds")
    if school_class is None:
        return [
            {
                "id": "no-class",
                "message": "No classes assigned. Contact the administrator for assistance.",
                "type": "info",
                "date": stamp,
            }
        ]

    notifications = []
    if day_status != DayStatus.SUBMITTED:
        notifications.append(
            {
                "id": "attendance-reminder",
                "message": f"Attendance for {school_class.name} is {day_status.value}. Please review and submit.",
                "type": "warning",
                "date": stamp,
            }
        )
    if not student_count:
        notifications.append(
            {
                "id": "no-students",
                "message": "No students are assigned to this class yet.",
                "type": "info",
                "date": stamp,
            }
        )
    return notifications


def project_dashboard(
    *,
    school_class: Optional[SchoolClass],
    students: Sequence[Student],
    records: Sequence[AttendanceRecord],
    drafts: Sequence[AttendanceDraft],
    now: datetime,
) -> dict:
    today = now.date()
    record_map = {r.student_id: r for r in records}
    draft_map = {d.student_id: d for d in drafts}

    day_status = resolve_day_status(
        has_class=school_class is not None,
        students=students,
        recorded_ids=set(record_map),
        draft_count=len(drafts),
    )

    submissions = []
    summary = empty_counts()
    del summary["total"]
    for student in students:
        record = record_map.get(student.student_id)
        draft = draft_map.get(student.student_id)
        if record:
            status = record.status
        elif draft:
            status = draft.status
        else:
            status = DISPLAY_DEFAULT

        summary[status.to_client()] += 1
        submissions.append(
            {
                "studentId": student.student_id,
                "studentName": student.full_name,
                "rollNumber": student.roll_number,
                "status": status.to_client(),
                "hasRecord": record is not None,
                "isDraft": record is None and draft is not None,
                "lastUpdated": _stamp(record.recorded_at) if record else _stamp(draft.updated_at) if draft else None,
            }
        )

    roster_ids = {s.student_id for s in students}
    roster_records = [r for r in records if r.student_id in roster_ids]
    last_submitted = max((r.recorded_at for r in roster_records), default=None)

    return {
        "date": iso_date(today),
        "classId": school_class.class_id if school_class else None,
        "className": school_class.name if school_class else None,
        "totalStudents": len(students),
        "attendanceStatus": day_status.value,
        "summary": summary,
        "submissions": submissions,
        "quickActions": {
            "lastSubmittedAt": _stamp(last_submitted),
            "pendingStudents": len(students) - len(roster_records),
            "draftCount": len(drafts),
        },
        "notifications": build_notifications(
            school_class=school_class,
            day_status=day_status,
            student_count=len(students),
            now=now,
        ),
    }
