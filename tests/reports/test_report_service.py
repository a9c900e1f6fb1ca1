from __future__ import annotations

from datetime import date, datetime

import pytest

from src.school_attendance.school_attendance.common.rates import format_percentage, rounded_rate
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, Period, Role
from src.school_attendance.school_attendance.core.exceptions import NotFoundError

D1 = date(2024, 3, 11)
D2 = date(2024, 3, 12)


@pytest.fixture
def three_students(db):
    klass = db.add_class("Grade 3")
    students = [
        db.add_student("Amy", "Zane", klass.class_id, "01"),
        db.add_student("bob", "Young", klass.class_id, "02"),
        db.add_student("Cal", "Xu", klass.class_id, "03"),
    ]
    for s in students:
        db.add_record(s, D1, AttendanceStatus.PRESENT)
    db.add_record(students[0], D2, AttendanceStatus.PRESENT)
    db.add_record(students[1], D2, AttendanceStatus.ABSENT)
    db.add_record(students[2], D2, AttendanceStatus.PRESENT)
    return klass, students


def test_class_summary_counts_and_per_student_breakdown(container, three_students):
    klass, students = three_students

    report = container.report_service.class_attendance_summary(klass.class_id, start=D1, end=D2)

    assert report["summary"] == {"total": 6, "present": 5, "absent": 1, "late": 0, "leave": 0}
    assert report["attendanceRate"] == "83.3"
    assert report["startDate"] == "2024-03-11"
    assert report["endDate"] == "2024-03-12"

    absent = next(s for s in report["students"] if s["id"] == students[1].student_id)
    assert (absent["present"], absent["absent"], absent["total"]) == (1, 1, 2)
    assert [s["name"] for s in report["students"]] == ["Amy Zane", "bob Young", "Cal Xu"]
    assert report["records"][0]["date"] == "2024-03-12"
    assert {r["status"] for r in report["records"]} == {"PRESENT", "ABSENT"}


def test_class_summary_with_no_records_is_all_zero(container, db, fixed_now):
    klass = db.add_class("Grade 4")

    report = container.report_service.class_attendance_summary(klass.class_id, period=Period.WEEKLY, now=fixed_now)

    assert report["summary"] == {"total": 0, "present": 0, "absent": 0, "late": 0, "leave": 0}
    assert report["attendanceRate"] == "0.0"
    assert report["students"] == []
    assert report["period"] == "weekly"


def test_class_summary_unknown_class(container):
    with pytest.raises(NotFoundError):
        container.report_service.class_attendance_summary(404)


def test_records_outside_range_are_ignored(container, three_students):
    klass, _ = three_students

    report = container.report_service.class_attendance_summary(
        klass.class_id, period=Period.DAILY, now=datetime(2024, 3, 12, 9, 0)
    )

    assert report["summary"]["total"] == 3
    assert report["summary"]["absent"] == 1


def test_school_summary_groups_by_class(container, db, three_students):
    klass, _ = three_students
    other = db.add_class("Grade 1")
    db.add_record(db.add_student("Dan", "Wu", other.class_id), D2, AttendanceStatus.LATE)

    report = container.report_service.school_attendance_summary(start=D1, end=D2)

    assert report["summary"]["total"] == 7
    assert [c["name"] for c in report["classes"]] == ["Grade 1", "Grade 3"]
    assert report["classes"][0]["late"] == 1


def test_student_daily_attendance(container, three_students):
    klass, students = three_students

    report = container.report_service.student_daily_attendance(class_id=klass.class_id, start=D1, end=D2)

    bob = next(s for s in report["students"] if s["id"] == students[1].student_id)
    assert sorted(bob["dailyRecords"], key=lambda r: r["date"]) == [
        {"date": "2024-03-11", "status": "PRESENT"},
        {"date": "2024-03-12", "status": "ABSENT"},
    ]
    assert bob["summary"]["total"] == 2
    assert bob["className"] == "Grade 3"


def test_teacher_detail_and_profile(container, db, fixed_now):
    teacher = db.add_user("t@school.com", role=Role.TEACHER, first_name="Tia", last_name="Ng")
    klass = db.add_class("Prep", teacher.user_id)
    db.add_student("Ann", "Bell", klass.class_id)
    for day, status in [(date(2024, 3, 11), AttendanceStatus.PRESENT), (date(2024, 3, 12), AttendanceStatus.ABSENT),
                        (date(2024, 3, 13), AttendanceStatus.PRESENT)]:
        container.attendance_repo.upsert_teacher_attendance(teacher_id=teacher.user_id, work_date=day, status=status)

    detail = container.report_service.teacher_detail(teacher.user_id, now=fixed_now)
    assert detail["attendance"] == {"total": 3, "present": 2, "absent": 1, "late": 0, "leave": 0}
    assert detail["attendanceRate"] == "66.7"
    assert detail["classes"] == [{"id": klass.class_id, "name": "Prep", "gradeLevel": "Prep", "studentCount": 1}]

    profile = container.report_service.teacher_profile(teacher.user_id, now=fixed_now)
    assert profile["attendanceSummary"]["attendanceRate"] == 67

    with pytest.raises(NotFoundError):
        container.report_service.teacher_detail(klass.class_id, now=fixed_now)


def test_profile_rate_is_100_without_records(container, db, fixed_now):
    teacher = db.add_user("t@school.com", role=Role.TEACHER)

    profile = container.report_service.teacher_profile(teacher.user_id, now=fixed_now)

    assert profile["attendanceSummary"]["attendanceRate"] == 100
    assert profile["attendanceSummary"]["total"] == 0


def test_class_attendance_log_is_one_hot(container, three_students):
    klass, _ = three_students

    log = container.report_service.class_attendance_log(klass.class_id)

    assert len(log) == 6
    assert log[0]["date"] == "2024-03-12"
    assert all(row["present"] + row["absent"] + row["late"] + row["leave"] == 1 for row in log)


def test_overview(container, db, three_students, fixed_now):
    klass, _ = three_students
    teacher = db.add_user("t@school.com", role=Role.TEACHER)
    db.add_user("idle@school.com", role=Role.TEACHER)
    container.class_service.update_class(klass.class_id, {"teacherId": teacher.user_id})

    overview = container.report_service.overview(now=fixed_now)

    assert overview["students"]["total"] == 3
    assert len(overview["attendance"]["history"]) == 14
    assert overview["attendance"]["history"][-1]["date"] == "2024-03-13"
    assert overview["attendance"]["rate"] == pytest.approx(5 / 6)
    assert overview["teachers"]["coverage"] == "1/2"
    assert overview["classes"]["distribution"][0]["attendance"] == 83


def test_rate_helpers_round_half_up():
    assert format_percentage(1, 8) == "12.5"
    assert format_percentage(1, 3) == "33.3"
    assert rounded_rate(1, 8) == 13
    assert rounded_rate(0, 0, empty=100) == 100
