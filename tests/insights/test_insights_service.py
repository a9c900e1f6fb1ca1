from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.school_attendance.school_attendance.core.enums import AttendanceStatus, Role
from src.school_attendance.school_attendance.insights.service import absence_streak

P = AttendanceStatus.PRESENT
A = AttendanceStatus.ABSENT


@pytest.fixture
def teacher_class(db):
    teacher = db.add_user("t@school.com", role=Role.TEACHER)
    klass = db.add_class("Grade 5", teacher.user_id)
    return teacher, klass


def _history(db, student, statuses, last_day):
    days = [last_day - timedelta(days=i) for i in range(len(statuses))][::-1]
    for day, status in zip(days, statuses):
        db.add_record(student, day, status)
    return days


def test_low_attendance_only_counts_students_with_recent_records(container, db, teacher_class, fixed_now):
    teacher, klass = teacher_class
    today = fixed_now.date()
    poor = db.add_student("Poor", "Recent", klass.class_id)
    historic = db.add_student("Old", "Absences", klass.class_id)
    good = db.add_student("Good", "Student", klass.class_id)
    meh = db.add_student("Meh", "Student", klass.class_id)

    _history(db, poor, [P, A, A, A], today)
    _history(db, historic, [A, A, A, A], today - timedelta(days=60))
    _history(db, good, [P, P, P, P], today)
    _history(db, meh, [P, P, A, P], today)

    result = container.insights_service.student_insights(teacher.user_id, now=fixed_now)

    low = result["lowAttendanceStudents"]
    assert [s["studentId"] for s in low] == [poor.student_id]
    assert low[0]["attendanceRate"] == 25
    assert (low[0]["present"], low[0]["total"]) == (1, 4)
    assert low[0]["className"] == "Grade 5"
    assert result["period"] == {"startDate": "2024-02-13", "endDate": "2024-03-13"}


def test_consecutive_absences_streak_ends_at_latest_record(container, db, teacher_class, fixed_now):
    teacher, klass = teacher_class
    today = fixed_now.date()
    three = db.add_student("Three", "Streak", klass.class_id)
    two = db.add_student("Two", "Streak", klass.class_id)
    one = db.add_student("One", "Miss", klass.class_id)

    days = _history(db, three, [P, A, A, A], today - timedelta(days=1))
    _history(db, two, [A, P, A, A], today)
    _history(db, one, [A, A, P, A], today)

    streaks = container.insights_service.student_insights(teacher.user_id, now=fixed_now)["consecutiveAbsences"]

    assert [(s["studentId"], s["streak"]) for s in streaks] == [(three.student_id, 3), (two.student_id, 2)]
    assert streaks[0]["lastAbsentDate"] == days[-1].isoformat()


def test_absence_streak_breaks_on_present(db):
    klass = db.add_class("X")
    student = db.add_student("S", "T", klass.class_id)
    records = [db.add_record(student, date(2024, 3, d), s) for d, s in [(1, A), (4, P), (5, A)]]

    assert absence_streak(records) == (1, date(2024, 3, 5))
    assert absence_streak([]) == (0, None)


def test_insights_for_teacher_without_class_are_empty(container, db, fixed_now):
    teacher = db.add_user("lonely@school.com", role=Role.TEACHER)

    result = container.insights_service.student_insights(teacher.user_id, now=fixed_now)
    analytics = container.insights_service.class_analytics(teacher.user_id, now=fixed_now)

    assert result["lowAttendanceStudents"] == [] and result["consecutiveAbsences"] == []
    assert analytics == {"weeklyTrend": [], "monthlyTrend": [], "peakAbsenceDays": []}


def test_class_analytics_trends_and_peak_days(container, db, teacher_class, fixed_now):
    teacher, klass = teacher_class
    today = fixed_now.date()
    mine = [db.add_student(f"S{i}", "Mine", klass.class_id) for i in range(3)]
    other_class = db.add_class("Grade 6")
    theirs = db.add_student("X", "Theirs", other_class.class_id)

    db.add_record(mine[0], today, A)
    db.add_record(mine[1], today, A)
    db.add_record(mine[2], today, P)
    db.add_record(theirs, today, P)
    yesterday = today - timedelta(days=1)
    db.add_record(mine[0], yesterday, A)
    db.add_record(mine[1], yesterday, P)

    analytics = container.insights_service.class_analytics(teacher.user_id, now=fixed_now)

    weekly = analytics["weeklyTrend"]
    assert len(weekly) == 12
    assert weekly[-1]["week"] == "Mar 7 - Mar 13"
    assert weekly[-1]["classRate"] == 40
    assert weekly[-1]["schoolRate"] == 50
    assert weekly[0]["classRate"] == 0

    monthly = analytics["monthlyTrend"]
    assert len(monthly) == 4
    assert monthly[-1]["month"] == "Feb 13 - Mar 13"

    assert analytics["peakAbsenceDays"] == [
        {"date": today.isoformat(), "count": 2},
        {"date": yesterday.isoformat(), "count": 1},
    ]
