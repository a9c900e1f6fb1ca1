"""Fill an empty database with demo data.

One teacher and one class per grade level, a roster per class, and a few weeks of
weekday attendance for students and teachers. Run ``scripts/init_db.py`` first.
"""

from __future__ import annotations

import argparse
import importlib
import random
import re
import sys
from datetime import datetime, timedelta
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.school_attendance.school_attendance.common.datetime_utils import is_weekday
from src.school_attendance.school_attendance.container import build_container
from src.school_attendance.school_attendance.core.enums import AttendanceStatus
from src.school_attendance.school_attendance.database.bootstrap import ensure_demo_admin

GRADE_LEVELS = ["Play Group", "Nursery", "KG", "Prep"] + [f"Grade {n}" for n in range(1, 11)]

TEACHERS = [
    ("Aisha", "Rahman"), ("Bilal", "Hassan"), ("Celine", "Arif"), ("Danish", "Qureshi"),
    ("Elena", "Farooq"), ("Fahad", "Iqbal"), ("Ghazal", "Saleem"), ("Hassan", "Javed"),
    ("Iman", "Sheikh"), ("Jibran", "Aziz"), ("Kiran", "Latif"), ("Laiba", "Sohail"),
    ("Musa", "Anwar"), ("Nida", "Shah"),
]

FIRST_NAMES = [
    "Alice", "Bob", "Charlie", "Diana", "Eve", "Frank", "Grace", "Henry", "Ivy", "Jack",
    "Kate", "Liam", "Mia", "Noah", "Olivia", "Peter", "Quinn", "Rachel", "Sam", "Tina",
]
LAST_NAMES = [
    "Johnson", "Williams", "Brown", "Davis", "Miller", "Wilson", "Moore", "Taylor", "Anderson", "Thomas",
    "Jackson", "White", "Harris", "Martin", "Thompson", "Garcia", "Clark", "Lewis", "Lee", "Walker",
]

STUDENT_STATUSES = [AttendanceStatus.PRESENT] * 8 + [AttendanceStatus.ABSENT, AttendanceStatus.LATE, AttendanceStatus.LEAVE]
TEACHER_STATUSES = [AttendanceStatus.PRESENT] * 8 + [AttendanceStatus.ABSENT, AttendanceStatus.LEAVE]


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo data")
    parser.add_argument("--students-per-class", type=int, default=20)
    parser.add_argument("--weeks", type=int, default=6)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    rng = random.Random(args.seed)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    container = build_container(db_config=db_config)

    ensure_demo_admin(db_config)

    rosters: dict[int, tuple[int, list[int]]] = {}
    for index, grade in enumerate(GRADE_LEVELS):
        first, last = TEACHERS[index % len(TEACHERS)]
        teacher_id = container.teacher_account_service.create_teacher(
            email=f"{_slug(grade)}-teacher@school.com",
            password="teacher123",
            first_name=first,
            last_name=last,
        )
        class_id = container.class_service.record_class(grade_level=grade, teacher_id=teacher_id)

        student_ids = []
        for idx in range(args.students_per_class):
            n = index * args.students_per_class + idx
            student_ids.append(
                container.student_service.create_student(
                    first_name=FIRST_NAMES[n % len(FIRST_NAMES)],
                    last_name=LAST_NAMES[(n * 3 + idx) % len(LAST_NAMES)],
                    roll_number=f"{idx + 1:02d}",
                    class_id=class_id,
                )
            )
        rosters[class_id] = (teacher_id, student_ids)

    now = datetime.now()
    day = now.date() - timedelta(weeks=args.weeks)
    days = 0
    while day < now.date():
        if is_weekday(day):
            recorded_at = datetime.combine(day, datetime.min.time()) + timedelta(hours=9)
            for class_id, (teacher_id, student_ids) in rosters.items():
                with container.attendance_repo.transaction() as tx:
                    for student_id in student_ids:
                        tx.upsert_record(
                            student_id=student_id,
                            class_id=class_id,
                            work_date=day,
                            status=rng.choice(STUDENT_STATUSES),
                            recorded_by=teacher_id,
                            recorded_at=recorded_at,
                        )
                container.attendance_repo.upsert_teacher_attendance(
                    teacher_id=teacher_id,
                    work_date=day,
                    status=rng.choice(TEACHER_STATUSES),
                )
            days += 1
        day += timedelta(days=1)

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(classes={len(rosters)}, school days={days})"
    )


if __name__ == "__main__":
    main()
