from __future__ import annotations

import copy
from contextlib import contextmanager
from datetime import date, datetime
from typing import Optional, Sequence

import pytest
from werkzeug.security import generate_password_hash

from src.school_attendance.school_attendance.attendance.model import (
    AttendanceDetailRow,
    AttendanceDraft,
    AttendanceRecord,
    TeacherAttendance,
)
from src.school_attendance.school_attendance.classes.model import ClassOverviewRow, SchoolClass
from src.school_attendance.school_attendance.container import wire_services
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, Role
from src.school_attendance.school_attendance.students.model import Student, StudentListRow
from src.school_attendance.school_attendance.users.model import User


class InMemoryDB:
    """Tables shared by the in-memory repositories below."""

    def __init__(self):
        self.users: dict[int, User] = {}
        self.classes: dict[int, SchoolClass] = {}
        self.students: dict[int, Student] = {}
        self.records: dict[tuple[int, date], AttendanceRecord] = {}
        self.drafts: dict[tuple[int, int, int, date], AttendanceDraft] = {}
        self.teacher_attendance: dict[tuple[int, date], TeacherAttendance] = {}
        self.write_count = 0
        self.fail_on_write: Optional[int] = None
        self._seq = 0

    def next_id(self) -> int:
        self._seq += 1
        return self._seq

    def count_write(self) -> None:
        self.write_count += 1
        if self.write_count == self.fail_on_write:
            raise RuntimeError(f"write {self.write_count} failed")

    # ----- seeding helpers -----

    def add_user(self, email: str, *, role: Role = Role.TEACHER, password: str = "secret1",
                 first_name: str = "Test", last_name: str = "User") -> User:
        user = User(
            user_id=self.next_id(),
            email=email,
            password_hash=generate_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        self.users[user.user_id] = user
        return user

    def add_class(self, grade_level: str, teacher_id: Optional[int] = None) -> SchoolClass:
        school_class = SchoolClass(class_id=self.next_id(), name=grade_level, grade_level=grade_level, teacher_id=teacher_id)
        self.classes[school_class.class_id] = school_class
        return school_class

    def add_student(self, first_name: str, last_name: str, class_id: int, roll_number: str = "01") -> Student:
        student = Student(
            student_id=self.next_id(),
            first_name=first_name,
            last_name=last_name,
            roll_number=roll_number,
            class_id=class_id,
        )
        self.students[student.student_id] = student
        return student

    def add_record(self, student: Student, work_date: date, status: AttendanceStatus, *,
                   recorded_by: int = 0, recorded_at: Optional[datetime] = None) -> AttendanceRecord:
        record = AttendanceRecord(
            record_id=self.next_id(),
            student_id=student.student_id,
            class_id=student.class_id,
            work_date=work_date,
            status=status,
            recorded_by=recorded_by,
            recorded_at=recorded_at or datetime.combine(work_date, datetime.min.time()),
        )
        self.records[(student.student_id, work_date)] = record
        return record

    def snapshot(self) -> dict:
        return copy.deepcopy({"records": self.records, "drafts": self.drafts})

    def restore(self, snap: dict) -> None:
        self.records = snap["records"]
        self.drafts = snap["drafts"]


class InMemoryUsers:
    def __init__(self, db: InMemoryDB):
        self._db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._db.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._db.users.values() if u.email == email), None)

    def list_by_role(self, role: Role) -> Sequence[User]:
        users = [u for u in self._db.users.values() if u.role == role]
        return sorted(users, key=lambda u: (u.last_name, u.first_name))

    def create_user(self, *, email, password_hash, first_name, last_name, role, class_id=None) -> int:
        user = User(self._db.next_id(), email, password_hash, first_name, last_name, role)
        self._db.users[user.user_id] = user
        if class_id is not None:
            c = self._db.classes[class_id]
            self._db.classes[class_id] = SchoolClass(c.class_id, c.name, c.grade_level, user.user_id)
        return user.user_id

    def update_teacher(self, *, teacher_id, first_name=None, last_name=None, email=None, password_hash=None,
                       reassign_class=False, class_id=None) -> None:
        u = self._db.users[teacher_id]
        self._db.users[teacher_id] = User(
            u.user_id,
            email or u.email,
            password_hash or u.password_hash,
            first_name or u.first_name,
            last_name or u.last_name,
            u.role,
        )
        if reassign_class:
            for c in list(self._db.classes.values()):
                if c.teacher_id == teacher_id:
                    self._db.classes[c.class_id] = SchoolClass(c.class_id, c.name, c.grade_level, None)
            if class_id is not None:
                c = self._db.classes[class_id]
                self._db.classes[class_id] = SchoolClass(c.class_id, c.name, c.grade_level, teacher_id)


class InMemoryClasses:
    def __init__(self, db: InMemoryDB):
        self._db = db

    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        return self._db.classes.get(class_id)

    def find_by_grade_level(self, grade_level: str, *, exclude_id: Optional[int] = None) -> Optional[SchoolClass]:
        return next(
            (c for c in self._db.classes.values() if c.grade_level == grade_level and c.class_id != exclude_id),
            None,
        )

    def list_for_teacher(self, teacher_id: int) -> Sequence[SchoolClass]:
        return sorted((c for c in self._db.classes.values() if c.teacher_id == teacher_id), key=lambda c: c.name)

    def list_overview(self) -> Sequence[ClassOverviewRow]:
        rows = []
        for c in sorted(self._db.classes.values(), key=lambda c: c.name):
            teacher = self._db.users.get(c.teacher_id) if c.teacher_id else None
            records = [r for r in self._db.records.values() if r.class_id == c.class_id]
            rows.append(
                ClassOverviewRow(
                    class_id=c.class_id,
                    name=c.name,
                    grade_level=c.grade_level,
                    teacher_id=c.teacher_id,
                    teacher_name=teacher.full_name if teacher else None,
                    student_count=sum(1 for s in self._db.students.values() if s.class_id == c.class_id),
                    record_count=len(records),
                    present_count=sum(1 for r in records if r.status == AttendanceStatus.PRESENT),
                )
            )
        return rows

    def create_class(self, *, name: str, grade_level: str, teacher_id: Optional[int]) -> int:
        c = SchoolClass(self._db.next_id(), name, grade_level, teacher_id)
        self._db.classes[c.class_id] = c
        return c.class_id

    def update_class(self, *, class_id, name=None, grade_level=None, set_teacher=False, teacher_id=None) -> None:
        c = self._db.classes[class_id]
        self._db.classes[class_id] = SchoolClass(
            c.class_id,
            name or c.name,
            grade_level or c.grade_level,
            teacher_id if set_teacher else c.teacher_id,
        )

    def delete_cascade(self, class_id: int) -> bool:
        student_ids = {s.student_id for s in self._db.students.values() if s.class_id == class_id}
        self._db.drafts = {k: d for k, d in self._db.drafts.items() if d.class_id != class_id}
        self._db.records = {
            k: r for k, r in self._db.records.items() if r.class_id != class_id and r.student_id not in student_ids
        }
        self._db.students = {k: s for k, s in self._db.students.items() if s.class_id != class_id}
        return self._db.classes.pop(class_id, None) is not None


class InMemoryStudents:
    def __init__(self, db: InMemoryDB):
        self._db = db

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._db.students.get(student_id)

    def find_by_roll_number(self, class_id: int, roll_number: str, *, exclude_id: Optional[int] = None) -> Optional[Student]:
        return next(
            (
                s for s in self._db.students.values()
                if s.class_id == class_id and s.roll_number == roll_number and s.student_id != exclude_id
            ),
            None,
        )

    def list_for_classes(self, class_ids: Sequence[int]) -> Sequence[Student]:
        wanted = set(class_ids)
        students = [s for s in self._db.students.values() if s.class_id in wanted]
        return sorted(students, key=lambda s: (s.first_name, s.last_name))

    def list_with_class(self) -> Sequence[StudentListRow]:
        rows = []
        for s in self._db.students.values():
            c = self._db.classes.get(s.class_id)
            rows.append(
                StudentListRow(
                    s.student_id, s.first_name, s.last_name, s.roll_number, s.class_id,
                    c.name if c else None, c.grade_level if c else None,
                )
            )
        return rows

    def count_all(self) -> int:
        return len(self._db.students)

    def create_student(self, *, first_name: str, last_name: str, roll_number: str, class_id: int) -> int:
        return self._db.add_student(first_name, last_name, class_id, roll_number).student_id

    def update_student(self, *, student_id, first_name=None, last_name=None, roll_number=None, class_id=None) -> bool:
        s = self._db.students[student_id]
        self._db.students[student_id] = Student(
            s.student_id,
            first_name or s.first_name,
            last_name or s.last_name,
            roll_number or s.roll_number,
            class_id or s.class_id,
        )
        return True

    def delete_cascade(self, student_id: int) -> bool:
        self._db.drafts = {k: d for k, d in self._db.drafts.items() if d.student_id != student_id}
        self._db.records = {k: r for k, r in self._db.records.items() if r.student_id != student_id}
        return self._db.students.pop(student_id, None) is not None


class InMemoryAttendanceTransaction:
    def __init__(self, db: InMemoryDB):
        self._db = db

    def upsert_record(self, *, student_id, class_id, work_date, status, recorded_by, recorded_at) -> None:
        self._db.count_write()
        existing = self._db.records.get((student_id, work_date))
        self._db.records[(student_id, work_date)] = AttendanceRecord(
            record_id=existing.record_id if existing else self._db.next_id(),
            student_id=student_id,
            class_id=existing.class_id if existing else class_id,
            work_date=work_date,
            status=status,
            recorded_by=recorded_by,
            recorded_at=recorded_at,
        )

    def insert_draft(self, *, teacher_id, class_id, student_id, work_date, status) -> None:
        self._db.count_write()
        key = (teacher_id, class_id, student_id, work_date)
        if key in self._db.drafts:
            raise RuntimeError("duplicate draft")
        self._db.drafts[key] = AttendanceDraft(self._db.next_id(), teacher_id, class_id, student_id, work_date, status)

    def delete_drafts(self, *, teacher_id, class_id, work_date) -> int:
        self._db.count_write()
        doomed = [
            k for k, d in self._db.drafts.items()
            if d.teacher_id == teacher_id and d.class_id == class_id and d.work_date == work_date
        ]
        for k in doomed:
            del self._db.drafts[k]
        return len(doomed)


class InMemoryAttendance:
    def __init__(self, db: InMemoryDB):
        self._db = db

    @contextmanager
    def transaction(self):
        snap = self._db.snapshot()
        try:
            yield InMemoryAttendanceTransaction(self._db)
        except Exception:
            self._db.restore(snap)
            raise

    def list_records(self, *, start_date, end_date, class_ids=None, student_ids=None, recorded_by=None):
        if class_ids is not None and not class_ids:
            return []
        if student_ids is not None and not student_ids:
            return []
        out = [
            r for r in self._db.records.values()
            if start_date <= r.work_date <= end_date
            and (class_ids is None or r.class_id in class_ids)
            and (student_ids is None or r.student_id in student_ids)
            and (recorded_by is None or r.recorded_by == recorded_by)
        ]
        return sorted(out, key=lambda r: (r.work_date, r.record_id))

    def list_detail_rows(self, *, start_date, end_date, class_id=None):
        rows = []
        for r in self.list_records(start_date=start_date, end_date=end_date,
                                   class_ids=[class_id] if class_id is not None else None):
            s = self._db.students[r.student_id]
            c = self._db.classes[r.class_id]
            rows.append(AttendanceDetailRow(r.record_id, s.student_id, s.first_name, s.last_name,
                                            c.class_id, c.name, r.work_date, r.status))
        rows.sort(key=lambda x: x.first_name)
        rows.sort(key=lambda x: x.work_date, reverse=True)
        return rows

    def list_for_class(self, class_id):
        out = [r for r in self._db.records.values() if r.class_id == class_id]
        return sorted(out, key=lambda r: r.work_date, reverse=True)

    def list_drafts(self, *, teacher_id, class_id, work_date):
        return [
            d for d in self._db.drafts.values()
            if d.teacher_id == teacher_id and d.class_id == class_id and d.work_date == work_date
        ]

    def list_teacher_attendance(self, *, teacher_id, start_date, end_date):
        out = [
            a for a in self._db.teacher_attendance.values()
            if a.teacher_id == teacher_id and start_date <= a.work_date <= end_date
        ]
        return sorted(out, key=lambda a: a.work_date)

    def upsert_teacher_attendance(self, *, teacher_id, work_date, status) -> None:
        self._db.teacher_attendance[(teacher_id, work_date)] = TeacherAttendance(teacher_id, work_date, status)


@pytest.fixture
def fixed_now() -> datetime:
    # Wednesday
    return datetime(2024, 3, 13, 10, 30, 0)


@pytest.fixture
def db() -> InMemoryDB:
    return InMemoryDB()


@pytest.fixture
def container(db):
    return wire_services(
        users_repo=InMemoryUsers(db),
        classes_repo=InMemoryClasses(db),
        students_repo=InMemoryStudents(db),
        attendance_repo=InMemoryAttendance(db),
    )
