from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .core.constants import ATTENDANCE_CUTOFF_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .insights.service import InsightsService
from .reports.service import ReportService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, TeacherAccountService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    classes_repo: ClassRepository
    students_repo: StudentRepository
    attendance_repo: AttendanceRepository

    auth_service: AuthService
    teacher_account_service: TeacherAccountService
    class_service: ClassService
    student_service: StudentService
    attendance_service: AttendanceService
    report_service: ReportService
    insights_service: InsightsService


def wire_services(
    *,
    users_repo: UserRepository,
    classes_repo: ClassRepository,
    students_repo: StudentRepository,
    attendance_repo: AttendanceRepository,
    cutoff_days: int = ATTENDANCE_CUTOFF_DAYS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build every service on top of the given repositories (MySQL in the app, fakes in tests)."""

    return Container(
        conn=conn,
        users_repo=users_repo,
        classes_repo=classes_repo,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        auth_service=AuthService(users_repo, classes_repo),
        teacher_account_service=TeacherAccountService(users_repo, classes_repo),
        class_service=ClassService(classes_repo, users_repo),
        student_service=StudentService(students_repo, classes_repo),
        attendance_service=AttendanceService(
            attendance_repo,
            classes_repo,
            students_repo,
            cutoff_days=cutoff_days,
        ),
        report_service=ReportService(attendance_repo, classes_repo, students_repo, users_repo),
        insights_service=InsightsService(attendance_repo, classes_repo, students_repo),
    )


def build_container(*, db_config: dict, cutoff_days: int = ATTENDANCE_CUTOFF_DAYS) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return wire_services(
        users_repo=MySQLUserRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        cutoff_days=cutoff_days,
        conn=conn,
    )
