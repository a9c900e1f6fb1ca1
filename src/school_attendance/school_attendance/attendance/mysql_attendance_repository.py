from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause, where_sql
from .model import AttendanceDetailRow, AttendanceDraft, AttendanceRecord, TeacherAttendance
from .repository import AttendanceRepository, AttendanceTransaction

_RECORD_COLUMNS = "record_id, student_id, class_id, work_date, status, recorded_by, recorded_at"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        student_id=int(r["student_id"]),
        class_id=int(r["class_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        recorded_by=int(r["recorded_by"]),
        recorded_at=r["recorded_at"],
    )


class MySQLAttendanceTransaction(AttendanceTransaction):
    """Transactional handle bound to one open cursor."""

    def __init__(self, cur):
        self._cur = cur

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
        # (student_id, work_date) is a unique key; class_id stays as first recorded.
        self._cur.execute(
            """
            INSERT INTO attendance_records(student_id, class_id, work_date, status, recorded_by, recorded_at)
            VALUES(%s,%s,%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE
                status=VALUES(status),
                recorded_by=VALUES(recorded_by),
                recorded_at=VALUES(recorded_at)
            """,
            (int(student_id), int(class_id), work_date, status.value, int(recorded_by), recorded_at),
        )

    def insert_draft(
        self,
        *,
        teacher_id: int,
        class_id: int,
        student_id: int,
        work_date: date,
        status: AttendanceStatus,
    ) -> None:
        self._cur.execute(
            """
            INSERT INTO attendance_drafts(teacher_id, class_id, student_id, work_date, status)
            VALUES(%s,%s,%s,%s,%s)
            """,
            (int(teacher_id), int(class_id), int(student_id), work_date, status.value),
        )

    def delete_drafts(self, *, teacher_id: int, class_id: int, work_date: date) -> int:
        self._cur.execute(
            "DELETE FROM attendance_drafts WHERE teacher_id=%s AND class_id=%s AND work_date=%s",
            (int(teacher_id), int(class_id), work_date),
        )
        return int(self._cur.rowcount or 0)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[AttendanceTransaction]:
        with db_cursor(self._conn_factory) as (_, cur):
            yield MySQLAttendanceTransaction(cur)

    def list_records(
        self,
        *,
        start_date: date,
        end_date: date,
        class_ids: Optional[Sequence[int]] = None,
        student_ids: Optional[Sequence[int]] = None,
        recorded_by: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if class_ids is not None:
            if not class_ids:
                return []
            clause, values = in_clause("class_id", [int(c) for c in class_ids])
            clauses.append(clause)
            params.extend(values)
        if student_ids is not None:
            if not student_ids:
                return []
            clause, values = in_clause("student_id", [int(s) for s in student_ids])
            clauses.append(clause)
            params.extend(values)
        if recorded_by is not None:
            clauses.append("recorded_by=%s")
            params.append(int(recorded_by))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                {where_sql(clauses)}
                ORDER BY work_date ASC, record_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_detail_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        class_id: Optional[int] = None,
    ) -> Sequence[AttendanceDetailRow]:
        clauses = ["ar.work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if class_id is not None:
            clauses.append("ar.class_id=%s")
            params.append(int(class_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ar.record_id, ar.student_id, s.first_name, s.last_name,
                    ar.class_id, c.name AS class_name,
                    ar.work_date, ar.status
                FROM attendance_records ar
                JOIN students s ON s.student_id = ar.student_id
                JOIN classes c ON c.class_id = ar.class_id
                {where_sql(clauses)}
                ORDER BY ar.work_date DESC, s.first_name ASC, ar.record_id ASC
                """,
                tuple(params),
            )
            return [
                AttendanceDetailRow(
                    record_id=int(r["record_id"]),
                    student_id=int(r["student_id"]),
                    first_name=r["first_name"],
                    last_name=r["last_name"],
                    class_id=int(r["class_id"]),
                    class_name=r["class_name"],
                    work_date=r["work_date"],
                    status=AttendanceStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]

    def list_for_class(self, class_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE class_id=%s
                ORDER BY work_date DESC, record_id ASC
                """,
                (int(class_id),),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_drafts(self, *, teacher_id: int, class_id: int, work_date: date) -> Sequence[AttendanceDraft]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT draft_id, teacher_id, class_id, student_id, work_date, status, updated_at
                FROM attendance_drafts
                WHERE teacher_id=%s AND class_id=%s AND work_date=%s
                """,
                (int(teacher_id), int(class_id), work_date),
            )
            return [
                AttendanceDraft(
                    draft_id=int(r["draft_id"]),
                    teacher_id=int(r["teacher_id"]),
                    class_id=int(r["class_id"]),
                    student_id=int(r["student_id"]),
                    work_date=r["work_date"],
                    status=AttendanceStatus(r["status"]),
                    updated_at=r.get("updated_at"),
                )
                for r in fetchall(cur)
            ]

    def list_teacher_attendance(self, *, teacher_id: int, start_date: date, end_date: date) -> Sequence[TeacherAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT teacher_id, work_date, status
                FROM teacher_attendance
                WHERE teacher_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (int(teacher_id), start_date, end_date),
            )
            return [
                TeacherAttendance(
                    teacher_id=int(r["teacher_id"]),
                    work_date=r["work_date"],
                    status=AttendanceStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]

    def upsert_teacher_attendance(self, *, teacher_id: int, work_date: date, status: AttendanceStatus) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teacher_attendance(teacher_id, work_date, status)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status)
                """,
                (int(teacher_id), work_date, status.value),
            )
