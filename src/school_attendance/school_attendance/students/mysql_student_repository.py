from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Student, StudentListRow
from .repository import StudentRepository

_STUDENT_COLUMNS = "student_id, first_name, last_name, roll_number, class_id"


def _to_student(row: dict) -> Student:
    return Student(
        student_id=int(row["student_id"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        roll_number=str(row["roll_number"]),
        class_id=int(row["class_id"]),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def find_by_roll_number(self, class_id: int, roll_number: str, *, exclude_id: Optional[int] = None) -> Optional[Student]:
        sql = f"SELECT {_STUDENT_COLUMNS} FROM students WHERE class_id=%s AND roll_number=%s"
        params: list[object] = [int(class_id), roll_number]
        if exclude_id is not None:
            sql += " AND student_id<>%s"
            params.append(int(exclude_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " LIMIT 1", tuple(params))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def list_for_classes(self, class_ids: Sequence[int]) -> Sequence[Student]:
        if not class_ids:
            return []
        clause, params = in_clause("class_id", [int(c) for c in class_ids])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STUDENT_COLUMNS} FROM students WHERE {clause} ORDER BY first_name ASC, last_name ASC",
                tuple(params),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def list_with_class(self) -> Sequence[StudentListRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.student_id, s.first_name, s.last_name, s.roll_number, s.class_id,
                       c.name AS class_name, c.grade_level
                FROM students s
                LEFT JOIN classes c ON c.class_id = s.class_id
                ORDER BY c.grade_level ASC, s.last_name ASC, s.first_name ASC
                """
            )
            return [
                StudentListRow(
                    student_id=int(r["student_id"]),
                    first_name=r["first_name"],
                    last_name=r["last_name"],
                    roll_number=str(r["roll_number"]),
                    class_id=int(r["class_id"]),
                    class_name=r.get("class_name"),
                    grade_level=r.get("grade_level"),
                )
                for r in fetchall(cur)
            ]

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM students")
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def create_student(self, *, first_name: str, last_name: str, roll_number: str, class_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(first_name, last_name, roll_number, class_id)
                VALUES(%s,%s,%s,%s)
                """,
                (first_name, last_name, roll_number, int(class_id)),
            )
            return int(cur.lastrowid)

    def update_student(
        self,
        *,
        student_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        roll_number: Optional[str] = None,
        class_id: Optional[int] = None,
    ) -> bool:
        fields = {
            "first_name": first_name,
            "last_name": last_name,
            "roll_number": roll_number,
            "class_id": class_id,
        }
        changes = {k: v for k, v in fields.items() if v is not None}
        if not changes:
            return True

        assignments = ", ".join(f"{col}=%s" for col in changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE students SET {assignments} WHERE student_id=%s",
                (*changes.values(), int(student_id)),
            )
            return True

    def delete_cascade(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_drafts WHERE student_id=%s", (int(student_id),))
            cur.execute("DELETE FROM attendance_records WHERE student_id=%s", (int(student_id),))
            cur.execute("DELETE FROM students WHERE student_id=%s", (int(student_id),))
            return cur.rowcount > 0
