from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ClassOverviewRow, SchoolClass
from .repository import ClassRepository


def _to_class(row: dict) -> SchoolClass:
    return SchoolClass(
        class_id=int(row["class_id"]),
        name=row["name"],
        grade_level=row["grade_level"],
        teacher_id=int(row["teacher_id"]) if row.get("teacher_id") is not None else None,
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id, name, grade_level, teacher_id FROM classes WHERE class_id=%s",
                (int(class_id),),
            )
            row = fetchone(cur)
            return _to_class(row) if row else None

    def find_by_grade_level(self, grade_level: str, *, exclude_id: Optional[int] = None) -> Optional[SchoolClass]:
        sql = "SELECT class_id, name, grade_level, teacher_id FROM classes WHERE grade_level=%s"
        params: list[object] = [grade_level]
        if exclude_id is not None:
            sql += " AND class_id<>%s"
            params.append(int(exclude_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " LIMIT 1", tuple(params))
            row = fetchone(cur)
            return _to_class(row) if row else None

    def list_for_teacher(self, teacher_id: int) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT class_id, name, grade_level, teacher_id
                FROM classes
                WHERE teacher_id=%s
                ORDER BY name ASC
                """,
                (int(teacher_id),),
            )
            return [_to_class(r) for r in fetchall(cur)]

    def list_overview(self) -> Sequence[ClassOverviewRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    c.class_id, c.name, c.grade_level, c.teacher_id,
                    CONCAT(u.first_name, ' ', u.last_name) AS teacher_name,
                    (SELECT COUNT(*) FROM students s WHERE s.class_id = c.class_id) AS student_count,
                    (SELECT COUNT(*) FROM attendance_records ar WHERE ar.class_id = c.class_id) AS record_count,
                    (SELECT COUNT(*) FROM attendance_records ar
                        WHERE ar.class_id = c.class_id AND ar.status = %s) AS present_count
                FROM classes c
                LEFT JOIN users u ON u.user_id = c.teacher_id
                ORDER BY c.name ASC
                """,
                (AttendanceStatus.PRESENT.value,),
            )
            return [
                ClassOverviewRow(
                    class_id=int(r["class_id"]),
                    name=r["name"],
                    grade_level=r["grade_level"],
                    teacher_id=int(r["teacher_id"]) if r.get("teacher_id") is not None else None,
                    teacher_name=r.get("teacher_name"),
                    student_count=int(r.get("student_count") or 0),
                    record_count=int(r.get("record_count") or 0),
                    present_count=int(r.get("present_count") or 0),
                )
                for r in fetchall(cur)
            ]

    def create_class(self, *, name: str, grade_level: str, teacher_id: Optional[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO classes(name, grade_level, teacher_id) VALUES(%s,%s,%s)",
                (name, grade_level, teacher_id),
            )
            return int(cur.lastrowid)

    def update_class(
        self,
        *,
        class_id: int,
        name: Optional[str] = None,
        grade_level: Optional[str] = None,
        set_teacher: bool = False,
        teacher_id: Optional[int] = None,
    ) -> None:
        changes: dict[str, object] = {}
        if name is not None:
            changes["name"] = name
        if grade_level is not None:
            changes["grade_level"] = grade_level
        if set_teacher:
            changes["teacher_id"] = teacher_id
        if not changes:
            return

        assignments = ", ".join(f"{col}=%s" for col in changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE classes SET {assignments} WHERE class_id=%s",
                (*changes.values(), int(class_id)),
            )

    def delete_cascade(self, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_drafts WHERE class_id=%s", (int(class_id),))
            cur.execute("DELETE FROM attendance_records WHERE class_id=%s", (int(class_id),))
            cur.execute(
                """
                DELETE ar FROM attendance_records ar
                JOIN students s ON s.student_id = ar.student_id
                WHERE s.class_id=%s
                """,
                (int(class_id),),
            )
            cur.execute("DELETE FROM students WHERE class_id=%s", (int(class_id),))
            cur.execute("DELETE FROM classes WHERE class_id=%s", (int(class_id),))
            return cur.rowcount > 0
