from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_USER_COLUMNS = "user_id, email, password_hash, first_name, last_name, role"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        email=row["email"],
        password_hash=row["password_hash"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        role=Role(row["role"]),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_by_role(self, role: Role) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE role=%s ORDER BY last_name, first_name",
                (role.value,),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def create_user(
        self,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: Role,
        class_id: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(email, password_hash, first_name, last_name, role)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (email, password_hash, first_name, last_name, role.value),
            )
            user_id = int(cur.lastrowid)
            if class_id is not None:
                cur.execute("UPDATE classes SET teacher_id=%s WHERE class_id=%s", (user_id, int(class_id)))
            return user_id

    def update_teacher(
        self,
        *,
        teacher_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
        reassign_class: bool = False,
        class_id: Optional[int] = None,
    ) -> None:
        fields = {
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "password_hash": password_hash,
        }
        changes = {k: v for k, v in fields.items() if v is not None}

        with db_cursor(self._conn_factory) as (_, cur):
            if changes:
                assignments = ", ".join(f"{col}=%s" for col in changes)
                cur.execute(
                    f"UPDATE users SET {assignments} WHERE user_id=%s AND role=%s",
                    (*changes.values(), int(teacher_id), Role.TEACHER.value),
                )
            if reassign_class:
                cur.execute("UPDATE classes SET teacher_id=NULL WHERE teacher_id=%s", (int(teacher_id),))
                if class_id is not None:
                    cur.execute("UPDATE classes SET teacher_id=%s WHERE class_id=%s", (int(teacher_id), int(class_id)))
