from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Open a connection, yield ``(conn, cursor)`` and commit on success.

    Everything executed inside the ``with`` block is one transaction: any exception
    rolls back all statements issued so far.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(column: str, values: Sequence[Any]) -> Tuple[str, List[Any]]:
    """Build ``column IN (%s, ...)`` for a non-empty sequence."""
    values = list(values)
    placeholders = ",".join(["%s"] * len(values))
    return f"{column} IN ({placeholders})", values


def where_sql(clauses: Iterable[str]) -> str:
    clauses = list(clauses)
    return ("WHERE " + " AND ".join(clauses)) if clauses else ""
