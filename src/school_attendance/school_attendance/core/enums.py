from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "ADMIN"
    TEACHER = "TEACHER"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    LEAVE = "LEAVE"

    @classmethod
    def from_client(cls, value: str) -> "AttendanceStatus":
        """Map a client-facing lowercase status (``present``...) to the stored value."""

        try:
            return _FROM_CLIENT[str(value).strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown attendance status: {value!r}") from None

    def to_client(self) -> str:
        return _TO_CLIENT[self]


_TO_CLIENT = {
    AttendanceStatus.PRESENT: "present",
    AttendanceStatus.ABSENT: "absent",
    AttendanceStatus.LATE: "late",
    AttendanceStatus.LEAVE: "leave",
}
_FROM_CLIENT = {v: k for k, v in _TO_CLIENT.items()}


class Period(str, Enum):
    """Symbolic report range, resolved by ``periods.resolver``."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class DayStatus(str, Enum):
    """Overall state of a teacher's attendance for one day."""

    SUBMITTED = "submitted"
    DRAFT = "draft"
    PENDING = "pending"
    NO_CLASS = "no-class"
