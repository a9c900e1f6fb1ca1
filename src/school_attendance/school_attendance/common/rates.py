"""Attendance counters and the two rate conventions.

Reports show ``present / total`` as a one-decimal percentage string, while insights,
analytics and profiles use a whole-number percentage. Both formats are part of the
JSON contract.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from ..core.enums import AttendanceStatus


def empty_counts() -> dict:
    return {"total": 0, "present": 0, "absent": 0, "late": 0, "leave": 0}


def add_status(counts: dict, status: AttendanceStatus) -> dict:
    counts["total"] += 1
    counts[status.to_client()] += 1
    return counts


def count_statuses(statuses: Iterable[AttendanceStatus]) -> dict:
    counts = empty_counts()
    for status in statuses:
        add_status(counts, status)
    return counts


def format_percentage(present: int, total: int) -> str:
    """``present/total*100`` with one decimal; ``"0.0"`` when there is nothing to divide."""
    if not total:
        return "0.0"
    value = Decimal(present) * 100 / Decimal(total)
    return str(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def rounded_rate(present: int, total: int, *, empty: int = 0) -> int:
    """Whole-number percentage, halves rounded up; ``empty`` when total is 0."""
    if not total:
        return empty
    value = Decimal(present) * 100 / Decimal(total)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def present_fraction(present: int, total: int) -> float:
    return present / total if total else 0.0
