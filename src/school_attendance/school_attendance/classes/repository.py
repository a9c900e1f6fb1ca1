from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassOverviewRow, SchoolClass


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        raise NotImplementedError

    def find_by_grade_level(self, grade_level: str, *, exclude_id: Optional[int] = None) -> Optional[SchoolClass]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int) -> Sequence[SchoolClass]:
        """Classes owned by the teacher, ordered by name (first one is the primary class)."""

        raise NotImplementedError

    def list_overview(self) -> Sequence[ClassOverviewRow]:
        raise NotImplementedError

    def create_class(self, *, name: str, grade_level: str, teacher_id: Optional[int]) -> int:
        raise NotImplementedError

    def update_class(
        self,
        *,
        class_id: int,
        name: Optional[str] = None,
        grade_level: Optional[str] = None,
        set_teacher: bool = False,
        teacher_id: Optional[int] = None,
    ) -> None:
        raise NotImplementedError

    def delete_cascade(self, class_id: int) -> bool:
        """Delete the class with its students, attendance records and drafts in one transaction."""

        raise NotImplementedError
