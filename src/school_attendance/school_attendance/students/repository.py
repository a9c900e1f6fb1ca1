from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student, StudentListRow


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def find_by_roll_number(self, class_id: int, roll_number: str, *, exclude_id: Optional[int] = None) -> Optional[Student]:
        raise NotImplementedError

    def list_for_classes(self, class_ids: Sequence[int]) -> Sequence[Student]:
        """Students of the given classes ordered by first name, then last name."""

        raise NotImplementedError

    def list_with_class(self) -> Sequence[StudentListRow]:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError

    def create_student(self, *, first_name: str, last_name: str, roll_number: str, class_id: int) -> int:
        raise NotImplementedError

    def update_student(
        self,
        *,
        student_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        roll_number: Optional[str] = None,
        class_id: Optional[int] = None,
    ) -> bool:
        raise NotImplementedError

    def delete_cascade(self, student_id: int) -> bool:
        """Delete the student with its attendance records and drafts in one transaction."""

        raise NotImplementedError
