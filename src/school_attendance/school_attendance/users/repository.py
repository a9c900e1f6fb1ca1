from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[User]:
        """Users of ``role`` ordered by last name."""

        raise NotImplementedError

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
        """Insert a user and, when ``class_id`` is given, assign that class to them atomically."""

        raise NotImplementedError

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
        """Update profile fields; with ``reassign_class`` the teacher's classes are cleared first.

        Runs as one transaction.
        """

        raise NotImplementedError
