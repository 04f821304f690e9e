from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student, StudentDetails


class StudentRepository(Protocol):
    """Repository interface for the student directory.

    Note: services depend on this interface, not on a concrete database.
    """

    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Student]:
        raise NotImplementedError

    def create(self, details: StudentDetails) -> int:
        raise NotImplementedError

    def update_details(self, student_id: int, details: StudentDetails) -> bool:
        raise NotImplementedError

    def set_credentials(self, student_id: int, *, username: str, password_hash: str) -> bool:
        raise NotImplementedError

    def set_password_hash(self, student_id: int, password_hash: str) -> bool:
        raise NotImplementedError
