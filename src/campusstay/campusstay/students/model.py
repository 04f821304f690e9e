from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class StudentDetails:
    name: str
    parent_name: str = ""
    parent_contact: str = ""
    student_contact: str = ""
    address: str = ""
    email: str = ""
    total_amount: Optional[float] = None
    joining_date: Optional[date] = None


@dataclass(frozen=True)
class Student:
    """Domain entity: a hostel resident.

    Note: This is a pure data object. ``password_hash`` never leaves the
    warden-facing service; use ``StudentPublicView`` for anything else.
    """

    student_id: int
    details: StudentDetails
    username: Optional[str] = None
    password_hash: Optional[str] = None

    @property
    def name(self) -> str:
        return self.details.name

    @property
    def has_login(self) -> bool:
        return bool(self.username and self.password_hash)


@dataclass(frozen=True)
class StudentPublicView:
    student_id: int
    details: StudentDetails
    username: Optional[str] = None


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    name: str
    role: str
