from __future__ import annotations

import dataclasses
import logging
import re
import secrets
from datetime import date
from typing import List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import DEFAULT_PASSWORD_LENGTH, PASSWORD_ALPHABET
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from .model import SessionUser, Student, StudentDetails, StudentPublicView
from .repository import StudentRepository

logger = logging.getLogger(__name__)

_DETAIL_FIELDS = {f.name for f in dataclasses.fields(StudentDetails)}


def suggest_username(name: str) -> str:
    clean = re.sub(r"[^a-z0-9]+", ".", (name or "").strip().lower()).strip(".")
    tail = 1000 + secrets.randbelow(9000)
    return f"{clean or 'student'}.{tail}"


def generate_password(length: int = DEFAULT_PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(int(length)))


class StudentService:
    """Use case: manage the student directory (warden)."""

    def __init__(self, students: StudentRepository):
        self._students = students

    @staticmethod
    def _normalize_details(current: Optional[StudentDetails], patch: dict) -> StudentDetails:
        unknown = set(patch) - _DETAIL_FIELDS
        if unknown:
            raise ValidationError(f"Unknown student field(s): {', '.join(sorted(unknown))}")

        values = dict(patch)
        if "name" in values:
            values["name"] = require_non_empty(values["name"], "Name")
        if "total_amount" in values:
            amount = values["total_amount"]
            if amount in (None, ""):
                values["total_amount"] = None
            else:
                try:
                    values["total_amount"] = float(amount)
                except (TypeError, ValueError):
                    raise ValidationError("Total amount must be a number")
        if "joining_date" in values:
            joined = values["joining_date"]
            if joined in (None, ""):
                values["joining_date"] = None
            elif isinstance(joined, str):
                try:
                    values["joining_date"] = parse_iso_date(joined)
                except ValueError:
                    raise ValidationError("Joining date must be YYYY-MM-DD")
            elif not isinstance(joined, date):
                raise ValidationError("Joining date must be YYYY-MM-DD")
        for key in ("parent_name", "parent_contact", "student_contact", "address", "email"):
            if key in values:
                values[key] = (values[key] or "").strip()

        if current is None:
            return StudentDetails(**values)
        return dataclasses.replace(current, **values)

    def list_students(self) -> List[Student]:
        return list(self._students.list_all())

    def list_public(self) -> List[StudentPublicView]:
        return [self._public(s) for s in self._students.list_all()]

    def get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")
        return student

    @staticmethod
    def _public(student: Student) -> StudentPublicView:
        return StudentPublicView(student_id=student.student_id, details=student.details, username=student.username)

    def get_student_public(self, student_id: int) -> StudentPublicView:
        return self._public(self.get_student(student_id))

    def create_student(self, name: str, **details) -> Student:
        normalized = self._normalize_details(None, {"name": name, **details})
        student_id = self._students.create(normalized)
        logger.info("Created student %s (%s)", student_id, normalized.name)
        return self.get_student(student_id)

    def update_details(self, student_id: int, **patch) -> Student:
        current = self.get_student(student_id)
        updated = self._normalize_details(current.details, patch)
        if not self._students.update_details(current.student_id, updated):
            raise NotFoundError("Student not found")
        return self.get_student(student_id)

    def set_credentials(self, student_id: int, username: str, password: str) -> None:
        student = self.get_student(student_id)
        username = require_non_empty(username, "Username")
        require_min_length(password, "Password", 6)

        existing = self._students.get_by_username(username)
        if existing and existing.student_id != student.student_id:
            raise ValidationError("Username already exists")

        if not self._students.set_credentials(
            student.student_id, username=username, password_hash=generate_password_hash(password)
        ):
            raise NotFoundError("Student not found")
        logger.info("Login created for student %s (%s)", student.student_id, username)

    def reset_password(self, student_id: int, new_password: Optional[str] = None) -> str:
        """Set a new password and return it in plain text (shown once)."""

        student = self.get_student(student_id)
        if not student.username:
            raise ValidationError("Student has no login yet")

        password = new_password or generate_password()
        require_min_length(password, "Password", 6)
        if not self._students.set_password_hash(student.student_id, generate_password_hash(password)):
            raise ValidationError("Password reset failed")
        logger.info("Password reset for student %s", student.student_id)
        return password


class AuthService:
    """Use case: authenticate students and the warden (login)."""

    def __init__(self, students: StudentRepository, *, warden_username: str, warden_password_hash: str):
        self._students = students
        self._warden_username = warden_username
        self._warden_password_hash = warden_password_hash

    @staticmethod
    def _check(password_hash: Optional[str], password: str) -> bool:
        if not password_hash:
            return False
        try:
            return check_password_hash(password_hash, password)
        except ValueError:
            # e.g. placeholder hashes or corrupted values
            return False

    def authenticate_student(self, username: str, password: str) -> SessionUser:
        student = self._students.get_by_username((username or "").strip())
        if not student or not self._check(student.password_hash, password or ""):
            raise AuthenticationError("Invalid username or password")
        return SessionUser(user_id=student.student_id, name=student.name, role=Role.STUDENT.value)

    def authenticate_warden(self, username: str, password: str) -> SessionUser:
        if (username or "").strip() != self._warden_username or not self._check(
            self._warden_password_hash, password or ""
        ):
            raise AuthenticationError("Invalid username or password")
        return SessionUser(user_id=0, name="Warden", role=Role.WARDEN.value)

    def authenticate(self, role: str, username: str, password: str) -> SessionUser:
        try:
            role_enum = Role((role or "").lower())
        except ValueError:
            raise AuthenticationError("Unknown role")
        if role_enum == Role.WARDEN:
            return self.authenticate_warden(username, password)
        return self.authenticate_student(username, password)
