from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, AttendanceSession, GeofenceSettings


class AttendanceSessionRepository(Protocol):
    def create(self, *, token: str, session_date: date, created_at: datetime, expires_at: datetime) -> int:
        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_by_token(self, token: str) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def list_open(self, now: datetime) -> Sequence[AttendanceSession]:
        """Unlocked, unexpired sessions in storage (creation) order."""

        raise NotImplementedError

    def lock_date(self, session_date: date) -> int:
        raise NotImplementedError


class AttendanceRecordRepository(Protocol):
    def get(self, *, attendance_date: date, student_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert(self, record: AttendanceRecord) -> None:
        """Insert or fully replace the record for (date, student)."""

        raise NotImplementedError

    def insert_if_absent(self, record: AttendanceRecord) -> bool:
        """Insert only when no record exists for (date, student)."""

        raise NotImplementedError

    def list_for_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_student(self, student_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError


class GeofenceRepository(Protocol):
    def get(self) -> Optional[GeofenceSettings]:
        raise NotImplementedError

    def save(self, settings: GeofenceSettings) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError
