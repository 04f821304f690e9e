from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float


@dataclass(frozen=True)
class GeofenceSettings:
    """Circular region attendance may be marked from."""

    center: GeoPoint
    radius_m: float


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: a time-boxed QR session for one calendar day.

    Expiry is computed from ``expires_at``; ``locked`` is the only stored
    terminal state.
    """

    session_id: int
    token: str
    session_date: date
    created_at: datetime
    expires_at: datetime
    locked: bool = False

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_active(self, now: datetime) -> bool:
        return not self.locked and not self.is_expired(now)


@dataclass(frozen=True)
class AttendanceRecord:
    """One student's attendance for one day (keyed by date + student)."""

    student_id: int
    attendance_date: date
    marked_at: datetime
    status: AttendanceStatus
    location: Optional[GeoPoint] = None
