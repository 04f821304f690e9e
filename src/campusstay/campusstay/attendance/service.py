from __future__ import annotations

import io
import logging
import secrets
from datetime import date, datetime, timedelta
from typing import List, Optional

import qrcode

from ..core.constants import DEFAULT_ATTENDANCE_QR_MINUTES
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    InvalidOrExpiredQRError,
    NotFoundError,
    OutsideGeofenceError,
    QRExpiredError,
    ValidationError,
)
from ..students.repository import StudentRepository
from .geofence import within_fence
from .model import AttendanceRecord, AttendanceSession, GeofenceSettings, GeoPoint
from .repository import AttendanceRecordRepository, AttendanceSessionRepository, GeofenceRepository

logger = logging.getLogger(__name__)


def make_geopoint(lat, lng) -> GeoPoint:
    try:
        point = GeoPoint(lat=float(lat), lng=float(lng))
    except (TypeError, ValueError):
        raise ValidationError("Latitude and longitude must be numbers")
    if not -90 <= point.lat <= 90 or not -180 <= point.lng <= 180:
        raise ValidationError("Coordinates out of range")
    return point


class AttendanceService:
    """Use cases: QR attendance sessions, geofenced check-in, daily finalize.

    A session is active while ``now < expires_at`` and it is not locked.
    Records are keyed by (date, student); every write replaces the previous
    one, except ``finalize_attendance`` which only fills gaps.
    """

    def __init__(
        self,
        sessions: AttendanceSessionRepository,
        records: AttendanceRecordRepository,
        geofence: GeofenceRepository,
        students: StudentRepository,
        *,
        default_duration: timedelta = timedelta(minutes=DEFAULT_ATTENDANCE_QR_MINUTES),
    ):
        self._sessions = sessions
        self._records = records
        self._geofence = geofence
        self._students = students
        self._default_duration = default_duration

    # -------- Sessions --------
    def create_attendance_session(
        self,
        *,
        duration: timedelta | None = None,
        for_date: date | None = None,
        now: datetime | None = None,
    ) -> AttendanceSession:
        now = now or datetime.now()
        duration = duration if duration is not None else self._default_duration
        if duration <= timedelta(0):
            raise ValidationError("Session duration must be positive")
        session_date = for_date or now.date()

        if any(s.session_date == session_date for s in self._sessions.list_open(now)):
            raise ValidationError("An attendance session is already active for this date")

        token = secrets.token_urlsafe(24)
        session_id = self._sessions.create(
            token=token,
            session_date=session_date,
            created_at=now,
            expires_at=now + duration,
        )
        logger.info("Attendance session %s opened for %s until %s", session_id, session_date, now + duration)
        return self.get_session(session_id)

    def get_session(self, session_id: int) -> AttendanceSession:
        s = self._sessions.get_by_id(int(session_id))
        if not s:
            raise NotFoundError("Attendance session not found")
        return s

    def get_active_attendance_session(self, *, now: datetime | None = None) -> Optional[AttendanceSession]:
        now = now or datetime.now()
        for s in self._sessions.list_open(now):
            if s.is_active(now):
                return s
        return None

    def lock_attendance(self, attendance_date: date) -> int:
        locked = self._sessions.lock_date(attendance_date)
        logger.info("Locked %d attendance session(s) for %s", locked, attendance_date)
        return locked

    def session_qr_png(self, session_id: int) -> bytes:
        s = self.get_session(session_id)
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(s.token)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    # -------- Marking --------
    def mark_attendance_with_token(
        self,
        token: str,
        student_id: int,
        point: GeoPoint | None = None,
        *,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        now = now or datetime.now()
        token = (token or "").strip()

        s = self._sessions.get_by_token(token) if token else None
        if not s or s.locked:
            raise InvalidOrExpiredQRError("Invalid or expired QR")
        if s.is_expired(now):
            raise QRExpiredError("QR expired")

        if point is not None and not within_fence(point, self._geofence.get()):
            raise OutsideGeofenceError("You are outside the hostel geofence")

        record = AttendanceRecord(
            student_id=int(student_id),
            attendance_date=s.session_date,
            marked_at=now,
            status=AttendanceStatus.PRESENT,
            location=point,
        )
        self._records.upsert(record)
        logger.info("Student %s marked present for %s", student_id, s.session_date)
        return record

    def set_manual_presence(
        self,
        attendance_date: date,
        student_id: int,
        present: bool,
        *,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        record = AttendanceRecord(
            student_id=int(student_id),
            attendance_date=attendance_date,
            marked_at=now or datetime.now(),
            status=AttendanceStatus.PRESENT if present else AttendanceStatus.ABSENT,
        )
        self._records.upsert(record)
        logger.info("Warden set student %s %s for %s", student_id, record.status.value, attendance_date)
        return record

    def finalize_attendance(self, attendance_date: date, *, now: datetime | None = None) -> int:
        """Mark every student without a record absent, then lock the day."""

        now = now or datetime.now()
        already = {r.student_id for r in self._records.list_for_date(attendance_date)}

        written = 0
        for student in self._students.list_all():
            if student.student_id in already:
                continue
            absent = AttendanceRecord(
                student_id=student.student_id,
                attendance_date=attendance_date,
                marked_at=now,
                status=AttendanceStatus.ABSENT,
            )
            if self._records.insert_if_absent(absent):
                written += 1

        self.lock_attendance(attendance_date)
        logger.info("Finalized attendance for %s (%d marked absent)", attendance_date, written)
        return written

    def list_attendance(self, attendance_date: date) -> List[AttendanceRecord]:
        return list(self._records.list_for_date(attendance_date))

    def student_history(self, student_id: int, *, limit: int = 60) -> List[AttendanceRecord]:
        return list(self._records.list_for_student(int(student_id), int(limit)))

    # -------- Geofence --------
    def get_geofence(self) -> Optional[GeofenceSettings]:
        return self._geofence.get()

    def set_geofence(self, center: GeoPoint, radius_m) -> GeofenceSettings:
        try:
            radius = float(radius_m)
        except (TypeError, ValueError):
            raise ValidationError("Radius must be a number")
        if radius <= 0:
            raise ValidationError("Radius must be greater than zero")

        settings = GeofenceSettings(center=make_geopoint(center.lat, center.lng), radius_m=radius)
        self._geofence.save(settings)
        logger.info("Geofence set to %s,%s r=%sm", settings.center.lat, settings.center.lng, radius)
        return settings

    def clear_geofence(self) -> None:
        self._geofence.clear()
        logger.info("Geofence cleared; attendance is allowed from any location")
