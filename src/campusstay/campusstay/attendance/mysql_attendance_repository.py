from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_float, db_cursor, fetchall, fetchone
from .model import AttendanceRecord, AttendanceSession, GeoPoint
from .repository import AttendanceRecordRepository, AttendanceSessionRepository

_SESSION_COLUMNS = "session_id, token, session_date, created_at, expires_at, locked"
_RECORD_COLUMNS = "student_id, attendance_date, marked_at, status, latitude, longitude"


class MySQLAttendanceSessionRepository(AttendanceSessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_session(r: dict) -> AttendanceSession:
        return AttendanceSession(
            session_id=int(r["session_id"]),
            token=r["token"],
            session_date=r["session_date"],
            created_at=r["created_at"],
            expires_at=r["expires_at"],
            locked=as_bool(r["locked"]),
        )

    def create(self, *, token: str, session_date: date, created_at: datetime, expires_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_sessions(token, session_date, created_at, expires_at, locked)
                VALUES(%s,%s,%s,%s,0)
                """,
                (token, session_date, created_at, expires_at),
            )
            return int(cur.lastrowid)

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE session_id=%s",
                (int(session_id),),
            )
            r = fetchone(cur)
            return self._to_session(r) if r else None

    def get_by_token(self, token: str) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE token=%s", (token,))
            r = fetchone(cur)
            return self._to_session(r) if r else None

    def list_open(self, now: datetime) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM attendance_sessions
                WHERE locked=0 AND expires_at > %s
                ORDER BY session_id ASC
                """,
                (now,),
            )
            return [self._to_session(r) for r in fetchall(cur)]

    def lock_date(self, session_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_sessions SET locked=1 WHERE session_date=%s AND locked=0",
                (session_date,),
            )
            return int(cur.rowcount)


class MySQLAttendanceRecordRepository(AttendanceRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_record(r: dict) -> AttendanceRecord:
        lat = as_float(r.get("latitude"))
        lng = as_float(r.get("longitude"))
        return AttendanceRecord(
            student_id=int(r["student_id"]),
            attendance_date=r["attendance_date"],
            marked_at=r["marked_at"],
            status=AttendanceStatus(r["status"]),
            location=GeoPoint(lat=lat, lng=lng) if lat is not None and lng is not None else None,
        )

    @staticmethod
    def _params(record: AttendanceRecord) -> tuple:
        loc = record.location
        return (
            int(record.student_id),
            record.attendance_date,
            record.marked_at,
            record.status.value,
            loc.lat if loc else None,
            loc.lng if loc else None,
        )

    def get(self, *, attendance_date: date, student_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE attendance_date=%s AND student_id=%s
                """,
                (attendance_date, int(student_id)),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def upsert(self, record: AttendanceRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(student_id, attendance_date, marked_at, status, latitude, longitude)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    marked_at=VALUES(marked_at),
                    status=VALUES(status),
                    latitude=VALUES(latitude),
                    longitude=VALUES(longitude)
                """,
                self._params(record),
            )

    def insert_if_absent(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO attendance_records(student_id, attendance_date, marked_at, status, latitude, longitude)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                self._params(record),
            )
            return cur.rowcount > 0

    def list_for_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE attendance_date=%s
                ORDER BY student_id ASC
                """,
                (attendance_date,),
            )
            return [self._to_record(r) for r in fetchall(cur)]

    def list_for_student(self, student_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s
                ORDER BY attendance_date DESC
                LIMIT %s
                """,
                (int(student_id), int(limit)),
            )
            return [self._to_record(r) for r in fetchall(cur)]
