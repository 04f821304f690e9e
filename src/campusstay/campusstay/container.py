from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from werkzeug.security import generate_password_hash

from .attendance.mysql_attendance_repository import (
    MySQLAttendanceRecordRepository,
    MySQLAttendanceSessionRepository,
)
from .attendance.mysql_geofence_repository import MySQLGeofenceRepository
from .attendance.repository import AttendanceRecordRepository, AttendanceSessionRepository, GeofenceRepository
from .attendance.service import AttendanceService
from .complaints.mysql_complaint_repository import MySQLComplaintRepository
from .complaints.repository import ComplaintRepository
from .complaints.service import ComplaintService
from .core.constants import DEFAULT_ATTENDANCE_QR_MINUTES, DEFAULT_PAYMENT_DUE_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import EventService
from .mess.mysql_mess_repository import MySQLMessPollRepository
from .mess.repository import MessPollRepository
from .mess.service import MessService
from .parcels.mysql_parcel_repository import MySQLParcelRepository
from .parcels.repository import ParcelRepository
from .parcels.service import ParcelService
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.repository import PaymentRepository
from .payments.service import PaymentService
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.repository import RequestRepository
from .requests.service import RequestService
from .rooms.mysql_room_repository import MySQLRoomRepository
from .rooms.repository import RoomRepository
from .rooms.service import RoomService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import AuthService, StudentService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    rooms_repo: RoomRepository
    requests_repo: RequestRepository
    sessions_repo: AttendanceSessionRepository
    records_repo: AttendanceRecordRepository
    geofence_repo: GeofenceRepository
    students_repo: StudentRepository
    parcels_repo: ParcelRepository
    events_repo: EventRepository
    polls_repo: MessPollRepository
    complaints_repo: ComplaintRepository
    payments_repo: PaymentRepository

    auth_service: AuthService
    student_service: StudentService
    room_service: RoomService
    request_service: RequestService
    attendance_service: AttendanceService
    parcel_service: ParcelService
    event_service: EventService
    mess_service: MessService
    complaint_service: ComplaintService
    payment_service: PaymentService


def assemble_container(
    *,
    conn: Optional[DatabaseConnection],
    rooms_repo: RoomRepository,
    requests_repo: RequestRepository,
    sessions_repo: AttendanceSessionRepository,
    records_repo: AttendanceRecordRepository,
    geofence_repo: GeofenceRepository,
    students_repo: StudentRepository,
    parcels_repo: ParcelRepository,
    events_repo: EventRepository,
    polls_repo: MessPollRepository,
    complaints_repo: ComplaintRepository,
    payments_repo: PaymentRepository,
    warden_username: str = "warden",
    warden_password: str = "warden123",
    attendance_qr_minutes: int = DEFAULT_ATTENDANCE_QR_MINUTES,
    payment_due_days: int = DEFAULT_PAYMENT_DUE_DAYS,
) -> Container:
    """Wire services on top of any set of repositories (MySQL or in-memory)."""

    room_service = RoomService(rooms_repo)

    return Container(
        conn=conn,
        rooms_repo=rooms_repo,
        requests_repo=requests_repo,
        sessions_repo=sessions_repo,
        records_repo=records_repo,
        geofence_repo=geofence_repo,
        students_repo=students_repo,
        parcels_repo=parcels_repo,
        events_repo=events_repo,
        polls_repo=polls_repo,
        complaints_repo=complaints_repo,
        payments_repo=payments_repo,
        auth_service=AuthService(
            students_repo,
            warden_username=warden_username,
            warden_password_hash=generate_password_hash(warden_password),
        ),
        student_service=StudentService(students_repo),
        room_service=room_service,
        request_service=RequestService(requests_repo, room_service),
        attendance_service=AttendanceService(
            sessions_repo,
            records_repo,
            geofence_repo,
            students_repo,
            default_duration=timedelta(minutes=int(attendance_qr_minutes)),
        ),
        parcel_service=ParcelService(parcels_repo, students_repo),
        event_service=EventService(events_repo),
        mess_service=MessService(polls_repo),
        complaint_service=ComplaintService(complaints_repo),
        payment_service=PaymentService(payments_repo, students_repo, due_days=int(payment_due_days)),
    )


def build_container(*, db_config: dict, settings=None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble_container(
        conn=conn,
        rooms_repo=MySQLRoomRepository(conn),
        requests_repo=MySQLRequestRepository(conn),
        sessions_repo=MySQLAttendanceSessionRepository(conn),
        records_repo=MySQLAttendanceRecordRepository(conn),
        geofence_repo=MySQLGeofenceRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        parcels_repo=MySQLParcelRepository(conn),
        events_repo=MySQLEventRepository(conn),
        polls_repo=MySQLMessPollRepository(conn),
        complaints_repo=MySQLComplaintRepository(conn),
        payments_repo=MySQLPaymentRepository(conn),
        warden_username=str(getattr(settings, "WARDEN_USERNAME", "warden")),
        warden_password=str(getattr(settings, "WARDEN_PASSWORD", "warden123")),
        attendance_qr_minutes=int(getattr(settings, "ATTENDANCE_QR_MINUTES", DEFAULT_ATTENDANCE_QR_MINUTES)),
        payment_due_days=int(getattr(settings, "PAYMENT_DUE_DAYS", DEFAULT_PAYMENT_DUE_DAYS)),
    )
