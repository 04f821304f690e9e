from __future__ import annotations

import dataclasses
from datetime import date, datetime
from typing import Optional

import pytest

from src.campusstay.campusstay.attendance.model import AttendanceRecord, AttendanceSession, GeofenceSettings
from src.campusstay.campusstay.complaints.model import Complaint
from src.campusstay.campusstay.container import assemble_container
from src.campusstay.campusstay.core.enums import ComplaintStatus, RequestStatus
from src.campusstay.campusstay.events.model import Event, EventComment
from src.campusstay.campusstay.mess.model import MessPoll, MessVote
from src.campusstay.campusstay.parcels.model import Parcel
from src.campusstay.campusstay.payments.model import Payment
from src.campusstay.campusstay.requests.model import RoomRequest
from src.campusstay.campusstay.rooms.model import Room
from src.campusstay.campusstay.students.model import Student


class InMemoryStudents:
    def __init__(self):
        self._by_id: dict[int, Student] = {}
        self._next_id = 1

    def list_all(self):
        return [self._by_id[k] for k in sorted(self._by_id)]

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._by_id.get(int(student_id))

    def get_by_username(self, username: str) -> Optional[Student]:
        return next((s for s in self._by_id.values() if s.username == username), None)

    def create(self, details) -> int:
        sid = self._next_id
        self._next_id += 1
        self._by_id[sid] = Student(student_id=sid, details=details)
        return sid

    def update_details(self, student_id, details) -> bool:
        s = self._by_id.get(int(student_id))
        if not s:
            return False
        self._by_id[s.student_id] = dataclasses.replace(s, details=details)
        return True

    def set_credentials(self, student_id, *, username, password_hash) -> bool:
        s = self._by_id.get(int(student_id))
        if not s:
            return False
        self._by_id[s.student_id] = dataclasses.replace(s, username=username, password_hash=password_hash)
        return True

    def set_password_hash(self, student_id, password_hash) -> bool:
        s = self._by_id.get(int(student_id))
        if not s or not s.username:
            return False
        self._by_id[s.student_id] = dataclasses.replace(s, password_hash=password_hash)
        return True


class InMemoryRooms:
    """Rooms keyed by id; occupants kept in booking order."""

    def __init__(self):
        self._rooms: dict[int, tuple[str, int]] = {}
        self._occupants: dict[int, list[int]] = {}
        self._next_id = 1

    def _room(self, room_id: int) -> Room:
        name, capacity = self._rooms[room_id]
        return Room(room_id=room_id, name=name, capacity=capacity, occupants=tuple(self._occupants[room_id]))

    def list_all(self):
        return [self._room(rid) for rid in self._rooms]

    def get_by_id(self, room_id):
        return self._room(int(room_id)) if int(room_id) in self._rooms else None

    def find_by_student(self, student_id):
        for rid, occ in self._occupants.items():
            if int(student_id) in occ:
                return self._room(rid)
        return None

    def create(self, *, name, capacity) -> int:
        rid = self._next_id
        self._next_id += 1
        self._rooms[rid] = (name, int(capacity))
        self._occupants[rid] = []
        return rid

    def delete(self, room_id) -> bool:
        if int(room_id) not in self._rooms:
            return False
        del self._rooms[int(room_id)]
        del self._occupants[int(room_id)]
        return True

    def set_capacity(self, *, room_id, capacity):
        if int(room_id) not in self._rooms:
            return None
        name, _ = self._rooms[int(room_id)]
        self._rooms[int(room_id)] = (name, int(capacity))
        occ = self._occupants[int(room_id)]
        dropped = occ[int(capacity):]
        del occ[int(capacity):]
        return dropped

    def add_occupant(self, *, room_id, student_id) -> bool:
        if int(room_id) not in self._rooms or self.find_by_student(student_id):
            return False
        if len(self._occupants[int(room_id)]) >= self._rooms[int(room_id)][1]:
            return False
        self._occupants[int(room_id)].append(int(student_id))
        return True

    def remove_occupant(self, student_id) -> bool:
        for occ in self._occupants.values():
            if int(student_id) in occ:
                occ.remove(int(student_id))
                return True
        return False

    def move_occupant(self, *, student_id, target_room_id) -> bool:
        current = self.find_by_student(student_id)
        if int(target_room_id) not in self._rooms or not current:
            return False
        if len(self._occupants[int(target_room_id)]) >= self._rooms[int(target_room_id)][1]:
            return False
        self.remove_occupant(student_id)
        self._occupants[int(target_room_id)].append(int(student_id))
        return True

    def clear_occupants(self) -> int:
        n = sum(len(o) for o in self._occupants.values())
        for occ in self._occupants.values():
            occ.clear()
        return n


class InMemoryRequests:
    def __init__(self):
        self._by_id: dict[int, RoomRequest] = {}
        self._next_id = 1

    def create(self, *, type, student_id, target_room_id, note, created_at) -> int:
        rid = self._next_id
        self._next_id += 1
        self._by_id[rid] = RoomRequest(
            request_id=rid,
            type=type,
            student_id=int(student_id),
            status=RequestStatus.PENDING,
            created_at=created_at,
            target_room_id=target_room_id,
            note=note,
        )
        return rid

    def get(self, *, request_id):
        return self._by_id.get(int(request_id))

    def list_requests(self, *, status=None, student_id=None):
        items = [
            r
            for r in self._by_id.values()
            if (status is None or r.status == status) and (student_id is None or r.student_id == int(student_id))
        ]
        items.sort(key=lambda r: (r.created_at, r.request_id), reverse=True)
        return items

    def resolve(self, *, request_id, status, resolved_at, note=None) -> bool:
        req = self._by_id.get(int(request_id))
        if not req or req.status != RequestStatus.PENDING:
            return False
        self._by_id[req.request_id] = dataclasses.replace(
            req, status=status, resolved_at=resolved_at, note=note if note is not None else req.note
        )
        return True

    def delete_all(self) -> int:
        n = len(self._by_id)
        self._by_id.clear()
        return n


class InMemorySessions:
    def __init__(self):
        self._by_id: dict[int, AttendanceSession] = {}
        self._next_id = 1

    def create(self, *, token, session_date, created_at, expires_at) -> int:
        sid = self._next_id
        self._next_id += 1
        self._by_id[sid] = AttendanceSession(
            session_id=sid, token=token, session_date=session_date, created_at=created_at, expires_at=expires_at
        )
        return sid

    def get_by_id(self, session_id):
        return self._by_id.get(int(session_id))

    def get_by_token(self, token):
        return next((s for s in self._by_id.values() if s.token == token), None)

    def list_open(self, now):
        return [s for s in self._by_id.values() if not s.locked and s.expires_at > now]

    def lock_date(self, session_date) -> int:
        n = 0
        for sid, s in list(self._by_id.items()):
            if s.session_date == session_date and not s.locked:
                self._by_id[sid] = dataclasses.replace(s, locked=True)
                n += 1
        return n


class InMemoryRecords:
    def __init__(self):
        self._by_key: dict[tuple[date, int], AttendanceRecord] = {}

    def get(self, *, attendance_date, student_id):
        return self._by_key.get((attendance_date, int(student_id)))

    def upsert(self, record) -> None:
        self._by_key[(record.attendance_date, record.student_id)] = record

    def insert_if_absent(self, record) -> bool:
        key = (record.attendance_date, record.student_id)
        if key in self._by_key:
            return False
        self._by_key[key] = record
        return True

    def list_for_date(self, attendance_date):
        return sorted(
            (r for r in self._by_key.values() if r.attendance_date == attendance_date), key=lambda r: r.student_id
        )

    def list_for_student(self, student_id, limit):
        items = [r for r in self._by_key.values() if r.student_id == int(student_id)]
        items.sort(key=lambda r: r.attendance_date, reverse=True)
        return items


class InMemoryGeofence:
    def __init__(self, settings: Optional[GeofenceSettings] = None):
        self._settings = settings

    def get(self):
        return self._settings

    def save(self, settings) -> None:
        self._settings = settings

    def clear(self) -> None:
        self._settings = None


class InMemoryParcels:
    def __init__(self):
        self._by_id: dict[int, Parcel] = {}
        self._next_id = 1

    def create(self, *, student_id, parcel_code, carrier, received_at, otp, note) -> int:
        pid = self._next_id
        self._next_id += 1
        self._by_id[pid] = Parcel(
            parcel_id=pid,
            student_id=int(student_id),
            parcel_code=parcel_code,
            received_at=received_at,
            otp=otp,
            carrier=carrier,
            note=note,
        )
        return pid

    def get(self, parcel_id):
        return self._by_id.get(int(parcel_id))

    def list_parcels(self, *, student_id=None, pending_only=False):
        items = [
            p
            for p in self._by_id.values()
            if (student_id is None or p.student_id == int(student_id)) and not (pending_only and p.collected)
        ]
        items.sort(key=lambda p: (p.received_at, p.parcel_id), reverse=True)
        return items

    def mark_collected(self, *, parcel_id, collected_at) -> bool:
        p = self._by_id.get(int(parcel_id))
        if not p or p.collected:
            return False
        self._by_id[p.parcel_id] = dataclasses.replace(p, collected=True, collected_at=collected_at)
        return True

    def delete(self, parcel_id) -> bool:
        return self._by_id.pop(int(parcel_id), None) is not None


class InMemoryEvents:
    def __init__(self):
        self._by_id: dict[int, Event] = {}
        self._next_id = 1
        self._next_comment = 1

    def create(self, new_event, *, organizer, organizer_name, status, created_at) -> int:
        eid = self._next_id
        self._next_id += 1
        self._by_id[eid] = Event(
            event_id=eid,
            name=new_event.name,
            description=new_event.description,
            organizer=organizer,
            organizer_name=organizer_name,
            event_type=new_event.event_type,
            starts_at=new_event.starts_at,
            venue=new_event.venue,
            expected=new_event.expected,
            budget=new_event.budget,
            poster_url=new_event.poster_url,
            status=status,
            created_at=created_at,
        )
        return eid

    def get(self, event_id):
        return self._by_id.get(int(event_id))

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda e: (e.starts_at, e.event_id))

    def set_status(self, *, event_id, status) -> bool:
        e = self._by_id.get(int(event_id))
        if not e:
            return False
        self._by_id[e.event_id] = dataclasses.replace(e, status=status)
        return True

    def add_registration(self, *, event_id, student_id) -> bool:
        e = self._by_id[int(event_id)]
        if int(student_id) in e.registrations:
            return False
        self._by_id[e.event_id] = dataclasses.replace(e, registrations=e.registrations + (int(student_id),))
        return True

    def add_comment(self, *, event_id, author, text, created_at) -> int:
        e = self._by_id[int(event_id)]
        cid = self._next_comment
        self._next_comment += 1
        comment = EventComment(comment_id=cid, author=author, text=text, created_at=created_at)
        self._by_id[e.event_id] = dataclasses.replace(e, comments=e.comments + (comment,))
        return cid


class InMemoryPolls:
    def __init__(self):
        self._by_id: dict[int, MessPoll] = {}
        self._votes: dict[tuple[int, int], MessVote] = {}
        self._next_id = 1

    def create(self, *, title, kind, options, created_at, closes_at, meal_slot=None, poll_date=None) -> int:
        pid = self._next_id
        self._next_id += 1
        self._by_id[pid] = MessPoll(
            poll_id=pid,
            title=title,
            kind=kind,
            options=tuple(options),
            created_at=created_at,
            closes_at=closes_at,
            meal_slot=meal_slot,
            poll_date=poll_date,
        )
        return pid

    def get(self, poll_id):
        return self._by_id.get(int(poll_id))

    def list_polls(self, *, include_closed=True):
        items = [p for p in self._by_id.values() if include_closed or not p.closed]
        items.sort(key=lambda p: (p.created_at, p.poll_id), reverse=True)
        return items

    def close(self, poll_id) -> bool:
        p = self._by_id.get(int(poll_id))
        if not p:
            return False
        self._by_id[p.poll_id] = dataclasses.replace(p, closed=True)
        return True

    def upsert_vote(self, vote) -> None:
        self._votes[(vote.poll_id, vote.student_id)] = vote

    def list_votes(self, poll_id):
        return [v for (pid, _), v in self._votes.items() if pid == int(poll_id)]

    def count_student_votes(self, *, student_id, option, kind) -> int:
        return sum(
            1
            for (pid, sid), v in self._votes.items()
            if sid == int(student_id) and v.option == option and self._by_id[pid].kind == kind
        )


class InMemoryComplaints:
    def __init__(self):
        self._by_id: dict[int, Complaint] = {}
        self._upvotes: set[tuple[int, str]] = set()
        self._next_id = 1

    def _with_votes(self, c: Complaint) -> Complaint:
        n = sum(1 for cid, _ in self._upvotes if cid == c.complaint_id)
        return dataclasses.replace(c, upvotes=n)

    def create(self, *, text, category, created_at) -> int:
        cid = self._next_id
        self._next_id += 1
        self._by_id[cid] = Complaint(
            complaint_id=cid, text=text, category=category, status=ComplaintStatus.OPEN, created_at=created_at
        )
        return cid

    def get(self, complaint_id):
        c = self._by_id.get(int(complaint_id))
        return self._with_votes(c) if c else None

    def list_complaints(self, *, status=None):
        return [self._with_votes(c) for c in self._by_id.values() if status is None or c.status == status]

    def add_upvote(self, *, complaint_id, voter_key) -> bool:
        key = (int(complaint_id), voter_key)
        if key in self._upvotes:
            return False
        self._upvotes.add(key)
        return True

    def has_upvote(self, *, complaint_id, voter_key) -> bool:
        return (int(complaint_id), voter_key) in self._upvotes

    def resolve(self, *, complaint_id, resolved_at) -> bool:
        c = self._by_id.get(int(complaint_id))
        if not c:
            return False
        self._by_id[c.complaint_id] = dataclasses.replace(
            c, status=ComplaintStatus.RESOLVED, resolved_at=c.resolved_at or resolved_at
        )
        return True


class InMemoryPayments:
    def __init__(self):
        self._items: list[Payment] = []

    def create(self, *, student_id, amount, method, paid_at, note) -> int:
        pid = len(self._items) + 1
        self._items.append(
            Payment(payment_id=pid, student_id=int(student_id), amount=amount, method=method, paid_at=paid_at, note=note)
        )
        return pid

    def list_by_student(self, student_id):
        items = [p for p in self._items if p.student_id == int(student_id)]
        items.sort(key=lambda p: (p.paid_at, p.payment_id), reverse=True)
        return items

    def paid_by_student(self):
        out: dict[int, float] = {}
        for p in self._items:
            out[p.student_id] = out.get(p.student_id, 0.0) + p.amount
        return out


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 1, 9, 0, 0)


@pytest.fixture
def students_repo():
    return InMemoryStudents()


@pytest.fixture
def rooms_repo():
    return InMemoryRooms()


@pytest.fixture
def requests_repo():
    return InMemoryRequests()


@pytest.fixture
def sessions_repo():
    return InMemorySessions()


@pytest.fixture
def records_repo():
    return InMemoryRecords()


@pytest.fixture
def geofence_repo():
    return InMemoryGeofence()


@pytest.fixture
def parcels_repo():
    return InMemoryParcels()


@pytest.fixture
def events_repo():
    return InMemoryEvents()


@pytest.fixture
def polls_repo():
    return InMemoryPolls()


@pytest.fixture
def complaints_repo():
    return InMemoryComplaints()


@pytest.fixture
def payments_repo():
    return InMemoryPayments()


@pytest.fixture
def container(
    students_repo,
    rooms_repo,
    requests_repo,
    sessions_repo,
    records_repo,
    geofence_repo,
    parcels_repo,
    events_repo,
    polls_repo,
    complaints_repo,
    payments_repo,
):
    return assemble_container(
        conn=None,
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
        warden_username="warden",
        warden_password="warden123",
    )


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")

    from src.campusstay.campusstay.main import create_app

    app = create_app(container=container)
    return app.test_client()
