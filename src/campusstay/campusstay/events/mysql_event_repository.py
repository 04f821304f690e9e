from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..core.enums import EventStatus, Organizer
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone, placeholders
from .model import Event, EventComment, NewEvent
from .repository import EventRepository

_COLUMNS = (
    "event_id, name, description, organizer, organizer_name, event_type, starts_at, venue, "
    "expected, budget, poster_url, status, created_at"
)


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_event(r: dict, registrations: List[int], comments: List[EventComment]) -> Event:
        return Event(
            event_id=int(r["event_id"]),
            name=r["name"],
            description=r.get("description") or "",
            organizer=Organizer(r["organizer"]),
            organizer_name=r.get("organizer_name"),
            event_type=r["event_type"],
            starts_at=r["starts_at"],
            venue=r.get("venue") or "",
            expected=int(r["expected"]) if r.get("expected") is not None else None,
            budget=as_float(r.get("budget")),
            poster_url=r.get("poster_url"),
            status=EventStatus(r["status"]),
            created_at=r["created_at"],
            registrations=tuple(registrations),
            comments=tuple(comments),
        )

    def _hydrate(self, cur, rows: List[dict]) -> List[Event]:
        if not rows:
            return []
        ids = [int(r["event_id"]) for r in rows]
        marks = placeholders(ids)

        regs: Dict[int, List[int]] = defaultdict(list)
        cur.execute(
            f"""
            SELECT event_id, student_id FROM event_registrations
            WHERE event_id IN ({marks})
            ORDER BY registered_at, student_id
            """,
            tuple(ids),
        )
        for r in fetchall(cur):
            regs[int(r["event_id"])].append(int(r["student_id"]))

        comments: Dict[int, List[EventComment]] = defaultdict(list)
        cur.execute(
            f"""
            SELECT comment_id, event_id, author, text, created_at FROM event_comments
            WHERE event_id IN ({marks})
            ORDER BY created_at, comment_id
            """,
            tuple(ids),
        )
        for r in fetchall(cur):
            comments[int(r["event_id"])].append(
                EventComment(
                    comment_id=int(r["comment_id"]),
                    author=Organizer(r["author"]),
                    text=r["text"],
                    created_at=r["created_at"],
                )
            )

        return [self._to_event(r, regs[int(r["event_id"])], comments[int(r["event_id"])]) for r in rows]

    def create(
        self,
        new_event: NewEvent,
        *,
        organizer: Organizer,
        organizer_name: Optional[str],
        status: EventStatus,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO events(
                    name, description, organizer, organizer_name, event_type, starts_at, venue,
                    expected, budget, poster_url, status, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    new_event.name,
                    new_event.description,
                    organizer.value,
                    organizer_name,
                    new_event.event_type,
                    new_event.starts_at,
                    new_event.venue,
                    new_event.expected,
                    new_event.budget,
                    new_event.poster_url,
                    status.value,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def get(self, event_id: int) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events WHERE event_id=%s", (int(event_id),))
            r = fetchone(cur)
            if not r:
                return None
            return self._hydrate(cur, [r])[0]

    def list_all(self) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events ORDER BY starts_at, event_id")
            return self._hydrate(cur, fetchall(cur))

    def set_status(self, *, event_id: int, status: EventStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT event_id FROM events WHERE event_id=%s FOR UPDATE", (int(event_id),))
            if not fetchone(cur):
                return False
            cur.execute("UPDATE events SET status=%s WHERE event_id=%s", (status.value, int(event_id)))
            return True

    def add_registration(self, *, event_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO event_registrations(event_id, student_id, registered_at) VALUES(%s,%s,NOW())",
                (int(event_id), int(student_id)),
            )
            return cur.rowcount > 0

    def add_comment(self, *, event_id: int, author: Organizer, text: str, created_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO event_comments(event_id, author, text, created_at) VALUES(%s,%s,%s,%s)",
                (int(event_id), author.value, text, created_at),
            )
            return int(cur.lastrowid)
