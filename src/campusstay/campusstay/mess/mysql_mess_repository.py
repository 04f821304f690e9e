from __future__ import annotations

import json
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import MealSlot, PollKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import MessPoll, MessVote
from .repository import MessPollRepository

_COLUMNS = "poll_id, title, kind, meal_slot, poll_date, options_json, created_at, closes_at, closed"


class MySQLMessPollRepository(MessPollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_poll(r: dict) -> MessPoll:
        return MessPoll(
            poll_id=int(r["poll_id"]),
            title=r["title"],
            kind=PollKind(r["kind"]),
            meal_slot=MealSlot(r["meal_slot"]) if r.get("meal_slot") else None,
            poll_date=r.get("poll_date"),
            options=tuple(json.loads(r["options_json"] or "[]")),
            created_at=r["created_at"],
            closes_at=r["closes_at"],
            closed=as_bool(r.get("closed")),
        )

    def create(
        self,
        *,
        title: str,
        kind: PollKind,
        options: Sequence[str],
        created_at: datetime,
        closes_at: datetime,
        meal_slot: Optional[MealSlot] = None,
        poll_date: Optional[date] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO mess_polls(title, kind, meal_slot, poll_date, options_json, created_at, closes_at, closed)
                VALUES(%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    title,
                    kind.value,
                    meal_slot.value if meal_slot else None,
                    poll_date,
                    json.dumps(list(options)),
                    created_at,
                    closes_at,
                ),
            )
            return int(cur.lastrowid)

    def get(self, poll_id: int) -> Optional[MessPoll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM mess_polls WHERE poll_id=%s", (int(poll_id),))
            r = fetchone(cur)
            return self._to_poll(r) if r else None

    def list_polls(self, *, include_closed: bool = True) -> Sequence[MessPoll]:
        where = "" if include_closed else "WHERE closed=0"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM mess_polls {where} ORDER BY created_at DESC, poll_id DESC")
            return [self._to_poll(r) for r in fetchall(cur)]

    def close(self, poll_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT poll_id FROM mess_polls WHERE poll_id=%s FOR UPDATE", (int(poll_id),))
            if not fetchone(cur):
                return False
            cur.execute("UPDATE mess_polls SET closed=1 WHERE poll_id=%s", (int(poll_id),))
            return True

    def upsert_vote(self, vote: MessVote) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO mess_poll_votes(poll_id, student_id, option_value, voted_at)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE option_value=VALUES(option_value), voted_at=VALUES(voted_at)
                """,
                (int(vote.poll_id), int(vote.student_id), vote.option, vote.voted_at),
            )

    def list_votes(self, poll_id: int) -> Sequence[MessVote]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT poll_id, student_id, option_value, voted_at
                FROM mess_poll_votes
                WHERE poll_id=%s
                ORDER BY voted_at, student_id
                """,
                (int(poll_id),),
            )
            return [
                MessVote(
                    poll_id=int(r["poll_id"]),
                    student_id=int(r["student_id"]),
                    option=r["option_value"],
                    voted_at=r["voted_at"],
                )
                for r in fetchall(cur)
            ]

    def count_student_votes(self, *, student_id: int, option: str, kind: PollKind) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n
                FROM mess_poll_votes v
                JOIN mess_polls p ON p.poll_id = v.poll_id
                WHERE v.student_id=%s AND v.option_value=%s AND p.kind=%s
                """,
                (int(student_id), option, kind.value),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0
