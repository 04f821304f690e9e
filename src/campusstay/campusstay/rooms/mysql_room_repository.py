from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Sequence

import mysql.connector

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import Room
from .repository import RoomRepository


class MySQLRoomRepository(RoomRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _load_occupants(cur, room_ids: Sequence[int]) -> Dict[int, List[int]]:
        out: Dict[int, List[int]] = defaultdict(list)
        if not room_ids:
            return out
        cur.execute(
            f"""
            SELECT room_id, student_id
            FROM room_occupants
            WHERE room_id IN ({placeholders(room_ids)})
            ORDER BY seq ASC
            """,
            tuple(room_ids),
        )
        for r in fetchall(cur):
            out[int(r["room_id"])].append(int(r["student_id"]))
        return out

    @staticmethod
    def _to_room(row: dict, occupants: Sequence[int]) -> Room:
        return Room(
            room_id=int(row["room_id"]),
            name=row["name"],
            capacity=int(row["capacity"]),
            occupants=tuple(occupants),
        )

    @staticmethod
    def _occupant_count(cur, room_id: int) -> int:
        cur.execute("SELECT COUNT(*) AS n FROM room_occupants WHERE room_id=%s", (int(room_id),))
        return int(fetchone(cur)["n"])

    def list_all(self) -> Sequence[Room]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT room_id, name, capacity FROM rooms ORDER BY room_id ASC")
            rows = fetchall(cur)
            occupants = self._load_occupants(cur, [int(r["room_id"]) for r in rows])
            return [self._to_room(r, occupants.get(int(r["room_id"]), [])) for r in rows]

    def get_by_id(self, room_id: int) -> Optional[Room]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT room_id, name, capacity FROM rooms WHERE room_id=%s", (int(room_id),))
            r = fetchone(cur)
            if not r:
                return None
            occupants = self._load_occupants(cur, [int(r["room_id"])])
            return self._to_room(r, occupants.get(int(r["room_id"]), []))

    def find_by_student(self, student_id: int) -> Optional[Room]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT r.room_id, r.name, r.capacity
                FROM room_occupants o
                JOIN rooms r ON r.room_id = o.room_id
                WHERE o.student_id=%s
                """,
                (int(student_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            occupants = self._load_occupants(cur, [int(r["room_id"])])
            return self._to_room(r, occupants.get(int(r["room_id"]), []))

    def create(self, *, name: str, capacity: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO rooms(name, capacity) VALUES(%s,%s)", (name, int(capacity)))
            return int(cur.lastrowid)

    def delete(self, room_id: int) -> bool:
        # room_occupants rows go with the room (ON DELETE CASCADE).
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM rooms WHERE room_id=%s", (int(room_id),))
            return cur.rowcount > 0

    def set_capacity(self, *, room_id: int, capacity: int) -> Optional[Sequence[int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT room_id FROM rooms WHERE room_id=%s FOR UPDATE", (int(room_id),))
            if not fetchone(cur):
                return None

            cur.execute("UPDATE rooms SET capacity=%s WHERE room_id=%s", (int(capacity), int(room_id)))
            current = self._load_occupants(cur, [int(room_id)]).get(int(room_id), [])
            dropped = current[int(capacity):]
            if dropped:
                cur.execute(
                    f"DELETE FROM room_occupants WHERE room_id=%s AND student_id IN ({placeholders(dropped)})",
                    tuple([int(room_id)] + dropped),
                )
            return dropped

    def add_occupant(self, *, room_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT capacity FROM rooms WHERE room_id=%s FOR UPDATE", (int(room_id),))
            r = fetchone(cur)
            if not r:
                return False
            if self._occupant_count(cur, room_id) >= int(r["capacity"]):
                return False
            try:
                cur.execute(
                    "INSERT INTO room_occupants(room_id, student_id) VALUES(%s,%s)",
                    (int(room_id), int(student_id)),
                )
            except mysql.connector.IntegrityError:
                # UNIQUE(student_id): booked somewhere else in the meantime.
                return False
            return True

    def remove_occupant(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM room_occupants WHERE student_id=%s", (int(student_id),))
            return cur.rowcount > 0

    def move_occupant(self, *, student_id: int, target_room_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT capacity FROM rooms WHERE room_id=%s FOR UPDATE", (int(target_room_id),))
            target = fetchone(cur)
            if not target:
                return False

            cur.execute(
                "SELECT room_id FROM room_occupants WHERE student_id=%s FOR UPDATE",
                (int(student_id),),
            )
            current = fetchone(cur)
            if not current:
                return False
            if self._occupant_count(cur, target_room_id) >= int(target["capacity"]):
                return False

            cur.execute("DELETE FROM room_occupants WHERE student_id=%s", (int(student_id),))
            cur.execute(
                "INSERT INTO room_occupants(room_id, student_id) VALUES(%s,%s)",
                (int(target_room_id), int(student_id)),
            )
            return True

    def clear_occupants(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM room_occupants")
            return int(cur.rowcount)
