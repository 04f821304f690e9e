from __future__ import annotations

import logging
from typing import List, Optional

from ..common.validators import floor_capacity
from ..core.constants import DEFAULT_ROOM_CAPACITY
from ..core.exceptions import (
    AlreadyBookedError,
    NoCurrentRoomError,
    NotFoundError,
    RoomFullError,
    ValidationError,
)
from .model import BookingResult, Room
from .repository import RoomRepository

logger = logging.getLogger(__name__)


class RoomService:
    """Use cases: room registry (capacity-constrained seat booking)."""

    def __init__(self, rooms: RoomRepository):
        self._rooms = rooms

    def list_rooms(self) -> List[Room]:
        return sorted(self._rooms.list_all(), key=lambda r: (r.name.casefold(), r.name))

    def get_room(self, room_id: int) -> Room:
        room = self._rooms.get_by_id(int(room_id))
        if not room:
            raise NotFoundError("Room not found")
        return room

    def create_room(self, name: str, capacity=DEFAULT_ROOM_CAPACITY) -> Room:
        name = str(name or "").strip()
        capacity = floor_capacity(capacity)
        room_id = self._rooms.create(name=name, capacity=capacity)
        logger.info("Created room %s (%s) with capacity %s", room_id, name, capacity)
        return Room(room_id=room_id, name=name, capacity=capacity)

    def delete_room(self, room_id: int) -> None:
        room = self.get_room(room_id)
        if not self._rooms.delete(room.room_id):
            raise NotFoundError("Room not found")
        if room.occupants:
            logger.warning(
                "Deleted room %s (%s); %d occupant(s) are now without a room: %s",
                room.room_id,
                room.name,
                len(room.occupants),
                list(room.occupants),
            )

    def set_room_capacity(self, room_id: int, capacity) -> Room:
        capacity = floor_capacity(capacity)
        dropped = self._rooms.set_capacity(room_id=int(room_id), capacity=capacity)
        if dropped is None:
            raise NotFoundError("Room not found")
        if dropped:
            logger.warning(
                "Room %s shrunk to %s seats; dropped latest occupant(s) %s",
                room_id,
                capacity,
                list(dropped),
            )
        return self.get_room(room_id)

    def available_seats(self, room_id: int) -> int:
        room = self._rooms.get_by_id(int(room_id))
        return room.available_seats if room else 0

    def find_student_room(self, student_id: int) -> Optional[Room]:
        return self._rooms.find_by_student(int(student_id))

    def book_room(self, student_id: int, room_id: int) -> BookingResult:
        student_id = int(student_id)
        if self._rooms.find_by_student(student_id):
            raise AlreadyBookedError("Student already has a room")

        room = self.get_room(room_id)
        if room.is_full:
            raise RoomFullError("Room is full")

        if not self._rooms.add_occupant(room_id=room.room_id, student_id=student_id):
            # Lost a race with another writer; report what the registry says now.
            if self._rooms.find_by_student(student_id):
                raise AlreadyBookedError("Student already has a room")
            raise RoomFullError("Room is full")

        booked = self.get_room(room.room_id)
        logger.info("Student %s booked room %s", student_id, booked.room_id)
        return BookingResult(
            room=booked,
            roommates=tuple(s for s in booked.occupants if s != student_id),
        )

    def unbook_student(self, student_id: int) -> None:
        if self._rooms.remove_occupant(int(student_id)):
            logger.info("Student %s left their room", student_id)

    def validate_move(self, student_id: int, target_room_id: int) -> Room:
        """Check a move without applying it; returns the target room."""

        target = self._rooms.get_by_id(int(target_room_id))
        if not target:
            raise NotFoundError("Target room not found")

        current = self._rooms.find_by_student(int(student_id))
        if not current:
            raise NoCurrentRoomError("Student has no current room")

        if target.is_full:
            raise RoomFullError("Target room full")
        return target

    def move_student(self, student_id: int, target_room_id: int) -> Room:
        self.validate_move(student_id, target_room_id)

        if not self._rooms.move_occupant(student_id=int(student_id), target_room_id=int(target_room_id)):
            # State changed between the check and the write.
            self.validate_move(student_id, target_room_id)
            raise ValidationError("Could not move student")

        logger.info("Student %s moved to room %s", student_id, target_room_id)
        return self.get_room(target_room_id)

    def reset_all_bookings(self) -> int:
        cleared = self._rooms.clear_occupants()
        logger.warning("Reset all room bookings (%d occupant(s) removed)", cleared)
        return cleared
