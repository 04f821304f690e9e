from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Room


class RoomRepository(Protocol):
    """Persistence surface for the room registry.

    Each mutating method is one read-modify-write of the whole collection and
    must re-check its own precondition atomically, returning False when the
    state changed underneath the caller.
    """

    def list_all(self) -> Sequence[Room]:
        """Rooms in storage (creation) order."""

        raise NotImplementedError

    def get_by_id(self, room_id: int) -> Optional[Room]:
        raise NotImplementedError

    def find_by_student(self, student_id: int) -> Optional[Room]:
        raise NotImplementedError

    def create(self, *, name: str, capacity: int) -> int:
        raise NotImplementedError

    def delete(self, room_id: int) -> bool:
        raise NotImplementedError

    def set_capacity(self, *, room_id: int, capacity: int) -> Optional[Sequence[int]]:
        """Update capacity and truncate occupants to it.

        Returns the dropped student ids (latest bookings), or None if the room
        does not exist.
        """

        raise NotImplementedError

    def add_occupant(self, *, room_id: int, student_id: int) -> bool:
        raise NotImplementedError

    def remove_occupant(self, student_id: int) -> bool:
        raise NotImplementedError

    def move_occupant(self, *, student_id: int, target_room_id: int) -> bool:
        raise NotImplementedError

    def clear_occupants(self) -> int:
        raise NotImplementedError
