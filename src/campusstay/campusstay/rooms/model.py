from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Room:
    """Domain entity: a hostel room.

    ``occupants`` holds student ids in booking order (earliest first).
    """

    room_id: int
    name: str
    capacity: int
    occupants: Tuple[int, ...] = ()

    @property
    def available_seats(self) -> int:
        return max(0, self.capacity - len(self.occupants))

    @property
    def is_full(self) -> bool:
        return len(self.occupants) >= self.capacity


@dataclass(frozen=True)
class BookingResult:
    room: Room
    roommates: Tuple[int, ...]
