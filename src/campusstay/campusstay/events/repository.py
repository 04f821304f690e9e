from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import EventStatus, Organizer
from .model import Event, NewEvent


class EventRepository(Protocol):
    """Events with their registrations and comments loaded eagerly."""

    def create(
        self,
        new_event: NewEvent,
        *,
        organizer: Organizer,
        organizer_name: Optional[str],
        status: EventStatus,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get(self, event_id: int) -> Optional[Event]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Event]:
        """Ordered by start time (earliest first)."""

        raise NotImplementedError

    def set_status(self, *, event_id: int, status: EventStatus) -> bool:
        raise NotImplementedError

    def add_registration(self, *, event_id: int, student_id: int) -> bool:
        """False when the student was already registered."""

        raise NotImplementedError

    def add_comment(self, *, event_id: int, author: Organizer, text: str, created_at: datetime) -> int:
        raise NotImplementedError
