from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from ..core.enums import EventStatus, Organizer


@dataclass(frozen=True)
class EventComment:
    comment_id: int
    author: Organizer
    text: str
    created_at: datetime


@dataclass(frozen=True)
class Event:
    """A hostel event.

    Student proposals start as PENDING; warden-created events are published
    (APPROVED) immediately. Only APPROVED events accept registrations.
    """

    event_id: int
    name: str
    description: str
    organizer: Organizer
    event_type: str
    starts_at: datetime
    venue: str
    status: EventStatus
    created_at: datetime
    organizer_name: Optional[str] = None
    expected: Optional[int] = None
    budget: Optional[float] = None
    poster_url: Optional[str] = None
    registrations: Tuple[int, ...] = ()
    comments: Tuple[EventComment, ...] = ()

    @property
    def is_open_for_registration(self) -> bool:
        return self.status == EventStatus.APPROVED


@dataclass(frozen=True)
class NewEvent:
    name: str
    description: str
    event_type: str
    starts_at: datetime
    venue: str
    expected: Optional[int] = None
    budget: Optional[float] = None
    poster_url: Optional[str] = None
