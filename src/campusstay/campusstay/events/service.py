from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import clean_optional, require_non_empty
from ..core.constants import EVENT_TYPES
from ..core.enums import EventStatus, Organizer
from ..core.exceptions import ClosedError, NotFoundError, ValidationError
from .model import Event, NewEvent
from .repository import EventRepository

logger = logging.getLogger(__name__)


def _optional_number(value, field_name: str, cast):
    if value in (None, ""):
        return None
    try:
        number = cast(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return number


def _event_type(value) -> str:
    wanted = (value or "").strip().casefold()
    if not wanted:
        return "Other"
    match = next((t for t in EVENT_TYPES if t.casefold() == wanted), None)
    if match is None:
        raise ValidationError(f"Event type must be one of: {', '.join(EVENT_TYPES)}")
    return match


def build_new_event(data: dict) -> NewEvent:
    """Validate a raw event payload (JSON or form fields)."""

    starts_at = data.get("starts_at")
    if isinstance(starts_at, str):
        try:
            starts_at = parse_iso_datetime(starts_at)
        except ValueError:
            raise ValidationError("Start time must be an ISO date-time")
    if not isinstance(starts_at, datetime):
        raise ValidationError("Start time is required")

    return NewEvent(
        name=require_non_empty(data.get("name") or "", "Event name"),
        description=(data.get("description") or "").strip(),
        event_type=_event_type(data.get("event_type")),
        starts_at=starts_at,
        venue=require_non_empty(data.get("venue") or "", "Venue"),
        expected=_optional_number(data.get("expected"), "Expected participants", int),
        budget=_optional_number(data.get("budget"), "Budget", float),
        poster_url=clean_optional(data.get("poster_url")),
    )


class EventService:
    """Use cases: event proposals, moderation, registration and comments."""

    def __init__(self, events: EventRepository):
        self._events = events

    def create_event(
        self,
        payload: dict | NewEvent,
        organizer: Organizer | str,
        organizer_name: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> Event:
        new_event = payload if isinstance(payload, NewEvent) else build_new_event(payload)
        organizer = Organizer(organizer)
        status = EventStatus.PENDING if organizer == Organizer.STUDENT else EventStatus.APPROVED

        event_id = self._events.create(
            new_event,
            organizer=organizer,
            organizer_name=clean_optional(organizer_name),
            status=status,
            created_at=now or datetime.now(),
        )
        logger.info("Event %s (%s) created by %s as %s", event_id, new_event.name, organizer.value, status.value)
        return self.get_event(event_id)

    def get_event(self, event_id: int) -> Event:
        e = self._events.get(int(event_id))
        if not e:
            raise NotFoundError("Event not found")
        return e

    def _set_status(self, event_id: int, status: EventStatus) -> Event:
        if not self._events.set_status(event_id=int(event_id), status=status):
            raise NotFoundError("Event not found")
        logger.info("Event %s is now %s", event_id, status.value)
        return self.get_event(event_id)

    def approve_event(self, event_id: int) -> Event:
        return self._set_status(event_id, EventStatus.APPROVED)

    def reject_event(self, event_id: int) -> Event:
        return self._set_status(event_id, EventStatus.REJECTED)

    def complete_event(self, event_id: int) -> Event:
        return self._set_status(event_id, EventStatus.COMPLETED)

    def list_events(self) -> List[Event]:
        return sorted(self._events.list_all(), key=lambda e: (e.starts_at, e.event_id))

    def list_upcoming(self, now: Optional[datetime] = None) -> List[Event]:
        now = now or datetime.now()
        return [e for e in self.list_events() if e.status != EventStatus.REJECTED and e.starts_at >= now]

    def list_past(self, now: Optional[datetime] = None) -> List[Event]:
        now = now or datetime.now()
        return [e for e in self.list_events() if e.starts_at < now]

    def list_pending_proposals(self) -> List[Event]:
        return [e for e in self.list_events() if e.status == EventStatus.PENDING]

    def register_for_event(self, event_id: int, student_id: int) -> Event:
        e = self.get_event(event_id)
        if not e.is_open_for_registration:
            raise ClosedError("Registration closed")
        if self._events.add_registration(event_id=e.event_id, student_id=int(student_id)):
            logger.info("Student %s registered for event %s", student_id, e.event_id)
        return self.get_event(e.event_id)

    def add_event_comment(
        self,
        event_id: int,
        author: Organizer | str,
        text: str,
        *,
        now: Optional[datetime] = None,
    ) -> Event:
        e = self.get_event(event_id)
        body = require_non_empty(text or "", "Comment")
        self._events.add_comment(
            event_id=e.event_id,
            author=Organizer(author),
            text=body,
            created_at=now or datetime.now(),
        )
        return self.get_event(e.event_id)

    def event_analytics(self) -> Dict[str, object]:
        events = self.list_events()
        by_organizer = Counter(e.organizer for e in events)
        return {
            "participants": [
                {"event_id": e.event_id, "name": e.name, "count": len(e.registrations)} for e in events
            ],
            "by_type": dict(Counter(e.event_type for e in events)),
            "ratio": {o.value: by_organizer.get(o, 0) for o in Organizer},
        }
