from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.campusstay.campusstay.core.enums import EventStatus, Organizer
from src.campusstay.campusstay.core.exceptions import ClosedError, NotFoundError, ValidationError
from src.campusstay.campusstay.events.service import EventService


@pytest.fixture
def svc(events_repo):
    return EventService(events_repo)


def _payload(name="Movie night", starts_at="2026-02-10T19:00", **extra):
    data = {"name": name, "description": "Open air", "event_type": "Cultural", "starts_at": starts_at, "venue": "Lawn"}
    data.update(extra)
    return data


def test_student_proposals_wait_for_approval(svc):
    proposal = svc.create_event(_payload(), "student", "Asha")
    published = svc.create_event(_payload("Football"), Organizer.WARDEN)

    assert proposal.status == EventStatus.PENDING
    assert proposal.organizer_name == "Asha"
    assert published.status == EventStatus.APPROVED
    assert [e.event_id for e in svc.list_pending_proposals()] == [proposal.event_id]


def test_payload_validation(svc):
    with pytest.raises(ValidationError):
        svc.create_event(_payload(name=""), "warden")
    with pytest.raises(ValidationError):
        svc.create_event(_payload(starts_at="next friday"), "warden")
    with pytest.raises(ValidationError):
        svc.create_event(_payload(budget="-5"), "warden")

    e = svc.create_event(_payload(expected="40", budget="1500.5", event_type=""), "warden")
    assert (e.expected, e.budget, e.event_type) == (40, 1500.5, "Other")


def test_registration_only_when_approved(svc):
    e = svc.create_event(_payload(), "student")

    with pytest.raises(ClosedError):
        svc.register_for_event(e.event_id, 1)

    svc.approve_event(e.event_id)
    svc.register_for_event(e.event_id, 1)
    registered = svc.register_for_event(e.event_id, 1)
    assert registered.registrations == (1,)

    svc.complete_event(e.event_id)
    with pytest.raises(ClosedError):
        svc.register_for_event(e.event_id, 2)
    with pytest.raises(NotFoundError):
        svc.register_for_event(404, 1)


def test_upcoming_and_past(svc):
    now = datetime(2026, 2, 5, 12, 0)
    past = svc.create_event(_payload("Old", starts_at="2026-02-01T10:00"), "warden")
    soon = svc.create_event(_payload("Soon", starts_at="2026-02-06T10:00"), "warden")
    later = svc.create_event(_payload("Later", starts_at="2026-02-07T10:00"), "student")
    rejected = svc.create_event(_payload("Nope", starts_at="2026-02-08T10:00"), "student")
    svc.reject_event(rejected.event_id)

    assert [e.event_id for e in svc.list_upcoming(now)] == [soon.event_id, later.event_id]
    assert [e.event_id for e in svc.list_past(now)] == [past.event_id]
    assert [e.name for e in svc.list_events()] == ["Old", "Soon", "Later", "Nope"]


def test_comments(svc):
    e = svc.create_event(_payload(), "warden")

    with pytest.raises(ValidationError):
        svc.add_event_comment(e.event_id, "student", "   ")
    with pytest.raises(NotFoundError):
        svc.add_event_comment(404, "student", "hi")

    updated = svc.add_event_comment(e.event_id, "student", "  Count me in ", now=datetime(2026, 2, 2))
    assert [(c.author, c.text) for c in updated.comments] == [(Organizer.STUDENT, "Count me in")]


def test_status_changes_on_unknown_event(svc):
    for action in (svc.approve_event, svc.reject_event, svc.complete_event):
        with pytest.raises(NotFoundError):
            action(404)


def test_analytics(svc):
    a = svc.create_event(_payload("A"), "warden")
    svc.create_event(_payload("B", event_type="Sports"), "student")
    svc.create_event(_payload("C", event_type="Sports", starts_at="2026-02-11T10:00"), "warden")
    svc.register_for_event(a.event_id, 1)
    svc.register_for_event(a.event_id, 2)

    stats = svc.event_analytics()

    assert {p["name"]: p["count"] for p in stats["participants"]} == {"A": 2, "B": 0, "C": 0}
    assert stats["by_type"] == {"Cultural": 1, "Sports": 2}
    assert stats["ratio"] == {"student": 1, "warden": 2}


def test_create_accepts_datetime_objects(svc):
    start = datetime(2026, 3, 1, 18, 0) + timedelta(minutes=30)
    e = svc.create_event(_payload(starts_at=start), "warden")
    assert e.starts_at == start
