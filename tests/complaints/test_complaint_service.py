from __future__ import annotations

from datetime import timedelta

import pytest

from src.campusstay.campusstay.core.enums import ComplaintStatus
from src.campusstay.campusstay.core.exceptions import ClosedError, NotFoundError, ValidationError
from src.campusstay.campusstay.complaints.service import ComplaintService


@pytest.fixture
def svc(complaints_repo):
    return ComplaintService(complaints_repo)


def test_create_complaint_validates_category(svc, fixed_now):
    c = svc.create_complaint("  Wifi drops every night ", "internet", now=fixed_now)

    assert c.text == "Wifi drops every night"
    assert c.category == "Internet"
    assert c.status == ComplaintStatus.OPEN

    with pytest.raises(ValidationError):
        svc.create_complaint("Noise", "Neighbours")
    with pytest.raises(ValidationError):
        svc.create_complaint("   ", "Other")


def test_one_upvote_per_voter(svc):
    c = svc.create_complaint("Cold water", "Water")

    svc.upvote_complaint(c.complaint_id, "student:1")
    again = svc.upvote_complaint(c.complaint_id, "student:1")
    assert again.upvotes == 1

    svc.upvote_complaint(c.complaint_id, "student:2")
    assert svc.get_complaint(c.complaint_id).upvotes == 2
    assert svc.has_upvoted(c.complaint_id, "student:1")
    assert not svc.has_upvoted(c.complaint_id, "student:3")


def test_active_feed_sorted_by_upvotes_then_newest(svc, fixed_now):
    old = svc.create_complaint("Old", "Room", now=fixed_now)
    new = svc.create_complaint("New", "Room", now=fixed_now + timedelta(hours=1))
    popular = svc.create_complaint("Popular", "Mess", now=fixed_now - timedelta(days=1))
    done = svc.create_complaint("Done", "Mess", now=fixed_now)
    svc.upvote_complaint(popular.complaint_id, "student:1")
    svc.resolve_complaint(done.complaint_id)

    assert [c.complaint_id for c in svc.list_active_complaints()] == [
        popular.complaint_id,
        new.complaint_id,
        old.complaint_id,
    ]


def test_resolved_complaints_reject_upvotes(svc):
    c = svc.create_complaint("Broken fan", "Electricity")
    resolved = svc.resolve_complaint(c.complaint_id)

    assert resolved.status == ComplaintStatus.RESOLVED
    with pytest.raises(ClosedError):
        svc.upvote_complaint(c.complaint_id, "student:1")
    with pytest.raises(NotFoundError):
        svc.upvote_complaint(404, "student:1")
    with pytest.raises(NotFoundError):
        svc.resolve_complaint(404)
