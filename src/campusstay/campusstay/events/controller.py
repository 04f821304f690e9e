from __future__ import annotations

from dataclasses import asdict

from flask import Flask, session

from ..common.web import (
    current_student_id,
    json_endpoint,
    login_required,
    ok,
    payload,
    student_required,
    warden_required,
)
from ..container import Container
from ..core.enums import Organizer, Role


def register(app: Flask, container: Container) -> None:
    def _event_view(e) -> dict:
        view = asdict(e)
        view["registration_count"] = len(e.registrations)
        if session.get("role") != Role.WARDEN.value:
            # Budgets are an internal figure; students only see the event.
            view.pop("budget")
            view["registered"] = session.get("user_id") in e.registrations
            view.pop("registrations")
        return view

    @app.route("/api/events", methods=["GET"], endpoint="list_events")
    @login_required
    @json_endpoint
    def list_events():
        return ok([_event_view(e) for e in container.event_service.list_events()])

    @app.route("/api/events/upcoming", methods=["GET"], endpoint="list_upcoming_events")
    @login_required
    @json_endpoint
    def list_upcoming_events():
        return ok([_event_view(e) for e in container.event_service.list_upcoming()])

    @app.route("/api/events/past", methods=["GET"], endpoint="list_past_events")
    @login_required
    @json_endpoint
    def list_past_events():
        return ok([_event_view(e) for e in container.event_service.list_past()])

    @app.route("/api/events/pending", methods=["GET"], endpoint="list_pending_events")
    @warden_required
    @json_endpoint
    def list_pending_events():
        return ok([_event_view(e) for e in container.event_service.list_pending_proposals()])

    @app.route("/api/events/analytics", methods=["GET"], endpoint="event_analytics")
    @warden_required
    @json_endpoint
    def event_analytics():
        return ok(container.event_service.event_analytics())

    @app.route("/api/events", methods=["POST"], endpoint="create_event")
    @login_required
    @json_endpoint
    def create_event():
        organizer = Organizer(session["role"])
        e = container.event_service.create_event(payload(), organizer, session.get("name"))
        message = "Event published" if organizer == Organizer.WARDEN else "Proposal sent to the warden"
        return ok(_event_view(e), message=message, status=201)

    @app.route("/api/events/<int:event_id>/approve", methods=["POST"], endpoint="approve_event")
    @warden_required
    @json_endpoint
    def approve_event(event_id: int):
        return ok(_event_view(container.event_service.approve_event(event_id)), message="Event approved")

    @app.route("/api/events/<int:event_id>/reject", methods=["POST"], endpoint="reject_event")
    @warden_required
    @json_endpoint
    def reject_event(event_id: int):
        return ok(_event_view(container.event_service.reject_event(event_id)), message="Event rejected")

    @app.route("/api/events/<int:event_id>/complete", methods=["POST"], endpoint="complete_event")
    @warden_required
    @json_endpoint
    def complete_event(event_id: int):
        return ok(_event_view(container.event_service.complete_event(event_id)), message="Event completed")

    @app.route("/api/events/<int:event_id>/register", methods=["POST"], endpoint="register_event")
    @student_required
    @json_endpoint
    def register_event(event_id: int):
        e = container.event_service.register_for_event(event_id, current_student_id())
        return ok(_event_view(e), message="Registered")

    @app.route("/api/events/<int:event_id>/comments", methods=["POST"], endpoint="comment_event")
    @login_required
    @json_endpoint
    def comment_event(event_id: int):
        e = container.event_service.add_event_comment(event_id, session["role"], payload().get("text", ""))
        return ok(_event_view(e), message="Comment added", status=201)
