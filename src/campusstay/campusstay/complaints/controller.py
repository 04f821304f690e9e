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
from ..core.constants import COMPLAINT_CATEGORIES
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    def _voter_key() -> str:
        return f"student:{current_student_id()}"

    def _complaint_view(c) -> dict:
        view = asdict(c)
        if session.get("role") == Role.STUDENT.value:
            view["upvoted"] = container.complaint_service.has_upvoted(c.complaint_id, _voter_key())
        return view

    @app.route("/api/complaints/categories", methods=["GET"], endpoint="complaint_categories")
    @login_required
    @json_endpoint
    def complaint_categories():
        return ok(list(COMPLAINT_CATEGORIES))

    @app.route("/api/complaints", methods=["GET"], endpoint="list_complaints")
    @login_required
    @json_endpoint
    def list_complaints():
        if session.get("role") == Role.WARDEN.value:
            complaints = container.complaint_service.list_all_complaints()
        else:
            complaints = container.complaint_service.list_active_complaints()
        return ok([_complaint_view(c) for c in complaints])

    @app.route("/api/complaints", methods=["POST"], endpoint="create_complaint")
    @student_required
    @json_endpoint
    def create_complaint():
        data = payload()
        c = container.complaint_service.create_complaint(data.get("text", ""), data.get("category", ""))
        return ok(_complaint_view(c), message="Complaint posted anonymously", status=201)

    @app.route("/api/complaints/<int:complaint_id>/upvote", methods=["POST"], endpoint="upvote_complaint")
    @student_required
    @json_endpoint
    def upvote_complaint(complaint_id: int):
        c = container.complaint_service.upvote_complaint(complaint_id, _voter_key())
        return ok(_complaint_view(c))

    @app.route("/api/complaints/<int:complaint_id>/resolve", methods=["POST"], endpoint="resolve_complaint")
    @warden_required
    @json_endpoint
    def resolve_complaint(complaint_id: int):
        return ok(_complaint_view(container.complaint_service.resolve_complaint(complaint_id)), message="Resolved")
