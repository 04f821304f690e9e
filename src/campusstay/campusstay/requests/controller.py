from __future__ import annotations

from flask import Flask, request

from ..common.web import (
    current_student_id,
    json_endpoint,
    ok,
    payload,
    student_required,
    warden_required,
)
from ..container import Container
from ..core.enums import RequestStatus
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _parse_status(value: str | None) -> RequestStatus | None:
        if not value:
            return None
        try:
            return RequestStatus(value.lower())
        except ValueError:
            raise ValidationError("Unknown request status")

    @app.route("/api/requests", methods=["GET"], endpoint="my_requests")
    @student_required
    @json_endpoint
    def my_requests():
        return ok(container.request_service.list_student_requests(current_student_id()))

    @app.route("/api/requests/leave", methods=["POST"], endpoint="new_leave_request")
    @student_required
    @json_endpoint
    def new_leave_request():
        req = container.request_service.create_leave_request(current_student_id(), payload().get("note"))
        return ok(req, message="Leave request submitted to warden", status=201)

    @app.route("/api/requests/change", methods=["POST"], endpoint="new_change_request")
    @student_required
    @json_endpoint
    def new_change_request():
        data = payload()
        req = container.request_service.create_change_request(
            current_student_id(),
            data.get("target_room_id"),
            data.get("note"),
        )
        return ok(req, message="Change request submitted to warden", status=201)

    @app.route("/api/admin/requests", methods=["GET"], endpoint="admin_requests")
    @warden_required
    @json_endpoint
    def admin_requests():
        status = _parse_status(request.args.get("status"))
        return ok(container.request_service.list_requests(status))

    @app.route("/api/admin/requests/<int:request_id>/approve", methods=["POST"], endpoint="approve_request")
    @warden_required
    @json_endpoint
    def approve_request(request_id: int):
        req = container.request_service.approve_request(request_id)
        return ok(req, message="Request approved")

    @app.route("/api/admin/requests/<int:request_id>/reject", methods=["POST"], endpoint="reject_request")
    @warden_required
    @json_endpoint
    def reject_request(request_id: int):
        req = container.request_service.reject_request(request_id, payload().get("note"))
        return ok(req, message="Request rejected")

    @app.route("/api/admin/requests", methods=["DELETE"], endpoint="clear_requests")
    @warden_required
    @json_endpoint
    def clear_requests():
        removed = container.request_service.clear_all_requests()
        return ok({"removed": removed}, message="All requests cleared")
