from __future__ import annotations

from flask import Flask, Response, request

from ..common.web import (
    current_student_id,
    json_endpoint,
    ok,
    payload,
    student_required,
    warden_required,
)
from ..container import Container
from ..core.enums import PaymentStatus
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payments", methods=["GET"], endpoint="payment_summary")
    @warden_required
    @json_endpoint
    def payment_summary():
        raw = (request.args.get("status") or "").strip().lower()
        status = None
        if raw and raw != "all":
            try:
                status = PaymentStatus(raw)
            except ValueError:
                raise ValidationError("Unknown payment status filter")
        return ok(container.payment_service.payment_summary_all(status=status))

    @app.route("/api/payments/export.csv", methods=["GET"], endpoint="export_payments")
    @warden_required
    @json_endpoint
    def export_payments():
        return Response(
            container.payment_service.export_payments_csv(),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=payments.csv"},
        )

    @app.route("/api/students/<int:student_id>/payments", methods=["GET"], endpoint="student_payments")
    @warden_required
    @json_endpoint
    def student_payments(student_id: int):
        return ok(
            {
                "totals": container.payment_service.payment_totals(student_id),
                "payments": container.payment_service.list_payments_by_student(student_id),
            }
        )

    @app.route("/api/students/<int:student_id>/payments", methods=["POST"], endpoint="add_payment")
    @warden_required
    @json_endpoint
    def add_payment(student_id: int):
        data = payload()
        p = container.payment_service.add_payment(
            student_id,
            data.get("amount"),
            data.get("method", ""),
            note=data.get("note"),
        )
        return ok(p, message="Payment recorded", status=201)

    @app.route("/api/me/payments", methods=["GET"], endpoint="my_payments")
    @student_required
    @json_endpoint
    def my_payments():
        sid = current_student_id()
        return ok(
            {
                "totals": container.payment_service.payment_totals(sid),
                "payments": container.payment_service.list_payments_by_student(sid),
            }
        )
