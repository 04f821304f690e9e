from __future__ import annotations

from dataclasses import asdict

from flask import Flask

from ..common.validators import require_id
from ..common.web import (
    current_student_id,
    json_endpoint,
    ok,
    payload,
    student_required,
    warden_required,
)
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _parcel_view(p, *, with_otp: bool) -> dict:
        view = asdict(p)
        if not with_otp:
            view.pop("otp")
        return view

    @app.route("/api/parcels", methods=["GET"], endpoint="list_parcels")
    @warden_required
    @json_endpoint
    def list_parcels():
        # The desk never sees OTPs; the student reads it out on collection.
        return ok([_parcel_view(p, with_otp=False) for p in container.parcel_service.list_all_parcels()])

    @app.route("/api/parcels/pending", methods=["GET"], endpoint="list_pending_parcels")
    @warden_required
    @json_endpoint
    def list_pending_parcels():
        return ok([_parcel_view(p, with_otp=False) for p in container.parcel_service.list_pending_parcels()])

    @app.route("/api/parcels", methods=["POST"], endpoint="create_parcel")
    @warden_required
    @json_endpoint
    def create_parcel():
        data = payload()
        p = container.parcel_service.create_parcel(
            require_id(data.get("student_id"), "student_id"),
            data.get("parcel_code", ""),
            carrier=data.get("carrier"),
            note=data.get("note"),
        )
        return ok(_parcel_view(p, with_otp=False), message="Parcel logged", status=201)

    @app.route("/api/parcels/<int:parcel_id>/collect", methods=["POST"], endpoint="collect_parcel")
    @warden_required
    @json_endpoint
    def collect_parcel(parcel_id: int):
        p = container.parcel_service.mark_collected_with_otp(parcel_id, payload().get("otp", ""))
        return ok(_parcel_view(p, with_otp=False), message="Parcel handed over")

    @app.route("/api/parcels/<int:parcel_id>/override", methods=["POST"], endpoint="override_parcel")
    @warden_required
    @json_endpoint
    def override_parcel(parcel_id: int):
        p = container.parcel_service.admin_override_collected(parcel_id)
        return ok(_parcel_view(p, with_otp=False), message="Parcel marked collected")

    @app.route("/api/parcels/<int:parcel_id>", methods=["DELETE"], endpoint="delete_parcel")
    @warden_required
    @json_endpoint
    def delete_parcel(parcel_id: int):
        container.parcel_service.delete_parcel(parcel_id)
        return ok(message="Parcel deleted")

    @app.route("/api/me/parcels", methods=["GET"], endpoint="my_parcels")
    @student_required
    @json_endpoint
    def my_parcels():
        parcels = container.parcel_service.list_parcels_by_student(current_student_id())
        return ok([_parcel_view(p, with_otp=not p.collected) for p in parcels])
