from __future__ import annotations

import io
from datetime import date, timedelta

from flask import Flask, request, send_file

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_id
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
from ..core.exceptions import ValidationError
from .model import GeoPoint
from .qr_image import decode_qr_token
from .service import make_geopoint


def register(app: Flask, container: Container) -> None:
    def _date_arg(value) -> date:
        if not value:
            return date.today()
        try:
            return parse_iso_date(str(value))
        except ValueError:
            raise ValidationError("Date must be YYYY-MM-DD")

    def _point_from(data: dict) -> GeoPoint | None:
        if data.get("lat") in (None, "") or data.get("lng") in (None, ""):
            return None
        return make_geopoint(data.get("lat"), data.get("lng"))

    def _session_view(s) -> dict:
        return {
            "session_id": s.session_id,
            "token": s.token,
            "session_date": s.session_date.isoformat(),
            "created_at": s.created_at.isoformat(),
            "expires_at": s.expires_at.isoformat(),
            "locked": s.locked,
        }

    @app.route("/api/attendance/sessions", methods=["POST"], endpoint="create_attendance_session")
    @warden_required
    @json_endpoint
    def create_attendance_session():
        data = payload()
        minutes = data.get("duration_minutes")
        duration = None
        if minutes not in (None, ""):
            try:
                duration = timedelta(minutes=float(minutes))
            except (TypeError, ValueError):
                raise ValidationError("Duration must be a number of minutes")
        s = container.attendance_service.create_attendance_session(
            duration=duration,
            for_date=_date_arg(data.get("date")) if data.get("date") else None,
        )
        return ok(_session_view(s), message="Attendance QR generated", status=201)

    @app.route("/api/attendance/sessions/active", methods=["GET"], endpoint="active_attendance_session")
    @login_required
    @json_endpoint
    def active_attendance_session():
        s = container.attendance_service.get_active_attendance_session()
        if not s:
            return ok({})
        view = _session_view(s)
        if request.args.get("with_token") != "1":
            # Students must scan the QR; only the expiry is public.
            view.pop("token")
        return ok(view)

    @app.route("/api/attendance/sessions/<int:session_id>/qr.png", methods=["GET"], endpoint="attendance_qr_image")
    @warden_required
    @json_endpoint
    def attendance_qr_image(session_id: int):
        png = container.attendance_service.session_qr_png(session_id)
        return send_file(io.BytesIO(png), mimetype="image/png")

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="mark_attendance")
    @student_required
    @json_endpoint
    def mark_attendance():
        data = payload()
        record = container.attendance_service.mark_attendance_with_token(
            data.get("token", ""),
            current_student_id(),
            _point_from(data),
        )
        return ok(record, message="Attendance marked for today")

    @app.route("/api/attendance/mark/image", methods=["POST"], endpoint="mark_attendance_image")
    @student_required
    @json_endpoint
    def mark_attendance_image():
        if "image" not in request.files:
            raise ValidationError("Missing image file")
        token = decode_qr_token(request.files["image"].stream)
        record = container.attendance_service.mark_attendance_with_token(
            token,
            current_student_id(),
            _point_from(request.form.to_dict()),
        )
        return ok(record, message="Attendance marked for today")

    @app.route("/api/attendance/manual", methods=["POST"], endpoint="manual_attendance")
    @warden_required
    @json_endpoint
    def manual_attendance():
        data = payload()
        record = container.attendance_service.set_manual_presence(
            _date_arg(data.get("date")),
            require_id(data.get("student_id"), "student_id"),
            str(data.get("present", "")).lower() in {"1", "true", "yes", "on"},
        )
        return ok(record, message="Attendance updated")

    @app.route("/api/attendance/finalize", methods=["POST"], endpoint="finalize_attendance")
    @warden_required
    @json_endpoint
    def finalize_attendance():
        day = _date_arg(payload().get("date"))
        written = container.attendance_service.finalize_attendance(day)
        return ok({"date": day.isoformat(), "marked_absent": written}, message="Attendance finalized")

    @app.route("/api/attendance/lock", methods=["POST"], endpoint="lock_attendance")
    @warden_required
    @json_endpoint
    def lock_attendance():
        day = _date_arg(payload().get("date"))
        locked = container.attendance_service.lock_attendance(day)
        return ok({"date": day.isoformat(), "locked_sessions": locked}, message="Attendance locked")

    @app.route("/api/attendance", methods=["GET"], endpoint="list_attendance")
    @warden_required
    @json_endpoint
    def list_attendance():
        day = _date_arg(request.args.get("date"))
        return ok(container.attendance_service.list_attendance(day))

    @app.route("/api/me/attendance", methods=["GET"], endpoint="my_attendance")
    @student_required
    @json_endpoint
    def my_attendance():
        return ok(container.attendance_service.student_history(current_student_id()))

    @app.route("/api/geofence", methods=["GET"], endpoint="get_geofence")
    @login_required
    @json_endpoint
    def get_geofence():
        return ok(container.attendance_service.get_geofence() or {})

    @app.route("/api/geofence", methods=["PUT"], endpoint="set_geofence")
    @warden_required
    @json_endpoint
    def set_geofence():
        data = payload()
        center = make_geopoint(data.get("lat"), data.get("lng"))
        settings = container.attendance_service.set_geofence(center, data.get("radius_m"))
        return ok(settings, message="Geofence saved")

    @app.route("/api/geofence", methods=["DELETE"], endpoint="clear_geofence")
    @warden_required
    @json_endpoint
    def clear_geofence():
        container.attendance_service.clear_geofence()
        return ok(message="Geofence cleared")
