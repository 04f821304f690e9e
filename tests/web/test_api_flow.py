from __future__ import annotations

import io

import pytest

from src.campusstay.campusstay.attendance.model import GeoPoint


def _login(client, role, username, password):
    return client.post("/api/login", json={"role": role, "username": username, "password": password})


@pytest.fixture
def warden(client):
    assert _login(client, "warden", "warden", "warden123").status_code == 200
    return client


def _new_student(client, name, username):
    res = client.post("/api/students", json={"name": name, "username": username, "password": "secret1"})
    assert res.status_code == 201
    return res.get_json()["data"]["student"]["student_id"]


def test_guards(client):
    assert client.get("/api/rooms").status_code == 401
    assert _login(client, "warden", "warden", "nope").status_code == 401

    _login(client, "warden", "warden", "warden123")
    student_id = _new_student(client, "Asha", "asha")
    client.post("/api/logout")

    _login(client, "student", "asha", "secret1")
    res = client.post("/api/rooms", json={"name": "A-101"})
    assert res.status_code == 403
    assert res.get_json() == {"success": False, "message": "You do not have permission for this action"}
    assert client.get("/api/me").get_json()["data"]["user_id"] == student_id


def test_booking_flow_over_http(warden):
    room = warden.post("/api/rooms", json={"name": "A-101", "capacity": 2}).get_json()["data"]
    _new_student(warden, "Asha", "asha")
    _new_student(warden, "Ben", "ben")
    warden.post("/api/logout")

    _login(warden, "student", "asha", "secret1")
    res = warden.post(f"/api/rooms/{room['room_id']}/book")
    assert res.status_code == 200
    assert res.get_json()["data"]["room"]["available_seats"] == 1

    again = warden.post(f"/api/rooms/{room['room_id']}/book")
    assert again.status_code == 400
    assert again.get_json()["message"] == "Student already has a room"

    warden.post("/api/logout")
    _login(warden, "student", "ben", "secret1")
    res = warden.post(f"/api/rooms/{room['room_id']}/book")
    assert res.get_json()["data"]["roommates"] == [1]
    assert warden.get("/api/me/room").get_json()["data"]["name"] == "A-101"


def test_unknown_room_is_404(warden):
    _new_student(warden, "Asha", "asha")
    warden.post("/api/logout")
    _login(warden, "student", "asha", "secret1")

    res = warden.post("/api/rooms/999/book")

    assert res.status_code == 404
    assert res.get_json() == {"success": False, "message": "Room not found"}


def test_leave_request_round_trip(warden, container):
    room = warden.post("/api/rooms", json={"name": "A-101"}).get_json()["data"]
    _new_student(warden, "Asha", "asha")
    warden.post("/api/logout")

    _login(warden, "student", "asha", "secret1")
    warden.post(f"/api/rooms/{room['room_id']}/book")
    req = warden.post("/api/requests/leave", json={"note": "semester over"}).get_json()["data"]
    assert req["status"] == "pending"
    warden.post("/api/logout")

    _login(warden, "warden", "warden", "warden123")
    pending = warden.get("/api/admin/requests?status=pending").get_json()["data"]
    assert [r["request_id"] for r in pending] == [req["request_id"]]

    approved = warden.post(f"/api/admin/requests/{req['request_id']}/approve").get_json()["data"]
    assert approved["status"] == "approved"
    assert container.room_service.find_student_room(1) is None

    closed = warden.post(f"/api/admin/requests/{req['request_id']}/reject")
    assert closed.status_code == 400


def test_attendance_over_http(warden, container):
    _new_student(warden, "Asha", "asha")
    container.attendance_service.set_geofence(GeoPoint(lat=12.90, lng=77.50), 50)

    session = warden.post("/api/attendance/sessions", json={"duration_minutes": 30})
    assert session.status_code == 201
    data = session.get_json()["data"]

    png = warden.get(f"/api/attendance/sessions/{data['session_id']}/qr.png")
    assert png.status_code == 200
    assert png.mimetype == "image/png"
    warden.post("/api/logout")

    _login(warden, "student", "asha", "secret1")
    assert "token" not in warden.get("/api/attendance/sessions/active").get_json()["data"]

    far = warden.post("/api/attendance/mark", json={"token": data["token"], "lat": 12.9018, "lng": 77.50})
    assert far.status_code == 400
    assert far.get_json()["message"] == "You are outside the hostel geofence"

    near = warden.post("/api/attendance/mark", json={"token": data["token"], "lat": 12.90, "lng": 77.50})
    assert near.status_code == 200
    assert near.get_json()["data"]["status"] == "present"
    assert len(warden.get("/api/me/attendance").get_json()["data"]) == 1


def test_mark_from_image_requires_file(warden):
    _new_student(warden, "Asha", "asha")
    warden.post("/api/logout")
    _login(warden, "student", "asha", "secret1")

    res = warden.post("/api/attendance/mark/image", data={}, content_type="multipart/form-data")
    assert res.status_code == 400
    assert res.get_json()["message"] == "Missing image file"


def test_parcel_otp_hidden_from_desk(warden, container):
    sid = _new_student(warden, "Asha", "asha")
    created = warden.post("/api/parcels", json={"student_id": sid, "parcel_code": "AMZ-1"}).get_json()["data"]
    assert "otp" not in created

    otp = container.parcel_service.get_parcel(created["parcel_id"]).otp
    warden.post("/api/logout")
    _login(warden, "student", "asha", "secret1")
    mine = warden.get("/api/me/parcels").get_json()["data"]
    assert mine[0]["otp"] == otp


def test_payments_csv_export(warden):
    sid = _new_student(warden, "Asha", "asha")
    warden.patch(f"/api/students/{sid}", json={"total_amount": 5000, "joining_date": "2026-01-01"})
    res = warden.post(f"/api/students/{sid}/payments", json={"amount": 5000, "method": "upi"})
    assert res.status_code == 201

    export = warden.get("/api/payments/export.csv")
    assert export.mimetype == "text/csv"
    lines = export.get_data(as_text=True).splitlines()
    assert lines[0] == "student_id,name,total,paid,balance,status"
    assert lines[1] == f"{sid},Asha,5000.00,5000.00,0.00,paid"


def test_student_view_of_events_hides_budget(warden):
    warden.post(
        "/api/events",
        json={"name": "Fest", "starts_at": "2030-01-01T18:00", "venue": "Hall", "budget": 900},
    )
    _new_student(warden, "Asha", "asha")
    warden.post("/api/logout")
    _login(warden, "student", "asha", "secret1")

    events = warden.get("/api/events/upcoming").get_json()["data"]
    assert events[0]["name"] == "Fest"
    assert "budget" not in events[0]

    reg = warden.post(f"/api/events/{events[0]['event_id']}/register").get_json()["data"]
    assert reg["registered"] is True


def test_unhandled_errors_become_500(warden, container, monkeypatch):
    def boom():
        raise RuntimeError("db down")

    monkeypatch.setattr(container.room_service, "list_rooms", boom)

    res = warden.get("/api/rooms")
    assert res.status_code == 500
    assert res.get_json() == {"success": False, "message": "Internal server error"}


def test_mark_from_uploaded_qr_image(warden, container):
    pytest.importorskip("pyzbar.pyzbar")
    _new_student(warden, "Asha", "asha")
    session = container.attendance_service.create_attendance_session()
    png = container.attendance_service.session_qr_png(session.session_id)
    warden.post("/api/logout")
    _login(warden, "student", "asha", "secret1")

    res = warden.post(
        "/api/attendance/mark/image",
        data={"image": (io.BytesIO(png), "qr.png")},
        content_type="multipart/form-data",
    )
    assert res.status_code == 200
    assert res.get_json()["data"]["status"] == "present"


def test_non_numeric_ids_are_rejected_as_bad_requests(warden):
    _new_student(warden, "Asha", "asha")

    manual = warden.post("/api/attendance/manual", json={"student_id": "abc", "present": True})
    assert manual.status_code == 400
    assert manual.get_json() == {"success": False, "message": "student_id must be a whole number"}

    parcel = warden.post("/api/parcels", json={"student_id": "S-1", "parcel_code": "AMZ-1"})
    assert parcel.status_code == 400

    warden.post("/api/logout")
    _login(warden, "student", "asha", "secret1")
    change = warden.post("/api/requests/change", json={"target_room_id": "B-202"})
    assert change.status_code == 400
    assert change.get_json() == {"success": False, "message": "Target room must be a whole number"}
