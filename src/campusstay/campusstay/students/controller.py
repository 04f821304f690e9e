from __future__ import annotations

from datetime import timedelta

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
from ..core.exceptions import ValidationError
from .service import generate_password, suggest_username


def register(app: Flask, container: Container) -> None:
    @app.route("/api/login", methods=["POST"], endpoint="login")
    @json_endpoint
    def login():
        data = payload()
        s_user = container.auth_service.authenticate(
            data.get("role", "student"),
            data.get("username", ""),
            data.get("password", ""),
        )

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=7)
        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["role"] = s_user.role
        return ok(s_user, message="Logged in")

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    @json_endpoint
    def me():
        return ok({"user_id": session.get("user_id"), "name": session.get("name"), "role": session.get("role")})

    @app.route("/api/me/profile", methods=["GET"], endpoint="my_profile")
    @student_required
    @json_endpoint
    def my_profile():
        return ok(container.student_service.get_student_public(current_student_id()))

    @app.route("/api/students", methods=["GET"], endpoint="list_students")
    @warden_required
    @json_endpoint
    def list_students():
        return ok(container.student_service.list_public())

    @app.route("/api/students", methods=["POST"], endpoint="create_student")
    @warden_required
    @json_endpoint
    def create_student():
        data = payload()
        name = data.pop("name", "")
        username = data.pop("username", None)
        password = data.pop("password", None)

        student = container.student_service.create_student(name, **data)
        result = {"student": container.student_service.get_student_public(student.student_id)}
        if username or password is not None:
            username = username or suggest_username(student.name)
            password = password or generate_password()
            container.student_service.set_credentials(student.student_id, username, password)
            result["credentials"] = {"username": username, "password": password}
            result["student"] = container.student_service.get_student_public(student.student_id)
        return ok(result, message="Student created", status=201)

    @app.route("/api/students/<int:student_id>", methods=["GET"], endpoint="get_student")
    @warden_required
    @json_endpoint
    def get_student(student_id: int):
        return ok(container.student_service.get_student_public(student_id))

    @app.route("/api/students/<int:student_id>", methods=["PATCH"], endpoint="update_student")
    @warden_required
    @json_endpoint
    def update_student(student_id: int):
        container.student_service.update_details(student_id, **payload())
        return ok(container.student_service.get_student_public(student_id), message="Student saved")

    @app.route("/api/students/<int:student_id>/credentials", methods=["POST"], endpoint="set_credentials")
    @warden_required
    @json_endpoint
    def set_credentials(student_id: int):
        data = payload()
        student = container.student_service.get_student(student_id)
        username = (data.get("username") or "").strip() or suggest_username(student.name)
        password = data.get("password") or generate_password()
        container.student_service.set_credentials(student_id, username, password)
        return ok({"username": username, "password": password}, message="Login created")

    @app.route("/api/students/<int:student_id>/reset-password", methods=["POST"], endpoint="reset_password")
    @warden_required
    @json_endpoint
    def reset_password(student_id: int):
        password = container.student_service.reset_password(student_id, payload().get("password"))
        return ok({"password": password}, message="Password reset")

    @app.route("/api/students/suggest-username", methods=["POST"], endpoint="suggest_username")
    @warden_required
    @json_endpoint
    def suggest_username_view():
        name = (payload().get("name") or "").strip()
        if not name:
            raise ValidationError("Name is required")
        return ok({"username": suggest_username(name)})
