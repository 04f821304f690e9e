"""Helpers shared by the Flask controllers (role guards and JSON responses)."""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from enum import Enum
from functools import wraps
from typing import Any

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def to_json(value: Any) -> Any:
    """Convert dataclasses/enums/dates into JSON-friendly structures."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_json(v) for v in value]
    return value


def ok(data: Any = None, *, message: str = "", status: int = 200):
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = to_json(data)
    return jsonify(body), status


def fail(message: str, status: int = 400):
    return jsonify({"success": False, "message": message}), status


def json_endpoint(view):
    """Translate domain errors raised by services into JSON responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except NotFoundError as e:
            return fail(str(e), 404)
        except ValidationError as e:
            return fail(str(e), 400)
        except AuthenticationError as e:
            return fail(str(e), 401)
        except AuthorizationError as e:
            return fail(str(e), 403)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.path)
            return fail("Internal server error", 500)

    return wrapper


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "role" not in session:
            return fail("Please log in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def role_required(role: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "role" not in session:
                return fail("Please log in to continue", 401)
            if session.get("role") != role.value:
                return fail("You do not have permission for this action", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


warden_required = role_required(Role.WARDEN)
student_required = role_required(Role.STUDENT)


def current_student_id() -> int:
    return int(session["user_id"])


def payload() -> dict:
    """Request body as a dict (JSON first, then form data)."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()
