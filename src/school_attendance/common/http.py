from __future__ import annotations

import logging
from datetime import date, time
from functools import wraps

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.actor import Actor
from ..core.enums import Role
from ..core.exceptions import (
    AlreadyMarked,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .datetime_utils import parse_hhmm, parse_iso_date

logger = logging.getLogger(__name__)


def error_status(e: DomainError) -> int:
    if isinstance(e, AuthorizationError):
        return 403
    if isinstance(e, NotFoundError):
        return 404
    if isinstance(e, AlreadyMarked):
        return 409
    return 400


def error_body(code: str, message: str):
    return jsonify({"success": False, "error": code, "message": message})


def current_actor() -> Actor | None:
    """Actor stored in the Flask session by the (external) login flow."""

    user_id = session.get("user_id")
    role = session.get("role")
    if not user_id or role not in {r.value for r in Role}:
        return None
    return Actor(actor_id=str(user_id), role=Role(role))


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        actor = current_actor()
        if actor is None:
            return error_body("unauthorized", "Please sign in to continue"), 401
        return view(actor, *args, **kwargs)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def json_text(data: dict, key: str) -> str | None:
    """Read a JSON field as text. Numbers become strings; objects and lists are rejected."""

    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{key} must be text")
    return str(value)


def arg_date(value: str | None, field_name: str, default: date) -> date:
    if not value:
        return default
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def arg_time(value: str | None, field_name: str) -> time:
    if not value:
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_hhmm(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be HH:MM")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return error_body(e.code, str(e)), error_status(e)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return error_body(e.name.lower().replace(" ", "_"), e.description or e.name), e.code
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error_body("internal_error", "Internal server error"), 500
