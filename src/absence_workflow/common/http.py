from __future__ import annotations

import logging
from datetime import date, datetime
from functools import wraps

from flask import jsonify, session

from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
    WorkflowStateError,
)

logger = logging.getLogger(__name__)


def error_status(exc: DomainError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, AuthorizationError):
        return 403
    if isinstance(exc, WorkflowStateError):
        return 409
    return 400


def error_response(exc: DomainError):
    return jsonify({"error": str(exc), "type": type(exc).__name__}), error_status(exc)


def json_errors(view):
    """Domain errors -> JSON with a mapped status; anything else -> 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Unhandled error in %s", view.__name__)
            return jsonify({"error": "Internal server error"}), 500

    return wrapper


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value or "", "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def iso(value):
    return value.isoformat() if value is not None else None
