from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, PolicyViolation, ValidationError
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (PolicyViolation, 400),
    (ValidationError, 400),
    (DomainError, 400),
)


def json_endpoint(view):
    """Serialize a view's dict result and map domain errors onto HTTP codes."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            result = view(*args, **kwargs)
        except DomainError as e:
            code = next(status for exc_type, status in _STATUS_BY_ERROR if isinstance(e, exc_type))
            logger.info("%s %s rejected (%d): %s", request.method, request.path, code, e)
            return jsonify({"success": False, "message": str(e)}), code
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return jsonify({"success": False, "message": "Internal server error"}), 500

        if isinstance(result, tuple):
            body, code = result
            return jsonify({"success": True, **body}), code
        return jsonify({"success": True, **result}), 200

    return wrapper


def current_role() -> Role:
    try:
        return Role(session.get("role", Role.EMPLOYEE.value))
    except ValueError:
        return Role.EMPLOYEE


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_role() != Role.ADMIN:
            raise AuthorizationError("Admin access required")
        return view(*args, **kwargs)

    return wrapper


def payload() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def query_date(name: str):
    value = request.args.get(name)
    return parse_iso_date(value) if value else None
