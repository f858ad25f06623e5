"""
Authentication helpers for the JSON API.

Identity is issued by an external provider; this service only verifies the
Bearer token and exposes the caller on ``flask.g.current_user``.

DECORATOR GUIDE:
- @jwt_required: any authenticated caller
- @role_required(ROLE_CLINIC_OWNER): caller must carry the given role

Example:
    @appointment_bp.route("/<appointment_id>/approve", methods=["POST"])
    @role_required(ROLE_CLINIC_OWNER)
    def approve(appointment_id):
        ...
"""

from functools import wraps
from types import SimpleNamespace
from typing import Any

from flask import g, jsonify, request

from vetclinic.core.security import decode_access_token, get_user_from_token


def get_current_user() -> Any:
    """Return the caller set by ``jwt_required``, or None outside a request."""
    return g.get("current_user")


def jwt_required(f):
    """Decorator to require JWT authentication for API endpoints.

    Extracts JWT from Authorization header and sets current user.
    If no valid JWT, returns 401.
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"success": False, "error": "unauthorized",
                            "message": "Missing or invalid Authorization header"}), 401

        token = auth_header.split(" ", 1)[1]
        if not decode_access_token(token):
            return jsonify({"success": False, "error": "unauthorized",
                            "message": "Invalid or expired token"}), 401

        user_data = get_user_from_token(token)
        if not user_data:
            return jsonify({"success": False, "error": "unauthorized",
                            "message": "Invalid token payload"}), 401

        g.current_user = SimpleNamespace(
            id=user_data["user_id"],
            role=user_data["role"],
            email=user_data["email"],
        )
        return f(*args, **kwargs)

    return decorated_function


def role_required(role: str):
    """Require a valid token whose role matches ``role`` (403 otherwise)."""

    def decorator(f):
        @wraps(f)
        @jwt_required
        def decorated_function(*args, **kwargs):
            if g.current_user.role != role:
                return jsonify({"success": False, "error": "forbidden",
                                "message": f"This action requires the {role} role"}), 403
            return f(*args, **kwargs)

        return decorated_function

    return decorator
