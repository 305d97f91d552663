"""
Session identity for the HTTP API.

The caller's identity comes only from the signed session cookie; request
bodies never name the owner of a record.
"""

import functools
from typing import Optional

from flask import current_app, g, jsonify, request, session


UNAUTHORIZED_MESSAGE = "Unauthorized - Please log in"


def current_user_id() -> Optional[str]:
    """User id stored in the session, or None for an anonymous caller."""
    user_id = session.get(current_app.config["FINTRACK_USER_ID_KEY"])
    if user_id is None or user_id == "":
        return None
    return str(user_id)


def login_required(view):
    """Reject anonymous callers with 401 before the view runs."""

    @functools.wraps(view)
    def wrapped(*args, **kwargs):
        user_id = current_user_id()
        if user_id is None:
            components = current_app.extensions["fintrack"]
            components.audit_logger.log_unauthorized(
                path=request.path,
                method=request.method,
                correlation_id=g.get("correlation_id"),
            )
            return jsonify({"message": UNAUTHORIZED_MESSAGE}), 401
        g.user_id = user_id
        return view(*args, **kwargs)

    return wrapped
