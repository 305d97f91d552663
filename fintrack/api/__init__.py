"""HTTP API package (Flask)."""

from fintrack.api.app import create_app
from fintrack.api.session import UNAUTHORIZED_MESSAGE, current_user_id, login_required

__all__ = [
    "UNAUTHORIZED_MESSAGE",
    "create_app",
    "current_user_id",
    "login_required",
]
