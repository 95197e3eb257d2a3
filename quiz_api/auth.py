"""Admin credential check and the token guard for admin routes."""
import os
from functools import wraps

from flask import current_app, request


class Unauthorized(Exception):
    """Bad credentials or missing/invalid admin token."""


def admin_credentials():
    return (
        os.getenv("ADMIN_USERNAME", "admin"),
        os.getenv("ADMIN_PASSWORD", "password123"),
    )


def check_login(username, password) -> str:
    """Return the admin token for valid credentials, else raise Unauthorized."""
    expected_user, expected_password = current_app.config["ADMIN_CREDENTIALS"]
    if username == expected_user and password == expected_password:
        return f"token-{username}"
    raise Unauthorized("Invalid credentials")


def require_auth(view):
    """Reject requests whose Authorization header isn't the admin token."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        expected_user, _ = current_app.config["ADMIN_CREDENTIALS"]
        if request.headers.get("Authorization") != f"token-{expected_user}":
            raise Unauthorized("Unauthorized")
        return view(*args, **kwargs)
    return wrapper
