"""Session-held login for the storefront.

The backend issues a bearer token on login; we keep it, the username and
the wallet balance in the Flask session. Nothing else is stored client side.
"""

from functools import wraps
from typing import Any, Callable, Dict, Optional, TypeVar

from flask import flash, redirect, request, session, url_for
from storefront.app.common.errors import abort_json

F = TypeVar("F", bound=Callable[..., Any])

SESSION_KEYS = ("token", "username", "balance")


def current_token() -> Optional[str]:
    return session.get("token")


def start_session(payload: Dict[str, Any]) -> None:
    session["token"] = payload.get("token")
    session["username"] = payload.get("username")
    session["balance"] = payload.get("balance", 0)


def end_session() -> None:
    for key in SESSION_KEYS:
        session.pop(key, None)


def login_required(fn: F) -> F:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_token():
            if request.path.startswith("/api/"):
                abort_json(401, "unauthorized", "Authentication required")
            flash("Please log in to continue.", "info")
            return redirect(url_for("auth.login"))
        return fn(*args, **kwargs)

    return wrapper  # type: ignore
