from __future__ import annotations

from typing import Any, Dict, Iterable, List
from flask import request

from storefront.app.common.errors import abort_json


def get_json() -> Dict[str, Any]:
    if not request.is_json:
        abort_json(400, "invalid_json", "Request must be application/json")
    data = request.get_json(silent=True)
    if data is None or not isinstance(data, dict):
        abort_json(400, "invalid_json", "Malformed JSON body")
    return data


def require_fields(data: Dict[str, Any], fields: Iterable[str]) -> None:
    missing = [f for f in fields if f not in data]
    if missing:
        abort_json(400, "validation_error", "Missing required fields", {"missing": missing})


def validate_credentials(username: str, password: str, confirm: str | None = None) -> List[str]:
    """Form checks run before an account call reaches the backend.

    `confirm` is only passed by the register form; login only needs both
    fields present.
    """
    if not username:
        return ["Username is a required field"]
    if confirm is not None and len(username) < 6:
        return ["Username must be at least 6 characters"]
    if not password:
        return ["Password is a required field"]
    if confirm is not None:
        if len(password) < 6:
            return ["Password must be at least 6 characters"]
        if password != confirm:
            return ["Passwords do not match"]
    return []
