from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

CONNECTIVITY_MESSAGE = (
    "Could not fetch products. Check that the backend is running, "
    "reachable and returns valid JSON."
)


@dataclass
class ApiError(Exception):
    """Raise to return a consistent JSON error response."""

    status_code: int
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def to_dict(self, request_id: str | None = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details or {},
                "request_id": request_id,
            }
        }
        return payload


def abort_json(status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Convenience wrapper."""
    raise ApiError(status_code=status_code, code=code, message=message, details=details)


class BackendError(Exception):
    """Base class for failed calls to the storefront backend."""

    status_code: Optional[int] = None

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ServerFault(BackendError):
    """HTTP 500 with a `{success: false, message}` payload."""

    status_code = 500


class NotFound(BackendError):
    status_code = 404


class RequestRejected(BackendError):
    """Any other 4xx; `message` comes from the payload when present."""


class BackendUnavailable(BackendError):
    """No usable response: connection refused, timeout or invalid JSON."""

    def __init__(self, message: str = CONNECTIVITY_MESSAGE, status_code: Optional[int] = None):
        super().__init__(message, status_code)
