# medlink/client/errors.py
from __future__ import annotations

from typing import Any, Optional

import httpx


class MedLinkError(Exception):
    """Base class for every error surfaced to the caller of a user action."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail


class ValidationError(MedLinkError):
    """Input rejected before the request was sent, or a 400/422 from the API."""


class ConflictError(MedLinkError):
    """409: slot no longer available, duplicate review, ..."""


class AuthError(MedLinkError):
    """401: session expired or invalid. Stored credentials are cleared."""


class ForbiddenError(MedLinkError):
    """403: the signed-in role may not perform the action."""


class NotFoundError(MedLinkError):
    """404: referenced doctor/hospital/appointment is missing."""


class UnknownError(MedLinkError):
    """Any other server failure or a transport error."""


_BY_STATUS = {
    400: ValidationError,
    401: AuthError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
}


def _detail_of(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if isinstance(body, dict):
        return body.get("detail") or body.get("message")
    return body


def error_from_response(response: httpx.Response) -> MedLinkError:
    detail = _detail_of(response)
    message = detail if isinstance(detail, str) else f"HTTP {response.status_code}"
    cls = _BY_STATUS.get(response.status_code, UnknownError)
    return cls(message, status_code=response.status_code, detail=detail)
