"""
Normalized errors raised by the API client.

Every failure that leaves the client is an ``ApiError`` subclass; callers
never see raw httpx exceptions.
"""

from typing import Any

from core.constants import STATUS_MESSAGES
from core.types import ErrorKind, FieldErrors


class ApiError(Exception):
    kind: ErrorKind = "client-error"

    def __init__(
        self,
        message: str,
        status: int | None = None,
        code: str | None = None,
        details: FieldErrors | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, status={self.status}, message={self.message!r})"


class NetworkError(ApiError):
    kind: ErrorKind = "network"


class UnauthorizedError(ApiError):
    kind: ErrorKind = "unauthorized"


class ClientError(ApiError):
    kind: ErrorKind = "client-error"


class ServerError(ApiError):
    kind: ErrorKind = "server-error"


class ValidationError(ApiError):
    kind: ErrorKind = "validation"


class RefreshError(Exception):
    """The refresh operation could not produce a new credential pair."""


def error_message(body: Any, status: int) -> str:
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    elif isinstance(body, str) and body.strip() and len(body) < 200:
        return body.strip()

    if status in STATUS_MESSAGES:
        return STATUS_MESSAGES[status]
    if status >= 500:
        return STATUS_MESSAGES[500]
    return f"HTTP {status}"


def field_errors(body: Any) -> FieldErrors | None:
    """
    Extract structured field errors.

    Accepts the envelope ``details`` mapping as well as FastAPI's
    ``detail`` list of ``{"loc": [...], "msg": ...}`` items.
    """
    if not isinstance(body, dict):
        return None

    details = body.get("details") or body.get("errors")
    if isinstance(details, dict) and isinstance(details.get("errors"), dict):
        # {"details": {"errors": {...}}}
        details = details["errors"]
    if isinstance(details, dict):
        return {
            str(name): [str(m) for m in messages] if isinstance(messages, list) else [str(messages)]
            for name, messages in details.items()
        }

    detail = body.get("detail")
    if isinstance(detail, list):
        errors: FieldErrors = {}
        for item in detail:
            if not isinstance(item, dict):
                continue
            loc = ".".join(str(part) for part in item.get("loc", []) if part != "body")
            errors.setdefault(loc or "__root__", []).append(str(item.get("msg", "invalid")))
        return errors or None

    return None


def classify(status: int, body: Any = None) -> ApiError:
    """Build the normalized error for a non-2xx response."""
    message = error_message(body, status)
    code = body.get("code") if isinstance(body, dict) and isinstance(body.get("code"), str) else None

    if status == 401:
        return UnauthorizedError(message, status, code)
    if status == 422:
        return ValidationError(message, status, code, field_errors(body))
    if status >= 500:
        return ServerError(message, status, code)
    return ClientError(message, status, code, field_errors(body))
