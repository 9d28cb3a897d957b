from collections.abc import Mapping
from typing import Any

from fastapi.responses import JSONResponse

from core.models.envelope import ApiEnvelope, PageMeta
from core.types import FieldErrors

DEFAULT_CODES = {200: "SUCCESS", 201: "CREATED", 204: "NO_CONTENT"}


def send_response(
    status_code: int,
    data: Any = None,
    message: str = "",
    code: str | None = None,
    details: FieldErrors | None = None,
    meta: PageMeta | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    """
    Wrap a payload in the standard response envelope.

    Args:
        status_code: HTTP status of the response
        data: Payload, omitted from the body when None
        message: Human-readable message
        code: Machine-readable code, derived from the status when omitted
        details: Field errors for validation failures
        meta: Pagination metadata

    Returns:
        JSON response carrying the envelope
    """
    envelope = ApiEnvelope(
        success=200 <= status_code < 300,
        status=status_code,
        message=message,
        code=code or DEFAULT_CODES.get(status_code, "UNKNOWN_ERROR"),
        data=data,
        details=details,
        meta=meta,
    )
    return JSONResponse(
        envelope.model_dump(mode="json", exclude_none=True),
        status_code=status_code,
        headers=dict(headers) if headers else None,
    )
