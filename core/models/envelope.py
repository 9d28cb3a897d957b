from typing import Any

from pydantic import BaseModel

from core.types import FieldErrors


class PageMeta(BaseModel):
    total: int | None = None
    page: int | None = None
    limit: int | None = None
    totalPages: int | None = None


class ApiEnvelope(BaseModel):
    """JSON body shape shared by every backend response."""

    success: bool
    status: int
    message: str = ""
    code: str = "UNKNOWN_ERROR"
    data: Any = None
    details: FieldErrors | None = None
    meta: PageMeta | None = None


def unwrap(body: Any) -> Any:
    """Return the ``data`` member of an envelope, or the body itself."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body
