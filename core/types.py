from collections.abc import Mapping
from typing import Any, Literal, TypeAlias

HttpMethod: TypeAlias = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
Headers: TypeAlias = Mapping[str, str]
QueryParams: TypeAlias = Mapping[str, Any]
ErrorKind: TypeAlias = Literal["network", "unauthorized", "client-error", "server-error", "validation"]
FieldErrors: TypeAlias = dict[str, list[str]]
UserRole: TypeAlias = Literal["admin", "user"]

__all__ = [
    "ErrorKind",
    "FieldErrors",
    "Headers",
    "HttpMethod",
    "QueryParams",
    "UserRole",
]
