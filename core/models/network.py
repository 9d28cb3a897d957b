from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from core.types import HttpMethod


@dataclass(frozen=True)
class RequestDescriptor:
    method: HttpMethod
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    params: Mapping[str, Any] | None = None
    timeout: float | None = None  # seconds, None uses the client default
    authenticate: bool = True  # attach the bearer token and refresh on 401
    attempt: int = 0  # 0 for the first dispatch, 1 for the post-refresh retry

    @property
    def retried(self) -> bool:
        return self.attempt > 0

    def next_attempt(self) -> "RequestDescriptor":
        return replace(self, attempt=self.attempt + 1)

    def with_headers(self, headers: Mapping[str, str]) -> "RequestDescriptor":
        return replace(self, headers={**self.headers, **headers})


@dataclass
class TransportResponse:
    status: int
    body: Any = None  # parsed JSON, text, or None when empty
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass
class ApiResponse:
    success: bool
    status: int
    data: Any = None  # response body, unchanged
    headers: dict[str, str] = field(default_factory=dict)
