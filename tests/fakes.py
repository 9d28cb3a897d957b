"""Test doubles for the transport and the refresh operation."""

import asyncio
import inspect
from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from core.models.auth import CredentialPair
from core.models.network import TransportResponse


@dataclass
class Call:
    method: str
    path: str
    headers: dict[str, str]
    body: Any
    timeout: float
    params: Mapping[str, Any] | None


class FakeTransport:
    """Records every dispatch and answers from a queue or a handler."""

    def __init__(self, handler: Callable[[Call], Any] | None = None) -> None:
        self.handler = handler
        self.responses: deque = deque()
        self.calls: list[Call] = []

    def queue(self, *responses: TransportResponse | Exception) -> None:
        self.responses.extend(responses)

    async def dispatch(self, method, path, headers, body, timeout, params=None) -> TransportResponse:
        call = Call(method, path, dict(headers), body, timeout, params)
        self.calls.append(call)
        result = self.handler(call) if self.handler else self.responses.popleft()
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, Exception):
            raise result
        return result

    def authorization(self, index: int) -> str | None:
        return self.calls[index].headers.get("Authorization")


class FakeRefreshOperation:
    """Returns the queued results in order, optionally after a delay."""

    def __init__(self, *results: CredentialPair | Exception, delay: float = 0.0) -> None:
        self.results = deque(results)
        self.delay = delay
        self.calls: list[str] = []

    async def refresh(self, refresh_token: str) -> CredentialPair:
        self.calls.append(refresh_token)
        if self.delay:
            await asyncio.sleep(self.delay)
        result = self.results.popleft()
        if isinstance(result, Exception):
            raise result
        return result


def respond(status: int, body: Any = None) -> TransportResponse:
    return TransportResponse(status=status, body=body)
