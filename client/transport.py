"""
Network transport used by the API client.

The transport only moves bytes: it performs no authentication, no retries
and no status classification. Failures without a response surface as
``TransportError``.
"""

import logging
from typing import Any, Protocol

import httpx

from core.models.network import TransportResponse
from core.types import Headers, HttpMethod, QueryParams

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """No response was received from the server."""

    def __init__(self, message: str, timed_out: bool = False) -> None:
        super().__init__(message)
        self.timed_out = timed_out


class Transport(Protocol):
    async def dispatch(
        self,
        method: HttpMethod,
        path: str,
        headers: Headers,
        body: Any,
        timeout: float,
        params: QueryParams | None = None,
    ) -> TransportResponse: ...


class HttpxTransport:
    """Transport backed by an ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str,
        default_headers: Headers | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize a new instance of the HttpxTransport class.

        Args:
            base_url: Base URL every request path is joined to
            default_headers: Headers sent with every request
            transport: Optional httpx transport (ASGI app, mock) to route requests through
        """
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers={"User-Agent": "Mathematico Python Client", **(default_headers or {})},
            transport=transport,
        )

    async def dispatch(
        self,
        method: HttpMethod,
        path: str,
        headers: Headers,
        body: Any,
        timeout: float,
        params: QueryParams | None = None,
    ) -> TransportResponse:
        content: str | bytes | None = None
        json_body: Any = None
        if isinstance(body, (str, bytes)):
            content = body
        elif body is not None:
            json_body = body

        try:
            response = await self.client.request(
                method,
                path,
                headers=dict(headers),
                params=dict(params) if params else None,
                content=content,
                json=json_body,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out after {timeout}s", timed_out=True) from e
        except httpx.TransportError as e:
            raise TransportError(str(e) or type(e).__name__) from e

        return TransportResponse(
            status=response.status_code,
            body=self._parse_body(response),
            headers=dict(response.headers),
        )

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        if "json" in response.headers.get("content-type", ""):
            try:
                return response.json()
            except ValueError:
                logger.warning(f"Malformed JSON body from {response.request.url}")
        return response.text

    async def aclose(self) -> None:
        await self.client.aclose()
