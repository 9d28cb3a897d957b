"""
Resilient API client for the Mathematico backend.

Attaches the bearer token from the credential store, recovers from an
expired access token with a single refresh-and-retry per request, and
turns every failure into a normalized ``ApiError``.
"""

import logging
from collections.abc import Callable
from typing import Any

from client.credentials import CredentialStore
from client.errors import ApiError, NetworkError, RefreshError, classify
from client.refresh import HttpRefreshOperation, RefreshOperation, SingleFlightRefresher
from client.transport import HttpxTransport, Transport, TransportError
from core.config import Settings
from core.constants import BEARER_PREFIX, NETWORK_ERROR_MESSAGE, TIMEOUT_ERROR_MESSAGE
from core.models.network import ApiResponse, RequestDescriptor, TransportResponse
from core.types import Headers, HttpMethod, QueryParams

logger = logging.getLogger(__name__)


class APIClient:
    """Async API client with automatic token refresh."""

    def __init__(
        self,
        transport: Transport,
        credentials: CredentialStore,
        refresh_operation: RefreshOperation | None = None,
        on_reauth_required: Callable[[], Any] | None = None,
        timeout: float = 10.0,
    ) -> None:
        """
        Initialize a new instance of the APIClient class.

        Args:
            transport: Network transport requests are dispatched through
            credentials: Store the bearer and refresh tokens are read from
            refresh_operation: Exchanges a refresh token for a new pair;
                defaults to the backend refresh endpoint
            on_reauth_required: Called once when a refresh fails
            timeout: Default request timeout in seconds
        """
        self.transport = transport
        self.credentials = credentials
        self.timeout = timeout
        self.refresher = SingleFlightRefresher(
            refresh_operation or HttpRefreshOperation(transport, timeout=timeout),
            credentials,
            on_reauth_required,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        credentials: CredentialStore,
        on_reauth_required: Callable[[], Any] | None = None,
        **transport_kwargs: Any,
    ) -> "APIClient":
        transport = HttpxTransport(
            settings.api_base_url, settings.api_default_headers, **transport_kwargs
        )
        return cls(
            transport,
            credentials,
            HttpRefreshOperation(transport, settings.api_refresh_path, settings.api_timeout),
            on_reauth_required,
            settings.api_timeout,
        )

    @property
    def on_reauth_required(self) -> Callable[[], Any] | None:
        return self.refresher.on_reauth_required

    @on_reauth_required.setter
    def on_reauth_required(self, callback: Callable[[], Any] | None) -> None:
        self.refresher.on_reauth_required = callback

    def _authorize(self, descriptor: RequestDescriptor) -> tuple[RequestDescriptor, str | None]:
        """Attach the current bearer token, returning it alongside the descriptor."""
        if not descriptor.authenticate:
            return descriptor, None

        token = self.credentials.get_access_token()
        if not token:
            return descriptor, None
        return descriptor.with_headers({"Authorization": f"{BEARER_PREFIX}{token}"}), token

    async def _dispatch(self, descriptor: RequestDescriptor) -> TransportResponse:
        timeout = descriptor.timeout if descriptor.timeout is not None else self.timeout
        logger.debug(f"API Request: {descriptor.method} {descriptor.path} (attempt {descriptor.attempt})")
        try:
            response = await self.transport.dispatch(
                descriptor.method,
                descriptor.path,
                descriptor.headers,
                descriptor.body,
                timeout,
                descriptor.params,
            )
        except TransportError as e:
            logger.error(f"Network error for {descriptor.method} {descriptor.path}: {e}")
            if e.timed_out:
                raise NetworkError(TIMEOUT_ERROR_MESSAGE, code="TIMEOUT") from e
            raise NetworkError(NETWORK_ERROR_MESSAGE, code="NO_RESPONSE") from e

        logger.debug(f"API Response: {response.status} {descriptor.method} {descriptor.path}")
        return response

    async def send(self, descriptor: RequestDescriptor) -> ApiResponse:
        """
        Send a request, refreshing the access token once on a 401.

        Args:
            descriptor: Request to send

        Returns:
            The successful response, body unchanged

        Raises:
            ApiError: Normalized error for every failure
        """
        authorized, sent_token = self._authorize(descriptor)
        response = await self._dispatch(authorized)

        if response.ok:
            return ApiResponse(
                success=True, status=response.status, data=response.body, headers=response.headers
            )

        if response.status == 401 and descriptor.authenticate and not descriptor.retried:
            return await self._recover(descriptor, sent_token, response)

        error = classify(response.status, response.body)
        logger.warning(f"HTTP {response.status} for {descriptor.method} {descriptor.path}: {error.message}")
        raise error

    async def _recover(
        self, descriptor: RequestDescriptor, sent_token: str | None, response: TransportResponse
    ) -> ApiResponse:
        retry = descriptor.next_attempt()

        current_token = self.credentials.get_access_token()
        if sent_token and current_token and current_token != sent_token:
            # refreshed by a concurrent request while this one was in flight
            logger.debug(f"Retrying {descriptor.method} {descriptor.path} with the newer token")
            return await self.send(retry)

        try:
            await self.refresher.refresh()
        except RefreshError as e:
            raise classify(response.status, response.body) from e

        return await self.send(retry)

    async def request(
        self,
        method: HttpMethod,
        path: str,
        body: Any = None,
        headers: Headers | None = None,
        params: QueryParams | None = None,
        authenticate: bool = True,
        timeout: float | None = None,
    ) -> Any:
        descriptor = RequestDescriptor(
            method=method,
            path=path,
            headers=dict(headers or {}),
            body=body,
            params=params,
            timeout=timeout,
            authenticate=authenticate,
        )
        return (await self.send(descriptor)).data

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, body: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", path, body, **kwargs)

    async def put(self, path: str, body: Any = None, **kwargs: Any) -> Any:
        return await self.request("PUT", path, body, **kwargs)

    async def patch(self, path: str, body: Any = None, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, body, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def aclose(self) -> None:
        close = getattr(self.transport, "aclose", None)
        if close is not None:
            await close()


__all__ = ["APIClient", "ApiError"]
