"""
Token refresh for the API client.

``HttpRefreshOperation`` exchanges a refresh token for a new credential
pair. ``SingleFlightRefresher`` makes sure concurrent callers holding the
same refresh token share one refresh instead of racing each other on the
credential store.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Protocol

from pydantic import ValidationError

from client.credentials import CredentialStore
from client.errors import RefreshError
from client.transport import Transport, TransportError
from core.constants import AUTH_REFRESH
from core.models.auth import CredentialPair, RefreshRequest
from core.models.envelope import unwrap

logger = logging.getLogger(__name__)


class RefreshOperation(Protocol):
    async def refresh(self, refresh_token: str) -> CredentialPair: ...


class HttpRefreshOperation:
    """Calls the backend refresh endpoint straight through the transport."""

    def __init__(self, transport: Transport, path: str = AUTH_REFRESH, timeout: float = 10.0) -> None:
        self.transport = transport
        self.path = path
        self.timeout = timeout

    async def refresh(self, refresh_token: str) -> CredentialPair:
        payload = RefreshRequest(refresh_token=refresh_token).model_dump(by_alias=True)
        try:
            response = await self.transport.dispatch(
                "POST", self.path, {"Content-Type": "application/json"}, payload, self.timeout
            )
        except TransportError as e:
            raise RefreshError(f"Refresh request failed: {e}") from e

        if not response.ok:
            raise RefreshError(f"Refresh rejected with HTTP {response.status}")

        data = unwrap(response.body)
        if isinstance(data, dict) and isinstance(data.get("tokens"), dict):
            data = data["tokens"]
        try:
            pair = CredentialPair.model_validate(data)
        except ValidationError as e:
            raise RefreshError("Refresh response did not contain an access token") from e

        if pair.refresh_token is None:
            pair = pair.model_copy(update={"refresh_token": refresh_token})
        return pair


class SingleFlightRefresher:
    """
    Coalesces concurrent refreshes keyed by the refresh token they consume.

    The first caller starts the refresh; callers arriving while it is in
    flight await the same future. Once the flight settles it is forgotten,
    so a later failure triggers a fresh refresh.
    """

    def __init__(
        self,
        operation: RefreshOperation,
        credentials: CredentialStore,
        on_reauth_required: Callable[[], Any] | None = None,
    ) -> None:
        self.operation = operation
        self.credentials = credentials
        self.on_reauth_required = on_reauth_required
        self._in_flight: dict[str, asyncio.Future[CredentialPair]] = {}

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    async def refresh(self) -> CredentialPair:
        refresh_token = self.credentials.get_refresh_token()
        if not refresh_token:
            logger.warning("No refresh token available, ending session")
            self.credentials.clear()
            self._signal_reauth()
            raise RefreshError("No refresh token available")

        flight = self._in_flight.get(refresh_token)
        if flight is None:
            flight = asyncio.ensure_future(self._run(refresh_token))
            self._in_flight[refresh_token] = flight
            flight.add_done_callback(lambda done: self._forget(refresh_token, done))
        else:
            logger.debug("Joining refresh already in flight")

        # a cancelled waiter must not cancel the shared flight
        return await asyncio.shield(flight)

    def _forget(self, refresh_token: str, flight: asyncio.Future) -> None:
        if self._in_flight.get(refresh_token) is flight:
            del self._in_flight[refresh_token]
        if not flight.cancelled():
            # mark the exception retrieved when every waiter went away
            flight.exception()

    async def _run(self, refresh_token: str) -> CredentialPair:
        logger.info("Refreshing access token")
        try:
            pair = await self.operation.refresh(refresh_token)
        except Exception as e:
            logger.warning(f"Token refresh failed: {e}")
            self.credentials.clear()
            self._signal_reauth()
            if isinstance(e, RefreshError):
                raise
            raise RefreshError(str(e)) from e

        try:
            self.credentials.set_credentials(pair)
        except OSError as e:
            logger.error(f"Could not store refreshed credentials: {e}")
            self.credentials.clear()
            self._signal_reauth()
            raise RefreshError(f"Could not store refreshed credentials: {e}") from e

        logger.info("Access token refreshed")
        return pair

    def _signal_reauth(self) -> None:
        if self.on_reauth_required is None:
            return
        logger.warning("Forcing re-authentication")
        try:
            self.on_reauth_required()
        except Exception as e:
            logger.error(f"Error in re-authentication callback: {e}")
