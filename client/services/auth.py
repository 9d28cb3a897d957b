from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError as ModelValidationError

from client.errors import ApiError, ClientError, RefreshError, UnauthorizedError, ValidationError
from client.services.base import ServiceBase
from core.constants import AUTH_LOGIN, AUTH_LOGOUT, AUTH_ME, AUTH_REGISTER
from core.models.auth import AuthPayload, CredentialPair, LoginData, RegisterData, UserOut
from core.models.envelope import unwrap

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class AuthService(ServiceBase):
    """Handles login, register, logout, refresh and fetching the current user."""

    def __init__(self, *args) -> None:
        super().__init__(*args)
        self.current_user: UserOut | None = None
        self.on_login_success_callbacks: list[Callable[[UserOut], Any]] = []
        self.on_logout_callbacks: list[Callable[[], Any]] = []
        self.on_reauth_callbacks: list[Callable[[], Any]] = []

        self.api_client.on_reauth_required = self.force_reauth

    def register_login_success_callback(self, cb: Callable[[UserOut], Any]) -> None:
        self.on_login_success_callbacks.append(cb)

    def register_logout_callback(self, cb: Callable[[], Any]) -> None:
        self.on_logout_callbacks.append(cb)

    def register_reauth_callback(self, cb: Callable[[], Any]) -> None:
        self.on_reauth_callbacks.append(cb)

    @property
    def is_authenticated(self) -> bool:
        return self.api_client.credentials.get_access_token() is not None

    # ——— Actions ———
    async def login(self, email: str, password: str) -> UserOut:
        if not email or not password:
            raise ValidationError("Email and password are required")
        if not EMAIL_RE.match(email.strip()):
            raise ValidationError(
                "Please provide a valid email address", details={"email": ["invalid format"]}
            )

        data = LoginData(email=email.strip(), password=password)
        body = await self.api_client.post(
            AUTH_LOGIN, data.model_dump(by_alias=True), authenticate=False
        )
        return self._start_session(body)

    async def register(self, name: str, email: str, password: str) -> UserOut:
        try:
            data = RegisterData(name=name, email=email.strip(), password=password)
        except ModelValidationError as e:
            details = {".".join(str(p) for p in err["loc"]): [err["msg"]] for err in e.errors()}
            raise ValidationError("Registration data is invalid", details=details) from e

        try:
            body = await self.api_client.post(
                AUTH_REGISTER, data.model_dump(by_alias=True), authenticate=False
            )
        except ClientError as e:
            if e.status == 409:
                raise ClientError(
                    "An account with this email already exists. "
                    "Please use a different email or try logging in instead.",
                    e.status,
                    e.code,
                ) from e
            raise
        return self._start_session(body)

    async def me(self) -> UserOut:
        body = await self.api_client.get(AUTH_ME)
        self.current_user = UserOut.model_validate(unwrap(body))
        return self.current_user

    async def refresh(self) -> CredentialPair:
        """Refresh the session now instead of waiting for a 401."""
        try:
            return await self.api_client.refresher.refresh()
        except RefreshError as e:
            raise UnauthorizedError(str(e), 401) from e

    async def logout(self) -> None:
        refresh_token = self.api_client.credentials.get_refresh_token()
        try:
            await self.api_client.post(
                AUTH_LOGOUT, {"refreshToken": refresh_token}, authenticate=False
            )
        except ApiError as e:
            # the local session is dropped regardless
            logger.warning(f"Logout request failed: {e.message}")
        finally:
            self._end_session(self.on_logout_callbacks)

    def force_reauth(self) -> None:
        logger.warning("Session expired, re-authentication required")
        self._end_session(self.on_reauth_callbacks)

    # ——— Session ———
    def _start_session(self, body: Any) -> UserOut:
        try:
            payload = AuthPayload.model_validate(unwrap(body))
        except ModelValidationError as e:
            raise ClientError("Invalid response format: missing user or access token") from e

        self.api_client.credentials.set_credentials(payload.tokens)
        self.current_user = payload.user
        logger.info(f"Signed in as {payload.user.email}")

        for cb in self.on_login_success_callbacks:
            try:
                cb(payload.user)
            except Exception as e:
                logger.error(f"Error in login success callback: {e}")
        return payload.user

    def _end_session(self, callbacks: list[Callable[[], Any]]) -> None:
        self.api_client.credentials.clear()
        self.current_user = None
        for cb in callbacks:
            try:
                cb()
            except Exception as e:
                logger.error(f"Error in session callback: {e}")
