"""
Mathematico API client - command line application
"""

import asyncio
import json
import logging
from typing import Any

from icecream import ic

from client.api import APIClient
from client.credentials import FileCredentialStore
from client.errors import ApiError
from client.services import AuthService
from core.abstract import App
from core.config import Settings
from core.constants import SESSION_FILE, USERS_ME
from core.types import HttpMethod

logger = logging.getLogger(__name__)


class ClientApp(App):
    """Runs a single API call with the persisted session."""

    def __init__(
        self,
        settings: Settings,
        method: HttpMethod = "GET",
        path: str = USERS_ME,
        body: Any = None,
        email: str | None = None,
        password: str | None = None,
    ) -> None:
        super().__init__(settings)
        self.method = method
        self.path = path
        self.body = body
        self.email = email
        self.password = password
        self.exit_code = 0

        self.credentials = FileCredentialStore(settings.client_session_file or SESSION_FILE)
        self.api_client = APIClient.from_settings(settings, self.credentials)
        self.auth_service = AuthService(self.api_client)
        self.auth_service.register_reauth_callback(
            lambda: logger.warning("Session expired. Log in again with --email and --password.")
        )

    async def execute(self) -> Any:
        try:
            if self.email and self.password:
                user = await self.auth_service.login(self.email, self.password)
                ic(user)
            return await self.api_client.request(self.method, self.path, self.body)
        finally:
            await self.api_client.aclose()

    def run(self) -> None:
        try:
            result = asyncio.run(self.execute())
        except ApiError as e:
            logger.error(f"{self.method} {self.path} failed [{e.kind}]: {e.message}")
            ic(e.details)
            self.exit_code = 1
            return

        ic(result)
        print(json.dumps(result, indent=2, default=str))
