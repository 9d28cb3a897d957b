import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.abstract import App
from core.config import Settings
from core.constants import API_PREFIX
from server.api.services.auth import AuthService
from server.errors import register_error_handlers
from server.repository import Repository

logger = logging.getLogger(__name__)

DEMO_USER = {"name": "Demo Student", "email": "demo@mathematico.dev", "password": "demo-password"}


class ServerApp(App):
    """Sandbox backend implementing the auth contract the client relies on."""

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings)

        self.app = FastAPI(
            title="Mathematico Sandbox Server",
            description="In-memory backend for the Mathematico API client",
            version="1.1.0",
            docs_url="/docs" if settings.server_debug else None,
            redoc_url="/redoc" if settings.server_debug else None,
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self.repository = Repository()
        self.auth_service = AuthService(settings, self.repository)
        self.app.state.auth_service = self.auth_service

        if settings.server_seed_demo_user:
            self.auth_service.register_user(**DEMO_USER)
            logger.info(f"Seeded demo user {DEMO_USER['email']}")

        register_error_handlers(self.app)

        from .api.auth import router as auth_router
        from .api.base import router as base_router
        from .api.courses import router as courses_router
        from .api.users import router as users_router

        self.app.include_router(base_router, prefix=API_PREFIX)
        self.app.include_router(auth_router, prefix=f"{API_PREFIX}/auth")
        self.app.include_router(users_router, prefix=f"{API_PREFIX}/users")
        self.app.include_router(courses_router, prefix=f"{API_PREFIX}/courses")

    def run(self) -> None:
        uvicorn.run(
            self.app,
            host=self.settings.server_bind,
            port=self.settings.server_port or 8000,
        )
