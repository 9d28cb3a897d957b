"""Shared fakes and fixtures."""

import httpx
import pytest

from client.api import APIClient
from client.credentials import MemoryCredentialStore
from core.config import Settings
from core.models.auth import CredentialPair
from server.app import ServerApp
from tests.fakes import FakeRefreshOperation, FakeTransport


@pytest.fixture
def pair() -> CredentialPair:
    return CredentialPair(access_token="T1", refresh_token="R1", expires_in=900)


@pytest.fixture
def new_pair() -> CredentialPair:
    return CredentialPair(access_token="T2", refresh_token="R2", expires_in=900)


@pytest.fixture
def store(pair) -> MemoryCredentialStore:
    return MemoryCredentialStore(pair)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def reauth_calls() -> list[int]:
    return []


@pytest.fixture
def make_client(transport, store, reauth_calls):
    def factory(refresh_operation: FakeRefreshOperation) -> APIClient:
        return APIClient(
            transport,
            store,
            refresh_operation,
            on_reauth_required=lambda: reauth_calls.append(1),
            timeout=10.0,
        )

    return factory


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        api_base_url="http://testserver/api/v1",
        client_session_file=tmp_path / "session.json",
        server_seed_demo_user=True,
    )


@pytest.fixture
def server(settings) -> ServerApp:
    return ServerApp(settings)


@pytest.fixture
async def http(server):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=server.app), base_url="http://testserver"
    ) as client:
        yield client
