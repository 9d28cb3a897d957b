"""
Client against the in-process sandbox server.

Invariants:
    - an expired access token is refreshed transparently, exactly once
    - concurrent requests with the same expired token rotate the refresh token once
    - a revoked refresh token ends the session and fires the re-auth callbacks
"""

import asyncio
from datetime import timedelta

import httpx
import pytest

from client.api import APIClient
from client.credentials import MemoryCredentialStore
from client.errors import ClientError, UnauthorizedError, ValidationError
from client.services import AuthService
from core.models.auth import CredentialPair
from server.app import DEMO_USER


@pytest.fixture
async def api_client(settings, server):
    client = APIClient.from_settings(
        settings, MemoryCredentialStore(), transport=httpx.ASGITransport(app=server.app)
    )
    yield client
    await client.aclose()


@pytest.fixture
def auth_service(api_client) -> AuthService:
    return AuthService(api_client)


async def login(auth_service: AuthService):
    return await auth_service.login(DEMO_USER["email"], DEMO_USER["password"])


def expire_access_token(server, api_client) -> None:
    """Swap the stored access token for an expired one, keeping the refresh token."""
    user = server.repository.find_user_by_email(DEMO_USER["email"])
    current = api_client.credentials.get_credentials()
    api_client.credentials.set_credentials(
        CredentialPair(
            access_token=server.auth_service.create_access_token(user, timedelta(seconds=-5)),
            refresh_token=current.refresh_token,
        )
    )


async def test_login_then_me(auth_service):
    logged_in = []
    auth_service.register_login_success_callback(logged_in.append)

    user = await login(auth_service)
    me = await auth_service.me()

    assert user.email == DEMO_USER["email"]
    assert me == user
    assert logged_in == [user]
    assert auth_service.is_authenticated


async def test_login_validates_input_before_calling_server(auth_service, server):
    with pytest.raises(ValidationError, match="required"):
        await auth_service.login("", "secret")
    with pytest.raises(ValidationError) as exc_info:
        await auth_service.login("not-an-email", "secret")

    assert exc_info.value.details == {"email": ["invalid format"]}


async def test_wrong_password_does_not_touch_session(auth_service, api_client):
    with pytest.raises(UnauthorizedError, match="Incorrect email or password"):
        await auth_service.login(DEMO_USER["email"], "wrong-password")

    assert api_client.credentials.get_credentials() is None


async def test_expired_access_token_is_refreshed_transparently(auth_service, api_client, server):
    await login(auth_service)
    old_refresh = api_client.credentials.get_refresh_token()
    expire_access_token(server, api_client)

    me = await auth_service.me()

    assert me.email == DEMO_USER["email"]
    assert api_client.credentials.get_refresh_token() != old_refresh
    records = list(server.repository.refresh_tokens.values())
    assert [r.is_revoked for r in records] == [True, False]


async def test_concurrent_expired_requests_rotate_once(auth_service, api_client, server):
    await login(auth_service)
    expire_access_token(server, api_client)

    users = await asyncio.gather(*(auth_service.me() for _ in range(3)))

    assert {u.email for u in users} == {DEMO_USER["email"]}
    assert len(server.repository.refresh_tokens) == 2


async def test_revoked_refresh_token_forces_reauth(auth_service, api_client, server):
    reauth = []
    auth_service.register_reauth_callback(lambda: reauth.append(1))
    await login(auth_service)
    server.auth_service.revoke_refresh_token(api_client.credentials.get_refresh_token())
    expire_access_token(server, api_client)

    with pytest.raises(UnauthorizedError):
        await auth_service.me()

    assert reauth == [1]
    assert api_client.credentials.get_credentials() is None
    assert auth_service.current_user is None


async def test_explicit_refresh(auth_service, api_client):
    await login(auth_service)
    before = api_client.credentials.get_credentials()

    pair = await auth_service.refresh()

    assert pair.access_token != before.access_token
    assert api_client.credentials.get_credentials() == pair


async def test_register_and_duplicate(auth_service):
    user = await auth_service.register("Ada Lovelace", "ada@example.com", "analytical-engine")

    assert user.name == "Ada Lovelace"
    with pytest.raises(ClientError, match="already exists") as exc_info:
        await auth_service.register("Ada Lovelace", "ada@example.com", "analytical-engine")
    assert exc_info.value.status == 409


async def test_register_rejects_short_password_locally(auth_service):
    with pytest.raises(ValidationError) as exc_info:
        await auth_service.register("Ada", "ada@example.com", "short")

    assert "password" in exc_info.value.details


async def test_logout_revokes_and_clears(auth_service, api_client, server):
    logged_out = []
    auth_service.register_logout_callback(lambda: logged_out.append(1))
    await login(auth_service)

    await auth_service.logout()

    assert api_client.credentials.get_credentials() is None
    assert logged_out == [1]
    assert all(r.is_revoked for r in server.repository.refresh_tokens.values())
    with pytest.raises(UnauthorizedError):
        await auth_service.me()


async def test_courses_are_public(api_client):
    body = await api_client.get("/courses/c1")

    assert body["data"]["id"] == "c1"
