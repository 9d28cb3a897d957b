from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from core.models.auth import LoginData, RefreshRequest, RegisterData
from server.api.dependencies import AuthServiceDep, CurrentUserDep
from server.errors import UnauthorizedError
from server.utils.response import send_response

router = APIRouter(tags=["Authentication"])


@router.post("/register")
async def register(user_data: RegisterData, auth_service: AuthServiceDep) -> JSONResponse:
    user = auth_service.register_user(user_data.name, user_data.email, user_data.password)
    payload = auth_service.auth_payload(user)
    return send_response(
        status.HTTP_201_CREATED,
        payload.model_dump(by_alias=True),
        "User registered successfully",
    )


@router.post("/login")
async def login(credentials: LoginData, auth_service: AuthServiceDep) -> JSONResponse:
    user = auth_service.authenticate_user(credentials.email, credentials.password)
    if not user:
        raise UnauthorizedError("Incorrect email or password", "INVALID_CREDENTIALS")

    payload = auth_service.auth_payload(user)
    return send_response(status.HTTP_200_OK, payload.model_dump(by_alias=True), "Login successful")


@router.post("/refresh-token")
async def refresh_token(body: RefreshRequest, auth_service: AuthServiceDep) -> JSONResponse:
    tokens = auth_service.rotate_refresh_token(body.refresh_token)
    return send_response(
        status.HTTP_200_OK, tokens.model_dump(by_alias=True), "Token refreshed successfully"
    )


@router.post("/logout")
async def logout(auth_service: AuthServiceDep, body: RefreshRequest | None = None) -> JSONResponse:
    auth_service.revoke_refresh_token(body.refresh_token if body else None)
    return send_response(status.HTTP_200_OK, message="Logged out successfully")


@router.get("/me")
async def me(user: CurrentUserDep, auth_service: AuthServiceDep) -> JSONResponse:
    return send_response(
        status.HTTP_200_OK, auth_service.user_out(user).model_dump(by_alias=True)
    )
