from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from server.api.services.auth import AuthService
from server.repository import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login")


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def get_current_user(token: Annotated[str, Depends(oauth2_scheme)], auth_service: AuthServiceDep) -> User:
    return auth_service.get_current_user(token)


CurrentUserDep = Annotated[User, Depends(get_current_user)]
