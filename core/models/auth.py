from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.types import UserRole


class CamelModel(BaseModel):
    """Wire models use camelCase keys; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginData(CamelModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class RegisterData(CamelModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=8)


class RefreshRequest(CamelModel):
    refresh_token: str | None = None


class CredentialPair(CamelModel):
    """Access/refresh token pair. Replaced as a whole, never mutated."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    is_admin: bool = False
    role: UserRole = "user"


class AuthPayload(CamelModel):
    user: UserOut
    tokens: CredentialPair
