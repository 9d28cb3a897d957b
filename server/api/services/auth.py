import hashlib
import logging
import secrets
from datetime import UTC, datetime, timedelta

from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, VerifyMismatchError
from jose import JWTError, jwt

from core.config import Settings
from core.models.auth import AuthPayload, CredentialPair, UserOut
from server.errors import BadRequestError, ConflictError, UnauthorizedError
from server.repository import RefreshTokenRecord, Repository, User

logger = logging.getLogger(__name__)

ph = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
    hash_len=32,
)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class AuthService:
    def __init__(self, settings: Settings, repository: Repository) -> None:
        self.settings = settings
        self.repository = repository

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verifies if the plain password matches the stored hash using Argon2.
        """
        try:
            ph.verify(hashed_password, plain_password)
            return True
        except (VerifyMismatchError, VerificationError):
            return False

    def hash_password(self, password: str) -> str:
        """
        Creates an Argon2 hash of the given password.
        """
        return ph.hash(password)

    def register_user(self, name: str, email: str, password: str, is_admin: bool = False) -> User:
        if self.repository.find_user_by_email(email):
            raise ConflictError("User with this email already exists", "USER_ALREADY_EXISTS")
        user = User(
            name=name,
            email=email.lower(),
            password=self.hash_password(password),
            is_admin=is_admin,
        )
        return self.repository.add_user(user)

    def authenticate_user(self, email: str, password: str) -> User | None:
        """
        Authenticates a user by verifying email and password.
        """
        user = self.repository.find_user_by_email(email)
        if not user or not self.verify_password(password, user.password):
            return None
        user.last_login_at = datetime.now(UTC)
        return user

    def _encode(self, claims: dict, secret: str, expires_delta: timedelta) -> str:
        now = datetime.now(UTC)
        to_encode = claims.copy()
        to_encode.update(
            {
                "jti": secrets.token_hex(16),
                "iss": self.settings.server_issuer,
                "aud": self.settings.server_audience,
                "iat": int(now.timestamp()),
                "exp": int((now + expires_delta).timestamp()),
            }
        )
        return jwt.encode(to_encode, secret, algorithm=self.settings.server_algorithm)

    def create_access_token(self, user: User, expires_delta: timedelta | None = None) -> str:
        """
        Generates a short-lived JWT access token for the user.
        """
        expires_delta = expires_delta or timedelta(
            minutes=self.settings.server_access_token_expire_minutes
        )
        claims = {"sub": user.id, "email": user.email, "isAdmin": user.is_admin, "type": "access"}
        return self._encode(claims, self.settings.server_secret_key, expires_delta)

    def create_refresh_token(self, user: User, expires_delta: timedelta | None = None) -> str:
        """
        Generates a refresh token and records its hash so it can be revoked.
        """
        expires_delta = expires_delta or timedelta(
            days=self.settings.server_refresh_token_expire_days
        )
        token = self._encode(
            {"sub": user.id, "type": "refresh"}, self.settings.server_refresh_secret_key, expires_delta
        )
        self.repository.add_refresh_token(
            RefreshTokenRecord(
                token_id=hash_token(token),
                user_id=user.id,
                expires_at=datetime.now(UTC) + expires_delta,
            )
        )
        return token

    def decode_token(self, token: str, token_type: str = "access") -> dict | None:
        """
        Decodes a JWT and returns its claims, or None when invalid or expired.
        """
        secret = (
            self.settings.server_secret_key
            if token_type == "access"
            else self.settings.server_refresh_secret_key
        )
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.settings.server_algorithm],
                audience=self.settings.server_audience,
                issuer=self.settings.server_issuer,
            )
        except JWTError:
            return None
        return payload if payload.get("type") == token_type else None

    def issue_tokens(self, user: User) -> CredentialPair:
        return CredentialPair(
            access_token=self.create_access_token(user),
            refresh_token=self.create_refresh_token(user),
            expires_in=self.settings.server_access_token_expire_minutes * 60,
        )

    def auth_payload(self, user: User) -> AuthPayload:
        return AuthPayload(user=self.user_out(user), tokens=self.issue_tokens(user))

    def rotate_refresh_token(self, refresh_token: str | None) -> CredentialPair:
        """
        Exchanges a refresh token for a new pair, revoking the old token.
        """
        if not refresh_token:
            raise BadRequestError("Refresh token is required", "REFRESH_TOKEN_REQUIRED")

        payload = self.decode_token(refresh_token, "refresh")
        if payload is None:
            raise UnauthorizedError("Refresh token is invalid", "REFRESH_TOKEN_INVALID")

        record = self.repository.find_refresh_token(hash_token(refresh_token))
        if record is None or record.is_revoked:
            raise UnauthorizedError("Refresh token is invalid or revoked", "REFRESH_TOKEN_INVALID")

        if record.expires_at < datetime.now(UTC):
            raise UnauthorizedError("Refresh token has expired", "REFRESH_TOKEN_EXPIRED")

        if payload.get("sub") != record.user_id:
            raise UnauthorizedError("Refresh token mismatch", "REFRESH_TOKEN_MISMATCH")

        user = self.repository.find_user(record.user_id)
        if user is None:
            raise UnauthorizedError("Refresh token is invalid or revoked", "REFRESH_TOKEN_INVALID")

        record.revoke()
        logger.info(f"Rotated refresh token for user {user.id}")
        return self.issue_tokens(user)

    def revoke_refresh_token(self, refresh_token: str | None) -> None:
        if not refresh_token:
            return
        record = self.repository.find_refresh_token(hash_token(refresh_token))
        if record is not None and not record.is_revoked:
            record.revoke()

    def get_current_user(self, token: str) -> User:
        """
        Gets the current user from the access token.
        """
        payload = self.decode_token(token)
        if payload is None:
            raise UnauthorizedError("Could not validate credentials", "TOKEN_INVALID")

        user_id: str | None = payload.get("sub")
        user = self.repository.find_user(user_id) if user_id else None
        if user is None:
            raise UnauthorizedError("Could not validate credentials", "TOKEN_INVALID")

        return user

    @staticmethod
    def user_out(user: User) -> UserOut:
        return UserOut(
            id=user.id, name=user.name, email=user.email, is_admin=user.is_admin, role=user.role
        )
