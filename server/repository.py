"""In-memory state for the sandbox server."""

import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4


@dataclass
class User:
    name: str
    email: str
    password: str  # argon2 hash
    is_admin: bool = False
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_login_at: datetime | None = None

    @property
    def role(self) -> str:
        return "admin" if self.is_admin else "user"


@dataclass
class RefreshTokenRecord:
    token_id: str  # sha256 of the token, the raw token is never kept
    user_id: str
    expires_at: datetime
    is_revoked: bool = False
    revoked_at: datetime | None = None

    def revoke(self) -> None:
        self.is_revoked = True
        self.revoked_at = datetime.now(UTC)


class Repository:
    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self.refresh_tokens: dict[str, RefreshTokenRecord] = {}
        self.lock = threading.Lock()

    def add_user(self, user: User) -> User:
        with self.lock:
            self.users[user.id] = user
        return user

    def find_user(self, user_id: str) -> User | None:
        return self.users.get(user_id)

    def find_user_by_email(self, email: str) -> User | None:
        email = email.lower()
        return next((u for u in self.users.values() if u.email.lower() == email), None)

    def add_refresh_token(self, record: RefreshTokenRecord) -> None:
        with self.lock:
            self.refresh_tokens[record.token_id] = record

    def find_refresh_token(self, token_id: str) -> RefreshTokenRecord | None:
        return self.refresh_tokens.get(token_id)
