from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    server_bind: str = "0.0.0.0"
    server_port: int | None = 8000
    server_secret_key: str = "mathematico-access-secret"
    server_refresh_secret_key: str = "mathematico-refresh-secret"
    server_debug: bool = False
    server_access_token_expire_minutes: int = 15
    server_refresh_token_expire_days: int = 30
    server_algorithm: str = "HS256"
    server_issuer: str = "mathematico-api"
    server_audience: str = "mathematico-client"
    server_seed_demo_user: bool = True

    api_base_url: str = "http://localhost:8000/api/v1"
    api_timeout_ms: int = 10000
    api_default_headers: dict[str, str] = {
        "Accept": "application/json",
        "X-Requested-With": "XMLHttpRequest",
    }
    api_refresh_path: str = "/auth/refresh-token"

    client_session_file: Path | None = None

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def api_timeout(self) -> float:
        """Default request timeout in seconds."""
        return self.api_timeout_ms / 1000


settings = Settings()


def get_settings() -> Settings:
    return settings
