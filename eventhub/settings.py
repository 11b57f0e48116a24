from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "production"
    log_level: str = "INFO"
    frontend_url: str = "http://localhost:8080"

    # Postgres
    database_url: str = "postgresql://app:app@db:5432/app"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_pool_timeout: float = 5.0
    db_connect_timeout: int = 3

    # Redis
    redis_url: str = "redis://redis:6379/0"
    redis_socket_timeout: float = 5.0

    # Mail relay
    smtp_base_url: str = "http://smtp-relay:8025"
    smtp_sender: str = "EventHub <no-reply@eventhub.local>"
    smtp_timeout_seconds: float = 5.0

    # Security / policies
    bcrypt_rounds: int = 10
    otp_ttl_seconds: int = 600
    otp_max_attempts: int = 5
    otp_lockout_seconds: int = 900
    code_store_backend: Literal["memory", "redis"] = "memory"
    session_ttl_seconds: int = 86400
    oauth_state_ttl_seconds: int = 900

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def dev_mode(self) -> bool:
        # only an explicit "development" opens the dev surface
        return self.app_env.strip().lower() == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
