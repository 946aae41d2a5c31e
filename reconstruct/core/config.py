"""Application configuration from environment."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from env / .env."""

    app_name: str = "Reconstruct API"
    debug: bool = False
    log_level: str = "INFO"
    port: int = 3000

    # Database
    database_url: str = "sqlite+aiosqlite:///./reconstruct.db"
    db_pool_size: int = 5
    db_max_overflow: int = 0
    db_pool_timeout: int = 60  # seconds to wait for a pooled connection
    db_connect_retries: int = 3
    db_connect_retry_delay: float = 5.0

    # JWT
    secret_key: str = "change-me-in-production-use-env"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Bearer name:email pseudo-tokens used by older mobile builds
    legacy_token_auth_enabled: bool = True

    cors_origins: list[str] = ["*"]

    # Welcome email (SMTP)
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    smtp_timeout: float = 15.0
    email_sender: str = "Ashika from Reconstruct <ashika@reconstructyourmind.com>"
    support_email: str | None = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()
