from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "ParkBoard API"
    debug: bool = False
    environment: str = "production"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./parkboard.db"

    # Security
    secret_key: str = "change-this-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 7
    min_password_length: int = 12

    # Auth rate limiting (per email)
    rate_limit_enabled: bool = True
    auth_rate_limit_attempts: int = 5
    auth_rate_limit_window_seconds: int = 900

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8080"]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
