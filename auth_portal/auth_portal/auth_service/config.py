"""
Configuration management for the auth service
"""
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Auth service configuration loaded from environment variables"""

    # Server Configuration
    AUTH_URL: str = "http://localhost:8000"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "./logs"

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./app.db"
    DB_ECHO: bool = False

    # Session Configuration
    AUTH_SECRET: str = "change-this-secret-in-prod"
    SESSION_STRATEGY: Literal["jwt", "database"] = "jwt"
    SESSION_MAX_AGE_SECONDS: int = 30 * 24 * 60 * 60
    SESSION_COOKIE_NAME: str = "authjs.session-token"
    SESSION_COOKIE_SECURE: bool = False

    # Password hashing cost factor
    PASSWORD_HASH_ROUNDS: int = 29000

    # OAuth providers
    GITHUB_ID: Optional[str] = None
    GITHUB_SECRET: Optional[str] = None
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None
    OAUTH_TIMEOUT_SECONDS: float = 30.0

    # Pages
    SIGNIN_PAGE: str = "/signin"
    SIGNOUT_REDIRECT: str = "/login"
    DASHBOARD_PAGE: str = "/dashboard"

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
