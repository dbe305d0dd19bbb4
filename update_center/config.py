import os
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Update Center"
    DEBUG: bool = _env_bool("DEBUG", True)
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    API_V1_PREFIX: str = os.getenv("API_V1_PREFIX", "/api/v1")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./update_center.db")

    # JWT
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your-secret-key-here")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 30))

    # Logging
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE", "logs/update_center.log")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Update decisions
    DEFAULT_CHANNEL: str = os.getenv("DEFAULT_CHANNEL", "official")
    HISTORY_MAX_PAGE_SIZE: int = int(os.getenv("HISTORY_MAX_PAGE_SIZE", 100))
    CATALOG_CACHE_TTL_SECONDS: float = float(os.getenv("CATALOG_CACHE_TTL_SECONDS", 0))
    # Devices without an identifier receive an in-progress gray release
    GRAY_RELEASE_FAIL_OPEN: bool = _env_bool("GRAY_RELEASE_FAIL_OPEN", True)

    # Store channels
    APP_STORE_URL: str = os.getenv("APP_STORE_URL", "https://apps.apple.com/app/id0000000000")
    GOOGLE_PLAY_URL: str = os.getenv(
        "GOOGLE_PLAY_URL", "https://play.google.com/store/apps/details?id=com.example.app"
    )

    class Config:
        env_file = ".env"


settings = Settings()
