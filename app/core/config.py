# app/core/config.py
import logging
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    DATABASE_URL: str = "sqlite+aiosqlite:///./divination.db"

    REDIS_HOST: str = "redis"
    REDIS_PORT: int = 6379
    REDIS_URL: str = f"redis://{REDIS_HOST}:{REDIS_PORT}"

    RATE_LIMIT_ENABLED: bool = True
    REGISTER_RATE_LIMIT_TIMES: int = 2
    REGISTER_RATE_LIMIT_SECONDS: int = 5
    DIVINATION_RATE_LIMIT: str = "30/minute"

    CORS_ORIGINS: List[str] = [
        "http://localhost",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    ALLOWED_HOSTS: List[str] = ["localhost", "127.0.0.1", "testserver", "backend", "nginx"]

    CACHE_MAX_SIZE: int = 500
    CACHE_MAX_MEMORY_MB: int = 50
    CACHE_TTL_SECONDS: int = 300

    SERVER_IP: str = "0.0.0.0"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
    APP_VERSION: str = "1.0.0"

    class Config:
        env_file = ".env"
        extra = "allow"


settings = Settings()

logging.basicConfig(level=logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL.upper())
logger = logging.getLogger(__name__)
logger.info(f"Loaded DATABASE_URL: {settings.DATABASE_URL}")
logger.info(f"Loaded REDIS_URL: {settings.REDIS_URL}")
