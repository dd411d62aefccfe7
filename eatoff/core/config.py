from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parents[2]
PROMPTS_DIR = ROOT_DIR / "eatoff" / "prompts"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4o-mini"
    LLM_MAX_TOKENS: int = 500
    LLM_TEMPERATURE: float = 0.4
    LLM_TIMEOUT_SEC: float = 60.0

    SUPPORT_HISTORY_LIMIT: int = 10
    KB_SEARCH_LIMIT: int = 3

    JWT_SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    CORS_ORIGINS: str = ""
    TRUST_PROXY_HEADERS: bool = False
    LOGIN_RATE_LIMIT_WINDOW_SEC: int = 300
    LOGIN_RATE_LIMIT_MAX_ATTEMPTS: int = 5

    # Bucharest, used when the client does not share its location.
    DEFAULT_LATITUDE: float = 44.4268
    DEFAULT_LONGITUDE: float = 26.1025
    HEAT_MAP_RADIUS_KM: float = 5.0
    HEAT_MAP_MIN_INTENSITY: int = 70


settings = Settings()
