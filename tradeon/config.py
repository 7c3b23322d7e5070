from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache
from typing import Optional
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./tradeon.db"

    # Database Connection Pool Settings (ignored for SQLite)
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # JWT verification (tokens are issued by the hosted auth provider)
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    # Expected "aud" claim; unset skips audience verification
    JWT_AUDIENCE: Optional[str] = None

    # App Settings
    APP_NAME: str = "TradeOn Global API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # CORS - accepts JSON string, comma-separated, or list
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
        "https://tradeon.global",
        "https://www.tradeon.global",
    ]

    # 1688 marketplace via OTAPI
    OTAPI_INSTANCE_KEY: str = ""
    OTAPI_BASE_URL: str = "https://otapi.net/service-json"
    UPSTREAM_TIMEOUT_SECONDS: float = 20.0
    IMAGE_SEARCH_TIMEOUT_SECONDS: float = 30.0
    SEARCH_PAGE_SIZE: int = 40

    # 1688 shipping quotes via TMAPI
    TMAPI_TOKEN: str = ""
    TMAPI_BASE_URL: str = "http://api.tmapi.top"
    DEFAULT_SHIPPING_PROVINCE: str = "广东"

    # Title translation (OpenAI-compatible chat completions endpoint)
    TRANSLATION_API_URL: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    TRANSLATION_API_KEY: str = ""
    TRANSLATION_MODEL: str = "google/gemini-2.5-flash-lite"
    TRANSLATION_PARALLELISM: int = 4

    # Search result cache
    SEARCH_CACHE_TTL_HOURS: int = 12
    SEARCH_CACHE_PURGE_INTERVAL_MINUTES: int = 60

    # Storefront catalog (trending and category shelves)
    TRENDING_REFRESH_INTERVAL_HOURS: int = 6
    TRENDING_MAX_PRODUCTS: int = 15
    CATEGORY_REFRESH_INTERVAL_HOURS: int = 24
    CATEGORY_PRODUCTS_PER_QUERY: int = 12
    # Pause between category pulls to stay under the upstream rate limit
    CATEGORY_REFRESH_DELAY_SECONDS: float = 0.5

    # Currency
    DEFAULT_CNY_TO_BDT_RATE: float = 17.5

    # Background scheduler
    SCHEDULER_ENABLED: bool = True
    SCHEDULER_TIMEZONE: str = "Asia/Dhaka"

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(',')]
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin for origin in self.CORS_ORIGINS if origin]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
