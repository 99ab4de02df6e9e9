from functools import lru_cache
from pathlib import Path
from typing import Any, Literal
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PAGE_CACHE_PATH = Path.home() / ".pagemirror" / "pages.db"


class Settings(BaseSettings):
    # Application Configuration
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    USER_AGENT: str = "pagemirror"
    TASK_RETENTION_DAYS: int = 7
    LOCK_TIMEOUT: int = 120

    # Remote document API
    DOCS_API_BASE_URL: str = "https://coda.io/apis/v1"
    DOCS_API_TOKEN: str | None = None
    LIST_PAGES_LIMIT: int = 100
    LIST_PAGES_MAX: int = 1000  # Safety limit against endless pagination
    LIST_PAGES_DELAY: float = 0.5
    EXPORT_POLL_INTERVAL: float = 2.0
    EXPORT_MAX_POLLS: int = 30

    # Storage
    REDIS_URL: str = "redis://localhost:6379"
    PAGE_CACHE_URL: str = f"sqlite:///{DEFAULT_PAGE_CACHE_PATH}"
    PAGE_CACHE_TABLE: str = "pages"
    MIRROR_OUTPUT_DIR: str = "./data/pages"

    # Mirroring
    MIN_CONTENT_LENGTH: int = 10
    FETCH_MAX_ATTEMPTS: int = 3
    FETCH_RETRY_DELAY: float = 2.0
    PAGE_FETCH_DELAY: float = 1.0

    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: Any):
        if isinstance(v, str):
            return v.upper()
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings():
    return Settings()
