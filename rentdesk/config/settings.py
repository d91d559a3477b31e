# rentdesk/config/settings.py

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_name: str = "rentdesk"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    version: str = "0.1.0"

    # --- Security ---
    jwt_secret: str = Field(..., min_length=32)
    jwt_algorithm: str = "HS256"
    jwt_expiration_minutes: int = 60

    # --- Database ---
    database_url: str

    # --- Redis (optional: shared rate limit state across processes) ---
    redis_url: Optional[str] = None

    # --- Throttling ---
    login_rate_limit: int = 5
    login_rate_window_seconds: int = 60
    rate_limit_sweep_seconds: int = 600

    # --- API ---
    default_page_size: int = 20
    max_page_size: int = 100

    # --- Observability ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()
