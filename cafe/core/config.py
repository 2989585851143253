from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Supabase Postgres connection string)
      - STAFF_USERNAME / STAFF_PASSWORD (shared staff portal credentials)
      - STAFF_JWT_SECRET (signs staff bearer tokens)

    Optional:
      - CART_STORAGE_DIR (where cart snapshots are written)
      - *_FAST_INTERVAL / *_SLOW_INTERVAL (dashboard polling, seconds)
    """

    PROJECT_NAME: str = "KlaséCo Café API"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str

    # Staff gate
    STAFF_USERNAME: str
    STAFF_PASSWORD: str
    STAFF_JWT_SECRET: str
    STAFF_JWT_ALG: str = "HS256"
    STAFF_TOKEN_MINUTES: int = 12 * 60

    # Cart snapshots
    CART_STORAGE_DIR: Path = Path(".cart-snapshots")
    CART_STORAGE_KEY: str = "klaseco-cart"
    # Cookie lifetime; on-disk sessions idle longer than this are pruned
    CART_SESSION_DAYS: int = 30

    # "Today" for sales stats is the café's local day (Philippines, UTC+8)
    CAFE_UTC_OFFSET_HOURS: float = 8.0

    # Live dashboards
    CASHIER_FAST_INTERVAL: float = 3.0
    CASHIER_SLOW_INTERVAL: float = 10.0
    BARISTA_FAST_INTERVAL: float = 5.0
    BARISTA_SLOW_INTERVAL: float = 10.0
    TRACKING_FAST_INTERVAL: float = 5.0
    TRACKING_SLOW_INTERVAL: float = 10.0

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8080",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
