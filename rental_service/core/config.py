"""
Rental Service — Configuration
All settings are read from environment variables (or .env file).
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    SERVICE_NAME: str = "rental-service"
    SERVICE_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # ── PostgreSQL ────────────────────────────────────────────
    POSTGRES_HOST: str = "rental-db"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "rental_db"
    POSTGRES_USER: str = "rental_user"
    POSTGRES_PASSWORD: str = "rental_pass"
    DATABASE_URL: str = ""  # full override, e.g. sqlite+aiosqlite:// for local runs

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    # ── Redis ─────────────────────────────────────────────────
    REDIS_HOST: str = "redis"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""

    @property
    def redis_url(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # ── Inventory Ledger ──────────────────────────────────────
    MAX_RANGE_DAYS: int = 366
    RESERVATION_TIMEOUT_SECONDS: float = 10.0

    # ── Conflict Retry ────────────────────────────────────────
    CONFLICT_RETRY_MAX_ATTEMPTS: int = 2   # first try + one automatic retry
    CONFLICT_RETRY_BASE_DELAY_MS: int = 50
    CONFLICT_RETRY_MAX_DELAY_MS: int = 1000
    CONFLICT_RETRY_JITTER_MS: int = 50

    # ── Pricing ───────────────────────────────────────────────
    PRICING_CATEGORY_THRESHOLD: int = 50
    PRICING_BASE_AMOUNT: str = "15.00"
    PRICING_OVERAGE_AMOUNT: str = "30.00"

    # ── Idempotency ───────────────────────────────────────────
    IDEMPOTENCY_ENABLED: bool = True
    IDEMPOTENCY_KEY_TTL_SECONDS: int = 86400

    # ── Notifications ─────────────────────────────────────────
    NOTIFICATION_HUB_URL: str = ""  # empty disables outbound notifications
    HTTP_TIMEOUT_SECONDS: float = 3.0

    # ── Admin ─────────────────────────────────────────────────
    ADMIN_SESSION_TOKEN: str = "CHANGE_ME_IN_PRODUCTION"

    # ── Catalog / Impact ──────────────────────────────────────
    SEED_CATALOG: bool = False
    IMPACT_DAYS_PER_YEAR: int = 365

    # ── Observability ─────────────────────────────────────────
    METRICS_ENABLED: bool = True
    HEALTH_CHECK_TIMEOUT: float = 5.0


@lru_cache()
def get_settings() -> Settings:
    return Settings()
