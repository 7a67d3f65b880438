from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.core.constants import Environment, CacheProviderType


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Environment Profile
    environment: Environment = Environment.LOCAL

    # API Settings
    app_name: str = "subscription-engine"
    api_version: str = "v1"
    debug: bool = False
    cors_allowed_origins: List[str] = ["http://localhost:3000"]

    # Database Components
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "subscriptions"
    database_url_override: Optional[str] = None  # e.g. sqlite+aiosqlite:///./local.db
    database_readonly_url: Optional[str] = None  # read replica; defaults to the primary
    db_use_nullpool: bool = (
        False  # True for workers (sequential), False for API (concurrent)
    )
    db_pool_size: int = 10
    db_pool_overflow: int = 5
    db_create_all: bool = False  # Create tables on startup (local/dev only)

    @property
    def database_url(self) -> str:
        """Construct database URL from components."""
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0

    # Cache (redis | memory)
    cache_provider: CacheProviderType = CacheProviderType.REDIS
    cache_key_prefix: str = "subscription-engine:"
    memory_cache_max_entries: int = 10_000
    subscription_cache_ttl: int = 300

    # OpenTelemetry
    otel_service_name: str = "subscription-engine"
    otel_service_version: str = "0.1.0"

    # Axiom (exporters are only wired when a token is present)
    axiom_token: Optional[str] = None
    axiom_dataset: str = "subscription-engine"

    # Billing
    default_period_days: int = 30
    default_currency: str = "USD"
    billing_history_default_limit: int = 20
    billing_history_max_limit: int = 100

    # Usage ledger
    usage_baseline_year: int = 2024
    usage_history_default_limit: int = 12
    usage_history_max_limit: int = 100


settings = Settings()
