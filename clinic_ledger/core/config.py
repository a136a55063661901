from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_log_level(value: str) -> str:
    raw = str(value or "").strip().upper()
    if raw in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
        return raw
    if raw == "WARN":
        return "WARNING"
    return "INFO"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = "Clinic Ledger"
    environment: str = "development"

    # Database
    database_url: str
    db_pool_size: int = 5
    db_max_overflow: int = 5
    db_pool_timeout: int = 15
    db_pool_recycle: int = 1200
    db_pool_pre_ping: bool = True
    # Applied per connection on PostgreSQL; 0 disables it.
    db_statement_timeout_ms: int = 15000
    auto_create_tables: bool = False

    # Logging
    log_level: str = "INFO"

    # Ledger
    currency: str = "DZD"
    default_refund_reason: str = "Appointment cancelled"

    # Optional label attached to log lines of this process.
    instance_name: Optional[str] = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
