import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # ClickHouse analytics endpoint
    clickhouse_api_url: str | None = os.getenv("CLICKHOUSE_API_URL")
    clickhouse_auth_basic: str | None = os.getenv("CLICKHOUSE_AUTH_BASIC")
    clickhouse_cf_client_id: str | None = os.getenv("CLICKHOUSE_CF_CLIENT_ID")
    clickhouse_cf_client_secret: str | None = os.getenv("CLICKHOUSE_CF_CLIENT_SECRET")
    # Native ClickHouse account, used when the access gateway blocks a request
    clickhouse_account_name: str | None = os.getenv("CLICKHOUSE_ACCOUNT_NAME")
    clickhouse_account_password: str | None = os.getenv("CLICKHOUSE_ACCOUNT_PASSWORD")

    # Analytics cache
    analytics_cache_ttl: int = int(os.getenv("ANALYTICS_CACHE_TTL", "86400"))  # 24 hours
    analytics_max_attempts: int = int(os.getenv("ANALYTICS_MAX_ATTEMPTS", "3"))
    http_timeout: float = float(os.getenv("HTTP_TIMEOUT", "30"))

    # Google Sheets client catalog
    google_sheet_id: str | None = os.getenv("GOOGLE_SHEET_ID")
    google_sheets_api_key: str | None = os.getenv("GOOGLE_SHEETS_API_KEY")

    # OpenAI-compatible report generation
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_api_url: str = os.getenv("OPEN_API_URL", "https://api.openai.com/v1")
    ai_model: str = os.getenv("AI_MODEL", "gpt-4o")

    # Redis (search history, notes, report history)
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    search_history_limit: int = int(os.getenv("SEARCH_HISTORY_LIMIT", "5"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def has_fallback_credentials(self) -> bool:
        """Check if the native ClickHouse account is configured.

        Returns:
            True if both account name and password are set
        """
        return bool(self.clickhouse_account_name and self.clickhouse_account_password)

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.analytics_cache_ttl <= 0:
            raise ValueError("ANALYTICS_CACHE_TTL must be a positive number of seconds")

        if self.analytics_max_attempts < 1:
            raise ValueError(
                f"ANALYTICS_MAX_ATTEMPTS must be at least 1, got {self.analytics_max_attempts}"
            )

        if self.search_history_limit < 1:
            raise ValueError("SEARCH_HISTORY_LIMIT must be at least 1")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once for the service."""
    numeric_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            level=numeric_level,
        )
    root_logger.setLevel(numeric_level)


def get_redis_client() -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )
