"""
Client configuration using Pydantic Settings
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="MOBILE_ORDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Backend API
    api_base_url: str = "http://localhost:8000"
    default_locale: str = "th"
    http_timeout_seconds: float = 15.0

    # Remote config
    remote_config_url: str = "http://localhost:8000/api/remote-config"
    remote_config_min_fetch_interval_seconds: float = 30 * 60

    # Orders
    order_poll_interval_seconds: float = 60.0
    order_history_limit: int = 10
    default_pickup_eta_minutes: int = 15
    customer_email_domain: str = "customer.timing.com"

    # Cart
    cart_merge_price_policy: str = "incoming"

    # Local storage
    storage_url: str = "sqlite:///mobile_order.db"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
