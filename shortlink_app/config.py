from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Application
    app_name: str = "Shortlink Analytics"
    app_version: str = "1.0.0"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Database (async driver URL)
    database_url: str = "sqlite+aiosqlite:///./shortlink.db"

    # URL Shortener specific
    base_url: str = "http://127.0.0.1:8000"
    max_retries: int = 5  # Retries for generated codes on collision

    # Short code generation strategy
    short_code_strategy: str = "hex"  # Options: "hex", "alphanumeric"
    short_code_bytes: int = 3  # hex: 3 bytes -> 6 characters
    short_code_length: int = 6  # alphanumeric only

    # Cache settings
    cache_backend: str = "redis"  # Options: "redis", "memory", "null"
    redis_url: str = "redis://localhost:6379/0"

    # Geolocation provider
    geolocation_api_url: str = "http://ip-api.com/json"
    geolocation_timeout: float = 3.0  # seconds
    geolocation_cache_ttl: int = 24 * 60 * 60  # 24 hours

    # Analytics windows
    analytics_visit_window: int = 20  # visits geolocated per request
    analytics_recent_visits: int = 5  # visits returned as "recent"
    analytics_days: int = 7  # trailing days in the time series

    # Request throttling, per client IP and route
    rate_limit_enabled: bool = True
    throttle_global_ttl: int = 60  # seconds
    throttle_global_limit: int = 20
    throttle_health_ttl: int = 60  # seconds
    throttle_health_limit: int = 5

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
