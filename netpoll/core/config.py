"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NETPOLL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Roster source and cache
    api_base_url: str = "http://localhost/network"
    roster_cache_path: str = "devices.json"

    # Collector endpoint
    collector_base_url: str = "http://localhost/network"
    http_timeout_s: float = 10.0

    # Probing
    concurrency_limit: int = 50
    probe_timeout_ms: int = 3000
    max_retries: int = 3
    snmp_retry_backoff_ms: int = 0
    snmp_port: int = 161
    ping_command: str = "ping"

    # Timers
    refresh_interval_ms: int = 10 * 60 * 1000
    sweep_interval_ms: int = 3000

    # Status API
    status_api_enabled: bool = True
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"


settings = Settings()
