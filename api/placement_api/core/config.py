from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "placement-api"
    app_version: str = "1.0.0"
    environment: str = "dev"
    log_level: str = "INFO"
    database_url: str | None = None
    database_pool_min_size: int = 1
    database_pool_max_size: int = 10
    database_command_timeout: float = 30.0
    slow_request_threshold_ms: float = 1000.0
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:3001"]
    jwt_secret_key: str = "change-me-access-secret"
    jwt_refresh_secret_key: str = "change-me-refresh-secret"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    otel_enabled: bool = True
    otel_service_name: str = "placement-api"
    otel_exporter_otlp_endpoint: str | None = None
    otel_trace_sample_ratio: float = 1.0
    otel_log_correlation: bool = True

    model_config = SettingsConfigDict(env_prefix="PLACEMENT_", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
