from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    service_name: str = Field(default="porttrack-api", alias="SERVICE_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    author_name: str = Field(default="PortTrack Operations", alias="AUTHOR_NAME")
    author_email: str = Field(default="ops@porttrack.local", alias="AUTHOR_EMAIL")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8082, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    fluentd_enabled: bool = Field(default=False, alias="FLUENTD_ENABLED")
    fluentd_host: str = Field(default="localhost", alias="FLUENTD_HOST")
    fluentd_port: int = Field(default=24224, alias="FLUENTD_PORT")
    fluentd_timeout_seconds: float = Field(default=3.0, alias="FLUENTD_TIMEOUT_SECONDS")
    telemetry_queue_size: int = Field(default=10_000, alias="TELEMETRY_QUEUE_SIZE")
    telemetry_flush_timeout_seconds: float = Field(default=5.0, alias="TELEMETRY_FLUSH_TIMEOUT_SECONDS")

    berth_failure_rate: float = Field(default=0.10, ge=0.0, le=1.0, alias="BERTH_FAILURE_RATE")
    auth_failure_rate: float = Field(default=0.15, ge=0.0, le=1.0, alias="AUTH_FAILURE_RATE")
    failure_seed: int | None = Field(default=None, alias="FAILURE_SEED")

    total_berths: int = Field(default=24, alias="TOTAL_BERTHS")
    recent_operations_limit: int = Field(default=50, ge=1, alias="RECENT_OPERATIONS_LIMIT")

    jwt_secret: str = Field(default="change-me-to-a-secret-of-32-bytes-or-more", alias="JWT_SECRET")
    jwt_exp_minutes: int = Field(default=60, alias="JWT_EXP_MINUTES")

    @property
    def fluentd_address(self) -> str:
        return f"{self.fluentd_host}:{self.fluentd_port}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
