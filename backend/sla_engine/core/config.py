"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    APP_NAME: str = "SLA Configuration Engine"
    ENV: str = "development"

    DATABASE_URL: str = "postgresql+psycopg://postgres@localhost:5432/sla_configurations"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: str = "http://localhost:3000"
    ALLOWED_HOSTS: str = "localhost,127.0.0.1,testserver"

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_MAX_REQUESTS: int = 120
    RATE_LIMIT_BULK_MAX_REQUESTS: int = 20

    # batch sizes accepted by the bulk, copy and import endpoints
    SLA_BULK_MAX_ITEMS: int = 500
    SLA_CSV_MAX_ROWS: int = 2000

    # thresholds outside these bounds produce validation warnings, not errors
    SLA_MIN_TYPICAL_RESPONSE_HOURS: float = 1.0
    SLA_MIN_TYPICAL_RESOLUTION_HOURS: float = 2.0
    SLA_MAX_TYPICAL_RESPONSE_HOURS: float = 168.0
    SLA_MAX_TYPICAL_RESOLUTION_HOURS: float = 720.0

    model_config = SettingsConfigDict(env_file=str(BASE_DIR / ".env"), env_file_encoding="utf-8")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def allowed_hosts(self) -> list[str]:
        hosts = [host.strip() for host in self.ALLOWED_HOSTS.split(",") if host.strip()]
        return hosts or ["*"]

    @property
    def is_production(self) -> bool:
        return self.ENV.strip().lower() in {"prod", "production"}

    def validate_runtime_settings(self) -> None:
        if self.SLA_BULK_MAX_ITEMS <= 0:
            raise ValueError("SLA_BULK_MAX_ITEMS must be positive")
        if self.SLA_CSV_MAX_ROWS <= 0:
            raise ValueError("SLA_CSV_MAX_ROWS must be positive")
        if self.SLA_MIN_TYPICAL_RESPONSE_HOURS > self.SLA_MAX_TYPICAL_RESPONSE_HOURS:
            raise ValueError("SLA typical response bounds are inverted")
        if self.SLA_MIN_TYPICAL_RESOLUTION_HOURS > self.SLA_MAX_TYPICAL_RESOLUTION_HOURS:
            raise ValueError("SLA typical resolution bounds are inverted")
        if self.is_production and "*" in self.allowed_hosts:
            raise ValueError("ALLOWED_HOSTS must be explicit in production")


settings = Settings()
