"""PowerWatch configuration — Pydantic BaseSettings loaded from .env."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-level settings. Alert thresholds live in the database."""

    app_name: str = "PowerWatch"
    debug: bool = True
    log_level: str = "INFO"

    # Network
    host: str = "127.0.0.1"
    port: int = 5000
    api_prefix: str = "/api"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Admin routes expect a bearer JWT signed with this secret
    secret_key: str = "change-me-in-prod"
    token_algorithm: str = "HS256"

    # Storage paths (relative resolved from backend/ at runtime)
    data_dir: str = "./data"
    log_dir: str = "./data/logs"
    database_path: str = "./data/powerwatch.db"
    max_db_connections: int = 5

    # External API sync
    sync_enabled: bool = True
    sync_api_url: str = "http://localhost:8080/post_device_readings.php"
    sync_poll_interval_seconds: float = 30.0
    sync_timeout_seconds: float = 10.0
    sync_max_consecutive_errors: int = 10

    # Alert generator
    alert_generator_enabled: bool = True
    alert_generator_start_delay_seconds: float = 2.0

    # Maintenance
    alert_retention_days: int = 30

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        env_prefix="POWERWATCH_",
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: list[str] | str) -> list[str]:
        if isinstance(value, str) and not value.startswith("["):
            return [o.strip() for o in value.split(",") if o.strip()]
        if isinstance(value, list):
            return value
        return ["http://localhost:5173"]

    @field_validator("sync_max_consecutive_errors")
    @classmethod
    def _positive_ceiling(cls, value: int) -> int:
        if value < 1:
            raise ValueError("sync_max_consecutive_errors must be at least 1")
        return value

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Ensure data directories are absolute."""
        base = Path(__file__).resolve().parent.parent  # backend/
        for field in ("data_dir", "log_dir", "database_path"):
            val = getattr(self, field)
            if not Path(val).is_absolute():
                setattr(self, field, str(base / val))
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
