from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings

BUILTIN_CHECKS = ("cache", "database", "object_storage", "object_storage_credentials")


class Settings(BaseSettings):
    """Central configuration loaded from the process environment."""

    model_config = {"extra": "ignore"}

    # Cache (REDIS_HOST / REDIS_PORT)
    redis_host: str = "localhost"
    redis_port: int = 6379

    # Relational database, SQLAlchemy URL (empty = not configured)
    database_url: str = ""

    # Object storage
    object_storage_bucket: str = ""
    aws_region: str = ""

    # Client-layer timeout for every dependency call (seconds)
    check_timeout: float = 5.0

    # Comma-separated built-in checks to run; empty = every configured one
    health_checks: str = ""

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"

    @field_validator("health_checks")
    @classmethod
    def known_checks_only(cls, v: str) -> str:
        unknown = [c for c in _split(v) if c not in BUILTIN_CHECKS]
        if unknown:
            raise ValueError(
                f"Unknown health checks: {', '.join(unknown)} "
                f"(expected any of {', '.join(BUILTIN_CHECKS)})"
            )
        return v

    @property
    def enabled_checks(self) -> list[str]:
        return _split(self.health_checks)


def _split(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


settings = Settings()
