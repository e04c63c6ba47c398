"""Dependency clients consumed by the health check registry.

One small capability interface per dependency kind, the error kinds the
registry understands, and adapters over redis-py, SQLAlchemy and boto3.
Client libraries are imported inside the adapters so a process that does not
ship one of them can still run the other checks.
"""

from __future__ import annotations

import importlib.util
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from src.config import Settings

logger = logging.getLogger(__name__)


# ── Errors ───────────────────────────────────────────────────────────────────


class HealthCheckError(Exception):
    """Base class for errors raised by health check clients."""


class IntegrationNotConfiguredError(HealthCheckError):
    """Raised when a check runs but its integration is not wired into this process."""

    def __init__(self, check: str, reason: str = "") -> None:
        self.check = check
        self.reason = reason
        msg = f"Integration for '{check}' is not configured"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class DependencyUnreachableError(HealthCheckError):
    """Raised when a dependency cannot be connected to."""


class CredentialsRejectedError(HealthCheckError):
    """Raised when storage credentials are missing, invalid or mis-signed."""


# ── Capability interfaces ────────────────────────────────────────────────────


class CacheClient(Protocol):
    def ping(self) -> Any: ...


class Database(Protocol):
    def is_active(self) -> bool: ...


class Bucket(Protocol):
    def exists(self) -> bool: ...


class StorageService(Protocol):
    def list_buckets(self) -> Any: ...


# ── Adapters ─────────────────────────────────────────────────────────────────


class RedisCache:
    """redis-py client bound to one host/port."""

    def __init__(self, host: str, port: int, timeout: float = 5.0) -> None:
        from redis import Redis
        from redis.exceptions import ConnectionError, TimeoutError

        self._client = Redis(
            host=host,
            port=port,
            socket_connect_timeout=timeout,
            socket_timeout=timeout,
        )
        self._errors = (ConnectionError, TimeoutError)

    def ping(self) -> Any:
        try:
            return self._client.ping()
        except self._errors as exc:
            raise DependencyUnreachableError(str(exc)) from exc


class SqlAlchemyDatabase:
    """Pooled SQLAlchemy engine; each check borrows one connection.

    A connection that cannot be opened, or is invalidated mid-query, means the
    database is inactive. Any other error propagates.
    """

    ping_query = "SELECT 1"

    def __init__(self, url: str) -> None:
        from sqlalchemy import create_engine

        self._engine = create_engine(url, pool_pre_ping=True)

    def is_active(self) -> bool:
        from sqlalchemy import text
        from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError

        try:
            conn = self._engine.connect()
        except (OperationalError, InterfaceError) as exc:
            logger.info("Database connection unavailable: %s", exc)
            return False

        with conn:
            try:
                conn.execute(text(self.ping_query))
            except DBAPIError as exc:
                if exc.connection_invalidated:
                    logger.info("Database connection invalidated: %s", exc)
                    return False
                raise
            return not conn.invalidated

    def dispose(self) -> None:
        self._engine.dispose()


def _s3_client(region: str, timeout: float) -> Any:
    import boto3
    from botocore.config import Config

    config = Config(connect_timeout=timeout, read_timeout=timeout, retries={"max_attempts": 1})
    return boto3.client("s3", region_name=region or None, config=config)


def _error_code(exc: Any) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3Bucket:
    """Existence check for a single S3 bucket."""

    MISSING_CODES = frozenset({"404", "NoSuchBucket", "NotFound"})

    def __init__(self, name: str, region: str = "", timeout: float = 5.0) -> None:
        self.name = name
        self._client = _s3_client(region, timeout)

    def exists(self) -> bool:
        from botocore.exceptions import ClientError

        try:
            self._client.head_bucket(Bucket=self.name)
        except ClientError as exc:
            if _error_code(exc) in self.MISSING_CODES:
                return False
            raise
        return True


class S3Service:
    """Authenticated S3 service client used to validate credentials."""

    AUTH_ERROR_CODES = frozenset({"InvalidAccessKeyId", "SignatureDoesNotMatch"})

    def __init__(self, region: str = "", timeout: float = 5.0) -> None:
        self._client = _s3_client(region, timeout)

    def list_buckets(self) -> list[dict[str, Any]]:
        from botocore.exceptions import ClientError, NoCredentialsError, PartialCredentialsError

        try:
            return self._client.list_buckets().get("Buckets", [])
        except (NoCredentialsError, PartialCredentialsError) as exc:
            raise CredentialsRejectedError(str(exc)) from exc
        except ClientError as exc:
            if _error_code(exc) in self.AUTH_ERROR_CODES:
                raise CredentialsRejectedError(str(exc)) from exc
            raise


# ── Wiring ───────────────────────────────────────────────────────────────────


def library_installed(module: str) -> bool:
    return importlib.util.find_spec(module) is not None


@dataclass
class Integrations:
    """Dependency clients available to this process. ``None`` means not configured."""

    cache: Callable[[str, int], CacheClient] | None = None
    database: Database | None = None
    bucket: Callable[[str], Bucket] | None = None
    storage: Callable[[], StorageService] | None = None

    def available(self) -> list[str]:
        """Built-in check names whose integration is configured."""
        names = []
        if self.cache is not None:
            names.append("cache")
        if self.database is not None:
            names.append("database")
        if self.bucket is not None:
            names.append("object_storage")
        if self.storage is not None:
            names.append("object_storage_credentials")
        return names

    @classmethod
    def from_settings(cls, cfg: Settings) -> Integrations:
        """Wire the real adapters for every client library present in this process."""
        timeout = cfg.check_timeout
        integrations = cls()

        if library_installed("redis"):
            integrations.cache = lambda host, port: RedisCache(host, port, timeout=timeout)
        else:
            logger.info("redis not installed, cache check disabled")

        if not cfg.database_url:
            logger.info("DATABASE_URL not set, database check disabled")
        elif not library_installed("sqlalchemy"):
            logger.info("sqlalchemy not installed, database check disabled")
        else:
            integrations.database = SqlAlchemyDatabase(cfg.database_url)

        if library_installed("boto3"):
            region = cfg.aws_region
            integrations.bucket = lambda name: S3Bucket(name, region=region, timeout=timeout)
            integrations.storage = lambda: S3Service(region=region, timeout=timeout)
        else:
            logger.info("boto3 not installed, object storage checks disabled")

        logger.info("Health integrations configured: %s", ", ".join(integrations.available()) or "none")
        return integrations
