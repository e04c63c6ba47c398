"""Health check registry: runs dependency checks and reduces them to one verdict.

Each check writes exactly one entry into the result map: ``OK`` on success,
otherwise a human-readable failure description. Expected operational failures
are recorded; a missing integration propagates as
``IntegrationNotConfiguredError`` and leaves no entry behind.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from src.config import Settings, settings
from .clients import (
    CredentialsRejectedError,
    DependencyUnreachableError,
    Integrations,
    IntegrationNotConfiguredError,
)

logger = logging.getLogger(__name__)

OK = "OK"

CACHE = "cache"
DATABASE = "database"
OBJECT_STORAGE = "object_storage"
OBJECT_STORAGE_CREDENTIALS = "object_storage_credentials"
DEFAULT_CUSTOM_CHECK = "custom_check"

DB_INACTIVE = "Failed: unable to connect to database"
DB_ERROR = "Failed: error while connecting to database"
BUCKET_MISSING = "Failed: bucket does not exist"
CHECK_FAILED = "Failed"


def describe(exc: BaseException) -> str:
    """Descriptive text of an exception, falling back to its type name."""
    return str(exc) or type(exc).__name__


class HealthCheckRegistry:
    """Result accumulator for a single health evaluation.

    Create one per evaluation and discard it afterwards; entries from a
    previous cycle must never leak into the current verdict.
    """

    def __init__(
        self,
        integrations: Integrations | None = None,
        cfg: Settings | None = None,
    ) -> None:
        self._integrations = integrations or Integrations()
        self._settings = cfg or settings
        self._results: dict[str, str] = {}

    # ── Built-in checks ──────────────────────────────────────────────────────

    def cache_check(self, host: str | None = None, port: int | None = None) -> bool:
        """Ping the cache server."""
        connect = self._integrations.cache
        if connect is None:
            raise IntegrationNotConfiguredError(CACHE, "no cache client available")

        if host is None:
            host = self._settings.redis_host
        if port is None:
            port = self._settings.redis_port
        client = connect(host, port)
        try:
            client.ping()
        except DependencyUnreachableError as exc:
            return self._fail(CACHE, describe(exc))
        return self._pass(CACHE)

    def database_check(self) -> bool:
        """Ask the pooled database connection whether it is active."""
        database = self._integrations.database
        if database is None:
            raise IntegrationNotConfiguredError(DATABASE, "no database connection pool available")

        try:
            active = database.is_active()
        except Exception as exc:
            logger.warning("Database check raised %s: %s", type(exc).__name__, exc)
            return self._fail(DATABASE, DB_ERROR)
        if not active:
            return self._fail(DATABASE, DB_INACTIVE)
        return self._pass(DATABASE)

    def object_storage_check(self, bucket_name: str | None = None) -> bool:
        """Check that the object-storage bucket exists."""
        open_bucket = self._integrations.bucket
        if open_bucket is None:
            raise IntegrationNotConfiguredError(OBJECT_STORAGE, "no object storage client available")

        bucket_name = bucket_name or self._settings.object_storage_bucket
        if not bucket_name:
            raise ValueError("object_storage_check needs a bucket name (or OBJECT_STORAGE_BUCKET)")

        if not open_bucket(bucket_name).exists():
            return self._fail(OBJECT_STORAGE, BUCKET_MISSING)
        return self._pass(OBJECT_STORAGE)

    def object_storage_credentials_check(self) -> bool:
        """Make an authenticated call to the object-storage service."""
        open_service = self._integrations.storage
        if open_service is None:
            raise IntegrationNotConfiguredError(
                OBJECT_STORAGE_CREDENTIALS, "no object storage client available"
            )

        try:
            open_service().list_buckets()
        except CredentialsRejectedError as exc:
            return self._fail(OBJECT_STORAGE_CREDENTIALS, describe(exc))
        return self._pass(OBJECT_STORAGE_CREDENTIALS)

    # ── Custom checks ────────────────────────────────────────────────────────

    def custom_check(self, check: Callable[[], Any], name: str = DEFAULT_CUSTOM_CHECK) -> bool:
        """Run a caller-supplied check. Never raises, whatever the check does."""
        try:
            success = check()
        except Exception as exc:
            return self._fail(name, describe(exc))
        if success:
            return self._pass(name)
        return self._fail(name, CHECK_FAILED)

    # ── Queries ──────────────────────────────────────────────────────────────

    def ok(self) -> bool:
        return all(value == OK for value in self._results.values())

    def results(self) -> dict[str, str]:
        """Copy of the result map; mutating it does not touch the registry."""
        return dict(self._results)

    # ── Internals ────────────────────────────────────────────────────────────

    def _pass(self, name: str) -> bool:
        self._results[name] = OK
        logger.debug("Health check %s passed", name)
        return True

    def _fail(self, name: str, message: str) -> bool:
        self._results[name] = message
        logger.warning("Health check %s failed: %s", name, message)
        return False
