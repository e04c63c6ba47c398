"""Shared test fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from src.config import Settings
from src.health.clients import Integrations


class FakeCache:
    def __init__(self, host: str, port: int, error: Exception | None = None) -> None:
        self.host = host
        self.port = port
        self.error = error

    def ping(self) -> bool:
        if self.error:
            raise self.error
        return True


class FakeDatabase:
    def __init__(self, active: bool = True, error: Exception | None = None) -> None:
        self.active = active
        self.error = error

    def is_active(self) -> bool:
        if self.error:
            raise self.error
        return self.active


class FakeBucket:
    def __init__(self, name: str, exists: bool = True) -> None:
        self.name = name
        self._exists = exists

    def exists(self) -> bool:
        return self._exists


class FakeStorage:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error

    def list_buckets(self) -> list[dict[str, Any]]:
        if self.error:
            raise self.error
        return [{"Name": "bucket1"}]


def make_integrations(
    cache_error: Exception | None = None,
    db_active: bool = True,
    db_error: Exception | None = None,
    bucket_exists: bool = True,
    storage_error: Exception | None = None,
    opened: list[Any] | None = None,
) -> Integrations:
    """Integrations backed by in-memory fakes; ``opened`` collects every client built."""
    opened = opened if opened is not None else []

    def cache(host: str, port: int) -> FakeCache:
        client = FakeCache(host, port, cache_error)
        opened.append(client)
        return client

    def bucket(name: str) -> FakeBucket:
        b = FakeBucket(name, bucket_exists)
        opened.append(b)
        return b

    return Integrations(
        cache=cache,
        database=FakeDatabase(active=db_active, error=db_error),
        bucket=bucket,
        storage=lambda: FakeStorage(storage_error),
    )


@pytest.fixture
def cfg() -> Settings:
    """Settings isolated from the caller's environment."""
    return Settings(
        redis_host="cache.internal",
        redis_port=6380,
        database_url="",
        object_storage_bucket="default-bucket",
        health_checks="",
    )


@pytest.fixture
def healthy() -> Integrations:
    return make_integrations()


@pytest.fixture
def make() -> Any:
    """Factory for fake-backed Integrations with chosen failures."""
    return make_integrations
