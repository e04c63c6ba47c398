"""One health evaluation: fresh registry, configured checks, settled verdict."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from src.config import Settings, settings
from .clients import Integrations
from .registry import OK, HealthCheckRegistry

logger = logging.getLogger(__name__)

CustomChecks = Mapping[str, Callable[[], Any]]


def run_checks(
    integrations: Integrations,
    cfg: Settings | None = None,
    custom_checks: CustomChecks | None = None,
) -> HealthCheckRegistry:
    """Run one evaluation sequentially and return the settled registry.

    Built-in checks come from ``cfg.health_checks`` when set, otherwise from
    every integration that is configured. Custom checks run after them, in
    mapping order. ``IntegrationNotConfiguredError`` propagates.
    """
    cfg = cfg or settings
    registry = HealthCheckRegistry(integrations, cfg)

    runners = {
        "cache": registry.cache_check,
        "database": registry.database_check,
        "object_storage": registry.object_storage_check,
        "object_storage_credentials": registry.object_storage_credentials_check,
    }
    for name in cfg.enabled_checks or _default_checks(integrations, cfg):
        runners[name]()

    for name, check in (custom_checks or {}).items():
        registry.custom_check(check, name=name)

    results = registry.results()
    logger.info(
        "Health evaluation: %s (%d checks, %d failing)",
        "ok" if registry.ok() else "failing",
        len(results),
        sum(1 for value in results.values() if value != OK),
    )
    return registry


def _default_checks(integrations: Integrations, cfg: Settings) -> list[str]:
    # the bucket check needs a bucket name
    return [
        name for name in integrations.available()
        if name != "object_storage" or cfg.object_storage_bucket
    ]
