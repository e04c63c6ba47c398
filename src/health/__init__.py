"""Health subsystem: dependency clients, result registry, health evaluation."""

from .clients import (
    CredentialsRejectedError,
    DependencyUnreachableError,
    HealthCheckError,
    Integrations,
    IntegrationNotConfiguredError,
)
from .runner import run_checks
from .registry import OK, HealthCheckRegistry
