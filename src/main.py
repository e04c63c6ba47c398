"""Entry point for the server health check."""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.config import settings
from src.health.clients import Integrations, IntegrationNotConfiguredError
from src.health.runner import run_checks
from src.health.registry import OK

console = Console()
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)


def run_server() -> None:
    """Start the FastAPI server."""
    console.print(Panel("Starting health check API server", style="bold green"))
    uvicorn.run(
        "src.api.server:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
    )


def run_once() -> int:
    """Run every configured check once and print the results. Returns the exit code."""
    integrations = Integrations.from_settings(settings)
    try:
        registry = run_checks(integrations, settings)
    except IntegrationNotConfiguredError as e:
        console.print(f"[bold red]Not configured:[/bold red] {e}")
        return 2

    table = Table(title="Health checks")
    table.add_column("Check")
    table.add_column("Result")
    for name, outcome in registry.results().items():
        style = "green" if outcome == OK else "red"
        table.add_row(name, f"[{style}]{outcome}[/{style}]")
    console.print(table)

    if registry.ok():
        console.print("[bold green]healthy[/bold green]")
        return 0
    console.print("[bold red]unhealthy[/bold red]")
    return 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Server health check")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="Start the API server")
    sub.add_parser("check", help="Run the configured checks once")

    args = parser.parse_args()

    if args.command == "serve":
        run_server()
    elif args.command == "check":
        sys.exit(run_once())
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
