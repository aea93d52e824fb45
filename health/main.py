"""
health.main
------------
AUTHOR: carter-vin

CLI entrypoint for the health service.

Key contract:
- `player-health --help` shows a Commands section.
- `player-health check` prints one report and exits 0 (healthy/warning) or 1 (error).
- `player-health probe URL` exits 0/2/3 for healthy/unhealthy/error.
- `player-health serve` runs the HTTP endpoint.
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
import platform
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import typer
from aiohttp import web

from health import SERVICE_VERSION
from health.aggregator import HealthAggregator
from health.config import ServiceDescriptor, load_settings, parse_service
from health.evaluate import STATUS_ERROR
from health.logging import emit_event
from health.model import SERVICE_HEALTHY, SERVICE_UNHEALTHY, report_to_json
from health.server import HEALTH_ROUTE, create_app_from_settings
from health.services import check_service_health

# Explicit multi-command CLI
app = typer.Typer(
    add_completion=False,
    help="player-health: host health checks for the player web service",
)

# -----------------------------
# DATA CLASSES
# -----------------------------
@dataclass(frozen=True)
class EnvironmentInfo:
    """
    Snapshot of the runtime environment
    """

    python_version: str
    os: str
    machine: str
    utc_now: str


def collect_environment_info() -> EnvironmentInfo:
    return EnvironmentInfo(
        python_version=sys.version.split()[0],
        os=f"{platform.system()} {platform.release()}",
        machine=platform.machine(),
        utc_now=datetime.now(timezone.utc).isoformat(),
    )


def _load_settings_or_exit():
    try:
        return load_settings()
    except ValueError as e:
        raise typer.BadParameter(str(e)) from None


# -----------------------------
# ROOT COMMAND BEHAVIOR
# -----------------------------
@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """
    Root command behavior.

    With no subcommand, print a short hint and exit 0.
    """
    if ctx.invoked_subcommand is None:
        typer.echo("No command provided. Try: player-health --help")


# -----------------------------
# CLI COMMANDS
# -----------------------------
@app.command()
def version() -> None:
    """
    Print service version & runtime env
    """
    env = collect_environment_info()

    typer.echo(f"player-health v{SERVICE_VERSION}")
    typer.echo(f"python={env.python_version}")
    typer.echo(f"os={env.os}")
    typer.echo(f"machine={env.machine}")
    typer.echo(f"utc_now={env.utc_now}")


@app.command("check")
def check(
    service: Optional[list[str]] = typer.Option(
        None,
        "--service",
        help="Dependent service to probe, as NAME=URL (repeatable).",
    ),
    disk_path: Optional[str] = typer.Option(
        None,
        "--disk-path",
        help="Path whose filesystem is checked for disk usage.",
    ),
) -> None:
    """
    Print a single health report and exit

    Exit code 1 when metric collection failed.
    """
    settings = _load_settings_or_exit()

    overrides: dict = {}
    if disk_path:
        overrides["disk_path"] = disk_path
    if service:
        try:
            overrides["services"] = tuple(parse_service(item) for item in service)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--service") from None
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    aggregator = HealthAggregator.from_settings(settings)
    report = asyncio.run(aggregator.check_system_health())

    typer.echo(report_to_json(report))

    if report.status == STATUS_ERROR:
        emit_event(
            "health_check_failed",
            service_version=SERVICE_VERSION,
            message=report.error,
        )
        raise typer.Exit(code=1)


@app.command("probe")
def probe(
    url: str = typer.Argument(..., help="URL to GET."),
    name: str = typer.Option("service", "--name", help="Name used in events."),
    timeout: float = typer.Option(
        5.0,
        "--timeout",
        help="Request timeout in seconds.",
        min=0.001,
    ),
) -> None:
    """
    Probe one HTTP service

    Exit codes: 0 healthy, 2 unhealthy, 3 error.
    """
    result = asyncio.run(
        check_service_health(ServiceDescriptor(name=name, url=url), timeout_s=timeout)
    )

    typer.echo(json.dumps(result.to_dict(), sort_keys=True, separators=(",", ":")))

    if result.status == SERVICE_HEALTHY:
        raise typer.Exit(code=0)
    if result.status == SERVICE_UNHEALTHY:
        raise typer.Exit(code=2)
    raise typer.Exit(code=3)


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address."),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port.", min=1, max=65535),
) -> None:
    """
    Run the HTTP health endpoint.
    """
    settings = _load_settings_or_exit()
    if host:
        settings = dataclasses.replace(settings, host=host)
    if port:
        settings = dataclasses.replace(settings, port=port)

    emit_event(
        "server_start",
        service_version=SERVICE_VERSION,
        host=settings.host,
        port=settings.port,
        route=HEALTH_ROUTE,
        services=[svc.name for svc in settings.services],
    )

    try:
        web.run_app(
            create_app_from_settings(settings),
            host=settings.host,
            port=settings.port,
            print=None,
        )
    finally:
        emit_event(
            "server_shutdown",
            service_version=SERVICE_VERSION,
        )


if __name__ == "__main__":
    app()
