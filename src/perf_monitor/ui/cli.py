"""Command line client for the performance monitor."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import typer
from rich.console import Console
from rich.table import Table

from perf_monitor.collector import MetricsError, PerformanceMonitor
from perf_monitor.config import get_settings
from perf_monitor.service import ROUTE_PREFIX

console = Console()
app = typer.Typer(help="Host, container and process metrics")

URL_HELP = "Base URL of a running service. Defaults to PERF_MONITOR_SERVICE_URL."


def _base_url(url: str | None) -> str:
    return (url or get_settings().service_url).rstrip("/")


def _request_error_message(error: Exception, base_url: str) -> str:
    """Convert client errors to user-friendly CLI output."""
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        details = error.response.text[:300]
        return f"Service request failed ({status}): {details}"
    if isinstance(error, httpx.RequestError):
        return (
            f"Cannot reach performance monitor at {base_url}. "
            "Set PERF_MONITOR_SERVICE_URL and ensure the service is running."
        )
    return str(error)


def _format_bytes(value: float) -> str:
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if abs(value) < 1024 or unit == "TB":
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"


def _render_snapshot(data: dict[str, Any]) -> None:
    """Print a wire-format snapshot as a Rich table."""
    if "error" in data:
        console.print(f"[red]{data['error']}[/red]")
        return

    system = data["system"]
    process = data["process"]
    cpu = system["cpu"]
    memory = system["memory"]
    disk = system["disk"]

    table = Table(title="Performance Monitor", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Platform", f"{system['platform']} ({system['architecture']})")
    table.add_row("Containerized", "yes" if data["isContainerized"] else "no")
    table.add_row("CPU", f"{cpu['percent']:.1f}%")
    table.add_row("Cores", f"{cpu['effectiveCores']} of {cpu['cores']}")
    table.add_row("CPU model", f"{cpu['model']} @ {cpu['speedMHz']} MHz")
    table.add_row(
        "Memory",
        f"{_format_bytes(memory['used'])} / {_format_bytes(memory['total'])}"
        f" ({memory['usedPercent']}%)",
    )
    table.add_row(
        f"Disk {disk['mount']}",
        f"{_format_bytes(disk['used'])} / {_format_bytes(disk['total'])}"
        f" ({disk['usedPercent']}%)",
    )
    table.add_row("Process CPU", f"{process['cpuPercent']:.1f}%")
    table.add_row("Process RSS", _format_bytes(process["memory"]["rss"]))
    table.add_row("Event loop lag", f"{process['eventLoopLagMs']:.2f} ms")
    console.print(table)


async def _collect_once(interval: float) -> dict[str, Any]:
    """Prime the CPU baselines, wait ``interval`` seconds, then collect."""
    monitor = PerformanceMonitor()
    monitor.cpu.system_percent()
    monitor.cpu.reset()
    await monitor.start()
    try:
        await asyncio.sleep(interval)
        result = await monitor.collect()
    finally:
        await monitor.stop()
    return result.to_wire()


@app.command()
def snapshot(
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON instead of a table."),
    interval: float = typer.Option(
        1.0, "--interval", min=0.0, help="Seconds to measure CPU usage over."
    ),
) -> None:
    """Collect metrics for this host once, without a running service."""
    data = asyncio.run(_collect_once(interval))
    if as_json:
        console.print_json(json.dumps(data))
    else:
        _render_snapshot(data)
    if "error" in data:
        raise typer.Exit(1)


@app.command()
def stats(
    url: str | None = typer.Option(None, "--url", help=URL_HELP),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON instead of a table."),
) -> None:
    """Fetch the current snapshot from a running service."""
    base_url = _base_url(url)
    try:
        with httpx.Client(timeout=10.0) as client:
            response = client.get(f"{base_url}{ROUTE_PREFIX}/stats")
            response.raise_for_status()
            data: dict[str, Any] = response.json()
    except Exception as error:  # noqa: BLE001
        console.print(f"[red]{_request_error_message(error, base_url)}[/red]")
        raise typer.Exit(1) from error

    if as_json:
        console.print_json(json.dumps(data))
    else:
        _render_snapshot(data)


@app.command()
def settings(
    refresh_interval: int | None = typer.Option(
        None, "--refresh-interval", help="Refresh interval in milliseconds."
    ),
    hide_hud: bool | None = typer.Option(
        None, "--hide-hud/--show-hud", help="Hide or show the dashboard HUD."
    ),
    theme: str | None = typer.Option(None, "--theme", help="HUD theme name."),
    url: str | None = typer.Option(None, "--url", help=URL_HELP),
) -> None:
    """Show the service settings, or update them when options are given."""
    base_url = _base_url(url)
    update: dict[str, Any] = {}
    if refresh_interval is not None:
        update["refreshIntervalMs"] = refresh_interval
    if hide_hud is not None:
        update["hideHud"] = hide_hud
    if theme is not None:
        update["hudTheme"] = theme

    endpoint = f"{base_url}{ROUTE_PREFIX}/settings"
    try:
        with httpx.Client(timeout=10.0) as client:
            if update:
                response = client.post(endpoint, json=update)
            else:
                response = client.get(endpoint)
            response.raise_for_status()
            data: dict[str, Any] = response.json()
    except Exception as error:  # noqa: BLE001
        console.print(f"[red]{_request_error_message(error, base_url)}[/red]")
        raise typer.Exit(1) from error

    console.print_json(json.dumps(data))


@app.command()
def container() -> None:
    """Print what container detection finds on this host."""
    monitor = PerformanceMonitor()
    info = monitor.detector.detect()

    table = Table(title="Container", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Containerized", "yes" if info.is_containerized else "no")
    table.add_row("cgroup version", info.cgroup_version.value)
    table.add_row(
        "Memory limit",
        _format_bytes(info.memory_limit_bytes) if info.memory_limit_bytes else "none",
    )
    table.add_row(
        "CPU limit",
        f"{info.cpu_limit_cores:g} cores" if info.cpu_limit_cores else "none",
    )
    console.print(table)


if __name__ == "__main__":
    app()
