"""Table / JSON / YAML output dispatch."""

from __future__ import annotations

import json
from typing import Any

import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from chart_fetcher.core.errors import ChartFetchError
from chart_fetcher.models.request import FetchResult

console = Console()
err_console = Console(stderr=True)


def _result_to_dict(result: FetchResult) -> dict[str, Any]:
    data: dict[str, Any] = {
        "source": result.kind.value,
        "path": str(result.path),
        "cached": result.cached,
    }
    if result.package is not None:
        meta = result.package.metadata
        data["chart"] = {
            "reference": result.package.reference,
            "name": meta.name,
            "version": meta.version,
            "app_version": meta.app_version,
            "description": meta.description,
            "provenance": str(result.package.provenance_path) if result.package.provenance_path else None,
        }
    return data


def _result_panel(result: FetchResult) -> Panel:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="bold cyan")
    table.add_column("Value")
    table.add_row("Source", result.kind.value)
    table.add_row("Path", str(result.path))
    table.add_row("Cached", "[green]yes[/green]" if result.cached else "[yellow]downloaded[/yellow]")
    if result.package is not None:
        meta = result.package.metadata
        table.add_row("Reference", result.package.reference)
        table.add_row("Chart", f"{meta.name}-{meta.version}")
        if meta.app_version:
            table.add_row("App Version", meta.app_version)
        if result.package.provenance_path:
            table.add_row("Provenance", str(result.package.provenance_path))
    return Panel(table, title="[bold]Chart Archive[/bold]", border_style="green")


def output_result(result: FetchResult, fmt: str) -> None:
    if fmt == "json":
        console.print_json(json.dumps(_result_to_dict(result), indent=2))
    elif fmt == "yaml":
        console.print(yaml.dump(_result_to_dict(result), default_flow_style=False))
    else:
        console.print(_result_panel(result))


def output_error(err: ChartFetchError) -> None:
    stage = err.stage or "error"
    err_console.print(f"[red bold]{stage} failed[/red bold]: {err.message}")
    if err.reference:
        err_console.print(f"  reference: {err.reference}")
