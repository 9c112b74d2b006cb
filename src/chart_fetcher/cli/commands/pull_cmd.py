"""cfetch pull <repo>/<chart> - Download a chart from a chart repository."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from chart_fetcher.cli.common import run_and_print
from chart_fetcher.cli.options import CacheDirOption, ContextOption, OutputOption

app = typer.Typer()


@app.callback(invoke_without_command=True)
def pull(
    chart: str = typer.Argument(help="Chart reference as <repository>/<chart>"),
    version: str = typer.Option("", "--version", help="Chart version (default: latest)"),
    output: str = OutputOption,
    context: Optional[str] = ContextOption,
    cache_dir: Optional[Path] = CacheDirOption,
) -> None:
    """Resolve a repository chart and cache its archive locally."""
    run_and_print(lambda r: r.resolve(chart, version), output, context, cache_dir)
