"""cfetch http <name> <url> - Download a chart archive from a URL."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from chart_fetcher.cli.common import run_and_print
from chart_fetcher.cli.options import (
    CacheDirOption,
    ContextOption,
    NamespaceOption,
    OutputOption,
    SecretOption,
)
from chart_fetcher.models.request import ChartRequest, HTTPSource

app = typer.Typer()


@app.callback(invoke_without_command=True)
def http(
    name: str = typer.Argument(help="Request name, used to name the cached file"),
    url: str = typer.Argument(help="http(s) URL of the chart archive"),
    namespace: str = NamespaceOption,
    secret: str = SecretOption,
    output: str = OutputOption,
    context: Optional[str] = ContextOption,
    cache_dir: Optional[Path] = CacheDirOption,
) -> None:
    """Download a chart archive from a plain HTTP(S) URL."""
    request = ChartRequest(name=name, namespace=namespace, http=HTTPSource(url=url, secret_ref=secret))
    run_and_print(lambda r: r.resolve(request), output, context, cache_dir)
