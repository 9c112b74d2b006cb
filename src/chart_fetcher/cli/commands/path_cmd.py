"""cfetch path - Print where an archive would be cached, without fetching."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from chart_fetcher.cli.common import cli_settings
from chart_fetcher.cli.options import CacheDirOption
from chart_fetcher.core.cache_path import CacheIdentity, CachePathPolicy, file_name_from_url
from chart_fetcher.core.errors import ChartFetchError
from chart_fetcher.models.request import ChartReference
from chart_fetcher.output.formatters import output_error

app = typer.Typer()


@app.callback(invoke_without_command=True)
def path(
    chart: str = typer.Option("", "--chart", help="Chart reference as <repository>/<chart>"),
    version: str = typer.Option("", "--version", help="Chart version"),
    digest: str = typer.Option("", "--digest", help="Content digest from the repository index"),
    url: str = typer.Option("", "--url", help="Download URL or chart path"),
    name: str = typer.Option("", "--name", help="Request name"),
    cache_dir: Optional[Path] = CacheDirOption,
) -> None:
    """Show the deterministic cache path for a chart and whether it is cached."""
    try:
        repository, chart_name = "", ""
        if chart:
            ref = ChartReference.parse(chart, version)
            repository, chart_name = ref.repository, ref.chart
        identity = CacheIdentity(
            repository=repository,
            chart=chart_name,
            version=version,
            digest=digest,
            file_name=file_name_from_url(url),
            request_name=name,
        )
        policy = CachePathPolicy(cli_settings(None, cache_dir).cache_dir)
        target = policy.path_for(identity)
    except ChartFetchError as e:
        output_error(e)
        raise typer.Exit(code=1)
    state = "cached" if target.exists() else "missing"
    typer.echo(f"{target}\t{state}")
