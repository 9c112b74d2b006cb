"""cfetch oci <name> <reference> - Pull a chart from an OCI registry."""

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
from chart_fetcher.models.request import ChartRequest, OCISource

app = typer.Typer()


@app.callback(invoke_without_command=True)
def oci(
    name: str = typer.Argument(help="Request name"),
    reference: str = typer.Argument(help="OCI reference, e.g. registry.example.com/charts/app:1.0.0"),
    namespace: str = NamespaceOption,
    secret: str = SecretOption,
    output: str = OutputOption,
    context: Optional[str] = ContextOption,
    cache_dir: Optional[Path] = CacheDirOption,
) -> None:
    """Pull a chart stored as an OCI artifact and show its metadata."""
    request = ChartRequest(name=name, namespace=namespace, oci=OCISource(repo=reference, secret_ref=secret))
    run_and_print(lambda r: r.resolve(request), output, context, cache_dir)
