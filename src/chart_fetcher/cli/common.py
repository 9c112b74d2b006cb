"""Helpers shared by the CLI commands."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.logging import RichHandler

from chart_fetcher.config.settings import Settings, settings
from chart_fetcher.core.errors import ChartFetchError
from chart_fetcher.core.resolver import SourceResolver, build_resolver
from chart_fetcher.models.request import FetchResult
from chart_fetcher.output.formatters import output_error, output_result


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def cli_settings(context: Optional[str], cache_dir: Optional[Path]) -> Settings:
    overrides: dict = {}
    if context:
        overrides["kube_context"] = context
    if cache_dir:
        overrides["cache_dir"] = cache_dir
    return replace(settings, **overrides)


def run_and_print(
    action: Callable[[SourceResolver], FetchResult],
    output: str,
    context: Optional[str],
    cache_dir: Optional[Path],
) -> None:
    with build_resolver(cli_settings(context, cache_dir)) as resolver:
        try:
            result = action(resolver)
        except ChartFetchError as e:
            output_error(e)
            raise typer.Exit(code=1)
    output_result(result, output)
