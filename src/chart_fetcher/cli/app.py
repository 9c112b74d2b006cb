"""Root Typer application, mounts sub-commands."""

from __future__ import annotations

import typer

from chart_fetcher.cli.common import configure_logging

app = typer.Typer(
    name="cfetch",
    help="Chart Fetcher - Resolve chart references into locally cached archives.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose)


def _register_commands() -> None:
    from chart_fetcher.cli.commands.pull_cmd import app as pull_app
    from chart_fetcher.cli.commands.http_cmd import app as http_app
    from chart_fetcher.cli.commands.oci_cmd import app as oci_app
    from chart_fetcher.cli.commands.path_cmd import app as path_app

    app.add_typer(pull_app, name="pull", help="Download a chart from a chart repository")
    app.add_typer(http_app, name="http", help="Download a chart archive from a URL")
    app.add_typer(oci_app, name="oci", help="Pull a chart from an OCI registry")
    app.add_typer(path_app, name="path", help="Show the cache path for a chart")


_register_commands()


def main() -> None:
    app()
