"""Shared CLI options."""

from __future__ import annotations

import typer

OutputOption = typer.Option("table", "--output", "-o", help="Output format: table, json, yaml")
NamespaceOption = typer.Option("default", "--namespace", "-n", help="Namespace the request lives in")
SecretOption = typer.Option("", "--secret", "-s", help="Secret holding username/password for the source")
ContextOption = typer.Option(None, "--context", help="Kubernetes context name")
CacheDirOption = typer.Option(None, "--cache-dir", help="Chart cache directory")
