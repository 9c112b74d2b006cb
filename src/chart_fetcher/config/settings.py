"""Application configuration and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

_TRUTHY = {"1", "true", "yes", "on"}


def _default_cache_dir() -> Path:
    """Return the directory downloaded chart archives are cached in.

    Checks CHART_FETCHER_CACHE_DIR first, otherwise a fixed temporary path.
    """
    cache_dir = os.environ.get("CHART_FETCHER_CACHE_DIR", "")
    if cache_dir:
        return Path(cache_dir)
    return Path("/tmp/helm-charts")


def _default_namespace() -> str:
    # POD_NAMESPACE is what the downward API usually exposes to the controller
    for var in ("CHART_FETCHER_NAMESPACE", "POD_NAMESPACE"):
        value = os.environ.get(var, "")
        if value:
            return value
    return "default"


def _default_kube_context() -> str | None:
    return os.environ.get("CHART_FETCHER_KUBE_CONTEXT") or None


def _default_insecure() -> bool:
    return os.environ.get("CHART_FETCHER_INSECURE_SKIP_TLS_VERIFY", "").lower() in _TRUTHY


@dataclass
class Settings:
    cache_dir: Path = field(default_factory=_default_cache_dir)
    system_namespace: str = field(default_factory=_default_namespace)
    kube_context: str | None = field(default_factory=_default_kube_context)
    repo_cache_expiry: float = 5 * 60
    repo_cache_cleanup_interval: float = 10 * 60
    fetch_timeout: float = 30.0
    kube_request_timeout: float | None = None
    insecure_skip_tls_verify: bool = field(default_factory=_default_insecure)
    chart_api_group: str = "app.alauda.io"
    chart_api_version: str = "v1beta1"
    dir_mode: int = 0o755
    file_mode: int = 0o644

    @property
    def oci_dir(self) -> Path:
        return self.cache_dir / "oci"


# Global singleton
settings = Settings()
