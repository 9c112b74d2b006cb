"""Shared fakes for the external collaborators of the resolver."""

from __future__ import annotations

import io
import tarfile
from pathlib import Path
from typing import Any

import pytest
import yaml

from chart_fetcher.core.cache_path import CachePathPolicy
from chart_fetcher.core.credentials import CredentialResolver
from chart_fetcher.core.errors import NotFoundError
from chart_fetcher.core.fetcher import ArchiveFetcher
from chart_fetcher.core.oci_puller import OCIPuller
from chart_fetcher.core.repo_cache import RepositoryMetadataCache
from chart_fetcher.core.resolver import SourceResolver
from chart_fetcher.models import RepositoryEntry
from chart_fetcher.models.chart import ResolvedChart


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeMetadataStore:
    def __init__(self) -> None:
        self.repos: dict[str, RepositoryEntry] = {}
        self.charts: dict[tuple[str, str], ResolvedChart] = {}
        self.repo_calls: list[tuple[str, str]] = []
        self.chart_calls: list[tuple[str, str, str]] = []
        self.repo_error: Exception | None = None

    def get_repository_entry(self, name: str, namespace: str) -> RepositoryEntry:
        self.repo_calls.append((name, namespace))
        if self.repo_error is not None:
            raise self.repo_error
        if name not in self.repos:
            raise NotFoundError("chartrepos resource not found", reference=f"{namespace}/{name}")
        return self.repos[name]

    def get_resolved_chart(self, chart_id: str, version: str, namespace: str) -> ResolvedChart:
        self.chart_calls.append((chart_id, version, namespace))
        if (chart_id, version) not in self.charts:
            raise NotFoundError("charts resource not found", reference=chart_id)
        return self.charts[(chart_id, version)]


class FakeSecretStore:
    def __init__(self, name: str, secrets: dict[tuple[str, str], dict[str, bytes]] | None = None):
        self.name = name
        self.secrets = secrets or {}
        self.calls: list[tuple[str, str]] = []
        self.error: Exception | None = None

    def read_secret(self, name: str, namespace: str) -> dict[str, bytes]:
        self.calls.append((namespace, name))
        if self.error is not None:
            raise self.error
        if (namespace, name) not in self.secrets:
            raise NotFoundError(f"secret not found in scope {self.name}", reference=f"{namespace}/{name}")
        return self.secrets[(namespace, name)]


class FakeResponse:
    def __init__(self, status_code: int = 200, content: bytes = b"", reason: str = "OK"):
        self.status_code = status_code
        self.content = content
        self.reason = reason
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeSession:
    def __init__(self) -> None:
        self.verify = True
        self.responses: dict[str, FakeResponse] = {}
        self.error: Exception | None = None
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, auth: Any = None, timeout: Any = None) -> FakeResponse:
        self.calls.append({"url": url, "auth": auth, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.responses.get(url, FakeResponse(404, b"", "Not Found"))


def make_chart_archive(path: Path, name: str = "app", version: str = "1.0.0", **extra: Any) -> Path:
    """Write a minimal packaged chart containing <name>/Chart.yaml."""
    chart_yaml = yaml.safe_dump({"apiVersion": "v2", "name": name, "version": version, **extra}).encode()
    with tarfile.open(path, mode="w:gz") as tar:
        info = tarfile.TarInfo(f"{name}/Chart.yaml")
        info.size = len(chart_yaml)
        tar.addfile(info, io.BytesIO(chart_yaml))
    return path


class FakeOrasClient:
    """Stands in for oras.client.OrasClient; records calls and writes fake layers."""

    instances: list[FakeOrasClient] = []

    def __init__(self, **kwargs: Any):
        self.kwargs = kwargs
        self.logins: list[dict[str, Any]] = []
        self.pulls: list[dict[str, Any]] = []
        self.error: Exception | None = None
        self.chart_name = "app"
        self.chart_version = "1.0.0"
        self.with_provenance = True
        self.with_archive = True
        FakeOrasClient.instances.append(self)

    def login(self, **kwargs: Any) -> dict:
        self.logins.append(kwargs)
        return {"Status": "Login Succeeded"}

    def pull(self, target: str, outdir: str) -> list[str]:
        self.pulls.append({"target": target, "outdir": outdir})
        if self.error is not None:
            raise self.error
        out = Path(outdir)
        files = []
        if self.with_archive:
            archive = out / f"{self.chart_name}-{self.chart_version}.tgz"
            make_chart_archive(archive, self.chart_name, self.chart_version)
            files.append(str(archive))
        if self.with_provenance:
            prov = out / f"{self.chart_name}-{self.chart_version}.tgz.prov"
            prov.write_text("-----BEGIN PGP SIGNED MESSAGE-----\n")
            files.append(str(prov))
        return files


@pytest.fixture(autouse=True)
def _reset_oras_instances():
    FakeOrasClient.instances = []
    yield
    FakeOrasClient.instances = []


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def metadata() -> FakeMetadataStore:
    return FakeMetadataStore()


@pytest.fixture
def primary_secrets() -> FakeSecretStore:
    return FakeSecretStore("primary")


@pytest.fixture
def incluster_secrets() -> FakeSecretStore:
    return FakeSecretStore("in-cluster")


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "helm-charts"


@pytest.fixture
def resolver(
    metadata: FakeMetadataStore,
    primary_secrets: FakeSecretStore,
    incluster_secrets: FakeSecretStore,
    session: FakeSession,
    cache_dir: Path,
    clock: FakeClock,
) -> SourceResolver:
    return SourceResolver(
        repo_cache=RepositoryMetadataCache(metadata, expiry=300, cleanup_interval=600, clock=clock),
        metadata=metadata,
        credentials=CredentialResolver([primary_secrets, incluster_secrets]),
        fetcher=ArchiveFetcher(session=session, timeout=30.0),
        oci_puller=OCIPuller(cache_dir / "oci", client_factory=FakeOrasClient),
        path_policy=CachePathPolicy(cache_dir),
        namespace="kube-system",
    )
