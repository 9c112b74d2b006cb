"""Tests for the ChartRepo / Chart custom resource metadata store."""

from __future__ import annotations

import pytest
from kubernetes.client import ApiException

from chart_fetcher.core.errors import ConfigError, NotFoundError, UpstreamError
from chart_fetcher.core.metadata_store import KubeMetadataStore, select_version
from chart_fetcher.models.chart import ChartVersion


class FakeK8s:
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str, str], dict] = {}
        self.status: int | None = None
        self.calls: list[dict] = []

    def get_custom_object(self, group, version, plural, name, namespace) -> dict:
        self.calls.append({"group": group, "version": version, "plural": plural, "name": name})
        if self.status is not None:
            raise ApiException(status=self.status, reason="boom")
        try:
            return self.objects[(plural, namespace, name)]
        except KeyError:
            raise ApiException(status=404, reason="Not Found") from None


@pytest.fixture
def k8s() -> FakeK8s:
    fake = FakeK8s()
    fake.objects[("chartrepos", "kube-system", "stable")] = {
        "spec": {"url": "https://charts.example.com", "secret": {"name": "stable-auth"}},
    }
    fake.objects[("charts", "kube-system", "nginx.stable")] = {
        "spec": {
            "versions": [
                {"version": "1.2.3", "digest": "aaa", "urls": ["charts/nginx-1.2.3.tgz"]},
                {"version": "1.10.0", "digest": "bbb", "urls": ["charts/nginx-1.10.0.tgz"]},
                {"version": "1.9.0", "digest": "ccc", "urls": []},
            ],
        },
    }
    return fake


@pytest.fixture
def store(k8s, primary_secrets) -> KubeMetadataStore:
    primary_secrets.secrets[("kube-system", "stable-auth")] = {"username": b"u\n", "password": b"p\n"}
    return KubeMetadataStore(k8s, primary_secrets)


def test_repository_entry_embeds_secret_credentials(store, k8s) -> None:
    entry = store.get_repository_entry("stable", "kube-system")
    assert entry.url == "https://charts.example.com"
    assert (entry.username, entry.password) == ("u", "p")
    assert entry.credentials is not None
    assert k8s.calls[0]["group"] == "app.alauda.io"


def test_repository_without_secret_is_anonymous(store, k8s) -> None:
    k8s.objects[("chartrepos", "kube-system", "public")] = {"spec": {"url": "https://public.example.com"}}
    entry = store.get_repository_entry("public", "kube-system")
    assert entry.credentials is None


@pytest.mark.parametrize(
    "data",
    [
        {"username": b"u\n"},
        {"username": b"u", "password": b"\n"},
        {"password": b"p"},
    ],
)
def test_repository_secret_with_partial_pair_is_config_error(store, primary_secrets, data) -> None:
    primary_secrets.secrets[("kube-system", "stable-auth")] = data
    with pytest.raises(ConfigError, match="username or password") as exc_info:
        store.get_repository_entry("stable", "kube-system")
    assert exc_info.value.reference == "kube-system/stable-auth"


def test_missing_repository_is_not_found(store) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        store.get_repository_entry("nope", "kube-system")
    assert exc_info.value.stage == "metadata lookup"


def test_api_failure_is_upstream_error(store, k8s) -> None:
    k8s.status = 500
    with pytest.raises(UpstreamError, match="500"):
        store.get_repository_entry("stable", "kube-system")


def test_resolved_chart_for_exact_version(store) -> None:
    chart = store.get_resolved_chart("nginx.stable", "1.2.3", "kube-system")
    assert (chart.path, chart.digest, chart.version) == ("charts/nginx-1.2.3.tgz", "aaa", "1.2.3")


def test_empty_version_selects_latest(store) -> None:
    chart = store.get_resolved_chart("nginx.stable", "", "kube-system")
    assert chart.version == "1.10.0"
    assert chart.digest == "bbb"


def test_unknown_version_is_not_found(store) -> None:
    with pytest.raises(NotFoundError, match="9.9.9"):
        store.get_resolved_chart("nginx.stable", "9.9.9", "kube-system")


def test_version_without_urls_is_upstream_error(store) -> None:
    with pytest.raises(UpstreamError, match="no download url"):
        store.get_resolved_chart("nginx.stable", "1.9.0", "kube-system")


def test_select_version_falls_back_to_first_when_unparseable() -> None:
    versions = [ChartVersion("nightly"), ChartVersion("stable")]
    assert select_version("x", versions, "").version == "nightly"


def test_select_version_with_no_versions() -> None:
    with pytest.raises(NotFoundError):
        select_version("x", [], "")
