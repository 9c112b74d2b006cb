"""Repository and chart metadata lookups against ChartRepo / Chart custom resources."""

from __future__ import annotations

import logging
from typing import Protocol

from kubernetes.client import ApiException

from chart_fetcher.core.credentials import SecretStore, _field
from chart_fetcher.core.errors import ConfigError, NotFoundError, UpstreamError
from chart_fetcher.core.k8s_client import K8sClient
from chart_fetcher.models import RepositoryEntry
from chart_fetcher.models.chart import ChartVersion, ResolvedChart
from chart_fetcher.utils.version_compare import latest_version

logger = logging.getLogger(__name__)


class MetadataStore(Protocol):
    def get_repository_entry(self, name: str, namespace: str) -> RepositoryEntry:
        """Return the named repository; raise NotFoundError or UpstreamError."""
        ...

    def get_resolved_chart(self, chart_id: str, version: str, namespace: str) -> ResolvedChart:
        """Return download path and digest for a chart version ("" means latest)."""
        ...


def select_version(chart_id: str, versions: list[ChartVersion], version: str) -> ChartVersion:
    """Pick the requested version, or the highest one when version is empty."""
    if not versions:
        raise NotFoundError("chart has no versions", reference=chart_id)
    if version:
        for cv in versions:
            if cv.version == version:
                return cv
        raise NotFoundError(f"chart version {version} not found", reference=chart_id)
    best = latest_version(cv.version for cv in versions)
    if best is None:
        # nothing parses as a version; keep the store's ordering
        return versions[0]
    return next(cv for cv in versions if cv.version == best)


class KubeMetadataStore:
    """MetadataStore reading ChartRepo and Chart custom resources.

    A ChartRepo's ``spec.url`` is the repository base URL and its optional
    ``spec.secret`` names the Secret holding basic-auth credentials. A Chart
    named ``<chart>.<repo>`` lists its published versions under
    ``spec.versions``.
    """

    def __init__(
        self,
        k8s: K8sClient,
        secrets: SecretStore,
        group: str = "app.alauda.io",
        version: str = "v1beta1",
    ):
        self.k8s = k8s
        self.secrets = secrets
        self.group = group
        self.version = version

    def _get(self, plural: str, name: str, namespace: str) -> dict:
        reference = f"{plural}/{namespace}/{name}"
        try:
            return self.k8s.get_custom_object(
                group=self.group,
                version=self.version,
                plural=plural,
                name=name,
                namespace=namespace,
            )
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(f"{plural} resource not found", reference=reference) from e
            raise UpstreamError(f"{e.status} {e.reason}", reference=reference) from e

    def get_repository_entry(self, name: str, namespace: str) -> RepositoryEntry:
        obj = self._get("chartrepos", name, namespace)
        spec = obj.get("spec") or {}
        url = spec.get("url", "")
        if not url:
            raise UpstreamError("chart repository has no url", reference=f"{namespace}/{name}")

        username, password = "", ""
        secret_ref = spec.get("secret") or {}
        if secret_ref.get("name"):
            secret_ns = secret_ref.get("namespace") or namespace
            data = self.secrets.read_secret(secret_ref["name"], secret_ns)
            username = _field(data, "username")
            password = _field(data, "password")
            if bool(username) != bool(password):
                raise ConfigError(
                    "can not find username or password in the secret",
                    reference=f"{secret_ns}/{secret_ref['name']}",
                )

        logger.debug("Fetched chart repository %s/%s: %s", namespace, name, url)
        return RepositoryEntry(name=name, url=url, username=username, password=password)

    def get_resolved_chart(self, chart_id: str, version: str, namespace: str) -> ResolvedChart:
        obj = self._get("charts", chart_id, namespace)
        spec = obj.get("spec") or {}
        versions = [ChartVersion.from_dict(v) for v in spec.get("versions") or []]
        cv = select_version(chart_id, versions, version)
        if not cv.urls:
            raise UpstreamError(f"chart version {cv.version} has no download url", reference=chart_id)
        return ResolvedChart(path=cv.urls[0], digest=cv.digest, version=cv.version)
