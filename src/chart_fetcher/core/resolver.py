"""Resolve chart references into local chart archives."""

from __future__ import annotations

import logging
from pathlib import Path

from chart_fetcher.config.settings import Settings, settings as default_settings
from chart_fetcher.core.cache_path import CacheIdentity, CachePathPolicy, file_name_from_url
from chart_fetcher.core.credentials import CredentialResolver, KubeSecretStore
from chart_fetcher.core.errors import ChartFetchError, ParseError
from chart_fetcher.core.fetcher import ArchiveFetcher, build_url, is_http_url
from chart_fetcher.core.k8s_client import K8sClient
from chart_fetcher.core.metadata_store import KubeMetadataStore, MetadataStore
from chart_fetcher.core.oci_puller import OCIPuller, parse_oci_reference
from chart_fetcher.core.repo_cache import RepositoryMetadataCache
from chart_fetcher.models import CredentialPair, SourceKind
from chart_fetcher.models.chart import LoadedPackage
from chart_fetcher.models.request import ChartReference, ChartRequest, FetchResult

logger = logging.getLogger(__name__)


class SourceResolver:
    """Dispatches a chart reference to the repository, HTTP, or OCI fetch path."""

    def __init__(
        self,
        repo_cache: RepositoryMetadataCache,
        metadata: MetadataStore,
        credentials: CredentialResolver,
        fetcher: ArchiveFetcher,
        oci_puller: OCIPuller,
        path_policy: CachePathPolicy,
        namespace: str,
    ):
        self.repo_cache = repo_cache
        self.metadata = metadata
        self.credentials = credentials
        self.fetcher = fetcher
        self.oci_puller = oci_puller
        self.path_policy = path_policy
        self.namespace = namespace

    def close(self) -> None:
        """Stop the repository cache's background sweep."""
        self.repo_cache.stop_janitor()

    def __enter__(self) -> SourceResolver:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def resolve(self, reference: str | ChartRequest, version: str = "") -> FetchResult:
        """Resolve a ``<repo>/<chart>`` string (plus version) or a ChartRequest."""
        try:
            if isinstance(reference, ChartRequest):
                return self._resolve_request(reference)
            path, cached = self._download_repository_chart(ChartReference.parse(reference, version))
            return FetchResult(kind=SourceKind.REPOSITORY, path=path, cached=cached)
        except ChartFetchError as e:
            logger.error("Failed to resolve chart %s: %s", reference, e)
            raise

    def download_chart(self, name: str, version: str = "") -> Path:
        """Download ``<repo>/<chart>`` at version ("" for latest) and return its path."""
        path, _ = self._download_repository_chart(ChartReference.parse(name, version))
        return path

    def download_chart_from_http(self, request: ChartRequest) -> Path:
        return self._download_http_chart(request)[0]

    def pull_oci_chart(self, request: ChartRequest) -> LoadedPackage:
        if request.oci is None:
            raise ParseError("invalid chart source, need OCI type", reference=str(request))
        return self._pull_oci_chart(request)

    def _resolve_request(self, request: ChartRequest) -> FetchResult:
        kinds = request.populated_sources()
        if not kinds:
            raise ParseError("no chart source set", reference=str(request))
        if len(kinds) > 1:
            names = ", ".join(k.value for k in kinds)
            raise ParseError(f"ambiguous chart source: {names}", reference=str(request))

        kind = kinds[0]
        if kind is SourceKind.REPOSITORY:
            path, cached = self._download_repository_chart(
                ChartReference.parse(request.chart, request.version),
                request_name=request.name,
            )
            return FetchResult(kind=kind, path=path, cached=cached)
        if kind is SourceKind.HTTP:
            path, cached = self._download_http_chart(request)
            return FetchResult(kind=kind, path=path, cached=cached)
        package = self._pull_oci_chart(request)
        return FetchResult(kind=kind, path=package.archive_path, package=package)

    def _download_repository_chart(
        self, ref: ChartReference, request_name: str = "",
    ) -> tuple[Path, bool]:
        logger.info("get chart %s version %s", ref.name, ref.version or "latest")
        self.path_policy.ensure_dir()

        entry = self.repo_cache.lookup(ref.repository, self.namespace)
        chart = self.metadata.get_resolved_chart(ref.chart_id, ref.version, self.namespace)

        identity = CacheIdentity(
            repository=ref.repository,
            chart=ref.chart,
            version=chart.version or ref.version,
            # a named request is keyed by its name, not the content digest
            digest="" if request_name else chart.digest,
            file_name=file_name_from_url(chart.path),
            request_name=request_name,
        )
        path, cached = self.path_policy.resolved_path(identity)
        if cached:
            logger.info("chart already downloaded, use it: %s", path)
            return path, True

        self.fetcher.fetch(build_url(entry.url, chart.path), entry.credentials, path)
        logger.info("download chart to disk: %s", path)
        return path, False

    def _download_http_chart(self, request: ChartRequest) -> tuple[Path, bool]:
        source = request.http
        if source is None:
            raise ParseError("invalid chart source, need HTTP type", reference=str(request))
        if not source.url:
            raise ParseError("http source url not set", reference=str(request))
        if not is_http_url(source.url):
            raise ParseError("http source url does not start with http:// or https://", reference=source.url)
        file_name = file_name_from_url(source.url)
        if not file_name:
            raise ParseError("cannot derive a file name from the http source url", reference=source.url)

        path, cached = self.path_policy.resolved_path(
            CacheIdentity(request_name=request.name, file_name=file_name),
        )
        if cached:
            logger.info("chart already downloaded, use it: %s", path)
            return path, True

        credentials = self._credentials(source.secret_ref, request.namespace)
        self.fetcher.fetch(source.url, credentials, path)
        logger.info("successfully downloaded chart from url %s", source.url)
        return path, False

    def _pull_oci_chart(self, request: ChartRequest) -> LoadedPackage:
        source = request.oci
        # reject malformed references before any secret or registry traffic
        ref = parse_oci_reference(source.repo)
        credentials = self._credentials(source.secret_ref, request.namespace)
        return self.oci_puller.pull(ref.target, credentials)

    def _credentials(self, secret_ref: str, namespace: str) -> CredentialPair | None:
        if not secret_ref:
            return None
        return self.credentials.resolve(secret_ref, namespace)


def build_resolver(config: Settings | None = None) -> SourceResolver:
    """Wire a SourceResolver against the cluster described by the settings."""
    config = config or default_settings
    primary = K8sClient(context=config.kube_context, request_timeout=config.kube_request_timeout)
    in_cluster = K8sClient(in_cluster=True, request_timeout=config.kube_request_timeout)

    primary_secrets = KubeSecretStore(primary, name="primary")
    credentials = CredentialResolver([primary_secrets, KubeSecretStore(in_cluster, name="in-cluster")])
    metadata = KubeMetadataStore(
        primary,
        primary_secrets,
        group=config.chart_api_group,
        version=config.chart_api_version,
    )
    repo_cache = RepositoryMetadataCache(
        metadata,
        expiry=config.repo_cache_expiry,
        cleanup_interval=config.repo_cache_cleanup_interval,
    )
    repo_cache.start_janitor()
    return SourceResolver(
        repo_cache=repo_cache,
        metadata=metadata,
        credentials=credentials,
        fetcher=ArchiveFetcher(
            timeout=config.fetch_timeout,
            insecure_skip_tls_verify=config.insecure_skip_tls_verify,
            file_mode=config.file_mode,
        ),
        oci_puller=OCIPuller(config.oci_dir, insecure_skip_tls_verify=config.insecure_skip_tls_verify),
        path_policy=CachePathPolicy(config.cache_dir, dir_mode=config.dir_mode),
        namespace=config.system_namespace,
    )
