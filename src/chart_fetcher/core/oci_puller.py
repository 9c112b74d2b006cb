"""Pull charts stored as OCI registry artifacts."""

from __future__ import annotations

import logging
import re
import shutil
import tarfile
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import yaml
from oras.client import OrasClient

from chart_fetcher.core.errors import CacheIOError, ParseError, RegistryError
from chart_fetcher.models import CredentialPair
from chart_fetcher.models.chart import ChartMetadata, LoadedPackage
from chart_fetcher.utils.chart_archive import read_chart_yaml

logger = logging.getLogger(__name__)

_HOST = r"(?:localhost|[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)+|[A-Za-z0-9-]+(?=:))(?::[0-9]+)?"
_COMPONENT = r"[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*"
_TAG = r"[\w][\w.-]{0,127}"
_DIGEST = r"[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,}"
_REFERENCE_RE = re.compile(
    rf"^(?P<registry>{_HOST})/(?P<repository>{_COMPONENT}(?:/{_COMPONENT})*)"
    rf"(?::(?P<tag>{_TAG}))?(?:@(?P<digest>{_DIGEST}))?$"
)

ClientFactory = Callable[..., Any]


@dataclass(frozen=True)
class OCIReference:
    registry: str
    repository: str
    tag: str = ""
    digest: str = ""

    @property
    def target(self) -> str:
        ref = f"{self.registry}/{self.repository}"
        if self.tag:
            ref += f":{self.tag}"
        if self.digest:
            ref += f"@{self.digest}"
        return ref

    def __str__(self) -> str:
        return self.target


def parse_oci_reference(raw: str) -> OCIReference:
    """Parse ``[oci://]host[:port]/repo/path[:tag][@digest]``."""
    ref = raw.strip()
    if ref.startswith("oci://"):
        ref = ref[len("oci://"):]
    match = _REFERENCE_RE.match(ref)
    if not match:
        raise ParseError(
            "invalid OCI reference, expected <registry>/<repository>[:tag][@digest]",
            reference=raw,
        )
    return OCIReference(
        registry=match.group("registry"),
        repository=match.group("repository"),
        tag=match.group("tag") or "",
        digest=match.group("digest") or "",
    )


def _pick(files: list[Path], *suffixes: str) -> Path | None:
    for path in files:
        if path.name.endswith(suffixes):
            return path
    return None


class OCIPuller:
    """Pulls a chart (and its provenance layer, if any) with ORAS and loads it."""

    def __init__(
        self,
        output_dir: Path,
        insecure_skip_tls_verify: bool = False,
        client_factory: ClientFactory = OrasClient,
    ):
        self.output_dir = Path(output_dir)
        self.insecure = insecure_skip_tls_verify
        self.client_factory = client_factory

    def _client(self, ref: OCIReference, credentials: CredentialPair | None) -> Any:
        # ORAS prompts interactively on empty credentials, so only log in with a full pair
        auth_backend = "basic" if credentials is not None else "token"
        client = self.client_factory(
            insecure=self.insecure,
            tls_verify=not self.insecure,
            auth_backend=auth_backend,
        )
        if credentials is not None and credentials.username and credentials.password:
            logger.info("Using authentication for OCI registry %s", ref.registry)
            try:
                client.login(
                    hostname=ref.registry,
                    username=credentials.username,
                    password=credentials.password,
                    tls_verify=not self.insecure,
                )
            except Exception as e:
                raise RegistryError(f"registry login failed: {e}", reference=ref.target) from e
        return client

    def _artifact_dir(self, ref: OCIReference) -> Path:
        """Return a fresh directory owned by a single pull."""
        prefix = re.sub(r"[/:@]", "-", ref.target) + "-"
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            return Path(tempfile.mkdtemp(prefix=prefix, dir=self.output_dir))
        except OSError as e:
            raise CacheIOError(f"cannot prepare OCI pull dir: {e}", reference=str(self.output_dir)) from e

    def pull(self, reference: str, credentials: CredentialPair | None = None) -> LoadedPackage:
        ref = parse_oci_reference(reference)
        client = self._client(ref, credentials)
        outdir = self._artifact_dir(ref)

        logger.info("Pulling OCI chart %s into %s", ref, outdir)
        try:
            return self._pull_into(client, ref, outdir)
        except RegistryError:
            shutil.rmtree(outdir, ignore_errors=True)
            raise

    def _pull_into(self, client: Any, ref: OCIReference, outdir: Path) -> LoadedPackage:
        try:
            pulled = client.pull(target=ref.target, outdir=str(outdir))
        except Exception as e:
            raise RegistryError(f"pull failed: {e}", reference=ref.target) from e
        files = [Path(p) for p in pulled or []]
        logger.debug("Pulled OCI layers: %s", files)

        archive = _pick(files, ".tgz", ".tar.gz")
        if archive is None:
            raise RegistryError("pulled artifact contains no chart archive", reference=ref.target)
        provenance = _pick(files, ".prov")
        return LoadedPackage(
            reference=ref.target,
            metadata=self._load(archive, ref),
            archive_path=archive,
            provenance_path=provenance,
        )

    @staticmethod
    def _load(archive: Path, ref: OCIReference) -> ChartMetadata:
        try:
            return ChartMetadata.from_dict(read_chart_yaml(archive))
        except (OSError, EOFError, ValueError, tarfile.TarError, yaml.YAMLError) as e:
            raise RegistryError(f"cannot load chart: {e}", reference=ref.target) from e
