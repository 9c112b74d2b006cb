"""Chart reference and request models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from chart_fetcher.core.errors import ParseError
from chart_fetcher.models import SourceKind
from chart_fetcher.models.chart import LoadedPackage


@dataclass(frozen=True)
class ChartReference:
    """A ``<repository>/<chart>`` reference plus version (empty means latest)."""

    repository: str
    chart: str
    version: str = ""

    @classmethod
    def parse(cls, name: str, version: str = "") -> ChartReference:
        """Split ``stable/nginx`` into its repository and chart segments."""
        parts = name.split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ParseError(
                "cannot parse chart name, expected <repository>/<chart>",
                reference=name,
            )
        return cls(repository=parts[0], chart=parts[1], version=version)

    @property
    def name(self) -> str:
        return f"{self.repository}/{self.chart}"

    @property
    def chart_id(self) -> str:
        """Name of the chart as addressed in the metadata store."""
        return f"{self.chart.lower()}.{self.repository}"

    def __str__(self) -> str:
        if self.version:
            return f"{self.name}@{self.version}"
        return self.name


@dataclass(frozen=True)
class HTTPSource:
    url: str
    secret_ref: str = ""


@dataclass(frozen=True)
class OCISource:
    repo: str
    secret_ref: str = ""


@dataclass(frozen=True)
class ChartRequest:
    """A structured install request naming exactly one chart source."""

    name: str
    namespace: str
    chart: str = ""
    version: str = ""
    http: HTTPSource | None = None
    oci: OCISource | None = None

    def populated_sources(self) -> list[SourceKind]:
        kinds: list[SourceKind] = []
        if self.chart:
            kinds.append(SourceKind.REPOSITORY)
        if self.http is not None:
            kinds.append(SourceKind.HTTP)
        if self.oci is not None:
            kinds.append(SourceKind.OCI)
        return kinds

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass
class FetchResult:
    """Outcome of a resolution: a local archive, plus the loaded chart for OCI pulls."""

    kind: SourceKind
    path: Path
    cached: bool = False
    package: LoadedPackage | None = None
