"""Chart metadata models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Maintainer:
    name: str = ""
    email: str = ""
    url: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> Maintainer:
        return cls(
            name=d.get("name", ""),
            email=d.get("email", ""),
            url=d.get("url", ""),
        )


@dataclass
class ChartMetadata:
    """Contents of a chart's Chart.yaml."""

    name: str = ""
    version: str = ""
    app_version: str = ""
    description: str = ""
    api_version: str = ""
    chart_type: str = ""
    home: str = ""
    keywords: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    maintainers: list[Maintainer] = field(default_factory=list)
    annotations: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict) -> ChartMetadata:
        if not d:
            return cls()
        return cls(
            name=d.get("name", ""),
            version=str(d.get("version", "")),
            app_version=str(d.get("appVersion", "")),
            description=d.get("description", ""),
            api_version=d.get("apiVersion", ""),
            chart_type=d.get("type", ""),
            home=d.get("home", ""),
            keywords=d.get("keywords") or [],
            sources=d.get("sources") or [],
            maintainers=[Maintainer.from_dict(m) for m in d.get("maintainers") or []],
            annotations=d.get("annotations") or {},
        )


@dataclass(frozen=True)
class ChartVersion:
    """One published version of a chart, as listed by the metadata store."""

    version: str
    digest: str = ""
    urls: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, d: dict) -> ChartVersion:
        return cls(
            version=str(d.get("version", "")),
            digest=d.get("digest", "") or "",
            urls=tuple(d.get("urls") or ()),
        )


@dataclass(frozen=True)
class ResolvedChart:
    """Where to download a chart version from, relative to its repository."""

    path: str
    digest: str = ""
    version: str = ""


@dataclass
class LoadedPackage:
    """A chart pulled from an OCI registry and loaded from its archive."""

    reference: str
    metadata: ChartMetadata
    archive_path: Path
    provenance_path: Path | None = None

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def version(self) -> str:
        return self.metadata.version
