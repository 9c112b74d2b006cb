"""Deterministic on-disk locations for cached chart archives."""

from __future__ import annotations

import logging
import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

from chart_fetcher.core.errors import CacheIOError, ParseError

logger = logging.getLogger(__name__)


def file_name_from_url(url: str) -> str:
    """Return the final path segment of a URL or relative chart path."""
    if not url:
        return ""
    return posixpath.basename(urlsplit(url).path)


def _flatten(name: str) -> str:
    name = name.replace("/", "-")
    if os.sep != "/":
        name = name.replace(os.sep, "-")
    return name


@dataclass(frozen=True)
class CacheIdentity:
    """Identifying fields of a chart archive; unset fields are empty strings."""

    repository: str = ""
    chart: str = ""
    version: str = ""
    digest: str = ""
    file_name: str = ""
    request_name: str = ""

    def file_stem(self) -> str:
        if self.repository and self.digest and self.file_name:
            return f"{self.repository}-{self.digest}-{self.file_name}"
        if self.request_name and self.file_name:
            return f"{self.request_name}-{self.file_name}"
        if self.repository and self.chart:
            return f"{self.repository}-{self.chart}-{self.version or 'latest'}.tgz"
        raise ParseError("not enough fields to name a cached archive", reference=repr(self))


class CachePathPolicy:
    """Maps a CacheIdentity to a path under one cache directory."""

    def __init__(self, cache_dir: Path, dir_mode: int = 0o755):
        self.cache_dir = Path(cache_dir)
        self.dir_mode = dir_mode

    def ensure_dir(self) -> None:
        if self.cache_dir.is_dir():
            return
        try:
            self.cache_dir.mkdir(mode=self.dir_mode, parents=True, exist_ok=True)
        except OSError as e:
            raise CacheIOError(f"cannot create cache dir: {e}", reference=str(self.cache_dir)) from e
        logger.info("helm charts dir not exist, created it: %s", self.cache_dir)

    def path_for(self, identity: CacheIdentity) -> Path:
        return self.cache_dir / _flatten(identity.file_stem())

    def resolved_path(self, identity: CacheIdentity) -> tuple[Path, bool]:
        """Return the archive path and whether it is already on disk."""
        self.ensure_dir()
        path = self.path_for(identity)
        return path, path.exists()
