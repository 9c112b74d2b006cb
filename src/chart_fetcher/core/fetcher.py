"""Download chart archives over HTTP(S)."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import requests
from requests.auth import HTTPBasicAuth

from chart_fetcher.core.errors import CacheIOError, NetworkError
from chart_fetcher.models import CredentialPair

logger = logging.getLogger(__name__)


def is_http_url(url: str) -> bool:
    return url.startswith("http://") or url.startswith("https://")


def build_url(base_url: str, path: str) -> str:
    """Join a repository base URL and a chart path.

    An absolute http(s) path is returned unchanged.
    """
    if is_http_url(path):
        return path
    if base_url.endswith("/"):
        return base_url + path
    return f"{base_url}/{path}"


class ArchiveFetcher:
    """GETs an archive into memory, then moves it onto the destination path.

    The body is written to a temporary file beside the destination and
    renamed into place, so a reader never sees a partially written archive
    and a failed download leaves nothing at the destination.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = 30.0,
        insecure_skip_tls_verify: bool = False,
        file_mode: int = 0o644,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.file_mode = file_mode
        self.session.verify = not insecure_skip_tls_verify
        if insecure_skip_tls_verify:
            logger.warning("TLS certificate verification is disabled for chart downloads")

    def fetch(self, url: str, credentials: CredentialPair | None, destination: Path) -> None:
        content = self._get(url, credentials)
        self._write(content, destination)

    def _get(self, url: str, credentials: CredentialPair | None) -> bytes:
        auth = None
        if credentials is not None and credentials.username and credentials.password:
            auth = HTTPBasicAuth(credentials.username, credentials.password)
        try:
            resp = self.session.get(url, auth=auth, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"failed to fetch: {e}", reference=url) from e
        try:
            if not 200 <= resp.status_code < 300:
                raise NetworkError(
                    f"failed to fetch: {resp.status_code} {resp.reason}",
                    reference=url,
                )
            return resp.content
        except requests.RequestException as e:
            raise NetworkError(f"failed to read response body: {e}", reference=url) from e
        finally:
            resp.close()

    def _write(self, content: bytes, destination: Path) -> None:
        tmp_name = ""
        try:
            with tempfile.NamedTemporaryFile(
                dir=destination.parent,
                prefix=f".{destination.name}.",
                suffix=".part",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(content)
            os.chmod(tmp_name, self.file_mode)
            os.replace(tmp_name, destination)
        except OSError as e:
            if tmp_name:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass
            raise CacheIOError(f"failed to write archive: {e}", reference=str(destination)) from e
