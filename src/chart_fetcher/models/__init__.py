"""Data models for Chart Fetcher."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class SourceKind(enum.Enum):
    REPOSITORY = "repository"
    HTTP = "http"
    OCI = "oci"


@dataclass(frozen=True)
class CredentialPair:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"CredentialPair(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class RepositoryEntry:
    """A registered chart repository: base URL plus optional embedded credentials."""

    name: str
    url: str
    username: str = ""
    password: str = ""

    @property
    def credentials(self) -> CredentialPair | None:
        """Basic auth is only attempted when both fields are set."""
        if self.username and self.password:
            return CredentialPair(self.username, self.password)
        return None
