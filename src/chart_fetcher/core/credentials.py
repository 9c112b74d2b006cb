"""Resolve basic-auth credentials from Kubernetes Secrets across credential scopes."""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

from kubernetes.client import ApiException

from chart_fetcher.core.errors import (
    STAGE_CREDENTIALS,
    ConfigError,
    NotFoundError,
    UpstreamError,
)
from chart_fetcher.core.k8s_client import K8sClient
from chart_fetcher.models import CredentialPair

logger = logging.getLogger(__name__)


class SecretStore(Protocol):
    """Reads Secret payloads under one credential scope."""

    name: str

    def read_secret(self, name: str, namespace: str) -> dict[str, bytes]:
        """Return the secret's data; raise NotFoundError or UpstreamError."""
        ...


class KubeSecretStore:
    """SecretStore backed by the core/v1 Secret API of one K8sClient."""

    def __init__(self, k8s: K8sClient, name: str | None = None):
        self.k8s = k8s
        self.name = name or k8s.scope_name

    def read_secret(self, name: str, namespace: str) -> dict[str, bytes]:
        reference = f"{namespace}/{name}"
        try:
            return self.k8s.read_secret_data(name, namespace)
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(
                    f"secret not found in scope {self.name}",
                    reference=reference,
                    stage=STAGE_CREDENTIALS,
                ) from e
            raise UpstreamError(
                f"failed to read secret in scope {self.name}: {e.status} {e.reason}",
                reference=reference,
                stage=STAGE_CREDENTIALS,
            ) from e


def _field(data: dict[str, bytes], key: str) -> str:
    raw = data.get(key)
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return raw.strip("\n")


class CredentialResolver:
    """Reads a username/password Secret, falling back through scopes on not-found.

    Scopes are tried in order. Only a NotFoundError moves on to the next
    scope; any other failure is raised straight away, as is the failure of
    the last scope.
    """

    def __init__(self, scopes: Sequence[SecretStore]):
        if not scopes:
            raise ValueError("CredentialResolver needs at least one secret scope")
        self.scopes = list(scopes)

    def resolve(self, secret_name: str, namespace: str) -> CredentialPair:
        data = self._read(secret_name, namespace)
        username = _field(data, "username")
        password = _field(data, "password")
        if not username or not password:
            raise ConfigError(
                "can not find username or password in the secret",
                reference=f"{namespace}/{secret_name}",
            )
        return CredentialPair(username=username, password=password)

    def _read(self, secret_name: str, namespace: str) -> dict[str, bytes]:
        last = len(self.scopes) - 1
        for i, scope in enumerate(self.scopes):
            try:
                return scope.read_secret(secret_name, namespace)
            except NotFoundError:
                if i == last:
                    raise
                logger.debug(
                    "Secret %s/%s not found in scope %s, trying %s",
                    namespace, secret_name, scope.name, self.scopes[i + 1].name,
                )
        # unreachable: the loop either returns or raises
        raise NotFoundError("no secret scopes configured", reference=f"{namespace}/{secret_name}")
