"""Kubernetes API wrapper."""

from __future__ import annotations

import base64

from kubernetes import client, config


class K8sClient:
    """Thin wrapper around the Kubernetes Python client.

    One instance is one credential scope: either a kubeconfig context
    (``context``) or the controller's own in-cluster service account
    (``in_cluster=True``).
    """

    def __init__(
        self,
        context: str | None = None,
        in_cluster: bool = False,
        request_timeout: float | None = None,
    ):
        self.context = context
        self.in_cluster = in_cluster
        self.request_timeout = request_timeout
        self._core_v1: client.CoreV1Api | None = None
        self._custom: client.CustomObjectsApi | None = None
        self._api_client: client.ApiClient | None = None

    def _load_config(self) -> client.ApiClient:
        if self._api_client is not None:
            return self._api_client
        cfg = client.Configuration()
        if self.in_cluster:
            config.load_incluster_config(client_configuration=cfg)
        else:
            try:
                config.load_kube_config(
                    context=self.context,
                    client_configuration=cfg,
                )
            except config.ConfigException:
                config.load_incluster_config(client_configuration=cfg)
        # Prevent indefinite hangs on unreachable clusters
        cfg.retries = 1
        self._api_client = client.ApiClient(configuration=cfg)
        return self._api_client

    @property
    def core_v1(self) -> client.CoreV1Api:
        if self._core_v1 is None:
            self._core_v1 = client.CoreV1Api(api_client=self._load_config())
        return self._core_v1

    @property
    def custom(self) -> client.CustomObjectsApi:
        if self._custom is None:
            self._custom = client.CustomObjectsApi(api_client=self._load_config())
        return self._custom

    @property
    def scope_name(self) -> str:
        if self.in_cluster:
            return "in-cluster"
        if self.context:
            return self.context
        try:
            _, ctx = config.list_kube_config_contexts()
            return ctx.get("name", "unknown") if ctx else "unknown"
        except config.ConfigException:
            return "unknown"

    def _timeout_kwargs(self) -> dict:
        if self.request_timeout is None:
            return {}
        return {"_request_timeout": self.request_timeout}

    def read_secret_data(self, name: str, namespace: str) -> dict[str, bytes]:
        """Read a Secret and return its data with values base64-decoded.

        Raises kubernetes.client.ApiException on API failures.
        """
        secret = self.core_v1.read_namespaced_secret(
            name=name, namespace=namespace, **self._timeout_kwargs(),
        )
        data = secret.data or {}
        # the python client leaves Secret data base64-encoded
        return {key: base64.b64decode(value) for key, value in data.items() if value is not None}

    def get_custom_object(
        self,
        group: str,
        version: str,
        plural: str,
        name: str,
        namespace: str,
    ) -> dict:
        """Get a single namespaced custom resource as a plain dict."""
        return self.custom.get_namespaced_custom_object(
            group=group,
            version=version,
            namespace=namespace,
            plural=plural,
            name=name,
            **self._timeout_kwargs(),
        )
