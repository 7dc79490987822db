"""Minimal Kubernetes API client: fetch a single namespaced resource."""

from __future__ import annotations

import logging

import httpx

from loggregator_forwarder.config import Config
from loggregator_forwarder.models import ResourceKind, ResourceRef
from loggregator_forwarder.tls_context import create_client_context_verified

logger = logging.getLogger(__name__)


class KubernetesAPIError(Exception):
    """Raised when the Kubernetes API cannot be reached or rejects a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class KubernetesClient:
    """Issues bearer-token authenticated GETs against the cluster API server."""

    def __init__(
        self,
        base_url: str,
        token: str,
        ca_file: str | None = None,
        http_client: httpx.Client | None = None,
        timeout: float = 10.0,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        if http_client is None:
            verify = create_client_context_verified(ca_file) if ca_file else True
            http_client = httpx.Client(verify=verify, timeout=timeout)
        self._http = http_client

    @classmethod
    def from_config(cls, config: Config) -> KubernetesClient:
        """Build a client from the in-cluster service account settings."""
        with open(config.kube_token_file, "r", encoding="utf-8") as f:
            token = f.read().strip()
        base_url = f"https://{config.kube_host}:{config.kube_port}"
        logger.info("Using Kubernetes API at %s", base_url)
        return cls(base_url, token, ca_file=config.kube_ca_file)

    @property
    def base_url(self) -> str:
        return self._base_url

    def resource_url(self, kind: ResourceKind, name: str, namespace: str) -> str:
        return self._base_url + ResourceRef(namespace, kind, name).path

    def get(self, kind: ResourceKind, name: str, namespace: str) -> dict | None:
        """Fetch one resource as a decoded JSON object.

        Returns None when the API server answers 404.

        Raises:
            KubernetesAPIError: On transport errors, any other non-2xx status,
                or a body that is not a JSON object.
        """
        url = self.resource_url(kind, name, namespace)
        try:
            response = self._http.get(
                url, headers={"Authorization": f"Bearer {self._token}"}
            )
        except httpx.HTTPError as exc:
            raise KubernetesAPIError(f"GET {url} failed: {exc}") from exc

        if response.status_code == 404:
            logger.debug("%s %s/%s not found", kind.value, namespace, name)
            return None
        if response.is_error:
            raise KubernetesAPIError(
                f"GET {url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise KubernetesAPIError(f"GET {url} returned invalid JSON: {exc}") from exc
        if not isinstance(body, dict):
            raise KubernetesAPIError(f"GET {url} returned a non-object body")
        return body

    def close(self):
        self._http.close()
