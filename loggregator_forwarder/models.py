"""Kubernetes resource kinds, resource references and record field coercion."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


def as_string(value) -> str:
    """Record fields that are absent or not strings read as empty."""
    return value if isinstance(value, str) else ""


def as_mapping(value) -> dict:
    return value if isinstance(value, dict) else {}


class UnsupportedKindError(ValueError):
    """Raised when a resource kind has no known API path."""


class ResourceKind(Enum):
    """Workload kinds that can appear in an owner chain."""

    POD = "Pod"
    REPLICATION_CONTROLLER = "ReplicationController"
    REPLICA_SET = "ReplicaSet"
    DEPLOYMENT = "Deployment"
    DAEMON_SET = "DaemonSet"
    STATEFUL_SET = "StatefulSet"
    JOB = "Job"
    CRON_JOB = "CronJob"

    @classmethod
    def from_name(cls, name: str) -> ResourceKind:
        """Look up a kind by its API name, e.g. ``"ReplicaSet"``.

        Raises:
            UnsupportedKindError: If *name* is not one of the supported kinds.
        """
        try:
            return cls(name)
        except ValueError:
            raise UnsupportedKindError(f"Unsupported resource kind: {name!r}") from None

    @property
    def path_template(self) -> str:
        return _PATH_TEMPLATES[self]


_PATH_TEMPLATES: dict[ResourceKind, str] = {
    ResourceKind.POD: "/api/v1/namespaces/{namespace}/pods/{name}",
    ResourceKind.REPLICATION_CONTROLLER: "/api/v1/namespaces/{namespace}/replicationcontrollers/{name}",
    ResourceKind.REPLICA_SET: "/apis/apps/v1/namespaces/{namespace}/replicasets/{name}",
    ResourceKind.DEPLOYMENT: "/apis/apps/v1/namespaces/{namespace}/deployments/{name}",
    ResourceKind.DAEMON_SET: "/apis/apps/v1/namespaces/{namespace}/daemonsets/{name}",
    ResourceKind.STATEFUL_SET: "/apis/apps/v1/namespaces/{namespace}/statefulsets/{name}",
    ResourceKind.JOB: "/apis/batch/v1/namespaces/{namespace}/jobs/{name}",
    ResourceKind.CRON_JOB: "/apis/batch/v1beta1/namespaces/{namespace}/cronjobs/{name}",
}


@dataclass(frozen=True)
class ResourceRef:
    namespace: str
    kind: ResourceKind
    name: str

    @property
    def cache_key(self) -> str:
        """Canonical ``namespace/kind/name`` key with the kind lowercased."""
        return f"{self.namespace}/{self.kind.value.lower()}/{self.name}"

    @property
    def path(self) -> str:
        return self.kind.path_template.format(namespace=self.namespace, name=self.name)
