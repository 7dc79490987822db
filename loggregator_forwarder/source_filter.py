"""SourceIDFilter: scope records to one namespace and attach the pod's owner."""

import logging

from loggregator_forwarder.models import as_string
from loggregator_forwarder.owner import OwnerResolver

logger = logging.getLogger(__name__)


class SourceIDFilter:
    def __init__(self, resolver: OwnerResolver, namespace: str):
        self._resolver = resolver
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    def process(self, record: dict) -> dict | None:
        """Set ``kubernetes.owner`` on the record. Returns None if out of scope."""
        k8s = record.get("kubernetes")
        if not isinstance(k8s, dict):
            return None

        namespace = as_string(k8s.get("namespace_name"))
        if namespace != self._namespace:
            return None

        pod_name = as_string(k8s.get("pod_name"))
        k8s["owner"] = self._resolver.resolve_owner(namespace, "Pod", pod_name)
        return record
