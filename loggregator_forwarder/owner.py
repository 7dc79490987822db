"""Resolve the top-level workload that owns a Kubernetes object."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict

from loggregator_forwarder.kube_client import KubernetesAPIError, KubernetesClient
from loggregator_forwarder.models import ResourceKind, ResourceRef

logger = logging.getLogger(__name__)


class OwnerCache:
    """Thread-safe map of resource cache keys to resolved owner names.

    With ``max_entries`` of 0 the cache grows without bound. A positive
    value evicts the least recently used entry once the limit is reached.
    """

    def __init__(self, max_entries: int = 0):
        self._max_entries = max_entries
        self._entries: OrderedDict[str, str] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: str) -> str | None:
        with self._lock:
            owner = self._entries.get(key)
            if owner is not None:
                self._entries.move_to_end(key)
            return owner

    def set(self, key: str, owner: str):
        with self._lock:
            self._entries[key] = owner
            self._entries.move_to_end(key)
            if self._max_entries and len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted owner cache entry %s", evicted)


class OwnerResolver:
    """Walks ``metadata.ownerReferences`` up to the top-level owner, memoized."""

    def __init__(self, client: KubernetesClient, cache: OwnerCache | None = None):
        self._client = client
        self._cache = cache if cache is not None else OwnerCache()

    @property
    def cache(self) -> OwnerCache:
        return self._cache

    def resolve_owner(self, namespace: str, kind: str, name: str) -> str:
        """Return the name of the object at the top of *name*'s owner chain.

        Only the requested reference is cached; objects visited further up
        the chain are not.

        Raises:
            UnsupportedKindError: If *kind* or any kind in the chain is unknown.
            KubernetesAPIError: If the API server cannot be queried, or the
                owner references loop back on themselves.
        """
        ref = ResourceRef(namespace, ResourceKind.from_name(kind), name)
        cached = self._cache.get(ref.cache_key)
        if cached is not None:
            return cached

        owner = self._resolve(ref, set())
        self._cache.set(ref.cache_key, owner)
        logger.debug("Resolved owner of %s: %s", ref.cache_key, owner)
        return owner

    def _resolve(self, ref: ResourceRef, seen: set[str]) -> str:
        if ref.cache_key in seen:
            raise KubernetesAPIError(f"Owner reference cycle at {ref.cache_key}")
        seen.add(ref.cache_key)

        obj = self._client.get(ref.kind, ref.name, ref.namespace)
        if obj is None:
            return ref.name

        metadata = obj.get("metadata") or {}
        owner_refs = metadata.get("ownerReferences") or []
        if not owner_refs:
            return ref.name

        # An object may list several owners; the first one is followed.
        first = owner_refs[0]
        parent = ResourceRef(ref.namespace, ResourceKind.from_name(first["kind"]), first["name"])
        return self._resolve(parent, seen)
