"""Convert an enriched container log record into a Loggregator envelope."""

from __future__ import annotations

import math

from loggregator_forwarder.models import as_mapping, as_string
from loggregator_forwarder.wire import LOG_TYPE_ERR, LOG_TYPE_OUT, Envelope

LABEL_GUID = "cloudfoundry.org/guid"
LABEL_SOURCE_TYPE = "cloudfoundry.org/source_type"

DEFAULT_SOURCE_TYPE = "APP"
WEB_PROCESS_SOURCE_TYPE = "APP/PROC/WEB"

# envelope tag -> kubernetes metadata key
_TAG_FIELDS = {
    "pod_name": "pod_name",
    "namespace": "namespace_name",
    "container": "container_name",
    "cluster": "host",
}


def _is_number(value: str) -> bool:
    try:
        return math.isfinite(float(value))
    except ValueError:
        return False


def get_instance_id(record: dict) -> str:
    """Return the pod's ordinal suffix (``web-2`` -> ``"2"``) or its UID."""
    k8s = as_mapping(record.get("kubernetes"))
    pod_name = as_string(k8s.get("pod_name"))
    index = pod_name.split("-")[-1]
    if _is_number(index):
        return index
    return as_string(k8s.get("pod_id"))


def get_source_type(labels: dict) -> str:
    source_type = labels.get(LABEL_SOURCE_TYPE)
    if not isinstance(source_type, str):
        source_type = DEFAULT_SOURCE_TYPE
    if source_type == DEFAULT_SOURCE_TYPE:
        return WEB_PROCESS_SOURCE_TYPE
    return source_type


def build_envelope(record: dict, observed_time: float) -> Envelope:
    """Build a log envelope from a record observed at *observed_time* (epoch seconds).

    Missing or malformed fields fall back to empty strings; the ``tags`` map
    always carries source_type, pod_name, namespace, container and cluster.
    """
    k8s = as_mapping(record.get("kubernetes"))
    labels = as_mapping(k8s.get("labels"))

    envelope = Envelope()
    envelope.timestamp = math.floor(observed_time * 10**9)
    envelope.source_id = as_string(labels.get(LABEL_GUID))
    envelope.instance_id = get_instance_id(record)

    envelope.log.payload = as_string(record.get("log")).strip().encode("utf-8")
    envelope.log.type = LOG_TYPE_ERR if record.get("stream") == "stderr" else LOG_TYPE_OUT

    envelope.tags["source_type"] = get_source_type(labels)
    for tag, key in _TAG_FIELDS.items():
        envelope.tags[tag] = as_string(k8s.get(key))

    return envelope
