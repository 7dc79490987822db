"""Shared pytest fixtures and fakes for the forwarder test suite."""

from __future__ import annotations

import grpc
import pytest

from loggregator_forwarder.wire import SendResponse


class FakeRpcError(grpc.RpcError):
    """RpcError carrying a fixed status code, as raised by a real stub."""

    def __init__(self, code: grpc.StatusCode):
        super().__init__(code.name)
        self._code = code

    def code(self) -> grpc.StatusCode:
        return self._code


class FakeChannel:
    """Stands in for a grpc.Channel; replays queued outcomes per call.

    Each queued outcome is either an exception to raise or None for success.
    Once the queue is empty every call succeeds.
    """

    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [])
        self.method = None
        self.requests: list[bytes] = []
        self.timeouts: list[float | None] = []
        self.closed = False

    def unary_unary(self, method, request_serializer=None, response_deserializer=None):
        self.method = method

        def call(request, timeout=None):
            self.requests.append(request_serializer(request))
            self.timeouts.append(timeout)
            if self.outcomes:
                outcome = self.outcomes.pop(0)
                if outcome is not None:
                    raise outcome
            return response_deserializer(SendResponse().SerializeToString())

        return call

    def close(self):
        self.closed = True


class FakeKubernetesClient:
    """Returns canned objects keyed by (kind name, name) and records each call."""

    def __init__(self, objects=None):
        self.objects = objects or {}
        self.calls: list[tuple[str, str, str]] = []

    def get(self, kind, name, namespace):
        self.calls.append((kind.value, name, namespace))
        return self.objects.get((kind.value, name))


def owned_by(kind: str, name: str) -> dict:
    return {"metadata": {"ownerReferences": [{"kind": kind, "name": name}]}}


@pytest.fixture()
def unavailable() -> FakeRpcError:
    return FakeRpcError(grpc.StatusCode.UNAVAILABLE)


@pytest.fixture()
def sample_record() -> dict:
    return {
        "log": "test_payload",
        "stream": "stderr",
        "kubernetes": {
            "owner": "test_owner",
            "pod_id": "test_pod_id",
            "pod_name": "test_pod_name",
            "namespace_name": "test_namespace",
            "container_name": "test_container",
            "host": "test_host",
            "labels": {
                "cloudfoundry.org/guid": "test_guid",
            },
        },
    }
