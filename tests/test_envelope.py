"""Tests for envelope construction."""

import time

import pytest

from loggregator_forwarder.envelope import build_envelope, get_instance_id, get_source_type
from loggregator_forwarder.wire import LOG_TYPE_ERR, LOG_TYPE_OUT

TAG_KEYS = {"source_type", "pod_name", "namespace", "container", "cluster"}


class TestBuildEnvelope:
    def test_full_record(self, sample_record):
        now = time.time()
        env = build_envelope(sample_record, now)

        assert env.log.type == LOG_TYPE_ERR
        assert env.log.payload == b"test_payload"
        assert env.timestamp == int(now * 10**9)
        assert env.source_id == "test_guid"
        assert env.instance_id == "test_pod_id"
        assert dict(env.tags) == {
            "source_type": "APP/PROC/WEB",
            "pod_name": "test_pod_name",
            "namespace": "test_namespace",
            "container": "test_container",
            "cluster": "test_host",
        }

    def test_stdout_record(self):
        record = {
            "log": " hi ",
            "stream": "stdout",
            "kubernetes": {"pod_name": "web-2", "namespace_name": "ns", "labels": {}},
        }
        env = build_envelope(record, 1700000000.0)

        assert env.log.payload == b"hi"
        assert env.log.type == LOG_TYPE_OUT
        assert env.instance_id == "2"
        assert env.timestamp == 1700000000 * 10**9
        assert env.tags["source_type"] == "APP/PROC/WEB"
        assert env.tags["pod_name"] == "web-2"
        assert env.tags["namespace"] == "ns"
        assert env.tags["container"] == ""
        assert env.tags["cluster"] == ""
        assert env.source_id == ""

    def test_missing_stream_is_out(self):
        env = build_envelope({"log": "x"}, 0)
        assert env.log.type == LOG_TYPE_OUT

    def test_payload_whitespace_trimmed(self):
        env = build_envelope({"log": "\t line with newline\n"}, 0)
        assert env.log.payload == b"line with newline"

    def test_non_ascii_payload(self):
        env = build_envelope({"log": "héllo ✓\n"}, 0)
        assert env.log.payload == "héllo ✓".encode("utf-8")

    def test_empty_record_has_all_tags(self):
        env = build_envelope({}, 0)
        assert set(env.tags) == TAG_KEYS
        assert env.tags["source_type"] == "APP/PROC/WEB"
        assert env.log.payload == b""
        assert env.instance_id == ""

    def test_malformed_metadata_treated_as_missing(self):
        record = {"log": 42, "kubernetes": {"labels": "oops", "pod_name": None}}
        env = build_envelope(record, 0)
        assert set(env.tags) == TAG_KEYS
        assert env.log.payload == b""
        assert env.source_id == ""

    def test_null_source_type_label_defaults_to_web(self):
        record = {"kubernetes": {"labels": {"cloudfoundry.org/source_type": None}}}
        assert build_envelope(record, 0).tags["source_type"] == "APP/PROC/WEB"

    def test_timestamp_is_floored(self):
        assert build_envelope({}, -1.5e-9).timestamp == -2
        assert build_envelope({}, 1.5e-9).timestamp == 1

    def test_staging_source_type_passes_through(self, sample_record):
        sample_record["kubernetes"]["pod_name"] = "test_pod_name-44"
        sample_record["kubernetes"]["labels"] = {"cloudfoundry.org/source_type": "STG"}
        env = build_envelope(sample_record, 0)
        assert env.tags["source_type"] == "STG"
        assert env.instance_id == "44"
        assert env.source_id == ""

    def test_does_not_modify_record(self, sample_record):
        before = repr(sample_record)
        build_envelope(sample_record, 0)
        assert repr(sample_record) == before

    def test_serializes(self, sample_record):
        env = build_envelope(sample_record, 1.5)
        assert env.SerializeToString()


class TestGetInstanceId:
    @pytest.mark.parametrize("pod_name, expected", [
        ("web-2", "2"),
        ("test_pod_name-44", "44"),
        ("my-app-staging-0", "0"),
        ("7", "7"),
    ])
    def test_ordinal_suffix(self, pod_name, expected):
        record = {"kubernetes": {"pod_name": pod_name, "pod_id": "uid"}}
        assert get_instance_id(record) == expected

    @pytest.mark.parametrize("pod_name", [
        "web-7d9f8c6b5-x2k4p",
        "web-",
        "web",
        "",
        "web-nan",
        "web-inf",
    ])
    def test_falls_back_to_pod_id(self, pod_name):
        record = {"kubernetes": {"pod_name": pod_name, "pod_id": "uid-123"}}
        assert get_instance_id(record) == "uid-123"

    def test_no_metadata(self):
        assert get_instance_id({}) == ""


class TestGetSourceType:
    def test_default(self):
        assert get_source_type({}) == "APP/PROC/WEB"

    def test_app_is_rewritten(self):
        assert get_source_type({"cloudfoundry.org/source_type": "APP"}) == "APP/PROC/WEB"

    def test_other_values_pass_through(self):
        assert get_source_type({"cloudfoundry.org/source_type": "STG"}) == "STG"
        assert get_source_type({"cloudfoundry.org/source_type": "TASK"}) == "TASK"

    def test_non_string_label_treated_as_missing(self):
        assert get_source_type({"cloudfoundry.org/source_type": None}) == "APP/PROC/WEB"
        assert get_source_type({"cloudfoundry.org/source_type": 7}) == "APP/PROC/WEB"

    def test_unprefixed_label_is_ignored(self):
        assert get_source_type({"source_type": "STG"}) == "APP/PROC/WEB"
