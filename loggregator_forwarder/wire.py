"""Loggregator v2 protobuf messages.

Only the subset of ``loggregator/v2/envelope.proto`` and ``ingress.proto``
needed to send log envelopes is described here. Field numbers match the
upstream definitions, so the bytes on the wire are what a Loggregator agent
expects. The message classes are created at import time from an in-code
``FileDescriptorProto`` instead of protoc output.
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "loggregator.v2"
INGRESS_SEND_METHOD = f"/{PACKAGE}.Ingress/Send"

_FIELD = descriptor_pb2.FieldDescriptorProto


def _add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    label: int = _FIELD.LABEL_OPTIONAL,
    type_name: str | None = None,
    oneof_index: int | None = None,
) -> None:
    field = message.field.add(name=name, number=number, type=field_type, label=label)
    if type_name is not None:
        field.type_name = type_name
    if oneof_index is not None:
        field.oneof_index = oneof_index


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="loggregator/v2/envelope.proto",
        package=PACKAGE,
        syntax="proto3",
    )

    log = file_proto.message_type.add(name="Log")
    log_type = log.enum_type.add(name="Type")
    log_type.value.add(name="OUT", number=0)
    log_type.value.add(name="ERR", number=1)
    _add_field(log, "payload", 1, _FIELD.TYPE_BYTES)
    _add_field(log, "type", 2, _FIELD.TYPE_ENUM, type_name=f".{PACKAGE}.Log.Type")

    envelope = file_proto.message_type.add(name="Envelope")
    tags_entry = envelope.nested_type.add(name="TagsEntry")
    tags_entry.options.map_entry = True
    _add_field(tags_entry, "key", 1, _FIELD.TYPE_STRING)
    _add_field(tags_entry, "value", 2, _FIELD.TYPE_STRING)
    envelope.oneof_decl.add(name="message")
    _add_field(envelope, "timestamp", 1, _FIELD.TYPE_INT64)
    _add_field(envelope, "source_id", 2, _FIELD.TYPE_STRING)
    _add_field(
        envelope, "log", 4, _FIELD.TYPE_MESSAGE,
        type_name=f".{PACKAGE}.Log", oneof_index=0,
    )
    _add_field(envelope, "instance_id", 8, _FIELD.TYPE_STRING)
    _add_field(
        envelope, "tags", 17, _FIELD.TYPE_MESSAGE,
        label=_FIELD.LABEL_REPEATED, type_name=f".{PACKAGE}.Envelope.TagsEntry",
    )

    batch = file_proto.message_type.add(name="EnvelopeBatch")
    _add_field(
        batch, "batch", 1, _FIELD.TYPE_MESSAGE,
        label=_FIELD.LABEL_REPEATED, type_name=f".{PACKAGE}.Envelope",
    )

    file_proto.message_type.add(name="SendResponse")
    return file_proto


_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(_build_file_descriptor().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(_POOL.FindMessageTypeByName(f"{PACKAGE}.{name}"))


Log = _message_class("Log")
Envelope = _message_class("Envelope")
EnvelopeBatch = _message_class("EnvelopeBatch")
SendResponse = _message_class("SendResponse")

_LOG_TYPE = Log.DESCRIPTOR.enum_types_by_name["Type"]
LOG_TYPE_OUT: int = _LOG_TYPE.values_by_name["OUT"].number
LOG_TYPE_ERR: int = _LOG_TYPE.values_by_name["ERR"].number
