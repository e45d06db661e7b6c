"""Protobuf messages of the Prometheus remote write protocol.

Only the subset needed to send plain samples is declared:

    message WriteRequest { repeated TimeSeries timeseries = 1; }
    message TimeSeries   { repeated Label labels = 1; repeated Sample samples = 2; }
    message Label        { string name = 1; string value = 2; }
    message Sample       { double value = 1; int64 timestamp = 2; }

Field numbers and types match prompb/types.proto and prompb/remote.proto, so
the encoded bytes are accepted by any remote write receiver.
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_Field = descriptor_pb2.FieldDescriptorProto

PACKAGE = "prometheus"


def _add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    repeated: bool = False,
    type_name: str | None = None,
) -> None:
    field = message.field.add()
    field.name = name
    field.number = number
    field.type = field_type
    field.label = _Field.LABEL_REPEATED if repeated else _Field.LABEL_OPTIONAL
    if type_name:
        field.type_name = f".{PACKAGE}.{type_name}"


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto()
    file_proto.name = "librespeed_exporter/remote_write.proto"
    file_proto.package = PACKAGE
    file_proto.syntax = "proto3"

    label = file_proto.message_type.add()
    label.name = "Label"
    _add_field(label, "name", 1, _Field.TYPE_STRING)
    _add_field(label, "value", 2, _Field.TYPE_STRING)

    sample = file_proto.message_type.add()
    sample.name = "Sample"
    _add_field(sample, "value", 1, _Field.TYPE_DOUBLE)
    _add_field(sample, "timestamp", 2, _Field.TYPE_INT64)

    series = file_proto.message_type.add()
    series.name = "TimeSeries"
    _add_field(series, "labels", 1, _Field.TYPE_MESSAGE, repeated=True, type_name="Label")
    _add_field(series, "samples", 2, _Field.TYPE_MESSAGE, repeated=True, type_name="Sample")

    write_request = file_proto.message_type.add()
    write_request.name = "WriteRequest"
    _add_field(
        write_request,
        "timeseries",
        1,
        _Field.TYPE_MESSAGE,
        repeated=True,
        type_name="TimeSeries",
    )

    return file_proto


# Private pool so these names cannot clash with another prometheus package
# registered in the default pool.
_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))


Label = _message_class("Label")
Sample = _message_class("Sample")
TimeSeries = _message_class("TimeSeries")
WriteRequest = _message_class("WriteRequest")

__all__ = ["Label", "Sample", "TimeSeries", "WriteRequest"]
