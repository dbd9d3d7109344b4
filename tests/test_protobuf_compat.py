"""Check generated code against the official protobuf implementation."""

import pytest
from google.protobuf import message_factory
from google.protobuf.descriptor_pb2 import FieldDescriptorProto, FileDescriptorProto
from google.protobuf.descriptor_pool import DescriptorPool

from pbfgen.compiler import compile_module
from pbfgen.io import Pbf
from pbfgen.schema.descriptor import schema_from_file_descriptor

LABEL_OPTIONAL = FieldDescriptorProto.LABEL_OPTIONAL
LABEL_REPEATED = FieldDescriptorProto.LABEL_REPEATED


def create_file_descriptor(syntax: str) -> FileDescriptorProto:
    """Create a file with a Measurement message using most field types."""
    file_proto = FileDescriptorProto()
    file_proto.name = f'measurement_{syntax}.proto'
    file_proto.package = f'pbfgen.test.{syntax}'
    file_proto.syntax = syntax

    status = file_proto.enum_type.add()
    status.name = 'Status'
    for number, symbol in enumerate(['UNKNOWN', 'OK', 'FAILED']):
        value = status.value.add()
        value.name = symbol
        value.number = number

    sample = file_proto.message_type.add()
    sample.name = 'Measurement'

    reading = sample.nested_type.add()
    reading.name = 'Reading'
    for number, (name, type_) in enumerate([
        ('sensor', FieldDescriptorProto.TYPE_STRING),
        ('value', FieldDescriptorProto.TYPE_DOUBLE),
    ], start=1):
        field = reading.field.add()
        field.name = name
        field.number = number
        field.type = type_
        field.label = LABEL_OPTIONAL

    fields = [
        ('id', FieldDescriptorProto.TYPE_UINT64, LABEL_OPTIONAL, None),
        ('offset', FieldDescriptorProto.TYPE_SINT32, LABEL_OPTIONAL, None),
        ('delta', FieldDescriptorProto.TYPE_INT32, LABEL_OPTIONAL, None),
        ('scale', FieldDescriptorProto.TYPE_FLOAT, LABEL_OPTIONAL, None),
        ('valid', FieldDescriptorProto.TYPE_BOOL, LABEL_OPTIONAL, None),
        ('label', FieldDescriptorProto.TYPE_STRING, LABEL_OPTIONAL, None),
        ('payload', FieldDescriptorProto.TYPE_BYTES, LABEL_OPTIONAL, None),
        ('checksum', FieldDescriptorProto.TYPE_FIXED32, LABEL_OPTIONAL, None),
        ('stamp', FieldDescriptorProto.TYPE_SFIXED64, LABEL_OPTIONAL, None),
        ('status', FieldDescriptorProto.TYPE_ENUM, LABEL_OPTIONAL, f'.{file_proto.package}.Status'),
        ('samples', FieldDescriptorProto.TYPE_INT32, LABEL_REPEATED, None),
        ('history', FieldDescriptorProto.TYPE_ENUM, LABEL_REPEATED, f'.{file_proto.package}.Status'),
        ('tags', FieldDescriptorProto.TYPE_STRING, LABEL_REPEATED, None),
        ('readings', FieldDescriptorProto.TYPE_MESSAGE, LABEL_REPEATED,
         f'.{file_proto.package}.Measurement.Reading'),
        ('primary', FieldDescriptorProto.TYPE_MESSAGE, LABEL_OPTIONAL,
         f'.{file_proto.package}.Measurement.Reading'),
    ]
    for number, (name, type_, label, type_name) in enumerate(fields, start=1):
        field = sample.field.add()
        field.name = name
        field.number = number
        field.type = type_
        field.label = label
        if type_name is not None:
            field.type_name = type_name
    return file_proto


def _message_class(file_proto: FileDescriptorProto):
    pool = DescriptorPool()
    pool.Add(file_proto)
    descriptor = pool.FindMessageTypeByName(f'{file_proto.package}.Measurement')
    return message_factory.GetMessageClass(descriptor)


def _measurement() -> dict:
    return {
        'id': 1 << 40,
        'offset': -12,
        'delta': -3,
        'scale': 0.5,
        'valid': True,
        'label': 'thermo',
        'payload': b'\x00\xff',
        'checksum': 0xDEADBEEF,
        'stamp': -(1 << 50),
        'status': 2,
        'samples': [1, -1, 300],
        'history': [1, 2, 0],
        'tags': ['a', 'b'],
        'readings': [{'sensor': 'left', 'value': 1.25}, {'sensor': 'right', 'value': -2.0}],
        'primary': {'sensor': 'main'},
    }


@pytest.mark.parametrize('syntax', ['proto2', 'proto3'])
def test_generated_writer_matches_protobuf(syntax):
    file_proto = create_file_descriptor(syntax)
    module = compile_module(schema_from_file_descriptor(file_proto))
    obj = _measurement()

    pbf = Pbf()
    module.Measurement.write(obj, pbf)
    expected = _message_class(file_proto)(**obj).SerializeToString()

    assert pbf.finish() == expected


@pytest.mark.parametrize('syntax', ['proto2', 'proto3'])
def test_generated_reader_parses_protobuf(syntax):
    file_proto = create_file_descriptor(syntax)
    module = compile_module(schema_from_file_descriptor(file_proto))
    obj = _measurement()

    data = _message_class(file_proto)(**obj).SerializeToString()
    result = module.Measurement.read(Pbf(data))

    assert result == {**obj, 'primary': {'sensor': 'main', 'value': 0.0}}


def test_protobuf_parses_generated_output():
    file_proto = create_file_descriptor('proto3')
    module = compile_module(schema_from_file_descriptor(file_proto))

    pbf = Pbf()
    module.Measurement.write({'id': 5, 'samples': [4, 5], 'primary': {'sensor': 'x'}}, pbf)

    message = _message_class(file_proto).FromString(pbf.finish())
    assert message.id == 5
    assert list(message.samples) == [4, 5]
    assert message.HasField('primary')
    assert message.primary.sensor == 'x'
    assert message.label == ''


def create_map_file_descriptor() -> FileDescriptorProto:
    """Create a proto3 file with a Labels message holding a map<string, int32>."""
    file_proto = FileDescriptorProto(name='labels.proto', package='pbfgen.test.maps', syntax='proto3')
    labels = file_proto.message_type.add()
    labels.name = 'Labels'

    entry = labels.nested_type.add()
    entry.name = 'CountsEntry'
    entry.options.map_entry = True
    for number, (name, type_) in enumerate([
        ('key', FieldDescriptorProto.TYPE_STRING),
        ('value', FieldDescriptorProto.TYPE_INT32),
    ], start=1):
        entry.field.add(name=name, number=number, type=type_, label=LABEL_OPTIONAL)

    field = labels.field.add(name='counts', number=1, type=FieldDescriptorProto.TYPE_MESSAGE, label=LABEL_REPEATED)
    field.type_name = '.pbfgen.test.maps.Labels.CountsEntry'
    return file_proto


def test_map_fields_match_protobuf():
    file_proto = create_map_file_descriptor()
    module = compile_module(schema_from_file_descriptor(file_proto))

    pool = DescriptorPool()
    pool.Add(file_proto)
    labels_class = message_factory.GetMessageClass(pool.FindMessageTypeByName('pbfgen.test.maps.Labels'))

    data = labels_class(counts={'a': 1}).SerializeToString()
    assert module.Labels.read(Pbf(data)) == {'counts': [{'key': 'a', 'value': 1}]}

    pbf = Pbf()
    module.Labels.write({'counts': [{'key': 'a', 'value': 1}, {'key': 'b', 'value': 2}]}, pbf)
    assert dict(labels_class.FromString(pbf.finish()).counts) == {'a': 1, 'b': 2}
