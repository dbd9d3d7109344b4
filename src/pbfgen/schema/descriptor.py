"""Create schemas from protobuf ``FileDescriptorProto``/``FileDescriptorSet`` data.

This lets schemas compiled by ``protoc --descriptor_set_out`` (or built with
the ``protobuf`` package) be fed to the generator without a ``.proto`` parser.
"""

import logging

from google.protobuf.descriptor_pb2 import (
    DescriptorProto,
    EnumDescriptorProto,
    FieldDescriptorProto,
    FileDescriptorProto,
    FileDescriptorSet
)
from google.protobuf.message import DecodeError

from pbfgen.compiler.dispatch import is_packable
from pbfgen.errors import SchemaLoadError
from pbfgen.schema import Enum, Field, Message, Schema

logger = logging.getLogger(__name__)

# Map descriptor field types to scalar type keywords
_SCALAR_TYPES = {
    FieldDescriptorProto.TYPE_DOUBLE: 'double',
    FieldDescriptorProto.TYPE_FLOAT: 'float',
    FieldDescriptorProto.TYPE_INT64: 'int64',
    FieldDescriptorProto.TYPE_UINT64: 'uint64',
    FieldDescriptorProto.TYPE_INT32: 'int32',
    FieldDescriptorProto.TYPE_FIXED64: 'fixed64',
    FieldDescriptorProto.TYPE_FIXED32: 'fixed32',
    FieldDescriptorProto.TYPE_BOOL: 'bool',
    FieldDescriptorProto.TYPE_STRING: 'string',
    FieldDescriptorProto.TYPE_BYTES: 'bytes',
    FieldDescriptorProto.TYPE_UINT32: 'uint32',
    FieldDescriptorProto.TYPE_SFIXED32: 'sfixed32',
    FieldDescriptorProto.TYPE_SFIXED64: 'sfixed64',
    FieldDescriptorProto.TYPE_SINT32: 'sint32',
    FieldDescriptorProto.TYPE_SINT64: 'sint64',
}
_REFERENCE_TYPES = {FieldDescriptorProto.TYPE_MESSAGE, FieldDescriptorProto.TYPE_ENUM}


def _type_reference(type_name: str, package: str) -> str:
    """Strip the package from a fully-qualified name, keeping it anchored at the root."""
    prefix = f'.{package}.' if package else '.'
    if type_name.startswith(prefix):
        return '.' + type_name[len(prefix):]
    return type_name


def _convert_field(field: FieldDescriptorProto, package: str, syntax: int) -> Field:
    repeated = field.label == FieldDescriptorProto.LABEL_REPEATED

    if field.type in _SCALAR_TYPES:
        type_name = _SCALAR_TYPES[field.type]
    elif field.type in _REFERENCE_TYPES:
        type_name = _type_reference(field.type_name, package)
    else:
        raise SchemaLoadError(f'Unsupported type for field {field.name!r}: {field.type}')

    options: dict[str, str] = {}
    if field.HasField('default_value'):
        options['default'] = field.default_value
    if field.options.HasField('packed'):
        options['packed'] = 'true' if field.options.packed else 'false'
    elif syntax == 3 and repeated and (field.type == FieldDescriptorProto.TYPE_ENUM or is_packable(type_name)):
        # Repeated scalars are packed by default in proto3
        options['packed'] = 'true'

    return Field(name=field.name, type=type_name, tag=field.number, repeated=repeated, options=options)


def _convert_enum(enum: EnumDescriptorProto) -> Enum:
    return Enum(name=enum.name, values={value.name: value.number for value in enum.value})


def _convert_message(message: DescriptorProto, package: str, syntax: int) -> Message:
    return Message(
        name=message.name,
        fields=tuple(_convert_field(f, package, syntax) for f in message.field),
        enums=tuple(_convert_enum(e) for e in message.enum_type),
        # Map entries stay ordinary nested messages, so map fields are read and
        # written as repeated {'key': ..., 'value': ...} dicts
        messages=tuple(_convert_message(m, package, syntax) for m in message.nested_type),
    )


def schema_from_file_descriptor(file_proto: FileDescriptorProto) -> Schema:
    """Convert a single ``FileDescriptorProto`` into a :class:`Schema`."""
    syntax = 3 if file_proto.syntax == 'proto3' else 2
    package = file_proto.package
    return Schema(
        syntax=syntax,
        package=package or None,
        enums=tuple(_convert_enum(e) for e in file_proto.enum_type),
        messages=tuple(_convert_message(m, package, syntax) for m in file_proto.message_type),
    )


def schema_from_descriptor_set(data: bytes, file_name: str | None = None) -> Schema:
    """Convert a serialized ``FileDescriptorSet`` into a :class:`Schema`.

    Args:
        data: The serialized descriptor set.
        file_name: Name of the file to convert, defaults to the last file of
            the set, which ``protoc`` emits after its dependencies.

    Raises:
        SchemaLoadError: If the data is not a valid descriptor set or the file
            is not part of it.
    """
    file_descriptor_set = FileDescriptorSet()
    try:
        file_descriptor_set.ParseFromString(data)
    except DecodeError as e:
        raise SchemaLoadError(f'Failed to parse FileDescriptorSet: {e}') from e

    if not file_descriptor_set.file:
        raise SchemaLoadError('FileDescriptorSet contains no files')

    if file_name is None:
        file_proto = file_descriptor_set.file[-1]
    else:
        matches = [f for f in file_descriptor_set.file if f.name == file_name]
        if not matches:
            raise SchemaLoadError(f"File '{file_name}' not found in FileDescriptorSet")
        file_proto = matches[0]

    logger.debug(f'Converting {file_proto.name} ({len(file_proto.message_type)} messages)')
    return schema_from_file_descriptor(file_proto)


__all__ = ['schema_from_descriptor_set', 'schema_from_file_descriptor']
