import pytest

from pbfgen.compiler.dispatch import (
    is_packable,
    is_signed_varint,
    primitive_kind,
    read_method,
    write_method
)
from pbfgen.errors import UnresolvedTypeError


@pytest.mark.parametrize(
    'type_name, read, write',
    [
        ('string', 'read_string', 'write_string_field'),
        ('bytes', 'read_bytes', 'write_bytes_field'),
        ('bool', 'read_boolean', 'write_boolean_field'),
        ('float', 'read_float', 'write_float_field'),
        ('double', 'read_double', 'write_double_field'),
        ('int32', 'read_varint', 'write_varint_field'),
        ('uint64', 'read_varint', 'write_varint_field'),
        ('enum', 'read_varint', 'write_varint_field'),
        ('sint32', 'read_svarint', 'write_svarint_field'),
        ('sint64', 'read_svarint', 'write_svarint_field'),
        ('fixed32', 'read_fixed32', 'write_fixed32_field'),
        ('sfixed64', 'read_sfixed64', 'write_sfixed64_field'),
    ],
)
def test_scalar_methods(type_name, read, write):
    assert read_method(type_name) == read
    assert write_method(type_name) == write


def test_packed_methods():
    assert read_method('sint64', packed=True) == 'read_packed_svarint'
    assert write_method('bool', packed=True) == 'write_packed_boolean'
    assert write_method('enum', packed=True) == 'write_packed_varint'


def test_signed_varints():
    assert is_signed_varint('int32')
    assert is_signed_varint('int64')
    assert is_signed_varint('enum')
    assert not is_signed_varint('uint32')
    assert not is_signed_varint('sint32')


def test_packable():
    assert is_packable('double')
    assert is_packable('enum')
    assert not is_packable('string')
    assert not is_packable('bytes')
    assert not is_packable('SomeMessage')


def test_unknown_type():
    with pytest.raises(UnresolvedTypeError, match='Unexpected type: Point'):
        primitive_kind('Point')
