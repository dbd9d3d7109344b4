"""Map scalar field types to the wire-codec primitives that read and write them."""
from __future__ import annotations

from pbfgen.errors import UnresolvedTypeError

# Map scalar types to the primitive kind used by the runtime, e.g. ``sint32``
# is read with ``read_svarint`` and written with ``write_svarint_field``
PRIMITIVE_KIND = {
    'string': 'string',
    'float': 'float',
    'double': 'double',
    'bool': 'boolean',
    'enum': 'varint',
    'uint32': 'varint',
    'uint64': 'varint',
    'int32': 'varint',
    'int64': 'varint',
    'sint32': 'svarint',
    'sint64': 'svarint',
    'fixed32': 'fixed32',
    'fixed64': 'fixed64',
    'sfixed32': 'sfixed32',
    'sfixed64': 'sfixed64',
    'bytes': 'bytes',
}

# Varint types holding two's complement values are decoded as signed
SIGNED_VARINT_TYPES = frozenset({'int32', 'int64', 'enum'})

# Kinds that may use the packed encoding for repeated fields
PACKABLE_KINDS = frozenset(PRIMITIVE_KIND.values()) - {'string', 'bytes'}


def primitive_kind(type_name: str) -> str:
    """Return the primitive kind for the scalar ``type_name``."""
    try:
        return PRIMITIVE_KIND[type_name]
    except KeyError:
        raise UnresolvedTypeError(f'Unexpected type: {type_name}') from None


def read_method(type_name: str, packed: bool = False) -> str:
    """Return the name of the runtime method that reads ``type_name``."""
    kind = primitive_kind(type_name)
    return f'read_packed_{kind}' if packed else f'read_{kind}'


def write_method(type_name: str, packed: bool = False) -> str:
    """Return the name of the runtime method that writes a tagged ``type_name``."""
    kind = primitive_kind(type_name)
    return f'write_packed_{kind}' if packed else f'write_{kind}_field'


def is_signed_varint(type_name: str) -> bool:
    return type_name in SIGNED_VARINT_TYPES


def is_packable(type_name: str) -> bool:
    return PRIMITIVE_KIND.get(type_name) in PACKABLE_KINDS


__all__ = [
    'PACKABLE_KINDS',
    'PRIMITIVE_KIND',
    'SIGNED_VARINT_TYPES',
    'is_packable',
    'is_signed_varint',
    'primitive_kind',
    'read_method',
    'write_method',
]
