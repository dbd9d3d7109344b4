"""Reference cursor over the protobuf wire format used by generated code."""
from __future__ import annotations

import struct
from typing import Any, Callable, Iterable

from pbfgen.errors import PbfDecodeError

# Wire types
VARINT = 0    # int32, int64, uint32, uint64, sint32, sint64, bool, enum
FIXED64 = 1   # double, fixed64, sfixed64
BYTES = 2     # string, bytes, embedded messages, packed repeated fields
FIXED32 = 5   # float, fixed32, sfixed32

_FIXED32 = struct.Struct('<I')
_SFIXED32 = struct.Struct('<i')
_FIXED64 = struct.Struct('<Q')
_SFIXED64 = struct.Struct('<q')
_FLOAT = struct.Struct('<f')
_DOUBLE = struct.Struct('<d')

_UINT64_MASK = (1 << 64) - 1


def encode_varint(value: int) -> bytes:
    """Encode ``value`` as a base 128 varint, negative values as 64-bit two's complement."""
    value &= _UINT64_MASK
    out = bytearray()
    while value > 0x7F:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def zigzag_encode(value: int) -> int:
    return value << 1 if value >= 0 else (-value << 1) - 1


def zigzag_decode(value: int) -> int:
    return (value >> 1) ^ -(value & 1)


class Pbf:
    """Read and write protobuf encoded data.

    A ``Pbf`` created from bytes is read from ``pos`` onwards; a ``Pbf``
    created without data is written to and its content returned by
    :meth:`finish`.
    """

    __slots__ = ('buf', 'pos', 'type', 'length')

    def __init__(self, buf: bytes | bytearray | memoryview | None = None):
        self.buf = bytearray(buf) if buf is not None else bytearray()
        self.pos = 0
        self.type = 0
        self.length = len(self.buf)

    # Reading -------------------------------------------------------------

    def read_fields(self, read_field: Callable[[int, Any, 'Pbf'], None], result: Any, end: int | None = None) -> Any:
        """Dispatch every field up to ``end`` to ``read_field`` and return ``result``.

        Fields that ``read_field`` does not consume are skipped.
        """
        end = end or self.length
        while self.pos < end:
            val = self.read_varint()
            tag = val >> 3
            start = self.pos
            self.type = val & 0x7
            read_field(tag, result, self)
            if self.pos == start:
                self.skip(val)
        return result

    def read_message(self, read_field: Callable[[int, Any, 'Pbf'], None], result: Any) -> Any:
        end = self.read_varint() + self.pos
        return self.read_fields(read_field, result, end)

    def read_varint(self, signed: bool = False) -> int:
        result = 0
        shift = 0
        buf = self.buf
        while True:
            if self.pos >= self.length:
                raise PbfDecodeError('Truncated varint')
            byte = buf[self.pos]
            self.pos += 1
            result |= (byte & 0x7F) << shift
            if byte < 0x80:
                break
            shift += 7
            if shift >= 70:
                raise PbfDecodeError('Expected varint not more than 10 bytes')
        result &= _UINT64_MASK
        if signed and result >= 1 << 63:
            result -= 1 << 64
        return result

    def read_svarint(self) -> int:
        return zigzag_decode(self.read_varint())

    def read_boolean(self) -> bool:
        return bool(self.read_varint())

    def _unpack(self, fmt: struct.Struct) -> Any:
        end = self.pos + fmt.size
        if end > self.length:
            raise PbfDecodeError(f'Truncated {fmt.size}-byte value at {self.pos}')
        value = fmt.unpack_from(self.buf, self.pos)[0]
        self.pos = end
        return value

    def read_fixed32(self) -> int:
        return self._unpack(_FIXED32)

    def read_sfixed32(self) -> int:
        return self._unpack(_SFIXED32)

    def read_fixed64(self) -> int:
        return self._unpack(_FIXED64)

    def read_sfixed64(self) -> int:
        return self._unpack(_SFIXED64)

    def read_float(self) -> float:
        return self._unpack(_FLOAT)

    def read_double(self) -> float:
        return self._unpack(_DOUBLE)

    def read_bytes(self) -> bytes:
        end = self.read_varint() + self.pos
        if end > self.length:
            raise PbfDecodeError(f'Truncated length-delimited value at {self.pos}')
        value = bytes(self.buf[self.pos:end])
        self.pos = end
        return value

    def read_string(self) -> str:
        return self.read_bytes().decode('utf-8')

    def _read_packed(self, read: Callable[[], Any], arr: list | None) -> list:
        arr = arr if arr is not None else []
        # Parsers must accept unpacked values for packed fields and vice versa
        if self.type != BYTES:
            arr.append(read())
            return arr
        end = self.read_varint() + self.pos
        while self.pos < end:
            arr.append(read())
        return arr

    def read_packed_varint(self, arr: list | None = None, signed: bool = False) -> list:
        return self._read_packed(lambda: self.read_varint(signed), arr)

    def read_packed_svarint(self, arr: list | None = None) -> list:
        return self._read_packed(self.read_svarint, arr)

    def read_packed_boolean(self, arr: list | None = None) -> list:
        return self._read_packed(self.read_boolean, arr)

    def read_packed_float(self, arr: list | None = None) -> list:
        return self._read_packed(self.read_float, arr)

    def read_packed_double(self, arr: list | None = None) -> list:
        return self._read_packed(self.read_double, arr)

    def read_packed_fixed32(self, arr: list | None = None) -> list:
        return self._read_packed(self.read_fixed32, arr)

    def read_packed_sfixed32(self, arr: list | None = None) -> list:
        return self._read_packed(self.read_sfixed32, arr)

    def read_packed_fixed64(self, arr: list | None = None) -> list:
        return self._read_packed(self.read_fixed64, arr)

    def read_packed_sfixed64(self, arr: list | None = None) -> list:
        return self._read_packed(self.read_sfixed64, arr)

    def skip(self, val: int) -> None:
        wire_type = val & 0x7
        if wire_type == VARINT:
            self.read_varint()
            return
        if wire_type == BYTES:
            end = self.read_varint() + self.pos
        elif wire_type == FIXED32:
            end = self.pos + 4
        elif wire_type == FIXED64:
            end = self.pos + 8
        else:
            raise PbfDecodeError(f'Unimplemented type: {wire_type}')
        if end > self.length:
            raise PbfDecodeError(f'Truncated field of wire type {wire_type} at {self.pos}')
        self.pos = end

    # Writing -------------------------------------------------------------

    def write_tag(self, tag: int, wire_type: int) -> None:
        self.write_varint((tag << 3) | wire_type)

    def write_varint(self, value: int) -> None:
        self.buf += encode_varint(int(value))

    def write_svarint(self, value: int) -> None:
        self.write_varint(zigzag_encode(int(value)))

    def write_boolean(self, value: bool) -> None:
        self.write_varint(1 if value else 0)

    def write_fixed32(self, value: int) -> None:
        self.buf += _FIXED32.pack(value)

    def write_sfixed32(self, value: int) -> None:
        self.buf += _SFIXED32.pack(value)

    def write_fixed64(self, value: int) -> None:
        self.buf += _FIXED64.pack(value)

    def write_sfixed64(self, value: int) -> None:
        self.buf += _SFIXED64.pack(value)

    def write_float(self, value: float) -> None:
        self.buf += _FLOAT.pack(value)

    def write_double(self, value: float) -> None:
        self.buf += _DOUBLE.pack(value)

    def write_bytes(self, value: bytes) -> None:
        self.write_varint(len(value))
        self.buf += value

    def write_string(self, value: str) -> None:
        self.write_bytes(value.encode('utf-8'))

    def write_raw_message(self, fn: Callable[[Any, 'Pbf'], None], obj: Any) -> None:
        """Write ``obj`` with ``fn`` prefixed by its encoded length."""
        start = len(self.buf)
        fn(obj, self)
        length = len(self.buf) - start
        self.buf[start:start] = encode_varint(length)

    def write_message(self, tag: int, fn: Callable[[Any, 'Pbf'], None], obj: Any) -> None:
        self.write_tag(tag, BYTES)
        self.write_raw_message(fn, obj)

    def _write_packed(self, tag: int, write: Callable[[Any], None], arr: Iterable[Any]) -> None:
        def write_all(values: Iterable[Any], pbf: 'Pbf') -> None:
            for value in values:
                write(value)
        if arr:
            self.write_message(tag, write_all, arr)

    def write_packed_varint(self, tag: int, arr: Iterable[int]) -> None:
        self._write_packed(tag, self.write_varint, arr)

    def write_packed_svarint(self, tag: int, arr: Iterable[int]) -> None:
        self._write_packed(tag, self.write_svarint, arr)

    def write_packed_boolean(self, tag: int, arr: Iterable[bool]) -> None:
        self._write_packed(tag, self.write_boolean, arr)

    def write_packed_float(self, tag: int, arr: Iterable[float]) -> None:
        self._write_packed(tag, self.write_float, arr)

    def write_packed_double(self, tag: int, arr: Iterable[float]) -> None:
        self._write_packed(tag, self.write_double, arr)

    def write_packed_fixed32(self, tag: int, arr: Iterable[int]) -> None:
        self._write_packed(tag, self.write_fixed32, arr)

    def write_packed_sfixed32(self, tag: int, arr: Iterable[int]) -> None:
        self._write_packed(tag, self.write_sfixed32, arr)

    def write_packed_fixed64(self, tag: int, arr: Iterable[int]) -> None:
        self._write_packed(tag, self.write_fixed64, arr)

    def write_packed_sfixed64(self, tag: int, arr: Iterable[int]) -> None:
        self._write_packed(tag, self.write_sfixed64, arr)

    def write_bytes_field(self, tag: int, value: bytes) -> None:
        self.write_tag(tag, BYTES)
        self.write_bytes(value)

    def write_string_field(self, tag: int, value: str) -> None:
        self.write_tag(tag, BYTES)
        self.write_string(value)

    def write_fixed32_field(self, tag: int, value: int) -> None:
        self.write_tag(tag, FIXED32)
        self.write_fixed32(value)

    def write_sfixed32_field(self, tag: int, value: int) -> None:
        self.write_tag(tag, FIXED32)
        self.write_sfixed32(value)

    def write_fixed64_field(self, tag: int, value: int) -> None:
        self.write_tag(tag, FIXED64)
        self.write_fixed64(value)

    def write_sfixed64_field(self, tag: int, value: int) -> None:
        self.write_tag(tag, FIXED64)
        self.write_sfixed64(value)

    def write_varint_field(self, tag: int, value: int) -> None:
        self.write_tag(tag, VARINT)
        self.write_varint(value)

    def write_svarint_field(self, tag: int, value: int) -> None:
        self.write_tag(tag, VARINT)
        self.write_svarint(value)

    def write_boolean_field(self, tag: int, value: bool) -> None:
        self.write_tag(tag, VARINT)
        self.write_boolean(value)

    def write_float_field(self, tag: int, value: float) -> None:
        self.write_tag(tag, FIXED32)
        self.write_float(value)

    def write_double_field(self, tag: int, value: float) -> None:
        self.write_tag(tag, FIXED64)
        self.write_double(value)

    def finish(self) -> bytes:
        """Return the written data."""
        self.length = len(self.buf)
        return bytes(self.buf)


__all__ = ['BYTES', 'FIXED32', 'FIXED64', 'VARINT', 'Pbf', 'encode_varint', 'zigzag_decode', 'zigzag_encode']
