from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

# Scalar type keywords understood by the generator.
# https://protobuf.dev/programming-guides/proto3/#scalar
INTEGER_TYPES = frozenset({
    'int32',
    'int64',
    'uint32',
    'uint64',
    'sint32',
    'sint64',
    'fixed32',
    'fixed64',
    'sfixed32',
    'sfixed64',
})
FLOAT_TYPES = frozenset({'float', 'double'})
SCALAR_TYPES = INTEGER_TYPES | FLOAT_TYPES | {'bool', 'string', 'bytes', 'enum'}


@dataclass(frozen=True)
class Field:
    name: str
    type: str
    tag: int
    repeated: bool = False
    options: Mapping[str, str] = field(default_factory=dict)
    # Resolved default, ``None`` when the field carries no default
    default: Any = None

    @property
    def packed(self) -> bool:
        return self.repeated and str(self.options.get('packed')).lower() == 'true'

    @property
    def explicit_default(self) -> str | None:
        return self.options.get('default')


@dataclass(frozen=True)
class Enum:
    name: str
    values: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class Message:
    name: str
    fields: tuple[Field, ...] = ()
    enums: tuple[Enum, ...] = ()
    messages: tuple[Message, ...] = ()


@dataclass(frozen=True)
class Schema:
    """The synthetic top-level node holding the top-level messages and enums."""
    syntax: int = 2
    package: str | None = None
    enums: tuple[Enum, ...] = ()
    messages: tuple[Message, ...] = ()


__all__ = [
    'FLOAT_TYPES',
    'INTEGER_TYPES',
    'SCALAR_TYPES',
    'Enum',
    'Field',
    'Message',
    'Schema',
]
