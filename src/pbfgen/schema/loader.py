"""Load schemas from JSON-compatible descriptions of parsed ``.proto`` files."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from pbfgen.errors import SchemaLoadError
from pbfgen.schema import Enum, Field, Message, Schema

logger = logging.getLogger(__name__)

_DESCRIPTOR_SUFFIXES = {'.desc', '.pb', '.binpb'}
_UNPACKABLE_TYPES = {'string', 'bytes'}


def _parse_syntax(value: Any) -> int:
    if value in (None, 2, '2', 'proto2'):
        return 2
    if value in (3, '3', 'proto3'):
        return 3
    raise SchemaLoadError(f'Unsupported syntax: {value!r}')


def _option_literal(value: Any) -> str:
    # Options are literals as written in the schema source
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def _parse_field(data: Mapping[str, Any], syntax: int) -> Field:
    try:
        name, type_name, tag = data['name'], data['type'], int(data['tag'])
    except KeyError as e:
        raise SchemaLoadError(f'Field {data.get("name", "<unnamed>")!r} is missing {e}') from e

    repeated = bool(data.get('repeated', False))
    options = {k: _option_literal(v) for k, v in (data.get('options') or {}).items()}
    if syntax == 3 and repeated and 'packed' not in options and type_name not in _UNPACKABLE_TYPES:
        # Repeated scalars and enums are packed by default in proto3, the
        # option is ignored for message types once references are resolved
        options['packed'] = 'true'
    return Field(name=name, type=type_name, tag=tag, repeated=repeated, options=options)


def _parse_enum(data: Mapping[str, Any]) -> Enum:
    if 'name' not in data:
        raise SchemaLoadError('Enum is missing a name')
    values: dict[str, int] = {}
    for symbol, value in (data.get('values') or {}).items():
        # Either ``{"A": 1}`` or ``{"A": {"value": 1, "options": {}}}``
        if isinstance(value, Mapping):
            value = value.get('value')
        if not isinstance(value, int) or isinstance(value, bool):
            raise SchemaLoadError(f'Enum value {data.get("name")}.{symbol} must be an integer')
        values[symbol] = value
    return Enum(name=data['name'], values=values)


def _parse_message(data: Mapping[str, Any], syntax: int) -> Message:
    if 'name' not in data:
        raise SchemaLoadError('Message is missing a name')
    return Message(
        name=data['name'],
        fields=tuple(_parse_field(f, syntax) for f in data.get('fields') or ()),
        enums=tuple(_parse_enum(e) for e in data.get('enums') or ()),
        messages=tuple(_parse_message(m, syntax) for m in data.get('messages') or ()),
    )


def schema_from_dict(data: Mapping[str, Any]) -> Schema:
    """Create a :class:`Schema` from a parsed ``.proto`` description.

    Args:
        data: A mapping with an optional ``syntax`` and ``package`` and lists of
            top-level ``messages`` and ``enums``. Messages hold ``fields``
            (``name``, ``type``, ``tag``, ``repeated``, ``options``) and nested
            ``messages`` and ``enums``.

    Returns:
        The loaded schema.

    Raises:
        SchemaLoadError: If the description is malformed.
    """
    if not isinstance(data, Mapping):
        raise SchemaLoadError(f'Expected a mapping, got {type(data).__name__}')
    syntax = _parse_syntax(data.get('syntax'))
    return Schema(
        syntax=syntax,
        package=data.get('package'),
        enums=tuple(_parse_enum(e) for e in data.get('enums') or ()),
        messages=tuple(_parse_message(m, syntax) for m in data.get('messages') or ()),
    )


def load_schema(path: str | Path) -> Schema:
    """Load a schema from a JSON description or a binary ``FileDescriptorSet``."""
    path = Path(path)
    if path.suffix.lower() in _DESCRIPTOR_SUFFIXES:
        from pbfgen.schema.descriptor import schema_from_descriptor_set
        logger.debug(f'Loading descriptor set from {path}')
        return schema_from_descriptor_set(path.read_bytes())

    logger.debug(f'Loading JSON schema from {path}')
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise SchemaLoadError(f'Invalid JSON in {path}: {e}') from e
    return schema_from_dict(data)


__all__ = ['load_schema', 'schema_from_dict']
