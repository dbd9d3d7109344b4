"""Compute the value each field takes when it is absent from the wire."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from pbfgen.errors import DefaultCastError
from pbfgen.schema import FLOAT_TYPES, INTEGER_TYPES, Enum, Field
from pbfgen.schema.scope import ScopeContext

logger = logging.getLogger(__name__)

# Zero value of every scalar type, bytes and messages have none
_ZERO_VALUES: dict[str, Any] = {
    **{name: 0 for name in INTEGER_TYPES},
    **{name: 0.0 for name in FLOAT_TYPES},
    'enum': 0,
    'string': '',
    'bool': False,
}


def cast_default(field: Field, value: str) -> Any:
    """Cast the literal ``value`` of an explicit default to the field's type."""
    try:
        if field.type == 'string':
            return value
        if field.type in FLOAT_TYPES:
            return float(value)
        if field.type == 'bool':
            return value == 'true'
        if field.type in INTEGER_TYPES:
            return int(value, 10)
    except ValueError as e:
        raise DefaultCastError(
            f'Cannot cast default {value!r} of field {field.name!r} to {field.type}'
        ) from e
    raise DefaultCastError(f'Unexpected type for default of field {field.name!r}: {field.type}')


def resolve_default(field: Field, scope: ScopeContext, syntax: int) -> Field:
    """Return a copy of ``field`` with its resolved default attached.

    Args:
        field: The field as declared in the schema.
        scope: The scope of the message declaring the field.
        syntax: The schema syntax version (2 or 3).

    Returns:
        A new field whose ``default`` is the value to assume when the field is
        absent on the wire, or ``None`` when it has no default.

    Raises:
        DefaultCastError: If an explicit default cannot be cast to the field type.
    """
    # Proto3 does not support overriding defaults
    explicit = None if syntax == 3 else field.explicit_default

    target = scope.resolve(field.type)
    if target is not None and isinstance(target.node, Enum):
        default: Any = target.node.values.get(explicit, 0) if explicit is not None else 0
    elif explicit is not None:
        default = cast_default(field, explicit)
    else:
        default = _ZERO_VALUES.get(field.type)

    # Defaults are not supported for repeated fields
    if field.repeated:
        default = None

    return replace(field, default=default)


def attach_defaults(scope: ScopeContext, syntax: int) -> ScopeContext:
    """Resolve the defaults of every field in ``scope`` and its descendants."""
    for child in scope.children:
        attach_defaults(child, syntax)

    if scope.fields:
        scope.fields = tuple(resolve_default(f, scope, syntax) for f in scope.fields)
        logger.debug(f'Resolved defaults for {scope.name}')
    return scope


__all__ = ['attach_defaults', 'cast_default', 'resolve_default']
