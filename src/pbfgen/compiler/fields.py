"""Generate the read and write statements for a single field."""
from __future__ import annotations

import ast

from pbfgen.compiler import dispatch
from pbfgen.compiler import nodes as n
from pbfgen.errors import UnresolvedTypeError
from pbfgen.schema import Field
from pbfgen.schema.scope import ScopeContext

# Names of the variables used inside generated functions, kept apart from
# type names so that they never shadow a top-level type
OBJ = '_obj'
PBF = '_pbf'
ITEM = '_item'
TAG = '_tag'
END = '_end'
LOCAL_NAMES = frozenset({OBJ, PBF, ITEM, TAG, END})


def resolve_type(field: Field, scope: ScopeContext) -> ScopeContext | None:
    """Return the message or enum scope ``field`` refers to, ``None`` for scalars."""
    target = scope.resolve(field.type)
    if target is None:
        if field.type not in dispatch.PRIMITIVE_KIND:
            raise UnresolvedTypeError(f'Unexpected type: {field.type} (field {scope.name}.{field.name})')
        return None
    if not (target.is_message or target.is_enum):
        raise UnresolvedTypeError(f'Unexpected type: {target.name}')
    return target


def is_packable(field: Field, target: ScopeContext | None) -> bool:
    """Return whether ``field`` is repeated and of a kind that has a packed encoding."""
    if not field.repeated:
        return False
    if target is None:
        return dispatch.is_packable(field.type)
    return target.is_enum


def is_packed(field: Field, target: ScopeContext | None) -> bool:
    return field.packed and is_packable(field, target)


def _signed_args(type_name: str) -> list[ast.expr]:
    return [n.const(True)] if dispatch.is_signed_varint(type_name) else []


def read_value(field: Field, scope: ScopeContext) -> ast.expr:
    """Build the expression reading one value of ``field`` from ``pbf``."""
    target = resolve_type(field, scope)
    if target is not None and target.is_message:
        # Type.read(pbf, pbf.read_varint() + pbf.pos)
        end = ast.BinOp(
            left=n.method(PBF, 'read_varint'),
            op=ast.Add(),
            right=n.attr(n.name(PBF), 'pos')
        )
        return n.call(n.attr(n.dotted(target.name), 'read'), [n.name(PBF), end])
    if target is not None:
        # Enums are encoded as their int32 value
        return n.method(PBF, 'read_varint', [n.const(True)])
    return n.method(PBF, dispatch.read_method(field.type), _signed_args(field.type))


def read_statement(field: Field, scope: ScopeContext) -> ast.stmt:
    """Build the statement storing a value of ``field`` read from ``pbf`` into ``obj``."""
    target = resolve_type(field, scope)
    if is_packable(field, target):
        # Parsers accept both encodings, so packable fields always read through
        # pbf.read_packed_kind(obj['name'], ...) which extends the list in place
        type_name = 'enum' if target is not None else field.type
        return n.expr(n.method(
            PBF,
            dispatch.read_method(type_name, packed=True),
            [n.item(OBJ, field.name)] + _signed_args(type_name)
        ))

    value = read_value(field, scope)
    if field.repeated:
        # obj['name'].append(value)
        return n.expr(n.call(n.attr(n.item(OBJ, field.name), 'append'), [value]))
    # obj['name'] = value
    return n.assign(n.item(OBJ, field.name, ast.Store()), value)


def write_call(field: Field, scope: ScopeContext, value: ast.expr) -> ast.Call:
    """Build the call writing ``value`` as a tagged entry of ``field``."""
    target = resolve_type(field, scope)
    tag = n.const(field.tag)
    if target is not None and target.is_message:
        # pbf.write_message(tag, Type.write, value)
        return n.method(PBF, 'write_message', [tag, n.attr(n.dotted(target.name), 'write'), value])

    type_name = 'enum' if target is not None else field.type
    return n.method(PBF, dispatch.write_method(type_name, is_packed(field, target)), [tag, value])


def presence_test(field: Field, scope: ScopeContext) -> ast.expr:
    """Build the guard deciding whether a singular ``field`` is written.

    Values equal to a zero or empty default are skipped by truthiness, other
    defaults by comparison. Message fields are only checked for presence.
    """
    value = n.method(OBJ, 'get', [n.const(field.name)])
    is_set = n.compare(value, ast.IsNot(), n.const(None))

    target = resolve_type(field, scope)
    if (target is not None and target.is_message) or field.default is None:
        return is_set
    if not field.default:
        return value
    return n.and_(is_set, n.compare(n.item(OBJ, field.name), ast.NotEq(), n.const(field.default)))


def write_statement(field: Field, scope: ScopeContext) -> ast.stmt:
    """Build the guarded statement writing ``obj[field.name]`` into ``pbf``."""
    target = resolve_type(field, scope)

    if field.repeated:
        values_test = n.method(OBJ, 'get', [n.const(field.name)])
        if is_packed(field, target):
            # if obj.get('name'): pbf.write_packed_kind(tag, obj['name'])
            return n.if_(values_test, [n.expr(write_call(field, scope, n.item(OBJ, field.name)))])
        # if obj.get('name'):
        #     for item in obj['name']:
        #         pbf.write_kind_field(tag, item)
        loop = n.for_(ITEM, n.item(OBJ, field.name), [n.expr(write_call(field, scope, n.name(ITEM)))])
        return n.if_(values_test, [loop])

    return n.if_(
        presence_test(field, scope),
        [n.expr(write_call(field, scope, n.item(OBJ, field.name)))]
    )


__all__ = [
    'is_packable',
    'is_packed',
    'presence_test',
    'read_statement',
    'read_value',
    'resolve_type',
    'write_call',
    'write_statement',
]
