"""Emit the class definitions of messages and the value maps of enums."""
from __future__ import annotations

import ast
import logging

from pbfgen.compiler import fields as f
from pbfgen.compiler import nodes as n
from pbfgen.errors import UnresolvedTypeError
from pbfgen.schema import Enum
from pbfgen.schema.scope import ScopeContext

logger = logging.getLogger(__name__)

# Attributes every generated message class defines
METHOD_NAMES = frozenset({'read', '_read_field', 'write'})


def _staticmethod() -> ast.expr:
    return n.name('staticmethod')


def compile_dest(scope: ScopeContext) -> ast.Dict:
    """Build the literal the reader starts from.

    Repeated fields start as empty lists and fields with a default start at
    that default.
    """
    entries: list[tuple[str, ast.expr]] = []
    for field in scope.fields:
        if field.repeated:
            entries.append((field.name, ast.List(elts=[], ctx=ast.Load())))
        elif field.default is not None:
            entries.append((field.name, n.const(field.default)))
    return n.dict_(entries)


def build_read(scope: ScopeContext) -> list[ast.stmt]:
    """Build the ``read`` and ``_read_field`` functions of a message."""
    # return pbf.read_fields(Name._read_field, {...}, end)
    read = n.function(
        'read',
        [f.PBF, f.END],
        [ast.Return(value=n.method(f.PBF, 'read_fields', [
            n.attr(n.dotted(scope.name), '_read_field'),
            compile_dest(scope),
            n.name(f.END),
        ]))],
        defaults=[n.const(None)],
        decorators=[_staticmethod()],
    )

    # One branch per field in declaration order, duplicate tags match the first
    branches: list[ast.stmt] = []
    for field in reversed(scope.fields):
        test = n.compare(n.name(f.TAG), ast.Eq(), n.const(field.tag))
        branches = [n.if_(test, [f.read_statement(field, scope)], branches)]

    read_field = n.function('_read_field', [f.TAG, f.OBJ, f.PBF], branches, decorators=[_staticmethod()])
    return [read, read_field]


def build_write(scope: ScopeContext) -> list[ast.stmt]:
    """Build the ``write`` function of a message."""
    body = [f.write_statement(field, scope) for field in scope.fields]
    return [n.function('write', [f.OBJ, f.PBF], body, decorators=[_staticmethod()])]


def build_enum(scope: ScopeContext) -> ast.Assign:
    """Build ``Name = {'SYMBOL': value, ...}`` preserving declaration order."""
    assert isinstance(scope.node, Enum)
    values = [(symbol, n.const(value)) for symbol, value in scope.node.values.items()]
    return n.assign(n.name(scope.short_name, ast.Store()), n.dict_(values))


def build_message(scope: ScopeContext, *, no_read: bool = False, no_write: bool = False) -> ast.ClassDef:
    """Build the class holding the reader and writer of a message and its nested types."""
    body: list[ast.stmt] = []
    if not no_read:
        body.extend(build_read(scope))
    if not no_write:
        body.extend(build_write(scope))
    for child in scope.children:
        if child.short_name in METHOD_NAMES:
            raise UnresolvedTypeError(f'Nested type {child.name} collides with a generated method')
        body.append(build_node(child, no_read=no_read, no_write=no_write))

    logger.debug(f'Emitted message {scope.name} ({len(scope.fields)} fields)')
    return n.class_(scope.short_name, body)


def build_node(scope: ScopeContext, *, no_read: bool = False, no_write: bool = False) -> ast.stmt:
    if scope.is_enum:
        return build_enum(scope)
    return build_message(scope, no_read=no_read, no_write=no_write)


__all__ = ['METHOD_NAMES', 'build_enum', 'build_message', 'build_node', 'build_read', 'build_write', 'compile_dest']
