"""Compile message schemas into Python readers and writers using AST."""
from __future__ import annotations

import ast
import logging
import types
from itertools import count
from typing import Any, Mapping

from pbfgen.compiler import nodes as n
from pbfgen.compiler.emitter import build_node
from pbfgen.compiler.fields import LOCAL_NAMES
from pbfgen.errors import UnresolvedTypeError
from pbfgen.schema import Schema
from pbfgen.schema.defaults import attach_defaults
from pbfgen.schema.loader import schema_from_dict
from pbfgen.schema.scope import ScopeContext, build_scope

logger = logging.getLogger(__name__)

HEADER = '# Code generated by pbfgen. DO NOT EDIT.\n'

_module_counter = count()


def _as_schema(schema: Schema | Mapping[str, Any]) -> Schema:
    return schema if isinstance(schema, Schema) else schema_from_dict(schema)


def build_context(schema: Schema | Mapping[str, Any]) -> ScopeContext:
    """Build the scope tree of ``schema`` with every field's default resolved."""
    schema = _as_schema(schema)
    return attach_defaults(build_scope(schema), schema.syntax)


def compile_ast(
    schema: Schema | Mapping[str, Any],
    *,
    no_read: bool = False,
    no_write: bool = False,
    exports: str | None = 'exports',
) -> ast.Module:
    """Compile ``schema`` into a Python module AST.

    Args:
        schema: The schema to compile.
        no_read: Skip generating the ``read`` functions.
        no_write: Skip generating the ``write`` functions.
        exports: Name of the object top-level types are bound onto, or
            ``None`` to leave them as plain module globals.

    Returns:
        The module defining one class per message and one dict per enum.

    Raises:
        UnresolvedTypeError: If a field type cannot be resolved or a top-level
            type name collides with a name the generated code relies on.
        DefaultCastError: If a default value cannot be cast to its field type.
    """
    root = build_context(schema)

    reserved = LOCAL_NAMES | {'staticmethod'} | ({exports} if exports is not None else set())
    body: list[ast.stmt] = []
    for ctx in root.children:
        if ctx.name in reserved:
            raise UnresolvedTypeError(f'Type name {ctx.name} collides with a name used by generated code')
        body.append(build_node(ctx, no_read=no_read, no_write=no_write))
        if exports is not None:
            # exports.Name = Name
            body.append(n.assign(n.attr(n.name(exports), ctx.name, ast.Store()), n.name(ctx.name)))

    module = ast.Module(body=body, type_ignores=[])
    ast.fix_missing_locations(module)
    logger.debug(f'Compiled {len(root.children)} top-level types')
    return module


def compile_raw(
    schema: Schema | Mapping[str, Any],
    *,
    no_read: bool = False,
    no_write: bool = False,
    exports: str | None = 'exports',
) -> str:
    """Compile ``schema`` and return the generated Python source."""
    module = compile_ast(schema, no_read=no_read, no_write=no_write, exports=exports)
    return HEADER + ast.unparse(module) + '\n'


def compile_module(
    schema: Schema | Mapping[str, Any],
    *,
    no_read: bool = False,
    no_write: bool = False,
    name: str | None = None,
) -> types.ModuleType:
    """Compile ``schema`` into a ready to use module.

    Top-level messages and enums are attributes of the returned module, nested
    ones are reachable through them, e.g. ``module.Outer.Inner.read``.
    """
    module_name = name or f'pbfgen.generated_{next(_module_counter)}'
    module = types.ModuleType(module_name)

    tree = compile_ast(schema, no_read=no_read, no_write=no_write, exports='exports')
    code = compile(tree, f'<{module_name}>', 'exec')
    namespace: dict[str, object] = {'__name__': module_name, 'exports': module}
    exec(code, namespace)
    return module


__all__ = ['HEADER', 'build_context', 'compile_ast', 'compile_module', 'compile_raw']
