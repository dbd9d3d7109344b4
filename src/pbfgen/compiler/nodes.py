"""Helper functions to create Python AST nodes more concisely."""
from __future__ import annotations

import ast
from typing import Any


def name(id: str, ctx=None) -> ast.Name:
    """Create a Name node."""
    return ast.Name(id=id, ctx=ctx or ast.Load())


def dotted(path: str) -> ast.expr:
    """Create a Name or chain of Attribute nodes from ``a.b.c``."""
    head, *rest = path.split('.')
    node: ast.expr = name(head)
    for part in rest:
        node = attr(node, part)
    return node


def attr(value: ast.expr, attr: str, ctx=None) -> ast.Attribute:
    """Create an Attribute node."""
    return ast.Attribute(value=value, attr=attr, ctx=ctx or ast.Load())


def const(value: Any) -> ast.Constant:
    return ast.Constant(value=value)


def call(func: ast.expr, args: list[ast.expr] | None = None, keywords: list[ast.keyword] | None = None) -> ast.Call:
    """Create a Call node."""
    return ast.Call(func=func, args=args or [], keywords=keywords or [])


def method(obj: str, method: str, args: list[ast.expr] | None = None) -> ast.Call:
    """Create a ``obj.method(*args)`` call."""
    return call(attr(name(obj), method), args)


def subscript(value: ast.expr, slice: ast.expr, ctx=None) -> ast.Subscript:
    """Create a Subscript node."""
    return ast.Subscript(value=value, slice=slice, ctx=ctx or ast.Load())


def item(obj: str, key: str, ctx=None) -> ast.Subscript:
    """Create a ``obj['key']`` subscript."""
    return subscript(name(obj), const(key), ctx)


def assign(target: ast.expr, value: ast.expr) -> ast.Assign:
    """Create an assignment statement."""
    return ast.Assign(targets=[target], value=value)


def expr(value: ast.expr) -> ast.Expr:
    """Wrap an expression into a statement."""
    return ast.Expr(value=value)


def if_(test: ast.expr, body: list[ast.stmt], orelse: list[ast.stmt] | None = None) -> ast.If:
    return ast.If(test=test, body=body, orelse=orelse or [])


def for_(target: str, iter: ast.expr, body: list[ast.stmt]) -> ast.For:
    return ast.For(target=name(target, ast.Store()), iter=iter, body=body, orelse=[])


def compare(left: ast.expr, op: ast.cmpop, right: ast.expr) -> ast.Compare:
    return ast.Compare(left=left, ops=[op], comparators=[right])


def and_(*values: ast.expr) -> ast.expr:
    if len(values) == 1:
        return values[0]
    return ast.BoolOp(op=ast.And(), values=list(values))


def dict_(entries: list[tuple[str, ast.expr]]) -> ast.Dict:
    return ast.Dict(keys=[const(k) for k, _ in entries], values=[v for _, v in entries])


def function(
    func_name: str,
    args: list[str],
    body: list[ast.stmt],
    defaults: list[ast.expr] | None = None,
    decorators: list[ast.expr] | None = None,
) -> ast.FunctionDef:
    """Create a function definition."""
    return ast.FunctionDef(
        name=func_name,
        args=ast.arguments(
            posonlyargs=[],
            args=[ast.arg(arg=a, annotation=None) for a in args],
            kwonlyargs=[],
            kw_defaults=[],
            defaults=defaults or []
        ),
        body=body or [ast.Pass()],
        decorator_list=decorators or [],
        returns=None
    )


def class_(class_name: str, body: list[ast.stmt]) -> ast.ClassDef:
    """Create a class definition without bases."""
    return ast.ClassDef(
        name=class_name,
        bases=[],
        keywords=[],
        body=body or [ast.Pass()],
        decorator_list=[]
    )
