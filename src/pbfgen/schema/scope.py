"""Lexical scopes mirroring the nesting of messages and enums."""
from __future__ import annotations

import logging
from typing import Iterator

from pbfgen.schema import Enum, Field, Message, Schema

logger = logging.getLogger(__name__)


class ScopeContext:
    """Naming and lookup record for one schema node.

    Each context links to its ``enclosing`` context so that type references
    can be resolved outward, with names declared in deeper scopes shadowing
    names declared further out.
    """

    __slots__ = ('node', 'enclosing', 'name', 'is_root', 'children', 'fields', '_by_name')

    def __init__(self, node: Schema | Message | Enum, enclosing: ScopeContext | None = None):
        self.node = node
        self.enclosing = enclosing
        self.children: list[ScopeContext] = []
        self._by_name: dict[str, ScopeContext] = {}
        self.fields: tuple[Field, ...] = node.fields if isinstance(node, Message) else ()

        if enclosing is None:
            self.name = ''
            self.is_root = False
        elif enclosing.name:
            self.name = f'{enclosing.name}.{node.name}'
            self.is_root = False
        else:
            self.name = node.name
            self.is_root = True

    def __repr__(self) -> str:
        return f'ScopeContext({self.name or "<root>"!r})'

    @property
    def short_name(self) -> str:
        return self.name.rpartition('.')[2]

    @property
    def is_message(self) -> bool:
        return isinstance(self.node, Message)

    @property
    def is_enum(self) -> bool:
        return isinstance(self.node, Enum)

    @property
    def top(self) -> ScopeContext:
        ctx = self
        while ctx.enclosing is not None:
            ctx = ctx.enclosing
        return ctx

    def lookup(self, name: str) -> ScopeContext | None:
        """Find ``name`` among the local children, then in enclosing scopes."""
        if (child := self._by_name.get(name)) is not None:
            return child
        if self.enclosing is not None:
            return self.enclosing.lookup(name)
        return None

    def _walk(self, path: list[str]) -> ScopeContext | None:
        ctx: ScopeContext | None = self
        for part in path:
            ctx = ctx._by_name.get(part)
            if ctx is None:
                return None
        return ctx

    def resolve(self, type_name: str) -> ScopeContext | None:
        """Resolve a possibly dotted type reference from this scope.

        The whole path is matched against this scope first and then against
        each enclosing scope, so the innermost complete match wins. A leading
        ``.`` anchors the path at the top-level scope.
        """
        if type_name.startswith('.'):
            return self.top._walk(type_name[1:].split('.'))

        path = type_name.split('.')
        ctx: ScopeContext | None = self
        while ctx is not None:
            if (found := ctx._walk(path)) is not None:
                return found
            ctx = ctx.enclosing
        return None

    def walk(self) -> Iterator[ScopeContext]:
        """Yield this context and all of its descendants depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()


def build_scope(node: Schema | Message | Enum, enclosing: ScopeContext | None = None) -> ScopeContext:
    """Build the scope tree for ``node`` and all of its nested definitions."""
    ctx = ScopeContext(node, enclosing)
    if enclosing is not None:
        enclosing.children.append(ctx)
        enclosing._by_name[node.name] = ctx

    if not isinstance(node, Enum):
        for enum in node.enums:
            build_scope(enum, ctx)
        for message in node.messages:
            build_scope(message, ctx)

    if enclosing is None:
        logger.debug(f'Built scope tree with {sum(1 for _ in ctx.walk()) - 1} types')
    return ctx


__all__ = ['ScopeContext', 'build_scope']
