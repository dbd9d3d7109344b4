"""Render the resolved scope tree of a schema."""

from pathlib import Path
from textwrap import dedent

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from pbfgen.compiler import build_context
from pbfgen.compiler.fields import is_packed, resolve_type
from pbfgen.schema import Field
from pbfgen.schema.loader import load_schema
from pbfgen.schema.scope import ScopeContext


def _field_label(ctx: ScopeContext, field: Field) -> Text:
    target = resolve_type(field, ctx)

    label = Text()
    label.append(f"{field.tag:>3} ", style="cyan")
    label.append(field.name, style="bold")
    label.append(f": {'repeated ' if field.repeated else ''}{field.type}")
    if target is not None and target.name != field.type:
        label.append(f" -> {target.name}", style="green")
    if is_packed(field, target):
        label.append(" [packed]", style="magenta")
    if field.default is not None:
        label.append(f" = {field.default!r}", style="yellow")
    return label


def _add_scope(tree: Tree, ctx: ScopeContext) -> None:
    kind = "enum" if ctx.is_enum else "message"
    branch = tree.add(Text.assemble((f"{kind} ", "dim"), (ctx.name, "bold blue")))

    if ctx.is_enum:
        for symbol, value in ctx.node.values.items():
            branch.add(f"{symbol} = {value}")
        return

    for field in ctx.fields:
        branch.add(_field_label(ctx, field))
    for child in ctx.children:
        _add_scope(branch, child)


def render_scopes(root: ScopeContext, title: str) -> Tree:
    """Create a tree showing every type, its fields and their resolved defaults."""
    tree = Tree(Text(title, style="bold"))
    for child in root.children:
        _add_scope(tree, child)
    return tree


def _run_scopes(args) -> None:
    schema_path = Path(args.schema)
    schema = load_schema(schema_path)
    root = build_context(schema)

    console = Console()
    console.print(render_scopes(root, f"{schema_path.name} (proto{schema.syntax})"))


def add_parser(subparsers) -> None:
    parser = subparsers.add_parser(
        "scopes",
        help="Show the types of a schema with their resolved fields.",
        description=dedent("""
            Display every message and enum of a schema as a tree, with each
            field's tag, type, resolved type reference, packing and default.
        """)
    )
    parser.add_argument("schema", help="Path to the schema (*.json, *.desc, *.pb, *.binpb)")
    parser.set_defaults(func=_run_scopes)
