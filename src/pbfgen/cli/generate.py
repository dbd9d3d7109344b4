"""Generate Python source for a schema."""

import logging
from pathlib import Path
from textwrap import dedent

from pbfgen.compiler import compile_raw
from pbfgen.schema.loader import load_schema

logger = logging.getLogger(__name__)


def _run_compile(args) -> None:
    schema = load_schema(Path(args.schema))
    source = compile_raw(
        schema,
        no_read=args.no_read,
        no_write=args.no_write,
        exports=args.exports,
    )

    if args.output is None:
        print(source, end="")
        return

    output = Path(args.output)
    output.write_text(source)
    logger.info(f"Wrote {output}")


def add_parser(subparsers) -> None:
    parser = subparsers.add_parser(
        "compile",
        help="Generate Python readers and writers for a schema.",
        description=dedent("""
            Generate a Python module with one class per message holding its
            read and write functions, and one dict per enum.

            The schema is either a JSON description of a parsed .proto file or
            a binary FileDescriptorSet (*.desc, *.pb, *.binpb) as written by
            protoc --descriptor_set_out.
        """)
    )
    parser.add_argument("schema", help="Path to the schema (*.json, *.desc, *.pb, *.binpb)")
    parser.add_argument("-o", "--output", help="Write the generated source to this file instead of stdout")
    parser.add_argument("--no-read", action="store_true", help="Do not generate read functions")
    parser.add_argument("--no-write", action="store_true", help="Do not generate write functions")
    parser.add_argument(
        "--exports",
        default=None,
        help="Bind top-level types as attributes of this name (default: plain module globals)",
    )
    parser.set_defaults(func=_run_compile)
