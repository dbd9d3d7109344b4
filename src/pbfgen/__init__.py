from importlib.metadata import version

__version__ = version("pbfgen")

from .compiler import compile_ast, compile_module, compile_raw
from .io.pbf import Pbf
from .schema import Enum, Field, Message, Schema

compile = compile_module

__all__ = [
    'Enum',
    'Field',
    'Message',
    'Pbf',
    'Schema',
    '__version__',
    'compile',
    'compile_ast',
    'compile_module',
    'compile_raw',
]
