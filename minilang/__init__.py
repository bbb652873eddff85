# MiniLang language package
# This package provides a parser, a tree-walking interpreter and program reports for MiniLang.
from .errors import MiniError, ParseError
from .interpreter import run_program, compile_module, Interpreter
from .parser import parse_program

__all__ = [
    'run_program',
    'compile_module',
    'parse_program',
    'Interpreter',
    'MiniError',
    'ParseError',
]
