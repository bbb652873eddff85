"""CLI entry point for the MiniLang interpreter.

Usage:
    python -m minilang [-v|-vv|-vvv] [--globals FILE] [--functions FILE] <program_file>
    python -m minilang --emit-ast <program_file>
    python -m minilang [-v...] [--globals FILE] [--functions FILE] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given program file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file
  --globals     Write the global variables report after the load phase
  --functions   Write the function details report after the load phase

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path

from .ast import Program
from .ast_json import ast_to_obj, ast_from_obj
from .errors import MiniError, ParseError
from .interpreter import Interpreter
from .parser import parse_program
from .report import write_function_details, write_global_variables

# Each MiniLang call nests a handful of Python frames.
RECURSION_LIMIT = 10000


def _read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def _parse(path: Path) -> Program:
    source = _read_source(path)
    try:
        return parse_program(source)
    except ParseError as e:
        print(f"Syntax error: {e}", file=sys.stderr)
        sys.exit(1)


def _execute(program: Program, args: argparse.Namespace) -> None:
    interpreter = Interpreter(debug_level=args.v)
    try:
        interpreter.load(program)
        if args.globals:
            write_global_variables(interpreter.global_env, args.globals)
        if args.functions:
            write_function_details(interpreter.functions, args.functions)
        interpreter.run_main()
    except MiniError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        interpreter.close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="MiniLang interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='PROGRAM_FILE', help='emit AST JSON for the given program file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('--globals', metavar='FILE', help='write the global variables report to FILE')
    parser.add_argument('--functions', metavar='FILE', help='write the function details report to FILE')
    parser.add_argument('program', nargs='?', help='MiniLang program file to execute')
    args = parser.parse_args(argv)

    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        obj = ast_to_obj(_parse(program_file))
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        data = json.loads(_read_source(ast_path))
        _execute(ast_from_obj(data), args)
        return

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --emit-ast/--ast')
    _execute(_parse(Path(args.program)), args)


if __name__ == '__main__':
    main()
