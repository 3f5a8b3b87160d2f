"""CLI entry point for the reckon interpreter.

Usage:
    python -m reckon [-v|-vv|-vvv] [options] <program_file>
    python -m reckon [-v...] --emit-ast <program_file>
    python -m reckon [-v...] [options] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given program and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file
  --backend     Numeric backend: bignumber, fraction, decimal or complex
  --strict      One-letter variable names; `xy` means `x * y`

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. Each result is printed as
`source => output`; `print` statements print their text as is.
"""

import argparse
import builtins
import json
import sys
from pathlib import Path

from .ast_json import ast_to_obj, ast_from_obj
from .backends import BACKENDS
from .errors import ReckonError
from .interpreter import RunOptions, Session, parse_program


def read_program(path: str) -> str:
    program_file = Path(path)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        return f.read()


def execute(session: Session) -> None:
    result = session.run()
    while result.status == 'needs_input':
        try:
            text = builtins.input(f"input ({result.prompt}): " if result.prompt else 'input: ')
        except EOFError:
            text = ''
        result = session.resume(text)
    for line in result.lines():
        print(line)
    if result.error is not None:
        print(result.error.format(session.source), file=sys.stderr)
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="reckon numeric scripting language")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='PROGRAM_FILE', help='emit AST JSON for the given program')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('--backend', choices=sorted(BACKENDS), default='bignumber', help='numeric backend')
    parser.add_argument('--strict', action='store_true', help='enable strict mode')
    parser.add_argument('--precision', type=int, default=20, help='significant digits (decimal, complex)')
    parser.add_argument('--places', type=int, default=20, help='decimal places of quotients (bignumber)')
    parser.add_argument('--seed', type=int, default=None, help='seed for random()')
    parser.add_argument('program', nargs='?', help='program file to execute')
    args = parser.parse_args(argv)

    options = RunOptions(backend=args.backend, strict=args.strict, precision=args.precision,
                         decimal_places=args.places, seed=args.seed, debug_level=args.v)

    # Emit AST mode
    if args.emit_ast:
        source = read_program(args.emit_ast)
        try:
            program = parse_program(source, args.strict)
        except ReckonError as e:
            print(e.err.format(source), file=sys.stderr)
            sys.exit(1)
        program_file = Path(args.emit_ast)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(ast_to_obj(program), out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            program = ast_from_obj(json.load(f))
        execute(Session(program.source, options, program=program))
        return

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --emit-ast/--ast')
    execute(Session(read_program(args.program), options))


if __name__ == '__main__':
    main()
