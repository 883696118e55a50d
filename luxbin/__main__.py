"""CLI entry point for the Luxbin interpreter.

Usage:
    python -m luxbin [-v|-vv|-vvv|-vvvv] [--seed N] [--step-limit N] [--grammar] [--json] <program_file>
    python -m luxbin [-v...] --emit-ast <program_file>
    python -m luxbin [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --seed        Seed the random source used by photon_random and the quantum builtins
  --step-limit  Maximum number of interpreter steps (default 100,000)
  --grammar     Parse with the reference Lark grammar instead of the hand-written parser
  --json        Print the result record as JSON instead of the output lines
  --emit-ast    Parse the given .lux file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from .ast_json import ast_to_obj, ast_from_obj
from .errors import LuxbinError
from .grammar import parse_with_grammar
from .interpreter import STEP_LIMIT, Interpreter, RunResult, parse_program


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def printable(text: str) -> str:
    # lone surrogates left by string indexing show as U+FFFD
    return text.encode('utf-16-le', 'surrogatepass').decode('utf-16-le', 'replace')


def report(result: RunResult, as_json: bool) -> None:
    if as_json:
        print(printable(json.dumps(result.to_dict(), ensure_ascii=False)))
    else:
        for line in result.output:
            print(printable(line))
    if result.error is not None:
        if not as_json:
            print(f"Error: {result.error}", file=sys.stderr)
        sys.exit(1)


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(prog='luxbin', description="Luxbin (Light Language) interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--seed', type=int, default=None, help='seed for the random source')
    parser.add_argument('--step-limit', type=int, default=STEP_LIMIT, help='maximum number of interpreter steps')
    parser.add_argument('--grammar', action='store_true', help='parse with the reference Lark grammar')
    parser.add_argument('--json', action='store_true', help='print the result record as JSON')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='LUX_FILE', help='emit AST JSON for the given .lux file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Luxbin program file (.lux) to execute')
    args = parser.parse_args(argv)

    parse = parse_with_grammar if args.grammar else parse_program

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_source(program_file)
        try:
            ast_program = parse(source)
        except LuxbinError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            sys.exit(1)
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    interpreter = Interpreter(seed=args.seed, step_limit=args.step_limit, debug_level=args.v)

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        try:
            ast_program = ast_from_obj(data)
        except (KeyError, TypeError, ValueError) as e:
            print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
            sys.exit(1)
        report(interpreter.run(ast_program), args.json)
        return

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --emit-ast/--ast')
    source = read_source(Path(args.program))
    try:
        ast_program = parse(source)
    except LuxbinError as e:
        report(RunResult([], 0, e.message), args.json)
        return
    report(interpreter.run(ast_program), args.json)


if __name__ == '__main__':
    main()
