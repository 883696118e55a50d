# Luxbin ("Light Language") package
# This package provides the lexer, parser and interpreter of the Luxbin playground language.
from .errors import LuxbinError, LexError, ParseError
from .interpreter import run, parse_program, Interpreter, RunResult, STEP_LIMIT

__all__ = [
    'run',
    'parse_program',
    'Interpreter',
    'RunResult',
    'STEP_LIMIT',
    'LuxbinError',
    'LexError',
    'ParseError',
]
