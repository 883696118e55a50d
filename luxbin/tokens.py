"""Token vocabulary shared by the lexer, the parser and the reference grammar."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict


class TokenKind(Enum):
    """All token kinds of the Luxbin language."""
    NUMBER = auto()
    STRING = auto()
    IDENTIFIER = auto()

    # Keywords
    LET = auto()
    CONST = auto()
    FUNC = auto()
    RETURN = auto()
    IF = auto()
    THEN = auto()
    ELSE = auto()
    END = auto()
    WHILE = auto()
    DO = auto()
    FOR = auto()
    IN = auto()
    BREAK = auto()
    CONTINUE = auto()
    IMPORT = auto()
    EXPORT = auto()
    TRUE = auto()
    FALSE = auto()
    NIL = auto()
    AND = auto()
    OR = auto()
    NOT = auto()

    # Operators
    PLUS = auto()            # +
    MINUS = auto()           # -
    STAR = auto()            # *
    SLASH = auto()           # /
    PERCENT = auto()         # %
    CARET = auto()           # ^
    EQUALS = auto()          # =
    DOUBLE_EQUALS = auto()   # ==
    NOT_EQUALS = auto()      # !=
    LESS_THAN = auto()       # <
    GREATER_THAN = auto()    # >
    LESS_EQUALS = auto()     # <=
    GREATER_EQUALS = auto()  # >=

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    COMMA = auto()
    COLON = auto()

    # Special
    NEWLINE = auto()
    EOF = auto()


@dataclass(frozen=True)
class Token:
    """A single token from Luxbin source."""
    kind: TokenKind
    text: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.text!r}, L{self.line}:{self.column})"


KEYWORDS: Dict[str, TokenKind] = {
    'let': TokenKind.LET,
    'const': TokenKind.CONST,
    'func': TokenKind.FUNC,
    'return': TokenKind.RETURN,
    'if': TokenKind.IF,
    'then': TokenKind.THEN,
    'else': TokenKind.ELSE,
    'end': TokenKind.END,
    'while': TokenKind.WHILE,
    'do': TokenKind.DO,
    'for': TokenKind.FOR,
    'in': TokenKind.IN,
    'break': TokenKind.BREAK,
    'continue': TokenKind.CONTINUE,
    'import': TokenKind.IMPORT,
    'export': TokenKind.EXPORT,
    'true': TokenKind.TRUE,
    'false': TokenKind.FALSE,
    'nil': TokenKind.NIL,
    'and': TokenKind.AND,
    'or': TokenKind.OR,
    'not': TokenKind.NOT,
}

TWO_CHAR_OPERATORS: Dict[str, TokenKind] = {
    '==': TokenKind.DOUBLE_EQUALS,
    '!=': TokenKind.NOT_EQUALS,
    '<=': TokenKind.LESS_EQUALS,
    '>=': TokenKind.GREATER_EQUALS,
}

SINGLE_CHAR_TOKENS: Dict[str, TokenKind] = {
    '+': TokenKind.PLUS,
    '-': TokenKind.MINUS,
    '*': TokenKind.STAR,
    '/': TokenKind.SLASH,
    '%': TokenKind.PERCENT,
    '^': TokenKind.CARET,
    '=': TokenKind.EQUALS,
    '<': TokenKind.LESS_THAN,
    '>': TokenKind.GREATER_THAN,
    '(': TokenKind.LPAREN,
    ')': TokenKind.RPAREN,
    '[': TokenKind.LBRACKET,
    ']': TokenKind.RBRACKET,
    ',': TokenKind.COMMA,
    ':': TokenKind.COLON,
}
