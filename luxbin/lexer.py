"""Lexer for the Luxbin language.

`tokenize` turns source text into a flat list of tokens terminated by an
``EOF`` token. Newlines are significant (they end statements) but runs of
blank lines and comment-only lines collapse into a single ``NEWLINE``
token, and the last logical line always ends with one.
"""

from __future__ import annotations

from typing import List

from .errors import LexError
from .tokens import KEYWORDS, SINGLE_CHAR_TOKENS, TWO_CHAR_OPERATORS, Token, TokenKind

ESCAPES = {
    'n': '\n',
    't': '\t',
    '"': '"',
    '\\': '\\',
    '0': '\0',
}


def is_ident_start(c: str) -> bool:
    return ('a' <= c <= 'z') or ('A' <= c <= 'Z') or c == '_'


def is_ident_char(c: str) -> bool:
    return is_ident_start(c) or '0' <= c <= '9'


def is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens.

    Raises `LexError` on the first character that does not start a valid
    token and on unterminated string literals.
    """
    tokens: List[Token] = []
    i = 0
    line = 1
    col = 1
    length = len(source)

    def advance(n: int = 1):
        nonlocal i, col, line
        for _ in range(n):
            if i < length and source[i] == '\n':
                line += 1
                col = 1
            else:
                col += 1
            i += 1

    def last_is_newline() -> bool:
        return bool(tokens) and tokens[-1].kind is TokenKind.NEWLINE

    while i < length:
        c = source[i]
        if c in ' \t\r':
            advance()
            continue
        # Comments run to the end of the line; the newline itself is kept
        if c == '#':
            while i < length and source[i] != '\n':
                advance()
            continue
        if c == '\n':
            if tokens and not last_is_newline():
                tokens.append(Token(TokenKind.NEWLINE, '\n', line, col))
            advance()
            continue
        if is_digit(c):
            start_col = col
            start_i = i
            while i < length and is_digit(source[i]):
                advance()
            # A trailing '.' without a digit after it is not part of the number
            if i + 1 < length and source[i] == '.' and is_digit(source[i + 1]):
                advance()
                while i < length and is_digit(source[i]):
                    advance()
            tokens.append(Token(TokenKind.NUMBER, source[start_i:i], line, start_col))
            continue
        if c == '"':
            start_line = line
            start_col = col
            advance()  # opening quote
            chars: List[str] = []
            while i < length and source[i] != '"':
                ch = source[i]
                if ch == '\\':
                    advance()
                    if i >= length:
                        break
                    escaped = source[i]
                    chars.append(ESCAPES.get(escaped, escaped))
                else:
                    chars.append(ch)
                advance()
            if i >= length:
                raise LexError(
                    f"Unterminated string starting at line {start_line}, column {start_col}",
                    start_line, start_col,
                )
            advance()  # closing quote
            tokens.append(Token(TokenKind.STRING, ''.join(chars), start_line, start_col))
            continue
        if is_ident_start(c):
            start_col = col
            start_i = i
            while i < length and is_ident_char(source[i]):
                advance()
            word = source[start_i:i]
            tokens.append(Token(KEYWORDS.get(word, TokenKind.IDENTIFIER), word, line, start_col))
            continue
        pair = source[i:i + 2]
        if pair in TWO_CHAR_OPERATORS:
            tokens.append(Token(TWO_CHAR_OPERATORS[pair], pair, line, col))
            advance(2)
            continue
        if c in SINGLE_CHAR_TOKENS:
            tokens.append(Token(SINGLE_CHAR_TOKENS[c], c, line, col))
            advance()
            continue
        raise LexError(f"Unexpected character {c!r} at line {line}, column {col}", line, col)

    if tokens and not last_is_newline():
        tokens.append(Token(TokenKind.NEWLINE, '\n', line, col))
    tokens.append(Token(TokenKind.EOF, '', line, col))
    return tokens
