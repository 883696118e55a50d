"""Reference grammar for the Luxbin language.

This module restates the statement and expression grammar implemented by
`luxbin.parser.Parser` as a Lark LALR(1) grammar. Lark does not tokenize
the source itself: a custom lexer class runs `luxbin.lexer.tokenize` and
hands the resulting tokens to the parser, so both front ends agree on
every lexical detail (newline collapsing, keywords, escapes).

Keyword and punctuation tokens are passed on as underscore-prefixed
terminals so Lark drops them from the tree. ``else`` immediately followed
by ``if`` is fused into a single ``_ELIF`` terminal, which keeps the
else-if chain free of LALR conflicts.

`parse_with_grammar` returns exactly the same AST as the recursive-descent
parser for every valid program and is used to cross-check it.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterator, List, Optional, Sequence

from lark import Lark, Transformer
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken, VisitError
from lark.lexer import Lexer, Token as LarkToken

from .ast import (
    Program, Statement, LetDeclaration, ConstDeclaration, Assignment,
    IndexAssignment, ElseIfClause, IfStatement, WhileStatement, ForStatement,
    Parameter, FunctionDeclaration, ReturnStatement, BreakStatement,
    ContinueStatement, ExpressionStatement, BinaryExpression, UnaryExpression,
    CallExpression, IndexExpression, ArrayLiteral, NumberLiteral,
    StringLiteral, BooleanLiteral, NilLiteral, Identifier,
)
from .errors import ParseError
from .lexer import tokenize
from .tokens import TokenKind

K = TokenKind

# Kinds that only shape the tree; Lark filters out terminals starting with '_'
FILTERED_KINDS = {
    K.LET, K.CONST, K.FUNC, K.RETURN, K.IF, K.THEN, K.ELSE, K.END, K.WHILE,
    K.DO, K.FOR, K.IN, K.BREAK, K.CONTINUE, K.EQUALS, K.LPAREN, K.RPAREN,
    K.LBRACKET, K.RBRACKET, K.COMMA, K.COLON, K.NEWLINE,
}


LUXBIN_GRAMMAR = r"""
    start: _statement*

    _statement: (let_stmt
               | const_stmt
               | assign_stmt
               | index_assign_stmt
               | func_stmt
               | if_stmt
               | while_stmt
               | for_stmt
               | return_stmt
               | break_stmt
               | continue_stmt
               | expr_stmt) _NEWLINE?

    body: _statement*

    let_stmt: _LET IDENTIFIER [_COLON IDENTIFIER] [_EQUALS expr]
    const_stmt: _CONST IDENTIFIER [_COLON IDENTIFIER] _EQUALS expr
    assign_stmt: IDENTIFIER _EQUALS expr
    index_assign_stmt: IDENTIFIER _LBRACKET expr _RBRACKET _EQUALS expr

    func_stmt: _FUNC IDENTIFIER _LPAREN [params] _RPAREN [_COLON IDENTIFIER] _NEWLINE? body _END
    params: param (_COMMA param)*
    param: IDENTIFIER [_COLON IDENTIFIER]

    if_stmt: _IF expr _THEN _NEWLINE? body elif_clause* [else_clause] _END
    elif_clause: _ELIF expr _THEN _NEWLINE? body
    else_clause: _ELSE _NEWLINE? body

    while_stmt: _WHILE expr _DO _NEWLINE? body _END
    for_stmt: _FOR IDENTIFIER _IN expr _DO _NEWLINE? body _END

    return_stmt: _RETURN [expr]
    break_stmt: _BREAK
    continue_stmt: _CONTINUE
    expr_stmt: expr

    // Expressions with precedence
    ?expr: or_expr
    ?or_expr: and_expr
            | or_expr OR and_expr -> binary
    ?and_expr: equality
             | and_expr AND equality -> binary
    ?equality: comparison
             | equality (DOUBLE_EQUALS | NOT_EQUALS) comparison -> binary
    ?comparison: sum
               | comparison (LESS_THAN | GREATER_THAN | LESS_EQUALS | GREATER_EQUALS) sum -> binary
    ?sum: product
        | sum (PLUS | MINUS) product -> binary
    ?product: unary
            | product (STAR | SLASH | PERCENT) unary -> binary
    ?unary: (MINUS | NOT) unary -> unary_op
          | power
    ?power: postfix
          | postfix CARET unary -> binary
    ?postfix: primary
            | call_chain
    ?call_chain: call
               | call_chain _LBRACKET expr _RBRACKET -> index
    call: IDENTIFIER _LPAREN [arguments] _RPAREN
    ?primary: NUMBER -> number
            | STRING -> string
            | TRUE -> true
            | FALSE -> false
            | NIL -> nil
            | IDENTIFIER -> identifier
            | IDENTIFIER _LBRACKET expr _RBRACKET -> name_index
            | _LPAREN expr _RPAREN
            | _LBRACKET [arguments] _RBRACKET -> array
    arguments: expr (_COMMA expr)*

    %declare NUMBER STRING IDENTIFIER TRUE FALSE NIL AND OR NOT
    %declare PLUS MINUS STAR SLASH PERCENT CARET
    %declare DOUBLE_EQUALS NOT_EQUALS LESS_THAN GREATER_THAN LESS_EQUALS GREATER_EQUALS
    %declare _LET _CONST _FUNC _RETURN _IF _THEN _ELSE _ELIF _END _WHILE _DO _FOR _IN
    %declare _BREAK _CONTINUE _EQUALS _LPAREN _RPAREN _LBRACKET _RBRACKET _COMMA _COLON _NEWLINE
"""


def terminal_name(kind: TokenKind) -> str:
    if kind in FILTERED_KINDS:
        return '_' + kind.name
    return kind.name


class LuxbinTokenLexer(Lexer):
    """Lark lexer that delegates to `luxbin.lexer.tokenize`."""

    def __init__(self, lexer_conf):
        pass

    def lex(self, data: str) -> Iterator[LarkToken]:
        tokens = tokenize(data)
        i = 0
        while tokens[i].kind is not K.EOF:
            tok = tokens[i]
            if tok.kind is K.ELSE and tokens[i + 1].kind is K.IF:
                yield LarkToken('_ELIF', 'else if', line=tok.line, column=tok.column)
                i += 2
                continue
            yield LarkToken(terminal_name(tok.kind), tok.text, line=tok.line, column=tok.column)
            i += 1


def find_stray_loop_control(statements: Sequence[Statement]) -> Optional[Statement]:
    """Return a break/continue that is not enclosed by a loop, if any.

    Loop bodies are not searched; nested function bodies were already
    checked when their own declaration was built.
    """
    for stmt in statements:
        if isinstance(stmt, (BreakStatement, ContinueStatement)):
            return stmt
        if isinstance(stmt, IfStatement):
            branches = [stmt.consequent] + [clause.body for clause in stmt.alternate_conditions]
            if stmt.alternate is not None:
                branches.append(stmt.alternate)
            for branch in branches:
                found = find_stray_loop_control(branch)
                if found is not None:
                    return found
    return None


def check_loop_control(statements: Sequence[Statement]):
    stray = find_stray_loop_control(statements)
    if stray is not None:
        word = 'break' if isinstance(stray, BreakStatement) else 'continue'
        raise ParseError(f"'{word}' outside of a loop")


def optional_name(token) -> Optional[str]:
    return None if token is None else str(token)


class ASTTransformer(Transformer):
    """Transforms the Lark parse tree into the Luxbin AST."""

    def start(self, items):
        check_loop_control(items)
        return Program(tuple(items))

    def body(self, items):
        return tuple(items)

    # Statements

    def let_stmt(self, items):
        name, annotation, value = items
        return LetDeclaration(str(name), optional_name(annotation), value)

    def const_stmt(self, items):
        name, annotation, value = items
        return ConstDeclaration(str(name), optional_name(annotation), value)

    def assign_stmt(self, items):
        name, value = items
        return Assignment(str(name), value)

    def index_assign_stmt(self, items):
        name, index, value = items
        return IndexAssignment(str(name), index, value)

    def func_stmt(self, items):
        name, params, return_type, body = items
        check_loop_control(body)
        return FunctionDeclaration(str(name), tuple(params or ()), optional_name(return_type), body)

    def params(self, items):
        return list(items)

    def param(self, items):
        name, annotation = items
        return Parameter(str(name), optional_name(annotation))

    def if_stmt(self, items):
        condition, consequent, *clauses, alternate = items
        return IfStatement(condition, consequent, tuple(clauses), alternate)

    def elif_clause(self, items):
        condition, body = items
        return ElseIfClause(condition, body)

    def else_clause(self, items):
        return items[0]

    def while_stmt(self, items):
        condition, body = items
        return WhileStatement(condition, body)

    def for_stmt(self, items):
        variable, iterable, body = items
        return ForStatement(str(variable), iterable, body)

    def return_stmt(self, items):
        return ReturnStatement(items[0])

    def break_stmt(self, items):
        return BreakStatement()

    def continue_stmt(self, items):
        return ContinueStatement()

    def expr_stmt(self, items):
        return ExpressionStatement(items[0])

    # Expressions

    def binary(self, items):
        left, op, right = items
        return BinaryExpression(str(op), left, right)

    def unary_op(self, items):
        op, operand = items
        return UnaryExpression(str(op), operand)

    def call(self, items):
        name, args = items
        return CallExpression(str(name), tuple(args or ()))

    def arguments(self, items):
        return list(items)

    def index(self, items):
        target, index = items
        return IndexExpression(target, index)

    def name_index(self, items):
        name, index = items
        return IndexExpression(Identifier(str(name)), index)

    def array(self, items):
        return ArrayLiteral(tuple(items[0] or ()))

    def number(self, items):
        text = str(items[0])
        return NumberLiteral(float(text), '.' in text)

    def string(self, items):
        return StringLiteral(str(items[0]))

    def true(self, items):
        return BooleanLiteral(True)

    def false(self, items):
        return BooleanLiteral(False)

    def nil(self, items):
        return NilLiteral()

    def identifier(self, items):
        return Identifier(str(items[0]))


@lru_cache(maxsize=None)
def grammar_parser() -> Lark:
    return Lark(
        LUXBIN_GRAMMAR,
        parser='lalr',
        lexer=LuxbinTokenLexer,
        maybe_placeholders=True,
    )


def unexpected_token_message(token: LarkToken, expected: List[str]) -> str:
    if token.type == '$END':
        return "Unexpected end of input"
    kind = token.type.lstrip('_')
    wanted = ', '.join(sorted(name.lstrip('_') for name in expected))
    return f'Unexpected token {kind} ("{token.value}") at line {token.line}:{token.column}, expected one of: {wanted}'


def parse_with_grammar(source: str) -> Program:
    """Parse Luxbin source with the reference grammar.

    Lexical errors surface unchanged as `LexError`; syntax errors are
    reported as `ParseError`.
    """
    try:
        tree = grammar_parser().parse(source)
    except UnexpectedToken as e:
        raise ParseError(
            unexpected_token_message(e.token, list(e.expected)),
            getattr(e.token, 'line', None), getattr(e.token, 'column', None),
        ) from None
    except (UnexpectedEOF, UnexpectedCharacters) as e:
        raise ParseError(f"Syntax error: {e}") from None
    try:
        return ASTTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, ParseError):
            raise e.orig_exc from None
        raise
