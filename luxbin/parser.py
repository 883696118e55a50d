"""Recursive-descent parser for the Luxbin language.

The parser consumes the token list produced by `luxbin.lexer.tokenize`
with one token of lookahead. Blocks are delimited by keywords
(``then ... else ... end``, ``do ... end``) and statements end at a
newline, although a missing newline is tolerated so that short programs
can be written on a single line.

The only place the parser backtracks is a statement starting with
``name [``: it is parsed speculatively as the target of an index
assignment and re-parsed as an expression statement when no ``=``
follows.
"""

from __future__ import annotations

from typing import List, Optional, Tuple, Union

from .ast import (
    Program, Statement, Expression, LetDeclaration, ConstDeclaration,
    Assignment, IndexAssignment, ElseIfClause, IfStatement, WhileStatement,
    ForStatement, Parameter, FunctionDeclaration, ReturnStatement,
    BreakStatement, ContinueStatement, ExpressionStatement, BinaryExpression,
    UnaryExpression, CallExpression, IndexExpression, ArrayLiteral,
    NumberLiteral, StringLiteral, BooleanLiteral, NilLiteral, Identifier,
)
from .errors import ParseError
from .tokens import Token, TokenKind

K = TokenKind

COMPARISON_OPERATORS = (K.LESS_THAN, K.GREATER_THAN, K.LESS_EQUALS, K.GREATER_EQUALS)
ADDITIVE_OPERATORS = (K.PLUS, K.MINUS)
MULTIPLICATIVE_OPERATORS = (K.STAR, K.SLASH, K.PERCENT)

# Tokens after which `return` carries no value
RETURN_TERMINATORS = (K.NEWLINE, K.EOF, K.END, K.ELSE)


def describe(token: Token) -> str:
    return f'{token.kind.name} ("{token.text}") at line {token.line}:{token.column}'


class Parser:
    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].kind is not K.EOF:
            raise ValueError('token list must end with an EOF token')
        self.tokens = tokens
        self.pos = 0
        self.loop_depth = 0

    # Token helpers

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def peek_at(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[idx]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind is not K.EOF:
            self.pos += 1
        return token

    def match(self, expected: Union[TokenKind, Tuple[TokenKind, ...]]) -> bool:
        if isinstance(expected, tuple):
            return self.peek().kind in expected
        return self.peek().kind is expected

    def consume(self, expected: TokenKind) -> Token:
        token = self.peek()
        if token.kind is not expected:
            raise ParseError(
                f"Expected {expected.name} but got {describe(token)}",
                token.line, token.column,
            )
        return self.advance()

    def at_end(self) -> bool:
        return self.peek().kind is K.EOF

    def skip_newlines(self):
        while self.match(K.NEWLINE):
            self.advance()

    def end_statement(self):
        # A missing terminator is tolerated
        if self.match(K.NEWLINE):
            self.advance()

    # Statements

    def parse(self) -> Program:
        statements: List[Statement] = []
        self.skip_newlines()
        while not self.at_end():
            statements.append(self.parse_statement())
            self.skip_newlines()
        return Program(tuple(statements))

    def parse_block(self, *terminators: TokenKind) -> Tuple[Statement, ...]:
        """Parse statements up to (not including) one of `terminators` or EOF."""
        self.end_statement()
        self.skip_newlines()
        statements: List[Statement] = []
        while not self.match(terminators) and not self.at_end():
            statements.append(self.parse_statement())
            self.skip_newlines()
        return tuple(statements)

    def parse_statement(self) -> Statement:
        token = self.peek()
        kind = token.kind
        if kind is K.LET:
            return self.parse_let()
        if kind is K.CONST:
            return self.parse_const()
        if kind is K.FUNC:
            return self.parse_function()
        if kind is K.IF:
            return self.parse_if()
        if kind is K.WHILE:
            return self.parse_while()
        if kind is K.FOR:
            return self.parse_for()
        if kind is K.RETURN:
            return self.parse_return()
        if kind in (K.BREAK, K.CONTINUE):
            return self.parse_loop_control()
        if kind is K.IDENTIFIER:
            following = self.peek_at(1).kind
            if following is K.EQUALS:
                return self.parse_assignment()
            if following is K.LBRACKET:
                return self.parse_index_assignment_or_expression()
        return self.parse_expression_statement()

    def parse_type_annotation(self) -> Optional[str]:
        if self.match(K.COLON):
            self.advance()
            return self.consume(K.IDENTIFIER).text
        return None

    def parse_let(self) -> LetDeclaration:
        self.consume(K.LET)
        name = self.consume(K.IDENTIFIER).text
        annotation = self.parse_type_annotation()
        value: Optional[Expression] = None
        if self.match(K.EQUALS):
            self.advance()
            value = self.parse_expression()
        self.end_statement()
        return LetDeclaration(name, annotation, value)

    def parse_const(self) -> ConstDeclaration:
        self.consume(K.CONST)
        name = self.consume(K.IDENTIFIER).text
        annotation = self.parse_type_annotation()
        self.consume(K.EQUALS)
        value = self.parse_expression()
        self.end_statement()
        return ConstDeclaration(name, annotation, value)

    def parse_assignment(self) -> Assignment:
        name = self.consume(K.IDENTIFIER).text
        self.consume(K.EQUALS)
        value = self.parse_expression()
        self.end_statement()
        return Assignment(name, value)

    def parse_index_assignment_or_expression(self) -> Statement:
        saved_pos = self.pos
        name = self.consume(K.IDENTIFIER).text
        self.consume(K.LBRACKET)
        index = self.parse_expression()
        self.consume(K.RBRACKET)
        if self.match(K.EQUALS):
            self.advance()
            value = self.parse_expression()
            self.end_statement()
            return IndexAssignment(name, index, value)
        # Plain index expression: re-read it from the start
        self.pos = saved_pos
        return self.parse_expression_statement()

    def parse_function(self) -> FunctionDeclaration:
        self.consume(K.FUNC)
        name = self.consume(K.IDENTIFIER).text
        self.consume(K.LPAREN)
        params: List[Parameter] = []
        if not self.match(K.RPAREN):
            while True:
                param_name = self.consume(K.IDENTIFIER).text
                params.append(Parameter(param_name, self.parse_type_annotation()))
                if not self.match(K.COMMA):
                    break
                self.advance()
        self.consume(K.RPAREN)
        return_type = self.parse_type_annotation()
        # break/continue never cross a function boundary
        outer_depth = self.loop_depth
        self.loop_depth = 0
        try:
            body = self.parse_block(K.END)
        finally:
            self.loop_depth = outer_depth
        self.consume(K.END)
        self.end_statement()
        return FunctionDeclaration(name, tuple(params), return_type, body)

    def parse_if(self) -> IfStatement:
        self.consume(K.IF)
        condition = self.parse_expression()
        self.consume(K.THEN)
        consequent = self.parse_block(K.ELSE, K.END)
        clauses: List[ElseIfClause] = []
        alternate: Optional[Tuple[Statement, ...]] = None
        while self.match(K.ELSE):
            self.advance()
            if self.match(K.IF):
                self.advance()
                clause_condition = self.parse_expression()
                self.consume(K.THEN)
                clauses.append(ElseIfClause(clause_condition, self.parse_block(K.ELSE, K.END)))
                continue
            alternate = self.parse_block(K.END)
            break
        self.consume(K.END)
        self.end_statement()
        return IfStatement(condition, consequent, tuple(clauses), alternate)

    def parse_loop_body(self) -> Tuple[Statement, ...]:
        self.loop_depth += 1
        try:
            return self.parse_block(K.END)
        finally:
            self.loop_depth -= 1

    def parse_while(self) -> WhileStatement:
        self.consume(K.WHILE)
        condition = self.parse_expression()
        self.consume(K.DO)
        body = self.parse_loop_body()
        self.consume(K.END)
        self.end_statement()
        return WhileStatement(condition, body)

    def parse_for(self) -> ForStatement:
        self.consume(K.FOR)
        variable = self.consume(K.IDENTIFIER).text
        self.consume(K.IN)
        iterable = self.parse_expression()
        self.consume(K.DO)
        body = self.parse_loop_body()
        self.consume(K.END)
        self.end_statement()
        return ForStatement(variable, iterable, body)

    def parse_return(self) -> ReturnStatement:
        self.consume(K.RETURN)
        value: Optional[Expression] = None
        if not self.match(RETURN_TERMINATORS):
            value = self.parse_expression()
        self.end_statement()
        return ReturnStatement(value)

    def parse_loop_control(self) -> Statement:
        token = self.advance()
        if self.loop_depth == 0:
            raise ParseError(
                f"'{token.text}' outside of a loop at line {token.line}:{token.column}",
                token.line, token.column,
            )
        self.end_statement()
        if token.kind is K.BREAK:
            return BreakStatement()
        return ContinueStatement()

    def parse_expression_statement(self) -> ExpressionStatement:
        expression = self.parse_expression()
        self.end_statement()
        return ExpressionStatement(expression)

    # Expressions, lowest precedence first

    def parse_expression(self) -> Expression:
        return self.parse_or()

    def parse_or(self) -> Expression:
        node = self.parse_and()
        while self.match(K.OR):
            op = self.advance().text
            node = BinaryExpression(op, node, self.parse_and())
        return node

    def parse_and(self) -> Expression:
        node = self.parse_equality()
        while self.match(K.AND):
            op = self.advance().text
            node = BinaryExpression(op, node, self.parse_equality())
        return node

    def parse_equality(self) -> Expression:
        node = self.parse_comparison()
        while self.match((K.DOUBLE_EQUALS, K.NOT_EQUALS)):
            op = self.advance().text
            node = BinaryExpression(op, node, self.parse_comparison())
        return node

    def parse_comparison(self) -> Expression:
        node = self.parse_additive()
        while self.match(COMPARISON_OPERATORS):
            op = self.advance().text
            node = BinaryExpression(op, node, self.parse_additive())
        return node

    def parse_additive(self) -> Expression:
        node = self.parse_multiplicative()
        while self.match(ADDITIVE_OPERATORS):
            op = self.advance().text
            node = BinaryExpression(op, node, self.parse_multiplicative())
        return node

    def parse_multiplicative(self) -> Expression:
        node = self.parse_unary()
        while self.match(MULTIPLICATIVE_OPERATORS):
            op = self.advance().text
            node = BinaryExpression(op, node, self.parse_unary())
        return node

    def parse_unary(self) -> Expression:
        if self.match((K.MINUS, K.NOT)):
            op = self.advance().text
            return UnaryExpression(op, self.parse_unary())
        return self.parse_power()

    def parse_power(self) -> Expression:
        # '^' binds tighter than unary minus and is right-associative:
        # -2^2 is -(2^2) and 2^3^2 is 2^(3^2)
        base = self.parse_postfix()
        if self.match(K.CARET):
            op = self.advance().text
            return BinaryExpression(op, base, self.parse_unary())
        return base

    def parse_arguments(self, closing: TokenKind) -> Tuple[Expression, ...]:
        args: List[Expression] = []
        if not self.match(closing):
            args.append(self.parse_expression())
            while self.match(K.COMMA):
                self.advance()
                args.append(self.parse_expression())
        self.consume(closing)
        return tuple(args)

    def parse_index_suffix(self, target: Expression) -> IndexExpression:
        self.consume(K.LBRACKET)
        index = self.parse_expression()
        self.consume(K.RBRACKET)
        return IndexExpression(target, index)

    def parse_postfix(self) -> Expression:
        token = self.peek()
        if token.kind is not K.IDENTIFIER:
            return self.parse_primary()
        self.advance()
        if self.match(K.LPAREN):
            self.advance()
            node: Expression = CallExpression(token.text, self.parse_arguments(K.RPAREN))
            # Call results may be indexed repeatedly: f()[i][j]
            while self.match(K.LBRACKET):
                node = self.parse_index_suffix(node)
            return node
        if self.match(K.LBRACKET):
            return self.parse_index_suffix(Identifier(token.text))
        return Identifier(token.text)

    def parse_primary(self) -> Expression:
        token = self.peek()
        kind = token.kind
        if kind is K.NUMBER:
            self.advance()
            return NumberLiteral(float(token.text), '.' in token.text)
        if kind is K.STRING:
            self.advance()
            return StringLiteral(token.text)
        if kind is K.TRUE:
            self.advance()
            return BooleanLiteral(True)
        if kind is K.FALSE:
            self.advance()
            return BooleanLiteral(False)
        if kind is K.NIL:
            self.advance()
            return NilLiteral()
        if kind is K.LPAREN:
            self.advance()
            expr = self.parse_expression()
            self.consume(K.RPAREN)
            return expr
        if kind is K.LBRACKET:
            self.advance()
            return ArrayLiteral(self.parse_arguments(K.RBRACKET))
        raise ParseError(f"Unexpected token {describe(token)}", token.line, token.column)


def parse(tokens: List[Token]) -> Program:
    return Parser(tokens).parse()
