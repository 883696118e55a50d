"""Abstract Syntax Tree (AST) definitions for the Luxbin language.

The tree is built once by the parser (or the reference grammar) and is
never mutated afterwards: every node is a frozen dataclass and every
sequence a tuple. Nodes hold no parent pointers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass(frozen=True)
class Statement(Node):
    pass


@dataclass(frozen=True)
class Expression(Node):
    pass


@dataclass(frozen=True)
class Program(Node):
    body: Tuple[Statement, ...]


# Statements


@dataclass(frozen=True)
class LetDeclaration(Statement):
    name: str
    type_annotation: Optional[str]
    value: Optional[Expression]


@dataclass(frozen=True)
class ConstDeclaration(Statement):
    name: str
    type_annotation: Optional[str]
    value: Expression


@dataclass(frozen=True)
class Assignment(Statement):
    name: str
    value: Expression


@dataclass(frozen=True)
class IndexAssignment(Statement):
    name: str
    index: Expression
    value: Expression


@dataclass(frozen=True)
class ElseIfClause(Node):
    condition: Expression
    body: Tuple[Statement, ...]


@dataclass(frozen=True)
class IfStatement(Statement):
    condition: Expression
    consequent: Tuple[Statement, ...]
    alternate_conditions: Tuple[ElseIfClause, ...]
    alternate: Optional[Tuple[Statement, ...]]


@dataclass(frozen=True)
class WhileStatement(Statement):
    condition: Expression
    body: Tuple[Statement, ...]


@dataclass(frozen=True)
class ForStatement(Statement):
    variable: str
    iterable: Expression
    body: Tuple[Statement, ...]


@dataclass(frozen=True)
class Parameter(Node):
    name: str
    type_annotation: Optional[str]


@dataclass(frozen=True)
class FunctionDeclaration(Statement):
    name: str
    params: Tuple[Parameter, ...]
    return_type: Optional[str]
    body: Tuple[Statement, ...]


@dataclass(frozen=True)
class ReturnStatement(Statement):
    value: Optional[Expression]


@dataclass(frozen=True)
class BreakStatement(Statement):
    pass


@dataclass(frozen=True)
class ContinueStatement(Statement):
    pass


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    expression: Expression


# Expressions


@dataclass(frozen=True)
class BinaryExpression(Expression):
    operator: str  # source text: '+', '==', 'and', ...
    left: Expression
    right: Expression


@dataclass(frozen=True)
class UnaryExpression(Expression):
    operator: str  # '-' or 'not'
    operand: Expression


@dataclass(frozen=True)
class CallExpression(Expression):
    callee: str
    arguments: Tuple[Expression, ...]


@dataclass(frozen=True)
class IndexExpression(Expression):
    object: Expression
    index: Expression


@dataclass(frozen=True)
class ArrayLiteral(Expression):
    elements: Tuple[Expression, ...]


@dataclass(frozen=True)
class NumberLiteral(Expression):
    value: float
    is_float: bool


@dataclass(frozen=True)
class StringLiteral(Expression):
    value: str


@dataclass(frozen=True)
class BooleanLiteral(Expression):
    value: bool


@dataclass(frozen=True)
class NilLiteral(Expression):
    pass


@dataclass(frozen=True)
class Identifier(Expression):
    name: str
