"""JSON serialization/deserialization for the Luxbin AST.

This module converts between Luxbin AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Nodes use the
playground's shapes: a ``"type"`` field naming the node and camelCase
keys (``typeAnnotation``, ``alternateConditions``, ``returnType``,
``isFloat``). Parameters and else-if clauses are plain objects without a
``"type"`` field. The round trip is lossless.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Sequence

from .ast import (
    Program,
    Statement,
    LetDeclaration,
    ConstDeclaration,
    Assignment,
    IndexAssignment,
    ElseIfClause,
    IfStatement,
    WhileStatement,
    ForStatement,
    Parameter,
    FunctionDeclaration,
    ReturnStatement,
    BreakStatement,
    ContinueStatement,
    ExpressionStatement,
    BinaryExpression,
    UnaryExpression,
    CallExpression,
    IndexExpression,
    ArrayLiteral,
    NumberLiteral,
    StringLiteral,
    BooleanLiteral,
    NilLiteral,
    Identifier,
)


def body_to_obj(statements: Sequence[Statement]) -> List[Any]:
    return [ast_to_obj(s) for s in statements]


def body_from_obj(items: List[Any]) -> tuple:
    return tuple(ast_from_obj(s) for s in items)


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    # Statements
    if isinstance(node, Program):
        return {"type": "Program", "body": body_to_obj(node.body)}
    if isinstance(node, LetDeclaration):
        return {
            "type": "LetDeclaration",
            "name": node.name,
            "typeAnnotation": node.type_annotation,
            "value": ast_to_obj(node.value),
        }
    if isinstance(node, ConstDeclaration):
        return {
            "type": "ConstDeclaration",
            "name": node.name,
            "typeAnnotation": node.type_annotation,
            "value": ast_to_obj(node.value),
        }
    if isinstance(node, Assignment):
        return {"type": "Assignment", "name": node.name, "value": ast_to_obj(node.value)}
    if isinstance(node, IndexAssignment):
        return {
            "type": "IndexAssignment",
            "name": node.name,
            "index": ast_to_obj(node.index),
            "value": ast_to_obj(node.value),
        }
    if isinstance(node, IfStatement):
        return {
            "type": "IfStatement",
            "condition": ast_to_obj(node.condition),
            "consequent": body_to_obj(node.consequent),
            "alternateConditions": [
                {"condition": ast_to_obj(c.condition), "body": body_to_obj(c.body)}
                for c in node.alternate_conditions
            ],
            "alternate": None if node.alternate is None else body_to_obj(node.alternate),
        }
    if isinstance(node, WhileStatement):
        return {"type": "WhileStatement", "condition": ast_to_obj(node.condition), "body": body_to_obj(node.body)}
    if isinstance(node, ForStatement):
        return {
            "type": "ForStatement",
            "variable": node.variable,
            "iterable": ast_to_obj(node.iterable),
            "body": body_to_obj(node.body),
        }
    if isinstance(node, FunctionDeclaration):
        return {
            "type": "FunctionDeclaration",
            "name": node.name,
            "params": [{"name": p.name, "typeAnnotation": p.type_annotation} for p in node.params],
            "returnType": node.return_type,
            "body": body_to_obj(node.body),
        }
    if isinstance(node, ReturnStatement):
        return {"type": "ReturnStatement", "value": ast_to_obj(node.value)}
    if isinstance(node, BreakStatement):
        return {"type": "BreakStatement"}
    if isinstance(node, ContinueStatement):
        return {"type": "ContinueStatement"}
    if isinstance(node, ExpressionStatement):
        return {"type": "ExpressionStatement", "expression": ast_to_obj(node.expression)}

    # Expressions
    if isinstance(node, BinaryExpression):
        return {
            "type": "BinaryExpression",
            "operator": node.operator,
            "left": ast_to_obj(node.left),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, UnaryExpression):
        return {"type": "UnaryExpression", "operator": node.operator, "operand": ast_to_obj(node.operand)}
    if isinstance(node, CallExpression):
        return {
            "type": "CallExpression",
            "callee": node.callee,
            "arguments": [ast_to_obj(a) for a in node.arguments],
        }
    if isinstance(node, IndexExpression):
        return {"type": "IndexExpression", "object": ast_to_obj(node.object), "index": ast_to_obj(node.index)}
    if isinstance(node, ArrayLiteral):
        return {"type": "ArrayLiteral", "elements": [ast_to_obj(e) for e in node.elements]}
    if isinstance(node, NumberLiteral):
        # Integer literals are written without a fractional part
        value = int(node.value) if not node.is_float and math.isfinite(node.value) else node.value
        return {"type": "NumberLiteral", "value": value, "isFloat": node.is_float}
    if isinstance(node, StringLiteral):
        return {"type": "StringLiteral", "value": node.value}
    if isinstance(node, BooleanLiteral):
        return {"type": "BooleanLiteral", "value": node.value}
    if isinstance(node, NilLiteral):
        return {"type": "NilLiteral"}
    if isinstance(node, Identifier):
        return {"type": "Identifier", "name": node.name}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def param_from_obj(obj: Dict[str, Any]) -> Parameter:
    return Parameter(name=obj["name"], type_annotation=obj.get("typeAnnotation"))


def clause_from_obj(obj: Dict[str, Any]) -> ElseIfClause:
    return ElseIfClause(condition=ast_from_obj(obj["condition"]), body=body_from_obj(obj["body"]))


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Program":
        return Program(body=body_from_obj(obj["body"]))
    if t == "LetDeclaration":
        return LetDeclaration(
            name=obj["name"],
            type_annotation=obj.get("typeAnnotation"),
            value=ast_from_obj(obj.get("value")),
        )
    if t == "ConstDeclaration":
        return ConstDeclaration(
            name=obj["name"],
            type_annotation=obj.get("typeAnnotation"),
            value=ast_from_obj(obj["value"]),
        )
    if t == "Assignment":
        return Assignment(name=obj["name"], value=ast_from_obj(obj["value"]))
    if t == "IndexAssignment":
        return IndexAssignment(
            name=obj["name"],
            index=ast_from_obj(obj["index"]),
            value=ast_from_obj(obj["value"]),
        )
    if t == "IfStatement":
        alternate = obj.get("alternate")
        return IfStatement(
            condition=ast_from_obj(obj["condition"]),
            consequent=body_from_obj(obj["consequent"]),
            alternate_conditions=tuple(clause_from_obj(c) for c in obj.get("alternateConditions", [])),
            alternate=None if alternate is None else body_from_obj(alternate),
        )
    if t == "WhileStatement":
        return WhileStatement(condition=ast_from_obj(obj["condition"]), body=body_from_obj(obj["body"]))
    if t == "ForStatement":
        return ForStatement(
            variable=obj["variable"],
            iterable=ast_from_obj(obj["iterable"]),
            body=body_from_obj(obj["body"]),
        )
    if t == "FunctionDeclaration":
        return FunctionDeclaration(
            name=obj["name"],
            params=tuple(param_from_obj(p) for p in obj["params"]),
            return_type=obj.get("returnType"),
            body=body_from_obj(obj["body"]),
        )
    if t == "ReturnStatement":
        return ReturnStatement(value=ast_from_obj(obj.get("value")))
    if t == "BreakStatement":
        return BreakStatement()
    if t == "ContinueStatement":
        return ContinueStatement()
    if t == "ExpressionStatement":
        return ExpressionStatement(expression=ast_from_obj(obj["expression"]))
    if t == "BinaryExpression":
        return BinaryExpression(
            operator=obj["operator"],
            left=ast_from_obj(obj["left"]),
            right=ast_from_obj(obj["right"]),
        )
    if t == "UnaryExpression":
        return UnaryExpression(operator=obj["operator"], operand=ast_from_obj(obj["operand"]))
    if t == "CallExpression":
        return CallExpression(callee=obj["callee"], arguments=tuple(ast_from_obj(a) for a in obj["arguments"]))
    if t == "IndexExpression":
        return IndexExpression(object=ast_from_obj(obj["object"]), index=ast_from_obj(obj["index"]))
    if t == "ArrayLiteral":
        return ArrayLiteral(elements=tuple(ast_from_obj(e) for e in obj["elements"]))
    if t == "NumberLiteral":
        return NumberLiteral(value=float(obj["value"]), is_float=bool(obj.get("isFloat", False)))
    if t == "StringLiteral":
        return StringLiteral(value=obj["value"])
    if t == "BooleanLiteral":
        return BooleanLiteral(value=bool(obj["value"]))
    if t == "NilLiteral":
        return NilLiteral()
    if t == "Identifier":
        return Identifier(name=obj["name"])

    raise ValueError(f"Unknown AST node type: {t}")
