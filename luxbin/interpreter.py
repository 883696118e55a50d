"""Tree-walking interpreter for the Luxbin language.

This module ties the front end (`luxbin.lexer`, `luxbin.parser`) to the
runtime: it evaluates a `Program` against a fresh global frame seeded
with the builtins and reports the outcome as a `RunResult`.

Control flow (`return`, `break`, `continue`) travels as signal values
returned from statement execution rather than as exceptions; only
errors are raised. Every statement execution, expression evaluation and
loop iteration costs one step, and a run that exceeds its step budget
stops with an error instead of hanging.
"""

from __future__ import annotations

import math
import random
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .ast import (
    Program, Statement, Expression, LetDeclaration, ConstDeclaration,
    Assignment, IndexAssignment, IfStatement, WhileStatement, ForStatement,
    FunctionDeclaration, ReturnStatement, BreakStatement, ContinueStatement,
    ExpressionStatement, BinaryExpression, UnaryExpression, CallExpression,
    IndexExpression, ArrayLiteral, NumberLiteral, StringLiteral,
    BooleanLiteral, NilLiteral, Identifier,
)
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import BREAK, CONTINUE, BreakSignal, LuxbinError, ReturnSignal, Signal
from .lexer import tokenize
from .parser import parse
from .std import QuantumSimulator, populate_std_environment
from .types import (
    NIL, ArrayVal, FunctionValue, format_number, is_number, is_truthy, join_utf16_units,
    power, remainder, to_display, type_name, utf16_units, values_equal,
)

STEP_LIMIT = 100_000

# Python frames a single step can nest: evaluate -> call_function -> execute_block
FRAMES_PER_STEP = 3
# C stack reserved per Python frame on the worker thread
FRAME_STACK_BYTES = 1024
MIN_STACK_SIZE = 8 << 20
MAX_STACK_SIZE = 1 << 30


@dataclass
class RunResult:
    """Outcome of one run: printed lines, steps taken and the error message, if any."""
    output: List[str] = field(default_factory=list)
    steps: int = 0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'output': list(self.output), 'steps': self.steps, 'error': self.error}


def parse_program(source: str) -> Program:
    """Parse the given source code into a Program AST using the recursive-descent parser."""
    tokens = tokenize(source)
    return parse(tokens)


class Interpreter:
    """Core interpreter that executes a Luxbin AST."""
    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None,
                 step_limit: int = STEP_LIMIT, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.simulator = QuantumSimulator(rng, seed)
        self.step_limit = step_limit
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp = None
        self.output: List[str] = []
        self.steps = 0
        self.global_env = Environment()

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def emit(self, line: str):
        self.output.append(line)
        if self.debug_level >= 4:
            self.debug(f"print {line!r}")

    def load_standard_module(self) -> Environment:
        global_env = Environment()
        std_env = populate_std_environment(self.emit, self.simulator)
        global_env.values.update(std_env.values)
        global_env.consts.update(std_env.consts)
        return global_env

    def step(self):
        self.steps += 1
        if self.steps > self.step_limit:
            raise LuxbinError(
                'StepLimitExceeded',
                f"Execution limit exceeded ({self.step_limit:,} steps). Possible infinite loop.",
            )

    # Public API
    def run(self, program: Program) -> RunResult:
        """Execute `program` in a fresh global frame.

        Errors never escape: the first failure ends the run and its
        message is stored on the returned `RunResult` next to the output
        printed so far.

        The program runs on a worker thread whose stack and Python
        recursion limit are sized to the step limit, so recursion is
        bounded by the step counter rather than by the host's default
        call depth.
        """
        self.output = []
        self.steps = 0
        self.global_env = self.load_standard_module()
        if self.debug_level > 0:
            self.debug_fp = open(self.debug_file, 'w', encoding='utf-8', errors='backslashreplace')
        old_limit = sys.getrecursionlimit()
        try:
            self.debug(f"run: {len(program.body)} top-level statements")
            depth = self.call_depth_limit(old_limit)
            sys.setrecursionlimit(max(old_limit, depth))
            error = self.run_on_worker(program, depth * FRAME_STACK_BYTES)
            self.debug(f"finished: {self.steps} steps, {len(self.output)} output lines")
        finally:
            sys.setrecursionlimit(old_limit)
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None
        return RunResult(self.output, self.steps, error)

    def call_depth_limit(self, base: int) -> int:
        # each step nests at most FRAMES_PER_STEP Python frames
        return min(base + self.step_limit * FRAMES_PER_STEP, MAX_STACK_SIZE // FRAME_STACK_BYTES)

    def run_on_worker(self, program: Program, stack_size: int) -> Optional[str]:
        outcome: List[Optional[str]] = []
        failures: List[BaseException] = []

        def target():
            try:
                outcome.append(self.execute_program(program))
            except BaseException as e:
                failures.append(e)

        size = max(stack_size, MIN_STACK_SIZE)
        size += -size % (1 << 20)  # whole MiB, a multiple of any page size
        previous = threading.stack_size(size)
        try:
            worker = threading.Thread(target=target, name='luxbin-run')
            worker.start()
        finally:
            threading.stack_size(previous)
        worker.join()
        if failures:
            raise failures[0]
        return outcome[0]

    def execute_program(self, program: Program) -> Optional[str]:
        try:
            self.execute_block(program.body, self.global_env)
        except LuxbinError as e:
            self.debug(f"error [{e.kind}] after {self.steps} steps: {e.message}")
            return e.message
        except RecursionError:
            error = 'Maximum call depth exceeded'
            self.debug(f"error [RecursionLimit] after {self.steps} steps: {error}")
            return error
        return None

    def execute_block(self, statements: Sequence[Statement], env: Environment) -> Optional[Signal]:
        for stmt in statements:
            result = self.execute(stmt, env)
            # stop at the first signal and hand it to the enclosing construct
            if result is not None:
                return result
        return None

    def execute(self, node: Statement, env: Environment) -> Optional[Signal]:
        self.step()
        if isinstance(node, LetDeclaration):
            value = self.evaluate(node.value, env) if node.value is not None else NIL
            env.define(node.name, value)
            if self.debug_level >= 2:
                self.debug(f"let {node.name} = {to_display(value)}")
            return None
        if isinstance(node, ConstDeclaration):
            value = self.evaluate(node.value, env)
            env.define(node.name, value, is_const=True)
            if self.debug_level >= 2:
                self.debug(f"const {node.name} = {to_display(value)}")
            return None
        if isinstance(node, Assignment):
            value = self.evaluate(node.value, env)
            env.set(node.name, value)
            return None
        if isinstance(node, IndexAssignment):
            target = env.get(node.name)
            if not isinstance(target, ArrayVal):
                raise LuxbinError('TypeError', f"'{node.name}' is not an array")
            index = self.evaluate(node.index, env)
            idx = self.resolve_index(index, len(target.items), 'Array')
            target.items[idx] = self.evaluate(node.value, env)
            return None
        if isinstance(node, ExpressionStatement):
            self.evaluate(node.expression, env)
            return None
        if isinstance(node, FunctionDeclaration):
            env.define(node.name, FunctionValue(node, env), is_const=True)  # functions are const
            if self.debug_level >= 2:
                params = ', '.join(p.name for p in node.params)
                self.debug(f"define function {node.name}({params})")
            return None
        if isinstance(node, ReturnStatement):
            value = self.evaluate(node.value, env) if node.value is not None else NIL
            return ReturnSignal(value)
        if isinstance(node, BreakStatement):
            return BREAK
        if isinstance(node, ContinueStatement):
            return CONTINUE
        if isinstance(node, IfStatement):
            cond = self.evaluate(node.condition, env)
            truthy = is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"if condition {to_display(cond)} -> {truthy}")
            if truthy:
                return self.execute_block(node.consequent, Environment(env))
            for clause in node.alternate_conditions:
                cond = self.evaluate(clause.condition, env)
                truthy = is_truthy(cond)
                if self.debug_level >= 3:
                    self.debug(f"else if condition {to_display(cond)} -> {truthy}")
                if truthy:
                    return self.execute_block(clause.body, Environment(env))
            if node.alternate is not None:
                return self.execute_block(node.alternate, Environment(env))
            return None
        if isinstance(node, WhileStatement):
            while is_truthy(self.evaluate(node.condition, env)):
                self.step()
                res = self.execute_block(node.body, Environment(env))
                if isinstance(res, ReturnSignal):
                    return res
                if isinstance(res, BreakSignal):
                    break
            return None
        if isinstance(node, ForStatement):
            iterable = self.evaluate(node.iterable, env)
            if not isinstance(iterable, ArrayVal):
                raise LuxbinError('TypeError', 'for..in requires an array')
            # iterates the live list: elements pushed by the body are visited too
            for item in iterable.items:
                self.step()
                loop_env = Environment(env)
                loop_env.define(node.variable, item)
                res = self.execute_block(node.body, loop_env)
                if isinstance(res, ReturnSignal):
                    return res
                if isinstance(res, BreakSignal):
                    break
            return None
        # catch any other nodes
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def evaluate(self, node: Expression, env: Environment) -> Any:
        self.step()
        if isinstance(node, NumberLiteral):
            return node.value
        if isinstance(node, (StringLiteral, BooleanLiteral)):
            return node.value
        if isinstance(node, NilLiteral):
            return NIL
        if isinstance(node, Identifier):
            return env.get(node.name)
        if isinstance(node, ArrayLiteral):
            return ArrayVal([self.evaluate(el, env) for el in node.elements])
        if isinstance(node, UnaryExpression):
            operand = self.evaluate(node.operand, env)
            if node.operator == '-':
                if not is_number(operand):
                    raise LuxbinError('TypeError', "Unary '-' requires a number")
                return -operand
            if node.operator == 'not':
                return not is_truthy(operand)
            raise LuxbinError('TypeError', f"Unknown unary operator: {node.operator}")
        if isinstance(node, BinaryExpression):
            # and/or short-circuit and yield the deciding operand itself
            if node.operator == 'and':
                left = self.evaluate(node.left, env)
                if not is_truthy(left):
                    return left
                return self.evaluate(node.right, env)
            if node.operator == 'or':
                left = self.evaluate(node.left, env)
                if is_truthy(left):
                    return left
                return self.evaluate(node.right, env)
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return self.apply_binary_op(node.operator, left, right)
        if isinstance(node, CallExpression):
            callee = env.get(node.callee)
            args = [self.evaluate(arg, env) for arg in node.arguments]
            return self.call_function(node.callee, callee, args)
        if isinstance(node, IndexExpression):
            obj = self.evaluate(node.object, env)
            index = self.evaluate(node.index, env)
            if isinstance(obj, ArrayVal):
                return obj.items[self.resolve_index(index, len(obj.items), 'Array')]
            if isinstance(obj, str):
                units = utf16_units(obj)
                return join_utf16_units([units[self.resolve_index(index, len(units), 'String')]])
            raise LuxbinError('TypeError', 'Index operator requires an array or string')
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def resolve_index(self, index: Any, length: int, container: str) -> int:
        if not is_number(index):
            raise LuxbinError('TypeError', f"{container} index must be a number")
        if not math.isfinite(index):
            raise LuxbinError('IndexOutOfBounds', f"Index {format_number(index)} out of bounds (length {length})")
        idx = math.floor(index)
        if idx < 0 or idx >= length:
            raise LuxbinError('IndexOutOfBounds', f"Index {idx} out of bounds (length {length})")
        return idx

    def call_function(self, name: str, func: Any, args: List[Any]) -> Any:
        if self.debug_level >= 3:
            self.debug(f"call {name}({', '.join(to_display(a) for a in args)})")
        if isinstance(func, BuiltinFunction):
            return func.fn(args)
        if isinstance(func, FunctionValue):
            # parameters live in a fresh child of the closure frame
            call_env = Environment(parent=func.closure)
            for i, param in enumerate(func.declaration.params):
                # missing arguments are nil, extra ones are ignored
                call_env.define(param.name, args[i] if i < len(args) else NIL)
            res = self.execute_block(func.declaration.body, call_env)
            if isinstance(res, ReturnSignal):
                return res.value
            return NIL
        raise LuxbinError('NotCallable', f"'{name}' is not a function")

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        # String concatenation when either side is a string
        if op == '+' and (isinstance(a, str) or isinstance(b, str)):
            return to_display(a) + to_display(b)
        if is_number(a) and is_number(b):
            if op == '+':
                return a + b
            if op == '-':
                return a - b
            if op == '*':
                return a * b
            if op == '/':
                if b == 0:
                    raise LuxbinError('DivisionByZero', 'Division by zero')
                return a / b
            if op == '%':
                if b == 0:
                    raise LuxbinError('DivisionByZero', 'Division by zero')
                return remainder(a, b)
            if op == '^':
                return power(a, b)
            if op == '<':
                return a < b
            if op == '>':
                return a > b
            if op == '<=':
                return a <= b
            if op == '>=':
                return a >= b
        # Equality is defined for every pair of values
        if op == '==':
            return values_equal(a, b)
        if op == '!=':
            return not values_equal(a, b)
        if isinstance(a, str) and isinstance(b, str):
            if op == '<':
                return a < b
            if op == '>':
                return a > b
            if op == '<=':
                return a <= b
            if op == '>=':
                return a >= b
        raise LuxbinError('TypeError', f"Cannot apply operator '{op}' to {type_name(a)} and {type_name(b)}")


def run(source: str, *, seed: Optional[int] = None, rng: Optional[random.Random] = None,
        step_limit: int = STEP_LIMIT, debug_level: int = 0, debug_file: str = 'debug.txt',
        use_grammar: bool = False) -> RunResult:
    """Tokenize, parse and run a Luxbin program.

    Lex and parse errors are reported the same way as runtime errors: on
    the returned result, with no output and zero steps.
    """
    try:
        if use_grammar:
            from .grammar import parse_with_grammar
            program = parse_with_grammar(source)
        else:
            program = parse_program(source)
    except LuxbinError as e:
        return RunResult([], 0, e.message)
    interpreter = Interpreter(rng=rng, seed=seed, step_limit=step_limit,
                              debug_level=debug_level, debug_file=debug_file)
    return interpreter.run(program)
