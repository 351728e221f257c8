"""Core interpreter runtime for dmm."""
from __future__ import annotations
import random
import sys
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .ast_nodes import *
from .types import (
    DmmValue, dmm_integer, dmm_bool, dmm_none,
    is_integer, is_boolean, orderable, less_than, greater_than,
    truncating_divide, type_name, source_text,
)
from .tokens import OUTPUT_PREFIX, INPUT_FUNCTION
from .scope import Frame, CallStack
from .worker import Worker
from .shouter import Shouter
from .lexer import Lexer, LexerError
from .parser import Parser, parse_answer
from .printer import unparse


class DmmError(Exception):
    """Fatal runtime error: the program broke a rule of the language."""
    pass


class FatigueAbort(Exception):
    """The worker asked and got the wrong answer. Ends the whole run."""
    def __init__(self, expected: DmmValue, answer: str):
        super().__init__(f"Wrong answer {answer!r}. It was {source_text(expected)}. I'm out.")
        self.expected = expected
        self.answer = answer


@dataclass(frozen=True)
class Returning:
    """Result of a ``zurück`` on its way up to the nearest function call."""
    value: DmmValue


Result = Union[DmmValue, Returning]

# Python frames, not dmm calls: one dmm call level takes about a dozen
RECURSION_LIMIT = 10000


class Interpreter:
    """The dmm interpreter."""

    def __init__(self, flags: dict | None = None, rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], float]] = None,
                 read_answer: Optional[Callable[[str], str]] = None,
                 sleep: Optional[Callable[[float], None]] = None):
        self.flags = flags or {}
        self.rng = rng or random.Random()
        self.read_answer = read_answer or input

        strict = self.flags.get("strict", False)
        self.call_stack = CallStack()
        self.worker = Worker(strict=strict, rng=self.rng, clock=clock)
        self.shouter = Shouter(robot=strict, rng=self.rng, write=self._write,
                               sleep=sleep or time.sleep)

        # Output capture (for testing)
        self.output: list[str] = []

    def _write(self, text: str):
        self.output.append(text)
        print(text)

    # ================================================
    # Main execution
    # ================================================

    def run(self, source: str) -> DmmValue:
        """Run a dmm program from source string."""
        program = Parser(Lexer(source)).parse()

        previous = sys.getrecursionlimit()
        sys.setrecursionlimit(max(previous, self.flags.get("recursion_limit", RECURSION_LIMIT)))
        try:
            return self.evaluate(program)
        except RecursionError as e:
            self.call_stack.unwind()
            raise DmmError("Stack overflow: too many nested calls") from e
        finally:
            sys.setrecursionlimit(previous)

    def evaluate(self, node: ASTNode, frame: Optional[Frame] = None) -> DmmValue:
        """Evaluate a node against ``frame`` (default: top of the call stack).

        A return that is not caught by any function call is reported and its
        value handed back.
        """
        result = self.visit(node, frame or self.call_stack.top)
        if isinstance(result, Returning):
            self._write(f"[dmm] This program threw at us a: {result.value}")
            return result.value
        return result

    def visit(self, node: ASTNode, frame: Frame) -> Result:
        """Evaluate one node, then let the worker have its say."""
        result = self._dispatch(node, frame)

        if self.worker.call():
            self._write(f"[dmm] {self.worker.mood}")
        if self.worker.wants_check(node):
            value = result.value if isinstance(result, Returning) else result
            self._check_in(node, frame, value)

        return result

    def _check_in(self, node: ASTNode, frame: Frame, value: DmmValue):
        """The worker is exhausted: ask what ``node`` evaluates to."""
        self._write(f"[dmm] {self.worker.mood} I need a break. Quick, help me out.")
        self._write(f"  scope: {frame.describe()}")
        self._write(f"  node:  {unparse(node)}")
        try:
            answer = self.read_answer("[dmm] what is it? ")
        except EOFError:
            answer = ""
        try:
            guess = parse_answer(answer)
        except LexerError as e:
            raise FatigueAbort(value, answer) from e
        if guess != value:
            raise FatigueAbort(value, answer)
        self.worker.reset()

    def _dispatch(self, node: ASTNode, frame: Frame) -> Result:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Variable):
            return self._eval_variable(node, frame)
        if isinstance(node, UnaryOp):
            return self._eval_unary(node, frame)
        if isinstance(node, BinOp):
            return self._eval_binary(node, frame)
        if isinstance(node, Compare):
            return self._eval_compare(node, frame)
        if isinstance(node, FunctionCall):
            return self._eval_function_call(node, frame)
        if isinstance(node, Assign):
            frame.set(node.target.name, self._value_of(node.value, frame))
            return dmm_none()
        if isinstance(node, FunctionDeclaration):
            if not frame.declare(node):
                raise DmmError(f"Function '{node.name}' already declared!")
            return dmm_none()
        if isinstance(node, Block):
            return self._exec_block(node, frame)
        if isinstance(node, If):
            return self._exec_if(node, frame)
        if isinstance(node, Loop):
            return self._exec_loop(node, frame)
        if isinstance(node, Return):
            return Returning(self._value_of(node.expression, frame))
        if isinstance(node, NoOp):
            return dmm_none()
        raise DmmError(f"Cannot evaluate {type(node).__name__}")

    def _value_of(self, node: ASTNode, frame: Frame) -> DmmValue:
        """Visit an expression. Expressions never carry a return upward."""
        result = self.visit(node, frame)
        if isinstance(result, Returning):
            return result.value
        return result

    # ================================================
    # Expressions
    # ================================================

    def _eval_variable(self, node: Variable, frame: Frame) -> DmmValue:
        value = frame.get(node.name)
        if value is None:
            raise DmmError(f"Unknown variable name: {node.name}")
        return value

    def _expect_number(self, value: DmmValue) -> int:
        if not is_integer(value):
            raise DmmError(f"Not a number! Got {type_name(value)} {source_text(value)}")
        return value.value

    def _expect_boolean(self, value: DmmValue, where: str) -> bool:
        if not is_boolean(value):
            raise DmmError(f"Condition of '{where}' must be :) or :(, got {type_name(value)}")
        return value.value

    def _eval_unary(self, node: UnaryOp, frame: Frame) -> DmmValue:
        operand = self._expect_number(self._value_of(node.operand, frame))
        if node.operator == "-":
            return dmm_integer(-operand)
        if node.operator == "+":
            return dmm_integer(operand)
        raise DmmError(f"Invalid unary operator: {node.operator}")

    def _eval_binary(self, node: BinOp, frame: Frame) -> DmmValue:
        left = self._expect_number(self._value_of(node.left, frame))
        right = self._expect_number(self._value_of(node.right, frame))
        op = node.operator

        if op == "+":
            return dmm_integer(left + right)
        if op == "-":
            return dmm_integer(left - right)
        if op == "*":
            return dmm_integer(left * right)
        if op == "/":
            if right == 0:
                raise DmmError("Division by zero")
            return dmm_integer(truncating_divide(left, right))
        raise DmmError(f"Invalid binary operator: {op}")

    def _eval_compare(self, node: Compare, frame: Frame) -> DmmValue:
        left = self._value_of(node.left, frame)
        right = self._value_of(node.right, frame)

        if node.kind == CompareKind.EQUALS:
            return dmm_bool(left == right)
        if not orderable(left, right):
            raise DmmError(f"Cannot order {type_name(left)} against {type_name(right)}")
        if node.kind == CompareKind.LESS:
            return dmm_bool(less_than(left, right))
        return dmm_bool(greater_than(left, right))

    def _eval_function_call(self, node: FunctionCall, caller: Frame) -> DmmValue:
        name = node.callee.name

        # Hard-coded output form: :O__, :O___, ...
        if name.startswith(OUTPUT_PREFIX):
            text = self._render(node.arguments, caller)
            self.shouter.emit(len(name) - len(OUTPUT_PREFIX) + 1, text)
            return dmm_none()

        # Hard-coded input form
        if name == INPUT_FUNCTION:
            return self._ask(self._render(node.arguments, caller))

        decl = caller.function(name)
        if decl is None:
            raise DmmError(f"Unknown function name: {name}")
        if len(decl.params) != len(node.arguments):
            raise DmmError(
                f"Invalid argument count! '{name}' takes {len(decl.params)}, "
                f"got {len(node.arguments)}"
            )

        # Arguments are evaluated in the caller's frame
        args = [self._value_of(arg, caller) for arg in node.arguments]
        callee = caller.child()
        for param, value in zip(decl.params, args):
            callee.set(param, value)

        self.call_stack.push(callee)
        try:
            result = self.visit(decl.body, callee)
        finally:
            self.call_stack.pop()

        if isinstance(result, Returning):
            return result.value
        return result

    def _render(self, arguments: list[ASTNode], frame: Frame) -> str:
        return "".join(str(self._value_of(arg, frame)) for arg in arguments)

    def _ask(self, prompt: str) -> DmmValue:
        """Read a literal from the user, e.g. ``42``, ``<text>`` or ``:)``."""
        try:
            answer = self.read_answer(prompt)
        except EOFError:
            answer = ""
        return parse_answer(answer)

    # ================================================
    # Statements
    # ================================================

    def _exec_block(self, block: Block, frame: Frame) -> Result:
        for stmt in block.statements:
            result = self.visit(stmt, frame)
            if isinstance(result, Returning):
                return result
        return dmm_none()

    def _exec_if(self, node: If, frame: Frame) -> Result:
        cond = self._value_of(node.condition, frame)
        if self._expect_boolean(cond, "falls"):
            result = self.visit(node.body, frame)
            if isinstance(result, Returning):
                return result
        return dmm_none()

    def _exec_loop(self, node: Loop, frame: Frame) -> Result:
        while self._expect_boolean(self._value_of(node.condition, frame), "schleif"):
            result = self.visit(node.body, frame)
            if isinstance(result, Returning):
                return result
        return dmm_none()
