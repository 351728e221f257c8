"""AST node definitions for dmm."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .types import DmmValue, dmm_none


# ============================================================
# Base
# ============================================================

@dataclass
class ASTNode:
    """Base for all AST nodes."""
    pass


@dataclass
class NoOp(ASTNode):
    """Empty statement. The parser filters these out of statement lists."""
    pass


@dataclass
class Block(ASTNode):
    statements: list[ASTNode] = field(default_factory=list)


# ============================================================
# Expressions
# ============================================================

@dataclass
class Literal(ASTNode):
    value: DmmValue = field(default_factory=dmm_none)


@dataclass
class Variable(ASTNode):
    name: str = ""


@dataclass
class UnaryOp(ASTNode):
    operator: str = ""  # "+" or "-"
    operand: ASTNode = field(default_factory=NoOp)


@dataclass
class BinOp(ASTNode):
    left: ASTNode = field(default_factory=NoOp)
    operator: str = ""  # "+", "-", "*", "/"
    right: ASTNode = field(default_factory=NoOp)


class CompareKind(Enum):
    EQUALS = "Equals"
    LESS = "Less"
    GREATER = "Greater"


@dataclass
class Compare(ASTNode):
    left: ASTNode = field(default_factory=NoOp)
    right: ASTNode = field(default_factory=NoOp)
    kind: CompareKind = CompareKind.EQUALS


@dataclass
class FunctionCall(ASTNode):
    callee: Variable = field(default_factory=Variable)
    arguments: list[ASTNode] = field(default_factory=list)


# ============================================================
# Statements
# ============================================================

@dataclass
class Assign(ASTNode):
    target: Variable = field(default_factory=Variable)
    value: ASTNode = field(default_factory=NoOp)


@dataclass
class FunctionDeclaration(ASTNode):
    """A named function. The node itself is what frames store, so the body is
    shared by every frame that can see the function, never copied."""
    name: str = ""
    params: list[str] = field(default_factory=list)
    body: Block = field(default_factory=Block)


@dataclass
class If(ASTNode):
    condition: ASTNode = field(default_factory=NoOp)
    body: Block = field(default_factory=Block)


@dataclass
class Loop(ASTNode):
    condition: ASTNode = field(default_factory=NoOp)
    body: Block = field(default_factory=Block)


@dataclass
class Return(ASTNode):
    expression: ASTNode = field(default_factory=NoOp)
