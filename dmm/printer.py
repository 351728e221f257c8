"""Turn dmm ASTs back into text: canonical source and a tree dump."""
from __future__ import annotations

from .ast_nodes import *
from .tokens import TokenType, KEYWORD_TEXT
from .types import source_text

COMPARE_KEYWORDS = {
    CompareKind.EQUALS: KEYWORD_TEXT[TokenType.EQUALS],
    CompareKind.LESS: KEYWORD_TEXT[TokenType.LESS],
    CompareKind.GREATER: KEYWORD_TEXT[TokenType.GREATER],
}


def _kw(ttype: TokenType) -> str:
    return KEYWORD_TEXT[ttype]


def unparse_program(body: Block) -> str:
    """Source text of a whole program. Parsing it gives back ``body``."""
    lines = [_kw(TokenType.GREETING)]
    lines.extend(unparse(stmt) for stmt in body.statements)
    lines.append(_kw(TokenType.FAREWELL))
    return "\n".join(lines)


def unparse(node: ASTNode) -> str:
    """Canonical source for a node. Binary operations and comparisons are
    always parenthesized, so the text parses back to the same tree."""
    if isinstance(node, Literal):
        return source_text(node.value)
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, UnaryOp):
        return f"{node.operator}{unparse(node.operand)}"
    if isinstance(node, BinOp):
        return f"({unparse(node.left)} {node.operator} {unparse(node.right)})"
    if isinstance(node, Compare):
        return f"({unparse(node.left)} {COMPARE_KEYWORDS[node.kind]} {unparse(node.right)})"
    if isinstance(node, FunctionCall):
        args = ", ".join(unparse(arg) for arg in node.arguments)
        return f"{node.callee.name}({args})"
    if isinstance(node, Assign):
        return f"{node.target.name} = {unparse(node.value)}"
    if isinstance(node, If):
        return f"{_kw(TokenType.IF)} {unparse(node.condition)} {unparse(node.body)}"
    if isinstance(node, Loop):
        return f"{_kw(TokenType.LOOP)} {unparse(node.condition)} {unparse(node.body)}"
    if isinstance(node, FunctionDeclaration):
        params = ", ".join(node.params)
        return f"{_kw(TokenType.FUNCTION)} {node.name}({params}) {unparse(node.body)}"
    if isinstance(node, Return):
        return f"{_kw(TokenType.RETURN)} {unparse(node.expression)}"
    if isinstance(node, Block):
        lines = [_kw(TokenType.BLOCK_OPEN)]
        lines.extend(unparse(stmt) for stmt in node.statements)
        lines.append(_kw(TokenType.BLOCK_CLOSE))
        return "\n".join(lines)
    if isinstance(node, NoOp):
        return ""
    raise TypeError(f"Cannot unparse {type(node).__name__}")


def dump(node: ASTNode, indent: int = 0) -> str:
    """Indented tree view, one node per line."""
    pad = "  " * indent
    name = type(node).__name__

    if isinstance(node, Literal):
        return f"{pad}{name} {node.value!r}"
    if isinstance(node, Variable):
        return f"{pad}{name} {node.name}"
    if isinstance(node, FunctionDeclaration):
        head = f"{pad}{name} {node.name}({', '.join(node.params)})"
        return "\n".join([head, dump(node.body, indent + 1)])
    if isinstance(node, FunctionCall):
        lines = [f"{pad}{name} {node.callee.name}"]
        lines.extend(dump(arg, indent + 1) for arg in node.arguments)
        return "\n".join(lines)
    if isinstance(node, Assign):
        return "\n".join([f"{pad}{name} {node.target.name}", dump(node.value, indent + 1)])
    if isinstance(node, UnaryOp):
        return "\n".join([f"{pad}{name} {node.operator}", dump(node.operand, indent + 1)])
    if isinstance(node, Return):
        return "\n".join([f"{pad}{name}", dump(node.expression, indent + 1)])
    if isinstance(node, BinOp):
        return "\n".join([f"{pad}{name} {node.operator}",
                          dump(node.left, indent + 1), dump(node.right, indent + 1)])
    if isinstance(node, Compare):
        return "\n".join([f"{pad}{name} {node.kind.value}",
                          dump(node.left, indent + 1), dump(node.right, indent + 1)])
    if isinstance(node, (If, Loop)):
        return "\n".join([f"{pad}{name}",
                          dump(node.condition, indent + 1), dump(node.body, indent + 1)])
    if isinstance(node, Block):
        lines = [f"{pad}{name}"]
        lines.extend(dump(stmt, indent + 1) for stmt in node.statements)
        return "\n".join(lines)
    return f"{pad}{name}"
