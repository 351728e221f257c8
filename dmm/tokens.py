"""Token types for dmm."""
from enum import Enum, auto
from dataclasses import dataclass
from typing import Any


class TokenType(Enum):
    # === Literals ===
    INTEGER = auto()
    STRING = auto()
    BOOLEAN = auto()
    IDENTIFIER = auto()

    # === Program frame ===
    GREETING = auto()
    FAREWELL = auto()

    # === Blocks ===
    BLOCK_OPEN = auto()
    BLOCK_CLOSE = auto()

    # === Statements ===
    FUNCTION = auto()
    IF = auto()
    LOOP = auto()
    RETURN = auto()
    ASSIGN_PREFIX = auto()
    ASSIGN_INFIX = auto()

    # === Comparison ===
    EQUALS = auto()
    LESS = auto()
    GREATER = auto()

    # === Arithmetic ===
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()

    # === Delimiters ===
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()
    ASSIGN = auto()           # =

    # === Special ===
    NEWLINE = auto()
    EOF = auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: Any
    line: int
    column: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, L{self.line}:C{self.column})"


# Keywords mapping. Keys may contain spaces; the lexer matches them verbatim.
KEYWORDS: dict[str, TokenType] = {
    "hallo": TokenType.GREETING,
    "reicht dann auch mal": TokenType.FAREWELL,

    "avo": TokenType.BLOCK_OPEN,
    "cado": TokenType.BLOCK_CLOSE,

    "funny": TokenType.FUNCTION,
    "falls": TokenType.IF,
    "schleif": TokenType.LOOP,
    "zurück": TokenType.RETURN,
    "setze": TokenType.ASSIGN_PREFIX,
    "auf": TokenType.ASSIGN_INFIX,

    "gleich": TokenType.EQUALS,
    "kleiner": TokenType.LESS,
    "größer": TokenType.GREATER,
}

# Reverse lookup, used when printing source back out
KEYWORD_TEXT: dict[TokenType, str] = {ttype: text for text, ttype in KEYWORDS.items()}

PUNCTUATION: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
    "=": TokenType.ASSIGN,
    "\n": TokenType.NEWLINE,
}

# Boolean literal notation: a colon followed by a parenthesis
BOOLEAN_GLYPHS: dict[str, bool] = {
    ":)": True,
    ":(": False,
}

# Reserved call forms
OUTPUT_PREFIX = ":O__"
INPUT_FUNCTION = "frag"
