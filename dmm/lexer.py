"""Lexer for dmm. Turns source text into a lazy stream of Tokens."""
from __future__ import annotations
from typing import Iterator

from .tokens import Token, TokenType, KEYWORDS, PUNCTUATION, BOOLEAN_GLYPHS

DIGITS = "0123456789"


class LexerError(Exception):
    stage = "Syntax"

    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"[dmm L{line}:C{column}] {self.stage} error: {message}")
        self.message = message
        self.line = line
        self.column = column


class Lexer:
    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def error(self, msg: str) -> LexerError:
        return LexerError(msg, self.line, self.column)

    @property
    def current(self) -> str:
        if self.pos >= len(self.source):
            return "\0"
        return self.source[self.pos]

    def peek(self, offset: int = 1) -> str:
        p = self.pos + offset
        if p >= len(self.source):
            return "\0"
        return self.source[p]

    def advance(self) -> str:
        ch = self.current
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def skip_spaces(self):
        """Skip plain spaces. Tabs and other whitespace are not skipped."""
        while self.pos < len(self.source) and self.current == " ":
            self.advance()

    def read_integer(self) -> int:
        start = self.pos
        while self.pos < len(self.source) and self.current in DIGITS:
            self.advance()
        return int(self.source[start : self.pos])

    def read_string(self) -> str:
        """Read a <...> text literal."""
        self.advance()  # skip <
        start = self.pos
        while self.pos < len(self.source) and self.current != ">":
            self.advance()
        if self.pos >= len(self.source):
            raise self.error("Missing string closure: >")
        text = self.source[start : self.pos]
        self.advance()  # skip >
        return text

    @staticmethod
    def _extends_keyword(ch: str) -> bool:
        return ch.isalnum() or ch in (" ", "_")

    @staticmethod
    def _extends_identifier(ch: str) -> bool:
        return ch.isalnum() or ch == "_"

    def read_keyword_or_identifier(self, line: int, col: int) -> Token:
        """Greedy keyword scan, falling back to an identifier.

        The run grows one character at a time over letters, digits, spaces and
        underscores; the first time it spells a keyword exactly, that keyword
        wins. Otherwise only the identifier part (no spaces) is taken.
        """
        start = self.pos
        end = start + 1
        while True:
            text = self.source[start:end]
            if text in KEYWORDS:
                for _ in range(end - start):
                    self.advance()
                return Token(KEYWORDS[text], text, line, col)
            if end < len(self.source) and self._extends_keyword(self.source[end]):
                end += 1
            else:
                break

        # No keyword: back to the start character, read an identifier
        self.advance()
        while self.pos < len(self.source) and self._extends_identifier(self.current):
            self.advance()
        return Token(TokenType.IDENTIFIER, self.source[start : self.pos], line, col)

    def next_token(self) -> Token:
        """Return the next token. EOF is returned again on every further call."""
        self.skip_spaces()

        line, col = self.line, self.column
        if self.pos >= len(self.source):
            return Token(TokenType.EOF, None, line, col)

        ch = self.current

        if ch in DIGITS:
            return Token(TokenType.INTEGER, self.read_integer(), line, col)

        if ch == "<":
            return Token(TokenType.STRING, self.read_string(), line, col)

        glyph = ch + self.peek()
        if glyph in BOOLEAN_GLYPHS:
            self.advance()
            self.advance()
            return Token(TokenType.BOOLEAN, BOOLEAN_GLYPHS[glyph], line, col)

        if ch in PUNCTUATION:
            self.advance()
            return Token(PUNCTUATION[ch], ch, line, col)

        # ':' may start an identifier, for the :O__ output form
        if ch.isalnum() or ch in ("_", ":"):
            return self.read_keyword_or_identifier(line, col)

        raise self.error(f"No suitable token for {ch!r}")

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source. The list ends with the EOF token."""
        return list(self)
