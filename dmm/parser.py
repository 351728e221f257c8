"""Recursive descent parser for dmm."""
from __future__ import annotations
from typing import Optional

from .tokens import Token, TokenType
from .lexer import Lexer, LexerError
from .ast_nodes import *
from .types import DmmValue, dmm_integer, dmm_text, dmm_bool, dmm_none


class ParseError(LexerError):
    stage = "Parse"

    def __init__(self, found: Token, expected: str):
        super().__init__(
            f"Unexpected token {found.type.name} ({found.value!r}), expected {expected}",
            found.line, found.column,
        )
        self.found = found
        self.expected = expected


COMPARISONS = {
    TokenType.EQUALS: CompareKind.EQUALS,
    TokenType.LESS: CompareKind.LESS,
    TokenType.GREATER: CompareKind.GREATER,
}


class Parser:
    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.current: Token = lexer.next_token()

    # ================================================
    # Utilities
    # ================================================

    def advance(self) -> Token:
        tok = self.current
        self.current = self.lexer.next_token()
        return tok

    def expect(self, ttype: TokenType, expected: str = "") -> Token:
        if self.current.type != ttype:
            raise ParseError(self.current, expected or ttype.name)
        return self.advance()

    def match(self, *types: TokenType) -> Optional[Token]:
        if self.current.type in types:
            return self.advance()
        return None

    # ================================================
    # Top-level
    # ================================================

    def parse(self) -> Block:
        """Parse a whole program and return its body."""
        program = self.program()
        self.expect(TokenType.EOF, "EOF")
        return program

    def program(self) -> Block:
        # PROGRAM := hallo NEWLINE STATEMENT_LIST reicht dann auch mal
        self.expect(TokenType.GREETING, "hallo")
        self.expect(TokenType.NEWLINE, "line break after hallo")
        body = Block(self.statement_list())
        self.expect(TokenType.FAREWELL, "reicht dann auch mal")
        return body

    def parse_answer(self) -> DmmValue:
        """Parse a typed answer: a single literal and nothing else.

        A lone ``-`` stands for none, the way none is displayed.
        """
        sign = self.match(TokenType.PLUS, TokenType.MINUS)
        if sign and sign.value == "-" and self.current.type == TokenType.EOF:
            return dmm_none()
        if self.current.type == TokenType.INTEGER:
            value = self.advance().value
            if sign and sign.value == "-":
                value = -value
            result = dmm_integer(value)
        elif sign:
            raise ParseError(self.current, "Integer")
        elif self.current.type == TokenType.STRING:
            result = dmm_text(self.advance().value)
        elif self.current.type == TokenType.BOOLEAN:
            result = dmm_bool(self.advance().value)
        else:
            raise ParseError(self.current, "Literal")
        self.expect(TokenType.EOF, "EOF")
        return result

    # ================================================
    # Statements
    # ================================================

    def statement_list(self) -> list[ASTNode]:
        """Statements separated by single line breaks. Stops consuming line
        breaks at the first empty statement."""
        statements = [self.statement()]
        while self.current.type == TokenType.NEWLINE:
            self.advance()
            node = self.statement()
            if isinstance(node, NoOp):
                break
            statements.append(node)
        return [node for node in statements if not isinstance(node, NoOp)]

    def statement(self) -> ASTNode:
        tok = self.current

        if tok.type == TokenType.IDENTIFIER:
            target = Variable(self.advance().value)
            if self.current.type == TokenType.ASSIGN:
                return self.assignment(target)
            if self.current.type == TokenType.LPAREN:
                return FunctionCall(target, self.arguments())
            raise ParseError(self.current, "= or (")

        if tok.type == TokenType.IF:
            return self.if_statement()
        if tok.type == TokenType.FUNCTION:
            return self.function_declaration()
        if tok.type == TokenType.LOOP:
            return self.loop_statement()
        if tok.type == TokenType.ASSIGN_PREFIX:
            return self.prefixed_assignment()
        if tok.type == TokenType.RETURN:
            self.advance()
            return Return(self.expr())

        return NoOp()

    def assignment(self, target: Variable) -> Assign:
        self.expect(TokenType.ASSIGN, "=")
        return Assign(target, self.expr())

    def prefixed_assignment(self) -> Assign:
        # setze NAME auf EXPR
        self.expect(TokenType.ASSIGN_PREFIX, "setze")
        name = self.expect(TokenType.IDENTIFIER, "Variable").value
        self.expect(TokenType.ASSIGN_INFIX, "auf")
        return Assign(Variable(name), self.expr())

    def block(self) -> Block:
        self.expect(TokenType.BLOCK_OPEN, "avo")
        statements = self.statement_list()
        self.expect(TokenType.BLOCK_CLOSE, "cado")
        return Block(statements)

    def if_statement(self) -> If:
        self.expect(TokenType.IF, "falls")
        condition = self.expr()
        return If(condition, self.block())

    def loop_statement(self) -> Loop:
        self.expect(TokenType.LOOP, "schleif")
        condition = self.expr()
        return Loop(condition, self.block())

    def function_declaration(self) -> FunctionDeclaration:
        self.expect(TokenType.FUNCTION, "funny")
        name = self.expect(TokenType.IDENTIFIER, "function name").value
        self.expect(TokenType.LPAREN, "(")
        params: list[str] = []
        if self.current.type != TokenType.RPAREN:
            while True:
                tok = self.expect(TokenType.IDENTIFIER, "parameter name")
                if tok.value in params:
                    raise ParseError(tok, "unique parameter name")
                params.append(tok.value)
                if not self.match(TokenType.COMMA):
                    break
        self.expect(TokenType.RPAREN, ")")
        return FunctionDeclaration(name, params, self.block())

    def arguments(self) -> list[ASTNode]:
        self.expect(TokenType.LPAREN, "(")
        args: list[ASTNode] = []
        if self.current.type != TokenType.RPAREN:
            args.append(self.expr())
            while self.match(TokenType.COMMA):
                args.append(self.expr())
        self.expect(TokenType.RPAREN, ")")
        return args

    # ================================================
    # Expressions
    # ================================================

    def expr(self) -> ASTNode:
        # EXPR := TERM ((PLUS|MINUS) TERM)*
        node = self.term()
        while self.current.type in (TokenType.PLUS, TokenType.MINUS):
            op = self.advance().value
            node = BinOp(node, op, self.term())
        return node

    def term(self) -> ASTNode:
        # TERM := PRODUCT [(gleich|kleiner|größer) PRODUCT]
        node = self.product()
        if self.current.type in COMPARISONS:
            kind = COMPARISONS[self.advance().type]
            node = Compare(node, self.product(), kind)
        return node

    def product(self) -> ASTNode:
        # PRODUCT := FACTOR ((MUL|DIV) FACTOR)*
        node = self.factor()
        while self.current.type in (TokenType.STAR, TokenType.SLASH):
            op = self.advance().value
            node = BinOp(node, op, self.factor())
        return node

    def factor(self) -> ASTNode:
        # FACTOR := (+|-) FACTOR | INTEGER | STRING | BOOLEAN | (EXPR) | ID | ID(ARGS)
        tok = self.current

        if tok.type in (TokenType.PLUS, TokenType.MINUS):
            self.advance()
            return UnaryOp(tok.value, self.factor())
        if tok.type == TokenType.INTEGER:
            self.advance()
            return Literal(dmm_integer(tok.value))
        if tok.type == TokenType.STRING:
            self.advance()
            return Literal(dmm_text(tok.value))
        if tok.type == TokenType.BOOLEAN:
            self.advance()
            return Literal(dmm_bool(tok.value))
        if tok.type == TokenType.LPAREN:
            self.advance()
            node = self.expr()
            self.expect(TokenType.RPAREN, ")")
            return node
        if tok.type == TokenType.IDENTIFIER:
            self.advance()
            variable = Variable(tok.value)
            if self.current.type == TokenType.LPAREN:
                return FunctionCall(variable, self.arguments())
            return variable

        raise ParseError(tok, "Variable")


def parse(source: str) -> Block:
    """Tokenize and parse a program."""
    return Parser(Lexer(source)).parse()


def parse_answer(text: str) -> DmmValue:
    """Tokenize and parse a typed answer into a value."""
    return Parser(Lexer(text)).parse_answer()
