"""Recursive-descent parser producing syntax tree nodes."""

from __future__ import annotations

from typing import Iterable

from .syntax_nodes import (
    BinaryExpr, BlockExpr, BoolExpr, CallExpr, ComparisonExpr, Expr, FuncExpr,
    IfElseExpr, Int32Expr, LogicalExpr, NewVarExpr, PrintlnExpr, Real64Expr, StrExpr,
    UnaryExpr, VarAssignExpr, VarExpr,
)
from .tokens import Grapheme as G
from .tokens import Token

_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1
_EOF = Token(G.END_OF_FILE, "")


class ParseError(ValueError):
    """Raised when the token stream does not form a valid program."""


class Parser:
    """Parses a token list into top-level expressions."""

    def __init__(self, tokens: Iterable[Token]) -> None:
        self.tokens = list(tokens)
        self.pos = 0

    def _top(self, offset: int = 0) -> Token:
        if not self.tokens:
            return _EOF
        i = self.pos + offset
        return self.tokens[i] if 0 <= i < len(self.tokens) else self.tokens[-1]

    def _pop(self) -> Token:
        tok = self._top()
        self.pos += 1
        return tok

    def _next_is(self, *graphemes: G) -> bool:
        return all(self._top(i).grapheme is g for i, g in enumerate(graphemes))

    def _at_end(self) -> bool:
        return self._top().grapheme is G.END_OF_FILE

    def _expect(self, grapheme: G, message: str) -> None:
        if self._top().grapheme is not grapheme:
            raise ParseError(f"{message} at {self._top().line}:{self._top().column}")
        self._pop()

    def _required(self, expr: Expr | None) -> Expr:
        if expr is None:
            tok = self._top()
            raise ParseError(f"expected an expression at {tok.line}:{tok.column}")
        return expr

    def _primitive(self) -> Expr | None:
        tok = self._top()
        if tok.grapheme is G.FALSE:
            self._pop()
            return BoolExpr(False)
        if tok.grapheme is G.TRUE:
            self._pop()
            return BoolExpr(True)
        if tok.grapheme is G.NUMBER:
            self._pop()
            if "." in tok.value:
                return Real64Expr(float(tok.value))
            value = int(tok.value)
            if not _INT32_MIN <= value <= _INT32_MAX:
                raise ParseError(f"integer out of range: {tok.value}")
            return Int32Expr(value)
        if tok.grapheme is G.STRING:
            self._pop()
            return StrExpr(tok.value)
        if tok.grapheme is G.IDENTIFIER:
            self._pop()
            return VarExpr(tok)
        if tok.grapheme is G.LEFT_PAREN:
            self._pop()
            expr = self._expression()
            self._expect(G.RIGHT_PAREN, "expected ')'")
            return expr
        return None

    def _unary(self) -> Expr | None:
        if self._top().grapheme in (G.BANG, G.MINUS, G.PLUS):
            oper = self._pop()
            return UnaryExpr(oper, self._required(self._unary()))
        prim = self._primitive()
        if self._next_is(G.LEFT_PAREN):
            self._pop()
            args = []
            while not self._next_is(G.RIGHT_PAREN):
                if self._at_end():
                    raise ParseError("expected ')' to close the call")
                args.append(self._required(self._expression()))
                if self._next_is(G.COMMA):
                    self._pop()
            self._pop()
            prim = CallExpr(prim, args)
        return prim

    def _binary_level(self, operand, opers, node):
        left = operand()
        while self._top().grapheme in opers:
            oper = self._pop()
            left = node(oper, self._required(left), self._required(operand()))
        return left

    def _factor(self):
        return self._binary_level(self._unary, (G.STAR, G.SLASH), BinaryExpr)

    def _term(self):
        return self._binary_level(self._factor, (G.PLUS, G.MINUS), BinaryExpr)

    def _comparison(self):
        return self._binary_level(
            self._term, (G.GREATER, G.GREATER_EQUAL, G.LESS, G.LESS_EQUAL), ComparisonExpr
        )

    def _equality(self):
        return self._binary_level(self._comparison, (G.BANG_EQUAL, G.EQUAL_EQUAL), ComparisonExpr)

    def _logical_and(self):
        expr = self._equality()
        if self._next_is(G.AND):
            oper = self._pop()
            expr = LogicalExpr(oper, self._required(expr), self._required(self._equality()))
        return expr

    def _logical_or(self):
        expr = self._logical_and()
        if self._next_is(G.OR):
            oper = self._pop()
            expr = LogicalExpr(oper, self._required(expr), self._required(self._logical_and()))
        return expr

    def _block(self) -> BlockExpr:
        items = []
        start = self._top().column
        while not self._at_end() and self._top().column == start:
            items.append(self._required(self._expression()))
        return BlockExpr(items)

    def _func(self) -> FuncExpr:
        args = []
        with_paren = self._next_is(G.LEFT_PAREN)
        if with_paren:
            self._pop()
        while self._top().grapheme is G.IDENTIFIER:
            args.append(self._pop())
            if self._next_is(G.COMMA):
                self._pop()
            else:
                break
        if with_paren:
            self._expect(G.RIGHT_PAREN, "expected ')' after arguments")
        self._expect(G.MINUS_GREATER, "expected '->'")
        return FuncExpr(args, self._block())

    def _if_else(self) -> IfElseExpr:
        self._pop()
        condition = self._required(self._expression())
        then_block = self._block()
        else_block = None
        if self._next_is(G.ELSE):
            self._pop()
            else_block = self._block()
        return IfElseExpr(condition, then_block, else_block)

    def _is_next_func(self) -> bool:
        offset = 0
        with_paren = self._top().grapheme is G.LEFT_PAREN
        if with_paren:
            offset += 1
        while self._top(offset).grapheme is G.IDENTIFIER:
            offset += 1
            if self._top(offset).grapheme is G.COMMA:
                offset += 1
        if with_paren:
            if self._top(offset).grapheme is not G.RIGHT_PAREN:
                return False
            offset += 1
        return self._top(offset).grapheme is G.MINUS_GREATER

    def _println(self) -> PrintlnExpr:
        self._pop()
        with_paren = self._next_is(G.LEFT_PAREN)
        if with_paren:
            self._pop()
        values = [self._required(self._logical_or())]
        while self._next_is(G.COMMA):
            self._pop()
            values.append(self._required(self._logical_or()))
        if with_paren:
            self._expect(G.RIGHT_PAREN, "expected ')' after println arguments")
        return PrintlnExpr(values)

    def _expression(self) -> Expr | None:
        if self._next_is(G.IDENTIFIER, G.COLON_EQUAL):
            ident = self._pop()
            self._pop()
            return NewVarExpr(ident, self._required(self._expression()))
        if self._next_is(G.IDENTIFIER, G.EQUAL):
            ident = self._pop()
            self._pop()
            return VarAssignExpr(ident, self._required(self._expression()))
        top = self._top()
        if top.grapheme is G.IDENTIFIER and top.value == "println":
            return self._println()
        if self._is_next_func():
            return self._func()
        if self._next_is(G.IF):
            return self._if_else()
        return self._logical_or()

    def parse(self) -> list[Expr]:
        """Parse all top-level expressions, skipping tokens that start none."""
        self.pos = 0
        expressions = []
        while not self._at_end():
            expr = self._expression()
            if expr is None:
                self.pos += 1
            else:
                expressions.append(expr)
        return expressions


def parse_syntax_tree(tokens: Iterable[Token]) -> list[Expr]:
    """Parse a token list into top-level expressions."""
    return Parser(tokens).parse()