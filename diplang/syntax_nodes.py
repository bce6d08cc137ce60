"""Syntax tree nodes and the walker interface over them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, ClassVar, Iterable

from .tokens import Token


class ExprType(Enum):
    """The value type an expression produces."""

    VOID = auto()
    BOOL = auto()
    I32 = auto()
    R64 = auto()
    STR = auto()
    FUNC = auto()


@dataclass
class Expr:
    """Base of all syntax tree nodes."""

    _visitor: ClassVar[str] = ""
    type: ExprType | None = field(default=None, kw_only=True, compare=False)

    def accept(self, walker: "TreeWalker") -> Any:
        """Dispatch to the walker method for this node kind."""
        return getattr(walker, self._visitor)(self)


@dataclass
class BoolExpr(Expr):
    _visitor: ClassVar[str] = "visit_bool"
    value: bool


@dataclass
class Int32Expr(Expr):
    _visitor: ClassVar[str] = "visit_int32"
    value: int


@dataclass
class Real64Expr(Expr):
    _visitor: ClassVar[str] = "visit_real64"
    value: float


@dataclass
class StrExpr(Expr):
    _visitor: ClassVar[str] = "visit_str"
    value: str


@dataclass
class VarExpr(Expr):
    _visitor: ClassVar[str] = "visit_var"
    identifier: Token


@dataclass
class NewVarExpr(Expr):
    _visitor: ClassVar[str] = "visit_new_var"
    identifier: Token
    value: Expr


@dataclass
class VarAssignExpr(Expr):
    _visitor: ClassVar[str] = "visit_var_assign"
    identifier: Token
    value: Expr


@dataclass
class UnaryExpr(Expr):
    _visitor: ClassVar[str] = "visit_unary"
    oper: Token
    value: Expr


@dataclass
class ComparisonExpr(Expr):
    _visitor: ClassVar[str] = "visit_comparison"
    oper: Token
    left: Expr
    right: Expr


@dataclass
class BinaryExpr(Expr):
    _visitor: ClassVar[str] = "visit_binary"
    oper: Token
    left: Expr
    right: Expr


@dataclass
class LogicalExpr(Expr):
    _visitor: ClassVar[str] = "visit_logical"
    oper: Token
    left: Expr
    right: Expr


@dataclass
class BlockExpr(Expr):
    _visitor: ClassVar[str] = "visit_block"
    items: list[Expr]


@dataclass
class IfElseExpr(Expr):
    _visitor: ClassVar[str] = "visit_if_else"
    condition: Expr
    then_block: BlockExpr
    else_block: BlockExpr | None


@dataclass
class FuncExpr(Expr):
    _visitor: ClassVar[str] = "visit_func"
    args: list[Token]
    body: Expr
    args_types: list[ExprType] = field(default_factory=list, compare=False)
    ret_type: ExprType | None = field(default=None, compare=False)


@dataclass
class CallExpr(Expr):
    _visitor: ClassVar[str] = "visit_call"
    func: Expr
    args: list[Expr]


@dataclass
class PrintlnExpr(Expr):
    _visitor: ClassVar[str] = "visit_println"
    values: list[Expr]


class TreeWalker(ABC):
    """Visits every kind of syntax tree node."""

    def run(self, syntax: Iterable[Expr]) -> list[Any]:
        """Visit top-level expressions in order and return their results."""
        return [self.visit(expr) for expr in syntax]

    def visit(self, expr: Expr) -> Any:
        return expr.accept(self)

    @abstractmethod
    def visit_bool(self, expr: BoolExpr) -> Any: ...

    @abstractmethod
    def visit_int32(self, expr: Int32Expr) -> Any: ...

    @abstractmethod
    def visit_real64(self, expr: Real64Expr) -> Any: ...

    @abstractmethod
    def visit_str(self, expr: StrExpr) -> Any: ...

    @abstractmethod
    def visit_new_var(self, expr: NewVarExpr) -> Any: ...

    @abstractmethod
    def visit_var_assign(self, expr: VarAssignExpr) -> Any: ...

    @abstractmethod
    def visit_var(self, expr: VarExpr) -> Any: ...

    @abstractmethod
    def visit_unary(self, expr: UnaryExpr) -> Any: ...

    @abstractmethod
    def visit_comparison(self, expr: ComparisonExpr) -> Any: ...

    @abstractmethod
    def visit_binary(self, expr: BinaryExpr) -> Any: ...

    @abstractmethod
    def visit_logical(self, expr: LogicalExpr) -> Any: ...

    @abstractmethod
    def visit_if_else(self, expr: IfElseExpr) -> Any: ...

    @abstractmethod
    def visit_block(self, expr: BlockExpr) -> Any: ...

    @abstractmethod
    def visit_func(self, expr: FuncExpr) -> Any: ...

    @abstractmethod
    def visit_call(self, expr: CallExpr) -> Any: ...

    @abstractmethod
    def visit_println(self, expr: PrintlnExpr) -> Any: ...