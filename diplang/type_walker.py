"""Type inference over the syntax tree."""

from __future__ import annotations

import warnings

from .syntax_nodes import (
    BinaryExpr, BlockExpr, BoolExpr, CallExpr, ComparisonExpr, Expr, ExprType, FuncExpr,
    IfElseExpr, Int32Expr, LogicalExpr, NewVarExpr, PrintlnExpr, Real64Expr, StrExpr,
    TreeWalker, UnaryExpr, VarAssignExpr, VarExpr,
)


class TypeCheckError(Exception):
    """Raised when an expression cannot be given a type."""


class TypeWalker(TreeWalker):
    """Annotates every expression with the type it produces.

    Visiting returns the expression that carries the value: for variables the
    expression they were bound to, for calls the result of the function body.
    """

    def __init__(self) -> None:
        self.context: dict[str, Expr] = {}

    def visit_bool(self, expr: BoolExpr) -> Expr:
        expr.type = ExprType.BOOL
        return expr

    def visit_int32(self, expr: Int32Expr) -> Expr:
        expr.type = ExprType.I32
        return expr

    def visit_real64(self, expr: Real64Expr) -> Expr:
        expr.type = ExprType.R64
        return expr

    def visit_str(self, expr: StrExpr) -> Expr:
        expr.type = ExprType.STR
        return expr

    def visit_new_var(self, expr: NewVarExpr) -> Expr:
        init = self.visit(expr.value)
        expr.type = init.type
        name = expr.identifier.value
        if name in self.context:
            raise TypeCheckError(
                f"variable {name!r} already exists; use '=' to assign instead of ':='"
            )
        self.context[name] = init
        return init

    def visit_var_assign(self, expr: VarAssignExpr) -> Expr:
        value = self.visit(expr.value)
        expr.type = value.type
        self.context[expr.identifier.value] = value
        return value

    def visit_var(self, expr: VarExpr) -> Expr:
        name = expr.identifier.value
        try:
            value = self.context[name]
        except KeyError:
            raise TypeCheckError(f"unknown variable {name!r}") from None
        expr.type = value.type
        return value

    def visit_unary(self, expr: UnaryExpr) -> Expr:
        expr.type = self.visit(expr.value).type
        return expr

    def visit_comparison(self, expr: ComparisonExpr) -> Expr:
        self.visit(expr.left)
        self.visit(expr.right)
        expr.type = ExprType.BOOL
        return expr

    def visit_binary(self, expr: BinaryExpr) -> Expr:
        left = self.visit(expr.left)
        right = self.visit(expr.right)
        if ExprType.R64 in (left.type, right.type):
            expr.type = ExprType.R64
        else:
            expr.type = ExprType.I32
        return expr

    def visit_logical(self, expr: LogicalExpr) -> Expr:
        self.visit(expr.left)
        self.visit(expr.right)
        expr.type = ExprType.BOOL
        return expr

    def visit_if_else(self, expr: IfElseExpr) -> Expr:
        self.visit(expr.condition)
        then_type = self.visit(expr.then_block).type
        if expr.else_block is not None:
            else_type = self.visit(expr.else_block).type
            if else_type != then_type:
                warnings.warn(
                    "if and else blocks return different types", UserWarning, stacklevel=2
                )
        expr.type = then_type
        return expr

    def visit_block(self, expr: BlockExpr) -> Expr:
        if not expr.items:
            raise TypeCheckError("a block must hold at least one expression")
        last = None
        for item in expr.items:
            last = self.visit(item)
        expr.type = last.type
        return last

    def visit_func(self, expr: FuncExpr) -> Expr:
        expr.type = ExprType.FUNC
        return expr

    def visit_call(self, expr: CallExpr) -> Expr:
        func = self.visit(expr.func)
        if not isinstance(func, FuncExpr):
            raise TypeCheckError("called expression is not a function")
        args = [self.visit(arg) for arg in expr.args]
        if len(args) != len(func.args):
            raise TypeCheckError(
                f"function takes {len(func.args)} arguments but {len(args)} were given"
            )
        if not func.args_types:
            func.args_types = [arg.type for arg in args]

        outer = self.context
        self.context = {param.value: arg for param, arg in zip(func.args, args)}
        try:
            result = self.visit(func.body)
        finally:
            self.context = outer

        func.ret_type = expr.type = result.type
        return result

    def visit_println(self, expr: PrintlnExpr) -> Expr:
        for value in expr.values:
            self.visit(value)
        expr.type = ExprType.I32
        return expr