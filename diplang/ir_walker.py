"""Lowering of a typed syntax tree to textual LLVM IR."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from pathlib import Path

from .syntax_nodes import (
    BinaryExpr, BlockExpr, BoolExpr, CallExpr, ComparisonExpr, Expr, ExprType, FuncExpr,
    IfElseExpr, Int32Expr, LogicalExpr, NewVarExpr, PrintlnExpr, Real64Expr, StrExpr,
    TreeWalker, UnaryExpr, VarAssignExpr, VarExpr,
)
from .tokens import Grapheme as G


class IRError(Exception):
    """Raised when the syntax tree cannot be lowered to IR."""


_LLVM_TYPES = {
    ExprType.VOID: "void",
    ExprType.BOOL: "i1",
    ExprType.I32: "i32",
    ExprType.R64: "double",
    ExprType.STR: "ptr",
    ExprType.FUNC: "ptr",
}

_COMPARISONS = {
    G.EQUAL_EQUAL: ("icmp eq", "fcmp oeq"),
    G.BANG_EQUAL: ("icmp ne", "fcmp one"),
    G.LESS: ("icmp slt", "fcmp olt"),
    G.LESS_EQUAL: ("icmp sle", "fcmp ole"),
    G.GREATER: ("icmp sgt", "fcmp ogt"),
    G.GREATER_EQUAL: ("icmp sge", "fcmp oge"),
}

_ARITHMETIC = {
    G.STAR: ("mul", "fmul"),
    G.SLASH: ("sdiv", "fdiv"),
    G.PLUS: ("add", "fadd"),
    G.MINUS: ("sub", "fsub"),
}

_PRINT_FORMATS = {
    ExprType.BOOL: "%i",
    ExprType.VOID: "%i",
    ExprType.I32: "%i",
    ExprType.R64: "%f",
    ExprType.STR: "%s",
    ExprType.FUNC: "%i",
}


def _llvm_type(expr_type: ExprType | None) -> str:
    if expr_type is None:
        raise IRError("expression type is unknown; run the type walker first")
    return _LLVM_TYPES[expr_type]


def _double_literal(value: float) -> str:
    return "0x" + struct.pack(">d", value).hex().upper()


def _escape(data: bytes) -> str:
    return "".join(
        chr(b) if 0x20 <= b < 0x7F and b not in b'"\\' else f"\\{b:02X}" for b in data
    )


@dataclass(frozen=True)
class IRValue:
    """A typed operand: a constant, a register, a global or a function."""

    type: str
    ref: str
    function: _Function | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{self.type} {self.ref}"


@dataclass
class _Block:
    name: str
    lines: list[str] = field(default_factory=list)

    @property
    def terminated(self) -> bool:
        return bool(self.lines) and self.lines[-1].split()[0] in ("ret", "br")

    def render(self) -> str:
        return "\n".join([f"{self.name}:", *(f"  {line}" for line in self.lines)])


class _Function:
    def __init__(self, name: str, ret_type: str, params: list[tuple[str, str]]) -> None:
        self.name = name
        self.ret_type = ret_type
        self.blocks: list[_Block] = []
        self._names: set[str] = set()
        self.params = [IRValue(ty, "%" + self.unique(pname)) for ty, pname in params]

    @property
    def ref(self) -> str:
        return f"@{self.name}"

    def unique(self, base: str) -> str:
        base = base or "tmp"
        name = base
        suffix = 0
        while name in self._names:
            suffix += 1
            name = f"{base}{suffix}"
        self._names.add(name)
        return name

    def add_block(self, base: str) -> _Block:
        block = _Block(self.unique(base))
        self.blocks.append(block)
        return block

    def render(self) -> str:
        params = ", ".join(str(p) for p in self.params)
        body = "\n\n".join(block.render() for block in self.blocks)
        return f"define {self.ret_type} {self.ref}({params}) {{\n{body}\n}}"


@dataclass
class _Slot:
    pointer: IRValue
    type: str


class IRWalker(TreeWalker):
    """Builds an LLVM IR module whose main function runs the top-level expressions."""

    def __init__(self, module_name: str = "my module") -> None:
        self.module_name = module_name
        self._strings: list[str] = []
        self._formats: dict[str, IRValue] = {}
        self._main = _Function("main", "i32", [])
        self._functions = [self._main]
        self._function = self._main
        self._block = self._main.add_block("entry")
        self._scope: dict[str, _Slot] = {}
        self._output: str | None = None

    # building helpers

    def _emit(self, line: str) -> None:
        if self._output is not None:
            raise IRError("the module is already finished")
        self._block.lines.append(line)

    def _instr(self, ty: str, text: str, name: str = "tmp") -> IRValue:
        ref = "%" + self._function.unique(name)
        self._emit(f"{ref} = {text}")
        return IRValue(ty, ref)

    def _branch(self, target: _Block) -> None:
        self._emit(f"br label %{target.name}")

    def _cond_branch(self, cond: IRValue, yes: _Block, no: _Block) -> None:
        self._emit(f"br {cond}, label %{yes.name}, label %{no.name}")

    def _value(self, expr: Expr) -> IRValue:
        value = self.visit(expr)
        if value is None:
            raise IRError(f"{type(expr).__name__} produces no value")
        return value

    def _slot(self, name: str) -> _Slot:
        try:
            return self._scope[name]
        except KeyError:
            raise IRError(f"unknown variable {name!r}") from None

    def _global_string(self, text: str) -> IRValue:
        name = f".str.{len(self._strings)}" if self._strings else ".str"
        data = text.encode("utf-8") + b"\0"
        self._strings.append(
            f'@{name} = private unnamed_addr constant [{len(data)} x i8] c"{_escape(data)}"'
        )
        return IRValue("ptr", f"@{name}")

    def _numeric(self, left: IRValue, right: IRValue, ops: tuple[str, str], result: str | None):
        int_op, float_op = ops
        if "double" in (left.type, right.type):
            if left.type != "double":
                left = self._instr("double", f"sitofp {left} to double", "conv")
            if right.type != "double":
                right = self._instr("double", f"sitofp {right} to double", "conv")
            op, ty = float_op, "double"
        else:
            op, ty = int_op, left.type
        return self._instr(result or ty, f"{op} {ty} {left.ref}, {right.ref}")

    # module output

    def finish(self) -> str:
        """Close main, check every block and return the module text."""
        if self._output is None:
            self._emit("ret i32 0")
            for function in self._functions:
                for block in function.blocks:
                    if not block.terminated:
                        raise IRError(
                            f"block {block.name!r} in {function.ref} has no terminator"
                        )
            self._output = self._render()
        return self._output

    def write(self, path: str | Path) -> None:
        """Write the finished module to a file."""
        Path(path).write_text(self.finish(), encoding="utf-8")

    def _render(self) -> str:
        parts = [f"; ModuleID = '{self.module_name}'\nsource_filename = \"{self.module_name}\""]
        if self._strings:
            parts.append("\n".join(self._strings))
        parts.append("declare i32 @printf(ptr, ...)")
        parts.extend(function.render() for function in self._functions)
        return "\n\n".join(parts) + "\n"

    # visitors

    def visit_bool(self, expr: BoolExpr) -> IRValue:
        return IRValue("i1", "true" if expr.value else "false")

    def visit_int32(self, expr: Int32Expr) -> IRValue:
        return IRValue("i32", str(expr.value))

    def visit_real64(self, expr: Real64Expr) -> IRValue:
        return IRValue("double", _double_literal(expr.value))

    def visit_str(self, expr: StrExpr) -> IRValue:
        return self._global_string(expr.value)

    def visit_new_var(self, expr: NewVarExpr) -> IRValue:
        value = self._value(expr.value)
        name = expr.identifier.value
        pointer = self._instr("ptr", f"alloca {value.type}", name)
        self._emit(f"store {value}, ptr {pointer.ref}")
        self._scope[name] = _Slot(pointer, value.type)
        return pointer

    def visit_var_assign(self, expr: VarAssignExpr) -> IRValue:
        value = self._value(expr.value)
        slot = self._slot(expr.identifier.value)
        self._emit(f"store {value}, ptr {slot.pointer.ref}")
        return value

    def visit_var(self, expr: VarExpr) -> IRValue:
        name = expr.identifier.value
        slot = self._slot(name)
        return self._instr(slot.type, f"load {slot.type}, ptr {slot.pointer.ref}", name)

    def visit_unary(self, expr: UnaryExpr) -> IRValue:
        value = self._value(expr.value)
        oper = expr.oper.grapheme
        if oper is G.PLUS:
            return value
        if oper is G.MINUS:
            if value.type == "double":
                return self._instr("double", f"fneg {value}", "neg")
            return self._instr(value.type, f"sub {value.type} 0, {value.ref}", "neg")
        raise IRError(f"unsupported unary operator {expr.oper.value!r}")

    def visit_comparison(self, expr: ComparisonExpr) -> IRValue:
        left = self._value(expr.left)
        right = self._value(expr.right)
        try:
            ops = _COMPARISONS[expr.oper.grapheme]
        except KeyError:
            raise IRError(f"unsupported comparison {expr.oper.value!r}") from None
        return self._numeric(left, right, ops, "i1")

    def visit_binary(self, expr: BinaryExpr) -> IRValue:
        left = self._value(expr.left)
        right = self._value(expr.right)
        try:
            ops = _ARITHMETIC[expr.oper.grapheme]
        except KeyError:
            raise IRError(f"unsupported binary operator {expr.oper.value!r}") from None
        return self._numeric(left, right, ops, None)

    def visit_logical(self, expr: LogicalExpr) -> IRValue:
        is_or = expr.oper.grapheme is G.OR
        prefix = "or" if is_or else "and"
        left_block = self._function.add_block(f"{prefix}Left")
        right_block = self._function.add_block(f"{prefix}Right")
        end_block = self._function.add_block("endOr" if is_or else "endAnd")

        self._branch(left_block)
        self._block = left_block
        left = self._value(expr.left)
        left_from = self._block
        if is_or:
            self._cond_branch(left, end_block, right_block)
        else:
            self._cond_branch(left, right_block, end_block)

        self._block = right_block
        right = self._value(expr.right)
        right_from = self._block
        self._branch(end_block)

        self._block = end_block
        return self._instr(
            "i1",
            f"phi i1 [ {left.ref}, %{left_from.name} ], [ {right.ref}, %{right_from.name} ]",
            f"{prefix}Res",
        )

    def visit_if_else(self, expr: IfElseExpr) -> None:
        condition = self._value(expr.condition)
        then_block = self._function.add_block("then")
        else_block = self._function.add_block("else")
        end_block = self._function.add_block("endIf")

        self._cond_branch(condition, then_block, else_block)

        self._block = then_block
        self.visit(expr.then_block)
        self._branch(end_block)

        self._block = else_block
        if expr.else_block is not None:
            self.visit(expr.else_block)
        self._branch(end_block)

        self._block = end_block
        return None

    def visit_block(self, expr: BlockExpr) -> IRValue | None:
        last = None
        for item in expr.items:
            last = self.visit(item)
        return last

    def visit_func(self, expr: FuncExpr) -> IRValue:
        if expr.ret_type is None or len(expr.args_types) != len(expr.args):
            raise IRError("function types are unknown; a function must be called to be typed")
        ret_type = _llvm_type(expr.ret_type)
        params = [(_llvm_type(t), tok.value) for t, tok in zip(expr.args_types, expr.args)]
        function = _Function(f"func{len(self._functions) - 1}", ret_type, params)
        self._functions.append(function)

        outer = (self._function, self._block, self._scope)
        self._function = function
        self._block = function.add_block("entry")
        self._scope = {}
        try:
            for param, tok in zip(function.params, expr.args):
                pointer = self._instr("ptr", f"alloca {param.type}", tok.value)
                self._emit(f"store {param}, ptr {pointer.ref}")
                self._scope[tok.value] = _Slot(pointer, param.type)

            result = self.visit(expr.body)
            if ret_type == "void":
                self._emit("ret void")
            elif result is None:
                raise IRError("function body produces no value to return")
            else:
                self._emit(f"ret {result}")
        finally:
            self._function, self._block, self._scope = outer

        return IRValue("ptr", function.ref, function)

    def visit_call(self, expr: CallExpr) -> IRValue | None:
        args = [self._value(arg) for arg in expr.args]
        callee = self._value(expr.func)
        if callee.function is not None:
            ret_type = callee.function.ret_type
        else:
            ret_type = _llvm_type(expr.type)
        operands = ", ".join(str(arg) for arg in args)
        text = f"call {ret_type} {callee.ref}({operands})"
        if ret_type == "void":
            self._emit(text)
            return None
        return self._instr(ret_type, text, "call")

    def visit_println(self, expr: PrintlnExpr) -> IRValue:
        formats = []
        args = []
        for value_expr in expr.values:
            value = self._value(value_expr)
            if value_expr.type is None:
                raise IRError("expression type is unknown; run the type walker first")
            if value_expr.type is ExprType.BOOL:
                value = self._instr("i32", f"zext {value} to i32", "zext")
            formats.append(_PRINT_FORMATS[value_expr.type])
            args.append(value)
        fmt = ", ".join(formats) + "\n"
        if fmt not in self._formats:
            self._formats[fmt] = self._global_string(fmt)
        operands = ", ".join(str(a) for a in [self._formats[fmt], *args])
        return self._instr("i32", f"call i32 (ptr, ...) @printf({operands})", "call")