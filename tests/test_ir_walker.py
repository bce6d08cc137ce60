import pytest

from diplang.ir_walker import IRError, IRWalker
from diplang.parser import parse_syntax_tree
from diplang.syntax_nodes import BoolExpr, Int32Expr
from diplang.tokens import tokenize
from diplang.type_walker import TypeWalker


def walker_for(text):
    syntax = parse_syntax_tree(tokenize(text))
    TypeWalker().run(syntax)
    walker = IRWalker()
    walker.run(syntax)
    return walker


def emit(text):
    return walker_for(text).finish()


def block_ends(ir):
    ends = []
    last = None
    for line in ir.splitlines():
        stripped = line.strip()
        is_label = not line.startswith(" ") and stripped.endswith(":")
        if is_label or stripped == "}":
            if last is not None:
                ends.append(last)
            last = None
        elif line.startswith("  "):
            last = stripped
    return ends


def test_constants():
    walker = IRWalker()
    assert str(walker.visit_int32(Int32Expr(7))).endswith(" 7")
    assert walker.visit_bool(BoolExpr(True)).ref == "true"
    assert walker.visit_bool(BoolExpr(False)).ref == "false"


def test_module_has_printf_and_main():
    ir = emit("println 1")
    assert "declare i32 @printf(ptr, ...)" in ir
    assert "define i32 @main()" in ir
    assert block_ends(ir)[-1] == "ret i32 0"


def test_println_format_string():
    ir = emit('println 1, 2.5, "a"')
    assert 'c"%i, %f, %s\\0A\\00"' in ir
    assert '@printf(' in ir


def test_same_format_is_shared():
    ir = emit("println 1\nprintln 2")
    assert ir.count('c"%i\\0A\\00"') == 1
    assert ir.count("@printf(") == 3


def test_string_escapes_newline():
    ir = emit('println "a\\n"')
    assert 'c"a\\0A\\00"' in ir


def test_bool_is_widened_for_printing():
    ir = emit("println true")
    assert "zext i1 true to i32" in ir


def test_mixed_arithmetic_promotes_to_double():
    ir = emit("println 1 + 2.5")
    assert "sitofp i32 1 to double" in ir
    assert "fadd double" in ir


def test_integer_division_and_comparison():
    ir = emit("println 7 / 2\nprintln 7 < 2")
    assert "sdiv i32 7, 2" in ir
    assert "icmp slt i32 7, 2" in ir


def test_real_negation():
    ir = emit("println -1.5")
    assert "fneg double" in ir


def test_logical_or_blocks_and_phi():
    ir = emit("println true or false")
    for label in ("orLeft:", "orRight:", "endOr:"):
        assert label in ir
    assert "phi i1 [ true, %orLeft ], [ false, %orRight ]" in ir


def test_logical_and_blocks():
    ir = emit("println 1 < 2 and 2 < 3")
    assert "andLeft:" in ir and "endAnd:" in ir


def test_if_else_blocks():
    ir = emit("if 1 < 2\n  println 1\nelse\n  println 2")
    for label in ("then:", "else:", "endIf:"):
        assert label in ir
    assert all(end.split()[0] in ("ret", "br") for end in block_ends(ir))


def test_variables_use_stack_slots():
    ir = emit("x := 3\nx = 4\nprintln x")
    assert "alloca i32" in ir
    assert "store i32 4, ptr %x" in ir
    assert "load i32, ptr %x" in ir


def test_function_through_variable_is_called_indirectly():
    ir = emit("f := x -> x * 2\nprintln f(3)")
    assert "@func0(i32 %x)" in ir
    assert "store ptr @func0" in ir
    assert "call i32 %f1(i32 3)" in ir
    assert all(end.split()[0] in ("ret", "br") for end in block_ends(ir))


def test_uncalled_function_is_rejected():
    with pytest.raises(IRError):
        emit("f := x -> x")


def test_unknown_variable_is_rejected():
    with pytest.raises(IRError):
        emit("x = 1")


def test_unsupported_unary_is_rejected():
    with pytest.raises(IRError):
        emit("println !true")


def test_finish_is_stable_and_closes_module():
    walker = walker_for("println 1")
    first = walker.finish()
    assert walker.finish() == first
    with pytest.raises(IRError):
        walker.visit(parse_syntax_tree(tokenize("println 2"))[0])


def test_write(tmp_path):
    walker = walker_for("println 1")
    path = tmp_path / "out.ir"
    walker.write(path)
    assert path.read_text(encoding="utf-8") == walker.finish()