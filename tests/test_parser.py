import itertools

import pytest

from diplang.parser import ParseError, Parser, parse_syntax_tree
from diplang.syntax_nodes import (
    BinaryExpr, BlockExpr, CallExpr, ComparisonExpr, FuncExpr, IfElseExpr, Int32Expr,
    LogicalExpr, NewVarExpr, PrintlnExpr, Real64Expr, StrExpr, UnaryExpr, VarAssignExpr, VarExpr,
)
from diplang.tokens import Grapheme, tokenize


def parse(text):
    return parse_syntax_tree(tokenize(text))


def _apply(op, left, right):
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    q = abs(left) // abs(right)
    return q if (left >= 0) == (right >= 0) else -q


def _evaluate(expr):
    if isinstance(expr, Int32Expr):
        return expr.value
    if isinstance(expr, UnaryExpr):
        v = _evaluate(expr.value)
        return -v if expr.oper.grapheme is Grapheme.MINUS else v
    assert isinstance(expr, BinaryExpr)
    return _apply(expr.oper.value, _evaluate(expr.left), _evaluate(expr.right))


def _calc_cases():
    ops = "+-*/"
    nums = (-2, -1, 0, 1, 2)
    for o1, o2 in itertools.product(ops, ops):
        if o1 in "+-" and o2 in "*/":
            continue
        for a, b, c in itertools.product(nums, nums, nums):
            if (o1 == "/" and b == 0) or (o2 == "/" and c == 0):
                continue
            yield f"({a}){o1}({b}){o2}({c})", _apply(o2, _apply(o1, a, b), c)


def test_calc_a_o_b_o_c():
    for text, expected in _calc_cases():
        (tree,) = parse(text)
        assert _evaluate(tree) == expected, text


def test_precedence_mul_before_add():
    (tree,) = parse("1 + 2 * 3")
    assert isinstance(tree, BinaryExpr) and tree.oper.value == "+"
    assert isinstance(tree.right, BinaryExpr) and tree.right.oper.value == "*"


def test_println_paren_closes_after_first_value():
    tree = parse("println (1)+(2)")
    assert tree[0] == PrintlnExpr([Int32Expr(1)])
    assert isinstance(tree[1], UnaryExpr) and tree[1].value == Int32Expr(2)


def test_println_many_values():
    (tree,) = parse('println 1, 2.5, "s"')
    assert tree == PrintlnExpr([Int32Expr(1), Real64Expr(2.5), StrExpr("s")])


def test_new_var_and_assign():
    first, second = parse("x := 1\nx = 2")
    assert isinstance(first, NewVarExpr) and first.value == Int32Expr(1)
    assert isinstance(second, VarAssignExpr) and second.identifier.value == "x"


def test_func_and_call():
    func_def, call = parse("f := (a, b) -> a + b\nf(1, 2)")
    func = func_def.value
    assert isinstance(func, FuncExpr)
    assert [t.value for t in func.args] == ["a", "b"]
    assert isinstance(func.body, BlockExpr) and len(func.body.items) == 1
    assert isinstance(call, CallExpr)
    assert call.args == [Int32Expr(1), Int32Expr(2)]
    assert isinstance(call.func, VarExpr)


def test_if_else_blocks_by_column():
    (tree,) = parse("if x > 1\n  println 1\n  println 2\nelse\n  println 3")
    assert isinstance(tree, IfElseExpr)
    assert isinstance(tree.condition, ComparisonExpr)
    assert len(tree.then_block.items) == 2
    assert tree.else_block.items == [PrintlnExpr([Int32Expr(3)])]


def test_if_without_else():
    (tree,) = parse("if true\n  1")
    assert tree.else_block is None


def test_logical_and_or():
    (tree,) = parse("a and b or c")
    assert isinstance(tree, LogicalExpr) and tree.oper.grapheme is Grapheme.OR
    assert isinstance(tree.left, LogicalExpr) and tree.left.oper.grapheme is Grapheme.AND


def test_unparseable_tokens_skipped():
    assert parse(") 5") == [Int32Expr(5)]


def test_missing_right_paren():
    with pytest.raises(ParseError):
        parse("(1 + 2")


def test_empty_token_list():
    assert Parser([]).parse() == []


def test_integer_out_of_range():
    with pytest.raises(ParseError):
        parse("99999999999")