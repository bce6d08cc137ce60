from diplang.cli import compile_source, main
from diplang.ir_walker import IRWalker


def test_compile_source_produces_module():
    ir = compile_source("x := 2\nprintln x * 3")
    assert "define i32 @main()" in ir
    assert "mul i32" in ir
    assert ir.endswith("}\n")


def test_compile_source_of_empty_program():
    assert compile_source("") == IRWalker().finish()


def test_main_writes_output(tmp_path, capsys):
    source = tmp_path / "input.txt"
    source.write_text("println 1 + 2", encoding="utf-8")
    out = tmp_path / "output.ir"
    assert main([str(source), "-o", str(out)]) == 0
    assert out.read_text(encoding="utf-8") == compile_source("println 1 + 2")
    assert capsys.readouterr().out.strip() == "done."


def test_main_reports_missing_input(tmp_path, capsys):
    assert main([str(tmp_path / "missing.txt"), "-o", str(tmp_path / "o.ir")]) == 1
    assert "error" in capsys.readouterr().err
    assert not (tmp_path / "o.ir").exists()


def test_main_reports_type_errors(tmp_path, capsys):
    source = tmp_path / "input.txt"
    source.write_text("x := 1\nx := 2", encoding="utf-8")
    assert main([str(source), "-o", str(tmp_path / "o.ir")]) == 1
    assert "x" in capsys.readouterr().err