"""Command line entry point: compile a source file to LLVM IR."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .ir_walker import IRError, IRWalker
from .parser import ParseError, parse_syntax_tree
from .tokens import TokenizeError, tokenize
from .type_walker import TypeCheckError, TypeWalker


def compile_source(text: str) -> str:
    """Compile program text to the text of an LLVM IR module."""
    syntax = parse_syntax_tree(tokenize(text))
    TypeWalker().run(syntax)
    walker = IRWalker()
    walker.run(syntax)
    return walker.finish()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="diplang", description="Compile a program to LLVM IR.")
    parser.add_argument("input", nargs="?", default="input.txt", help="program to compile")
    parser.add_argument("-o", "--output", default="output.ir", help="where to write the IR")
    args = parser.parse_args(argv)

    try:
        text = Path(args.input).read_text(encoding="utf-8")
        ir = compile_source(text)
        Path(args.output).write_text(ir, encoding="utf-8")
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except (TokenizeError, ParseError, TypeCheckError, IRError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print("done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())