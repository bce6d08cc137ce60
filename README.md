# diplang

A compiler front end for a small expression language. It reads program text and splits it into tokens. It parses the tokens into a syntax tree and infers a type for every expression. It then emits LLVM textual IR. The IR module has one `main` function that runs the top-level expressions in order. `println` output goes through `printf`.

## The language

```
x := 2 + 3 * 4        // create a variable
x = x - 1             // assign to it
println x, 1.5, "hi\n"

square := n -> n * n  // a function; its body is the block after '->'
println square(7)

if x > 10
  println "big"
else
  println "small"
```

- A number without a dot is a 32-bit integer. A number with a dot is a double. `_` may appear inside a number as a separator.
- `true` and `false` are booleans. Strings are written in double quotes, and `\n` inside a string is a newline.
- `:=` creates a variable and `=` assigns to an existing one.
- The arithmetic operators are `+ - * /` and the comparisons are `== != < <= > >=`. When an integer meets a double, the integer is converted to a double. `and` and `or` short-circuit. Unary `-` and unary `+` act on a single value.
- A function is written `a, b -> body` or `(a, b) -> body`. A block is the run of expressions that start in the same column as its first one. The value of a block is its last expression. A function is called as `f(1, 2)`.
- `if cond` takes a block, and may be followed by `else` and a second block.
- `println` takes values separated by commas, with or without parentheses. The values are printed separated by `, `. Booleans are printed as `0` or `1`.
- A line comment starts with `//`.

## Command line

```
diplang program.txt
diplang program.txt -o program.ir
```

The command reads the program, which defaults to `input.txt`, and compiles it. It writes the IR to the `-o`/`--output` file, which defaults to `output.ir`, and prints `done.`. On a read error or a compile error it prints `error: ...` to stderr and exits with status 1.

## Library use

```python
from diplang.cli import compile_source

ir_text = compile_source("println (1)+(2)*(3)")
print(ir_text)
```

Each stage is also available on its own:

```python
from diplang.tokens import tokenize
from diplang.parser import parse_syntax_tree
from diplang.type_walker import TypeWalker
from diplang.ir_walker import IRWalker

tree = parse_syntax_tree(tokenize("a := 1.5\nprintln a * 2"))
TypeWalker().run(tree)
walker = IRWalker()
walker.run(tree)
print(walker.finish())     # or walker.write("out.ir")
```

- `diplang.tokens`: `Grapheme`, `Token` and `tokenize(text)`. `tokenize` raises `TokenizeError` on a number with two dots or on an unterminated string.
- `diplang.parser`: `Parser(tokens).parse()` and `parse_syntax_tree(tokens)`. They raise `ParseError` on a missing `)`, a missing `->` or a missing operand, or on an integer outside the 32-bit range.
- `diplang.syntax_nodes`: the node dataclasses, `ExprType`, and the abstract `TreeWalker` with `run` and `visit`.
- `diplang.type_walker`: `TypeWalker`. It raises `TypeCheckError` on an unknown variable, on a second `:=` for the same name, on calling a non-function, on a wrong argument count or on an empty block. It emits a `UserWarning` when the `if` and `else` blocks have different types.
- `diplang.ir_walker`: `IRWalker`, with `finish()` returning the module text and `write(path)`. It raises `IRError` when a tree cannot be lowered.

## What it does not do

- It only produces IR text. It does not run, optimise, assemble or link the program. Use external LLVM tools for that.
- A function gets its types from its first call. A function that is never called cannot be lowered, and raises `IRError`.
- Unary `!` is parsed and typed, but it is not lowered to IR, and raises `IRError`.
- The words `for`, `while`, `is`, `as`, `of` and `ret` and the `{ }` braces are recognised as tokens, but no syntax uses them.

## Tests

```
pip install -e .[test]
pytest
```