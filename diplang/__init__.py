"""Tokenizer, parser, type inference and LLVM IR text generation for a small expression language."""

__version__ = "0.1.0"
__all__ = ["tokens", "syntax_nodes", "parser", "type_walker", "ir_walker", "cli"]