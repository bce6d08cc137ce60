[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "diplang"
version = "0.1.0"
description = "A small expression language: tokenizer, parser, type inference and textual LLVM IR generation"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "parser", "tokenizer", "llvm-ir", "language"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
diplang = "diplang.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["diplang"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
