"""Graphemes, tokens and the tokenizer for the language."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Grapheme(Enum):
    """The smallest functional unit of the writing system."""

    END_OF_FILE = auto()

    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    COMMA = auto()

    STAR = auto()
    PLUS = auto()
    MINUS = auto()
    DOT = auto()

    BANG = auto()
    BANG_EQUAL = auto()
    EQUAL = auto()
    EQUAL_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()

    MINUS_GREATER = auto()
    COLON = auto()
    COLON_EQUAL = auto()
    SLASH = auto()
    SLASH_SLASH = auto()

    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    TRUE = auto()
    FALSE = auto()
    AND = auto()
    OR = auto()
    IS = auto()
    AS = auto()
    OF = auto()
    FOR = auto()
    WHILE = auto()
    IF = auto()
    ELSE = auto()
    RET = auto()


@dataclass(frozen=True)
class Token:
    """A grapheme with its text and the position where it starts."""

    grapheme: Grapheme
    value: str
    line: int = 0
    column: int = 0


class TokenizeError(ValueError):
    """Raised when the input cannot be split into tokens."""


_SYMBOLS = (
    (Grapheme.LEFT_PAREN, "("),
    (Grapheme.RIGHT_PAREN, ")"),
    (Grapheme.LEFT_BRACE, "{"),
    (Grapheme.RIGHT_BRACE, "}"),
    (Grapheme.COMMA, ","),
    (Grapheme.BANG_EQUAL, "!="),
    (Grapheme.EQUAL_EQUAL, "=="),
    (Grapheme.GREATER_EQUAL, ">="),
    (Grapheme.LESS_EQUAL, "<="),
    (Grapheme.COLON_EQUAL, ":="),
    (Grapheme.SLASH_SLASH, "//"),
    (Grapheme.MINUS_GREATER, "->"),
    (Grapheme.PLUS, "+"),
    (Grapheme.MINUS, "-"),
    (Grapheme.STAR, "*"),
    (Grapheme.EQUAL, "="),
    (Grapheme.BANG, "!"),
    (Grapheme.GREATER, ">"),
    (Grapheme.LESS, "<"),
    (Grapheme.COLON, ":"),
    (Grapheme.SLASH, "/"),
    (Grapheme.DOT, "."),
)

_KEYWORDS = (
    (Grapheme.TRUE, "true"),
    (Grapheme.FALSE, "false"),
    (Grapheme.AND, "and"),
    (Grapheme.OR, "or"),
    (Grapheme.IS, "is"),
    (Grapheme.AS, "as"),
    (Grapheme.OF, "of"),
    (Grapheme.FOR, "for"),
    (Grapheme.WHILE, "while"),
    (Grapheme.IF, "if"),
    (Grapheme.ELSE, "else"),
    (Grapheme.RET, "ret"),
)


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _is_alpha(c: str) -> bool:
    return c == "_" or (c.isascii() and c.isalpha())


class _Scanner:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.line = 0
        self.column = 0

    def char(self, offset: int = 0) -> str:
        i = self.pos + offset
        return self.text[i] if i < len(self.text) else ""

    def advance(self, count: int = 1) -> None:
        for _ in range(count):
            if self.pos >= len(self.text):
                return
            self.column += 1
            if self.text[self.pos] == "\n":
                self.column = 0
                self.line += 1
            self.pos += 1

    def token(self, grapheme: Grapheme, value: str, line: int, column: int) -> Token:
        return Token(grapheme, value, line, column)

    def word(self, grapheme: Grapheme, word: str, standalone: bool) -> Token | None:
        if not self.text.startswith(word, self.pos):
            return None
        if standalone:
            after = self.char(len(word))
            if after and (_is_alpha(after) or _is_digit(after)):
                return None
        tok = Token(grapheme, word, self.line, self.column)
        self.advance(len(word))
        return tok

    def number(self) -> Token | None:
        if not _is_digit(self.char()):
            return None
        line, column = self.line, self.column
        value = []
        has_dot = False
        while self.pos < len(self.text):
            c = self.char()
            if c == ".":
                if has_dot:
                    raise TokenizeError(f"too many dots in a number at {line}:{column}")
                value.append(".")
                has_dot = True
            elif _is_digit(c):
                value.append(c)
            elif c != "_":
                break
            self.advance()
        return Token(Grapheme.NUMBER, "".join(value), line, column)

    def string(self) -> Token | None:
        if self.char() != '"':
            return None
        line, column = self.line, self.column
        value: list[str] = []
        prev_backslash = False
        while True:
            self.advance()
            if self.pos >= len(self.text):
                raise TokenizeError(f"unterminated string at {line}:{column}")
            c = self.char()
            if c == '"':
                break
            if prev_backslash and c == "n":
                value[-1] = "\n"
            else:
                value.append(c)
            prev_backslash = c == "\\"
        self.advance()
        return Token(Grapheme.STRING, "".join(value), line, column)

    def identifier(self) -> Token | None:
        if not _is_alpha(self.char()):
            return None
        line, column = self.line, self.column
        value = []
        while self.pos < len(self.text):
            value.append(self.char())
            self.advance()
            nxt = self.char()
            if not nxt or not (_is_digit(nxt) or _is_alpha(nxt)):
                break
        return Token(Grapheme.IDENTIFIER, "".join(value), line, column)

    def next_token(self) -> Token | None:
        for grapheme, word in _SYMBOLS:
            tok = self.word(grapheme, word, False)
            if tok:
                return tok
        for grapheme, word in _KEYWORDS:
            tok = self.word(grapheme, word, True)
            if tok:
                return tok
        return self.number() or self.string() or self.identifier()


def tokenize(text: str) -> list[Token]:
    """Split source text into tokens, ending with an END_OF_FILE token."""
    scanner = _Scanner(text)
    tokens: list[Token] = []
    while scanner.pos < len(text):
        if text.startswith("//", scanner.pos):
            while scanner.pos < len(text) and text[scanner.pos] != "\n":
                scanner.advance()
        tok = scanner.next_token()
        if tok is None:
            scanner.advance()
        else:
            tokens.append(tok)
    tokens.append(Token(Grapheme.END_OF_FILE, "", scanner.line, scanner.column))
    return tokens