import pytest

from diplang.tokens import Grapheme, Token, TokenizeError, tokenize

G = Grapheme


def kinds(text):
    return [t.grapheme for t in tokenize(text)]


def test_empty_input_is_only_eof():
    assert tokenize("") == [Token(G.END_OF_FILE, "", 0, 0)]


def test_new_var():
    assert kinds("x := 1") == [G.IDENTIFIER, G.COLON_EQUAL, G.NUMBER, G.END_OF_FILE]


def test_two_char_operators_win():
    assert kinds("!= == >= <= -> : -") == [
        G.BANG_EQUAL, G.EQUAL_EQUAL, G.GREATER_EQUAL, G.LESS_EQUAL,
        G.MINUS_GREATER, G.COLON, G.MINUS, G.END_OF_FILE,
    ]


def test_keywords_need_word_boundary():
    toks = tokenize("if iffy or order true1")
    assert [t.grapheme for t in toks[:-1]] == [G.IF, G.IDENTIFIER, G.OR, G.IDENTIFIER, G.IDENTIFIER]
    assert [t.value for t in toks[:-1]] == ["if", "iffy", "or", "order", "true1"]


def test_comment_is_skipped():
    assert kinds("a // b c\nd") == [G.IDENTIFIER, G.IDENTIFIER, G.END_OF_FILE]


def test_string_escape_newline():
    (tok, _eof) = tokenize('"a\\nb"')
    assert tok.grapheme is G.STRING
    assert tok.value == "a\nb"


def test_number_underscores_and_dot():
    toks = tokenize("1_000 2.5")
    assert [t.value for t in toks[:-1]] == ["1000", "2.5"]


def test_too_many_dots():
    with pytest.raises(TokenizeError):
        tokenize("1.2.3")


def test_unterminated_string():
    with pytest.raises(TokenizeError):
        tokenize('"abc')


def test_positions_across_lines():
    toks = tokenize("a\nbc")
    assert (toks[0].line, toks[0].column) == (0, 0)
    assert (toks[1].line, toks[1].column) == (1, 0)


def test_unknown_chars_ignored():
    assert kinds("a ; b") == [G.IDENTIFIER, G.IDENTIFIER, G.END_OF_FILE]