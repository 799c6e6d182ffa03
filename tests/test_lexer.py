import pytest

from minishell.lexer import (
    Token,
    TokenType,
    UnclosedQuoteError,
    is_operator,
    is_quote,
    is_whitespace,
    operator_type,
    tokenize,
)


def values(tokens):
    return [token.value for token in tokens]


def types(tokens):
    return [token.type for token in tokens]


@pytest.mark.parametrize("c", [" ", "\t", "\n", "\v", "\f", "\r"])
def test_whitespace_chars(c):
    assert is_whitespace(c) is True


@pytest.mark.parametrize("c", ["a", "", "|", "'"])
def test_non_whitespace(c):
    assert is_whitespace(c) is False


def test_quote_detection():
    assert is_quote("'") and is_quote('"')
    assert not is_quote("a")


@pytest.mark.parametrize("c", ["|", "<", ">", ";", "&"])
def test_operator_chars(c):
    assert is_operator(c) is True


def test_non_operator():
    assert is_operator("a") is False
    assert is_operator("") is False


@pytest.mark.parametrize(
    "op, expected",
    [
        ("|", TokenType.PIPE),
        (";", TokenType.SEMICOLON),
        ("&", TokenType.AMPERSAND),
        (">", TokenType.REDIR_OUT),
        (">>", TokenType.APPEND),
        ("<", TokenType.REDIR_IN),
        ("<<", TokenType.HEREDOC),
        ("<<<", TokenType.ERROR),
        ("x", TokenType.ERROR),
    ],
)
def test_operator_type(op, expected):
    assert operator_type(op) is expected


def test_simple_words():
    tokens = tokenize("echo hello world")
    assert values(tokens) == ["echo", "hello", "world"]
    assert set(types(tokens)) == {TokenType.WORD}


def test_pipe_line():
    tokens = tokenize("ls -l | wc")
    assert values(tokens) == ["ls", "-l", "|", "wc"]
    assert types(tokens)[2] is TokenType.PIPE


def test_operator_without_spaces():
    tokens = tokenize("echo hi>out")
    assert tokens == [
        Token("echo", TokenType.WORD),
        Token("hi", TokenType.WORD),
        Token(">", TokenType.REDIR_OUT),
        Token("out", TokenType.WORD),
    ]


def test_double_operators():
    tokens = tokenize("cat << end >> log")
    assert types(tokens) == [
        TokenType.WORD,
        TokenType.HEREDOC,
        TokenType.WORD,
        TokenType.APPEND,
        TokenType.WORD,
    ]


def test_triple_angle_splits():
    assert values(tokenize("<<<")) == ["<<", "<"]


def test_quotes_are_kept():
    tokens = tokenize("echo 'a b'")
    assert values(tokens) == ["echo", "'a b'"]


def test_adjacent_parts_join():
    line = 'a"b c"d\'e\''
    assert values(tokenize(line)) == [line]


def test_operators_inside_quotes_are_word_text():
    tokens = tokenize('echo "a | b"')
    assert types(tokens) == [TokenType.WORD, TokenType.WORD]
    assert tokens[1].value == '"a | b"'


def test_empty_quotes():
    assert values(tokenize("echo ''")) == ["echo", "''"]


@pytest.mark.parametrize("line", ["", "   ", "\t\n"])
def test_blank_input(line):
    assert tokenize(line) == []


def test_none_input():
    assert tokenize(None) == []


@pytest.mark.parametrize("line", ["echo 'abc", 'echo "abc', "hdh'", "a\"b'c"])
def test_unclosed_quote(line):
    with pytest.raises(UnclosedQuoteError):
        tokenize(line)


def test_unclosed_quote_message():
    with pytest.raises(UnclosedQuoteError, match="unclosed quote"):
        tokenize("'")


def test_round_trip_with_single_spaces():
    line = "cat <in | grep 'x y' >> out ; echo $HOME &"
    tokens = tokenize(line)
    assert tokenize(" ".join(values(tokens))) == tokens