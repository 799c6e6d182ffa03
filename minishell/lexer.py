"""Splitting an input line into word and operator tokens."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    WORD = "word"
    PIPE = "pipe"
    REDIR_OUT = "redir_out"
    REDIR_IN = "redir_in"
    ERROR = "error"
    HEREDOC = "heredoc"
    SEMICOLON = "semicolon"
    AMPERSAND = "ampersand"
    APPEND = "append"


@dataclass(frozen=True)
class Token:
    value: str
    type: TokenType


class UnclosedQuoteError(ValueError):
    """A quote in the input line has no matching closing quote."""

    def __init__(self, message: str = "unclosed quote"):
        super().__init__(message)


_WHITESPACE = "\t\n\v\f\r "
_QUOTES = "'\""
_OPERATOR_CHARS = "|<>;&"

_OPERATOR_TYPES = {
    "|": TokenType.PIPE,
    ";": TokenType.SEMICOLON,
    "&": TokenType.AMPERSAND,
    ">": TokenType.REDIR_OUT,
    ">>": TokenType.APPEND,
    "<": TokenType.REDIR_IN,
    "<<": TokenType.HEREDOC,
}

_SPACES_RE = re.compile(r"[\t\n\v\f\r ]+")
_OPERATOR_RE = re.compile(r">>|<<|[|><;&]")
_WORD_PART_RE = re.compile(r"""[^\t\n\v\f\r |<>;&'"]+|'[^']*'|"[^"]*\"""")


def is_whitespace(c: str) -> bool:
    """True for a single space, tab, newline, vertical tab, form feed or CR."""
    return len(c) == 1 and c in _WHITESPACE


def is_quote(c: str) -> bool:
    """True for a single or double quote character."""
    return len(c) == 1 and c in _QUOTES


def is_operator(c: str) -> bool:
    """True for a character that starts an operator token."""
    return len(c) == 1 and c in _OPERATOR_CHARS


def operator_type(op: str) -> TokenType:
    """Return the token type of operator text, ``ERROR`` if it is unknown."""
    return _OPERATOR_TYPES.get(op, TokenType.ERROR)


def _read_word(line: str, pos: int) -> tuple[str, int]:
    """Read one word starting at ``pos``; quoted parts keep their quotes."""
    parts = []
    while pos < len(line):
        match = _WORD_PART_RE.match(line, pos)
        if match is None:
            if is_quote(line[pos]):
                raise UnclosedQuoteError()
            break
        parts.append(match.group())
        pos = match.end()
    return "".join(parts), pos


def tokenize(line: str) -> list[Token]:
    """Split ``line`` into tokens.

    Quotes stay in word values; adjacent quoted and unquoted parts form a
    single word.  Raises ``UnclosedQuoteError`` for an unmatched quote.
    """
    tokens: list[Token] = []
    if not line:
        return tokens
    pos = 0
    while pos < len(line):
        spaces = _SPACES_RE.match(line, pos)
        if spaces:
            pos = spaces.end()
            continue
        operator = _OPERATOR_RE.match(line, pos)
        if operator:
            text = operator.group()
            tokens.append(Token(text, operator_type(text)))
            pos = operator.end()
            continue
        word, pos = _read_word(line, pos)
        tokens.append(Token(word, TokenType.WORD))
    return tokens