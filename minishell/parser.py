"""Grouping tokens into commands with their arguments and redirections."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .lexer import Token, TokenType

_SEPARATORS = frozenset({TokenType.PIPE, TokenType.SEMICOLON, TokenType.AMPERSAND})
_ASSIGNMENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*=")


@dataclass
class Redirect:
    """One redirection: the target file (or heredoc delimiter) and its kind.

    ``heredoc`` holds the collected body of a heredoc once it has been read.
    """

    file: str
    type: TokenType
    heredoc: Optional[str] = None


@dataclass
class Command:
    """A simple command: its words, redirections and how it is separated."""

    args: list[str] = field(default_factory=list)
    redirs: list[Redirect] = field(default_factory=list)
    pipe_out: bool = False
    background: bool = False


class ParseError(ValueError):
    """The token sequence is not a valid command line."""

    def __init__(self, token: Optional[str]):
        self.token = token if token else "newline"
        super().__init__(f"syntax error near unexpected token `{self.token}'")


def is_variable_assignment(word: str) -> bool:
    """True if ``word`` starts with ``NAME=`` for a valid variable name."""
    return _ASSIGNMENT_RE.match(word) is not None


def parse(tokens: Iterable[Token]) -> list[Command]:
    """Build the list of commands described by ``tokens``.

    A bare ``NAME=value`` at the very start becomes an ``export`` command.
    The command being built when the tokens run out is always appended,
    even if it is empty.  Raises ``ParseError`` on a syntax error.
    """
    tokens = list(tokens)
    if not tokens:
        return []
    commands: list[Command] = []
    current = Command()
    expect_command = True
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if (
            token.type is TokenType.WORD
            and is_variable_assignment(token.value)
            and not commands
            and not current.args
        ):
            current.args.extend(["export", token.value])
            commands.append(current)
            current = Command()
            index += 1
            continue
        if token.type is TokenType.ERROR:
            raise ParseError(token.value)
        if token.type in _SEPARATORS:
            if expect_command:
                raise ParseError(token.value)
            current.pipe_out = current.pipe_out or token.type is TokenType.PIPE
            current.background = token.type is TokenType.AMPERSAND
            commands.append(current)
            current = Command()
            expect_command = True
        elif token.type is TokenType.WORD:
            current.args.append(token.value)
            expect_command = False
        else:
            target = tokens[index + 1] if index + 1 < len(tokens) else None
            if target is None or target.type is not TokenType.WORD:
                raise ParseError(target.value if target else None)
            current.redirs.append(Redirect(target.value, token.type))
            index += 1
            expect_command = False
        index += 1
    commands.append(current)
    return commands