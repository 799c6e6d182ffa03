"""Variable expansion and quote removal for parsed commands."""

from __future__ import annotations

import re
from typing import Iterable

from .env import Shell
from .lexer import TokenType
from .parser import Command

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_EXPANDABLE_RE = re.compile(r"[A-Za-z0-9_?]")


def is_expandable(c: str) -> bool:
    """True if ``c`` may follow ``$`` to start an expansion."""
    return len(c) == 1 and _EXPANDABLE_RE.fullmatch(c) is not None


def variable_value(text: str, shell: Shell) -> tuple[str, int]:
    """Expand the ``$`` reference at the start of ``text``.

    Returns the replacement and the number of characters it consumed.  ``$?``
    gives the last exit status; ``$NAME`` the variable's value or an empty
    string; anything else leaves a literal ``$`` and consumes only it.
    """
    rest = text[1:]
    if rest.startswith("?"):
        return str(shell.exit_status), 2
    match = _NAME_RE.match(rest)
    if match is None:
        return "$", 1
    name = match.group()
    value = shell.env.get(name)
    return (value if value is not None else ""), 1 + len(name)


def expand_word(word: str, shell: Shell) -> str:
    """Expand variables in ``word`` and remove its quotes.

    Nothing inside single quotes is expanded; double quotes allow expansion.
    """
    parts: list[str] = []
    in_single = in_double = False
    segment_start = pos = 0
    while pos < len(word):
        c = word[pos]
        if (c == "'" and not in_double) or (c == '"' and not in_single):
            parts.append(word[segment_start:pos])
            if c == "'":
                in_single = not in_single
            else:
                in_double = not in_double
            pos += 1
            segment_start = pos
        elif c == "$" and not in_single and is_expandable(word[pos + 1 : pos + 2]):
            parts.append(word[segment_start:pos])
            value, consumed = variable_value(word[pos:], shell)
            parts.append(value)
            pos += consumed
            segment_start = pos
        else:
            pos += 1
    parts.append(word[segment_start:])
    return "".join(parts)


def expand_heredoc_line(line: str, shell: Shell) -> str:
    """Expand variables in a heredoc line; quotes are kept as they are."""
    parts: list[str] = []
    segment_start = pos = 0
    while pos < len(line):
        if line[pos] == "$" and is_expandable(line[pos + 1 : pos + 2]):
            parts.append(line[segment_start:pos])
            value, consumed = variable_value(line[pos:], shell)
            parts.append(value)
            pos += consumed
            segment_start = pos
        else:
            pos += 1
    parts.append(line[segment_start:])
    return "".join(parts)


def _drop_leading_empty(args: list[str]) -> list[str]:
    for index, arg in enumerate(args):
        if arg:
            return args[index:]
    return []


def expand_commands(commands: Iterable[Command], shell: Shell) -> None:
    """Expand every command's arguments and redirection targets in place.

    Heredoc delimiters are left untouched.  Arguments that expand to empty
    strings before the first non-empty one are dropped.
    """
    for command in commands:
        command.args = [expand_word(arg, shell) for arg in command.args]
        for redirect in command.redirs:
            if redirect.type is not TokenType.HEREDOC:
                redirect.file = expand_word(redirect.file, shell)
        command.args = _drop_leading_empty(command.args)