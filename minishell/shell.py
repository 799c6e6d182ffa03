"""The interactive read-eval loop and the command-line entry point."""

from __future__ import annotations

import contextlib
import os
import signal
import sys
import threading
from typing import Callable, Optional

from .builtins import ShellExit
from .env import Environment, Shell
from .errors import print_error, print_syntax_error
from .executor import execute
from .expander import expand_commands
from .lexer import UnclosedQuoteError, tokenize
from .parser import ParseError, parse

PROMPT = "minishell> "


def _read_line(prompt: str) -> Optional[str]:
    try:
        return input(prompt)
    except EOFError:
        return None


def run_line(
    shell: Shell, line: str, read_line: Callable[[str], Optional[str]] = _read_line
) -> int:
    """Tokenize, parse, expand and execute one input line.

    Syntax errors are reported and leave the exit status unchanged.
    Returns the shell's exit status afterwards.
    """
    try:
        tokens = tokenize(line)
    except UnclosedQuoteError:
        print_error("minishell: ", None, "unclosed quote\n")
        return shell.exit_status
    try:
        commands = parse(tokens)
    except ParseError as exc:
        print_syntax_error(exc.token)
        return shell.exit_status
    if not commands:
        return shell.exit_status
    expand_commands(commands, shell)
    return execute(shell, commands, read_line)


def _install_parent_signals() -> dict[int, object]:
    if threading.current_thread() is not threading.main_thread():
        return {}
    previous = {}
    for signum, handler in (
        (signal.SIGINT, signal.default_int_handler),
        (signal.SIGQUIT, signal.SIG_IGN),
    ):
        previous[signum] = signal.signal(signum, handler)
    return previous


def _restore_signals(previous: dict[int, object]) -> None:
    for signum, handler in previous.items():
        if handler is not None:
            signal.signal(signum, handler)


def _newline() -> None:
    sys.stdout.write("\n")
    sys.stdout.flush()


def repl(shell: Shell) -> int:
    """Read and run lines until end of input or ``exit``; return the exit status."""
    previous = _install_parent_signals()
    try:
        while True:
            try:
                line = input(PROMPT)
            except EOFError:
                sys.stdout.write("exit\n")
                sys.stdout.flush()
                return shell.exit_status
            except KeyboardInterrupt:
                _newline()
                continue
            try:
                run_line(shell, line)
            except ShellExit as exc:
                return exc.status
            except KeyboardInterrupt:
                _newline()
    finally:
        _restore_signals(previous)


def main(argv=None) -> int:
    """Start an interactive shell with the current process environment."""
    if sys.stdin.isatty():
        with contextlib.suppress(ImportError):
            import readline  # noqa: F401
    shell = Shell(env=Environment.from_entries(f"{k}={v}" for k, v in os.environ.items()))
    return repl(shell)