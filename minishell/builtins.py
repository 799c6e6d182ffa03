"""Commands the shell runs itself instead of starting a program."""

from __future__ import annotations

import os
import re
import sys
from typing import Callable, Optional, TextIO

from .env import Environment, Shell
from .parser import Command

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_DASH_N_RE = re.compile(r"-n*")
_NUMERIC_RE = re.compile(r"[+-]?[0-9]*")
_LEADING_INT_RE = re.compile(r"[\t\n\v\f\r ]*([+-]?)([0-9]*)")


class ShellExit(Exception):
    """Raised by the ``exit`` builtin to end the shell with ``status``."""

    def __init__(self, status: int):
        super().__init__(status)
        self.status = status


def _err(text: str) -> None:
    sys.stderr.write(text)
    sys.stderr.flush()


def _stdout(out: Optional[TextIO]) -> TextIO:
    return sys.stdout if out is None else out


def is_valid_identifier(key: Optional[str]) -> bool:
    """True if ``key`` is a valid variable name."""
    return bool(key) and _IDENTIFIER_RE.fullmatch(key) is not None


def split_key_value(arg: str) -> tuple[str, Optional[str]]:
    """Split ``KEY=value`` at the first ``=``; the value is ``None`` if absent."""
    key, sep, value = arg.partition("=")
    return (key, value) if sep else (arg, None)


def format_exported(env: Environment) -> str:
    """Render the environment as ``declare -x`` lines."""
    lines = []
    for key in env:
        value = env.get(key)
        if value is None:
            lines.append(f"declare -x {key}\n")
        else:
            lines.append(f'declare -x {key}="{value}"\n')
    return "".join(lines)


def is_dash_n(arg: Optional[str]) -> bool:
    """True if ``arg`` is ``-`` followed only by ``n`` characters."""
    return arg is not None and _DASH_N_RE.fullmatch(arg) is not None


def builtin_echo(shell: Shell, command: Command, out: Optional[TextIO] = None) -> int:
    """Print the arguments separated by spaces; ``-n`` options drop the newline."""
    out = _stdout(out)
    words = command.args[1:]
    newline = True
    while words and is_dash_n(words[0]):
        newline = False
        words = words[1:]
    out.write(" ".join(words))
    if newline:
        out.write("\n")
    out.flush()
    return 0


def _cd_target(shell: Shell, command: Command, out: TextIO) -> Optional[str]:
    arg = command.args[1] if len(command.args) > 1 else None
    if arg is None or arg in ("--", "~"):
        home = shell.env.get("HOME")
        if home is None:
            _err("cd: HOME not set\n")
            shell.exit_status = 1
        return home
    if arg == "-":
        oldpwd = shell.env.get("OLDPWD")
        if oldpwd is None:
            _err("cd: OLDPWD not set\n")
            shell.exit_status = 1
            return None
        out.write(oldpwd + "\n")
        out.flush()
        return oldpwd
    return arg


def builtin_cd(shell: Shell, command: Command, out: Optional[TextIO] = None) -> int:
    """Change the working directory and update ``OLDPWD`` and ``PWD``."""
    out = _stdout(out)
    if len(command.args) > 2:
        _err("cd: too many arguments\n")
        shell.exit_status = 1
        return 1
    try:
        oldpwd = os.getcwd()
    except OSError:
        return 1
    path = _cd_target(shell, command, out)
    if path is None:
        return 1
    try:
        os.chdir(path)
    except OSError as exc:
        _err(f"cd: {path}: {exc.strerror}\n")
        shell.exit_status = 1
        return 1
    if shell.env.get("OLDPWD") is None:
        shell.env.add("OLDPWD", oldpwd)
    else:
        shell.env.set("OLDPWD", oldpwd)
    try:
        shell.env.set("PWD", os.getcwd())
    except OSError:
        pass
    shell.exit_status = 0
    return 0


def builtin_pwd(shell: Shell, command: Command, out: Optional[TextIO] = None) -> int:
    """Print the current working directory."""
    out = _stdout(out)
    try:
        cwd = os.getcwd()
    except OSError:
        _err("minishell: pwd")
        return 1
    out.write(cwd + "\n")
    out.flush()
    return 0


def builtin_env(shell: Shell, command: Command, out: Optional[TextIO] = None) -> int:
    """Print every variable that has a value as ``KEY=value``."""
    out = _stdout(out)
    if not len(shell.env):
        return 1
    for key in shell.env:
        value = shell.env.get(key)
        if value is not None:
            out.write(f"{key}={value}\n")
    out.flush()
    return 0


def builtin_export(shell: Shell, command: Command, out: Optional[TextIO] = None) -> int:
    """Define or update variables; with no arguments list them all.

    Processing stops at the first invalid identifier.
    """
    out = _stdout(out)
    if len(command.args) < 2:
        out.write(format_exported(shell.env))
        out.flush()
        return 0
    shell.exit_status = 0
    for arg in command.args[1:]:
        key, value = split_key_value(arg)
        if not is_valid_identifier(key):
            _err(f"minishell: export: `{arg}': not a valid identifier\n")
            shell.exit_status = 1
            break
        if key in shell.env:
            if value is not None:
                shell.env.set(key, value)
        else:
            shell.env.add(key, value)
    return shell.exit_status


def builtin_unset(shell: Shell, command: Command, out: Optional[TextIO] = None) -> int:
    """Remove the named variables; invalid names are reported and skipped."""
    for name in command.args[1:]:
        if not is_valid_identifier(name):
            _err(f"unset: `{name}': not a valid identifier\n")
            shell.exit_status = 1
        else:
            shell.env.remove(name)
    return 0


def _atoi(text: str) -> int:
    match = _LEADING_INT_RE.match(text)
    sign, digits = match.group(1), match.group(2)
    value = int(digits) if digits else 0
    return -value if sign == "-" else value


def builtin_exit(shell: Shell, command: Command, out: Optional[TextIO] = None) -> int:
    """End the shell by raising ``ShellExit``.

    Returns 1 without exiting when given more than one numeric argument.
    """
    out = _stdout(out)
    args = command.args
    if not command.pipe_out:
        out.write("exit\n")
        out.flush()
    if len(args) < 2:
        raise ShellExit(shell.exit_status)
    if _NUMERIC_RE.fullmatch(args[1]) is None:
        _err(f"minishell: exit: {args[1]}: numeric argument required\n")
        raise ShellExit(2)
    if len(args) > 2:
        _err("minishell: exit: too many arguments\n")
        shell.exit_status = 1
        return 1
    raise ShellExit(_atoi(args[1]) % 256)


_BUILTINS: dict[str, Callable[[Shell, Command, Optional[TextIO]], int]] = {
    "cd": builtin_cd,
    "echo": builtin_echo,
    "pwd": builtin_pwd,
    "export": builtin_export,
    "unset": builtin_unset,
    "env": builtin_env,
    "exit": builtin_exit,
}


def is_builtin(command: Optional[Command]) -> bool:
    """True if the command's name is one of the shell's builtins."""
    return bool(command and command.args and command.args[0] in _BUILTINS)


def run_builtin(shell: Shell, command: Command, out: Optional[TextIO] = None) -> int:
    """Run a builtin command and return its status (1 if it is not a builtin)."""
    handler = _BUILTINS.get(command.args[0]) if command.args else None
    if handler is None:
        return 1
    return handler(shell, command, out)