"""Running parsed commands: redirections, heredocs, pipelines and programs."""

from __future__ import annotations

import contextlib
import os
import signal
import sys
import tempfile
from typing import Callable, Iterable, Iterator, NamedTuple, Optional, Sequence

from .builtins import ShellExit, is_builtin, run_builtin
from .env import Environment, Shell
from .errors import print_error
from .expander import expand_heredoc_line
from .lexer import TokenType
from .parser import Command

ReadLine = Callable[[str], Optional[str]]

_FILE_MODE = 0o644
_OUTPUT_FLAGS = {
    TokenType.REDIR_OUT: os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
    TokenType.APPEND: os.O_WRONLY | os.O_CREAT | os.O_APPEND,
}
_CHILD_SIGNALS = ("SIGINT", "SIGQUIT", "SIGPIPE")


class _Streams(NamedTuple):
    """File descriptors a command's redirections replace stdin and stdout with."""

    stdin: Optional[int]
    stdout: Optional[int]


class _RedirectionError(OSError):
    """A redirection could not be set up; the reason has been reported."""


def _err(text: str) -> None:
    sys.stderr.write(text)
    sys.stderr.flush()


def find_command_path(name: str, env: Environment) -> Optional[str]:
    """Return the first executable ``dir/name`` along ``PATH``, or ``None``."""
    path_var = env.get("PATH")
    if path_var is None:
        return None
    for directory in filter(None, path_var.split(":")):
        candidate = f"{directory}/{name}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None


def strip_leading_empty_args(command: Command) -> None:
    """Drop the empty arguments that precede the first non-empty one."""
    for index, arg in enumerate(command.args):
        if arg:
            del command.args[:index]
            return
    command.args.clear()


def _heredoc_lines(delimiter: str, shell: Shell, read_line: ReadLine) -> Iterator[str]:
    while True:
        try:
            line = read_line("> ")
        except EOFError:
            return
        if line is None or line == delimiter:
            return
        yield expand_heredoc_line(line, shell) + "\n"


def collect_heredocs(commands: Iterable[Command], shell: Shell, read_line: ReadLine) -> None:
    """Read the body of every heredoc, expanding variables in each line.

    ``read_line`` is called with the prompt and returns a line, or ``None``
    (or raises ``EOFError``) at end of input.  Reading stops at the
    delimiter line.
    """
    for command in commands:
        for redirect in command.redirs:
            if redirect.type is TokenType.HEREDOC:
                redirect.heredoc = "".join(_heredoc_lines(redirect.file, shell, read_line))


def _heredoc_fd(body: str) -> int:
    with tempfile.TemporaryFile() as handle:
        handle.write(body.encode())
        handle.flush()
        handle.seek(0)
        return os.dup(handle.fileno())


def _check_not_ambiguous(file: str) -> None:
    if not file:
        _err("minishell: ambiguous redirect\n")
        raise _RedirectionError("ambiguous redirect")


def _open_input(file: str) -> int:
    _check_not_ambiguous(file)
    try:
        return os.open(file, os.O_RDONLY)
    except OSError as exc:
        print_error("minishell: ", file, ": No such file or directory\n")
        raise _RedirectionError(exc.errno, exc.strerror, file) from exc


def _open_output(file: str, flags: int) -> int:
    _check_not_ambiguous(file)
    try:
        return os.open(file, flags, _FILE_MODE)
    except OSError as exc:
        _err(f"minishell: {file}: {exc.strerror}\n")
        raise _RedirectionError(exc.errno, exc.strerror, file) from exc


def _replace(old: Optional[int], new: int) -> int:
    if old is not None:
        os.close(old)
    return new


def apply_redirections(command: Command) -> _Streams:
    """Open the command's redirections in order.

    Returns the descriptors that replace stdin and stdout (``None`` where a
    stream is not redirected); a later redirection of a stream replaces an
    earlier one, though every output file is still created.  The caller owns
    the returned descriptors.  Raises ``OSError`` after reporting a failure.
    """
    stdin: Optional[int] = None
    stdout: Optional[int] = None
    try:
        for redirect in command.redirs:
            if redirect.type is TokenType.HEREDOC:
                stdin = _replace(stdin, _heredoc_fd(redirect.heredoc or ""))
            elif redirect.type is TokenType.REDIR_IN:
                stdin = _replace(stdin, _open_input(redirect.file))
            elif redirect.type in _OUTPUT_FLAGS:
                stdout = _replace(
                    stdout, _open_output(redirect.file, _OUTPUT_FLAGS[redirect.type])
                )
    except BaseException:
        for fd in (stdin, stdout):
            if fd is not None:
                os.close(fd)
        raise
    return _Streams(stdin, stdout)


def exit_status_from_wait(status: int) -> int:
    """Turn a raw wait status into a shell exit status (128 + signal if killed)."""
    if os.WIFEXITED(status):
        return os.WEXITSTATUS(status)
    if os.WIFSIGNALED(status):
        return 128 + os.WTERMSIG(status)
    return 1


def _env_pairs(env: Environment) -> Iterator[tuple[str, str]]:
    for entry in env.to_envp():
        key, sep, value = entry.partition("=")
        if sep:
            yield key, value


def _exec_failure(path: str, exc: OSError) -> int:
    if not os.access(path, os.F_OK):
        print_error(path, ": ", f"{exc.strerror}\n")
        return 127
    if not os.access(path, os.X_OK):
        print_error("minishell: ", path, ": Permission denied\n")
        return 126
    print_error("minishell: ", path, ": Is a directory\n")
    return 126


def _exec_external(shell: Shell, command: Command) -> int:
    name = command.args[0]
    path = name if "/" in name else find_command_path(name, shell.env)
    if path is None:
        print_error("minishell: ", name, ": command not found\n")
        return 127
    envp = dict(_env_pairs(shell.env))
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        os.execve(path, command.args, envp)
    except OSError as exc:
        return _exec_failure(path, exc)
    return 1


def _child_main(
    shell: Shell,
    command: Command,
    stdin_fd: Optional[int],
    stdout_fd: Optional[int],
    close_fds: Sequence[int],
) -> int:
    for name in _CHILD_SIGNALS:
        with contextlib.suppress(ValueError, AttributeError):
            signal.signal(getattr(signal, name), signal.SIG_DFL)
    if stdin_fd is not None:
        os.dup2(stdin_fd, 0)
        os.close(stdin_fd)
    if stdout_fd is not None:
        os.dup2(stdout_fd, 1)
        os.close(stdout_fd)
    for fd in close_fds:
        os.close(fd)
    sys.stderr = open(2, "w", closefd=False)
    try:
        streams = apply_redirections(command)
    except OSError:
        return 1
    if streams.stdin is not None:
        os.dup2(streams.stdin, 0)
        os.close(streams.stdin)
    if streams.stdout is not None:
        os.dup2(streams.stdout, 1)
        os.close(streams.stdout)
    sys.stdout = open(1, "w", closefd=False)
    if not command.args:
        return 0
    if is_builtin(command):
        return run_builtin(shell, command)
    return _exec_external(shell, command)


def _run_child(
    shell: Shell,
    command: Command,
    stdin_fd: Optional[int],
    stdout_fd: Optional[int],
    close_fds: Sequence[int],
) -> None:
    status = 1
    try:
        status = _child_main(shell, command, stdin_fd, stdout_fd, close_fds)
    except ShellExit as exc:
        status = exc.status
    except BaseException:
        status = 1
    with contextlib.suppress(BaseException):
        sys.stdout.flush()
        sys.stderr.flush()
    os._exit(status & 0xFF)


def _spawn(
    shell: Shell,
    command: Command,
    stdin_fd: Optional[int],
    stdout_fd: Optional[int],
    close_fds: Sequence[int],
) -> int:
    for stream in (sys.stdout, sys.stderr):
        with contextlib.suppress(Exception):
            stream.flush()
    pid = os.fork()
    if pid == 0:
        _run_child(shell, command, stdin_fd, stdout_fd, close_fds)
    return pid


def _wait(pid: int) -> int:
    while True:
        try:
            return os.waitpid(pid, 0)[1]
        except KeyboardInterrupt:
            sys.stdout.write("\n")
            sys.stdout.flush()


def run_command(shell: Shell, command: Command) -> int:
    """Run one command that is not part of a pipeline and return its status.

    A builtin without redirections runs inside the shell; anything else runs
    in a child process, so its changes to the shell state are discarded.
    """
    strip_leading_empty_args(command)
    if not command.args:
        return 0
    if is_builtin(command) and not command.redirs:
        return run_builtin(shell, command)
    try:
        pid = _spawn(shell, command, None, None, ())
    except OSError as exc:
        print_error("minishell: ", None, f"{exc.strerror}\n")
        shell.exit_status = exc.errno or 1
        return shell.exit_status
    shell.exit_status = exit_status_from_wait(_wait(pid))
    return shell.exit_status


def run_pipeline(shell: Shell, commands: Sequence[Command]) -> int:
    """Run commands joined by pipes, each in its own child process.

    Returns the status of the last command.
    """
    commands = list(commands)
    pids: list[int] = []
    in_fd: Optional[int] = None
    for index, command in enumerate(commands):
        read_fd = write_fd = None
        if index < len(commands) - 1:
            read_fd, write_fd = os.pipe()
        try:
            pids.append(
                _spawn(shell, command, in_fd, write_fd, () if read_fd is None else (read_fd,))
            )
        except OSError:
            _err("minishell: fork")
        if in_fd is not None:
            os.close(in_fd)
        if write_fd is not None:
            os.close(write_fd)
        in_fd = read_fd
    if in_fd is not None:
        os.close(in_fd)
    status = None
    for pid in pids:
        status = _wait(pid)
    if status is not None:
        shell.exit_status = exit_status_from_wait(status)
    return shell.exit_status


def _segments(commands: Sequence[Command]) -> Iterator[list[Command]]:
    segment: list[Command] = []
    for command in commands:
        segment.append(command)
        if not command.pipe_out:
            yield segment
            segment = []
    if segment:
        yield segment


def execute(shell: Shell, commands: Iterable[Command], read_line: ReadLine) -> int:
    """Collect heredocs, then run each pipeline or command in turn.

    Returns the status of the last one, which also becomes the shell's exit
    status.  ``ShellExit`` from an ``exit`` run inside the shell propagates.
    """
    commands = list(commands)
    collect_heredocs(commands, shell, read_line)
    status = 0
    for segment in _segments(commands):
        if segment[0].pipe_out:
            status = run_pipeline(shell, segment)
        else:
            status = run_command(shell, segment[0])
    shell.exit_status = status
    return status