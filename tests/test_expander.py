import pytest

from minishell.env import Environment, Shell
from minishell.expander import (
    expand_commands,
    expand_heredoc_line,
    expand_word,
    is_expandable,
    variable_value,
)
from minishell.lexer import TokenType
from minishell.parser import Command, Redirect

USER = "alice"
HOME = "/home/alice"


@pytest.fixture
def shell():
    return Shell(
        env=Environment.from_entries([f"USER={USER}", f"HOME={HOME}"]),
        exit_status=42,
    )


@pytest.mark.parametrize(
    "c, expected",
    [("a", True), ("Z", True), ("7", True), ("_", True), ("?", True),
     ("-", False), ("$", False), (" ", False), ("", False), ("é", False)],
)
def test_is_expandable(c, expected):
    assert is_expandable(c) is expected


def test_variable_value_name(shell):
    assert variable_value("$USER rest", shell) == (USER, len("$USER"))


def test_variable_value_exit_status(shell):
    assert variable_value("$?x", shell) == (str(shell.exit_status), 2)


def test_variable_value_unknown_is_empty(shell):
    assert variable_value("$NOPE", shell) == ("", len("$NOPE"))


def test_variable_value_digit_keeps_dollar(shell):
    assert variable_value("$1", shell) == ("$", 1)


def test_expand_plain_variable(shell):
    assert expand_word("$USER", shell) == USER


def test_expand_inside_word(shell):
    assert expand_word("a$USER-b", shell) == "a" + USER + "-b"


def test_single_quotes_prevent_expansion(shell):
    assert expand_word("'$USER'", shell) == "$USER"


def test_double_quotes_allow_expansion(shell):
    assert expand_word('"$USER and $HOME"', shell) == f"{USER} and {HOME}"


def test_nested_quotes_are_literal(shell):
    assert expand_word("\"'$USER'\"", shell) == f"'{USER}'"
    assert expand_word("'\"x\"'", shell) == '"x"'


def test_exit_status_expansion(shell):
    assert expand_word("$?", shell) == str(shell.exit_status)


def test_dollar_digit_is_kept(shell):
    assert expand_word("$1", shell) == "$1"


def test_lone_dollar_is_kept(shell):
    assert expand_word("$", shell) == "$"
    assert expand_word("a$ b", shell) == "a$ b"


def test_unknown_variable_expands_to_empty(shell):
    assert expand_word("$NOPE", shell) == ""


def test_plain_word_without_quotes_is_unchanged(shell):
    assert expand_word("hello", shell) == "hello"


def test_heredoc_line_keeps_quotes(shell):
    assert expand_heredoc_line("'$USER'", shell) == f"'{USER}'"
    assert expand_heredoc_line("no vars", shell) == "no vars"


def test_heredoc_line_exit_status(shell):
    assert expand_heredoc_line("code $?", shell) == f"code {shell.exit_status}"


def test_expand_commands_drops_leading_empty_args(shell):
    command = Command(args=["$NOPE", "echo", "$USER"])
    expand_commands([command], shell)
    assert command.args == ["echo", USER]


def test_expand_commands_keeps_inner_empty_args(shell):
    command = Command(args=["echo", "$NOPE", "x"])
    expand_commands([command], shell)
    assert command.args == ["echo", "", "x"]


def test_expand_commands_all_empty(shell):
    command = Command(args=["$NOPE", "''"])
    expand_commands([command], shell)
    assert command.args == []


def test_expand_commands_redirects_except_heredoc(shell):
    command = Command(
        args=["cat"],
        redirs=[
            Redirect("$HOME/out", TokenType.REDIR_OUT),
            Redirect("'$USER'", TokenType.HEREDOC),
        ],
    )
    expand_commands([command], shell)
    assert command.redirs[0].file == HOME + "/out"
    assert command.redirs[1].file == "'$USER'"


def test_expand_commands_handles_every_command(shell):
    commands = [Command(args=["echo", "$USER"]), Command(args=["echo", "$HOME"])]
    expand_commands(commands, shell)
    assert [c.args for c in commands] == [["echo", USER], ["echo", HOME]]