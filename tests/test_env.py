import pytest

from minishell.env import Environment, Shell


@pytest.fixture
def env():
    return Environment.from_entries(["HOME=/home/user", "PATH=/bin:/usr/bin", "EMPTY="])


def test_from_entries_reads_values(env):
    assert env.get("HOME") == "/home/user"
    assert env.get("PATH") == "/bin:/usr/bin"
    assert env.get("EMPTY") == ""


def test_from_entries_skips_entries_without_equal():
    env = Environment.from_entries(["A=1", "NOEQ"])
    assert "NOEQ" not in env
    assert list(env) == ["A"]


def test_value_keeps_later_equal_signs():
    env = Environment.from_entries(["B=x=y"])
    assert env.get("B") == "x=y"


def test_first_duplicate_wins():
    env = Environment.from_entries(["K=first", "K=second"])
    assert env.get("K") == "first"
    assert len(env) == 1


def test_iteration_preserves_order(env):
    assert list(env) == ["HOME", "PATH", "EMPTY"]


def test_get_missing_is_none(env):
    assert env.get("MISSING") is None
    assert "MISSING" not in env


def test_set_existing_updates(env):
    assert env.set("HOME", "/tmp") is True
    assert env.get("HOME") == "/tmp"


def test_set_missing_does_not_add(env):
    assert env.set("NEW", "v") is False
    assert "NEW" not in env


def test_add_appends_at_end(env):
    env.add("NEW", "v")
    assert list(env)[-1] == "NEW"
    assert env.get("NEW") == "v"


def test_add_without_value_is_bare_in_envp():
    env = Environment()
    env.add("DECLARED", None)
    assert "DECLARED" in env
    assert env.get("DECLARED") is None
    assert env.to_envp() == ["DECLARED"]


def test_remove(env):
    env.remove("PATH")
    assert "PATH" not in env
    assert list(env) == ["HOME", "EMPTY"]


def test_remove_missing_is_harmless(env):
    env.remove("MISSING")
    assert list(env) == ["HOME", "PATH", "EMPTY"]


def test_envp_round_trip():
    entries = ["A=1", "B=two words", "C="]
    env = Environment.from_entries(entries)
    assert env.to_envp() == entries
    assert Environment.from_entries(env.to_envp()).to_envp() == entries


def test_shell_holds_environment(env):
    shell = Shell(env)
    assert shell.exit_status == 0
    assert shell.env.get("HOME") == "/home/user"
    shell.exit_status = 127
    assert Shell(env).exit_status == 0