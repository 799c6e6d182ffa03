# minishell

A small interactive command shell. It reads a line, splits it into words and
operators, expands variables, and runs the result. Commands can be chained with
pipes, and their input and output can come from and go to files.

It needs a POSIX system: commands run in child processes created with `fork`.

## Installing

```
pip install .
```

## Running

```
minishell
```

The prompt is `minishell> `. Press Ctrl-D to leave; the shell prints `exit`
and ends with the status of the last command. Ctrl-C drops the line you are
typing and gives you a fresh prompt. The shell starts with the environment of
the process that launched it.

## What it understands

- **Words and quotes.** `'single'` keeps its text exactly as written.
  `"double"` still expands variables. Quoted and unquoted parts next to each
  other form one word. A quote left open is reported as an error.
- **Variables.** `$NAME` is replaced by its value, or by nothing if it is not
  set. `$?` is the exit status of the last command. A `$` not followed by a
  letter, digit, `_` or `?` stays as it is.
- **Pipes.** `cmd1 | cmd2 | cmd3` joins each command's output to the next
  one's input. The pipeline's status is that of the last command.
- **Redirections.** `< file` reads input from a file. `> file` writes output to
  it, replacing what was there. `>> file` adds to the end of it.
  `<< DELIM` reads the following lines as input, up to a line that is exactly
  `DELIM`; variables in those lines are expanded. A redirection target that
  expands to nothing is reported as an ambiguous redirect.
- **Separators.** `;` and `&` end one command and start the next; the commands
  run one after the other.
- **Assignments.** A line that starts with `NAME=value` sets that variable, as
  `export NAME=value` would.

A misplaced operator, such as a leading `|` or a redirection with no file
after it, is reported as a syntax error and nothing on the line is run.

## Built-in commands

| Command | What it does |
|---|---|
| `echo [-n] args...` | Prints its arguments. `-n` (or `-nnn`) leaves out the final newline. |
| `cd [dir]` | Changes directory and updates `OLDPWD` and `PWD`. With no argument, `--` or `~` it goes to `$HOME`; `-` goes to `$OLDPWD` and prints it. |
| `pwd` | Prints the current directory. |
| `export [NAME[=value]...]` | Sets variables. With no arguments it lists them as `declare -x` lines. Stops at the first invalid name. |
| `unset NAME...` | Removes variables. |
| `env` | Prints every variable that has a value. |
| `exit [n]` | Leaves the shell with status `n` modulo 256, or with the last status if no `n` is given. A non-numeric `n` gives status 2. |

A builtin with no redirections runs inside the shell itself. With
redirections, or inside a pipeline, it runs in a child process, so changes it
makes to variables or the directory do not last.

Any other command is looked up in the directories listed in `$PATH`, unless its
name contains a `/`. A name that cannot be found ends with status 127; a file
that cannot be run ends with status 126. A command killed by a signal ends with
status 128 plus the signal number.

## Using it from Python

```python
from minishell.env import Environment, Shell
from minishell.shell import run_line

shell = Shell(env=Environment.from_entries(["PATH=/usr/bin:/bin", "HOME=/tmp"]))
run_line(shell, "echo hello | tr a-z A-Z", input)
print(shell.exit_status)
```

The third argument of `run_line` is called with a prompt to read here-document
lines, and returns a line or `None` at end of input.

The pieces can also be used one at a time:

- `minishell.lexer.tokenize` turns a line into `Token`s, raising
  `UnclosedQuoteError` for an open quote.
- `minishell.parser.parse` builds `Command`s (with their `Redirect`s) from those
  tokens, raising `ParseError` on a syntax error.
- `minishell.expander.expand_commands` expands variables and removes quotes in
  them; `expand_word` does the same for a single word.
- `minishell.executor.execute` reads here-documents and runs the commands.
- `minishell.builtins.run_builtin` runs one builtin and takes an optional
  stream to write its output to. `exit` raises `ShellExit` carrying the status.

## What it does not do

There is no job control: `&` does not put a command in the background, it only
separates commands. There are no `&&` or `||` operators, no wildcard
expansion, no subshells or command substitution, and no reading of commands
from a script file; `minishell` only runs the lines it reads interactively.