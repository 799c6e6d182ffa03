"""Error reporting helpers that write diagnostics to standard error."""

import sys

_MESSAGE_LIMIT = 1023


def print_error(prefix, target, message):
    """Write ``prefix``, ``target`` and ``message`` to stderr as one write.

    ``target`` and ``message`` may be ``None``, in which case they are
    omitted.  The text is capped at the same length as the shell's fixed
    message buffer.
    """
    text = "".join(part for part in (prefix, target, message) if part)
    sys.stderr.write(text[:_MESSAGE_LIMIT])
    sys.stderr.flush()


def print_syntax_error(token):
    """Report a syntax error near ``token`` (or ``newline`` when absent)."""
    shown = token if token else "newline"
    sys.stderr.write(f"minishell: syntax error near unexpected token `{shown}'\n")
    sys.stderr.flush()