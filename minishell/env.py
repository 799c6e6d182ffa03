"""The shell's environment variables and its mutable state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional


class Environment:
    """An ordered set of variables; a variable's value may be ``None``.

    A variable whose value is ``None`` has been declared but not assigned:
    it is passed to programs as its bare name.
    """

    def __init__(self):
        self._vars: dict[str, Optional[str]] = {}

    @classmethod
    def from_entries(cls, entries: Iterable[str]) -> "Environment":
        """Build an environment from ``KEY=value`` strings.

        Entries without ``=`` are skipped; when a key repeats, the first
        occurrence wins.
        """
        env = cls()
        for entry in entries:
            key, sep, value = entry.partition("=")
            if sep and key not in env._vars:
                env._vars[key] = value
        return env

    def get(self, key: str) -> Optional[str]:
        """Return the value of ``key``, or ``None`` if unset or valueless."""
        return self._vars.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._vars

    def __iter__(self) -> Iterator[str]:
        """Iterate over the variable names in insertion order."""
        return iter(list(self._vars))

    def __len__(self) -> int:
        return len(self._vars)

    def set(self, key: str, value: str) -> bool:
        """Replace the value of an existing variable.

        Returns ``True`` if the variable existed and was updated, ``False``
        if there is no such variable (nothing is added then).
        """
        if key not in self._vars:
            return False
        self._vars[key] = value
        return True

    def add(self, key: str, value: Optional[str]) -> None:
        """Define ``key`` with ``value``, appending it if new."""
        self._vars[key] = value

    def remove(self, key: str) -> None:
        """Remove ``key`` if present."""
        self._vars.pop(key, None)

    def to_envp(self) -> list[str]:
        """Return the variables as ``KEY=value`` strings (bare ``KEY`` if valueless)."""
        return [
            key if value is None else f"{key}={value}"
            for key, value in self._vars.items()
        ]


@dataclass
class Shell:
    """State shared across the commands of one shell session."""

    env: Environment = field(default_factory=Environment)
    exit_status: int = 0