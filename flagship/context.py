"""
Per-invocation view handed to run, hook and completion callbacks.

A Context is built by the dispatcher (or the completion engine) after the
command path is resolved and every flag is bound. It is read-only apart from
`state`, a scratch dict hooks can use to pass values to later hooks.
"""
import sys
from types import MappingProxyType


class Context:
    """
    Read-only view of one parse.

    Properties
    - commands: tuple of Command objects from the root to the matched command.
    - command: the matched (last) command.
    - path: tuple of command names from the root to the matched command.
    - flags: read-only mapping of every in-scope flag name to its value
      (defaults included).
    - args: tuple of positional arguments.
    - state: per-invocation scratch dict.
    - stdout: stream for output meant for the user (sys.stdout by default).

    Lookup
    - ctx["namespace"], ctx.get("namespace", default), "namespace" in ctx.
    - ctx.provided("namespace") tells an explicit value from a default.
    """

    __slots__ = ("_commands", "_flags", "_args", "_provided", "_state", "_stdout")

    def __init__(self, commands, flags=None, args=(), provided=(), *, stdout=None):
        self._commands = tuple(commands)
        self._flags = MappingProxyType(dict(flags or {}))
        self._args = tuple(args)
        self._provided = frozenset(provided)
        self._state = {}
        self._stdout = stdout

    @property
    def commands(self):
        return self._commands

    @property
    def command(self):
        return self._commands[-1] if self._commands else None

    @property
    def path(self):
        return tuple(command.name for command in self._commands)

    @property
    def flags(self):
        return self._flags

    @property
    def args(self):
        return self._args

    @property
    def state(self):
        return self._state

    @property
    def stdout(self):
        return self._stdout if self._stdout is not None else sys.stdout

    def __getitem__(self, name):
        try:
            return self._flags[name.lstrip("-")]
        except KeyError:
            raise KeyError(name) from None

    def __contains__(self, name):
        return isinstance(name, str) and name.lstrip("-") in self._flags

    def get(self, name, default=None, /):
        return self._flags.get(name.lstrip("-"), default)

    def provided(self, name, /):
        """Return True when the flag was given explicitly on the command line."""
        return name.lstrip("-") in self._provided

    def __repr__(self):
        return f"context(path={" ".join(self.path)!r}, flags={dict(self._flags)!r}, args={list(self._args)!r})"

    def __rich_repr__(self):
        yield "path", self.path
        yield "flags", dict(self._flags)
        yield "args", self._args


__all__ = (
    "Context",
)
