"""
Flagship completion engine: results, ActiveHelp and candidate computation.

What this module provides
- CompletionItem: one candidate (value plus optional description).
- ActiveHelp: a non-selectable hint, optionally gated by a predicate over Context.
- CompletionResult: ordered candidates plus ActiveHelp entries, with two markers:
  • filtered: the producer already applied the prefix (the engine keeps every item).
  • incomplete: the producer gave up early (timeouts); such results are never cached.
- complete(root, tokens): the engine behind the hidden `__complete` meta-command.

Routing (the final token is the prefix being typed)
- "--name=part": values of --name, emitted as "--name=value".
- "-..." (before any "--" marker): in-scope flag names with their descriptions.
- previous token is a flag expecting a value: that flag's completion callback,
  then the command's registered flag completer, then the Choice values.
- no positional argument yet: subcommand names and aliases, followed by the
  command's arg-completion results.
- otherwise: the command's arg-completion callback.

Failure policy
- A raising callback never breaks the shell: the engine logs it at DEBUG level
  and returns a help-only result describing the failure.
"""
import logging
from collections import namedtuple

from .binding import bind, flaglike
from .context import Context
from .faults import CompletionError
from .flags import visible

logger = logging.getLogger(__name__)

CompletionItem = namedtuple("CompletionItem", ("value", "description"), defaults=(None,))


class ActiveHelp:
    """
    Contextual hint shown alongside (or instead of) completions.

    Parameters
    - message: text shown to the user.
    - when: optional predicate receiving the Context; the hint is dropped when
      it returns a falsey value.
    """

    __slots__ = ("message", "when")

    def __init__(self, message, /, when=None):
        if not isinstance(message, str):
            raise TypeError("active help message must be a string")
        if when is not None and not callable(when):
            raise TypeError("active help predicate must be callable")
        self.message = message
        self.when = when

    def applies(self, ctx, /):
        if self.when is None:
            return True
        try:
            return bool(self.when(ctx))
        except Exception:
            logger.debug("active help predicate for %r raised; hint dropped", self.message, exc_info=True)
            return False

    def __eq__(self, other):
        if not isinstance(other, ActiveHelp):
            return NotImplemented
        return (self.message, self.when) == (other.message, other.when)

    def __hash__(self):
        return hash((self.message, self.when))

    def __repr__(self):
        return f"ActiveHelp({self.message!r})"


class CompletionResult:
    """
    Ordered completion candidates plus ActiveHelp entries.

    Building
        result = CompletionResult()
        result.add("pods", "running workloads").add("services")
        result.extend(["nodes", ("events", "cluster events")])
        result.help("tip: use -n to pick a namespace")

    Reading
        list(result)          -> CompletionItem values in insertion order
        result.values         -> ("pods", "services", ...)
        result.active_help    -> (ActiveHelp, ...)
    """

    def __init__(self, items=(), active_help=(), /, *, filtered=False, incomplete=False):
        self._items = []
        self._help = []
        self.filtered = bool(filtered)
        self.incomplete = bool(incomplete)
        self.extend(items)
        for entry in active_help:
            self.help(entry)

    @classmethod
    def coerce(cls, object, /):
        """
        Normalize a callback return value.

        Accepts a CompletionResult (returned as-is), None (empty result) or an
        iterable of strings / (value, description) pairs / CompletionItems.
        """
        if isinstance(object, CompletionResult):
            return object
        if object is None:
            return cls()
        if isinstance(object, str):
            raise TypeError("completion callbacks must return a result or an iterable of values, not a string")
        return cls(object)

    def add(self, value, description=None, /):
        if not isinstance(value, str):
            raise TypeError("completion values must be strings")
        if description is not None and not isinstance(description, str):
            raise TypeError("completion descriptions must be strings")
        self._items.append(CompletionItem(value, description or None))
        return self

    def extend(self, values, /):
        for value in values:
            if isinstance(value, tuple):
                self.add(*value)
            else:
                self.add(value)
        return self

    def help(self, message, /, when=None):
        self._help.append(message if isinstance(message, ActiveHelp) else ActiveHelp(message, when))
        return self

    def merge(self, other, /):
        """Append another result's items and hints; markers are combined."""
        other = CompletionResult.coerce(other)
        self._items.extend(other._items)
        self._help.extend(other._help)
        self.incomplete |= other.incomplete
        return self

    @property
    def items(self):
        return tuple(self._items)

    @property
    def values(self):
        return tuple(item.value for item in self._items)

    @property
    def descriptions(self):
        return tuple(item.description for item in self._items)

    @property
    def active_help(self):
        return tuple(self._help)

    def select(self, prefix, ctx, /):
        """
        Return a new result keeping items that start with `prefix` (unless the
        result is already filtered) and hints whose predicate holds for `ctx`.
        """
        items = self._items if self.filtered else [item for item in self._items if item.value.startswith(prefix)]
        return CompletionResult(
            items,
            [entry for entry in self._help if entry.applies(ctx)],
            filtered=True,
            incomplete=self.incomplete,
        )

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __bool__(self):
        return bool(self._items or self._help)

    def __eq__(self, other):
        if not isinstance(other, CompletionResult):
            return NotImplemented
        return self._items == other._items and self._help == other._help

    def __repr__(self):
        return f"CompletionResult(values={list(self.values)!r}, active_help={[entry.message for entry in self._help]!r})"


def _invoke(callback, ctx, prefix, /):
    """Run one completion callback, degrading failures to a help-only result."""
    try:
        return CompletionResult.coerce(callback(ctx, prefix))
    except Exception as exception:
        if isinstance(exception, CompletionError):
            fault = exception
        else:
            fault = CompletionError(
                f"completion for {" ".join(ctx.path)!r} failed: {exception}",
                command=ctx.path,
            )
        logger.debug("completion callback %r failed", callback, exc_info=True)
        return CompletionResult().help(fault.message)


def _values(flag, ctx, prefix, /):
    """Candidates for a flag value: flag callback, command completer, then static choices."""
    if flag.completion is not None:
        return _invoke(flag.completion, ctx, prefix)
    for owner in reversed(ctx.commands):
        if (callback := owner.flag_completions.get(flag.name)) is not None:
            return _invoke(callback, ctx, prefix)
    return CompletionResult(flag.type.choices)


def complete(root, tokens, /):
    """
    Compute completions for a partially typed command line.

    Parameters
    - root: the root Command.
    - tokens: argv after the program name (and after "__complete"); the last
      token is the prefix being typed, possibly empty.

    Returns
    - CompletionResult already filtered by prefix, with inapplicable ActiveHelp
      removed. Never raises because of application callbacks.
    """
    tokens = list(tokens)
    prefix = tokens.pop() if tokens else ""
    chain, remainder = root.trace(tokens)
    command = chain[-1]
    flags = visible(chain)
    shorthands = {flag.shorthand for flag in flags if flag.shorthand}
    binding = bind(remainder, flags, strict=False, helpable=False)
    ctx = Context(chain, binding.values, binding.args, binding.provided)
    logger.debug("completing %r under %r (prefix=%r)", remainder, ctx.path, prefix)

    if binding.dangling is not None:
        logger.debug("value completion for --%s", binding.dangling.name)
        return _values(binding.dangling, ctx, prefix).select(prefix, ctx)

    if not binding.terminated and (prefix == "-" or flaglike(prefix, shorthands)):
        if prefix.startswith("--") and "=" in prefix:
            name, _, partial = prefix[2:].partition("=")
            flag = next((flag for flag in flags if flag.name == name), None)
            if flag is None or not flag.valued:
                return CompletionResult(filtered=True)
            logger.debug("inline value completion for --%s", name)
            result = _values(flag, ctx, partial).select(partial, ctx)
            return CompletionResult(
                [(f"--{name}={item.value}", item.description) for item in result],
                result.active_help,
                filtered=True,
                incomplete=result.incomplete,
            )
        logger.debug("flag-name completion under %r", ctx.path)
        result = CompletionResult()
        for flag in flags:
            if not flag.hidden:
                result.add(flag.long, str(flag.descr) if flag.descr else None)
        if "help" not in (flag.name for flag in flags):
            result.add("--help", f"show help for {command.name}")
        return result.select(prefix, ctx)

    result = CompletionResult(filtered=True)
    if not binding.args and not binding.terminated and command.children:
        names = CompletionResult()
        for child in command.children.values():
            descr = str(child.descr) if child.descr else None
            for name in (child.name, *child.aliases):
                names.add(name, descr)
        result.merge(names.select(prefix, ctx))
    if command.completion is not None:
        logger.debug("argument completion under %r", ctx.path)
        result.merge(_invoke(command.completion, ctx, prefix).select(prefix, ctx))
    return result


__all__ = (
    "CompletionItem",
    "ActiveHelp",
    "CompletionResult",
    "complete",
)
