"""
Flagship command layer: build command trees, dispatch argv and answer completions.

What this module provides
- Command: a named node with flags, subcommands, a positional validator, a run
  callback, lifecycle hooks and completion callbacks.
  • Trees are built once (constructor, add(), command() decorator) and then
    treated as immutable while executing.
  • Children do not point back at their parents; every operation threads the
    chain of ancestors top-down (see trace()).
- command(...): decorator creating a root Command from a run callback.
- invoke(root, prompt): convenience runner returning a process exit code and
  rendering faults through rich.

Execution (Command.execute)
1. "__complete" as the first token switches to completion mode: candidates are
   computed by flagship.completion and written in the dialect chosen by
   <APP>_COMPLETE (see flagship.shells).
2. The command path is resolved by consuming leading tokens that name a child.
3. Remaining tokens are bound against the flags in scope (own + inherited).
   --help/-h prints help for the resolved command and stops.
4. Required flags and flag constraints are checked over the whole binding.
5. The positional validator runs.
6. A command without a run callback that has children fails with
   CommandNotFoundError (leftover name) or SubcommandRequiredError.
7. Hooks run: persistent pre-run (root to leaf), pre-run, run, post-run,
   persistent post-run (leaf to root). The first exception stops the chain.

Quick start
    from flagship import Command, Flag, MinimumArgs, invoke

    root = Command("kubectl", flags=[Flag("--namespace", "-n", default="default")])

    @root.command("get", args=MinimumArgs(1))
    def get(ctx):
        print(ctx["namespace"], ctx.args)

    if __name__ == "__main__":
        raise SystemExit(invoke(root))
"""
import copy
import functools
import inspect
import logging
import operator
import re
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .binding import bind
from .completion import complete
from .context import Context
from .faults import *
from .faults import console
from .flags import Flag, visible
from .shells import Shell, active_help_enabled, dialect, render, write_completion
from .suggestions import DISTANCE, suggest
from .utils import *
from .validators import ExactArgs, OnlyValidArgs

logger = logging.getLogger(__name__)

COMPLETE = "__complete"

HOOKS = (
    "persistent_pre_run",
    "pre_run",
    "run",
    "post_run",
    "persistent_post_run",
)


class CommandType(type):
    """
    Metaclass that makes Command introspectable.

    - __typename__ is derived from the class name (camel-case split with hyphens).
    - every name in __introspectable__ becomes a read-only property backed by
      "_<name>" (see mirror()).
    - __repr__/__rich_repr__ show the __displayable__ (or __introspectable__) fields.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


_NAME = r"[^\W_](?:[\w.+-]*[^\W_])?"


def _process_names(cls, metadata):
    """
    Validate the command name and its aliases.

    - name: non-empty, no whitespace, not starting with "-"; "__complete" is reserved.
    - aliases: iterable of names following the same rule, without duplicates and
      without repeating the name itself. Stabilized to a tuple.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(_NAME, name):
        raise ValueError(f"{cls.__typename__} 'name' {name!r} must be a single word that does not start with '-'")
    metadata["name"] = name

    if not isinstance(aliases := metadata["aliases"], Iterable) or isinstance(aliases, str):
        raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
    seen = [name]
    for alias in aliases:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
        elif not re.fullmatch(_NAME, alias := alias.strip()):
            raise ValueError(f"{cls.__typename__} alias {alias!r} must be a single word that does not start with '-'")
        elif alias in seen:
            raise ValueError(f"{cls.__typename__} 'aliases' cannot contain duplicates or the command name")
        seen.append(alias)
    metadata["aliases"] = tuple(seen[1:])


def _process_strings(cls, metadata):
    """
    Normalize scalar string/Text metadata fields (descr, long, group).

    - Validates type: each value must be str | Text | Unset.
    - Trims strings; empty strings are rejected.
    - Resolves Unset to None.
    """
    for name in ("descr", "long", "group"):
        if not isinstance(object := metadata[name], str | Text | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        elif isinstance(object, str) and not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        metadata[name] = coalesce(object)


def _process_examples(cls, metadata):
    if not isinstance(examples := metadata["examples"], Iterable) or isinstance(examples, str):
        raise TypeError(f"{cls.__typename__} 'examples' must be an iterable of strings")
    sanitized = []
    for example in examples:
        if not isinstance(example, str | Text):
            raise TypeError(f"{cls.__typename__} 'examples' must be an iterable of strings")
        elif isinstance(example, str) and not (example := example.strip()):
            raise ValueError(f"{cls.__typename__} 'examples' must be an iterable of non-empty strings")
        sanitized.append(example)
    metadata["examples"] = tuple(sanitized)


def _process_flags(cls, metadata):
    """
    Validate the flags declared on this node.

    Long names and shorthands must be unique within the node; clashes raise
    DuplicateNameError.
    """
    if not isinstance(flags := metadata["flags"], Iterable) or isinstance(flags, str):
        raise TypeError(f"{cls.__typename__} 'flags' must be an iterable of flags")
    metadata["flags"] = []
    for flag in flags:
        _register_flag(cls, metadata["name"], metadata["flags"], flag)


def _register_flag(cls, owner, flags, flag, /):
    if not isinstance(flag, Flag):
        raise TypeError(f"{cls.__typename__} 'flags' must be an iterable of flags")
    for other in flags:
        if other.name == flag.name:
            raise DuplicateNameError(f"flag '--{flag.name}' is already declared on {owner!r}", flag=flag.name)
        if flag.shorthand and other.shorthand == flag.shorthand:
            raise DuplicateNameError(f"shorthand '-{flag.shorthand}' is already declared on {owner!r}", flag=flag.name)
    flags.append(flag)


def _process_callbacks(cls, metadata):
    """
    Validate callables: run, hooks, completion and the positional validator.

    Each must be Unset or callable; Unset resolves to None.
    """
    for name in (*HOOKS, "completion", "validator"):
        if (object := metadata[name]) is not Unset and not callable(object):
            raise TypeError(f"{cls.__typename__} {name!r} must be callable")
        metadata[name] = coalesce(object)


def _process_options(cls, metadata):
    if not isinstance(distance := metadata["distance"], int) or isinstance(distance, bool) or distance < 0:
        raise ValueError(f"{cls.__typename__} 'distance' must be a non-negative integer")
    for name in ("colorful", "fancy"):
        if (object := metadata[name]) is not Unset:
            metadata[name] = bool(object)


def _attach(parent, child, /):
    """
    Register `child` under `parent`, enforcing unique names among siblings.

    Names and aliases share one namespace: a clash between any of them raises
    DuplicateNameError.
    """
    taken = {}
    for sibling in parent._children.values():
        for name in (sibling.name, *sibling.aliases):
            taken[name] = sibling
    for name in (child.name, *child.aliases):
        if name in taken:
            typeof = "alias" if name != child.name else "subcommand"
            raise DuplicateNameError(
                f"{typeof} name {name!r} is already in use under {parent.name!r}",
                hint=f"rename {child.name!r} or give it a different alias",
            )
    parent._children[child.name] = child


def _runtime(chain, name, /):
    """Resolve a rendering option from the nearest command that sets it."""
    for command in reversed(chain):
        if (value := getattr(command, "_" + name)) is not Unset:
            return value
    return False


class Command(metaclass=CommandType):
    """
    Named node of a command tree.

    Responsibilities
    - Introspection: metadata exposed as read-only properties (see __introspectable__).
    - Composition: children keyed by name, insertion order kept for help.
    - Dispatch: execute() resolves, binds, validates and runs hooks in order.
    - Completion: the hidden "__complete" meta-command and per-shell output.
    - Rendering: rich help for --help/-h.

    Callbacks
    - run and hooks: callback(ctx) where ctx is a Context; raise to fail.
    - completion: callback(ctx, prefix) returning a CompletionResult or an
      iterable of values / (value, description) pairs.
    - flag completers: same shape, registered per flag name with flag_completer().
    """

    __introspectable__ = (
        "name",
        "descr",
        "long",
        "group",
        "aliases",
        "examples",
        "flags",
        "children",
        "validator",
        "persistent_pre_run",
        "pre_run",
        "run",
        "post_run",
        "persistent_post_run",
        "completion",
        "flag_completions",
        "suggestions",
        "distance",
        "colorful",
        "fancy",
    )

    __displayable__ = (
        "name",
        "descr",
        "group",
        "aliases",
        "flags",
        "children",
    )

    def __new__(
            cls,
            name,
            /,
            descr=Unset,
            long=Unset,
            group=Unset,
            aliases=(),
            examples=(),
            flags=(),
            args=Unset,
            run=Unset,
            pre_run=Unset,
            post_run=Unset,
            persistent_pre_run=Unset,
            persistent_post_run=Unset,
            completion=Unset,
            parent=Unset,
            *,
            suggestions=True,
            distance=DISTANCE,
            colorful=Unset,
            fancy=Unset,
    ):
        """
        Construct a Command.

        Parameters
        - name: str
          Word used on the command line; unique among siblings.
        - descr, long: str | Text | Unset
          Short and long help text. When descr is Unset and run has a
          docstring, its first line is used.
        - group: str | Unset
          Heading under which the parent lists this command in help.
        - aliases: Iterable[str]
          Alternative names accepted on the command line and in completion.
        - examples: Iterable[str | Text]
          Shown in help.
        - flags: Iterable[Flag]
          Flags declared at this level (visible to every descendant).
        - args: Callable[[tuple[str, ...]], None] | Unset
          Positional validator (see flagship.validators).
        - run, pre_run, post_run, persistent_pre_run, persistent_post_run:
          Callable[[Context], object] | Unset
        - completion: Callable[[Context, str], CompletionResult | Iterable] | Unset
          Candidates for positional arguments.
        - parent: Command | Unset
          When given, the new command is attached under it.
        - suggestions: bool, distance: int
          "Did you mean" settings for unknown subcommands and flags.
        - colorful, fancy: bool | Unset
          Help/fault rendering switches; Unset inherits from the nearest ancestor.

        Raises
        - TypeError/ValueError on malformed metadata.
        - DuplicateNameError when a flag or sibling name clashes.
        """
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{cls.__typename__} 'parent' must be a command")

        doc = inspect.getdoc(run) if inspect.isfunction(run) or inspect.ismethod(run) else None
        metadata = {
            "name": name,
            "descr": coalesce(descr, doc.split("\n", 1)[0] if doc else Unset),
            "long": long,
            "group": group,
            "aliases": aliases,
            "examples": examples,
            "flags": flags,
            "children": {},
            "validator": args,
            "persistent_pre_run": persistent_pre_run,
            "pre_run": pre_run,
            "run": run,
            "post_run": post_run,
            "persistent_post_run": persistent_post_run,
            "completion": completion,
            "flag_completions": {},
            "suggestions": bool(suggestions),
            "distance": distance,
            "colorful": colorful,
            "fancy": fancy,
        }
        _process_names(cls, metadata)
        _process_strings(cls, metadata)
        _process_examples(cls, metadata)
        _process_flags(cls, metadata)
        _process_callbacks(cls, metadata)
        _process_options(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        if parent:
            _attach(parent, self)
        return self

    def __bool__(self):
        return True

    def add(self, *children):
        """
        Attach existing commands as children.

        Raises DuplicateNameError when a name or alias is already taken.
        Returns self so calls can be chained.
        """
        for child in children:
            if not isinstance(child, Command):
                raise TypeError(f"{type(self).__typename__} children must be commands")
            if child is self:
                raise ValueError(f"{type(self).__typename__} cannot be its own child")
            _attach(self, child)
        return self

    def flag(self, *flags):
        """Declare more flags on this node; returns self."""
        for flag in flags:
            _register_flag(type(self), self._name, self._flags, flag)
        return self

    def command(self, name=Unset, /, **options):
        """
        Decorator creating a child Command whose run callback is the decorated function.

            @root.command("get", args=MinimumArgs(1))
            def get(ctx): ...

        When name is Unset the function name is used (underscores become hyphens).
        Returns the new Command.
        """
        if name is not Unset and not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__}.command() name must be a string")

        @rename("command")
        def wrapper(callback, /):
            if not callable(callback):
                raise TypeError("@command() must be applied to a callable")
            return Command(
                coalesce(name, callback.__name__.strip("_").replace("_", "-")),
                run=callback,
                parent=self,
                **options,
            )

        return wrapper

    def hook(self, stage, /):
        """
        Decorator binding a lifecycle callback.

        stage is one of: persistent_pre_run, pre_run, run, post_run, persistent_post_run.
        A stage can be bound only once.
        """
        if stage not in HOOKS:
            raise ValueError(f"{type(self).__typename__} hook stage must be one of: {", ".join(HOOKS)}")

        @rename(stage)
        def wrapper(callback, /):
            self._bind("_" + stage, callback)
            return callback

        return wrapper

    def completer(self, callback, /):
        """Decorator binding the positional-argument completion callback."""
        self._bind("_completion", callback)
        return callback

    def flag_completer(self, name, /):
        """
        Decorator binding a completion callback for flag `name` ("name" or "--name").

        The flag itself may be declared here or on any ancestor.
        """
        if not isinstance(name, str) or not name.strip("- "):
            raise TypeError(f"{type(self).__typename__}.flag_completer() name must be a non-empty string")

        @rename("flag_completer")
        def wrapper(callback, /):
            if not callable(callback):
                raise TypeError(f"{type(self).__typename__} flag completer must be callable")
            if (key := name.strip().lstrip("-")) in self._flag_completions:
                raise TypeError(f"{type(self).__typename__} flag completer for '--{key}' cannot be overridden")
            self._flag_completions[key] = callback
            return callback

        return wrapper

    def _bind(self, attribute, callback, /):
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} {attribute[1:]!r} must be callable")
        if getattr(self, attribute) is not None:
            raise TypeError(f"{type(self).__typename__} {attribute[1:]!r} cannot be overridden")
        setattr(self, attribute, callback)

    def completion_command(self, name="completion", /, **options):
        """
        Attach a child that prints the completion script for this (root) command.

            app completion bash > ~/.app-completion.bash
        """
        program = self._name

        def run(ctx):
            OnlyValidArgs(*Shell)(ctx.args)
            write_completion(program, ctx.args[0], ctx.stdout)

        def shells(ctx, prefix):
            return [(shell.value, f"completion script for {shell.value}") for shell in Shell]

        options.setdefault("descr", f"print the shell completion script for {program}")
        options.setdefault("examples", (
            f"{program} {name} bash > ~/.{program}-completion.bash",
            f"{program} {name} zsh > \"${{fpath[1]}}/_{program}\"",
            f"{program} {name} fish > ~/.config/fish/completions/{program}.fish",
        ))
        return Command(name, args=ExactArgs(1), run=run, completion=shells, parent=self, **options)

    def _child(self, token, /):
        if (child := self._children.get(token)) is not None:
            return child
        for child in self._children.values():
            if token in child._aliases:
                return child
        return None

    def trace(self, tokens, /):
        """
        Walk the tree from this command consuming tokens that name a child.

        Returns (chain, remainder): the commands from self to the deepest match
        and the unconsumed tokens. Stops at the first flag-like token, at "--",
        or at a token naming no child. Never fails.
        """
        tokens = list(tokens)
        chain = [self]
        index = 0
        while index < len(tokens) and not tokens[index].startswith("-"):
            if (child := chain[-1]._child(tokens[index])) is None:
                break
            chain.append(child)
            index += 1
        return tuple(chain), tokens[index:]

    def resolve(self, tokens, /):
        """Return (command, remainder) for `tokens`; an empty input yields (self, [])."""
        chain, remainder = self.trace(tokens)
        return chain[-1], remainder

    def execute(self, args=(), /, *, stdout=None, environ=None):
        """
        Run the command line `args` (program name excluded).

        Returns None on success and raises the first fault otherwise:
        CommandNotFoundError, SubcommandRequiredError, FlagParsingError,
        ArgumentParsingError, ValidationError, InputOutputError, or whatever a
        run/hook callback raised (passed through unchanged).

        Parameters
        - stdout: stream for help and completion output (sys.stdout by default).
        - environ: mapping consulted for <APP>_COMPLETE/<APP>_ACTIVE_HELP
          (os.environ by default).
        """
        if isinstance(args, str) or not isinstance(args, Iterable):
            raise TypeError(f"{type(self).__typename__}.execute() argument must be an iterable of strings")
        args = list(args)
        if not all(isinstance(arg, str) for arg in args):
            raise TypeError(f"{type(self).__typename__}.execute() argument must be an iterable of strings")

        if args and args[0] == COMPLETE:
            return self._complete(args[1:], stdout, environ)

        chain, remainder = self.trace(args)
        command = chain[-1]
        logger.debug("resolved %r with remainder %r", [step.name for step in chain], remainder)

        if command._run is None and command._children and remainder and not remainder[0].startswith("-"):
            raise command._unknown(chain, remainder[0])

        flags = visible(chain)
        binding = bind(remainder, flags, distance=command._distance, suggestions=command._suggestions)
        if binding.help:
            command._helper(chain, stdout)
            return None

        for flag in flags:
            if flag.required and flag.name not in binding.provided:
                raise ValidationError(
                    f"required flag '--{flag.name}' was not provided",
                    flag=flag.name,
                    hint=f"add '--{flag.name} <{flag.type.name}>'" if flag.valued else f"add '--{flag.name}'",
                )
            for constraint in flag.constraints:
                constraint.check(flag, binding.provided)

        if command._validator is not None:
            command._validator(tuple(binding.args))

        if command._run is None and command._children:
            if binding.args:
                raise command._unknown(chain, binding.args[0])
            route = " ".join(step.name for step in chain)
            raise SubcommandRequiredError(
                f"{route!r} requires a subcommand",
                command=route,
                suggestions=(),
                hint=f"run '{route} --help' to list the available commands",
            )

        ctx = Context(chain, binding.values, binding.args, binding.provided, stdout=stdout)
        self._lifecycle(ctx)
        return None

    def _unknown(self, chain, name, /):
        route = " ".join(step.name for step in chain)
        if self._child(name) is not None:
            return CommandNotFoundError(
                f"subcommand {name!r} of {route!r} was given after flags",
                command=name,
                hint=f"write '{route} {name}' first and put the flags after it",
            )
        candidates = [alias for child in self._children.values() for alias in (child.name, *child._aliases)]
        return CommandNotFoundError(
            f"unknown command {name!r} for {route!r}",
            command=name,
            suggestions=suggest(name, candidates, distance=self._distance) if self._suggestions else (),
            hint=f"run '{route} --help' to list the available commands",
        )

    @staticmethod
    def _lifecycle(ctx, /):
        chain = ctx.commands
        command = chain[-1]
        calls = [step._persistent_pre_run for step in chain]
        calls += [command._pre_run, command._run, command._post_run]
        calls += [step._persistent_post_run for step in reversed(chain)]
        for call in calls:
            if call is not None:
                call(ctx)

    def _complete(self, tokens, stdout, environ, /):
        result = complete(self, tokens)
        shell = dialect(self._name, environ)
        lines = render(result, shell, active_help=active_help_enabled(self._name, environ))
        logger.debug("writing %d completion lines for %s", len(lines), shell)
        stream = stdout if stdout is not None else sys.stdout
        try:
            for line in lines:
                stream.write(line + "\n")
            stream.flush()
        except OSError as exception:
            raise InputOutputError(
                f"cannot write completions: {exception.strerror or exception}",
            ) from exception
        return None

    def help(self, tokens=(), /, *, stdout=None):
        """Print help for the command reached by `tokens` from here."""
        chain, _ = self.trace(tokens)
        chain[-1]._helper(chain, stdout)

    def _helper(self, chain, stdout, /):
        """
        Render help for the last command of `chain`.

        Palette keys
        - usage-label, program-name, usage-section, description-section, long-section
        - group-label, flag-name, metavar, flag-description, annotation
        - children-title, children-table, children, children-description
        - examples-label, examples-dot, example
        - panel-title

        Customization
        - Define a mapping named __styles__ in __main__ to override any palette entry.
        - When colorful is False, styling is suppressed.
        """
        colorful = _runtime(chain, "colorful")
        fancy = _runtime(chain, "fancy")
        console = Console(file=stdout) if stdout is not None else Console()
        styles = defaultdict(str, {
            # === Head sections ===
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "usage-section": "bold #36C5F0",
            "description-section": "italic #A3A3A3",
            "long-section": "#D1D5DB",

            # === Flags ===
            "group-label": "bold #FFFFFF",
            "flag-name": "bold #22C55E",
            "metavar": "bold #FFD600",
            "flag-description": "#9CA3AF",
            "annotation": "italic #737373",

            # === Children table ===
            "children-title": "bold #FFFFFF",
            "children-table": "#4B5563",
            "children": "bold #36C5F0",
            "children-description": "#9CA3AF",

            # === Examples ===
            "examples-label": "bold #22C55E",
            "examples-dot": "#22C55E dim",
            "example": "#E5E7EB",

            # === Fancy panel ===
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        route = " ".join(step.name for step in chain)
        flags = visible(chain)
        helpable = all(flag.name != "help" for flag in flags)
        renders = []

        usage = Text()
        usage.append("usage", styler("usage-label")).append(": ")
        usage.append(text(route, styler("program-name")))
        if self._children:
            usage.append(" ").append(text("<command>", styler("usage-section")))
        if flags or helpable:
            usage.append(" ").append(text("[flags]", styler("usage-section")))
        if self._run is not None and (self._validator is not None or self._completion is not None):
            usage.append(" ").append(text("[args]", styler("usage-section")))
        renders.append(usage.append("\n"))

        if self._descr:
            renders.append(text(self._descr, styler("description-section")).append("\n"))
        if self._long:
            renders.append(text(self._long, styler("long-section")).append("\n"))
        if self._aliases:
            renders.append(Text.assemble(
                text("aliases", styler("group-label")), ": ", ", ".join(self._aliases), "\n",
            ))

        groups = {}
        for child in self._children.values():
            groups.setdefault(child.group, []).append(child)
        for group in sorted(groups, key=lambda x: x is not None):
            table = Table(
                "name", "help",
                title=text(group or ("subcommands" if len(chain) > 1 else "commands"), styler("children-title")),
                box=ROUNDED,
                style=styler("children-table"),
                header_style=styler("children-title"),
                title_justify="left",
            )
            for child in groups[group]:
                if child.descr:
                    summary = text(child.descr, styler("children-description"))
                else:
                    summary = text(f"run '{route} {child.name} --help' for details", styler("children-description"))
                names = ", ".join((child.name, *child.aliases))
                table.add_row(text(names, styler("children")), summary)
            renders.append(table)

        def section(title, members, /, helper=False):
            grid = Table.grid(padding=(0, 2))
            grid.add_column(no_wrap=True)
            grid.add_column()
            for flag in members:
                names = Text()
                names.append(text(f"-{flag.shorthand}, " if flag.shorthand else "    ", styler("flag-name")))
                names.append(text(flag.long, styler("flag-name")))
                if flag.valued:
                    names.append(" ").append(text(f"<{flag.type.name}>", styler("metavar")))
                notes = []
                if flag.required:
                    notes.append("required")
                if flag.valued and flag.default not in (None, (), ""):
                    notes.append(f"default: {flag.default!r}")
                notes.extend(constraint.describe() for constraint in flag.constraints)
                descr = text(flag.descr or "", styler("flag-description"))
                if notes:
                    descr = Text.assemble(descr, " " if flag.descr else "", text(f"({"; ".join(notes)})", styler("annotation")))
                grid.add_row(names, descr)
            if helper:
                grid.add_row(
                    Text.assemble(text("-h, " if "h" not in {flag.shorthand for flag in flags} else "    ", styler("flag-name")), text("--help", styler("flag-name"))),
                    text(f"show help for {self._name}", styler("flag-description")),
                )
            renders.append(Text.assemble(text(title, styler("group-label")), ":"))
            renders.append(grid)
            renders.append(Text(""))

        local = {flag.name for flag in self._flags}
        own = [flag for flag in flags if flag.name in local and not flag.hidden]
        inherited = [flag for flag in flags if flag.name not in local and not flag.hidden]
        if own or helpable:
            section("flags", own, helper=helpable)
        if inherited:
            section("global flags", inherited)

        if self._examples:
            dot = text(" • ", styler("examples-dot"))
            examples = Text()
            examples.append(text("examples", styler("examples-label")).append(":"))
            examples.append("\n")
            for example in map(lambda x: text(x, styler("example")), self._examples):
                examples.append(dot).append(example).append("\n")
            renders.append(examples)

        if renders and isinstance(renders[-1], Text):
            renders[-1].rstrip()

        renderable = Group(*renders)
        if fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[", " ", f"{self._name} HELP".upper(), " ", "]", style=styler("panel-title")),
                title_align="left",
            )
        console.print(renderable)


def command(name=Unset, /, **options):
    """
    Decorator creating a root Command whose run callback is the decorated function.

        @command("tool", flags=[Flag("--verbose", "-v", type=Bool)])
        def tool(ctx): ...

    When name is Unset the function name is used (underscores become hyphens).
    """
    @rename("command")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@command() must be applied to a callable")
        return Command(coalesce(name, callback.__name__.strip("_").replace("_", "-")), run=callback, **options)

    return wrapper


def invoke(root, prompt=Unset, /, *, stdout=None, environ=None):
    """
    Run `root` with a command line and return a process exit code.

    Parameters
    - root: the root Command.
    - prompt:
      • Unset: read tokens from sys.argv[1:].
      • str: shell-like string; split with shlex.split.
      • Iterable[str]: pre-tokenized sequence.

    Behavior
    - Faults (CommandException) are rendered to stderr through rich with the
      root's name and rendering options, and 1 is returned.
    - Other exceptions raised by callbacks propagate unchanged.
    - Never calls sys.exit.
    """
    if not isinstance(root, Command):
        raise TypeError("invoke() first argument must be a command")
    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() prompt must be a string or an iterable of strings")
    else:
        raise TypeError("invoke() prompt must be a string or an iterable of strings")

    try:
        root.execute(tokens, stdout=stdout, environ=environ)
    except CommandException as fault:
        console.print(copy.replace(
            fault,
            prog=root.name,
            colorful=_runtime((root,), "colorful"),
            fancy=_runtime((root,), "fancy"),
        ))
        return 1
    return 0


__all__ = (
    "Command",
    "command",
    "invoke",
)

del CommandType
