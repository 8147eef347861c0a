"""
Flagship faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every error kind the
  framework reports. Codes are grouped by domain so logs and searches stay predictable.
- CommandException: base type that carries a message plus read-only options and
  knows how to render itself in a friendly, lowercased, actionable way.
- One subclass per error kind (command-not-found, subcommand-required,
  flag-parsing, argument-parsing, validation, completion, input-output, custom)
  plus DuplicateNameError for construction-time name clashes.

UX goals
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Suggestions are shown as a "did you mean" line when the fault carries any.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The dispatcher raises faults; it never prints or exits by itself.
- invoke() renders a fault to stderr through rich and turns it into an exit code.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the framework (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • COMMAND_NOT_FOUND, SUBCOMMAND_REQUIRED
    - flags (1111x)
      • FLAG_PARSING
    - positionals (1112x)
      • ARGUMENT_PARSING
    - constraints (1113x)
      • VALIDATION
    - completion (1114x)
      • COMPLETION
    - environment (1115x)
      • INPUT_OUTPUT
    - delegated (1116x)
      • CUSTOM
    - construction (1117x)
      • DUPLICATE_NAME

    codes are normalized to a string via normalize() so hosts can remap them
    to friendlier labels through a __codes__ mapping in __main__.
    """
    # --- routing errors ---
    COMMAND_NOT_FOUND           = 11101
    SUBCOMMAND_REQUIRED         = 11102

    # --- flag errors ---
    FLAG_PARSING                = 11111

    # --- positional errors ---
    ARGUMENT_PARSING            = 11121

    # --- constraint errors ---
    VALIDATION                  = 11131

    # --- completion errors ---
    COMPLETION                  = 11141

    # --- environment errors ---
    INPUT_OUTPUT                = 11151

    # --- delegated errors ---
    CUSTOM                      = 11161

    # --- construction errors ---
    DUPLICATE_NAME              = 11171

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base class of every fault raised by the framework.

    a fault is a message plus a read-only mapping of options. well-known options:
    - title: short headline (defaults to the class title).
    - code: FaultCode (defaults to the class code).
    - hint: one actionable sentence shown after an arrow.
    - suggestions: names the user probably meant.
    - prog: program name shown in the rendered header.
    - colorful / fancy: rendering switches (see __rich__).
    subclasses add kind-specific options such as flag, expected and received.
    """
    __fault__ = FaultCode.CUSTOM
    __title__ = "error"

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", type(self).__fault__)

    @property
    def title(self):
        return self.options.get("title", type(self).__title__)

    @property
    def hint(self):
        return self.options.get("hint")

    @property
    def suggestions(self):
        return tuple(self.options.get("suggestions", ()))

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "suggestion": "bold #FFD600",  # amber suggested names
        } | getattr(main, "__styles__", {}))

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

        prog = text(getattr(main, "__prog__", self.options.get("prog", "")), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize(), styler("code")),
            " | ",
            text(self.title.title(), styler("error-title")),
            " ]"
        )
        renders = [text(self.message, styler("error-message"))]

        if self.suggestions:
            renders.append(Text.assemble(
                text(" → ", styler("hint-arrow")),
                "did you mean ",
                Text(" or ").join(text(repr(name), styler("suggestion")) for name in self.suggestions),
                "?",
            ))
        if self.hint:
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left", width=console.width - 4)

        return Group(header, *renders)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CommandNotFoundError(CommandException):
    __fault__ = FaultCode.COMMAND_NOT_FOUND
    __title__ = "unknown command"


class SubcommandRequiredError(CommandException):
    __fault__ = FaultCode.SUBCOMMAND_REQUIRED
    __title__ = "subcommand required"


class FlagParsingError(CommandException):
    __fault__ = FaultCode.FLAG_PARSING
    __title__ = "invalid flag"

    @property
    def flag(self):
        return self.options.get("flag")

    @property
    def expected(self):
        return self.options.get("expected")

    @property
    def received(self):
        return self.options.get("received")


class ArgumentParsingError(CommandException):
    __fault__ = FaultCode.ARGUMENT_PARSING
    __title__ = "invalid arguments"

    @property
    def expected(self):
        return self.options.get("expected")

    @property
    def received(self):
        return self.options.get("received")


class ValidationError(CommandException):
    __fault__ = FaultCode.VALIDATION
    __title__ = "constraint violated"

    @property
    def flag(self):
        return self.options.get("flag")


class CompletionError(CommandException):
    __fault__ = FaultCode.COMPLETION
    __title__ = "completion failed"


class InputOutputError(CommandException):
    __fault__ = FaultCode.INPUT_OUTPUT
    __title__ = "input/output error"


class CustomError(CommandException):
    __fault__ = FaultCode.CUSTOM
    __title__ = "error"


class DuplicateNameError(CommandException, ValueError):
    __fault__ = FaultCode.DUPLICATE_NAME
    __title__ = "duplicate name"


__all__ = (
    "CommandException",
    "CommandNotFoundError",
    "SubcommandRequiredError",
    "FlagParsingError",
    "ArgumentParsingError",
    "ValidationError",
    "CompletionError",
    "InputOutputError",
    "CustomError",
    "DuplicateNameError",
    "FaultCode",
)
