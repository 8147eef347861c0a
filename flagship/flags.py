"""
Flagship flag model: value types, constraints and the Flag spec.

What this module provides
- Value types: callable converters that turn one command-line token into a
  typed value and can vouch for a default value.
  • Bool, Int, Float, String: scalar singletons.
  • StringSlice, StringArray: accumulating singletons (values collect across repeats).
  • File, Directory: path singletons checked for existence at parse time.
  • Choice(*values), Range(min, max): domain-restricted types built on demand.
- Constraints: cross-flag rules evaluated after every flag is bound.
  • RequiredIf(flag): this flag is required when `flag` is present.
  • ConflictsWith(*flags): this flag cannot be combined with any of `flags`.
  • Requires(*flags): this flag needs every one of `flags`.
- Flag: a named, typed option ("--name" plus an optional "-n" shorthand) with
  a default, description, constraints and an optional completion callback.

Conventions
- Converters raise ValueError with a short lowercased reason; the dispatcher
  wraps it into a FlagParsingError that names the flag, the expected type and
  the received text.
- Constraint checks raise ValidationError.
- Construction mistakes raise TypeError/ValueError with "<typename> 'field' ..." messages.

Quick start
    from flagship import Flag, Bool, Choice, ConflictsWith

    output = Flag("--output", "-o", type=Choice("json", "yaml"), default="yaml")
    quiet = Flag("--quiet", "-q", type=Bool, constraints=[ConflictsWith("verbose")])
"""
import functools
import operator
import os.path
import re
from collections.abc import Iterable, Sequence

from rich.text import Text

from .faults import ValidationError
from .utils import Unset, coalesce, mirror, rename


class ValueType:
    """
    Base class of every value type.

    Attributes
    - name: label used in help and in "expected ..." fault fields.
    - accumulates: when True, repeated occurrences collect in argv order.
    - valued: when False the flag is presence-only on the command line
      (a separate value token is never consumed).
    - choices: static completion candidates (empty unless the domain is finite).
    """
    name = "value"
    accumulates = False
    valued = True
    choices = ()

    def __call__(self, text, /):
        raise NotImplementedError

    def accepts(self, value, /):
        """Return True when `value` is a legal default for this type."""
        return True

    def initial(self):
        """Value reported when the flag is absent and declares no default."""
        return () if self.accumulates else None

    def __repr__(self):
        return self.name


class BoolType(ValueType):
    name = "bool"
    valued = False

    truthy = frozenset({"true", "t", "1", "yes", "y"})
    falsy = frozenset({"false", "f", "0", "no", "n"})

    def __call__(self, text, /):
        if (lowered := text.strip().lower()) in self.truthy:
            return True
        if lowered in self.falsy:
            return False
        raise ValueError(f"invalid boolean value {text!r}; use true/false, yes/no or 1/0")

    def accepts(self, value, /):
        return isinstance(value, bool)

    def initial(self):
        return False


class IntType(ValueType):
    name = "int"

    def __call__(self, text, /):
        try:
            return int(text)
        except ValueError:
            raise ValueError(f"invalid integer value {text!r}; expected a whole number (e.g. 42, -10, 0)") from None

    def accepts(self, value, /):
        return isinstance(value, int) and not isinstance(value, bool)


class FloatType(ValueType):
    name = "float"

    def __call__(self, text, /):
        try:
            return float(text)
        except ValueError:
            raise ValueError(f"invalid float value {text!r}; expected a decimal number (e.g. 3.14, -0.5, 1e10)") from None

    def accepts(self, value, /):
        return isinstance(value, int | float) and not isinstance(value, bool)


class StringType(ValueType):
    name = "string"

    def __call__(self, text, /):
        return text

    def accepts(self, value, /):
        return isinstance(value, str)


class StringSliceType(ValueType):
    """Comma-separated list; every occurrence contributes its parts."""
    name = "strings"
    accumulates = True

    def __call__(self, text, /):
        return tuple(part.strip() for part in text.split(","))

    def accepts(self, value, /):
        return isinstance(value, Sequence) and not isinstance(value, str) and all(isinstance(x, str) for x in value)


class StringArrayType(StringSliceType):
    """List of whole values; every occurrence contributes exactly one item."""
    name = "stringArray"

    def __call__(self, text, /):
        return (text,)


class FileType(StringType):
    name = "file"

    def __call__(self, text, /):
        if not os.path.exists(text):
            raise ValueError(f"file not found: {text!r}")
        if not os.path.isfile(text):
            raise ValueError(f"path exists but is not a file: {text!r}")
        return text


class DirectoryType(StringType):
    name = "directory"

    def __call__(self, text, /):
        if not os.path.exists(text):
            raise ValueError(f"directory not found: {text!r}")
        if not os.path.isdir(text):
            raise ValueError(f"path exists but is not a directory: {text!r}")
        return text


class Choice(ValueType):
    """String restricted to a declared, ordered set of values."""

    def __init__(self, *values):
        if not values:
            raise TypeError("choice must declare at least one value")
        seen = []
        for value in values:
            if not isinstance(value, str):
                raise TypeError("choice values must be strings")
            if value in seen:
                raise ValueError("choice values cannot contain duplicates")
            seen.append(value)
        self.choices = tuple(seen)

    @property
    def name(self):
        return "{%s}" % ",".join(self.choices)

    def __call__(self, text, /):
        if text not in self.choices:
            raise ValueError(f"invalid choice {text!r}; expected one of: {", ".join(self.choices)}")
        return text

    def accepts(self, value, /):
        return value in self.choices

    def __repr__(self):
        return f"Choice({", ".join(map(repr, self.choices))})"


class Range(ValueType):
    """Integer restricted to the inclusive interval [minimum, maximum]."""

    def __init__(self, minimum, maximum, /):
        for value in (minimum, maximum):
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError("range bounds must be integers")
        if minimum > maximum:
            raise ValueError("range minimum cannot be greater than its maximum")
        self.minimum = minimum
        self.maximum = maximum

    @property
    def name(self):
        return f"{self.minimum}..{self.maximum}"

    def __call__(self, text, /):
        try:
            value = int(text)
        except ValueError:
            raise ValueError(f"invalid integer value {text!r}; expected a number between {self.minimum} and {self.maximum}") from None
        if not self.minimum <= value <= self.maximum:
            raise ValueError(f"value {value} is out of range; expected a number between {self.minimum} and {self.maximum} (inclusive)")
        return value

    def accepts(self, value, /):
        return isinstance(value, int) and not isinstance(value, bool) and self.minimum <= value <= self.maximum

    def __repr__(self):
        return f"Range({self.minimum}, {self.maximum})"


Bool = BoolType()
Int = IntType()
Float = FloatType()
String = StringType()
StringSlice = StringSliceType()
StringArray = StringArrayType()
File = FileType()
Directory = DirectoryType()


def _flagname(name, /):
    """Normalize a constraint reference ("--name" or "name") to a bare flag name."""
    if not isinstance(name, str):
        raise TypeError("constraint flag names must be strings")
    elif not (name := name.strip().lstrip("-")):
        raise ValueError("constraint flag names cannot be empty")
    return name


class Constraint:
    """
    Base class of cross-flag rules.

    check(flag, present) receives the constrained Flag and the set of bare flag
    names explicitly provided on the command line; it raises ValidationError
    when the rule is violated.
    """
    label = "constraint"

    def __init__(self, *flags):
        if not flags:
            raise TypeError(f"{type(self).__name__.lower()} needs at least one flag name")
        self.flags = tuple(map(_flagname, flags))

    def check(self, flag, present, /):
        raise NotImplementedError

    def describe(self):
        return f"{self.label} {", ".join("--" + name for name in self.flags)}"

    def __repr__(self):
        return f"{type(self).__name__}({", ".join(map(repr, self.flags))})"


class RequiredIf(Constraint):
    label = "required if"

    def __init__(self, flag, /):
        super().__init__(flag)

    def check(self, flag, present, /):
        trigger, = self.flags
        if trigger in present and flag.name not in present:
            raise ValidationError(
                f"flag '--{flag.name}' is required when '--{trigger}' is set",
                flag=flag.name,
                hint=f"add '--{flag.name}' or remove '--{trigger}'",
            )


class ConflictsWith(Constraint):
    label = "conflicts with"

    def check(self, flag, present, /):
        if flag.name not in present:
            return
        for other in self.flags:
            if other in present:
                raise ValidationError(
                    f"flags '--{flag.name}' and '--{other}' cannot be used together",
                    flag=flag.name,
                    hint=f"keep only one of '--{flag.name}' and '--{other}'",
                )


class Requires(Constraint):
    label = "requires"

    def check(self, flag, present, /):
        if flag.name not in present:
            return
        for other in self.flags:
            if other not in present:
                raise ValidationError(
                    f"flag '--{flag.name}' requires '--{other}' to be set",
                    flag=flag.name,
                    hint=f"add '--{other}'",
                )


class FlagType(type):
    """
    Metaclass that makes specs introspectable.

    - __typename__ is derived from the class name (camel-case split with hyphens).
    - every name listed in __introspectable__ becomes a read-only property
      backed by "_<name>" (see mirror()).
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


def _sanitize_names(cls, metadata, /):
    r"""
    Internal: split and validate the long name and optional shorthand.

    - exactly one long name matching r"--[^\W\d_](-?[^\W_]+)*" is required.
    - at most one shorthand matching r"-[^\W_]" is accepted.
    - the stored name is the long name without its leading dashes.
    """
    long = short = Unset
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify a long name")
    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif re.fullmatch(r"--[^\W\d_](-?[^\W_]+)*", name):
            if long is not Unset:
                raise ValueError(f"{cls.__typename__} cannot have more than one long name")
            long = name
        elif re.fullmatch(r"-[^\W_]", name):
            if short is not Unset:
                raise ValueError(f"{cls.__typename__} cannot have more than one shorthand")
            short = name
        else:
            raise ValueError(f"{cls.__typename__} names must look like '--name' or '-n' (unicodes are allowed)")
    if long is Unset:
        raise TypeError(f"{cls.__typename__} must specify a long name")
    metadata["name"] = long[2:]
    metadata["shorthand"] = coalesce(short) and short[1]
    del metadata["names"]


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate type, default, description, constraints and completion.

    - type: must be a ValueType instance.
    - default: Unset resolves to the type's initial value; anything else must be
      accepted by the type (accumulating defaults are stabilized to tuples).
    - descr: Unset or a non-empty string/Text.
    - constraints: iterable of Constraint instances, stabilized to a tuple.
    - completion: Unset or a callable.
    """
    if not isinstance(type := metadata["type"], ValueType):
        raise TypeError(f"{cls.__typename__} 'type' must be a value type")

    if (default := metadata["default"]) is Unset or default is None:
        metadata["default"] = type.initial() if default is Unset else None
    elif not type.accepts(default):
        raise ValueError(f"{cls.__typename__} 'default' {default!r} is not a valid {type.name}")
    elif type.accumulates:
        metadata["default"] = tuple(default)

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(constraints := metadata["constraints"], Iterable) or isinstance(constraints, str):
        raise TypeError(f"{cls.__typename__} 'constraints' must be an iterable of constraints")
    constraints = tuple(constraints)
    if not all(isinstance(constraint, Constraint) for constraint in constraints):
        raise TypeError(f"{cls.__typename__} 'constraints' must be an iterable of constraints")
    metadata["constraints"] = constraints

    if (completion := metadata["completion"]) is not Unset and not callable(completion):
        raise TypeError(f"{cls.__typename__} 'completion' must be callable")
    metadata["completion"] = coalesce(completion)


class Flag(metaclass=FlagType):
    """
    Named, typed option specification.

    A Flag is declared once and attached to a Command; every descendant of that
    command can set it too ("inherited" flags). The parsed value is exposed to
    callbacks through Context under the flag's bare name ("--dry-run" -> "dry-run").

    Properties
    - name, shorthand: bare long name and optional one-character shorthand.
    - type: the ValueType used to convert tokens.
    - default: value reported when the flag is absent.
    - descr: help text.
    - required: when True the flag must be present after binding.
    - constraints: tuple of Constraint rules.
    - completion: optional callback(ctx, prefix) producing value candidates.
    - hidden: when True the flag is left out of help and flag-name completion.
    """

    __introspectable__ = (
        "name",
        "shorthand",
        "type",
        "default",
        "descr",
        "required",
        "constraints",
        "completion",
        "hidden",
    )

    __displayable__ = (
        "name",
        "shorthand",
        "type",
        "default",
    )

    def __new__(
            cls,
            *names,
            type=String,
            default=Unset,
            descr=Unset,
            required=False,
            constraints=(),
            completion=Unset,
            hidden=False,
    ):
        """
        Construct a Flag spec.

        Parameters
        - names: "--name" and optionally "-n".
        - type: ValueType (String by default).
        - default: Unset | value accepted by `type`.
        - descr: Unset | str | Text.
        - required: bool.
        - constraints: Iterable[Constraint].
        - completion: Unset | Callable[[Context, str], CompletionResult | Iterable].
        - hidden: bool.

        Raises
        - TypeError/ValueError on malformed names, a default the type rejects,
          or non-callable completion.
        """
        metadata = {
            "names": names,
            "type": type,
            "default": default,
            "descr": descr,
            "required": bool(required),
            "constraints": constraints,
            "completion": completion,
            "hidden": bool(hidden),
        }
        _sanitize_names(cls, metadata)
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def long(self):
        return "--" + self._name

    @property
    def short(self):
        return "-" + self._shorthand if self._shorthand else None

    @property
    def valued(self):
        return self._type.valued

    def convert(self, text, /):
        """Convert one token with the flag's type (ValueError on rejection)."""
        return self._type(text)

    def completer(self, callback, /):
        """
        Bind the completion callback; usable as a decorator.

        Rules
        - Must be callable.
        - Can be set only once per flag.
        """
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} completion must be callable")
        if self._completion is not None:
            raise TypeError(f"{type(self).__typename__} completion cannot be overridden")
        self._completion = callback
        return callback


def visible(chain, /):
    """
    Return the flags in scope for the last command of `chain`.

    `chain` runs from the root to the matched command. Ancestor flags come
    first; when a descendant declares a flag with an ancestor's name, the
    descendant's declaration wins and keeps the ancestor's position.
    """
    scope = {}
    for command in chain:
        for flag in command.flags:
            scope[flag.name] = flag
    return tuple(scope.values())


__all__ = (
    # Value types
    "ValueType",
    "Bool",
    "Int",
    "Float",
    "String",
    "StringSlice",
    "StringArray",
    "File",
    "Directory",
    "Choice",
    "Range",

    # Constraints
    "Constraint",
    "RequiredIf",
    "ConflictsWith",
    "Requires",

    # Specs
    "Flag",
    "visible",
)

del FlagType
