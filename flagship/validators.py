"""
Positional-argument validators.

A validator is any callable taking the tuple of positional arguments and
raising ArgumentParsingError when they are not acceptable. The classes below
cover the common shapes; Custom adapts an application predicate.

    Command("get", args=MinimumArgs(1))
    Command("scale", args=RangeArgs(1, 2))
    Command("set", args=OnlyValidArgs("on", "off"))
"""
from .faults import ArgumentParsingError
from .utils import pluralize


class Validator:
    """Base class: subclasses implement __call__(args)."""

    def __call__(self, args, /):
        raise NotImplementedError

    def _fail(self, message, expected, received, /, **options):
        raise ArgumentParsingError(message, expected=expected, received=received, **options)


class ExactArgs(Validator):
    def __init__(self, count, /):
        _check_count("ExactArgs", count)
        self.count = count

    def __call__(self, args, /):
        if len(args) != self.count:
            self._fail(
                f"accepts {pluralize(self.count, "arg")}, received {len(args)}",
                str(self.count),
                len(args),
            )

    def __repr__(self):
        return f"ExactArgs({self.count})"


class MinimumArgs(Validator):
    def __init__(self, count, /):
        _check_count("MinimumArgs", count)
        self.count = count

    def __call__(self, args, /):
        if len(args) < self.count:
            self._fail(
                f"requires at least {pluralize(self.count, "arg")}, received {len(args)}",
                f"at least {self.count}",
                len(args),
            )

    def __repr__(self):
        return f"MinimumArgs({self.count})"


class MaximumArgs(Validator):
    def __init__(self, count, /):
        _check_count("MaximumArgs", count)
        self.count = count

    def __call__(self, args, /):
        if len(args) > self.count:
            self._fail(
                f"accepts at most {pluralize(self.count, "arg")}, received {len(args)}",
                f"at most {self.count}",
                len(args),
            )

    def __repr__(self):
        return f"MaximumArgs({self.count})"


class RangeArgs(Validator):
    def __init__(self, minimum, maximum, /):
        _check_count("RangeArgs", minimum)
        _check_count("RangeArgs", maximum)
        if minimum > maximum:
            raise ValueError("RangeArgs() minimum cannot be greater than its maximum")
        self.minimum = minimum
        self.maximum = maximum

    def __call__(self, args, /):
        if not self.minimum <= len(args) <= self.maximum:
            self._fail(
                f"accepts between {self.minimum} and {pluralize(self.maximum, "arg")}, received {len(args)}",
                f"{self.minimum} to {self.maximum}",
                len(args),
            )

    def __repr__(self):
        return f"RangeArgs({self.minimum}, {self.maximum})"


class OnlyValidArgs(Validator):
    """Every positional argument must be one of the declared values."""

    def __init__(self, *values):
        if not all(isinstance(value, str) for value in values):
            raise TypeError("OnlyValidArgs() values must be strings")
        self.values = tuple(values)

    def __call__(self, args, /):
        for arg in args:
            if arg not in self.values:
                self._fail(
                    f"invalid argument {arg!r}",
                    f"one of: {", ".join(self.values)}",
                    arg,
                    hint=f"valid arguments are {", ".join(map(repr, self.values))}",
                )

    def __repr__(self):
        return f"OnlyValidArgs({", ".join(map(repr, self.values))})"


class Custom(Validator):
    """
    Adapt an application predicate.

    The callable receives the positional tuple. It may raise (the exception
    propagates unchanged) or return False, which is reported with `message`.
    """

    def __init__(self, predicate, /, message="invalid arguments"):
        if not callable(predicate):
            raise TypeError("Custom() predicate must be callable")
        self.predicate = predicate
        self.message = message

    def __call__(self, args, /):
        if self.predicate(args) is False:
            self._fail(self.message, "custom", len(args))

    def __repr__(self):
        return "Custom(<function>)"


def _check_count(typename, count, /):
    if not isinstance(count, int) or isinstance(count, bool):
        raise TypeError(f"{typename}() count must be an integer")
    if count < 0:
        raise ValueError(f"{typename}() count must be a non-negative integer")


__all__ = (
    "Validator",
    "ExactArgs",
    "MinimumArgs",
    "MaximumArgs",
    "RangeArgs",
    "OnlyValidArgs",
    "Custom",
)
