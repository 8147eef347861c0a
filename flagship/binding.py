"""
Token binding: turn the tokens after the command path into flag values and
positional arguments.

Accepted forms
- "--name value", "--name=value", "--flag" (presence-only Bool), "--flag=false".
- "-n value", "-nvalue", "-n=value", clustered shorthands "-vq" (the last one
  in a cluster may take a value).
- "--" ends flag parsing; every later token is positional.
- "-" and negative numbers ("-3", "-0.5") are positional unless a digit
  shorthand is declared.

Two modes share the same walk:
- strict (dispatch): unknown flags, missing values and conversion failures raise
  FlagParsingError.
- lenient (completion): anything unbindable is skipped, and a trailing valued
  flag without its value is reported as `dangling`.
"""
import re
from collections import namedtuple

from .faults import FlagParsingError
from .suggestions import suggest

Binding = namedtuple("Binding", ("values", "provided", "args", "dangling", "terminated", "help"))


def negative(token, /):
    """Return True when the token reads as a negative number."""
    return re.fullmatch(r"-\d+(\.\d+)?", token) is not None


def flaglike(token, /, shorthands=()):
    """Return True for tokens that start a flag; "-" and negative numbers are values."""
    if not token.startswith("-") or token == "-":
        return False
    if negative(token) and token[1] not in shorthands:
        return False
    return True


def bind(tokens, flags, /, *, strict=True, helpable=True, distance=2, suggestions=True):
    """
    Bind `tokens` against the in-scope `flags`.

    Parameters
    - tokens: tokens following the resolved command path.
    - flags: tuple of Flag specs in scope (see flags.visible).
    - strict: raise on malformed input instead of skipping it.
    - helpable: recognize the built-in --help/-h.
    - distance, suggestions: "did you mean" settings for unknown flags.

    Returns
    - Binding(values, provided, args, dangling, terminated, help)
      • values: every in-scope flag name mapped to its bound value or default.
      • provided: names explicitly given.
      • args: positional arguments in order.
      • dangling: the valued flag still waiting for a value (lenient mode only).
      • terminated: whether "--" was seen.
      • help: whether the built-in help flag was seen (binding stops there).
    """
    longs = {flag.name: flag for flag in flags}
    shorts = {flag.shorthand: flag for flag in flags if flag.shorthand}
    values = {flag.name: flag.default for flag in flags}
    provided = set()
    args = []
    dangling = None
    terminated = False

    def fail(message, flag=None, /, **options):
        if strict:
            raise FlagParsingError(message, flag=flag, **options)

    def store(flag, text, spelled):
        try:
            value = flag.convert(text)
        except ValueError as exception:
            return fail(
                f"invalid value for '{spelled}': {exception}",
                flag.name,
                expected=flag.type.name,
                received=text,
                suggestions=flag.type.choices and suggest(text, flag.type.choices, distance=distance) if suggestions else (),
            )
        if flag.type.accumulates and flag.name in provided:
            values[flag.name] = values[flag.name] + value
        else:
            values[flag.name] = value
        provided.add(flag.name)

    def unknown(spelled, name, candidates):
        options = {}
        if suggestions:
            options["suggestions"] = ["--" + near for near in suggest(name, candidates, distance=distance)]
        return fail(f"unknown flag {spelled!r}", name, hint="run with '--help' to see the available flags", **options)

    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if terminated:
            args.append(token)
            continue
        if token == "--":
            terminated = True
            continue
        if not flaglike(token, shorts):
            args.append(token)
            continue

        if token.startswith("--"):
            name, sep, inline = token[2:].partition("=")
            if helpable and name == "help" and name not in longs:
                return Binding(values, provided, args, None, terminated, True)
            if (flag := longs.get(name)) is None:
                unknown(token, name, list(longs) + (["help"] if helpable else []))
                continue
            spelled = "--" + name
        else:
            body = token[1:]
            flag = None
            sep = inline = ""
            for position, char in enumerate(body):
                if helpable and char == "h" and char not in shorts:
                    return Binding(values, provided, args, None, terminated, True)
                if (current := shorts.get(char)) is None:
                    unknown(f"-{char}", char, list(shorts))
                    flag = None
                    break
                rest = body[position + 1:]
                if current.valued:
                    flag = current
                    if rest:
                        sep, inline = "=", rest.removeprefix("=")
                    break
                if rest.startswith("="):
                    flag, sep, inline = current, "=", rest[1:]
                    break
                if rest:
                    store(current, "true", "-" + char)
                else:
                    flag = current
            if flag is None:
                continue
            spelled = "-" + flag.shorthand

        if sep:
            if flag.valued or inline:
                store(flag, inline, spelled)
            else:
                fail(f"flag '{spelled}' was given an empty value", flag.name, expected=flag.type.name, received="")
        elif not flag.valued:
            store(flag, "true", spelled)
        elif index < len(tokens) and not flaglike(tokens[index], shorts):
            store(flag, tokens[index], spelled)
            index += 1
        elif index < len(tokens) or strict:
            fail(
                f"flag '{spelled}' needs a value",
                flag.name,
                expected=flag.type.name,
                received=tokens[index] if index < len(tokens) else None,
                hint=f"pass it as '{spelled} <{flag.type.name}>' or '--{flag.name}=<{flag.type.name}>'",
            )
        else:
            dangling = flag

    return Binding(values, provided, args, dangling, terminated, False)


__all__ = (
    "Binding",
    "bind",
    "flaglike",
    "negative",
)
