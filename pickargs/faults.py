"""
Pickargs faults: what can go wrong while scanning arguments, and how it is shown.

Contents
- FaultCode: numeric identifiers of every error and warning the store reports.
  Option faults live in 1111x, free argument faults in 1112x, encoding faults
  in 1113x and warnings in 12xxx.
- ArgumentsException / ArgumentsWarning: a message plus a frozen mapping of
  options (title, code, hint, docs and whatever the query knew: key, keys,
  value, tokens, index, cause...). Both render themselves with rich.
- trigger(): merge runtime options into a fault, then raise, warn or print it.
- getdoc(): per-code documentation supplied by the host program.

Presentation
- Output is one header line "[ prog — code | Title ]", the message, and an
  optional " → hint" line. fancy=True draws a panel, colorful=True applies the
  palette (host overrides via __styles__ in __main__).
- shell=True prints errors on stderr and exits with status 1; warnings are
  printed and execution goes on. Without it, errors are raised to the caller
  and warnings are handed to the warnings module.
"""
import inspect
import os.path
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    stable identifiers of the argument store faults.

    - options (1111x): MISSING_OPTION, OPTION_WITHOUT_VALUE, OPTION_VALUE_PARSING
    - free arguments (1112x): MISSING_ARGUMENT, ARGUMENT_PARSING, UNUSED_ARGUMENTS
    - encoding (1113x): NON_UTF8_ARGUMENT
    - warnings (12xxx): CONVERSION_WARNING
    """
    MISSING_OPTION       = 11111
    OPTION_WITHOUT_VALUE = 11112
    OPTION_VALUE_PARSING = 11113

    MISSING_ARGUMENT     = 11121
    ARGUMENT_PARSING     = 11122
    UNUSED_ARGUMENTS     = 11123

    NON_UTF8_ARGUMENT    = 11131

    CONVERSION_WARNING   = 12111

    def normalize(self):
        """
        label shown for this code: __main__.__codes__[self] when the host
        defines it, the number otherwise.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _prog():
    return getattr(__import__("__main__"), "__prog__", None) or os.path.basename(sys.argv[0]) or "python"


def _render(fault, palette):
    options = fault.options
    styles = defaultdict(str, palette | getattr(__import__("__main__"), "__styles__", {}))
    colorful = options.get("colorful", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), styles[style] if colorful else "")

    code = options.get("code")
    header = Text.assemble(
        "[ ",
        text(_prog(), "prog-name"),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "?", "code"),
        " | ",
        text(str(options.get("title", "fault")).title(), "title"),
        " ]"
    )
    body = [text(fault.message, "message")]
    if hint := options.get("hint"):
        body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if options.get("fancy", False):
        return Panel(Group(*body), title=header, title_align="left")

    return Group(header, *body)


class _Fault:
    """message + read-only options, shared by errors and warnings."""

    palette = {}

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, self.palette)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **(dict(self.options) | overrides))


class ArgumentsException(_Fault, Exception):
    palette = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #00E5FF",
        "title": "bold #FF4DA6",
        "message": "#C8C8D0",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    }

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)


class MissingOptionError(ArgumentsException): ...
class OptionWithoutValueError(ArgumentsException): ...
class OptionValueParsingError(ArgumentsException): ...
class MissingArgumentError(ArgumentsException): ...
class ArgumentParsingError(ArgumentsException): ...
class UnusedArgumentsError(ArgumentsException): ...
class NonUtf8ArgumentError(ArgumentsException): ...


class ArgumentsWarning(_Fault, ABC, Warning):
    # warnings use a softer palette than errors
    palette = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #FFB400",
        "title": "bold #FFC2E0",
        "message": "#D6D6DE",
        "hint-arrow": "#B8EFAF dim",
        "hint": "italic #B8EFAF",
    }

    def __trigger__(self):
        if self.options.get("shell", False):
            return console.print(self)
        warnings.warn(self, stacklevel=len(inspect.stack()))


class ConversionWarning(ArgumentsWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault after merging options into it.

    fault is anything exposing __trigger__() and __replace__(**options), in
    practice an ArgumentsException or an ArgumentsWarning. the usual options
    are shell, fancy and colorful, plus any context worth carrying along.
    """
    if not callable(getattr(fault, "__trigger__", None)) or not callable(getattr(fault, "__replace__", None)):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    documentation for a fault code from __main__.__docs__, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "ArgumentsException",
    "MissingOptionError",
    "OptionWithoutValueError",
    "OptionValueParsingError",
    "MissingArgumentError",
    "ArgumentParsingError",
    "UnusedArgumentsError",
    "NonUtf8ArgumentError",
    "ArgumentsWarning",
    "ConversionWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
