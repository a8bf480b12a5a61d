"""
Pickargs utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the argument store and the fault layer.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support pickargs.arguments and pickargs.faults.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) as a snapshot.

- ordinal(number)
  • Human-friendly ordinal label for a 1-based position ("first", "12th", ...).

- Token helpers
  • fromraw(token): normalize a str/bytes/bytearray argument into the stored str form.
  • istext(token): True when the stored token is valid UTF-8 text.
  • asbytes(token): recover the exact raw bytes of a stored token.
  • render(token): object to show in diagnostics (str for text, bytes otherwise).

Token representation
- Tokens are stored as str. Bytes are decoded with os.fsdecode, the same
  surrogate-escape scheme CPython applies to sys.argv, so undecodable bytes
  survive as lone surrogates and os.fsencode gives the original bytes back.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> ordinal(3), ordinal(22)
    ('third', '22nd')
    >>> istext(fromraw(b"\\xff"))
    False
"""
import functools
import os
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved as-is; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth") for nicer phrasing in messages.
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    if not isinstance(number, int) or number < 1:
        raise ValueError("ordinal() argument must be a positive integer")

    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads from "_{name}" on the instance; lists are
    returned as tuple snapshots so callers cannot mutate the backing state.

    Example
    - Given self._tokens, declare tokens = mirror("tokens") to expose it safely.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    def getter(self):
        object = getattr(self, "_" + name)
        return tuple(object) if isinstance(object, list) else object

    getter.__name__ = getter.__qualname__ = name
    return property(getter, doc="read-only view of the %r backing field" % name)


def fromraw(token, /):
    """
    Normalize one raw argument into its stored str form.

    - str is kept as-is (sys.argv already carries surrogate escapes).
    - bytes/bytearray are decoded with os.fsdecode; nothing is lost.
    """
    if isinstance(token, str):
        return token
    if isinstance(token, bytes | bytearray):
        return os.fsdecode(bytes(token))
    raise TypeError("argument tokens must be strings or bytes, not %r" % type(token).__name__)


def istext(token, /):
    """
    Tell whether a stored token is valid UTF-8 text (no escaped raw bytes).
    """
    try:
        token.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def asbytes(token, /):
    """
    Recover the exact raw bytes of a stored token.
    """
    return os.fsencode(token)


def render(token, /):
    """
    Diagnostic form of a token: the str itself when it is text, its raw bytes otherwise.
    """
    return token if istext(token) else asbytes(token)


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you still
need to distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Functions
    "coalesce",
    "mirror",
    "ordinal",
    "fromraw",
    "istext",
    "asbytes",
    "render",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
