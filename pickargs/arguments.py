r"""
Pickargs argument store.

Overview
- Arguments: an ordered, mutable store of raw argument tokens. Every query
  (flag, option, repeated option, subcommand, free value) scans the store,
  claims the matching token(s) and removes them. Whatever is left at the end
  is collected with free() or finish().
- Keys: normalized, ordered aliases identifying one flag or option
  (e.g., "-w" and "--width").

Consumption model
- Queries run in the order the caller issues them; the store is never analysed
  as a whole grammar. A token is removed the instant a query claims it, so no
  token is ever returned twice, and the remaining tokens keep their order.
- Because of this, the first query decides how an ambiguous pair is split.
  Over "--a --b", contains("--b") followed by opt_value("--a") faults on "--a"
  (no value left after it), whereas opt_value("--a") issued first takes "--b"
  as the value of "--a" and contains("--b") then returns False. Order your
  queries to match your grammar.

Behaviour flags (construction time)
- eq_separator (default on): "--key=value" is split at the first '='.
- short_space_opt: "-kVALUE" for single-character keys; an inline '=' wins
  when eq_separator is also on.
- combined_flags: contains("-a") peels 'a' out of a combined token like "-abc".

Faults
- Parse faults are raised as pickargs.faults exceptions (or rendered and the
  process exits when shell=True). Value queries are all-or-nothing: when a
  query faults, the store is left exactly as it was before the call.

Quick example:
    >>> from pickargs import Arguments
    >>> args = Arguments(["-v", "--width=10", "a.txt", "b.txt"])
    >>> args.contains(("-v", "--verbose"))
    True
    >>> args.opt_value("--width", int)
    10
    >>> args.free()
    ['a.txt', 'b.txt']

Public API
- Classes: Arguments, Keys
"""
import re
import shlex
import sys
import warnings
from collections.abc import Iterable

from .faults import *
from .utils import *


class Keys:
    """
    Ordered, de-duplicated aliases of one flag or option.

    Rules
    - each alias is a string starting with '-' or '--' followed by at least one
      character; whitespace and '=' are not allowed, and neither are the bare
      "-" and "--" markers.
    - a single alias may be given as a plain string.
    - short aliases are a single dash plus exactly one character ("-v").

    Invalid keys are programming errors and raise TypeError/ValueError right
    away instead of a parse fault.
    """

    def __new__(cls, keys, /):
        if isinstance(keys, Keys):
            return keys

        if isinstance(keys, str):
            keys = (keys,)
        elif not isinstance(keys, Iterable) or isinstance(keys, bytes | bytearray):
            raise TypeError("keys must be a string or an iterable of strings")

        aliases = []
        for key in keys:
            if not isinstance(key, str):
                raise TypeError("keys must be strings, not %r" % type(key).__name__)
            elif not re.fullmatch(r"--?[^\s=-][^\s=]*", key):
                raise ValueError("key %r must start with '-' or '--' followed by a name" % key)
            elif key not in aliases:
                aliases.append(key)

        if not aliases:
            raise ValueError("keys must contain at least one alias")

        self = super().__new__(cls)
        self._aliases = tuple(aliases)
        return self

    aliases = mirror("aliases")

    @property
    def short(self):
        """short aliases only (single dash, single character)."""
        return tuple(alias for alias in self._aliases if len(alias) == 2 and alias[1] != "-")

    def __iter__(self):
        return iter(self._aliases)

    def __len__(self):
        return len(self._aliases)

    def __contains__(self, key):
        return key in self._aliases

    def __eq__(self, other):
        if not isinstance(other, Keys):
            return NotImplemented
        return self._aliases == other._aliases

    def __hash__(self):
        return hash(self._aliases)

    def __str__(self):
        return "/".join(self._aliases)

    def __repr__(self):
        return "keys(%s)" % ", ".join(map(repr, self._aliases))


class Arguments:
    """
    Destructive, order-preserving store of raw command-line tokens.

    Construction
    - prompt:
      • Unset: sys.argv[1:] (the program name is never part of the store).
      • str: shell-like string, split with shlex.split.
      • Iterable[str | bytes | bytearray]: used as-is. Bytes are decoded with
        os.fsdecode so arguments that are not UTF-8 are kept without loss.
    - eq_separator / short_space_opt / combined_flags: matching behaviour (see module docs).
    - shell / fancy / colorful: how faults surface (see pickargs.faults.trigger).

    The store is meant to be owned by a single parse session on one thread.
    """

    def __init__(
            self,
            prompt=Unset,
            /,
            *,
            eq_separator=True,
            short_space_opt=False,
            combined_flags=False,
            shell=False,
            fancy=False,
            colorful=False
    ):
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable) and not isinstance(prompt, bytes | bytearray):
            tokens = list(prompt)
        else:
            raise TypeError("Arguments() argument must be a string or an iterable of strings or bytes")

        self._tokens = list(map(fromraw, tokens))
        # 1-based position of every remaining token in the original input
        self._positions = list(range(1, len(self._tokens) + 1))

        self._eq_separator = bool(eq_separator)
        self._short_space_opt = bool(short_space_opt)
        self._combined_flags = bool(combined_flags)
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

    tokens = mirror("tokens")
    eq_separator = mirror("eq_separator")
    short_space_opt = mirror("short_space_opt")
    combined_flags = mirror("combined_flags")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    def trigger(self, fault, /, **options):
        """
        surface a fault with this store's presentation options.

        non-shell exceptions propagate to the caller; shell mode renders them
        on stderr and exits with status 1. warnings never interrupt the query.
        """
        trigger(fault, **options, shell=self._shell, fancy=self._fancy, colorful=self._colorful)

    def _remove(self, index, count=1, /):
        del self._tokens[index:index + count]
        del self._positions[index:index + count]

    def _where(self, index):
        return ordinal(self._positions[index])

    def contains(self, keys, /):
        """
        Check for a flag and consume it.

        behavior
        - the first token equal to any alias is removed → True.
        - with combined_flags, when no token matches exactly, the first combined
          token holding a short alias character loses that one character
          ("-abc" → "-bc"); a token left without flags is removed. within a
          token the leftmost matching character is peeled.
        - a combined token is a single dash followed by letters and digits only,
          so "-a=x", "-1.5" and "--abc" are never peeled. with short_space_opt
          only the leading character can be peeled, since the rest may be the
          value attached to it ("-ofile").
        - otherwise → False and the store is untouched.

        never faults.
        """
        keys = Keys(keys)

        for index, token in enumerate(self._tokens):
            if token in keys:
                self._remove(index)
                return True

        if self._combined_flags and (characters := {alias[1] for alias in keys.short}):
            for index, token in enumerate(self._tokens):
                if not self._combined(token):
                    continue
                for offset, character in enumerate(token[1:], 1):
                    if character in characters:
                        if rest := token[1:offset] + token[offset + 1:]:
                            self._tokens[index] = "-" + rest
                        else:
                            self._remove(index)
                        return True
                    if self._short_space_opt:
                        break

        return False

    @staticmethod
    def _combined(token):
        # "-a=x" and "-1.5" carry values, "--abc" is a long key
        return len(token) > 2 and token.startswith("-") and token[1:].isalnum()

    def _find(self, keys):
        """
        locate the first token carrying any alias.

        returns (index, key, inline) or None, where inline is Unset for an
        exact "--key" match and the raw text after the key otherwise
        ("=value" forms keep the '=' so the caller knows which form matched).
        """
        for index, token in enumerate(self._tokens):
            for key in keys:
                if token == key:
                    return index, key, Unset
            for key in keys:
                if self._eq_separator and token.startswith(key + "="):
                    return index, key, token[len(key):]
                if self._short_space_opt and key in keys.short and token.startswith(key) and len(token) > 2:
                    return index, key, token[len(key):]
        return None

    def _inline(self, index, key, inline):
        """
        validate an inline value and strip its '=' and matching quotes.
        """
        def missing():
            return self.trigger(OptionWithoutValueError(
                "the %r option doesn't have an associated value" % key,
                title="option without a value",
                code=FaultCode.OPTION_WITHOUT_VALUE,
                hint="add a value after '=' (for example: %s=<value>)" % key,
                key=key,
                index=self._positions[index],
                docs=getdoc(FaultCode.OPTION_WITHOUT_VALUE)
            ))

        if inline.startswith("="):
            if not self._eq_separator:
                return missing()
            inline = inline[1:]

        if inline[:1] in ("'", '"'):
            quote, inline = inline[0], inline[1:]
            # a closing quote must be the same as the opening one
            if not inline.endswith(quote):
                return missing()
            inline = inline[:-1]

        if not inline:
            return missing()

        return inline

    def _convert(self, raw, type, binary, fault, message, where, /, **context):
        """
        run the converter over a raw token; conversion warnings are re-emitted.

        fault is the exception class for a failed conversion, message its text
        (the converter's error is appended), where the place named in the hint,
        and context the option payload carried by the fault.
        """
        type = coalesce(type, bytes if binary else str)
        typename = getattr(type, "__name__", "value")

        if binary:
            raw = asbytes(raw)
        elif not istext(raw):
            return self.trigger(NonUtf8ArgumentError(
                "argument %r is not a UTF-8 string" % asbytes(raw),
                title="non-UTF8 argument",
                code=FaultCode.NON_UTF8_ARGUMENT,
                hint="pass valid UTF-8 text or read the argument as bytes",
                value=asbytes(raw),
                docs=getdoc(FaultCode.NON_UTF8_ARGUMENT)
            ))

        try:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always")
                result = type(raw)
        except Exception as exception:
            return self.trigger(fault(
                "%s: %s" % (message, exception),
                hint="use a valid %s %s" % (typename, where),
                cause=str(exception),
                exception=exception,
                **context
            ))

        for warning in map(lambda warning: warning.message, caught):
            self.trigger(ConversionWarning(
                "converting %r raised a warning: %s" % (raw, warning),
                title="conversion warning",
                code=FaultCode.CONVERSION_WARNING,
                hint="check the value format; expected %s %s" % (typename, where),
                warning=warning,
                docs=getdoc(FaultCode.CONVERSION_WARNING)
            ))

        return result

    def _pick(self, keys, type, binary):
        """
        claim the first key-value pair for keys; Unset when no alias is present.

        the tokens are removed only after the value converted successfully.
        """
        if (match := self._find(keys)) is None:
            return Unset

        index, key, inline = match

        if inline is Unset:
            if index + 1 >= len(self._tokens):
                return self.trigger(OptionWithoutValueError(
                    "the %r option doesn't have an associated value" % key,
                    title="option without a value",
                    code=FaultCode.OPTION_WITHOUT_VALUE,
                    hint="add a value after %r at %s position (for example: %s <value>)" % (
                        key, self._where(index), key
                    ),
                    key=key,
                    index=self._positions[index],
                    docs=getdoc(FaultCode.OPTION_WITHOUT_VALUE)
                ))
            raw, span = self._tokens[index + 1], 2
        else:
            raw, span = self._inline(index, key, inline), 1

        value = self._convert(
            raw,
            type,
            binary,
            OptionValueParsingError,
            "failed to parse a %r value" % key,
            "for %r (given at %s position)" % (key, self._where(index)),
            title="value parsing failed",
            code=FaultCode.OPTION_VALUE_PARSING,
            key=key,
            value=render(raw),
            index=self._positions[index],
            docs=getdoc(FaultCode.OPTION_VALUE_PARSING)
        )
        self._remove(index, span)
        return value

    def value(self, keys, /, type=Unset, *, binary=False):
        """
        Parse a required key-value pair and consume it.

        parameters
        - keys: one alias or an iterable of aliases (see Keys).
        - type: converter called with the value (str, or bytes when binary=True).
        - binary: hand the raw bytes to the converter instead of text.

        forms
        - "--key value" (two tokens), "--key=value" (eq_separator) and "-kvalue"
          (short_space_opt). Inline values may be wrapped in matching quotes.

        faults
        - MissingOptionError: no alias is present.
        - OptionWithoutValueError: the key has no value (end of input, empty or
          badly quoted inline value).
        - OptionValueParsingError: the converter raised.
        - NonUtf8ArgumentError: the value is not text and binary is False.
        on any fault no token is consumed.
        """
        keys = Keys(keys)
        if (value := self._pick(keys, type, binary)) is Unset:
            return self.trigger(MissingOptionError(
                "the %r option must be set" % str(keys),
                title="missing option",
                code=FaultCode.MISSING_OPTION,
                hint="add the option (for example: %s <value>)" % keys.aliases[-1],
                keys=keys,
                docs=getdoc(FaultCode.MISSING_OPTION)
            ))
        return value

    def opt_value(self, keys, /, type=Unset, *, binary=False):
        """
        Parse an optional key-value pair and consume it.

        Same forms and faults as value(), except that an absent key returns None.
        Only the first occurrence is consumed; call again for the next one.
        """
        return coalesce(self._pick(Keys(keys), type, binary))

    def values(self, keys, /, type=Unset, *, binary=False):
        """
        Parse every occurrence of a key-value pair, in order of appearance.

        returns a (possibly empty) list. a fault stops the scan: pairs converted
        before it stay consumed, the faulty pair and later ones are untouched.
        """
        keys = Keys(keys)
        result = []
        while (value := self._pick(keys, type, binary)) is not Unset:
            result.append(value)
        return result

    def subcommand(self):
        """
        Consume the leading subcommand name, if any.

        returns the first token when it does not start with '-', None otherwise
        (including on an empty store). call it before any other query since it
        only looks at the first position.

        faults
        - NonUtf8ArgumentError: the first token is not text (it is kept).
        """
        if not self._tokens or self._tokens[0].startswith("-"):
            return None

        token = self._tokens[0]
        if not istext(token):
            return self.trigger(NonUtf8ArgumentError(
                "argument %r is not a UTF-8 string" % asbytes(token),
                title="non-UTF8 argument",
                code=FaultCode.NON_UTF8_ARGUMENT,
                hint="subcommand names must be valid UTF-8 text",
                value=asbytes(token),
                index=self._positions[0],
                docs=getdoc(FaultCode.NON_UTF8_ARGUMENT)
            ))

        self._remove(0)
        return token

    def _free_value(self, type, binary):
        if not self._tokens:
            return Unset

        token = self._tokens[0]
        value = self._convert(
            token,
            type,
            binary,
            ArgumentParsingError,
            "failed to parse %r" % render(token),
            "for the argument at %s position" % self._where(0),
            title="argument parsing failed",
            code=FaultCode.ARGUMENT_PARSING,
            value=render(token),
            index=self._positions[0],
            docs=getdoc(FaultCode.ARGUMENT_PARSING)
        )
        self._remove(0)
        return value

    def free_value(self, type=Unset, *, binary=False):
        """
        Consume the first remaining token as a positional value.

        faults
        - MissingArgumentError: the store is empty.
        - ArgumentParsingError: the converter raised (the token is kept).
        - NonUtf8ArgumentError: the token is not text and binary is False.
        """
        if (value := self._free_value(type, binary)) is Unset:
            return self.trigger(MissingArgumentError(
                "free-standing argument is missing",
                title="missing argument",
                code=FaultCode.MISSING_ARGUMENT,
                hint="add the missing positional argument",
                docs=getdoc(FaultCode.MISSING_ARGUMENT)
            ))
        return value

    def opt_free_value(self, type=Unset, *, binary=False):
        """
        Like free_value(), but returns None on an empty store.
        """
        return coalesce(self._free_value(type, binary))

    def free(self, *, binary=False):
        """
        Collect the remaining tokens as positional arguments and empty the store.

        a remaining token that starts with '-' (other than the bare "-" stdin
        marker) is presumed to be a misspelled or unsupported flag.

        faults
        - UnusedArgumentsError: names exactly those dash-prefixed tokens.
        - NonUtf8ArgumentError: a token is not text and binary is False.
        on any fault the store is untouched.
        """
        if flags := [index for index, token in enumerate(self._tokens) if token != "-" and token.startswith("-")]:
            return self._unused(flags)

        if binary:
            result = list(map(asbytes, self._tokens))
        else:
            for index, token in enumerate(self._tokens):
                if not istext(token):
                    return self.trigger(NonUtf8ArgumentError(
                        "argument %r is not a UTF-8 string" % asbytes(token),
                        title="non-UTF8 argument",
                        code=FaultCode.NON_UTF8_ARGUMENT,
                        hint="pass valid UTF-8 text or collect the arguments as bytes",
                        value=asbytes(token),
                        index=self._positions[index],
                        docs=getdoc(FaultCode.NON_UTF8_ARGUMENT)
                    ))
            result = list(self._tokens)

        self._remove(0, len(self._tokens))
        return result

    def finish(self, *, strict=False):
        """
        Return every remaining token as stored and empty the store.

        unlike free(), dash-prefixed tokens are returned as well. with strict=True
        a non-empty store raises UnusedArgumentsError naming all of them instead.
        """
        if strict and self._tokens:
            return self._unused(range(len(self._tokens)))

        result = list(self._tokens)
        self._remove(0, len(self._tokens))
        return result

    def _unused(self, indexes):
        tokens = [render(self._tokens[index]) for index in indexes]
        return self.trigger(UnusedArgumentsError(
            "unused arguments left: %s" % ", ".join(map(str, tokens)),
            title="unused arguments",
            code=FaultCode.UNUSED_ARGUMENTS,
            hint="remove %s or check the spelling (first one at %s position)" % (
                "it" if len(tokens) == 1 else "them", ordinal(self._positions[indexes[0]])
            ),
            tokens=tokens,
            docs=getdoc(FaultCode.UNUSED_ARGUMENTS)
        ))

    def __len__(self):
        return len(self._tokens)

    def __iter__(self):
        # over a snapshot, so queries may run while iterating
        return iter(tuple(self._tokens))

    def __repr__(self):
        """
        Diagnostic summary of the remaining tokens.

        text tokens print as str, tokens that are not UTF-8 print as bytes so
        their raw content is shown escaped instead of being corrupted.
        """
        return "%s([%s])" % (type(self).__name__, ", ".join(repr(render(token)) for token in self._tokens))

    def __rich_repr__(self):
        yield [render(token) for token in self._tokens]


__all__ = (
    "Arguments",
    "Keys",
)
