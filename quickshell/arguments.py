r"""
Quickshell parameter specifications.

Overview
- Specs
  • Option: named, value-bearing parameter written as --name=value.
  • Flag: single-letter boolean switch written as -x, combinable as -xyz.
  • Argument: positional value bound by declaration order (mandatory first).

- Value types
  • ValueType enumerates the supported coercion targets: text, the fixed-width
    integers (byte/short/int/long), arbitrary-precision integers (bigint),
    single/double precision floats and arbitrary-precision decimals, boolean.
  • ValueType.of() also accepts a label ("int") or a Python type alias
    (str, int, float, decimal.Decimal, bool).

- Keys
  • ParamKey is a tagged (kind, name) pair, so a flag "t" never collides with an
    option or argument named "t" while values are being bound.

Metadata (sanitized on construction)
- name: Option → [A-Za-z]+; Argument → [A-Za-z][A-Za-z0-9]*; Flag → one letter.
- descr: Unset | str (trimmed, non-empty when given).
- type: ValueType (flags are always boolean).
- mandatory: bool (Option/Argument).
- choices: ordered sequence of strings, no duplicates, each valid for `type`
  (Option only). The first choice is the default of an omitted option.

Quick example:
    >>> from quickshell.arguments import Option, Flag, Argument, ValueType
    >>> Option("mode", "run mode", choices=("fast", "safe")).default
    'fast'
    >>> Argument("count", type=int, mandatory=True).type
    <ValueType.BIGINT: 'bigint'>
    >>> Flag("v").key
    ParamKey(kind=<ParamKind.FLAG: 'flag'>, name='v')
"""
import builtins
import decimal
import math
import re
import struct
from collections.abc import Iterable, Set
from enum import Enum
from typing import NamedTuple

from .utils import *


class ValueType(Enum):
    """
    supported coercion targets for option and argument values.

    convert() parses a raw string lexically (no Python-specific leniency such as
    underscores or surrounding blanks for integers) and raises ValueError when
    the string does not represent the type.
    """
    TEXT = "text"
    BYTE = "byte"
    SHORT = "short"
    INT = "int"
    LONG = "long"
    BIGINT = "bigint"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"

    @property
    def label(self):
        return self.value

    @classmethod
    def of(cls, object, /):
        """
        Resolve a ValueType from a member, a label, or a Python type alias.
        """
        if isinstance(object, cls):
            return object
        if isinstance(object, str):
            try:
                return cls(object.strip().lower())
            except ValueError:
                raise ValueError(f"unknown value type {object!r}") from None
        try:
            return _ALIASES[object]
        except (KeyError, TypeError):
            raise TypeError(f"unsupported value type {object!r}") from None

    def convert(self, value, /):
        """
        Coerce a raw string into this type.

        Raises
        - ValueError: when the string does not lexically represent the type.
        """
        if not isinstance(value, str):
            raise TypeError("convert() argument must be a string")

        match self:
            case ValueType.TEXT:
                return value
            case ValueType.BYTE | ValueType.SHORT | ValueType.INT | ValueType.LONG | ValueType.BIGINT:
                if not _INTEGER.fullmatch(value):
                    raise ValueError(f"invalid {self.label} literal {value!r}")
                number = int(value)
                if self in _BOUNDS and not _BOUNDS[self][0] <= number <= _BOUNDS[self][1]:
                    raise ValueError(f"{self.label} value out of range {value!r}")
                return number
            case ValueType.FLOAT | ValueType.DOUBLE:
                if not (match := _FLOATING.fullmatch(value.strip())):
                    raise ValueError(f"invalid {self.label} literal {value!r}")
                number = float(match["number"])
                if self is ValueType.FLOAT and math.isfinite(number):
                    try:
                        number, = struct.unpack("f", struct.pack("f", number))
                    except OverflowError:
                        number = math.copysign(math.inf, number)
                return number
            case ValueType.DECIMAL:
                if not _DECIMAL.fullmatch(value):
                    raise ValueError(f"invalid {self.label} literal {value!r}")
                return decimal.Decimal(value)
            case ValueType.BOOLEAN:
                if value.lower() not in ("true", "false"):
                    raise ValueError(f"invalid {self.label} literal {value!r}")
                return value.lower() == "true"


_ALIASES = {
    str: ValueType.TEXT,
    int: ValueType.BIGINT,
    float: ValueType.DOUBLE,
    decimal.Decimal: ValueType.DECIMAL,
    bool: ValueType.BOOLEAN,
}

_BOUNDS = {
    ValueType.BYTE: (-2 ** 7, 2 ** 7 - 1),
    ValueType.SHORT: (-2 ** 15, 2 ** 15 - 1),
    ValueType.INT: (-2 ** 31, 2 ** 31 - 1),
    ValueType.LONG: (-2 ** 63, 2 ** 63 - 1),
}

_INTEGER = re.compile(r"[+-]?[0-9]+")
_FLOATING = re.compile(r"(?P<number>[+-]?(?:NaN|Infinity|(?P<digits>(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)))(?(digits)[fFdD]?)")
_DECIMAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class ParamKind(Enum):
    POSITIONAL = "positional"
    OPTION = "option"
    FLAG = "flag"


class ParamKey(NamedTuple):
    """
    tagged parameter identity used as the key of bound values.
    """
    kind: ParamKind
    name: str

    @classmethod
    def positional(cls, name, /):
        return cls(ParamKind.POSITIONAL, name)

    @classmethod
    def option(cls, name, /):
        return cls(ParamKind.OPTION, name)

    @classmethod
    def flag(cls, name, /):
        return cls(ParamKind.FLAG, name)


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate the name and description shared by every spec.

    - name: required string, trimmed, matching the class-specific pattern.
    - descr: Unset or a non-empty string; Unset becomes None.

    Raises TypeError for wrong kinds of values and ValueError for bad content.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(cls.__pattern__, name):
        raise ValueError(f"{cls.__typename__} 'name' must match {cls.__pattern__}, found: {name!r}")
    metadata["name"] = name

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_valued_metadata(cls, metadata, /):
    """
    Internal: validate value-bearing metadata (Option and Argument).

    - type: resolved through ValueType.of().
    - mandatory: coerced to bool.
    - choices (Option only): iterable of distinct strings, each convertible by type.
      Unordered collections are rejected because the first choice is the default.
    """
    metadata["type"] = ValueType.of(metadata["type"])
    metadata["mandatory"] = bool(metadata["mandatory"])

    if "choices" not in metadata:
        return

    if isinstance(choices := metadata["choices"], str) or not isinstance(choices, Iterable):
        raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
    if isinstance(choices, Set):
        raise TypeError(f"{cls.__typename__} 'choices' must be ordered (the first choice is the default)")

    sanitized = []
    for choice in choices:
        if not isinstance(choice, str):
            raise TypeError(f"{cls.__typename__} 'choices' must contain strings only")
        if not choice:
            raise ValueError(f"{cls.__typename__} 'choices' cannot contain empty strings")
        if choice in sanitized:
            raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
        try:
            metadata["type"].convert(choice)
        except ValueError:
            raise ValueError(
                f"{cls.__typename__} choice {choice!r} is not a valid {metadata['type'].label}"
            ) from None
        sanitized.append(choice)
    metadata["choices"] = tuple(sanitized)


class Option(metaclass=Introspective):
    """
    Named, value-bearing parameter (--name=value).

    Highlights
    - The value is supplied inline after '='; quoting allows spaces and reserved
      characters inside it.
    - choices restricts the accepted raw values; when the option is omitted the
      first choice is injected as its value.
    - mandatory options must appear on every invocation.
    """

    __pattern__ = r"[A-Za-z]+"

    __introspectable__ = (
        "name",
        "descr",
        "type",
        "mandatory",
        "choices",
    )

    def __init__(self, name, descr=Unset, /, *, type=ValueType.TEXT, mandatory=False, choices=()):
        metadata = {
            "name": name,
            "descr": descr,
            "type": type,
            "mandatory": mandatory,
            "choices": choices,
        }
        _sanitize_metadata(builtins.type(self), metadata)
        _sanitize_valued_metadata(builtins.type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def key(self):
        return ParamKey.option(self._name)

    @property
    def default(self):
        """
        The value injected when the option is omitted: the first choice, if any.
        """
        return self._choices[0] if self._choices else None


class Flag(metaclass=Introspective):
    """
    Single-letter boolean switch (-x), combinable in groups (-xyz).

    A requested flag binds to True, an omitted one to False.
    """

    __pattern__ = r"[^\W\d_]"

    __introspectable__ = (
        "name",
        "descr",
    )

    def __init__(self, name, descr=Unset, /):
        metadata = {
            "name": name,
            "descr": descr,
        }
        _sanitize_metadata(builtins.type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def key(self):
        return ParamKey.flag(self._name)

    @property
    def type(self):
        return ValueType.BOOLEAN

    @property
    def mandatory(self):
        return False


class Argument(metaclass=Introspective):
    """
    Positional value bound by declaration order.

    Mandatory arguments take the first positions, optional arguments follow;
    within each group the declaration order is kept.
    """

    __pattern__ = r"[A-Za-z][A-Za-z0-9]*"

    __introspectable__ = (
        "name",
        "descr",
        "type",
        "mandatory",
    )

    def __init__(self, name, descr=Unset, /, *, type=ValueType.TEXT, mandatory=False):
        metadata = {
            "name": name,
            "descr": descr,
            "type": type,
            "mandatory": mandatory,
        }
        _sanitize_metadata(builtins.type(self), metadata)
        _sanitize_valued_metadata(builtins.type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def key(self):
        return ParamKey.positional(self._name)


__all__ = (
    # Value types and keys
    "ValueType",
    "ParamKind",
    "ParamKey",

    # Specifications
    "Option",
    "Flag",
    "Argument",
)
