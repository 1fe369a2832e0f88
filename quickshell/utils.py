"""
Quickshell utilities (internal helpers shared by specs, commands and the shell).

Scope
- Unset: "not provided" sentinel, distinct from None, plus coalesce() to resolve it.
- rename: give generated helpers a stable __name__/__qualname__.
- mirror: read-only property over a private "_name" field; containers come out frozen.
- pluralize: English plural of the last word, for help headings.
- Introspective: metaclass publishing __introspectable__ fields and a stable repr.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> pluralize("option flag")
    'option flags'
"""
import builtins
import functools
import operator
import re
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    type of the Unset sentinel.

    Unset is falsy, prints as "Unset", exists once per process, cannot be
    subclassed and can appear in PEP 604 unions (isinstance(x, str | Unset)).
    """

    def __or__(self, other, /):
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
        raise TypeError(f"cannot subclass {UnsetType.__name__!r}")


Unset = UnsetType()
"""
Internal sentinel for "not provided".

Use Unset as a parameter default when None is a meaningful user value, and
materialize it with coalesce(value, default).
"""


def coalesce(object, default=None, /):
    """
    Return default when object is Unset, object otherwise (None included).
    """
    return default if object is Unset else object


def rename(*parameters):
    """
    rename(callable, name) renames in place; rename(name) returns a decorator.
    """
    match parameters:
        case (target, str(name)):
            if not builtins.callable(target):
                raise TypeError("rename() expects a callable and a name")
            try:
                target.__name__ = target.__qualname__ = name
            except (AttributeError, TypeError):
                raise TypeError(f"cannot rename {target!r}") from None
            return target
        case (str(name),):
            def decorator(target):
                return rename(target, name)
            return rename(decorator, "rename")
        case _:
            raise TypeError("rename() expects a callable and a name, or a name")


def _freeze(object):
    """
    Return an immutable view of a container (shallow); other objects pass through.

    - Sequence (non-string) -> tuple
    - Mapping -> MappingProxyType over a copy
    - Set -> frozenset
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private attribute "_{name}".

    Container values are frozen on every access, so callers can iterate and index
    them but never mutate a registered schema through its public surface.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


_SIBILANT = re.compile(r"(?:s|sh|ch|x|z)$")
_CONSONANT_Y = re.compile(r"[^aeiou]y$")


@functools.cache
def pluralize(text, /):
    """
    Pluralize the last word of text, keeping its casing ("flag" -> "flags",
    "entry" -> "entries", "Argument" -> "Arguments").
    """
    if not isinstance(text, str):
        raise TypeError("pluralize() argument must be a string")
    if not (found := re.search(r"(\S+)(\s*)$", text)):
        return text

    word = found[1]
    if _SIBILANT.search(word.lower()):
        plural = word.lower() + "es"
    elif _CONSONANT_Y.search(word.lower()):
        plural = word.lower()[:-1] + "ies"
    else:
        plural = word.lower() + "s"

    if word.isupper():
        plural = plural.upper()
    elif word[0].isupper():
        plural = plural.capitalize()
    return text[:found.start(1)] + plural + found[2]


class Introspective(type):
    """
    Metaclass for introspectable, read-only value objects (specs and commands).

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used as the subject of registration error messages.
    - Publish every name listed in __introspectable__ as a read-only property
      backed by "_{name}" (see mirror()).
    - Provide a compact __repr__ and a __rich_repr__ for pretty printers, both
      listing __displayable__ (or __introspectable__ when unset).
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
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pluralize",

    # Types
    "UnsetType",
    "Introspective",

    # Constants
    "Unset",
)
