"""
Quickshell command layer: schemas, handlers and dispatch.

What this module provides
- Command: immutable schema of one shell command (name, description, ordered
  parameters) bound to the handler that runs it.
  • parameters are Option/Flag/Argument specs; their order is the handler's
    positional parameter order.
  • raw commands receive the merged name -> raw string map instead of typed values.
- command(...): decorator factory building a Command from a handler.
- Stage: the per-line state machine of the engine.
- dispatch(call): invoke the handler of a bound call and capture its text result.

Registration rules
- name: [A-Za-z][A-Za-z0-9]*, at most 10 characters (matched case-insensitively by the shell).
- option names, flag characters and argument names are each unique within a command;
  an option may share its name with an argument (the option value then overrides the
  positional slot while binding).
- handler: callable accepting one positional value per parameter (one mapping when raw);
  a return annotation, when present, must be str or None.

Quick example
    >>> from quickshell import command, Option, Flag, Argument
    >>> @command("greet", Argument("who", mandatory=True), Flag("l", "loud"))
    ... def greet(who, loud) -> str:
    ...     "say hello"
    ...     return f"hello {who}{'!' if loud else ''}"
    >>> greet.usage
    'greet [-l] <who>'
"""
import inspect
import logging
import re
import typing
import warnings
from enum import IntEnum

from .arguments import *
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 10

_TEXT_ANNOTATIONS = (
    "str",
    "None",
    "str | None",
    "None | str",
    "Optional[str]",
    "typing.Optional[str]",
)


class Stage(IntEnum):
    """
    states of one submitted line.

    UNPARSED → COMMAND_RESOLVED → TOKENIZED → VALIDATED → BOUND → DISPATCHED,
    or FAILED from any stage before DISPATCHED. FAILED and DISPATCHED are terminal.
    Invocation.stage and Outcome.reached hold the furthest stage a line completed.
    """
    UNPARSED = 0
    COMMAND_RESOLVED = 1
    TOKENIZED = 2
    VALIDATED = 3
    BOUND = 4
    DISPATCHED = 5
    FAILED = -1


def _returns_text(annotation):
    if annotation is inspect.Signature.empty:
        return True
    if isinstance(annotation, str):
        return annotation.strip() in _TEXT_ANNOTATIONS
    try:
        return annotation in (str, None, type(None), typing.Optional[str])
    except TypeError:
        return False


def _sanitize_name(cls, metadata):
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[A-Za-z][A-Za-z0-9]*", name):
        raise ValueError(f"{cls.__typename__} 'name' must start with a letter and contain only letters and digits")
    elif len(name) > MAX_NAME_LENGTH:
        raise ValueError(f"{cls.__typename__} 'name' cannot be longer than {MAX_NAME_LENGTH} characters")
    metadata["name"] = name

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_parameters(cls, metadata):
    """
    Validate the parameter list: spec kinds and per-kind unique names.
    """
    seen = set()
    for parameter in metadata["parameters"]:
        if not isinstance(parameter, Option | Flag | Argument):
            raise TypeError(f"{cls.__typename__} parameters must be options, flags or arguments")
        if parameter.key in seen:
            raise ValueError(
                f"{cls.__typename__} {parameter.key.kind.value} {parameter.name!r} is declared more than once"
            )
        seen.add(parameter.key)
    metadata["parameters"] = tuple(metadata["parameters"])


def _sanitize_handler(cls, metadata):
    """
    Validate the handler arity and return annotation.

    Handlers whose signature cannot be inspected (some builtins) are accepted as-is.
    """
    metadata["raw"] = bool(metadata["raw"])
    if (handler := metadata["handler"]) is Unset:
        return
    if not callable(handler):
        raise TypeError(f"{cls.__typename__} 'handler' must be callable")

    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError):
        return

    arity = 1 if metadata["raw"] else len(metadata["parameters"])
    try:
        signature.bind(*range(arity))
    except TypeError:
        raise TypeError(
            f"{cls.__typename__} 'handler' must accept {arity} positional {pluralize('argument') if arity != 1 else 'argument'}"
        ) from None

    if not _returns_text(signature.return_annotation):
        raise TypeError(f"{cls.__typename__} 'handler' must return a string or None")


class Command(metaclass=Introspective):
    """
    Registered description of one shell command and its handler.

    Highlights
    - Read-only after construction; containers are exposed as tuples.
    - Calling a command forwards to its handler unchanged.
    - usage renders the canonical one-line syntax, e.g.
      'copy [-f] --mode=<mode_value> <src> [<dst>]'.
    """

    __introspectable__ = (
        "name",
        "descr",
        "parameters",
        "handler",
        "raw",
    )

    __displayable__ = (
        "name",
        "descr",
        "parameters",
        "raw",
    )

    def __init__(self, name, /, *parameters, descr=Unset, handler=Unset, raw=False):
        metadata = {
            "name": name,
            "descr": descr,
            "parameters": parameters,
            "handler": handler,
            "raw": raw,
        }
        _sanitize_name(type(self), metadata)
        _sanitize_parameters(type(self), metadata)
        _sanitize_handler(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def options(self):
        return tuple(x for x in self._parameters if isinstance(x, Option))

    @property
    def flags(self):
        return tuple(x for x in self._parameters if isinstance(x, Flag))

    @property
    def arguments(self):
        return tuple(x for x in self._parameters if isinstance(x, Argument))

    @property
    def mandatory_options(self):
        return tuple(x for x in self.options if x.mandatory)

    @property
    def mandatory_arguments(self):
        return tuple(x for x in self.arguments if x.mandatory)

    @property
    def positionals(self):
        """
        Arguments in binding order: mandatory ones first, then optional ones,
        each group in declaration order.
        """
        return self.mandatory_arguments + tuple(x for x in self.arguments if not x.mandatory)

    @property
    def usage(self):
        segments = [self._name]
        segments.extend(f"[-{x.name}]" for x in self.flags)
        for option in self.options:
            segment = f"--{option.name}=<{option.name.lower()}_value>"
            segments.append(segment if option.mandatory else f"[{segment}]")
        segments.extend(f"<{x.name}>" for x in self.mandatory_arguments)
        segments.extend(f"[<{x.name}>]" for x in self.arguments if not x.mandatory)
        return " ".join(segments)

    def __call__(self, *args):
        if self._handler is Unset:
            raise TypeError(f"{type(self).__typename__} {self._name!r} has no handler")
        return self._handler(*args)


def command(name, /, *parameters, descr=Unset, raw=False):
    """
    Return a decorator that builds a Command around the decorated handler.

    The handler docstring is used as description when descr is not given.
    """
    @rename("command")
    def wrapper(handler, /):
        if not callable(handler):
            raise TypeError("@command() must be applied to a callable")
        return Command(
            name,
            *parameters,
            descr=coalesce(descr, inspect.getdoc(handler) or Unset),
            handler=handler,
            raw=raw,
        )

    return wrapper


def dispatch(call, /):
    """
    Invoke the handler of a bound call.

    Returns
    - the handler's text result, or None when it returned nothing.

    Notes
    - exceptions raised by the handler propagate unchanged.
    - a non-text result is discarded with a DiscardedOutputWarning.
    """
    command = call.command
    logger.debug("dispatching %r with %r", command.name, call.args)
    output = command(*call.args)

    if output is not None and not isinstance(output, str):
        warnings.warn(DiscardedOutputWarning(
            f"Output of command {command.name} was discarded: expected text, got {type(output).__name__}",
            hint="return a string (or nothing) from command handlers",
            command=command.name,
        ), stacklevel=2)
        return None
    return output


__all__ = (
    "MAX_NAME_LENGTH",
    "Stage",
    "Command",
    "command",
    "dispatch",
)
