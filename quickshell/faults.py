"""
Quickshell faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue a
  submitted line can produce. Codes are grouped by pipeline stage so logs and
  searches stay predictable.
- CommandException / CommandWarning: base types that carry a message plus options
  (hint, offending token, position, ...) and know how to render themselves with rich.
- CommandExit: groups the faults of one failed line; the shell renders it, and
  Outcome.check() raises it for callers that prefer exceptions.

Fault families
- fatal line faults, raised before classification:
  • UnbalancedQuotingError (tokenizer), UnknownCommandError (resolution)
- token faults, collected while classifying and never aborting the scan:
  • MalformedOptionError, InvalidFlagTokenError,
    UnterminatedQuotedValueError, EscapedQuoteAtEndError
- validation faults, fail-fast in a fixed order:
  • MissingArgumentsError, MissingOptionsError, UnknownOptionsError,
    InvalidChoiceError, UnknownFlagsError, ExtraArgumentsError
- binding faults, accumulated across every parameter:
  • TypeCoercionError

Styling
- colorful/fancy are runtime options supplied by the shell.
- A __styles__ mapping in __main__ overrides any palette entry.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - tokenizing (21xxx): quoting and token shape problems
    - routing (22xxx): command resolution
    - validation (23xxx): schema rules, in evaluation order
    - binding (24xxx): type coercion
    - warnings (25xxx): soft conditions, never block a dispatch
    """
    # --- tokenizing (21xxx) ---
    UNBALANCED_QUOTING          = 21101
    MALFORMED_OPTION            = 21111
    INVALID_FLAG_TOKEN          = 21112
    UNTERMINATED_QUOTED_VALUE   = 21121
    ESCAPED_QUOTE_AT_END        = 21122

    # --- routing (22xxx) ---
    UNKNOWN_COMMAND             = 22101

    # --- validation (23xxx) ---
    MISSING_ARGUMENTS           = 23101
    MISSING_OPTIONS             = 23102
    UNKNOWN_OPTIONS             = 23103
    INVALID_CHOICE              = 23104
    UNKNOWN_FLAGS               = 23105
    EXTRA_ARGUMENTS             = 23106

    # --- binding (24xxx) ---
    TYPE_COERCION               = 24101

    # --- warnings (25xxx) ---
    DISCARDED_OUTPUT            = 25101


def _palette(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


class _Renderable:
    """
    shared rich rendering for faults.

    layout: "[ prog — code | title ]", the message, then "→ hint".
    """

    __styles__ = {}

    def _styler(self, styles):
        def styler(style):
            return styles[style] if self.options.get("colorful", True) else ""
        return styler

    def _text(self, fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment
        if not self.options.get("colorful", True):
            return Text(str(fragment))
        return Text(str(fragment), style)

    def __rich__(self):
        styler = self._styler(_palette(type(self).__styles__))

        header = Text.assemble(
            "[ ",
            self._text(self.options.get("prog", "quickshell"), styler("prog-name")),
            " — ",
            self._text(str(self.code.value), styler("code")),
            " | ",
            self._text(self.title, styler("title")),
            " ]",
        )
        message = self._text(self.message, styler("message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(self._text(" → ", styler("hint-arrow")), self._text(hint, styler("hint"))))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)


class CommandException(_Renderable, Exception):
    """
    base of every fault a submitted line can produce.

    - message: the exact, human-readable error string surfaced to callers.
    - options: read-only context (hint, token, position, names, ...).
    - code/title: class-level identity of the fault kind.
    """

    code = Unset
    title = "command error"

    __styles__ = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #00E5FF",
        "title": "bold #FF4DA6",
        "message": "#C8C8D0",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    }

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnbalancedQuotingError(CommandException):
    code = FaultCode.UNBALANCED_QUOTING
    title = "unbalanced quoting"


class UnknownCommandError(CommandException):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"


class MalformedOptionError(CommandException):
    code = FaultCode.MALFORMED_OPTION
    title = "malformed option"


class InvalidFlagTokenError(CommandException):
    code = FaultCode.INVALID_FLAG_TOKEN
    title = "invalid flag token"


class UnterminatedQuotedValueError(CommandException):
    code = FaultCode.UNTERMINATED_QUOTED_VALUE
    title = "unterminated quoted value"


class EscapedQuoteAtEndError(CommandException):
    code = FaultCode.ESCAPED_QUOTE_AT_END
    title = "escaped quote at end"


class MissingArgumentsError(CommandException):
    code = FaultCode.MISSING_ARGUMENTS
    title = "missing arguments"


class MissingOptionsError(CommandException):
    code = FaultCode.MISSING_OPTIONS
    title = "missing options"


class UnknownOptionsError(CommandException):
    code = FaultCode.UNKNOWN_OPTIONS
    title = "unknown options"


class InvalidChoiceError(CommandException):
    code = FaultCode.INVALID_CHOICE
    title = "invalid choice"


class UnknownFlagsError(CommandException):
    code = FaultCode.UNKNOWN_FLAGS
    title = "unknown flags"


class ExtraArgumentsError(CommandException):
    code = FaultCode.EXTRA_ARGUMENTS
    title = "extra arguments"


class TypeCoercionError(CommandException):
    code = FaultCode.TYPE_COERCION
    title = "invalid value"


class CommandWarning(_Renderable, Warning):
    """
    base of soft conditions; emitted through warnings.warn, never collected as faults.
    """

    code = Unset
    title = "command warning"

    __styles__ = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #FFB400",
        "title": "bold #FFC2E0",
        "message": "#D6D6DE",
        "hint-arrow": "#B8EFAF dim",
        "hint": "italic #B8EFAF",
    }

    def __init__(self, message, /, **options):
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DiscardedOutputWarning(CommandWarning):
    code = FaultCode.DISCARDED_OUTPUT
    title = "discarded output"


class CommandExit(ExceptionGroup):
    """
    the faults of one failed line, in the order they were recorded.

    options
    - command: the matched Command (or None) for contextual help.
    - prog/colorful/fancy: rendering context forwarded to every grouped fault.
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad command", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad command", tuple(exceptions))
        self.options = MappingProxyType(options)

    @property
    def errors(self):
        return tuple(map(str, self.exceptions))

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        styles = _palette({
            "prog-name": "bold #E6E6F0",
            "title": "bold #FF4DA6",
        })

        def styler(style):
            return styles[style] if self.options.get("colorful", True) else ""

        header = Text.assemble(
            "[ ",
            Text(self.options.get("prog", "quickshell"), styler("prog-name")),
            " — ",
            Text(self.message.title(), styler("title")),
            " ]",
        )
        context = {name: self.options[name] for name in ("prog", "colorful", "fancy") if name in self.options}
        renders = [exception.__replace__(**context) for exception in self.exceptions]

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)


__all__ = (
    "FaultCode",
    "CommandException",
    "UnbalancedQuotingError",
    "UnknownCommandError",
    "MalformedOptionError",
    "InvalidFlagTokenError",
    "UnterminatedQuotedValueError",
    "EscapedQuoteAtEndError",
    "MissingArgumentsError",
    "MissingOptionsError",
    "UnknownOptionsError",
    "InvalidChoiceError",
    "UnknownFlagsError",
    "ExtraArgumentsError",
    "TypeCoercionError",
    "CommandWarning",
    "DiscardedOutputWarning",
    "CommandExit",
)
