"""
Quickshell tokenizer and token classifier.

Line syntax (everything after the command name)
    [--optName=value]... [-flagChars]... [positionalValue]...

Tokenizer
- tokenize(text) checks quote balance over the whole text first; a double quote
  preceded by a backslash does not count. Unbalanced text raises
  UnbalancedQuotingError carrying the position of the last counted quote.
- On balanced text the returned iterator yields tokens split on the space
  character. A double-quoted region is copied verbatim, quotes included, up to
  the matching unescaped quote, so spaces, '=' and leading dashes inside it
  never split or reclassify the token. Empty tokens are yielded as well; the
  classifier discards them.
- Outside quoted regions an escaped quote contributes its backslash only.

Classifier
- classify(command, tokens) partitions tokens into options, flag characters and
  positional values on an Invocation. Token faults are collected on the
  invocation and never stop the scan:
  • "--name=value"      → option (last value wins); missing '=' is malformed.
  • "-xyz"              → flags x, y, z (order and duplicates kept).
  • "-"                 → invalid token.
  • anything else       → positional value.
- Option and positional values are quote-stripped: a value opening with '"'
  must close with an unescaped '"'; the interior is kept as-is, including any
  \\" pairs.
"""
import logging
from enum import Enum
from typing import NamedTuple

from .commands import Stage
from .faults import *

logger = logging.getLogger(__name__)


class TokenKind(Enum):
    OPTION = "option"
    FLAG_GROUP = "flag-group"
    POSITIONAL = "positional"


class Token(NamedTuple):
    kind: TokenKind
    text: str

    @classmethod
    def of(cls, text, /):
        """
        Classify a raw, non-empty token by its prefix.
        """
        if text.startswith("--"):
            return cls(TokenKind.OPTION, text)
        if text.startswith("-"):
            return cls(TokenKind.FLAG_GROUP, text)
        return cls(TokenKind.POSITIONAL, text)


def _escaped(text, index):
    return index > 0 and text[index - 1] == "\\"


def _unbalanced(text):
    """
    Return the position of the last counted quote when quotes do not pair up, else -1.
    """
    opened = False
    position = 0
    for index, char in enumerate(text):
        if char == '"' and not _escaped(text, index):
            position = index
            opened = not opened
    return position if opened else -1


def _scan(text):
    token = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == '"' and not _escaped(text, index):
            # balance was checked upfront: the closing quote exists
            closing = index + 1
            while text[closing] != '"' or _escaped(text, closing):
                closing += 1
            token.append(text[index:closing + 1])
            index = closing + 1
            continue
        if char == " ":
            yield "".join(token)
            token = []
        elif char != '"':
            token.append(char)
        index += 1
    yield "".join(token)


def tokenize(text, /):
    """
    Split text into quote-respecting tokens.

    Returns
    - an iterator of str tokens (empty tokens included).

    Raises
    - UnbalancedQuotingError: when unescaped double quotes do not balance.
    """
    if not isinstance(text, str):
        raise TypeError("tokenize() argument must be a string")

    if (position := _unbalanced(text)) != -1:
        raise UnbalancedQuotingError(
            "Invalid command. Couldn't identify sequence at position %d" % position,
            hint="close every opening double quote, or escape it as \\\"",
            position=position,
        )
    return _scan(text)


def unquote(value, faults, /):
    """
    Strip the enclosing double quotes of an option or positional value.

    Values not opening with a quote are returned unchanged. A bad closing
    records a fault on `faults` and returns the value untouched.
    """
    if not value.startswith('"'):
        return value
    if value.endswith('\\"'):
        faults.append(EscapedQuoteAtEndError(
            "Argument values should not end with escaped quote: %s" % value,
            hint="close the value with an unescaped double quote",
            token=value,
        ))
    elif len(value) < 2 or not value.endswith('"'):
        faults.append(UnterminatedQuotedValueError(
            "Argument values should end with double quote: %s" % value,
            hint="a value opening with a double quote must close with one",
            token=value,
        ))
    else:
        return value[1:-1]
    return value


class Invocation:
    """
    One submitted line after classification (transient).

    Attributes
    - command: the resolved Command.
    - options: name -> raw value (insertion ordered, last value wins).
    - flags: requested flag characters in order of appearance.
    - arguments: positional raw values in order.
    - faults: CommandException instances recorded so far.
    - stage: the furthest Stage completed; classify() leaves it at TOKENIZED
      and bind() advances it.
    """

    __slots__ = ("command", "options", "flags", "arguments", "faults", "stage")

    def __init__(self, command, /):
        self.command = command
        self.options = {}
        self.flags = []
        self.arguments = []
        self.faults = []
        self.stage = Stage.COMMAND_RESOLVED

    def __repr__(self):
        return "invocation(command=%r, stage=%s, options=%r, flags=%r, arguments=%r, faults=%r)" % (
            getattr(self.command, "name", None),
            self.stage.name,
            self.options,
            self.flags,
            self.arguments,
            [str(x) for x in self.faults],
        )


def classify(command, tokens, /):
    """
    Partition tokens into an Invocation for the given command.

    Empty tokens are skipped. Token faults are collected on the invocation.
    """
    invocation = Invocation(command)

    for token in map(Token.of, filter(None, tokens)):
        match token.kind:
            case TokenKind.OPTION:
                name, separator, value = token.text[2:].partition("=")
                if not separator:
                    invocation.faults.append(MalformedOptionError(
                        "Option must contain a value followed by =, value entered: %s" % token.text,
                        hint="write options as --name=value",
                        token=token.text,
                    ))
                    continue
                invocation.options[name] = unquote(value, invocation.faults)
            case TokenKind.FLAG_GROUP:
                if len(token.text) == 1:
                    invocation.faults.append(InvalidFlagTokenError(
                        "Invalid token %s" % token.text,
                        hint="write flags as -x, or combined as -xyz",
                        token=token.text,
                    ))
                    continue
                invocation.flags.extend(token.text[1:])
            case TokenKind.POSITIONAL:
                invocation.arguments.append(unquote(token.text, invocation.faults))

    invocation.stage = Stage.TOKENIZED
    logger.debug("classified %r", invocation)
    return invocation


__all__ = (
    "TokenKind",
    "Token",
    "Invocation",
    "tokenize",
    "unquote",
    "classify",
)
