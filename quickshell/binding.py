"""
Quickshell validator and binder.

bind(invocation) turns a classified Invocation into a BoundCall, or records
faults on the invocation and returns None. Rules are applied in a fixed order:

  1. mandatory arguments      count of supplied positionals vs mandatory specs
  2. mandatory options        every mandatory option name supplied
  3. unknown options          supplied names not declared on the command
  4. allowed values           supplied values within choices; omitted options
                              with choices default to their first choice
  5. unknown flags            supplied flag characters not declared
  6. extra arguments          more positionals than declared arguments
  7. assembly                 options, then positionals by index, then options
                              again over same-named positional slots, then flags
  8. coercion                 every parameter converted to its value type; all
                              failures are collected before giving up

Steps 1-6 stop at the first failure. Token faults recorded by the classifier
stop binding before step 1.
"""
import logging
from types import MappingProxyType

from .arguments import *
from .commands import Stage
from .faults import *

logger = logging.getLogger(__name__)


def _listing(items):
    return "[%s]" % ", ".join(map(str, items))


class BoundCall:
    """
    A fully validated call, ready for dispatch.

    Attributes
    - command: the Command to run.
    - values: read-only mapping ParamKey -> typed value for every parameter.
    - args: handler arguments in parameter order (a single raw mapping for raw commands).

    Values can be looked up by ParamKey, or by name when the name is unambiguous.
    """

    __slots__ = ("command", "values", "args")

    def __init__(self, command, values, args, /):
        self.command = command
        self.values = MappingProxyType(values)
        self.args = tuple(args)

    def __getitem__(self, key):
        if isinstance(key, ParamKey):
            return self.values[key]
        matches = [value for (kind, name), value in self.values.items() if name == key]
        if len(matches) != 1:
            raise KeyError(key)
        return matches[0]

    def __repr__(self):
        return "bound-call(command=%r, values=%r)" % (self.command.name, dict(self.values))


def _validate(invocation):
    """
    Apply rules 1 to 6; return the effective option map or record a fault and return None.
    """
    command = invocation.command
    options = dict(invocation.options)

    if len(command.mandatory_arguments) > len(invocation.arguments):
        invocation.faults.append(MissingArgumentsError(
            "All mandatory arguments must be provided : %s" % _listing(x.name for x in command.mandatory_arguments),
            hint=f"usage: {command.usage}",
        ))
        return None

    names = [x.name for x in command.mandatory_options]
    if not all(name in options for name in names):
        invocation.faults.append(MissingOptionsError(
            "All mandatory options must be provided : %s" % _listing(names),
            hint=f"usage: {command.usage}",
        ))
        return None

    if len(options) > len(names):
        declared = [x.name for x in command.options]
        if unknown := [name for name in options if name not in declared]:
            invocation.faults.append(UnknownOptionsError(
                "Options not recognized : %s" % _listing(unknown),
                hint="option names are case-sensitive, see 'help %s'" % command.name,
                names=tuple(unknown),
            ))
            return None

    for option in command.options:
        if not option.choices:
            continue
        if (value := options.get(option.name)) is None:
            options[option.name] = option.default
        elif value not in option.choices:
            invocation.faults.append(InvalidChoiceError(
                "Option value should be one of : %s. Found : %s" % (_listing(option.choices), value),
                hint=f"--{option.name} defaults to {option.default} when omitted",
                option=option.name,
            ))
            return None

    declared = [x.name for x in command.flags]
    if unknown := [flag for flag in invocation.flags if flag not in declared]:
        invocation.faults.append(UnknownFlagsError(
            "Option Flags not recognized: %s" % _listing(unknown),
            hint="valid flags: %s" % (_listing(declared) if declared else "none"),
            names=tuple(unknown),
        ))
        return None

    if len(invocation.arguments) > len(command.positionals):
        invocation.faults.append(ExtraArgumentsError(
            "Extra arguments entered. Found : %d, Expecting : %d" % (
                len(invocation.arguments), len(command.positionals)
            ),
            hint="quote values that contain spaces",
        ))
        return None

    return options


def _assemble(invocation, options):
    """
    Build the ParamKey -> raw string map (rule 7).
    """
    command = invocation.command
    positionals = {x.name for x in command.arguments}
    values = {ParamKey.option(name): value for name, value in options.items()}

    for argument, value in zip(command.positionals, invocation.arguments):
        values[argument.key] = value

    # an option also overrides the positional slot of the same name
    for name, value in options.items():
        if name in positionals:
            values[ParamKey.positional(name)] = value

    for flag in invocation.flags:
        values[ParamKey.flag(flag)] = "true"
    return values


def _coerce(invocation, raws):
    """
    Convert every parameter (rule 8); failures accumulate on the invocation.
    """
    values = {}
    for parameter in invocation.command.parameters:
        raw = raws.get(parameter.key)
        if raw is None:
            values[parameter.key] = False if isinstance(parameter, Flag) else None
            continue
        try:
            values[parameter.key] = parameter.type.convert(raw)
        except ValueError:
            invocation.faults.append(TypeCoercionError(
                "Not a valid value entered for %s : %s. The value should be compatible with %s" % (
                    parameter.name, raw, parameter.type.label
                ),
                hint=f"expected a {parameter.type.label} value",
                parameter=parameter.name,
                token=raw,
            ))
    return values


def bind(invocation, /):
    """
    Validate and bind a classified invocation.

    Returns
    - a BoundCall when every rule passed; None otherwise, with the faults recorded
      on invocation.faults.

    invocation.stage is advanced to VALIDATED once rules 1-6 pass and to BOUND
    once a call is built; it is left where the first failure stopped it.
    """
    if invocation.faults:
        return None

    if (options := _validate(invocation)) is None:
        logger.debug("validation of %r failed: %s", invocation.command.name, invocation.faults[-1])
        return None
    invocation.stage = Stage.VALIDATED

    raws = _assemble(invocation, options)
    command = invocation.command

    if command.raw:
        merged = {key.name: value for key, value in raws.items()}
        logger.debug("bound raw call %r: %r", command.name, merged)
        invocation.stage = Stage.BOUND
        return BoundCall(command, raws, [merged])

    values = _coerce(invocation, raws)
    if invocation.faults:
        logger.debug("coercion of %r failed with %d fault(s)", command.name, len(invocation.faults))
        return None

    call = BoundCall(command, values, (values[x.key] for x in command.parameters))
    logger.debug("bound %r", call)
    invocation.stage = Stage.BOUND
    return call


__all__ = (
    "BoundCall",
    "bind",
)
